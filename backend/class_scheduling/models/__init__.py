from class_scheduling.models.class_model import Class, ClassStudent  # noqa: F401
from class_scheduling.models.class_schedule import ClassSchedule  # noqa: F401
from class_scheduling.models.class_session import ClassSession, SessionStatus  # noqa: F401
from class_scheduling.models.course import Course  # noqa: F401
from class_scheduling.models.user import User, UserRole  # noqa: F401

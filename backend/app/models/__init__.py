from app.models.academic_year import AcademicYear  # noqa: F401
from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.program import Program  # noqa: F401
from app.models.room import Room, RoomType  # noqa: F401
from app.models.routine_slot import ClassCategory, ClassType, LabGroup, RoutineSlot  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.time_slot import SlotCategory, TimeSlotDefinition  # noqa: F401

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.models.routine_slot import ClassType
from app.schemas.recurrence import RecurrenceIn
from app.services.semester_groups import SemesterGroup


class ConflictCheckRequest(BaseModel):
    day_index: int = Field(ge=0, le=6)
    slot_index: int = Field(ge=0, le=100)
    semester: int = Field(ge=1, le=20)
    teacher_ids: list[str] = Field(default_factory=list, max_length=20)
    room_id: str | None = Field(default=None, max_length=36)
    academic_year_id: str | None = Field(default=None, max_length=36)
    lab_group_id: str | None = Field(default=None, max_length=36)
    exclude_slot_id: str | None = Field(default=None, max_length=36)
    week_number: int | None = Field(default=None, ge=1, le=52)
    recurrence: RecurrenceIn | None = None
    recurrence_aware: bool = False


class ConflictingSlot(BaseModel):
    slot_id: str
    program_id: str
    program_code: str | None = None
    semester: int
    semester_group: SemesterGroup | None = None
    section: str
    subject_id: str | None = None
    subject_name: str | None = None
    room_id: str | None = None
    room_name: str | None = None
    class_type: ClassType
    lab_group: str | None = None


class TeacherConflict(BaseModel):
    slot: ConflictingSlot
    teacher_ids: list[str]
    teacher_names: list[str] = Field(default_factory=list)


class RoomConflict(BaseModel):
    slot: ConflictingSlot
    room_id: str


class ScheduleConflictReport(BaseModel):
    has_conflicts: bool
    teacher_conflicts: list[TeacherConflict] = Field(default_factory=list)
    room_conflict: RoomConflict | None = None


class TeacherAvailability(BaseModel):
    is_available: bool
    conflicts: list[TeacherConflict] = Field(default_factory=list)


class RoomAvailability(BaseModel):
    is_available: bool
    conflict: RoomConflict | None = None


class ScanRequest(BaseModel):
    academic_year_id: str | None = Field(default=None, max_length=36)
    program_id: str | None = Field(default=None, max_length=36)
    semester: int | None = Field(default=None, ge=1, le=20)
    section: str | None = Field(default=None, max_length=10)

    @field_validator("section")
    @classmethod
    def normalize_section(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class SweepConflict(BaseModel):
    conflict_type: Literal["teacher_double_booked", "room_double_booked", "section_double_booked"]
    resource_id: str
    day_index: int
    slot_index: int
    slot_ids: list[str]
    description: str


class SweepReport(BaseModel):
    total_slots: int
    has_conflicts: bool
    conflicts: list[SweepConflict] = Field(default_factory=list)


class TeacherScheduleConflictGroup(BaseModel):
    day_index: int
    slot_index: int
    semester_group: SemesterGroup | Literal["all"]
    slots: list[ConflictingSlot]


class AvailableTeacherOut(BaseModel):
    id: str
    full_name: str
    short_name: str
    department: str

    model_config = {"from_attributes": True}


class AvailableRoomOut(BaseModel):
    id: str
    name: str
    building: str
    capacity: int

    model_config = {"from_attributes": True}

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.config import get_settings
from app.models.routine_slot import ClassCategory, ClassType, LabGroup
from app.schemas.conflict import SweepReport
from app.schemas.recurrence import RecurrenceIn, RecurrenceOut
from app.services.semester_groups import SemesterGroup
from app.services.slot_rules import slot_field_errors


class SlotContentBase(BaseModel):
    program_id: str = Field(min_length=1, max_length=36)
    academic_year_id: str | None = Field(default=None, max_length=36)
    semester: int = Field(ge=1, le=20)
    section: str = Field(min_length=1, max_length=10)
    day_index: int = Field(ge=0, le=6)
    subject_id: str | None = Field(default=None, max_length=36)
    subject_ids: list[str] = Field(default_factory=list, max_length=20)
    teacher_ids: list[str] = Field(default_factory=list, max_length=20)
    room_id: str | None = Field(default=None, max_length=36)
    class_type: ClassType = ClassType.lecture
    class_category: ClassCategory = ClassCategory.core
    is_elective_class: bool | None = None
    lab_group_id: str | None = Field(default=None, max_length=36)
    lab_group: LabGroup | None = None
    recurrence: RecurrenceIn = Field(default_factory=RecurrenceIn)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("section")
    @classmethod
    def normalize_section(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def derive_elective_flag(self) -> "SlotContentBase":
        if self.is_elective_class is None:
            self.is_elective_class = self.class_category == ClassCategory.elective
        return self

    def _field_errors(self, slot_indexes: list[int]) -> list[str]:
        return slot_field_errors(
            settings=get_settings(),
            semester=self.semester,
            section=self.section,
            day_index=self.day_index,
            slot_indexes=slot_indexes,
            class_type=self.class_type,
            class_category=self.class_category,
            is_elective_class=bool(self.is_elective_class),
            subject_id=self.subject_id,
            subject_ids=self.subject_ids,
            teacher_ids=self.teacher_ids,
            room_id=self.room_id,
            lab_group=self.lab_group.value if self.lab_group else None,
            lab_group_id=self.lab_group_id,
            recurrence_type=self.recurrence.type,
            recurrence_pattern=self.recurrence.pattern,
            recurrence_custom_weeks=self.recurrence.custom_weeks,
        )


class RoutineSlotCreate(SlotContentBase):
    slot_index: int = Field(ge=0, le=100)

    @model_validator(mode="after")
    def validate_slot(self) -> "RoutineSlotCreate":
        errors = self._field_errors([self.slot_index])
        if errors:
            raise ValueError("; ".join(errors))
        return self


class SpannedSlotCreate(SlotContentBase):
    slot_indexes: list[int] = Field(min_length=1, max_length=12)

    @model_validator(mode="after")
    def validate_span(self) -> "SpannedSlotCreate":
        errors = self._field_errors(self.slot_indexes)
        if errors:
            raise ValueError("; ".join(errors))
        return self


class LabGroupAssignment(BaseModel):
    lab_group: LabGroup
    subject_id: str = Field(min_length=1, max_length=36)
    teacher_ids: list[str] = Field(min_length=1, max_length=10)
    room_id: str = Field(min_length=1, max_length=36)


class LabGroupSlotsCreate(BaseModel):
    """Parallel practical sessions for the sub-cohorts of one section."""

    program_id: str = Field(min_length=1, max_length=36)
    academic_year_id: str | None = Field(default=None, max_length=36)
    semester: int = Field(ge=1, le=20)
    section: str = Field(min_length=1, max_length=10)
    day_index: int = Field(ge=0, le=6)
    slot_indexes: list[int] = Field(min_length=1, max_length=12)
    lab_group_id: str | None = Field(default=None, max_length=36)
    groups: list[LabGroupAssignment] = Field(min_length=2, max_length=5)
    recurrence: RecurrenceIn = Field(default_factory=RecurrenceIn)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("section")
    @classmethod
    def normalize_section(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def validate_groups(self) -> "LabGroupSlotsCreate":
        labels = [group.lab_group for group in self.groups]
        if len(set(labels)) != len(labels):
            raise ValueError("Each lab group may only appear once")
        if LabGroup.ALL in labels:
            raise ValueError("Lab group ALL cannot be split into parallel sessions")
        settings = get_settings()
        for group in self.groups:
            errors = slot_field_errors(
                settings=settings,
                semester=self.semester,
                section=self.section,
                day_index=self.day_index,
                slot_indexes=self.slot_indexes,
                class_type=ClassType.practical,
                class_category=ClassCategory.core,
                is_elective_class=False,
                subject_id=group.subject_id,
                subject_ids=[],
                teacher_ids=group.teacher_ids,
                room_id=group.room_id,
                lab_group=group.lab_group.value,
                lab_group_id=self.lab_group_id,
                recurrence_type=self.recurrence.type,
                recurrence_pattern=self.recurrence.pattern,
                recurrence_custom_weeks=self.recurrence.custom_weeks,
            )
            if errors:
                raise ValueError(f"Group {group.lab_group.value}: " + "; ".join(errors))
        return self

    def as_spans(self, lab_group_id: str) -> list[SpannedSlotCreate]:
        return [
            SpannedSlotCreate(
                program_id=self.program_id,
                academic_year_id=self.academic_year_id,
                semester=self.semester,
                section=self.section,
                day_index=self.day_index,
                slot_indexes=self.slot_indexes,
                subject_id=group.subject_id,
                teacher_ids=group.teacher_ids,
                room_id=group.room_id,
                class_type=ClassType.practical,
                lab_group_id=lab_group_id,
                lab_group=group.lab_group,
                recurrence=self.recurrence,
                notes=self.notes,
            )
            for group in self.groups
        ]


NON_NULLABLE_UPDATE_FIELDS = (
    "semester",
    "section",
    "day_index",
    "slot_index",
    "subject_ids",
    "teacher_ids",
    "class_type",
    "class_category",
    "is_elective_class",
    "recurrence",
)


class RoutineSlotUpdate(BaseModel):
    semester: int | None = Field(default=None, ge=1, le=20)
    section: str | None = Field(default=None, min_length=1, max_length=10)
    day_index: int | None = Field(default=None, ge=0, le=6)
    slot_index: int | None = Field(default=None, ge=0, le=100)
    subject_id: str | None = Field(default=None, max_length=36)
    subject_ids: list[str] | None = Field(default=None, max_length=20)
    teacher_ids: list[str] | None = Field(default=None, max_length=20)
    room_id: str | None = Field(default=None, max_length=36)
    class_type: ClassType | None = None
    class_category: ClassCategory | None = None
    is_elective_class: bool | None = None
    lab_group_id: str | None = Field(default=None, max_length=36)
    lab_group: LabGroup | None = None
    recurrence: RecurrenceIn | None = None
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("section")
    @classmethod
    def normalize_section(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None

    @model_validator(mode="after")
    def reject_cleared_required_fields(self) -> "RoutineSlotUpdate":
        cleared = sorted(
            name for name in NON_NULLABLE_UPDATE_FIELDS if name in self.model_fields_set and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class RoutineSlotOut(BaseModel):
    id: str
    program_id: str
    academic_year_id: str
    semester: int
    semester_group: SemesterGroup
    section: str
    day_index: int
    slot_index: int
    subject_id: str | None
    subject_ids: list[str]
    teacher_ids: list[str]
    room_id: str | None
    class_type: ClassType
    class_category: ClassCategory
    is_elective_class: bool
    lab_group_id: str | None
    lab_group: str | None
    recurrence: RecurrenceOut
    span_id: str | None
    span_master: bool
    display: dict
    notes: str | None
    is_active: bool
    is_archived: bool
    version: int
    created_by: str | None
    last_modified_by: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @model_validator(mode="before")
    @classmethod
    def expand_recurrence(cls, data):
        if hasattr(data, "recurrence_type"):
            recurrence = data.recurrence
            return {
                **{name: getattr(data, name, None) for name in cls.model_fields if name != "recurrence"},
                "recurrence": RecurrenceOut(
                    type=recurrence.type,
                    pattern=recurrence.pattern,
                    custom_weeks=list(recurrence.custom_weeks),
                    description=data.recurrence_description,
                ),
            }
        return data


class SpanOut(BaseModel):
    span_id: str
    slots: list[RoutineSlotOut]


class LabGroupSlotsOut(BaseModel):
    lab_group_id: str
    spans: list[SpanOut]


class BulkSlotsRequest(BaseModel):
    slots: list[RoutineSlotCreate] = Field(min_length=1, max_length=500)


class BulkInsertResult(BaseModel):
    inserted: int
    slots: list[RoutineSlotOut]
    sweep: SweepReport


class CopyRoutineRequest(BaseModel):
    program_id: str = Field(min_length=1, max_length=36)
    semester: int = Field(ge=1, le=20)
    section: str = Field(min_length=1, max_length=10)
    source_academic_year_id: str = Field(min_length=1, max_length=36)
    target_academic_year_id: str = Field(min_length=1, max_length=36)

    @field_validator("section")
    @classmethod
    def normalize_section(cls, value: str) -> str:
        return value.strip().upper()


class CopyRoutineResult(BaseModel):
    copied: int
    archived: int
    version: int
    slots: list[RoutineSlotOut]
    sweep: SweepReport


class GridCell(BaseModel):
    slot_index: int
    is_break_period: bool = False
    time_label: str | None = None
    slots: list[RoutineSlotOut] = Field(default_factory=list)
    span_length: dict[str, int] = Field(default_factory=dict)


class GridDay(BaseModel):
    day_index: int
    cells: list[GridCell]


class RoutineGridOut(BaseModel):
    program_id: str
    semester: int
    section: str
    academic_year_id: str
    week_number: int | None = None
    total_slots: int
    days: list[GridDay]

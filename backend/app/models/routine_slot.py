import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Boolean, DateTime, Enum as SAEnum, Index, Integer, String, Text, text
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.sql import func

from app.db.base import Base
from app.services.recurrence import Recurrence, RecurrenceType, WeekPattern, applies_to_week, describe_recurrence
from app.services.semester_groups import SemesterGroup, semester_group_for


class ClassType(str, Enum):
    lecture = "L"
    practical = "P"
    tutorial = "T"
    break_ = "BREAK"


class ClassCategory(str, Enum):
    core = "CORE"
    elective = "ELECTIVE"
    common = "COMMON"


class LabGroup(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    ALL = "ALL"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [item.value for item in enum_cls]


class RoutineSlot(Base):
    __tablename__ = "routine_slots"
    __table_args__ = (
        Index("ix_routine_slots_coordinate", "day_index", "slot_index"),
        Index("ix_routine_slots_section", "program_id", "semester", "section", "academic_year_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    program_id: Mapped[str] = mapped_column(String(36), nullable=False)
    academic_year_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    _semester_group: Mapped[SemesterGroup] = mapped_column(
        "semester_group",
        SAEnum(SemesterGroup, name="semester_group"),
        nullable=False,
    )
    section: Mapped[str] = mapped_column(String(10), nullable=False)

    day_index: Mapped[int] = mapped_column(Integer, nullable=False)
    slot_index: Mapped[int] = mapped_column(Integer, nullable=False)

    subject_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    subject_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    teacher_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    room_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    class_type: Mapped[ClassType] = mapped_column(
        SAEnum(ClassType, name="class_type", values_callable=_enum_values),
        nullable=False,
        default=ClassType.lecture,
    )
    class_category: Mapped[ClassCategory] = mapped_column(
        SAEnum(ClassCategory, name="class_category", values_callable=_enum_values),
        nullable=False,
        default=ClassCategory.core,
    )
    is_elective_class: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    lab_group_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    lab_group: Mapped[str | None] = mapped_column(String(8), nullable=True)

    recurrence_type: Mapped[RecurrenceType] = mapped_column(
        SAEnum(RecurrenceType, name="recurrence_type"),
        nullable=False,
        default=RecurrenceType.weekly,
    )
    recurrence_pattern: Mapped[WeekPattern | None] = mapped_column(
        SAEnum(WeekPattern, name="week_pattern"),
        nullable=True,
    )
    recurrence_custom_weeks: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    span_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    span_master: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Snapshot of reference names; rewritten by app.services.display only.
    display: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    last_modified_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @validates("semester")
    def _sync_semester_group(self, _key: str, value: int) -> int:
        self._semester_group = semester_group_for(value)
        return value

    @hybrid_property
    def semester_group(self) -> SemesterGroup:
        return self._semester_group

    @property
    def recurrence(self) -> Recurrence:
        return Recurrence(
            type=self.recurrence_type or RecurrenceType.weekly,
            pattern=self.recurrence_pattern,
            custom_weeks=tuple(self.recurrence_custom_weeks or ()),
        )

    @property
    def recurrence_description(self) -> str:
        return describe_recurrence(self.recurrence)

    @property
    def structural_key(self) -> tuple:
        return (
            self.program_id,
            self.semester,
            self.section,
            self.day_index,
            self.slot_index,
            self.lab_group,
            self.semester_group,
        )

    def applies_to_week(self, week_number: int) -> bool:
        return applies_to_week(self.recurrence, week_number)


# Structural key over current records of one academic year. coalesce() keeps NULL lab groups comparable.
Index(
    "uq_routine_slots_structural_key",
    RoutineSlot.__table__.c.academic_year_id,
    RoutineSlot.__table__.c.program_id,
    RoutineSlot.__table__.c.semester,
    RoutineSlot.__table__.c.section,
    RoutineSlot.__table__.c.day_index,
    RoutineSlot.__table__.c.slot_index,
    func.coalesce(RoutineSlot.__table__.c.lab_group, ""),
    RoutineSlot.__table__.c.semester_group,
    unique=True,
    sqlite_where=text("is_active AND NOT is_archived"),
    postgresql_where=text("is_active AND NOT is_archived"),
)

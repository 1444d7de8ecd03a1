from enum import Enum

from sqlalchemy import Boolean, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class SlotCategory(str, Enum):
    morning = "Morning"
    afternoon = "Afternoon"
    evening = "Evening"


class TimeSlotDefinition(Base):
    """One column of the weekly grid; the primary key is the slot index ordinal."""

    __tablename__ = "time_slot_definitions"

    slot_index: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    label: Mapped[str] = mapped_column(String(50), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_break: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category: Mapped[SlotCategory] = mapped_column(
        SAEnum(SlotCategory, name="slot_category"),
        nullable=False,
        default=SlotCategory.morning,
    )

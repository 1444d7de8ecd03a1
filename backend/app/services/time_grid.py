from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import SlotValidationError
from app.models.time_slot import TimeSlotDefinition


def list_definitions(db: Session) -> list[TimeSlotDefinition]:
    return list(
        db.execute(
            select(TimeSlotDefinition).order_by(TimeSlotDefinition.sort_order, TimeSlotDefinition.slot_index)
        ).scalars()
    )


def ordered_slot_indexes(db: Session) -> list[int]:
    return [item.slot_index for item in list_definitions(db)]


def format_time_label(definition: TimeSlotDefinition | None) -> str | None:
    if definition is None:
        return None
    return f"{definition.start_time} - {definition.end_time}"


def time_label(db: Session, slot_index: int) -> str | None:
    return format_time_label(db.get(TimeSlotDefinition, slot_index))


def ensure_known_slot_indexes(db: Session, slot_indexes: Iterable[int]) -> None:
    known = set(ordered_slot_indexes(db))
    # An empty grid means slot indexes are free-form ordinals.
    if not known:
        return
    unknown = sorted({index for index in slot_indexes if index not in known})
    if unknown:
        raise SlotValidationError(
            [f"Slot index is not defined in the time grid: {', '.join(str(index) for index in unknown)}"]
        )


def ensure_contiguous(db: Session, slot_indexes: Sequence[int]) -> list[int]:
    """Return the span's slot indexes in grid order, rejecting gaps."""
    ensure_known_slot_indexes(db, slot_indexes)
    order = ordered_slot_indexes(db)
    if order:
        positions = {index: position for position, index in enumerate(order)}
        ordered = sorted(slot_indexes, key=lambda index: positions[index])
        steps = [positions[index] for index in ordered]
    else:
        ordered = sorted(slot_indexes)
        steps = ordered
    if any(later - earlier != 1 for earlier, later in zip(steps, steps[1:])):
        raise SlotValidationError(["Spanned periods must occupy contiguous grid columns"])
    return ordered

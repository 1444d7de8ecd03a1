from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.room import Room
from app.models.teacher import Teacher
from app.services.conflict_detection import SlotProposal, busy_room_ids, busy_teacher_ids

logger = logging.getLogger(__name__)


def get_available_teachers(
    db: Session,
    *,
    day_index: int,
    slot_index: int,
    semester: int,
    exclude_ids: Iterable[str] = (),
    academic_year_id: str | None = None,
    lab_group_id: str | None = None,
    week_number: int | None = None,
) -> list[Teacher]:
    """Active teachers free at a coordinate for the semester's parity group.

    Inactive teachers are never offered, although a proposal naming one is
    still judged only on bookings by check_teacher_availability.
    """
    proposal = SlotProposal(
        day_index=day_index,
        slot_index=slot_index,
        semester=semester,
        academic_year_id=academic_year_id,
        lab_group_id=lab_group_id,
    )
    unavailable = busy_teacher_ids(db, proposal, week_number=week_number) | set(exclude_ids)
    teachers = db.execute(
        select(Teacher).where(Teacher.is_active.is_(True)).order_by(Teacher.full_name, Teacher.id)
    ).scalars()
    available = [teacher for teacher in teachers if teacher.id not in unavailable]
    logger.debug(
        "Day %d slot %d semester %d: %d teachers available",
        day_index,
        slot_index,
        semester,
        len(available),
    )
    return available


def get_available_rooms(
    db: Session,
    *,
    day_index: int,
    slot_index: int,
    semester: int,
    exclude_ids: Iterable[str] = (),
    academic_year_id: str | None = None,
    lab_group_id: str | None = None,
    week_number: int | None = None,
) -> list[Room]:
    """Active rooms free at a coordinate; inactive rooms are never offered."""
    proposal = SlotProposal(
        day_index=day_index,
        slot_index=slot_index,
        semester=semester,
        academic_year_id=academic_year_id,
        lab_group_id=lab_group_id,
    )
    unavailable = busy_room_ids(db, proposal, week_number=week_number) | set(exclude_ids)
    rooms = db.execute(select(Room).where(Room.is_active.is_(True)).order_by(Room.name, Room.id)).scalars()
    available = [room for room in rooms if room.id not in unavailable]
    logger.debug(
        "Day %d slot %d semester %d: %d rooms available",
        day_index,
        slot_index,
        semester,
        len(available),
    )
    return available

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.program import Program
from app.models.room import Room
from app.models.routine_slot import RoutineSlot
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.services.time_grid import time_label

logger = logging.getLogger(__name__)


def slot_subject_ids(slot: RoutineSlot) -> list[str]:
    if slot.subject_ids:
        return list(slot.subject_ids)
    return [slot.subject_id] if slot.subject_id else []


def build_display(db: Session, slot: RoutineSlot) -> dict:
    program = db.get(Program, slot.program_id)
    subjects = [db.get(Subject, subject_id) for subject_id in slot_subject_ids(slot)]
    subjects = [subject for subject in subjects if subject is not None]
    teachers = [db.get(Teacher, teacher_id) for teacher_id in slot.teacher_ids or []]
    room = db.get(Room, slot.room_id) if slot.room_id else None
    return {
        "program_code": program.code if program else None,
        "subject_code": " / ".join(subject.code for subject in subjects) or None,
        "subject_name": " / ".join(subject.name for subject in subjects) or None,
        "teacher_names": [teacher.full_name for teacher in teachers if teacher is not None],
        "room_name": room.name if room else None,
        "time_slot": time_label(db, slot.slot_index),
        "lab_group_label": f"Group {slot.lab_group}" if slot.lab_group else None,
    }


def refresh_display(db: Session, slot: RoutineSlot) -> None:
    slot.display = build_display(db, slot)


def _refresh_all(db: Session, slots: list[RoutineSlot], *, reason: str) -> int:
    for slot in slots:
        refresh_display(db, slot)
    if slots:
        logger.info("Refreshed display cache on %d routine slots after %s", len(slots), reason)
    return len(slots)


def refresh_displays_for_teacher(db: Session, teacher_id: str) -> int:
    slots = [
        slot
        for slot in db.execute(select(RoutineSlot)).scalars()
        if teacher_id in (slot.teacher_ids or [])
    ]
    return _refresh_all(db, slots, reason=f"teacher {teacher_id} changed")


def refresh_displays_for_room(db: Session, room_id: str) -> int:
    slots = list(db.execute(select(RoutineSlot).where(RoutineSlot.room_id == room_id)).scalars())
    return _refresh_all(db, slots, reason=f"room {room_id} changed")


def refresh_displays_for_subject(db: Session, subject_id: str) -> int:
    slots = [
        slot
        for slot in db.execute(select(RoutineSlot)).scalars()
        if subject_id in slot_subject_ids(slot)
    ]
    return _refresh_all(db, slots, reason=f"subject {subject_id} changed")


def refresh_displays_for_program(db: Session, program_id: str) -> int:
    slots = list(db.execute(select(RoutineSlot).where(RoutineSlot.program_id == program_id)).scalars())
    return _refresh_all(db, slots, reason=f"program {program_id} changed")


def refresh_displays_for_time_slot(db: Session, slot_index: int) -> int:
    slots = list(db.execute(select(RoutineSlot).where(RoutineSlot.slot_index == slot_index)).scalars())
    return _refresh_all(db, slots, reason=f"time slot {slot_index} changed")

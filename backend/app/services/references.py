from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError
from app.models.academic_year import AcademicYear
from app.models.program import Program
from app.models.room import Room
from app.models.routine_slot import RoutineSlot
from app.models.subject import Subject
from app.models.teacher import Teacher


def require_program(db: Session, program_id: str) -> Program:
    program = db.get(Program, program_id)
    if program is None:
        raise ResourceNotFoundError("Program", program_id)
    return program


def require_room(db: Session, room_id: str) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise ResourceNotFoundError("Room", room_id)
    return room


def require_teachers(db: Session, teacher_ids: Iterable[str]) -> dict[str, Teacher]:
    wanted = list(dict.fromkeys(teacher_ids))
    if not wanted:
        return {}
    found = {teacher.id: teacher for teacher in db.execute(select(Teacher).where(Teacher.id.in_(wanted))).scalars()}
    for teacher_id in wanted:
        if teacher_id not in found:
            raise ResourceNotFoundError("Teacher", teacher_id)
    return found


def require_subjects(db: Session, subject_ids: Iterable[str]) -> dict[str, Subject]:
    wanted = list(dict.fromkeys(subject_ids))
    if not wanted:
        return {}
    found = {subject.id: subject for subject in db.execute(select(Subject).where(Subject.id.in_(wanted))).scalars()}
    for subject_id in wanted:
        if subject_id not in found:
            raise ResourceNotFoundError("Subject", subject_id)
    return found


def require_slot(db: Session, slot_id: str) -> RoutineSlot:
    slot = db.get(RoutineSlot, slot_id)
    if slot is None:
        raise ResourceNotFoundError("RoutineSlot", slot_id)
    return slot


def resolve_academic_year(db: Session, academic_year_id: str | None) -> AcademicYear:
    """Return the named academic year, or the one flagged current when none is given."""
    if academic_year_id:
        year = db.get(AcademicYear, academic_year_id)
        if year is None:
            raise ResourceNotFoundError("AcademicYear", academic_year_id)
        return year
    year = db.execute(select(AcademicYear).where(AcademicYear.is_current.is_(True))).scalars().first()
    if year is None:
        raise ResourceNotFoundError("AcademicYear", "current")
    return year

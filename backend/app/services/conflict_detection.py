from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.routine_slot import RoutineSlot
from app.models.teacher import Teacher
from app.schemas.conflict import (
    ConflictingSlot,
    RoomAvailability,
    RoomConflict,
    ScheduleConflictReport,
    SweepConflict,
    SweepReport,
    TeacherAvailability,
    TeacherConflict,
    TeacherScheduleConflictGroup,
)
from app.services.recurrence import Recurrence, applies_to_week, recurrences_overlap
from app.services.semester_groups import same_group, semester_group_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotProposal:
    day_index: int
    slot_index: int
    semester: int
    teacher_ids: tuple[str, ...] = ()
    room_id: str | None = None
    academic_year_id: str | None = None
    lab_group_id: str | None = None
    recurrence: Recurrence | None = None

    @classmethod
    def from_slot(cls, slot: RoutineSlot) -> "SlotProposal":
        return cls(
            day_index=slot.day_index,
            slot_index=slot.slot_index,
            semester=slot.semester,
            teacher_ids=tuple(slot.teacher_ids or ()),
            room_id=slot.room_id,
            academic_year_id=slot.academic_year_id,
            lab_group_id=slot.lab_group_id,
            recurrence=slot.recurrence,
        )


def _coordinate_slots(
    db: Session,
    day_index: int,
    slot_index: int,
    *,
    academic_year_id: str | None = None,
    exclude_slot_id: str | None = None,
) -> list[RoutineSlot]:
    query = select(RoutineSlot).where(
        RoutineSlot.day_index == day_index,
        RoutineSlot.slot_index == slot_index,
        RoutineSlot.is_active.is_(True),
        RoutineSlot.is_archived.is_(False),
    )
    if academic_year_id:
        query = query.where(RoutineSlot.academic_year_id == academic_year_id)
    if exclude_slot_id:
        query = query.where(RoutineSlot.id != exclude_slot_id)
    return list(db.execute(query.order_by(RoutineSlot.created_at, RoutineSlot.id)).scalars())


def _competing(
    candidates: Sequence[RoutineSlot],
    proposal: SlotProposal,
    *,
    week_number: int | None = None,
    recurrence_aware: bool = False,
) -> list[RoutineSlot]:
    same_parity = [slot for slot in candidates if same_group(slot.semester, proposal.semester)]
    logger.debug(
        "Day %d slot %d: %d candidate slots, %d in semester group %s",
        proposal.day_index,
        proposal.slot_index,
        len(candidates),
        len(same_parity),
        semester_group_for(proposal.semester).value,
    )
    competing: list[RoutineSlot] = []
    for slot in same_parity:
        # Parallel sessions of one lab-group family never compete with each other.
        if proposal.lab_group_id and slot.lab_group_id == proposal.lab_group_id:
            continue
        if week_number is not None and not (
            slot.applies_to_week(week_number) and applies_to_week(proposal.recurrence, week_number)
        ):
            continue
        if recurrence_aware and not recurrences_overlap(
            slot.recurrence,
            proposal.recurrence,
            max_week_number=get_settings().max_week_number,
        ):
            continue
        competing.append(slot)
    return competing


def competing_slots(
    db: Session,
    proposal: SlotProposal,
    *,
    exclude_slot_id: str | None = None,
    week_number: int | None = None,
    recurrence_aware: bool = False,
) -> list[RoutineSlot]:
    candidates = _coordinate_slots(
        db,
        proposal.day_index,
        proposal.slot_index,
        academic_year_id=proposal.academic_year_id,
        exclude_slot_id=exclude_slot_id,
    )
    return _competing(candidates, proposal, week_number=week_number, recurrence_aware=recurrence_aware)


def _describe_slot(slot: RoutineSlot) -> ConflictingSlot:
    display = slot.display or {}
    return ConflictingSlot(
        slot_id=slot.id,
        program_id=slot.program_id,
        program_code=display.get("program_code"),
        semester=slot.semester,
        semester_group=slot.semester_group,
        section=slot.section,
        subject_id=slot.subject_id,
        subject_name=display.get("subject_name"),
        room_id=slot.room_id,
        room_name=display.get("room_name"),
        class_type=slot.class_type,
        lab_group=slot.lab_group,
    )


def _teacher_names(db: Session, teacher_ids: Iterable[str]) -> list[str]:
    names: list[str] = []
    for teacher_id in teacher_ids:
        teacher = db.get(Teacher, teacher_id)
        names.append(teacher.full_name if teacher is not None else teacher_id)
    return names


def check_teacher_availability(
    db: Session,
    proposal: SlotProposal,
    *,
    exclude_slot_id: str | None = None,
    week_number: int | None = None,
    recurrence_aware: bool = False,
) -> TeacherAvailability:
    proposed = set(proposal.teacher_ids)
    if not proposed:
        return TeacherAvailability(is_available=True)

    conflicts: list[TeacherConflict] = []
    for slot in competing_slots(
        db,
        proposal,
        exclude_slot_id=exclude_slot_id,
        week_number=week_number,
        recurrence_aware=recurrence_aware,
    ):
        overlapping = [teacher_id for teacher_id in slot.teacher_ids or [] if teacher_id in proposed]
        if not overlapping:
            continue
        conflicts.append(
            TeacherConflict(
                slot=_describe_slot(slot),
                teacher_ids=overlapping,
                teacher_names=_teacher_names(db, overlapping),
            )
        )
    return TeacherAvailability(is_available=not conflicts, conflicts=conflicts)


def check_room_availability(
    db: Session,
    proposal: SlotProposal,
    *,
    exclude_slot_id: str | None = None,
    week_number: int | None = None,
    recurrence_aware: bool = False,
) -> RoomAvailability:
    if not proposal.room_id:
        return RoomAvailability(is_available=True)

    for slot in competing_slots(
        db,
        proposal,
        exclude_slot_id=exclude_slot_id,
        week_number=week_number,
        recurrence_aware=recurrence_aware,
    ):
        if slot.room_id == proposal.room_id:
            return RoomAvailability(
                is_available=False,
                conflict=RoomConflict(slot=_describe_slot(slot), room_id=proposal.room_id),
            )
    return RoomAvailability(is_available=True)


def check_schedule_conflicts(
    db: Session,
    proposal: SlotProposal,
    *,
    exclude_slot_id: str | None = None,
    week_number: int | None = None,
    recurrence_aware: bool = False,
) -> ScheduleConflictReport:
    options = {
        "exclude_slot_id": exclude_slot_id,
        "week_number": week_number,
        "recurrence_aware": recurrence_aware,
    }
    teachers = check_teacher_availability(db, proposal, **options)
    room = check_room_availability(db, proposal, **options)
    return ScheduleConflictReport(
        has_conflicts=not teachers.is_available or not room.is_available,
        teacher_conflicts=teachers.conflicts,
        room_conflict=room.conflict,
    )


def busy_teacher_ids(
    db: Session,
    proposal: SlotProposal,
    *,
    week_number: int | None = None,
) -> set[str]:
    busy: set[str] = set()
    for slot in competing_slots(db, proposal, week_number=week_number):
        busy.update(slot.teacher_ids or [])
    return busy


def busy_room_ids(
    db: Session,
    proposal: SlotProposal,
    *,
    week_number: int | None = None,
) -> set[str]:
    return {slot.room_id for slot in competing_slots(db, proposal, week_number=week_number) if slot.room_id}


def scan_slot_conflicts(
    db: Session,
    *,
    academic_year_id: str | None = None,
    program_id: str | None = None,
    semester: int | None = None,
    section: str | None = None,
) -> SweepReport:
    """Whole-grid sweep over current slots.

    Groups by coordinate only and ignores semester parity, so it over-reports
    compared with the incremental checks. The result is advisory.
    """
    query = select(RoutineSlot).where(RoutineSlot.is_active.is_(True), RoutineSlot.is_archived.is_(False))
    if academic_year_id:
        query = query.where(RoutineSlot.academic_year_id == academic_year_id)
    if program_id:
        query = query.where(RoutineSlot.program_id == program_id)
    if semester is not None:
        query = query.where(RoutineSlot.semester == semester)
    if section:
        query = query.where(RoutineSlot.section == section)
    slots = list(
        db.execute(query.order_by(RoutineSlot.day_index, RoutineSlot.slot_index, RoutineSlot.created_at)).scalars()
    )

    by_teacher: dict[tuple[str, int, int], list[RoutineSlot]] = defaultdict(list)
    by_room: dict[tuple[str, int, int], list[RoutineSlot]] = defaultdict(list)
    by_section: dict[tuple, list[RoutineSlot]] = defaultdict(list)
    for slot in slots:
        for teacher_id in dict.fromkeys(slot.teacher_ids or []):
            by_teacher[(teacher_id, slot.day_index, slot.slot_index)].append(slot)
        if slot.room_id:
            by_room[(slot.room_id, slot.day_index, slot.slot_index)].append(slot)
        section_key = (slot.program_id, slot.semester, slot.section, slot.lab_group or "")
        by_section[(section_key, slot.day_index, slot.slot_index)].append(slot)

    conflicts: list[SweepConflict] = []
    for (teacher_id, day_index, slot_index), group in by_teacher.items():
        if len(group) > 1:
            conflicts.append(
                SweepConflict(
                    conflict_type="teacher_double_booked",
                    resource_id=teacher_id,
                    day_index=day_index,
                    slot_index=slot_index,
                    slot_ids=[slot.id for slot in group],
                    description=f"Teacher {_teacher_names(db, [teacher_id])[0]} is booked {len(group)} times",
                )
            )
    for (room_id, day_index, slot_index), group in by_room.items():
        if len(group) > 1:
            room_name = (group[0].display or {}).get("room_name") or room_id
            conflicts.append(
                SweepConflict(
                    conflict_type="room_double_booked",
                    resource_id=room_id,
                    day_index=day_index,
                    slot_index=slot_index,
                    slot_ids=[slot.id for slot in group],
                    description=f"Room {room_name} is booked {len(group)} times",
                )
            )
    for ((slot_program_id, slot_semester, slot_section, lab_group), day_index, slot_index), group in by_section.items():
        if len(group) > 1:
            label = f"semester {slot_semester} section {slot_section}" + (f" group {lab_group}" if lab_group else "")
            conflicts.append(
                SweepConflict(
                    conflict_type="section_double_booked",
                    resource_id=slot_program_id,
                    day_index=day_index,
                    slot_index=slot_index,
                    slot_ids=[slot.id for slot in group],
                    description=f"Program {slot_program_id} {label} has {len(group)} classes",
                )
            )

    logger.info("Conflict sweep over %d slots found %d conflicts", len(slots), len(conflicts))
    return SweepReport(total_slots=len(slots), has_conflicts=bool(conflicts), conflicts=conflicts)


def get_teacher_schedule_conflicts(
    db: Session,
    teacher_id: str,
    *,
    semester_filter: int | None = None,
) -> list[TeacherScheduleConflictGroup]:
    query = (
        select(RoutineSlot)
        .where(RoutineSlot.is_active.is_(True), RoutineSlot.is_archived.is_(False))
        .order_by(RoutineSlot.day_index, RoutineSlot.slot_index)
    )
    by_coordinate: dict[tuple[int, int], list[RoutineSlot]] = defaultdict(list)
    for slot in db.execute(query).scalars():
        if teacher_id in (slot.teacher_ids or []):
            by_coordinate[(slot.day_index, slot.slot_index)].append(slot)

    groups: list[TeacherScheduleConflictGroup] = []
    for (day_index, slot_index), slots in by_coordinate.items():
        if semester_filter is not None:
            slots = [slot for slot in slots if same_group(semester_filter, slot.semester)]
        if len(slots) < 2:
            continue
        groups.append(
            TeacherScheduleConflictGroup(
                day_index=day_index,
                slot_index=slot_index,
                semester_group=semester_group_for(semester_filter) if semester_filter is not None else "all",
                slots=[_describe_slot(slot) for slot in slots],
            )
        )
    return groups

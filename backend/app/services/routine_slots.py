from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import ResourceNotFoundError, ScheduleConflictError, SlotValidationError
from app.models.routine_slot import ClassCategory, ClassType, RoutineSlot
from app.models.time_slot import TimeSlotDefinition
from app.schemas.conflict import SweepReport
from app.schemas.routine_slot import (
    CopyRoutineRequest,
    LabGroupSlotsCreate,
    RoutineSlotCreate,
    RoutineSlotUpdate,
    SlotContentBase,
    SpannedSlotCreate,
)
from app.services.audit import log_activity
from app.services.conflict_detection import SlotProposal, check_schedule_conflicts, scan_slot_conflicts
from app.services.display import refresh_display, slot_subject_ids
from app.services.locks import hold_coordinates
from app.services.recurrence import RecurrenceType, applies_to_week
from app.services.references import (
    require_program,
    require_room,
    require_slot,
    require_subjects,
    require_teachers,
    resolve_academic_year,
)
from app.services.slot_rules import slot_field_errors
from app.services.time_grid import (
    ensure_contiguous,
    ensure_known_slot_indexes,
    format_time_label,
    list_definitions,
)

logger = logging.getLogger(__name__)


def _lock_timeout() -> float:
    return get_settings().lock_timeout_seconds


def _resolve_references(
    db: Session,
    *,
    program_id: str,
    subject_ids: Iterable[str],
    teacher_ids: Iterable[str],
    room_id: str | None,
) -> None:
    require_program(db, program_id)
    require_subjects(db, subject_ids)
    require_teachers(db, teacher_ids)
    if room_id:
        require_room(db, room_id)


def _content_subject_ids(payload: SlotContentBase) -> list[str]:
    if payload.subject_ids:
        return list(payload.subject_ids)
    return [payload.subject_id] if payload.subject_id else []


def _build_slot(
    payload: SlotContentBase,
    *,
    academic_year_id: str,
    slot_index: int,
    span_id: str | None = None,
    span_master: bool = False,
    lab_group_id: str | None = None,
    version: int = 1,
    actor_id: str | None = None,
) -> RoutineSlot:
    recurrence = payload.recurrence
    return RoutineSlot(
        program_id=payload.program_id,
        academic_year_id=academic_year_id,
        semester=payload.semester,
        section=payload.section,
        day_index=payload.day_index,
        slot_index=slot_index,
        subject_id=payload.subject_id or (payload.subject_ids[0] if payload.subject_ids else None),
        subject_ids=list(payload.subject_ids),
        teacher_ids=list(payload.teacher_ids),
        room_id=payload.room_id,
        class_type=payload.class_type,
        class_category=payload.class_category,
        is_elective_class=bool(payload.is_elective_class),
        lab_group_id=lab_group_id or payload.lab_group_id,
        lab_group=payload.lab_group.value if payload.lab_group else None,
        recurrence_type=recurrence.type,
        recurrence_pattern=recurrence.pattern,
        recurrence_custom_weeks=list(recurrence.custom_weeks),
        span_id=span_id,
        span_master=span_master,
        notes=payload.notes,
        is_active=True,
        is_archived=False,
        version=version,
        created_by=actor_id,
        last_modified_by=actor_id,
    )


def _clone_slot(source: RoutineSlot, **overrides) -> RoutineSlot:
    values = {
        "program_id": source.program_id,
        "academic_year_id": source.academic_year_id,
        "semester": source.semester,
        "section": source.section,
        "day_index": source.day_index,
        "slot_index": source.slot_index,
        "subject_id": source.subject_id,
        "subject_ids": list(source.subject_ids or []),
        "teacher_ids": list(source.teacher_ids or []),
        "room_id": source.room_id,
        "class_type": source.class_type,
        "class_category": source.class_category,
        "is_elective_class": source.is_elective_class,
        "lab_group_id": source.lab_group_id,
        "lab_group": source.lab_group,
        "recurrence_type": source.recurrence_type,
        "recurrence_pattern": source.recurrence_pattern,
        "recurrence_custom_weeks": list(source.recurrence_custom_weeks or []),
        "span_id": source.span_id,
        "span_master": source.span_master,
        "notes": source.notes,
        "is_active": True,
        "is_archived": False,
        "version": source.version,
    }
    values.update(overrides)
    return RoutineSlot(**values)


def _structural_duplicate(
    db: Session,
    slot: RoutineSlot,
    *,
    exclude_ids: Iterable[str] = (),
) -> RoutineSlot | None:
    query = select(RoutineSlot).where(
        RoutineSlot.academic_year_id == slot.academic_year_id,
        RoutineSlot.program_id == slot.program_id,
        RoutineSlot.semester == slot.semester,
        RoutineSlot.section == slot.section,
        RoutineSlot.day_index == slot.day_index,
        RoutineSlot.slot_index == slot.slot_index,
        RoutineSlot.is_active.is_(True),
        RoutineSlot.is_archived.is_(False),
    )
    if slot.lab_group is None:
        query = query.where(RoutineSlot.lab_group.is_(None))
    else:
        query = query.where(RoutineSlot.lab_group == slot.lab_group)
    excluded = [slot_id for slot_id in exclude_ids if slot_id]
    if excluded:
        query = query.where(RoutineSlot.id.not_in(excluded))
    return db.execute(query).scalars().first()


def _ensure_structural_slot_free(db: Session, slot: RoutineSlot, *, exclude_ids: Iterable[str] = ()) -> None:
    existing = _structural_duplicate(db, slot, exclude_ids=exclude_ids)
    if existing is None:
        return
    logger.info(
        "Rejected routine slot: section %s semester %d already has slot %s at day %d slot %d",
        slot.section,
        slot.semester,
        existing.id,
        slot.day_index,
        slot.slot_index,
    )
    raise ScheduleConflictError(
        "This section already has a class at the requested time",
        details={
            "existing_slot_id": existing.id,
            "day_index": slot.day_index,
            "slot_index": slot.slot_index,
            "lab_group": slot.lab_group,
        },
    )


def _ensure_no_conflicts(db: Session, slot: RoutineSlot, *, exclude_slot_id: str | None = None) -> None:
    report = check_schedule_conflicts(db, SlotProposal.from_slot(slot), exclude_slot_id=exclude_slot_id)
    if not report.has_conflicts:
        return
    logger.info(
        "Rejected routine slot at day %d slot %d: %d teacher conflicts, room conflict %s",
        slot.day_index,
        slot.slot_index,
        len(report.teacher_conflicts),
        report.room_conflict is not None,
    )
    raise ScheduleConflictError(
        "Teacher or room is already booked at the requested time",
        details={
            "day_index": slot.day_index,
            "slot_index": slot.slot_index,
            "report": report.model_dump(mode="json"),
        },
    )


def _structural_collision(db: Session, exc: IntegrityError) -> ScheduleConflictError:
    db.rollback()
    logger.info("Structural key collision while writing routine slots: %s", exc.orig)
    return ScheduleConflictError(
        "This section already has a class at the requested time",
        details={"error": str(exc.orig)},
    )


def _flush(db: Session) -> None:
    try:
        db.flush()
    except IntegrityError as exc:
        raise _structural_collision(db, exc) from exc


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        raise _structural_collision(db, exc) from exc
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to persist routine slot changes")
        raise


def _admit(db: Session, slots: Sequence[RoutineSlot]) -> None:
    for slot in slots:
        _ensure_structural_slot_free(db, slot)
    for slot in slots:
        _ensure_no_conflicts(db, slot)


def _persist(db: Session, slots: Sequence[RoutineSlot], *, actor_id: str | None, action: str, details: dict) -> None:
    for slot in slots:
        refresh_display(db, slot)
        db.add(slot)
    _flush(db)
    log_activity(
        db,
        actor_id=actor_id,
        action=action,
        entity_type="routine_slot",
        entity_id=(slots[0].span_id or slots[0].id) if slots else None,
        details={**details, "slot_ids": [slot.id for slot in slots]},
    )
    _commit(db)
    for slot in slots:
        db.refresh(slot)


def create_slot(db: Session, payload: RoutineSlotCreate, *, actor_id: str | None = None) -> RoutineSlot:
    year = resolve_academic_year(db, payload.academic_year_id)
    _resolve_references(
        db,
        program_id=payload.program_id,
        subject_ids=_content_subject_ids(payload),
        teacher_ids=payload.teacher_ids,
        room_id=payload.room_id,
    )
    ensure_known_slot_indexes(db, [payload.slot_index])

    with hold_coordinates([(payload.day_index, payload.slot_index)], timeout=_lock_timeout()):
        slot = _build_slot(payload, academic_year_id=year.id, slot_index=payload.slot_index, actor_id=actor_id)
        _admit(db, [slot])
        _persist(db, [slot], actor_id=actor_id, action="routine_slot.create", details={"academic_year_id": year.id})

    logger.info(
        "Created routine slot %s for program %s semester %d section %s at day %d slot %d",
        slot.id,
        slot.program_id,
        slot.semester,
        slot.section,
        slot.day_index,
        slot.slot_index,
    )
    return slot


def _spanned_slots(
    db: Session,
    payload: SpannedSlotCreate,
    *,
    academic_year_id: str,
    lab_group_id: str | None = None,
    actor_id: str | None = None,
) -> list[RoutineSlot]:
    ordered = ensure_contiguous(db, payload.slot_indexes)
    span_id = str(uuid.uuid4())
    return [
        _build_slot(
            payload,
            academic_year_id=academic_year_id,
            slot_index=slot_index,
            span_id=span_id,
            span_master=position == 0,
            lab_group_id=lab_group_id,
            actor_id=actor_id,
        )
        for position, slot_index in enumerate(ordered)
    ]


def create_spanned_slot(db: Session, payload: SpannedSlotCreate, *, actor_id: str | None = None) -> list[RoutineSlot]:
    year = resolve_academic_year(db, payload.academic_year_id)
    _resolve_references(
        db,
        program_id=payload.program_id,
        subject_ids=_content_subject_ids(payload),
        teacher_ids=payload.teacher_ids,
        room_id=payload.room_id,
    )
    slots = _spanned_slots(db, payload, academic_year_id=year.id, actor_id=actor_id)

    with hold_coordinates([(slot.day_index, slot.slot_index) for slot in slots], timeout=_lock_timeout()):
        _admit(db, slots)
        _persist(
            db,
            slots,
            actor_id=actor_id,
            action="routine_slot.create_span",
            details={"academic_year_id": year.id, "periods": len(slots)},
        )

    logger.info("Created span %s with %d periods at day %d", slots[0].span_id, len(slots), payload.day_index)
    return slots


def create_lab_group_slots(
    db: Session,
    payload: LabGroupSlotsCreate,
    *,
    actor_id: str | None = None,
) -> tuple[str, list[list[RoutineSlot]]]:
    year = resolve_academic_year(db, payload.academic_year_id)
    lab_group_id = payload.lab_group_id or str(uuid.uuid4())
    spans: list[list[RoutineSlot]] = []
    for group_payload in payload.as_spans(lab_group_id):
        _resolve_references(
            db,
            program_id=group_payload.program_id,
            subject_ids=_content_subject_ids(group_payload),
            teacher_ids=group_payload.teacher_ids,
            room_id=group_payload.room_id,
        )
        spans.append(_spanned_slots(db, group_payload, academic_year_id=year.id, actor_id=actor_id))

    slots = [slot for span in spans for slot in span]
    with hold_coordinates([(slot.day_index, slot.slot_index) for slot in slots], timeout=_lock_timeout()):
        _admit(db, slots)
        _persist(
            db,
            slots,
            actor_id=actor_id,
            action="routine_slot.create_lab_groups",
            details={"lab_group_id": lab_group_id, "groups": [group.lab_group.value for group in payload.groups]},
        )

    logger.info("Created %d lab-group sessions in family %s", len(spans), lab_group_id)
    return lab_group_id, spans


def _span_members(db: Session, slot: RoutineSlot) -> list[RoutineSlot]:
    if not slot.span_id:
        return [slot]
    query = (
        select(RoutineSlot)
        .where(RoutineSlot.span_id == slot.span_id, RoutineSlot.is_archived.is_(False))
        .order_by(RoutineSlot.slot_index)
    )
    return list(db.execute(query).scalars())


def _field_errors_for(slot: RoutineSlot) -> list[str]:
    return slot_field_errors(
        settings=get_settings(),
        semester=slot.semester,
        section=slot.section,
        day_index=slot.day_index,
        slot_indexes=[slot.slot_index],
        class_type=slot.class_type,
        class_category=slot.class_category,
        is_elective_class=slot.is_elective_class,
        subject_id=slot.subject_id,
        subject_ids=slot.subject_ids or [],
        teacher_ids=slot.teacher_ids or [],
        room_id=slot.room_id,
        lab_group=slot.lab_group,
        lab_group_id=slot.lab_group_id,
        recurrence_type=slot.recurrence_type,
        recurrence_pattern=slot.recurrence_pattern,
        recurrence_custom_weeks=slot.recurrence_custom_weeks or [],
    )


def _update_values(payload: RoutineSlotUpdate) -> dict:
    data = payload.model_dump(exclude_unset=True)
    recurrence = data.pop("recurrence", None)
    if recurrence is not None:
        data["recurrence_type"] = payload.recurrence.type
        data["recurrence_pattern"] = payload.recurrence.pattern
        data["recurrence_custom_weeks"] = list(payload.recurrence.custom_weeks)
    if "lab_group" in data and data["lab_group"] is not None:
        data["lab_group"] = payload.lab_group.value
    if "class_category" in data and "is_elective_class" not in data:
        data["is_elective_class"] = payload.class_category == ClassCategory.elective
    if "subject_ids" in data and data["subject_ids"] and "subject_id" not in data:
        data["subject_id"] = data["subject_ids"][0]
    if data.get("class_type") == ClassType.break_:
        data.setdefault("teacher_ids", [])
        data.setdefault("room_id", None)
    return data


def update_slot(
    db: Session,
    slot_id: str,
    payload: RoutineSlotUpdate,
    *,
    actor_id: str | None = None,
) -> list[RoutineSlot]:
    """Apply an edit to a slot, and to every member of its span.

    Content changes propagate across the span; moving a span member on its own
    is rejected because it would break contiguity.
    """
    slot = require_slot(db, slot_id)
    if not slot.is_active or slot.is_archived:
        raise SlotValidationError(["Archived or deleted routine slots cannot be edited"])

    data = _update_values(payload)
    if not data:
        return [slot]

    members = _span_members(db, slot)
    if {"day_index", "slot_index"} & data.keys() and len(members) > 1:
        raise SlotValidationError(["Spanned classes must be moved as a whole; delete and recreate the span"])
    if "day_index" in data or "slot_index" in data:
        ensure_known_slot_indexes(db, [data.get("slot_index", slot.slot_index)])
    # Span members share content and academic context, never their coordinate.
    shared = {key: value for key, value in data.items() if key not in ("day_index", "slot_index")}

    coordinates = {(member.day_index, member.slot_index) for member in members}
    coordinates.add((data.get("day_index", slot.day_index), data.get("slot_index", slot.slot_index)))

    with hold_coordinates(coordinates, timeout=_lock_timeout()):
        member_ids = [member.id for member in members]
        try:
            for member in members:
                for key, value in (data if member.id == slot.id else shared).items():
                    setattr(member, key, value)
                errors = _field_errors_for(member)
                if errors:
                    raise SlotValidationError(errors)
            _resolve_references(
                db,
                program_id=slot.program_id,
                subject_ids=slot_subject_ids(slot),
                teacher_ids=slot.teacher_ids or [],
                room_id=slot.room_id,
            )
            for member in members:
                _ensure_structural_slot_free(db, member, exclude_ids=member_ids)
                _ensure_no_conflicts(db, member, exclude_slot_id=member.id)
        except (SlotValidationError, ScheduleConflictError, ResourceNotFoundError):
            db.rollback()
            raise

        for member in members:
            member.last_modified_by = actor_id
            refresh_display(db, member)
        log_activity(
            db,
            actor_id=actor_id,
            action="routine_slot.update",
            entity_type="routine_slot",
            entity_id=slot.id,
            details={"fields": sorted(data.keys()), "slot_ids": member_ids},
        )
        _commit(db)

    for member in members:
        db.refresh(member)
    logger.info("Updated routine slot %s (%d records)", slot.id, len(members))
    return members


def soft_delete_slot(db: Session, slot_id: str, *, actor_id: str | None = None) -> list[RoutineSlot]:
    slot = require_slot(db, slot_id)
    members = [member for member in _span_members(db, slot) if member.is_active]
    for member in members:
        member.is_active = False
        member.last_modified_by = actor_id
    log_activity(
        db,
        actor_id=actor_id,
        action="routine_slot.deactivate",
        entity_type="routine_slot",
        entity_id=slot.id,
        details={"slot_ids": [member.id for member in members]},
    )
    _commit(db)
    logger.info("Deactivated routine slot %s (%d records)", slot.id, len(members))
    return members


def delete_span(db: Session, span_id: str, *, actor_id: str | None = None) -> int:
    members = list(db.execute(select(RoutineSlot).where(RoutineSlot.span_id == span_id)).scalars())
    if not members:
        raise ResourceNotFoundError("Span", span_id)
    for member in members:
        db.delete(member)
    log_activity(
        db,
        actor_id=actor_id,
        action="routine_slot.delete_span",
        entity_type="span",
        entity_id=span_id,
        details={"slot_ids": [member.id for member in members]},
    )
    _commit(db)
    logger.info("Removed span %s with %d records", span_id, len(members))
    return len(members)


def _merge_sweeps(db: Session, academic_year_ids: Iterable[str]) -> SweepReport:
    reports = [scan_slot_conflicts(db, academic_year_id=year_id) for year_id in sorted(set(academic_year_ids))]
    conflicts = [conflict for report in reports for conflict in report.conflicts]
    return SweepReport(
        total_slots=sum(report.total_slots for report in reports),
        has_conflicts=bool(conflicts),
        conflicts=conflicts,
    )


def _ensure_batch_keys_unique(slots: Sequence[RoutineSlot]) -> None:
    seen: dict[tuple, int] = {}
    for position, slot in enumerate(slots):
        key = (slot.academic_year_id, *slot.structural_key)
        if key in seen:
            raise ScheduleConflictError(
                "The batch places two classes in the same section slot",
                details={"positions": [seen[key], position], "day_index": slot.day_index, "slot_index": slot.slot_index},
            )
        seen[key] = position


def bulk_insert_slots(
    db: Session,
    payloads: Sequence[RoutineSlotCreate],
    *,
    actor_id: str | None = None,
) -> tuple[list[RoutineSlot], SweepReport]:
    """Insert a batch of slots all-or-nothing, then sweep the affected years.

    Only structural checks gate the batch; teacher and room clashes are
    reported by the advisory sweep instead of rejecting the batch.
    """
    slots: list[RoutineSlot] = []
    for payload in payloads:
        year = resolve_academic_year(db, payload.academic_year_id)
        _resolve_references(
            db,
            program_id=payload.program_id,
            subject_ids=_content_subject_ids(payload),
            teacher_ids=payload.teacher_ids,
            room_id=payload.room_id,
        )
        slots.append(_build_slot(payload, academic_year_id=year.id, slot_index=payload.slot_index, actor_id=actor_id))
    ensure_known_slot_indexes(db, [slot.slot_index for slot in slots])
    _ensure_batch_keys_unique(slots)

    with hold_coordinates([(slot.day_index, slot.slot_index) for slot in slots], timeout=_lock_timeout()):
        for slot in slots:
            _ensure_structural_slot_free(db, slot)
        _persist(db, slots, actor_id=actor_id, action="routine_slot.bulk_insert", details={"count": len(slots)})

    sweep = _merge_sweeps(db, [slot.academic_year_id for slot in slots])
    logger.info("Bulk inserted %d routine slots; sweep found %d conflicts", len(slots), len(sweep.conflicts))
    return slots, sweep


def _section_query(*, program_id: str, semester: int, section: str, academic_year_id: str):
    return select(RoutineSlot).where(
        RoutineSlot.program_id == program_id,
        RoutineSlot.semester == semester,
        RoutineSlot.section == section,
        RoutineSlot.academic_year_id == academic_year_id,
    )


def copy_section_routine(
    db: Session,
    payload: CopyRoutineRequest,
    *,
    actor_id: str | None = None,
) -> tuple[list[RoutineSlot], int, int, SweepReport]:
    if payload.source_academic_year_id == payload.target_academic_year_id:
        raise SlotValidationError(["Source and target academic years must differ"])
    require_program(db, payload.program_id)
    source_year = resolve_academic_year(db, payload.source_academic_year_id)
    target_year = resolve_academic_year(db, payload.target_academic_year_id)

    source_query = _section_query(
        program_id=payload.program_id,
        semester=payload.semester,
        section=payload.section,
        academic_year_id=source_year.id,
    ).where(RoutineSlot.is_active.is_(True), RoutineSlot.is_archived.is_(False))
    sources = list(db.execute(source_query.order_by(RoutineSlot.day_index, RoutineSlot.slot_index)).scalars())
    if not sources:
        raise SlotValidationError(["The source routine has no current slots to copy"])

    target_query = _section_query(
        program_id=payload.program_id,
        semester=payload.semester,
        section=payload.section,
        academic_year_id=target_year.id,
    )
    targets = list(db.execute(target_query).scalars())
    version = max((target.version for target in targets), default=0) + 1

    span_ids: dict[str, str] = defaultdict(lambda: str(uuid.uuid4()))
    lab_group_ids: dict[str, str] = defaultdict(lambda: str(uuid.uuid4()))
    copies = [
        _clone_slot(
            source,
            academic_year_id=target_year.id,
            span_id=span_ids[source.span_id] if source.span_id else None,
            lab_group_id=lab_group_ids[source.lab_group_id] if source.lab_group_id else None,
            version=version,
            created_by=actor_id,
            last_modified_by=actor_id,
        )
        for source in sources
    ]

    coordinates = {(slot.day_index, slot.slot_index) for slot in copies}
    with hold_coordinates(coordinates, timeout=_lock_timeout()):
        archived = 0
        for target in targets:
            if target.is_active and not target.is_archived:
                target.is_archived = True
                target.last_modified_by = actor_id
                archived += 1
        _flush(db)
        _persist(
            db,
            copies,
            actor_id=actor_id,
            action="routine_slot.copy",
            details={
                "source_academic_year_id": source_year.id,
                "target_academic_year_id": target_year.id,
                "archived": archived,
                "version": version,
            },
        )

    sweep = scan_slot_conflicts(db, academic_year_id=target_year.id)
    logger.info(
        "Copied %d slots of program %s semester %d section %s into year %s (archived %d, version %d)",
        len(copies),
        payload.program_id,
        payload.semester,
        payload.section,
        target_year.id,
        archived,
        version,
    )
    return copies, archived, version, sweep


def list_slots(
    db: Session,
    *,
    program_id: str | None = None,
    semester: int | None = None,
    section: str | None = None,
    academic_year_id: str | None = None,
    teacher_id: str | None = None,
    room_id: str | None = None,
    class_type: ClassType | None = None,
    recurrence_type: RecurrenceType | None = None,
    week_number: int | None = None,
) -> list[RoutineSlot]:
    query = select(RoutineSlot).where(RoutineSlot.is_active.is_(True), RoutineSlot.is_archived.is_(False))
    if program_id:
        query = query.where(RoutineSlot.program_id == program_id)
    if semester is not None:
        query = query.where(RoutineSlot.semester == semester)
    if section:
        query = query.where(RoutineSlot.section == section.upper())
    if academic_year_id:
        query = query.where(RoutineSlot.academic_year_id == academic_year_id)
    if room_id:
        query = query.where(RoutineSlot.room_id == room_id)
    if class_type is not None:
        query = query.where(RoutineSlot.class_type == class_type)
    if recurrence_type is not None:
        query = query.where(RoutineSlot.recurrence_type == recurrence_type)
    query = query.order_by(RoutineSlot.day_index, RoutineSlot.slot_index, RoutineSlot.lab_group)

    slots = list(db.execute(query).scalars())
    if teacher_id:
        slots = [slot for slot in slots if teacher_id in (slot.teacher_ids or [])]
    if week_number is not None:
        slots = [slot for slot in slots if applies_to_week(slot.recurrence, week_number)]
    return slots


def routine_grid(
    db: Session,
    *,
    program_id: str,
    semester: int,
    section: str,
    academic_year_id: str | None = None,
    week_number: int | None = None,
) -> dict:
    require_program(db, program_id)
    year = resolve_academic_year(db, academic_year_id)
    slots = list_slots(
        db,
        program_id=program_id,
        semester=semester,
        section=section,
        academic_year_id=year.id,
        week_number=week_number,
    )

    definitions: list[TimeSlotDefinition] = list_definitions(db)
    if definitions:
        columns = [(item.slot_index, item.is_break, format_time_label(item)) for item in definitions]
    else:
        columns = [(index, False, None) for index in sorted({slot.slot_index for slot in slots})]

    span_sizes: dict[str, int] = defaultdict(int)
    by_cell: dict[tuple[int, int], list[RoutineSlot]] = defaultdict(list)
    for slot in slots:
        by_cell[(slot.day_index, slot.slot_index)].append(slot)
        if slot.span_id:
            span_sizes[slot.span_id] += 1

    days = []
    for day_index in get_settings().working_days:
        cells = []
        for slot_index, is_break_period, label in columns:
            cell_slots = by_cell.get((day_index, slot_index), [])
            cells.append(
                {
                    "slot_index": slot_index,
                    "is_break_period": is_break_period,
                    "time_label": label,
                    "slots": cell_slots,
                    "span_length": {
                        slot.id: span_sizes[slot.span_id]
                        for slot in cell_slots
                        if slot.span_id and slot.span_master
                    },
                }
            )
        days.append({"day_index": day_index, "cells": cells})

    return {
        "program_id": program_id,
        "semester": semester,
        "section": section.upper(),
        "academic_year_id": year.id,
        "week_number": week_number,
        "total_slots": len(slots),
        "days": days,
    }

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.conflict import (
    ConflictCheckRequest,
    ScanRequest,
    ScheduleConflictReport,
    SweepReport,
    TeacherScheduleConflictGroup,
)
from app.services.conflict_detection import (
    SlotProposal,
    check_schedule_conflicts,
    get_teacher_schedule_conflicts,
    scan_slot_conflicts,
)
from app.services.references import require_teachers, resolve_academic_year

router = APIRouter()


@router.post("/check", response_model=ScheduleConflictReport)
def check_conflicts(payload: ConflictCheckRequest, db: Session = Depends(get_db)) -> ScheduleConflictReport:
    year = resolve_academic_year(db, payload.academic_year_id)
    proposal = SlotProposal(
        day_index=payload.day_index,
        slot_index=payload.slot_index,
        semester=payload.semester,
        teacher_ids=tuple(payload.teacher_ids),
        room_id=payload.room_id,
        academic_year_id=year.id,
        lab_group_id=payload.lab_group_id,
        recurrence=payload.recurrence.to_recurrence() if payload.recurrence else None,
    )
    return check_schedule_conflicts(
        db,
        proposal,
        exclude_slot_id=payload.exclude_slot_id,
        week_number=payload.week_number,
        recurrence_aware=payload.recurrence_aware,
    )


@router.post("/scan", response_model=SweepReport)
def scan_conflicts(payload: ScanRequest, db: Session = Depends(get_db)) -> SweepReport:
    return scan_slot_conflicts(
        db,
        academic_year_id=payload.academic_year_id,
        program_id=payload.program_id,
        semester=payload.semester,
        section=payload.section,
    )


@router.get("/teachers/{teacher_id}", response_model=list[TeacherScheduleConflictGroup])
def teacher_schedule_conflicts(
    teacher_id: str,
    semester: int | None = Query(default=None, ge=1, le=20),
    db: Session = Depends(get_db),
) -> list[TeacherScheduleConflictGroup]:
    require_teachers(db, [teacher_id])
    return get_teacher_schedule_conflicts(db, teacher_id, semester_filter=semester)

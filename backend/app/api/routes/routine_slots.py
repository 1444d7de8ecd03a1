from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.models.routine_slot import ClassType
from app.schemas.routine_slot import (
    BulkInsertResult,
    BulkSlotsRequest,
    CopyRoutineRequest,
    CopyRoutineResult,
    LabGroupSlotsCreate,
    LabGroupSlotsOut,
    RoutineGridOut,
    RoutineSlotCreate,
    RoutineSlotOut,
    RoutineSlotUpdate,
    SpannedSlotCreate,
    SpanOut,
)
from app.services.recurrence import RecurrenceType
from app.services.references import require_slot
from app.services.routine_slots import (
    bulk_insert_slots,
    copy_section_routine,
    create_lab_group_slots,
    create_slot,
    create_spanned_slot,
    delete_span,
    list_slots,
    routine_grid,
    soft_delete_slot,
    update_slot,
)

router = APIRouter()


@router.get("/", response_model=list[RoutineSlotOut])
def list_routine_slots(
    program_id: str | None = Query(default=None, max_length=36),
    semester: int | None = Query(default=None, ge=1, le=20),
    section: str | None = Query(default=None, max_length=10),
    academic_year_id: str | None = Query(default=None, max_length=36),
    teacher_id: str | None = Query(default=None, max_length=36),
    room_id: str | None = Query(default=None, max_length=36),
    class_type: ClassType | None = Query(default=None),
    recurrence_type: RecurrenceType | None = Query(default=None),
    week_number: int | None = Query(default=None, ge=1, le=52),
    db: Session = Depends(get_db),
) -> list[RoutineSlotOut]:
    return list_slots(
        db,
        program_id=program_id,
        semester=semester,
        section=section,
        academic_year_id=academic_year_id,
        teacher_id=teacher_id,
        room_id=room_id,
        class_type=class_type,
        recurrence_type=recurrence_type,
        week_number=week_number,
    )


@router.get("/grid", response_model=RoutineGridOut)
def get_routine_grid(
    program_id: str = Query(max_length=36),
    semester: int = Query(ge=1, le=20),
    section: str = Query(max_length=10),
    academic_year_id: str | None = Query(default=None, max_length=36),
    week_number: int | None = Query(default=None, ge=1, le=52),
    db: Session = Depends(get_db),
) -> RoutineGridOut:
    return routine_grid(
        db,
        program_id=program_id,
        semester=semester,
        section=section,
        academic_year_id=academic_year_id,
        week_number=week_number,
    )


@router.get("/{slot_id}", response_model=RoutineSlotOut)
def get_routine_slot(slot_id: str, db: Session = Depends(get_db)) -> RoutineSlotOut:
    return require_slot(db, slot_id)


@router.post("/", response_model=RoutineSlotOut, status_code=status.HTTP_201_CREATED)
def create_routine_slot(
    payload: RoutineSlotCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> RoutineSlotOut:
    return create_slot(db, payload, actor_id=actor_id)


@router.post("/span", response_model=SpanOut, status_code=status.HTTP_201_CREATED)
def create_spanned_routine_slot(
    payload: SpannedSlotCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> SpanOut:
    slots = create_spanned_slot(db, payload, actor_id=actor_id)
    return {"span_id": slots[0].span_id, "slots": slots}


@router.post("/lab-groups", response_model=LabGroupSlotsOut, status_code=status.HTTP_201_CREATED)
def create_lab_group_routine_slots(
    payload: LabGroupSlotsCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> LabGroupSlotsOut:
    lab_group_id, spans = create_lab_group_slots(db, payload, actor_id=actor_id)
    return {
        "lab_group_id": lab_group_id,
        "spans": [{"span_id": span[0].span_id, "slots": span} for span in spans],
    }


@router.post("/bulk", response_model=BulkInsertResult, status_code=status.HTTP_201_CREATED)
def bulk_insert_routine_slots(
    payload: BulkSlotsRequest,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> BulkInsertResult:
    slots, sweep = bulk_insert_slots(db, payload.slots, actor_id=actor_id)
    return {"inserted": len(slots), "slots": slots, "sweep": sweep}


@router.post("/copy", response_model=CopyRoutineResult, status_code=status.HTTP_201_CREATED)
def copy_routine(
    payload: CopyRoutineRequest,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> CopyRoutineResult:
    slots, archived, version, sweep = copy_section_routine(db, payload, actor_id=actor_id)
    return {"copied": len(slots), "archived": archived, "version": version, "slots": slots, "sweep": sweep}


@router.put("/{slot_id}", response_model=list[RoutineSlotOut])
def update_routine_slot(
    slot_id: str,
    payload: RoutineSlotUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> list[RoutineSlotOut]:
    return update_slot(db, slot_id, payload, actor_id=actor_id)


@router.delete("/spans/{span_id}")
def delete_routine_span(
    span_id: str,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> dict:
    removed = delete_span(db, span_id, actor_id=actor_id)
    return {"success": True, "removed": removed}


@router.delete("/{slot_id}")
def delete_routine_slot(
    slot_id: str,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> dict:
    deactivated = soft_delete_slot(db, slot_id, actor_id=actor_id)
    return {"success": True, "deactivated": [slot.id for slot in deactivated]}

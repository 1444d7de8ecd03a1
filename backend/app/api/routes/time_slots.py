from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.models.time_slot import TimeSlotDefinition
from app.schemas.time_slot import TimeSlotCreate, TimeSlotOut, TimeSlotUpdate, parse_time_to_minutes
from app.services.audit import log_activity
from app.services.display import refresh_displays_for_time_slot
from app.services.time_grid import list_definitions

router = APIRouter()


@router.get("/", response_model=list[TimeSlotOut])
def list_time_slots(db: Session = Depends(get_db)) -> list[TimeSlotOut]:
    return list_definitions(db)


@router.post("/", response_model=TimeSlotOut, status_code=status.HTTP_201_CREATED)
def create_time_slot(
    payload: TimeSlotCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> TimeSlotOut:
    if db.get(TimeSlotDefinition, payload.slot_index) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slot index already defined")
    definition = TimeSlotDefinition(**payload.model_dump())
    db.add(definition)
    log_activity(
        db,
        actor_id=actor_id,
        action="time_slot.create",
        entity_type="time_slot",
        entity_id=str(payload.slot_index),
    )
    db.commit()
    db.refresh(definition)
    return definition


@router.put("/{slot_index}", response_model=TimeSlotOut)
def update_time_slot(
    slot_index: int,
    payload: TimeSlotUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> TimeSlotOut:
    definition = db.get(TimeSlotDefinition, slot_index)
    if definition is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Time slot not found")

    data = payload.model_dump(exclude_unset=True)
    start_time = data.get("start_time", definition.start_time)
    end_time = data.get("end_time", definition.end_time)
    if parse_time_to_minutes(end_time) <= parse_time_to_minutes(start_time):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end_time must be after start_time")

    for key, value in data.items():
        setattr(definition, key, value)
    if {"start_time", "end_time"} & data.keys():
        refresh_displays_for_time_slot(db, slot_index)
    if data:
        log_activity(
            db,
            actor_id=actor_id,
            action="time_slot.update",
            entity_type="time_slot",
            entity_id=str(slot_index),
            details={"fields": sorted(data.keys())},
        )
    db.commit()
    db.refresh(definition)
    return definition

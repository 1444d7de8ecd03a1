from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.models.room import Room
from app.schemas.room import RoomCreate, RoomOut, RoomUpdate
from app.services.audit import log_activity
from app.services.display import refresh_displays_for_room

router = APIRouter()


@router.get("/", response_model=list[RoomOut])
def list_rooms(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[RoomOut]:
    query = select(Room)
    if not include_inactive:
        query = query.where(Room.is_active.is_(True))
    return list(db.execute(query.order_by(Room.name.asc())).scalars())


@router.post("/", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> RoomOut:
    existing = db.execute(select(Room).where(Room.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room name already exists")
    room = Room(**payload.model_dump())
    db.add(room)
    db.flush()
    log_activity(db, actor_id=actor_id, action="room.create", entity_type="room", entity_id=room.id)
    db.commit()
    db.refresh(room)
    return room


@router.put("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: str,
    payload: RoomUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> RoomOut:
    room = db.get(Room, room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")

    data = payload.model_dump(exclude_unset=True)
    if "name" in data:
        existing = db.execute(select(Room).where(Room.name == data["name"], Room.id != room_id)).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room name already exists")

    for key, value in data.items():
        setattr(room, key, value)
    if "name" in data:
        refresh_displays_for_room(db, room.id)
    if data:
        log_activity(
            db,
            actor_id=actor_id,
            action="room.update",
            entity_type="room",
            entity_id=room.id,
            details={"fields": sorted(data.keys())},
        )
    db.commit()
    db.refresh(room)
    return room

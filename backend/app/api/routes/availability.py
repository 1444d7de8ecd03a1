from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.conflict import AvailableRoomOut, AvailableTeacherOut
from app.services.availability import get_available_rooms, get_available_teachers
from app.services.references import resolve_academic_year

router = APIRouter()


@router.get("/teachers", response_model=list[AvailableTeacherOut])
def available_teachers(
    day_index: int = Query(ge=0, le=6),
    slot_index: int = Query(ge=0, le=100),
    semester: int = Query(ge=1, le=20),
    exclude_ids: list[str] | None = Query(default=None),
    academic_year_id: str | None = Query(default=None, max_length=36),
    lab_group_id: str | None = Query(default=None, max_length=36),
    week_number: int | None = Query(default=None, ge=1, le=52),
    db: Session = Depends(get_db),
) -> list[AvailableTeacherOut]:
    year = resolve_academic_year(db, academic_year_id)
    return get_available_teachers(
        db,
        day_index=day_index,
        slot_index=slot_index,
        semester=semester,
        exclude_ids=exclude_ids or [],
        academic_year_id=year.id,
        lab_group_id=lab_group_id,
        week_number=week_number,
    )


@router.get("/rooms", response_model=list[AvailableRoomOut])
def available_rooms(
    day_index: int = Query(ge=0, le=6),
    slot_index: int = Query(ge=0, le=100),
    semester: int = Query(ge=1, le=20),
    exclude_ids: list[str] | None = Query(default=None),
    academic_year_id: str | None = Query(default=None, max_length=36),
    lab_group_id: str | None = Query(default=None, max_length=36),
    week_number: int | None = Query(default=None, ge=1, le=52),
    db: Session = Depends(get_db),
) -> list[AvailableRoomOut]:
    year = resolve_academic_year(db, academic_year_id)
    return get_available_rooms(
        db,
        day_index=day_index,
        slot_index=slot_index,
        semester=semester,
        exclude_ids=exclude_ids or [],
        academic_year_id=year.id,
        lab_group_id=lab_group_id,
        week_number=week_number,
    )

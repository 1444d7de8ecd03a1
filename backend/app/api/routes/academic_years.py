from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.models.academic_year import AcademicYear
from app.schemas.academic_year import AcademicYearCreate, AcademicYearOut, AcademicYearUpdate
from app.services.audit import log_activity

router = APIRouter()


def _clear_current_flag(db: Session, *, keep_id: str | None = None) -> None:
    statement = update(AcademicYear).where(AcademicYear.is_current.is_(True))
    if keep_id:
        statement = statement.where(AcademicYear.id != keep_id)
    db.execute(statement.values(is_current=False))


@router.get("/", response_model=list[AcademicYearOut])
def list_academic_years(db: Session = Depends(get_db)) -> list[AcademicYearOut]:
    return list(db.execute(select(AcademicYear).order_by(AcademicYear.title.desc())).scalars())


@router.post("/", response_model=AcademicYearOut, status_code=status.HTTP_201_CREATED)
def create_academic_year(
    payload: AcademicYearCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> AcademicYearOut:
    existing = db.execute(select(AcademicYear).where(AcademicYear.title == payload.title)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Academic year already exists")
    if payload.is_current:
        _clear_current_flag(db)
    year = AcademicYear(**payload.model_dump())
    db.add(year)
    db.flush()
    log_activity(db, actor_id=actor_id, action="academic_year.create", entity_type="academic_year", entity_id=year.id)
    db.commit()
    db.refresh(year)
    return year


@router.put("/{academic_year_id}", response_model=AcademicYearOut)
def update_academic_year(
    academic_year_id: str,
    payload: AcademicYearUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> AcademicYearOut:
    year = db.get(AcademicYear, academic_year_id)
    if year is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Academic year not found")
    if payload.is_current is not None:
        if payload.is_current:
            _clear_current_flag(db, keep_id=year.id)
        year.is_current = payload.is_current
        log_activity(
            db,
            actor_id=actor_id,
            action="academic_year.update",
            entity_type="academic_year",
            entity_id=year.id,
            details={"is_current": payload.is_current},
        )
    db.commit()
    db.refresh(year)
    return year

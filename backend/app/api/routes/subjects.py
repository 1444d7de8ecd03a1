from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.models.subject import Subject
from app.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from app.services.audit import log_activity
from app.services.display import refresh_displays_for_subject
from app.services.references import require_program

router = APIRouter()


@router.get("/", response_model=list[SubjectOut])
def list_subjects(
    program_id: str | None = Query(default=None, max_length=36),
    semester: int | None = Query(default=None, ge=1, le=20),
    db: Session = Depends(get_db),
) -> list[SubjectOut]:
    query = select(Subject)
    if program_id:
        query = query.where(Subject.program_id == program_id)
    if semester is not None:
        query = query.where(Subject.semester == semester)
    return list(db.execute(query.order_by(Subject.code.asc())).scalars())


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> SubjectOut:
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    if payload.program_id:
        require_program(db, payload.program_id)
    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.flush()
    log_activity(db, actor_id=actor_id, action="subject.create", entity_type="subject", entity_id=subject.id)
    db.commit()
    db.refresh(subject)
    return subject


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")

    data = payload.model_dump(exclude_unset=True)
    if "code" in data:
        existing = db.execute(
            select(Subject).where(Subject.code == data["code"], Subject.id != subject_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    if data.get("program_id"):
        require_program(db, data["program_id"])

    for key, value in data.items():
        setattr(subject, key, value)
    if {"code", "name"} & data.keys():
        refresh_displays_for_subject(db, subject.id)
    if data:
        log_activity(
            db,
            actor_id=actor_id,
            action="subject.update",
            entity_type="subject",
            entity_id=subject.id,
            details={"fields": sorted(data.keys())},
        )
    db.commit()
    db.refresh(subject)
    return subject

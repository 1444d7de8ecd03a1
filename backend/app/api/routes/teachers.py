from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.models.teacher import Teacher
from app.schemas.teacher import TeacherCreate, TeacherOut, TeacherUpdate
from app.services.audit import log_activity
from app.services.display import refresh_displays_for_teacher

router = APIRouter()


@router.get("/", response_model=list[TeacherOut])
def list_teachers(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[TeacherOut]:
    query = select(Teacher)
    if not include_inactive:
        query = query.where(Teacher.is_active.is_(True))
    return list(db.execute(query.order_by(Teacher.full_name.asc())).scalars())


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> TeacherOut:
    email = str(payload.email).lower()
    existing = db.execute(select(Teacher).where(Teacher.email == email)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")
    teacher = Teacher(**{**payload.model_dump(), "email": email})
    db.add(teacher)
    db.flush()
    log_activity(db, actor_id=actor_id, action="teacher.create", entity_type="teacher", entity_id=teacher.id)
    db.commit()
    db.refresh(teacher)
    return teacher


@router.put("/{teacher_id}", response_model=TeacherOut)
def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")

    data = payload.model_dump(exclude_unset=True)
    if "email" in data:
        data["email"] = str(data["email"]).lower()
        existing = db.execute(
            select(Teacher).where(Teacher.email == data["email"], Teacher.id != teacher_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")

    for key, value in data.items():
        setattr(teacher, key, value)
    if {"full_name", "short_name"} & data.keys():
        refresh_displays_for_teacher(db, teacher.id)
    if data:
        log_activity(
            db,
            actor_id=actor_id,
            action="teacher.update",
            entity_type="teacher",
            entity_id=teacher.id,
            details={"fields": sorted(data.keys())},
        )
    db.commit()
    db.refresh(teacher)
    return teacher

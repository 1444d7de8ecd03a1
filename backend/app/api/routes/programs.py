from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_actor_id, get_db
from app.models.program import Program
from app.schemas.program import ProgramCreate, ProgramOut, ProgramUpdate
from app.services.audit import log_activity
from app.services.display import refresh_displays_for_program

router = APIRouter()


@router.get("/", response_model=list[ProgramOut])
def list_programs(db: Session = Depends(get_db)) -> list[ProgramOut]:
    return list(db.execute(select(Program).order_by(Program.code.asc())).scalars())


@router.post("/", response_model=ProgramOut, status_code=status.HTTP_201_CREATED)
def create_program(
    payload: ProgramCreate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> ProgramOut:
    existing = db.execute(select(Program).where(Program.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Program code already exists")
    program = Program(**payload.model_dump())
    db.add(program)
    db.flush()
    log_activity(db, actor_id=actor_id, action="program.create", entity_type="program", entity_id=program.id)
    db.commit()
    db.refresh(program)
    return program


@router.put("/{program_id}", response_model=ProgramOut)
def update_program(
    program_id: str,
    payload: ProgramUpdate,
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> ProgramOut:
    program = db.get(Program, program_id)
    if program is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program not found")

    data = payload.model_dump(exclude_unset=True)
    if "code" in data:
        existing = db.execute(
            select(Program).where(Program.code == data["code"], Program.id != program_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Program code already exists")

    for key, value in data.items():
        setattr(program, key, value)
    if "code" in data:
        refresh_displays_for_program(db, program.id)
    if data:
        log_activity(
            db,
            actor_id=actor_id,
            action="program.update",
            entity_type="program",
            entity_id=program.id,
            details={"fields": sorted(data.keys())},
        )
    db.commit()
    db.refresh(program)
    return program

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db import get_db
from app.deps import get_current_user
from app.models.specialty import Specialty
from app.models.user import User
from app.schemas.professionals import SpecialtyOut

router = APIRouter(prefix="/specialties", tags=["specialties"])


@router.get("", response_model=list[SpecialtyOut])
def list_specialties(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    rows = db.query(Specialty).order_by(Specialty.name.asc()).all()
    return [SpecialtyOut(id=s.id, name=s.name) for s in rows]


@router.get("/{specialty_id}", response_model=SpecialtyOut)
def get_specialty(
    specialty_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    s = db.get(Specialty, specialty_id)
    if not s:
        raise HTTPException(404, "Especialidade não encontrada")
    return SpecialtyOut(id=s.id, name=s.name)

# app/api/routes/professionals.py
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.deps import get_current_user
from app.models.professional import Professional
from app.models.user import User
from app.schemas.professionals import CurrentProfessionalOut, ProfessionalOut
from app.services.current_professional import resolve_current_professional
from app.services.procedures import list_professionals_admin
from app.services.rpc import unwrap

router = APIRouter(prefix="/professionals", tags=["professionals"])


@router.get("", response_model=list[ProfessionalOut])
def list_professionals(
    current_user: Annotated[User, Depends(get_current_user)],
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
):
    return unwrap(
        "list_professionals_admin",
        list_professionals_admin(db, include_inactive=include_inactive),
        ProfessionalOut,
    )


@router.get("/me", response_model=CurrentProfessionalOut)
def get_current_professional(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    p = resolve_current_professional(db, current_user)
    return CurrentProfessionalOut(id=p.id, name=p.name, specialty=p.specialty)


@router.get("/{professional_id}", response_model=ProfessionalOut)
def get_professional(
    professional_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    p = db.get(Professional, professional_id)
    if not p:
        raise HTTPException(404, "Profissional não encontrado")
    return ProfessionalOut(
        id=p.id,
        name=p.name,
        specialty_id=p.specialty_id,
        specialty=p.specialty.name if p.specialty else None,
        is_active=p.is_active,
        user_id=p.user_id,
    )

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.deps import get_current_user
from app.models.user import User
from app.schemas.reports import FullAppointment
from app.services.procedures import list_full_appointments
from app.services.rpc import unwrap

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/appointments", response_model=list[FullAppointment])
def full_appointments(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    professional_id: int | None = Query(None, ge=1),
    client_id: int | None = Query(None, ge=1),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    include_cancelled: bool = Query(True),
):
    """Agendamentos com cliente, profissional e data já quebrada para exibição."""
    if date_from and date_to and date_to < date_from:
        raise HTTPException(400, "date_to deve ser posterior a date_from")
    return unwrap(
        "list_full_appointments",
        list_full_appointments(
            db,
            professional_id=professional_id,
            client_id=client_id,
            date_from=date_from,
            date_to=date_to,
            include_cancelled=include_cancelled,
        ),
        FullAppointment,
    )

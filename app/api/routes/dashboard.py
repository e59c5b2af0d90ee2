from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.db import get_db
from app.deps import get_current_user
from app.models.appointment import Appointment
from app.models.client import Client
from app.models.user import User
from app.schemas.reports import DashboardStatsOut
from app.utils.tz import today_local

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsOut)
def stats(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    active = Appointment.cancelled == False  # noqa: E712
    total = db.scalar(select(func.count(Appointment.id)).where(active)) or 0
    today = (
        db.scalar(
            select(func.count(Appointment.id)).where(
                active, Appointment.date == today_local()
            )
        )
        or 0
    )
    clients = db.scalar(select(func.count(Client.id))) or 0
    return DashboardStatsOut(
        total_appointments=total, appointments_today=today, total_clients=clients
    )

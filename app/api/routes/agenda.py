from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.deps import get_agenda, get_agenda_registry, get_current_user
from app.models.client import Client
from app.models.user import User
from app.schemas.appointments import (
    AppointmentCreateIn,
    AppointmentOut,
    AppointmentUpdateIn,
    ConflictCheckIn,
    ConflictCheckOut,
    SlotsOut,
    WeekOut,
)
from app.services.agenda_sessions import AgendaRegistry
from app.services.week_cache import WeeklyAgenda

router = APIRouter(prefix="/agenda", tags=["agenda"])

AgendaDep = Annotated[WeeklyAgenda, Depends(get_agenda)]


def _week_out(agenda: WeeklyAgenda) -> WeekOut:
    return WeekOut(
        week_key=agenda.current_week_key,
        reference_date=agenda.reference_date,
        days=agenda.days,
        appointments=agenda.appointments,
        error=agenda.error,
    )


def _store_failure(agenda: WeeklyAgenda) -> HTTPException:
    return HTTPException(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        agenda.error or "Falha ao acessar o armazenamento",
    )


@router.get("/week", response_model=WeekOut)
def get_week(
    agenda: AgendaDep,
    ref: date | None = Query(
        None,
        alias="date",
        description="Qualquer data da semana desejada (YYYY-MM-DD). Omitida: mantém a atual.",
    ),
):
    if ref is not None:
        agenda.set_reference_date(ref)
    else:
        agenda.load_current_week()
    return _week_out(agenda)


@router.post("/week/next", response_model=WeekOut)
def next_week(agenda: AgendaDep):
    agenda.next_week()
    return _week_out(agenda)


@router.post("/week/previous", response_model=WeekOut)
def previous_week(agenda: AgendaDep):
    agenda.previous_week()
    return _week_out(agenda)


@router.get("/slots", response_model=SlotsOut)
def get_slots(
    agenda: AgendaDep,
    day: date = Query(..., alias="date"),
    slot_minutes: int = Query(60, ge=5, le=240),
    start_times: list[str] | None = Query(
        None, description="Horários candidatos HH:MM; padrão 08:00..22:00"
    ),
    exclude_id: int | None = Query(None, ge=1),
):
    return SlotsOut(
        date=day,
        slot_minutes=slot_minutes,
        slots=agenda.slots(day, start_times, slot_minutes, exclude_id),
    )


@router.post("/check", response_model=ConflictCheckOut)
def check_conflict(payload: ConflictCheckIn, agenda: AgendaDep):
    conflict = agenda.check_conflict(
        payload.date, payload.start_time, payload.end_time, payload.exclude_id
    )
    return ConflictCheckOut(
        ok=not conflict,
        date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        reason="Horário já ocupado." if conflict else None,
    )


@router.post("/appointments", response_model=AppointmentOut, status_code=201)
def create_appointment(
    payload: AppointmentCreateIn,
    agenda: AgendaDep,
    db: Session = Depends(get_db),
):
    if payload.client_id is not None and db.get(Client, payload.client_id) is None:
        raise HTTPException(404, "Cliente não encontrado")
    row = agenda.insert(payload)
    if row is None:
        raise _store_failure(agenda)
    return row


@router.patch("/appointments/{appointment_id}", response_model=AppointmentOut)
def edit_appointment(
    appointment_id: int, payload: AppointmentUpdateIn, agenda: AgendaDep
):
    row = agenda.edit(appointment_id, payload)
    if row is None:
        raise _store_failure(agenda)
    return row


@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentOut)
def cancel_appointment(appointment_id: int, agenda: AgendaDep):
    row = agenda.cancel(appointment_id)
    if row is None:
        raise _store_failure(agenda)
    return row


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
def close_session(
    current_user: Annotated[User, Depends(get_current_user)],
    registry: Annotated[AgendaRegistry, Depends(get_agenda_registry)],
):
    registry.close(current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

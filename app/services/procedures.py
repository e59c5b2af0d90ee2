"""Procedimentos de leitura agregada (listagem admin e relatório completo)."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.logging import get_logger
from app.models.appointment import Appointment
from app.models.professional import Professional
from app.services.time_conflicts import hhmm

log = get_logger("rpc")


def _ok(data: list[dict[str, Any]], message: str) -> dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def _fail(procedure: str, exc: Exception) -> dict[str, Any]:
    log.error("rpc.procedure_failed", procedure=procedure, error=str(exc))
    return {"success": False, "message": f"Erro em {procedure}: {exc}", "data": []}


def _professional_row(p: Professional) -> dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "specialty_id": p.specialty_id,
        "specialty": p.specialty.name if p.specialty else None,
        "is_active": p.is_active,
        "user_id": p.user_id,
    }


def list_professionals_admin(db: Session, include_inactive: bool = False) -> dict:
    try:
        q = select(Professional).options(joinedload(Professional.specialty))
        if not include_inactive:
            q = q.where(Professional.is_active == True)  # noqa: E712
        rows = db.scalars(q.order_by(Professional.name.asc(), Professional.id.asc()))
        data = [_professional_row(p) for p in rows.unique()]
    except SQLAlchemyError as exc:
        return _fail("list_professionals_admin", exc)
    return _ok(data, "Profissionais listados")


def list_full_appointments(
    db: Session,
    *,
    professional_id: int | None = None,
    client_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    include_cancelled: bool = True,
) -> dict:
    try:
        q = select(Appointment).options(
            joinedload(Appointment.client),
            joinedload(Appointment.professional).joinedload(Professional.specialty),
        )
        if professional_id:
            q = q.where(Appointment.professional_id == professional_id)
        if client_id:
            q = q.where(Appointment.client_id == client_id)
        if date_from:
            q = q.where(Appointment.date >= date_from)
        if date_to:
            q = q.where(Appointment.date <= date_to)
        if not include_cancelled:
            q = q.where(Appointment.cancelled == False)  # noqa: E712
        q = q.order_by(Appointment.date.desc(), Appointment.start_time.desc())

        data = []
        for ap in db.scalars(q).unique():
            c = ap.client
            data.append(
                {
                    "id": ap.id,
                    "created_at": ap.created_at,
                    "professional_id": ap.professional_id,
                    "client_id": ap.client_id,
                    "user_id": ap.user_id,
                    "date": ap.date,
                    "start_time": ap.start_time,
                    "end_time": ap.end_time,
                    "title": ap.title,
                    "description": ap.description,
                    "cancelled": bool(ap.cancelled),
                    "cancelled_at": ap.cancelled_at,
                    "color": ap.color,
                    "client": (
                        {
                            "id": c.id,
                            "cpf": c.cpf,
                            "name": c.name,
                            "address": c.address,
                            "email": c.email,
                            "phone": c.phone,
                        }
                        if c
                        else None
                    ),
                    "professional": (
                        _professional_row(ap.professional) if ap.professional else None
                    ),
                    "formatted_date": {
                        "day": ap.date.day,
                        "month": ap.date.month,
                        "year": ap.date.year,
                        "start_time": hhmm(ap.start_time),
                        "end_time": hhmm(ap.end_time),
                    },
                }
            )
    except SQLAlchemyError as exc:
        return _fail("list_full_appointments", exc)
    return _ok(data, "Agendamentos listados")

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel


class ReportClient(BaseModel):
    id: int
    cpf: str
    name: str | None = None
    address: str | None = None
    email: str
    phone: str | None = None


class ReportProfessional(BaseModel):
    id: int
    name: str
    specialty: str | None = None
    specialty_id: int | None = None
    user_id: int | None = None


class FormattedDate(BaseModel):
    day: int
    month: int
    year: int
    start_time: str  # "HH:MM"
    end_time: str


class FullAppointment(BaseModel):
    id: int
    created_at: dt.datetime
    professional_id: int | None = None
    client_id: int | None = None
    user_id: int | None = None
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    title: str
    description: str | None = None
    cancelled: bool
    cancelled_at: dt.datetime | None = None
    color: str | None = None
    client: ReportClient | None = None
    professional: ReportProfessional | None = None
    formatted_date: FormattedDate


class DashboardStatsOut(BaseModel):
    total_appointments: int
    appointments_today: int
    total_clients: int

from __future__ import annotations

import datetime as dt

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    constr,
    field_validator,
    model_validator,
)

TimeStr = constr(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")  # "HH:MM", 00:00 a 23:59
ColorStr = constr(max_length=20)


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: dt.datetime
    user_id: int | None = None
    professional_id: int | None = None
    client_id: int | None = None
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    title: str
    description: str | None = None
    cancelled: bool | None = False
    cancelled_at: dt.datetime | None = None
    color: str | None = None


class AppointmentCreateIn(BaseModel):
    client_id: int | None = Field(None, ge=1)
    date: dt.date
    start_time: TimeStr  # type: ignore # local HH:MM
    end_time: TimeStr  # type: ignore
    title: constr(min_length=1, max_length=160)
    description: str | None = None
    color: ColorStr | None = None  # type: ignore

    @model_validator(mode="after")
    def _check_times(self):
        sh, sm = map(int, self.start_time.split(":"))
        eh, em = map(int, self.end_time.split(":"))
        if (eh, em) <= (sh, sm):
            raise ValueError("end_time deve ser maior que start_time")
        return self


class AppointmentUpdateIn(BaseModel):
    """Só título, descrição e cor podem ser editados."""

    title: constr(min_length=1, max_length=160) | None = None
    description: str | None = None
    color: ColorStr | None = None  # type: ignore

    @field_validator("title")
    @classmethod
    def _title_not_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("title não pode ser nulo")
        return v


class AppointmentInsert(BaseModel):
    """Linha pronta para o armazenamento (dono e profissional já resolvidos)."""

    user_id: int
    professional_id: int
    client_id: int | None = None
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    title: str
    description: str | None = None
    color: str | None = None


class WeekOut(BaseModel):
    week_key: int
    reference_date: dt.date
    days: list[dt.date]  # sempre 7 posições (dom → sáb)
    appointments: list[AppointmentOut]
    error: str | None = None  # falha na busca: lista vazia + mensagem


class SlotOut(BaseModel):
    start: str
    end: str
    available: bool
    conflict: bool


class SlotsOut(BaseModel):
    date: dt.date
    slot_minutes: int
    slots: list[SlotOut]


class ConflictCheckIn(BaseModel):
    date: dt.date
    start_time: TimeStr  # type: ignore
    end_time: TimeStr  # type: ignore
    exclude_id: int | None = Field(None, ge=1, description="Agendamento em edição")


class ConflictCheckOut(BaseModel):
    ok: bool
    date: dt.date
    start_time: str
    end_time: str
    reason: str | None = None  # quando ok=false

"""
Detecção de conflitos de horário entre agendamentos.

Os horários são comparados como relógio de parede ("HH:MM"); segundos e
offset gravados no banco são ignorados. Intervalos são semiabertos
[início, fim): encostar o fim de um no início do outro não é conflito.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, time
from typing import Protocol

from app.core.settings import settings
from app.schemas.appointments import SlotOut


class ScheduledItem(Protocol):
    id: int
    date: date
    start_time: time
    end_time: time
    cancelled: bool | None


def time_to_minutes(value: str) -> int:
    """Converte "HH:MM" em minutos desde meia-noite; entrada malformada vale 0."""
    parts = value.split(":") if value else []
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return 0
    try:
        return int(parts[0]) * 60 + int(parts[1])
    except ValueError:
        return 0


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def hhmm(value: time | str | None) -> str | None:
    """Normaliza time/"HH:MM:SS+TZ" para "HH:MM"."""
    if value is None:
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value[:5]


def is_valid_interval(start: str, end: str) -> bool:
    return time_to_minutes(start) < time_to_minutes(end)


def intervals_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    # intervalo [start, end): fim exclusivo
    return time_to_minutes(start_a) < time_to_minutes(end_b) and time_to_minutes(
        end_a
    ) > time_to_minutes(start_b)


def has_conflict(
    day: date,
    start: str,
    end: str,
    existing: Iterable[ScheduledItem],
    exclude_id: int | None = None,
) -> bool:
    """True se algum agendamento ativo do mesmo dia colide com [start, end).

    `exclude_id` pula o próprio agendamento ao revalidar uma edição.
    """
    for appt in existing:
        if exclude_id is not None and appt.id == exclude_id:
            continue
        if appt.cancelled:
            continue
        if appt.date != day:
            continue
        if appt.start_time is None or appt.end_time is None:
            continue
        if intervals_overlap(start, end, hhmm(appt.start_time), hhmm(appt.end_time)):
            return True
    return False


def default_start_times(
    first_hour: int | None = None, last_hour: int | None = None
) -> list[str]:
    first = settings.AGENDA_FIRST_HOUR if first_hour is None else first_hour
    last = settings.AGENDA_LAST_HOUR if last_hour is None else last_hour
    return [f"{h:02d}:00" for h in range(first, last + 1)]


def available_slots(
    day: date,
    existing: Sequence[ScheduledItem],
    start_times: Sequence[str] | None = None,
    slot_minutes: int | None = None,
    exclude_id: int | None = None,
) -> list[SlotOut]:
    candidates = list(start_times) if start_times else default_start_times()
    duration = settings.AGENDA_SLOT_MINUTES if slot_minutes is None else slot_minutes

    slots: list[SlotOut] = []
    for start in candidates:
        end = minutes_to_time(time_to_minutes(start) + duration)
        conflict = has_conflict(day, start, end, existing, exclude_id)
        slots.append(
            SlotOut(start=start, end=end, available=not conflict, conflict=conflict)
        )
    return slots

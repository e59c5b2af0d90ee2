from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.core.settings import settings

DEFAULT_TZ = settings.agenda_tz


def _local_date(reference: date | datetime, tz: ZoneInfo) -> date:
    if isinstance(reference, datetime):
        if reference.tzinfo is not None:
            reference = reference.astimezone(tz)
        return reference.date()
    return reference


def sunday_of_week(reference: date | datetime, tz: ZoneInfo = DEFAULT_TZ) -> datetime:
    """Retorna o início (00:00) do domingo da semana de `reference`, na TZ dada.

    Datetimes aware são convertidos para a TZ antes; naive são tratados como locais.
    """
    d = _local_date(reference, tz)
    days_since_sunday = (d.weekday() + 1) % 7  # Sunday=0 .. Saturday=6
    sunday = d - timedelta(days=days_since_sunday)
    return datetime.combine(sunday, time.min).replace(tzinfo=tz)


def week_key(reference: date | datetime, tz: ZoneInfo = DEFAULT_TZ) -> int:
    """Timestamp (segundos) do domingo 00:00 da semana; chave dos buckets."""
    return int(sunday_of_week(reference, tz).timestamp())


def week_days(reference: date | datetime, tz: ZoneInfo = DEFAULT_TZ) -> list[date]:
    """Os 7 dias (domingo a sábado) da semana de `reference`."""
    start = sunday_of_week(reference, tz).date()
    return [start + timedelta(days=i) for i in range(7)]


def week_bounds_local(
    reference: date | datetime, tz: ZoneInfo = DEFAULT_TZ
) -> tuple[datetime, datetime]:
    start_local = sunday_of_week(reference, tz)
    end_local = datetime.combine(
        start_local.date() + timedelta(days=7), time.min
    ).replace(tzinfo=tz)
    return start_local, end_local

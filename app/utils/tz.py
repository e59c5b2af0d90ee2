from __future__ import annotations

from datetime import UTC, date, datetime, time, timezone
from zoneinfo import ZoneInfo

from app.core.settings import settings

AGENDA_TZ = settings.agenda_tz


def now_local(tz: ZoneInfo | None = None) -> datetime:
    """Agora, aware, no fuso da agenda (usado no carimbo de cancelamento)."""
    return datetime.now(UTC).astimezone(tz or AGENDA_TZ)


def today_local(tz: ZoneInfo | None = None) -> date:
    return now_local(tz).date()


def to_local(dt_utc: datetime, tz: ZoneInfo | None = None) -> datetime:
    """
    Converte um datetime aware para a TZ local (aware).
    """
    if dt_utc.tzinfo is None:
        raise ValueError("Esperava datetime timezone-aware.")
    return dt_utc.astimezone(tz or AGENDA_TZ)


def iso_utc(dt: datetime) -> str:
    """
    Serializa em ISO 8601 sempre em UTC com sufixo 'Z'.
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Datetime naive recebido. Sempre use datetimes timezone-aware."
        )
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def local_time(day: date, hhmm: str, tz: ZoneInfo | None = None) -> time:
    """
    "HH:MM" do dia `day` como time aware com o offset fixo vigente naquela data.
    ZoneInfo não resolve offset em `time` solto, por isso o offset é congelado.
    """
    hour, minute = (int(p) for p in hhmm.split(":"))
    local_dt = datetime.combine(day, time(hour, minute)).replace(tzinfo=tz or AGENDA_TZ)
    return time(hour, minute, tzinfo=timezone(local_dt.utcoffset()))

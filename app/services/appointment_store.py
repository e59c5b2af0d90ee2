from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import date
from typing import Any, Protocol

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import BackingStoreError, ScheduleConflictError
from app.core.logging import get_logger
from app.models.appointment import MUTABLE_FIELDS, Appointment
from app.schemas.appointments import AppointmentInsert, AppointmentOut
from app.utils.tz import now_local

log = get_logger("store")


class AppointmentStore(Protocol):
    """Contrato do armazenamento usado pelo cache semanal."""

    def list_week(
        self, professional_id: int, days: Sequence[date]
    ) -> list[AppointmentOut]: ...

    def list_day(self, professional_id: int, day: date) -> list[AppointmentOut]: ...

    def insert(self, data: AppointmentInsert) -> AppointmentOut: ...

    def update(self, appointment_id: int, fields: dict[str, Any]) -> AppointmentOut: ...

    def cancel(self, appointment_id: int) -> AppointmentOut: ...


class SqlAppointmentStore:
    """Armazenamento via SQLAlchemy; abre uma sessão curta por operação."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, op: str) -> Iterator[Session]:
        db: Session = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            log.error("store.error", op=op, error=str(exc))
            raise BackingStoreError(f"Erro ao acessar agendamentos: {exc}") from exc
        finally:
            db.close()

    def list_week(
        self, professional_id: int, days: Sequence[date]
    ) -> list[AppointmentOut]:
        with self._session("list_week") as db:
            rows = db.scalars(
                select(Appointment)
                .where(
                    and_(
                        Appointment.professional_id == professional_id,
                        Appointment.cancelled == False,  # noqa: E712
                        Appointment.date.in_(list(days)),
                    )
                )
                .order_by(Appointment.date.asc(), Appointment.start_time.asc())
            ).all()
            return [AppointmentOut.model_validate(r) for r in rows]

    def list_day(self, professional_id: int, day: date) -> list[AppointmentOut]:
        """Linhas ativas do dia direto do banco, sem passar pelo cache."""
        return self.list_week(professional_id, [day])

    def insert(self, data: AppointmentInsert) -> AppointmentOut:
        with self._session("insert") as db:
            ap = Appointment(**data.model_dump(), cancelled=False)
            db.add(ap)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                if "unique" in str(e.orig).lower() or getattr(e.orig, "pgcode", None) == "23505":
                    log.warning("store.insert.duplicate_start", date=str(data.date))
                    raise ScheduleConflictError(
                        "Ops, o horário acabou de ser reservado por outra pessoa"
                    ) from e
                raise
            db.refresh(ap)
            log.info("store.insert", appointment_id=ap.id, date=str(ap.date))
            return AppointmentOut.model_validate(ap)

    def _load(self, db: Session, appointment_id: int) -> Appointment:
        ap = db.get(Appointment, appointment_id)
        if ap is None:
            raise BackingStoreError(f"Agendamento {appointment_id} não encontrado")
        return ap

    def update(self, appointment_id: int, fields: dict[str, Any]) -> AppointmentOut:
        with self._session("update") as db:
            ap = self._load(db, appointment_id)
            for name in MUTABLE_FIELDS:
                if name in fields:
                    setattr(ap, name, fields[name])
            db.commit()
            db.refresh(ap)
            return AppointmentOut.model_validate(ap)

    def cancel(self, appointment_id: int) -> AppointmentOut:
        with self._session("cancel") as db:
            ap = self._load(db, appointment_id)
            ap.cancelled = True
            # carimbo no fuso da agenda, não no relógio do servidor
            ap.cancelled_at = now_local()
            db.commit()
            db.refresh(ap)
            log.info("store.cancel", appointment_id=ap.id)
            return AppointmentOut.model_validate(ap)

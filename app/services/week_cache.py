"""
Cache semanal de agendamentos de um profissional.

Cada bucket é indexado pelo timestamp do domingo 00:00 (fuso da agenda) e
guarda apenas agendamentos ativos, ordenados por data e hora de início.
Os buckets pertencem ao profissional (`ProfessionalWeeks`) e são
compartilhados por todas as sessões que agendam com ele; não há expiração.

Leituras de uma semana já carregada não tocam o armazenamento. Inserção,
edição e cancelamento atualizam o bucket afetado depois que o armazenamento
confirma a operação, e republicam a lista corrente quando a semana afetada é
a que está em exibição.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.core.errors import (
    BackingStoreError,
    InvalidIntervalError,
    NotInCacheError,
    OperationInProgressError,
    PreconditionError,
    ScheduleConflictError,
)
from app.core.logging import get_logger
from app.models.appointment import MUTABLE_FIELDS
from app.schemas.appointments import (
    AppointmentCreateIn,
    AppointmentInsert,
    AppointmentOut,
    AppointmentUpdateIn,
    SlotOut,
)
from app.services.appointment_store import AppointmentStore
from app.services.time_conflicts import (
    available_slots,
    has_conflict,
    hhmm,
    is_valid_interval,
)
from app.utils.tz import local_time, today_local
from app.utils.week import DEFAULT_TZ, week_days, week_key

log = get_logger("agenda")

Listener = Callable[[list[AppointmentOut]], None]

CONFLICT_MESSAGE = "Horário conflita com outro agendamento do profissional"


def _sort_key(appt: AppointmentOut) -> tuple[date, str]:
    return appt.date, hhmm(appt.start_time) or ""


class ProfessionalWeeks:
    """Buckets de um profissional, compartilhados entre sessões."""

    def __init__(self) -> None:
        self.buckets: dict[int, list[AppointmentOut]] = {}
        # checagem de conflito + gravação são serializadas por profissional
        self.write_lock = threading.Lock()


class WeeklyAgenda:
    def __init__(
        self,
        store: AppointmentStore,
        *,
        user_id: int | None,
        professional_id: int | None,
        reference_date: date | None = None,
        tz: ZoneInfo = DEFAULT_TZ,
        shared: ProfessionalWeeks | None = None,
    ):
        self._store = store
        self.user_id = user_id
        self.professional_id = professional_id
        self.tz = tz
        self.reference_date: date = reference_date or today_local(tz)

        self._shared = shared or ProfessionalWeeks()
        self._buckets = self._shared.buckets
        self._listeners: list[Listener] = []
        self._insert_guard = threading.Lock()

        # estado observado pela UI
        self.appointments: list[AppointmentOut] = []
        self.loading = False
        self.inserting = False
        self.error: str | None = None

    # ---------- semana corrente / navegação ----------

    @property
    def current_week_key(self) -> int:
        return week_key(self.reference_date, self.tz)

    @property
    def days(self) -> list[date]:
        return week_days(self.reference_date, self.tz)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = list(self.appointments)
        for listener in list(self._listeners):
            listener(snapshot)

    def load_current_week(self) -> list[AppointmentOut]:
        self.appointments = self.get_appointments_for_week(self.reference_date)
        self._publish()
        return self.appointments

    def set_reference_date(self, reference: date | datetime) -> list[AppointmentOut]:
        if isinstance(reference, datetime):
            reference = (
                reference.astimezone(self.tz).date()
                if reference.tzinfo
                else reference.date()
            )
        self.reference_date = reference
        return self.load_current_week()

    def next_week(self) -> list[AppointmentOut]:
        return self.set_reference_date(self.reference_date + timedelta(days=7))

    def previous_week(self) -> list[AppointmentOut]:
        return self.set_reference_date(self.reference_date - timedelta(days=7))

    # ---------- leitura ----------

    def is_cached(self, reference: date | datetime) -> bool:
        return week_key(reference, self.tz) in self._buckets

    def cached_weeks(self) -> list[int]:
        return sorted(self._buckets)

    def invalidate(self, reference: date | datetime | None = None) -> None:
        if reference is None:
            self._buckets.clear()
        else:
            self._buckets.pop(week_key(reference, self.tz), None)

    def _require_professional(self) -> int:
        if not self.professional_id:
            raise PreconditionError("Dados do profissional não disponíveis")
        return self.professional_id

    def _require_user(self) -> int:
        if not self.user_id:
            raise PreconditionError("Usuário não autenticado")
        return self.user_id

    def get_appointments_for_week(
        self, reference: date | datetime
    ) -> list[AppointmentOut]:
        key = week_key(reference, self.tz)
        bucket = self._buckets.get(key)
        if bucket is not None:
            log.debug("agenda.cache.hit", week_key=key)
            return list(bucket)

        professional_id = self._require_professional()
        days = week_days(reference, self.tz)

        self.loading = True
        self.error = None
        try:
            rows = self._store.list_week(professional_id, days)
        except BackingStoreError as exc:
            # sem cache negativo: a próxima chamada tenta de novo
            self.error = exc.message
            log.warning("agenda.week.fetch_failed", week_key=key, error=exc.message)
            return []
        finally:
            self.loading = False

        self._buckets[key] = list(rows)
        log.info("agenda.week.fetch", week_key=key, count=len(rows))
        return list(rows)

    # ---------- conflitos ----------

    def check_conflict(
        self, day: date, start: str, end: str, exclude_id: int | None = None
    ) -> bool:
        if not is_valid_interval(start, end):
            raise InvalidIntervalError("Horário de início deve ser anterior ao fim")
        return has_conflict(
            day, start, end, self._week_for_validation(day), exclude_id
        )

    def slots(
        self,
        day: date,
        start_times: list[str] | None = None,
        slot_minutes: int | None = None,
        exclude_id: int | None = None,
    ) -> list[SlotOut]:
        return available_slots(
            day,
            self._week_for_validation(day),
            start_times,
            slot_minutes,
            exclude_id,
        )

    def _week_for_validation(self, day: date) -> list[AppointmentOut]:
        existing = self.get_appointments_for_week(day)
        if not self.is_cached(day):
            # falha na busca não pode virar "sem conflitos"
            raise BackingStoreError(
                self.error or "Não foi possível carregar a semana para validação"
            )
        return existing

    # ---------- mutações ----------

    def _locate(self, appointment_id: int) -> tuple[int, int]:
        for key, bucket in self._buckets.items():
            for idx, appt in enumerate(bucket):
                if appt.id == appointment_id:
                    return key, idx
        raise NotInCacheError(f"Agendamento {appointment_id} não encontrado")

    def _refresh_if_current(self, key: int) -> None:
        if key == self.current_week_key:
            self.appointments = list(self._buckets.get(key, []))
            self._publish()

    def _place(self, row: AppointmentOut) -> None:
        key = week_key(row.date, self.tz)
        bucket = self._buckets.get(key)
        if bucket is not None:
            bucket.append(row)
            bucket.sort(key=_sort_key)
            self._refresh_if_current(key)
        elif key == self.current_week_key:
            self.invalidate(row.date)
            self.load_current_week()

    def _ensure_free(self, professional_id: int, payload: AppointmentCreateIn) -> None:
        if self.check_conflict(payload.date, payload.start_time, payload.end_time):
            raise ScheduleConflictError(CONFLICT_MESSAGE)
        # o banco é a fonte da verdade: o bucket não enxerga gravações de fora
        fresh = self._store.list_day(professional_id, payload.date)
        if has_conflict(payload.date, payload.start_time, payload.end_time, fresh):
            log.warning("agenda.cache.stale", date=str(payload.date))
            self.invalidate(payload.date)
            raise ScheduleConflictError(CONFLICT_MESSAGE)

    def insert(
        self, payload: AppointmentCreateIn, *, validate: bool = True
    ) -> AppointmentOut | None:
        """Cria o agendamento. `validate=False` pula a checagem de conflito,
        para chamadores que já validaram o horário com `check_conflict`."""
        if not self._insert_guard.acquire(blocking=False):
            raise OperationInProgressError("Já existe um agendamento sendo criado")
        self.inserting = True
        try:
            user_id = self._require_user()
            professional_id = self._require_professional()
            if not is_valid_interval(payload.start_time, payload.end_time):
                raise InvalidIntervalError("Horário de início deve ser anterior ao fim")

            with self._shared.write_lock:
                if validate:
                    self._ensure_free(professional_id, payload)

                self.loading = True
                self.error = None
                try:
                    row = self._store.insert(
                        AppointmentInsert(
                            user_id=user_id,
                            professional_id=professional_id,
                            client_id=payload.client_id,
                            date=payload.date,
                            start_time=local_time(payload.date, payload.start_time, self.tz),
                            end_time=local_time(payload.date, payload.end_time, self.tz),
                            title=payload.title,
                            description=payload.description,
                            color=payload.color,
                        )
                    )
                except BackingStoreError as exc:
                    self.error = exc.message
                    log.warning("agenda.insert_failed", error=exc.message)
                    return None
                finally:
                    self.loading = False

                self._place(row)
            log.info("agenda.insert", appointment_id=row.id, date=str(row.date))
            return row
        finally:
            self.inserting = False
            self._insert_guard.release()

    def edit(
        self, appointment_id: int, changes: AppointmentUpdateIn
    ) -> AppointmentOut | None:
        fields = {
            name: value
            for name, value in changes.model_dump(exclude_unset=True).items()
            if name in MUTABLE_FIELDS
        }
        with self._shared.write_lock:
            key, idx = self._locate(appointment_id)
            original = self._buckets[key][idx]
            if not fields:
                return original

            self.loading = True
            self.error = None
            try:
                row = self._store.update(appointment_id, fields)
            except BackingStoreError as exc:
                self.error = exc.message
                log.warning("agenda.edit_failed", appointment_id=appointment_id)
                return None
            finally:
                self.loading = False

            updated = original.model_copy(
                update={name: getattr(row, name) for name in MUTABLE_FIELDS}
            )
            key, idx = self._locate(appointment_id)
            self._buckets[key][idx] = updated
            self._refresh_if_current(key)
        log.info("agenda.edit", appointment_id=appointment_id, fields=sorted(fields))
        return updated

    def cancel(self, appointment_id: int) -> AppointmentOut | None:
        with self._shared.write_lock:
            self._locate(appointment_id)

            self.loading = True
            self.error = None
            try:
                row = self._store.cancel(appointment_id)
            except BackingStoreError as exc:
                self.error = exc.message
                log.warning("agenda.cancel_failed", appointment_id=appointment_id)
                return None
            finally:
                self.loading = False

            key, idx = self._locate(appointment_id)
            del self._buckets[key][idx]
            self._refresh_if_current(key)
        log.info("agenda.cancel", appointment_id=appointment_id)
        return row

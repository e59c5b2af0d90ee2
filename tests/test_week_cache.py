from datetime import UTC, date, datetime, time

import pytest

from app.core.errors import (
    BackingStoreError,
    InvalidIntervalError,
    NotInCacheError,
    OperationInProgressError,
    PreconditionError,
    ScheduleConflictError,
)
from app.schemas.appointments import (
    AppointmentCreateIn,
    AppointmentOut,
    AppointmentUpdateIn,
)
from app.services.time_conflicts import hhmm
from app.services.agenda_sessions import AgendaRegistry
from app.services.week_cache import ProfessionalWeeks, WeeklyAgenda

PROF_ID = 10
USER_ID = 1
WED = date(2024, 6, 12)
KEY_2024_06_09 = 1717902000


class FakeStore:
    """Armazenamento em memória que conta as chamadas."""

    def __init__(self, rows=()):
        self.rows = {r.id: r for r in rows}
        self.list_calls = 0
        self.update_calls = []
        self.fail_list = False
        self.fail_write = False
        self.day_calls = 0
        self.on_insert = None
        self._next_id = max(self.rows, default=0) + 1

    def list_week(self, professional_id, days):
        self.list_calls += 1
        if self.fail_list:
            raise BackingStoreError("armazenamento fora do ar")
        rows = [
            r
            for r in self.rows.values()
            if r.professional_id == professional_id
            and not r.cancelled
            and r.date in set(days)
        ]
        return sorted(rows, key=lambda r: (r.date, hhmm(r.start_time)))

    def list_day(self, professional_id, day):
        self.day_calls += 1
        if self.fail_list:
            raise BackingStoreError("armazenamento fora do ar")
        rows = [
            r
            for r in self.rows.values()
            if r.professional_id == professional_id and not r.cancelled and r.date == day
        ]
        return sorted(rows, key=lambda r: hhmm(r.start_time))

    def insert(self, data):
        if self.on_insert:
            self.on_insert()
        if self.fail_write:
            raise BackingStoreError("falha ao gravar")
        row = AppointmentOut(
            id=self._next_id,
            created_at=datetime.now(UTC),
            cancelled=False,
            **data.model_dump(),
        )
        self.rows[row.id] = row
        self._next_id += 1
        return row

    def update(self, appointment_id, fields):
        self.update_calls.append(fields)
        if self.fail_write:
            raise BackingStoreError("falha ao gravar")
        row = self.rows[appointment_id].model_copy(update=fields)
        self.rows[appointment_id] = row
        return row

    def cancel(self, appointment_id):
        if self.fail_write:
            raise BackingStoreError("falha ao gravar")
        row = self.rows[appointment_id].model_copy(
            update={"cancelled": True, "cancelled_at": datetime.now(UTC)}
        )
        self.rows[appointment_id] = row
        return row


def _row(id_, day, start, end, title="Sessão", **extra):
    return AppointmentOut(
        id=id_,
        created_at=datetime(2024, 6, 1, tzinfo=UTC),
        user_id=USER_ID,
        professional_id=PROF_ID,
        client_id=None,
        date=day,
        start_time=start,
        end_time=end,
        title=title,
        **extra,
    )


def _payload(day=date(2024, 6, 13), start="09:00", end="10:00", title="Nova sessão"):
    return AppointmentCreateIn(date=day, start_time=start, end_time=end, title=title)


@pytest.fixture
def store():
    return FakeStore(
        [
            _row(1, WED, time(14, 0), time(15, 0), title="Tarde", color="#ff0000"),
            _row(2, WED, time(9, 0), time(10, 0), title="Manhã"),
            _row(3, date(2024, 6, 20), time(9, 0), time(10, 0), title="Semana seguinte"),
        ]
    )


@pytest.fixture
def agenda(store):
    return WeeklyAgenda(
        store, user_id=USER_ID, professional_id=PROF_ID, reference_date=WED
    )


def test_load_current_week_fetches_once_and_sorts(agenda, store):
    rows = agenda.load_current_week()
    assert [r.id for r in rows] == [2, 1]
    assert agenda.current_week_key == KEY_2024_06_09
    assert agenda.cached_weeks() == [KEY_2024_06_09]
    assert store.list_calls == 1


def test_any_day_of_a_cached_week_is_served_from_cache(agenda, store):
    agenda.get_appointments_for_week(date(2024, 6, 12))
    again = agenda.get_appointments_for_week(date(2024, 6, 14))
    assert [r.id for r in again] == [2, 1]
    assert store.list_calls == 1


def test_returned_list_is_a_copy(agenda):
    rows = agenda.get_appointments_for_week(WED)
    rows.clear()
    assert len(agenda.get_appointments_for_week(WED)) == 2


def test_navigation_fetches_each_week_once(agenda, store):
    agenda.load_current_week()
    nxt = agenda.next_week()
    assert [r.id for r in nxt] == [3]
    assert agenda.reference_date == date(2024, 6, 19)
    agenda.previous_week()
    agenda.next_week()
    assert store.list_calls == 2
    assert agenda.days[0] == date(2024, 6, 16)


def test_fetch_failure_returns_empty_and_is_not_cached(agenda, store):
    store.fail_list = True
    assert agenda.get_appointments_for_week(WED) == []
    assert agenda.error == "armazenamento fora do ar"
    assert not agenda.is_cached(WED)
    assert agenda.loading is False

    store.fail_list = False
    assert [r.id for r in agenda.get_appointments_for_week(WED)] == [2, 1]
    assert agenda.error is None
    assert store.list_calls == 2


def test_fetch_requires_professional(store):
    agenda = WeeklyAgenda(store, user_id=USER_ID, professional_id=None, reference_date=WED)
    with pytest.raises(PreconditionError):
        agenda.get_appointments_for_week(WED)
    assert store.list_calls == 0


def test_invalidate_forces_refetch(agenda, store):
    agenda.load_current_week()
    agenda.invalidate(WED)
    agenda.get_appointments_for_week(WED)
    assert store.list_calls == 2
    agenda.invalidate()
    assert agenda.cached_weeks() == []


def test_check_conflict_uses_cached_week(agenda, store):
    agenda.load_current_week()
    assert agenda.check_conflict(WED, "09:30", "10:30")
    assert not agenda.check_conflict(WED, "10:00", "11:00")
    assert not agenda.check_conflict(WED, "09:00", "10:00", exclude_id=2)
    assert store.list_calls == 1


def test_check_conflict_rejects_inverted_interval(agenda):
    with pytest.raises(InvalidIntervalError):
        agenda.check_conflict(WED, "11:00", "10:00")


def test_check_conflict_raises_when_week_cannot_be_loaded(agenda, store):
    store.fail_list = True
    with pytest.raises(BackingStoreError):
        agenda.check_conflict(WED, "09:00", "10:00")


def test_slots_for_cached_week(agenda):
    slots = agenda.slots(WED, ["09:00", "10:00", "14:00"])
    assert [s.available for s in slots] == [False, True, False]


def test_insert_into_current_week_updates_bucket_and_view(agenda, store):
    agenda.load_current_week()
    seen = []
    agenda.subscribe(seen.append)

    row = agenda.insert(_payload(start="08:00", end="08:30", day=WED))

    assert row is not None
    assert row.user_id == USER_ID
    assert row.professional_id == PROF_ID
    assert hhmm(row.start_time) == "08:00"
    assert [r.id for r in agenda.appointments] == [row.id, 2, 1]
    assert [r.id for r in seen[-1]] == [row.id, 2, 1]
    assert agenda.inserting is False
    assert store.list_calls == 1


def test_insert_then_cancel_restores_week(agenda, store):
    before = [r.id for r in agenda.load_current_week()]
    row = agenda.insert(_payload())
    assert row.id in [r.id for r in agenda.appointments]

    cancelled = agenda.cancel(row.id)
    assert cancelled.cancelled is True
    assert [r.id for r in agenda.appointments] == before
    assert store.list_calls == 1


def test_insert_conflict_is_rejected(agenda, store):
    agenda.load_current_week()
    with pytest.raises(ScheduleConflictError):
        agenda.insert(_payload(day=WED, start="09:30", end="10:30"))
    assert agenda.inserting is False
    assert len(store.rows) == 3


def test_insert_without_validation_into_uncached_current_week_reloads(store):
    agenda = WeeklyAgenda(
        store, user_id=USER_ID, professional_id=PROF_ID, reference_date=WED
    )
    row = agenda.insert(_payload(), validate=False)
    assert agenda.is_cached(WED)
    assert row.id in [r.id for r in agenda.appointments]
    assert store.list_calls == 1


def test_insert_into_uncached_other_week_leaves_it_uncached(agenda, store):
    agenda.load_current_week()
    agenda.insert(_payload(day=date(2024, 7, 3)), validate=False)
    assert not agenda.is_cached(date(2024, 7, 3))
    assert [r.id for r in agenda.appointments] == [2, 1]


def test_insert_store_failure_returns_none(agenda, store):
    agenda.load_current_week()
    store.fail_write = True
    assert agenda.insert(_payload()) is None
    assert agenda.error == "falha ao gravar"
    assert agenda.inserting is False
    assert [r.id for r in agenda.appointments] == [2, 1]


def test_insert_is_not_reentrant(agenda, store):
    agenda.load_current_week()
    nested = []

    def reenter():
        assert agenda.inserting is True
        with pytest.raises(OperationInProgressError):
            agenda.insert(_payload(start="11:00", end="12:00"))
        nested.append(True)

    store.on_insert = reenter
    row = agenda.insert(_payload())
    assert nested == [True]
    assert row is not None
    assert agenda.inserting is False

    # a trava é liberada ao final, inclusive para a próxima inserção
    store.on_insert = None
    assert agenda.insert(_payload(start="11:00", end="12:00")) is not None


def test_insert_guard_is_released_after_an_error(agenda, store):
    agenda.load_current_week()
    store.fail_list = True
    with pytest.raises(BackingStoreError):
        agenda.insert(_payload())
    assert agenda.inserting is False

    store.fail_list = False
    assert agenda.insert(_payload()) is not None


def test_insert_rechecks_store_when_bucket_is_stale(agenda, store):
    agenda.load_current_week()
    # linha gravada por fora depois que a semana foi carregada
    store.rows[4] = _row(4, WED, time(10, 0), time(11, 0), title="Outra sessão")

    with pytest.raises(ScheduleConflictError):
        agenda.insert(_payload(day=WED, start="10:30", end="11:30"))
    assert store.day_calls == 1
    assert len(store.rows) == 4
    # o bucket defasado é descartado e a próxima leitura busca de novo
    assert not agenda.is_cached(WED)
    assert [r.id for r in agenda.get_appointments_for_week(WED)] == [2, 4, 1]
    assert store.list_calls == 2


def test_agendas_of_same_professional_share_buckets(store):
    shared = ProfessionalWeeks()
    first = WeeklyAgenda(
        store, user_id=1, professional_id=PROF_ID, reference_date=WED, shared=shared
    )
    second = WeeklyAgenda(
        store, user_id=2, professional_id=PROF_ID, reference_date=WED, shared=shared
    )
    first.load_current_week()
    second.load_current_week()
    assert store.list_calls == 1

    second.cancel(2)
    assert [r.id for r in first.get_appointments_for_week(WED)] == [1]

    second.insert(_payload(day=WED, start="10:00", end="11:00"))
    with pytest.raises(ScheduleConflictError):
        first.insert(_payload(day=WED, start="10:30", end="11:30"))
    # o conflito veio do bucket compartilhado, sem consultar o dia no banco
    assert store.day_calls == 1


def test_registry_shares_buckets_per_professional(store):
    registry = AgendaRegistry()
    admin = registry.get(1, PROF_ID, lambda: store)
    professional = registry.get(2, PROF_ID, lambda: store)
    other = registry.get(3, PROF_ID + 1, lambda: store)

    admin.load_current_week()
    assert professional.is_cached(WED)
    assert not other.is_cached(WED)
    assert len(registry) == 3

    # mesmo usuário, outro profissional: nova sessão com os buckets do outro
    switched = registry.get(1, PROF_ID + 1, lambda: store)
    assert switched is not admin
    assert not switched.is_cached(WED)


def test_insert_requires_user(store):
    agenda = WeeklyAgenda(store, user_id=None, professional_id=PROF_ID, reference_date=WED)
    with pytest.raises(PreconditionError):
        agenda.insert(_payload())


def test_edit_only_touches_mutable_fields(agenda, store):
    agenda.load_current_week()
    row = agenda.edit(1, AppointmentUpdateIn(title="Tarde (retorno)"))

    assert store.update_calls == [{"title": "Tarde (retorno)"}]
    assert row.title == "Tarde (retorno)"
    assert row.color == "#ff0000"
    assert row.start_time == time(14, 0)
    assert agenda.appointments[1].title == "Tarde (retorno)"


def test_edit_without_changes_returns_cached_row(agenda, store):
    agenda.load_current_week()
    row = agenda.edit(2, AppointmentUpdateIn())
    assert row.title == "Manhã"
    assert store.update_calls == []


def test_edit_store_failure_keeps_cache(agenda, store):
    agenda.load_current_week()
    store.fail_write = True
    assert agenda.edit(2, AppointmentUpdateIn(title="X")) is None
    assert agenda.error == "falha ao gravar"
    assert agenda.appointments[0].title == "Manhã"


def test_edit_and_cancel_need_cached_appointment(agenda):
    agenda.load_current_week()
    with pytest.raises(NotInCacheError):
        agenda.edit(3, AppointmentUpdateIn(title="X"))
    with pytest.raises(NotInCacheError):
        agenda.cancel(999)


def test_cancel_in_other_cached_week_keeps_current_view(agenda, store):
    agenda.load_current_week()
    agenda.get_appointments_for_week(date(2024, 6, 20))
    agenda.cancel(3)
    assert agenda.get_appointments_for_week(date(2024, 6, 20)) == []
    assert [r.id for r in agenda.appointments] == [2, 1]


def test_unsubscribe_stops_notifications(agenda):
    seen = []
    unsubscribe = agenda.subscribe(seen.append)
    agenda.load_current_week()
    unsubscribe()
    agenda.next_week()
    assert len(seen) == 1

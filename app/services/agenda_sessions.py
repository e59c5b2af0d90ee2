from __future__ import annotations

from collections.abc import Callable

from app.core.logging import get_logger
from app.services.appointment_store import AppointmentStore
from app.services.week_cache import ProfessionalWeeks, WeeklyAgenda

log = get_logger("agenda")


class AgendaRegistry:
    """Uma `WeeklyAgenda` por usuário, com buckets compartilhados por profissional.

    Cada usuário navega com sua própria data de referência, mas quem agenda
    com o mesmo profissional enxerga o mesmo cache.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, WeeklyAgenda] = {}
        self._weeks: dict[int, ProfessionalWeeks] = {}

    def get(
        self,
        user_id: int,
        professional_id: int,
        store_factory: Callable[[], AppointmentStore],
    ) -> WeeklyAgenda:
        agenda = self._sessions.get(user_id)
        if agenda is None or agenda.professional_id != professional_id:
            agenda = WeeklyAgenda(
                store_factory(),
                user_id=user_id,
                professional_id=professional_id,
                shared=self._weeks.setdefault(professional_id, ProfessionalWeeks()),
            )
            self._sessions[user_id] = agenda
            log.info(
                "agenda.session.open", user_id=user_id, professional_id=professional_id
            )
        return agenda

    def close(self, user_id: int) -> None:
        if self._sessions.pop(user_id, None) is not None:
            log.info("agenda.session.close", user_id=user_id)

    def clear(self) -> None:
        self._sessions.clear()
        self._weeks.clear()

    def __len__(self) -> int:
        return len(self._sessions)

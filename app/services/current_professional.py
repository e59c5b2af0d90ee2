from __future__ import annotations

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.errors import PreconditionError
from app.core.logging import get_logger
from app.models.professional import Professional
from app.models.user import User
from app.schemas.professionals import ProfessionalOut
from app.services.procedures import list_professionals_admin
from app.services.rpc import unwrap

log = get_logger("agenda")


class CurrentProfessional(BaseModel):
    id: int
    name: str
    specialty: str


def resolve_current_professional(db: Session, user: User | None) -> CurrentProfessional:
    """
    Profissional do usuário logado. Sem vínculo, cai no primeiro profissional
    da listagem admin (ordem por nome), como a tela de agenda sempre fez.
    """
    if user is None:
        raise PreconditionError("Usuário não autenticado")

    linked = (
        db.query(Professional).filter(Professional.user_id == user.id).one_or_none()
    )
    if linked is not None:
        if linked.specialty is None:
            raise PreconditionError("Especialidade não encontrada")
        return CurrentProfessional(
            id=linked.id, name=user.name, specialty=linked.specialty.name
        )

    listing = unwrap(
        "list_professionals_admin", list_professionals_admin(db), ProfessionalOut
    )
    if not listing:
        raise PreconditionError("Nenhum profissional encontrado no sistema")
    first = listing[0]
    if not first.specialty:
        raise PreconditionError(
            "Especialidade não encontrada para o primeiro profissional"
        )
    log.info("agenda.professional.fallback", user_id=user.id, professional_id=first.id)
    return CurrentProfessional(id=first.id, name=first.name, specialty=first.specialty)

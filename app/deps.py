from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session, sessionmaker

from app.core.logging import set_professional_id, set_user_id
from app.core.security import TokenError, decode_access_token
from app.core.settings import settings
from app.db import get_db, get_session_factory
from app.models.user import User
from app.services.agenda_sessions import AgendaRegistry
from app.services.appointment_store import SqlAppointmentStore
from app.services.current_professional import resolve_current_professional
from app.services.week_cache import WeeklyAgenda


def _extract_token_from_request(request: Request) -> str | None:
    # Priority: Authorization header, then cookie (if enabled)
    auth = request.headers.get("Authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1]
    if settings.USE_COOKIE_AUTH:
        return request.cookies.get("access_token")
    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:  # noqa: B008
    token = _extract_token_from_request(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado"
        )

    try:
        user_id = decode_access_token(token)
    except TokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)
        ) from e

    user: User | None = db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário inativo ou inexistente",
        )

    set_user_id(user.id)
    return user


def get_agenda_registry(request: Request) -> AgendaRegistry:
    return request.app.state.agendas


def get_agenda(
    current_user: Annotated[User, Depends(get_current_user)],
    registry: Annotated[AgendaRegistry, Depends(get_agenda_registry)],
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)],
    db: Session = Depends(get_db),  # noqa: B008
) -> WeeklyAgenda:
    """Agenda semanal do usuário, com o cache mantido entre requests."""
    professional = resolve_current_professional(db, current_user)
    set_professional_id(professional.id)
    return registry.get(
        current_user.id,
        professional.id,
        lambda: SqlAppointmentStore(session_factory),
    )

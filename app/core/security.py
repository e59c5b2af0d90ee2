"""
Tokens de acesso da API da agenda.

Senha e login ficam no provedor de identidade; aqui só emitimos e validamos
o JWT que carrega o id do usuário em `sub`.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.settings import settings

ACCESS = "access"


class TokenError(ValueError):
    """Token expirado, adulterado, de outro tipo ou sem usuário."""


def issue_token(
    user_id: int, *, type_: str = ACCESS, ttl: timedelta | None = None
) -> str:
    now = datetime.now(UTC)
    if ttl is None:
        ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(user_id),  # JWT exige string
        "type": type_,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def create_access_token(user_id: int) -> str:
    return issue_token(user_id)


def decode_access_token(token: str) -> int:
    """Valida o token e devolve o id do usuário."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except ExpiredSignatureError as e:
        raise TokenError("Token expirado.") from e
    except JWTError as e:
        raise TokenError("Token inválido.") from e
    if payload.get("type") != ACCESS:
        raise TokenError("Tipo de token inválido.")
    sub = str(payload.get("sub") or "")
    if not sub.isdigit():
        raise TokenError("Token sem usuário.")
    return int(sub)

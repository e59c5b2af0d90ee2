from __future__ import annotations

from fastapi import Request, status
from starlette.responses import JSONResponse

from app.core.logging import get_logger


class AgendaError(Exception):
    """Erro de domínio da agenda; cada subclasse carrega o status HTTP equivalente."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackingStoreError(AgendaError):
    """Falha de rede/banco ao falar com o armazenamento."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PreconditionError(AgendaError):
    """Pré-condição ausente: usuário não autenticado, profissional não carregado, etc."""

    status_code = status.HTTP_412_PRECONDITION_FAILED


class NotInCacheError(AgendaError):
    status_code = status.HTTP_404_NOT_FOUND


class OperationInProgressError(AgendaError):
    status_code = status.HTTP_409_CONFLICT


class ScheduleConflictError(AgendaError):
    status_code = status.HTTP_409_CONFLICT


class InvalidIntervalError(AgendaError):
    status_code = 422  # Unprocessable Content


async def agenda_error_handler(request: Request, exc: AgendaError) -> JSONResponse:
    get_logger().warning(
        "agenda.error",
        error=type(exc).__name__,
        detail=exc.message,
        path=request.url.path,
    )
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)

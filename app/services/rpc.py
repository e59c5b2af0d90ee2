"""
Contrato único das chamadas de procedimento.

Todo procedimento responde `{"success": bool, "message": str, "data": [...]}`.
Qualquer outro formato é erro do armazenamento, nunca lista vazia.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.errors import BackingStoreError
from app.core.logging import get_logger

T = TypeVar("T")

log = get_logger("rpc")


class RpcResponse(BaseModel, Generic[T]):
    success: bool
    message: str = ""
    data: list[T] = []


def unwrap(procedure: str, raw: Any, item_model: type[T]) -> list[T]:
    try:
        response = RpcResponse[item_model].model_validate(raw)
    except ValidationError as exc:
        log.error("rpc.bad_shape", procedure=procedure, errors=exc.error_count())
        raise BackingStoreError(
            f"Resposta inesperada do procedimento {procedure}"
        ) from exc
    if not response.success:
        raise BackingStoreError(response.message or f"Erro em {procedure}")
    return response.data

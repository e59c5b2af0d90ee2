from __future__ import annotations

import logging
import sys
import uuid

import structlog


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Logger estruturado; `name` vira o campo `component` (agenda, store, rpc...)."""
    if name:
        # proxy lazy: loggers de módulo usam a config aplicada depois do import
        return structlog.get_logger(name, component=name)
    return structlog.get_logger()


def configure_logging(json: bool = True, level: str = "INFO") -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, stream=sys.stdout)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )


# --- contexto por request (contextvars do structlog)


def set_request_id(req_id: str | None) -> str:
    rid = req_id or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(request_id=rid)
    return rid


def set_user_id(user_id: int | None) -> None:
    if user_id:
        structlog.contextvars.bind_contextvars(user_id=user_id)


def set_professional_id(professional_id: int | None) -> None:
    """Todo log de agenda do request sai com o profissional em exibição."""
    if professional_id:
        structlog.contextvars.bind_contextvars(professional_id=professional_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

import app.db.base  # noqa: F401
from app.api.main import api_router
from app.core.errors import AgendaError, agenda_error_handler
from app.core.logging import configure_logging, get_logger
from app.core.settings import Env, settings
from app.middlewares.telemetry import RequestContextMiddleware
from app.services.agenda_sessions import AgendaRegistry
from app.version import APP_VERSION, BUILD_TIME_UTC, GIT_SHA

configure_logging(json=settings.LOG_JSON, level=settings.LOG_LEVEL)

app = FastAPI(title="Agenda", debug=settings.DEBUG, version=APP_VERSION)

# caches semanais por usuário; vivem enquanto o processo viver
app.state.agendas = AgendaRegistry()

app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or (["*"] if settings.DEBUG else []),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.APP_ENV == Env.PROD:
    app.add_middleware(HTTPSRedirectMiddleware)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if settings.APP_ENV == Env.PROD:
        response.headers["Strict-Transport-Security"] = (
            "max-age=15552000; includeSubDomains; preload"
        )
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    # respostas da agenda mudam a cada mutação; nada de cache intermediário
    response.headers["Cache-Control"] = "no-store"
    return response


app.add_exception_handler(AgendaError, agenda_error_handler)

app.include_router(api_router)


@app.get("/healthz", tags=["ops"])
def healthz():
    get_logger().info("health.check", open_agendas=len(app.state.agendas))
    return {"status": "ok", "env": settings.APP_ENV, "version": APP_VERSION}


@app.get("/version", tags=["ops"])
def version():
    return {
        "version": APP_VERSION,
        "git_sha": GIT_SHA,
        "build_time_utc": BUILD_TIME_UTC,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
    }

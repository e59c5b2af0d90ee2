from enum import Enum
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

class Env(str, Enum):
    DEV = "dev"
    HML = "hml"
    PROD = "prod"

class Settings(BaseSettings):
    APP_ENV: Env = Env.DEV
    DEBUG: bool = False

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    DATABASE_URL: str = "sqlite:///./agenda.db"

    ALLOWED_HOSTS: str = "localhost,127.0.0.1"

    # Also accept the access token from an HttpOnly cookie (frontends that avoid localStorage)
    USE_COOKIE_AUTH: bool = True

    # Agenda: fuso usado para a chave da semana, "hoje" e o carimbo de cancelamento
    AGENDA_TZ: str = "America/Sao_Paulo"
    AGENDA_FIRST_HOUR: int = 8
    AGENDA_LAST_HOUR: int = 22
    AGENDA_SLOT_MINUTES: int = 60

    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def agenda_tz(self) -> ZoneInfo:
        return ZoneInfo(self.AGENDA_TZ)

    @property
    def cors_origins(self) -> list[str]:
        """ALLOWED_HOSTS aceita host puro (vira http/https) ou origem completa."""
        origins: list[str] = []
        for host in self.ALLOWED_HOSTS.split(","):
            host = host.strip()
            if not host:
                continue
            if host.startswith("http"):
                origins.append(host)
            else:
                origins.extend((f"http://{host}", f"https://{host}"))
        return origins


# cria instância global
settings = Settings()

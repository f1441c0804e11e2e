import os
from dataclasses import dataclass

from sqlalchemy.engine import URL, make_url


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True, frozen=True)
class Settings:
    database_url: str
    connect_timeout: int = 5
    pool_size: int = 5
    max_overflow: int = 5
    connect_retries: int = 3
    connect_retry_delay: float = 1.0
    allowed_origin: str = "*"
    cors_allow_credentials: bool = True
    sentry_dsn: str | None = None
    sentry_environment: str = "development"
    sentry_traces_sample_rate: float = 1.0
    host: str = "127.0.0.1"
    port: int = 3000
    reload: bool = True
    log_level: str = "info"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=_database_url_from_env(),
            connect_timeout=int(os.getenv("DB_CONNECT_TIMEOUT", "5")),
            pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "5")),
            connect_retries=int(os.getenv("DB_CONNECT_RETRIES", "3")),
            connect_retry_delay=float(os.getenv("DB_CONNECT_RETRY_DELAY", "1.0")),
            allowed_origin=os.getenv("ALLOWED_ORIGIN", "*"),
            cors_allow_credentials=_as_bool(os.getenv("CORS_ALLOW_CREDENTIALS", "true")),
            sentry_dsn=os.getenv("SENTRY_DSN") or None,
            sentry_environment=os.getenv("SENTRY_ENVIRONMENT", "development"),
            sentry_traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "1.0")),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "3000")),
            reload=_as_bool(os.getenv("RELOAD", "true")),
            log_level=os.getenv("LOG_LEVEL", "info"),
        )

    def safe_database_url(self) -> str:
        """URL de la BDD con la contraseña enmascarada, apta para logs."""
        return make_url(self.database_url).render_as_string(hide_password=True)


def _database_url_from_env() -> str:
    """
    `DATABASE_URL` tiene prioridad; si no existe, la URL se arma con las
    variables `DB_*` para PostgreSQL (driver psycopg2).
    """
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    query = {}
    sslmode = os.getenv("DB_SSLMODE")
    if sslmode:
        query["sslmode"] = sslmode

    url = URL.create(
        "postgresql+psycopg2",
        username=os.getenv("DB_USER", "postgres"),
        password=os.getenv("DB_PASSWORD") or None,
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "5432")),
        database=os.getenv("DB_NAME", "tasks_db"),
        query=query,
    )
    return url.render_as_string(hide_password=False)

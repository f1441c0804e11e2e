import logging
import threading

from core.application.handle_request import TaskRequestHandler
from core.application.responses import CorsPolicy
from core.domain.ports.error_reporter import ErrorReporter
from infrastructure.config import Settings
from infrastructure.observability.reporters import LoggingErrorReporter, SentryErrorReporter
from infrastructure.resilience.retry import RetryPolicy
from infrastructure.sqlalchemy.repository.task_repository import SqlAlchemyTaskStore

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_request_handler: TaskRequestHandler | None = None


def build_error_reporter(settings: Settings) -> ErrorReporter:
    if settings.sentry_dsn:
        return SentryErrorReporter(
            dsn=settings.sentry_dsn,
            environment=settings.sentry_environment,
            traces_sample_rate=settings.sentry_traces_sample_rate,
        )
    return LoggingErrorReporter()


def build_task_store(settings: Settings) -> SqlAlchemyTaskStore:
    return SqlAlchemyTaskStore.from_url(
        settings.database_url,
        retry_policy=RetryPolicy(
            max_attempts=settings.connect_retries,
            delay=settings.connect_retry_delay,
        ),
        connect_timeout=settings.connect_timeout,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


def build_request_handler(settings: Settings) -> TaskRequestHandler:
    logger.info(f"Inicializando handler con BDD {settings.safe_database_url()}")
    return TaskRequestHandler(
        store=build_task_store(settings),
        cors=CorsPolicy(
            allow_origin=settings.allowed_origin,
            allow_credentials=settings.cors_allow_credentials,
        ),
        reporter=build_error_reporter(settings),
    )


def get_request_handler() -> TaskRequestHandler:
    """Handler del proceso: se construye en el primer uso y se reutiliza (warm starts)."""
    global _request_handler
    with _lock:
        if _request_handler is None:
            _request_handler = build_request_handler(Settings.from_env())
        return _request_handler


def shutdown_request_handler() -> None:
    """Cierra el pool del handler del proceso, si existe."""
    global _request_handler
    with _lock:
        if _request_handler is not None:
            _request_handler.store.dispose()
            _request_handler = None

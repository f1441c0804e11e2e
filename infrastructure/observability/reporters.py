"""
Reporte de errores a sinks externos.

`ErrorReporter.report` entrega a `capture` el contexto ya limpio de secretos.
El body que Sentry adjunta por su cuenta se limpia en `_before_send`.
"""

import logging
from collections.abc import Mapping
from typing import Any

import sentry_sdk

from core.domain.ports.error_reporter import ErrorReporter
from core.domain.scrubbing import scrub_secrets

logger = logging.getLogger(__name__)


class LoggingErrorReporter(ErrorReporter):
    """Sink mínimo: deja el error y su contexto en el log."""

    def capture(self, error: BaseException, context: dict[str, Any]) -> None:
        logger.error(
            f"{context.get('route', 'unknown')} → {context.get('code')}: {error}",
            exc_info=error,
            extra={"context": context},
        )


class SentryErrorReporter(ErrorReporter):
    """
    Envía los errores a Sentry con el contexto como `extra`.

    Args:
        dsn:                DSN del proyecto de Sentry.
        environment:        Entorno reportado (development, production, ...).
        traces_sample_rate: Muestreo de trazas.
    """

    def __init__(
        self,
        dsn: str,
        environment: str = "development",
        traces_sample_rate: float = 1.0,
    ) -> None:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            traces_sample_rate=traces_sample_rate,
            send_default_pii=False,
            before_send=_before_send,
        )
        logger.info(f"Sentry inicializado (environment={environment})")

    def capture(self, error: BaseException, context: dict[str, Any]) -> None:
        logger.error(f"{context.get('route', 'unknown')} → {context.get('code')}: {error}")
        with sentry_sdk.new_scope() as scope:
            scope.set_extra("context", context)
            sentry_sdk.capture_exception(error)


def _before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    request = event.get("request")
    if isinstance(request, dict) and isinstance(request.get("data"), Mapping):
        request["data"] = scrub_secrets(request["data"])
    return event

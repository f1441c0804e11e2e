import logging
from abc import ABC, abstractmethod
from typing import Any

from core.domain.scrubbing import scrub_secrets

logger = logging.getLogger(__name__)


class ErrorReporter(ABC):
    """Canal lateral de diagnóstico: nunca altera el flujo de la petición."""

    @abstractmethod
    def capture(self, error: BaseException, context: dict[str, Any]) -> None:
        raise NotImplementedError

    def report(self, error: BaseException, context: dict[str, Any]) -> None:
        """
        Envía el error al sink con el contexto ya limpio de secretos.
        Cualquier fallo del propio sink se registra y se descarta.
        """
        try:
            self.capture(error, scrub_secrets(context))
        except Exception as e:
            logger.warning(f"No se pudo reportar el error {error!r}: {e}")

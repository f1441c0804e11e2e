"""
Reintentos con delay fijo para la comprobación de conectividad.

Solo reintenta errores TRANSITORIOS de conexión, no errores de lógica.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from core.domain.errors import StoreConnectionError

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    StoreConnectionError,
    ConnectionError,
    TimeoutError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """
    Política de reintento acotada.

    Args:
        max_attempts:         Intentos totales, incluido el original (>= 1).
        delay:                Segundos de espera fija entre intentos.
        retryable_exceptions: Excepciones que justifican un nuevo intento.
        sleep:                Función de espera (inyectable en tests).
    """

    max_attempts: int = 3
    delay: float = 1.0
    retryable_exceptions: tuple[type[BaseException], ...] = RETRYABLE_EXCEPTIONS
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts debe ser >= 1")
        if self.delay < 0:
            raise ValueError("delay no puede ser negativo")

    def call(self, func: Callable[[], Any]) -> Any:
        """
        Ejecuta `func()` hasta `max_attempts` veces.

        Returns:
            El resultado de `func()`.

        Raises:
            La última excepción si se agotan los intentos,
            o la excepción original si no es retryable.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return func()
            except self.retryable_exceptions as e:
                if attempt == self.max_attempts:
                    logger.warning(f"❌ Agotados {self.max_attempts} intentos. Último error: {e}")
                    raise
                logger.warning(
                    f"🔁 Intento {attempt}/{self.max_attempts} falló: {e}. "
                    f"Esperando {self.delay:.1f}s..."
                )
                self.sleep(self.delay)
        raise AssertionError("unreachable")

"""
Resultados explícitos para la capa de aplicación.

Los casos de uso no lanzan excepciones para comunicar errores esperados:
devuelven `Ok(valor)` o `Failure(kind, ...)`. El handler HTTP es el único
punto que traduce un `Failure` a una respuesta.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(Enum):
    """Tipos de error con su status HTTP, código por defecto y título."""

    MALFORMED_REQUEST = (400, "MALFORMED_REQUEST", "Malformed request")
    INVALID_JSON = (400, "INVALID_JSON", "Invalid JSON in request body")
    VALIDATION = (400, "MISSING_FIELDS", "Missing required fields")
    ROUTE_NOT_FOUND = (404, "ROUTE_NOT_FOUND", "Route not found")
    METHOD_NOT_ALLOWED = (405, "METHOD_NOT_ALLOWED", "Method not allowed")
    STORE_CONNECTION = (500, "DB_CONNECTION_ERROR", "Database connection failed")
    STORE = (500, "DB_ERROR", "Database error")
    INTERNAL = (500, "INTERNAL_ERROR", "Internal server error")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def default_code(self) -> str:
        return self.value[1]

    @property
    def title(self) -> str:
        return self.value[2]


@dataclass(slots=True, frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(slots=True, frozen=True)
class Failure:
    """
    Error esperado, etiquetado con su `ErrorKind`.

    Args:
        kind:    Tipo de error (define status HTTP y código por defecto).
        message: Mensaje legible para el cliente.
        code:    Código explícito (ej. SQLSTATE del driver); si es None se usa
                 el código por defecto del `kind`.
        details: Información adicional segura de exponer al cliente.
        cause:   Excepción original, solo para logs y reporte de errores.
    """

    kind: ErrorKind
    message: str
    code: str | None = None
    details: dict[str, Any] | None = None
    cause: BaseException | None = field(default=None, compare=False)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @property
    def error_code(self) -> str:
        return self.code or self.kind.default_code

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


Result = Union[Ok[T], Failure]

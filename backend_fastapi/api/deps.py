from core.application.handle_request import TaskRequestHandler
from infrastructure.container import get_request_handler


class HandlerUnavailableError(Exception):
    """El handler del proceso no se pudo construir (configuración inválida)."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(str(cause))
        self.cause = cause


def request_handler() -> TaskRequestHandler:
    try:
        return get_request_handler()
    except Exception as e:
        raise HandlerUnavailableError(e) from e

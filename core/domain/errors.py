class StoreError(Exception):
    """Fallo del almacén (consulta, restricción, timeout) con el código del driver."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class StoreConnectionError(StoreError):
    """No se pudo obtener una conexión del pool."""

import logging
import threading

from core.domain.errors import StoreError
from core.domain.models.result import ErrorKind, Failure, Ok, Result
from core.domain.ports.task_repository import TaskRepository

logger = logging.getLogger(__name__)


class SchemaInitializer:
    """
    Crea la tabla de tareas la primera vez que se necesita.

    No usa locks: si dos peticiones concurrentes intentan crearla en un cold
    start, la que pierde recibe un error de "tabla ya existe". Ese caso se
    detecta repitiendo la comprobación y se trata como éxito.
    """

    def __init__(self) -> None:
        self._ready = threading.Event()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def ensure(self, repository: TaskRepository) -> Result[None]:
        if self._ready.is_set():
            return Ok(None)

        try:
            if repository.table_exists():
                logger.debug("La tabla tasks ya existe")
            else:
                logger.info("La tabla tasks no existe, creándola...")
                self._create(repository)
        except StoreError as e:
            logger.warning(f"Falló la inicialización del esquema: {e.message}")
            return Failure(
                ErrorKind.STORE,
                e.message,
                code=e.code or "DB_INIT_ERROR",
                cause=e,
            )

        self._ready.set()
        return Ok(None)

    @staticmethod
    def _create(repository: TaskRepository) -> None:
        try:
            repository.create_table()
            logger.info("Tabla tasks creada")
        except StoreError as e:
            if not repository.table_exists():
                raise
            logger.info(
                f"La tabla tasks fue creada por otra petición concurrente ({e.message})"
            )

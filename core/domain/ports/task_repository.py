from abc import ABC, abstractmethod

from core.domain.models.task import Task


class TaskRepository(ABC):
    """
    Acceso a la tabla de tareas a través de una conexión ya obtenida del pool.

    Las implementaciones lanzan `StoreError` ante cualquier fallo del almacén.
    """

    @abstractmethod
    def table_exists(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def create_table(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[Task]:
        raise NotImplementedError

    @abstractmethod
    def create(self, description: str) -> Task:
        raise NotImplementedError

    @abstractmethod
    def release(self) -> None:
        """Devuelve la conexión al pool."""
        raise NotImplementedError


class TaskStore(ABC):
    """Handle del almacén (pool de conexiones) con ciclo de vida explícito."""

    @abstractmethod
    def acquire(self) -> TaskRepository:
        """
        Obtiene una conexión del pool.

        Raises:
            StoreConnectionError: Si no hay conectividad con la BDD.
        """
        raise NotImplementedError

    @abstractmethod
    def dispose(self) -> None:
        raise NotImplementedError

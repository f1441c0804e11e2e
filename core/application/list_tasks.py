import logging

from core.domain.errors import StoreError
from core.domain.models.result import ErrorKind, Failure, Ok, Result
from core.domain.models.task import Task
from core.domain.ports.task_repository import TaskRepository

logger = logging.getLogger(__name__)


class ListTasksUseCase:
    def __init__(self, repository: TaskRepository) -> None:
        self._repository = repository

    def execute(self) -> Result[list[Task]]:
        try:
            tasks = self._repository.list()
        except StoreError as e:
            return Failure(ErrorKind.STORE, e.message, code=e.code, cause=e)
        logger.debug(f"Listadas {len(tasks)} tareas")
        return Ok(tasks)

import json
import logging
from dataclasses import dataclass

from core.domain.errors import StoreError
from core.domain.models.result import ErrorKind, Failure, Ok, Result
from core.domain.models.task import Task
from core.domain.ports.task_repository import TaskRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("description",)


@dataclass(slots=True, frozen=True)
class CreateTaskCommand:
    description: str


def parse_create_task_body(body: str | bytes | None) -> Result[CreateTaskCommand]:
    """
    Interpreta el body de `POST /tasks`.

    Un body vacío equivale a `{}`. Devuelve `INVALID_JSON` si no es JSON y
    `VALIDATION` si falta `description` o no es un texto no vacío.
    """
    if body is None or body == "" or body == b"":
        payload = {}
    else:
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            return Failure(
                ErrorKind.INVALID_JSON,
                str(e),
                details={"error": "Failed to parse request body as JSON"},
                cause=e,
            )

    if not isinstance(payload, dict):
        payload = {}
    return validate_create_task(payload.get("description"))


def validate_create_task(description: object) -> Result[CreateTaskCommand]:
    if not isinstance(description, str) or not description.strip():
        return Failure(
            ErrorKind.VALIDATION,
            "Description is required",
            details={"required": list(REQUIRED_FIELDS)},
        )
    return Ok(CreateTaskCommand(description=description))


class CreateTaskUseCase:
    def __init__(self, repository: TaskRepository) -> None:
        self._repository = repository

    def execute(self, cmd: CreateTaskCommand) -> Result[Task]:
        validated = validate_create_task(cmd.description)
        if isinstance(validated, Failure):
            return validated

        try:
            task = self._repository.create(cmd.description)
        except StoreError as e:
            return Failure(ErrorKind.STORE, e.message, code=e.code, cause=e)
        logger.info(f"Tarea {task.id} creada")
        return Ok(task)

"""
Contrato de manejo de peticiones compartido por todos los despliegues.

    RawRequest → preflight CORS → ruta → body (POST) → conexión del pool
    → esquema (una vez) → consulta → respuesta → liberación de la conexión

Los adaptadores (Lambda, FastAPI) solo convierten su petición nativa en un
`RawRequest` y el `HttpResponse` resultante en su respuesta nativa.
"""

import json
import logging
from typing import Any, Callable, TypeVar

from core.application.create_task import (
    CreateTaskCommand,
    CreateTaskUseCase,
    parse_create_task_body,
)
from core.application.ensure_schema import SchemaInitializer
from core.application.list_tasks import ListTasksUseCase
from core.application.responses import CorsPolicy, HttpResponse, ResponseFactory
from core.application.validate_request import RawRequest
from core.domain.errors import StoreConnectionError, StoreError
from core.domain.models.result import ErrorKind, Failure, Result
from core.domain.models.task import Task
from core.domain.ports.error_reporter import ErrorReporter
from core.domain.ports.task_repository import TaskRepository, TaskStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

TASKS_PATH = "/tasks"
TASKS_METHODS = ("GET", "POST", "OPTIONS")


class TaskRequestHandler:
    """
    Router de `/tasks` sobre un `TaskStore` explícito.

    Args:
        store:    Handle del almacén, construido una vez por proceso.
        cors:     Política CORS aplicada a todas las respuestas.
        reporter: Sink de errores; si es None los errores solo se registran en logs.
        schema:   Inicializador del esquema (compartido entre peticiones).
    """

    def __init__(
        self,
        store: TaskStore,
        cors: CorsPolicy | None = None,
        reporter: ErrorReporter | None = None,
        schema: SchemaInitializer | None = None,
    ) -> None:
        self._store = store
        self._responses = ResponseFactory(cors or CorsPolicy())
        self._reporter = reporter
        self._schema = schema or SchemaInitializer()

    @property
    def store(self) -> TaskStore:
        return self._store

    def handle(self, request: RawRequest, request_id: str) -> HttpResponse:
        logger.debug(f"Petición {request_id}: {request.method} {request.path}")
        try:
            return self._dispatch(request, request_id)
        except Exception as e:
            failure = Failure(ErrorKind.INTERNAL, str(e) or type(e).__name__, cause=e)
            return self.reject(failure, request_id, request)

    def reject(
        self, failure: Failure, request_id: str, request: RawRequest | None = None
    ) -> HttpResponse:
        """Registra el fallo y lo convierte en la respuesta de error."""
        self._record(failure, request_id, request)
        headers = None
        if failure.kind is ErrorKind.METHOD_NOT_ALLOWED:
            headers = {"Allow": ", ".join(TASKS_METHODS)}
        return self._responses.failure(failure, request_id, headers)

    # ──────────────────────────────────────────────────────────────────────────
    # Ruteo
    # ──────────────────────────────────────────────────────────────────────────

    def _dispatch(self, request: RawRequest, request_id: str) -> HttpResponse:
        if request.method == "OPTIONS":
            return self._responses.empty(200)

        if request.path != TASKS_PATH:
            return self.reject(
                Failure(
                    ErrorKind.ROUTE_NOT_FOUND,
                    f"Path {request.path} does not exist",
                    details={"path": request.path, "availableRoutes": [TASKS_PATH]},
                ),
                request_id,
                request,
            )

        if request.method == "GET":
            listed = self._with_repository(lambda repo: ListTasksUseCase(repo).execute())
            if isinstance(listed, Failure):
                return self.reject(listed, request_id, request)
            return self._responses.tasks(listed.value)

        if request.method == "POST":
            parsed = parse_create_task_body(request.body)
            if isinstance(parsed, Failure):
                return self.reject(parsed, request_id, request)
            created = self._create(parsed.value)
            if isinstance(created, Failure):
                return self.reject(created, request_id, request)
            return self._responses.task(created.value, status_code=201)

        return self.reject(
            Failure(
                ErrorKind.METHOD_NOT_ALLOWED,
                f"Method {request.method} is not allowed for this endpoint",
                details={
                    "method": request.method,
                    "path": request.path,
                    "allowedMethods": list(TASKS_METHODS),
                },
            ),
            request_id,
            request,
        )

    def _create(self, cmd: CreateTaskCommand) -> Result[Task]:
        return self._with_repository(lambda repo: CreateTaskUseCase(repo).execute(cmd))

    # ──────────────────────────────────────────────────────────────────────────
    # Conexiones
    # ──────────────────────────────────────────────────────────────────────────

    def _with_repository(
        self, operation: Callable[[TaskRepository], Result[T]]
    ) -> Result[T]:
        """
        Ejecuta `operation` con una conexión del pool.

        La conexión se libera exactamente una vez en cualquier salida: éxito,
        fallo del esquema, fallo de la consulta o excepción inesperada.
        """
        try:
            repository = self._store.acquire()
        except StoreConnectionError as e:
            return Failure(ErrorKind.STORE_CONNECTION, e.message, code=e.code, cause=e)
        except StoreError as e:
            return Failure(ErrorKind.STORE, e.message, code=e.code, cause=e)

        try:
            initialized = self._schema.ensure(repository)
            if isinstance(initialized, Failure):
                return initialized
            return operation(repository)
        finally:
            self._release(repository)

    @staticmethod
    def _release(repository: TaskRepository) -> None:
        try:
            repository.release()
        except Exception as e:
            logger.error(f"Error liberando la conexión: {e}")

    # ──────────────────────────────────────────────────────────────────────────
    # Diagnóstico
    # ──────────────────────────────────────────────────────────────────────────

    def _record(
        self, failure: Failure, request_id: str, request: RawRequest | None
    ) -> None:
        route = f"{request.method} {request.path}" if request else "unknown"
        if not failure.is_server_error:
            logger.info(f"{route} → {failure.status_code} {failure.error_code}: {failure.message}")
            return

        if self._reporter is None:
            logger.error(
                f"{route} → {failure.status_code} {failure.error_code}: {failure.message}",
                exc_info=failure.cause,
            )
            return
        context = {
            "requestId": request_id,
            "route": route,
            "code": failure.error_code,
            "params": _request_params(request),
        }
        self._reporter.report(failure.cause or RuntimeError(failure.message), context)


def _request_params(request: RawRequest | None) -> dict[str, Any]:
    if request is None or not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, TypeError):
        return {}
    return payload if isinstance(payload, dict) else {}


def unavailable_response(
    error: BaseException, request_id: str, cors: CorsPolicy | None = None
) -> HttpResponse:
    """Respuesta 500 cuando el handler del proceso no se pudo construir."""
    logger.error(
        f"No se pudo inicializar el handler ({request_id}): {type(error).__name__}",
        exc_info=error,
    )
    failure = Failure(ErrorKind.INTERNAL, "Service initialization failed", cause=error)
    return ResponseFactory(cors or CorsPolicy()).failure(failure, request_id)

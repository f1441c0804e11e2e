from uuid import uuid4

from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from backend_fastapi.api.deps import request_handler
from core.application.handle_request import TaskRequestHandler
from core.application.validate_request import normalize_request
from core.domain.models.result import ErrorKind, Failure

router = APIRouter(tags=["tasks"])

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


async def forward(request: Request, handler: TaskRequestHandler) -> Response:
    """Convierte la petición de Starlette en `RawRequest` y delega en el handler compartido."""
    request_id = request.headers.get("x-request-id") or str(uuid4())
    raw_body = await request.body()
    try:
        body = raw_body.decode("utf-8") if raw_body else None
    except UnicodeDecodeError as e:
        normalized = Failure(
            ErrorKind.MALFORMED_REQUEST, f"Body is not valid UTF-8: {e}", cause=e
        )
    else:
        normalized = normalize_request(request.method, request.url.path, body)
    if isinstance(normalized, Failure):
        result = handler.reject(normalized, request_id)
    else:
        result = await run_in_threadpool(handler.handle, normalized.value, request_id)

    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )


@router.get("/tasks", summary="Listar todas las tareas")
async def list_tasks(
    request: Request,
    handler: TaskRequestHandler = Depends(request_handler),
) -> Response:
    """
    Devuelve todas las tareas, de la más reciente a la más antigua.
    """
    return await forward(request, handler)


@router.post("/tasks", status_code=201, summary="Crear una nueva tarea")
async def create_task(
    request: Request,
    handler: TaskRequestHandler = Depends(request_handler),
) -> Response:
    """
    Crea una tarea a partir de un body JSON.

    - **description**: Texto de la tarea (obligatorio, no vacío).
    """
    return await forward(request, handler)


@router.options("/tasks", include_in_schema=False)
async def preflight_tasks(
    request: Request,
    handler: TaskRequestHandler = Depends(request_handler),
) -> Response:
    return await forward(request, handler)


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def fallback(
    request: Request,
    handler: TaskRequestHandler = Depends(request_handler),
) -> Response:
    """Rutas desconocidas y métodos no soportados: el handler responde 404/405."""
    return await forward(request, handler)

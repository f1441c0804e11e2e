import os
from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response

from backend_fastapi.api.deps import HandlerUnavailableError
from backend_fastapi.api.routes.health import router as health_router
from backend_fastapi.api.routes.tasks import router as tasks_router
from core.application.handle_request import unavailable_response
from infrastructure.container import shutdown_request_handler
from infrastructure.observability.logging_config import configure_logging

# Load environment variables from .env file
load_dotenv()

configure_logging(os.getenv("LOG_LEVEL", "info"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    shutdown_request_handler()


app = FastAPI(title="Tasks API", lifespan=lifespan)


@app.exception_handler(HandlerUnavailableError)
async def handler_unavailable(request: Request, exc: HandlerUnavailableError) -> Response:
    request_id = request.headers.get("x-request-id") or str(uuid4())
    result = unavailable_response(exc.cause, request_id)
    return Response(content=result.body, status_code=result.status_code, headers=result.headers)


# /health va antes que tasks_router: este último termina en una ruta comodín.
app.include_router(health_router)
app.include_router(tasks_router)

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.domain.models.result import Failure
from core.domain.models.task import Task


@dataclass(slots=True, frozen=True)
class CorsPolicy:
    allow_origin: str = "*"
    allow_methods: tuple[str, ...] = ("GET", "POST", "OPTIONS")
    allow_headers: tuple[str, ...] = (
        "Content-Type",
        "Authorization",
        "X-Amz-Date",
        "X-Api-Key",
        "X-Amz-Security-Token",
        "X-Requested-With",
    )
    allow_credentials: bool = True

    def headers(self) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Expose-Headers": "*",
        }
        # Credentials solo con un origin explícito.
        if self.allow_credentials and self.allow_origin != "*":
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers


@dataclass(slots=True)
class HttpResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


class TaskResponse(BaseModel):
    """Representación JSON de una tarea."""

    id: int
    description: str
    created_at: datetime

    @classmethod
    def from_domain(cls, task: Task) -> "TaskResponse":
        return cls(id=task.id, description=task.description, created_at=task.created_at)


class ErrorEnvelope(BaseModel):
    """Cuerpo de toda respuesta de error."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    message: str
    code: str
    request_id: str = Field(alias="requestId")
    timestamp: datetime
    details: dict[str, Any] | None = None


class ResponseFactory:
    def __init__(self, cors: CorsPolicy) -> None:
        self._cors = cors

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {**self._cors.headers(), "Content-Type": "application/json"}
        if extra:
            headers.update(extra)
        return headers

    def empty(self, status_code: int = 200) -> HttpResponse:
        return HttpResponse(status_code=status_code, headers=self._headers())

    def json(
        self, status_code: int, payload: Any, headers: dict[str, str] | None = None
    ) -> HttpResponse:
        return HttpResponse(
            status_code=status_code,
            headers=self._headers(headers),
            body=json.dumps(payload),
        )

    def task(self, task: Task, status_code: int = 200) -> HttpResponse:
        return self.json(status_code, TaskResponse.from_domain(task).model_dump(mode="json"))

    def tasks(self, tasks: list[Task]) -> HttpResponse:
        return self.json(
            200, [TaskResponse.from_domain(t).model_dump(mode="json") for t in tasks]
        )

    def failure(
        self,
        failure: Failure,
        request_id: str,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        envelope = ErrorEnvelope(
            error=failure.kind.title,
            message=failure.message,
            code=failure.error_code,
            request_id=request_id,
            timestamp=datetime.now(timezone.utc),
            details=failure.details,
        )
        return self.json(
            failure.status_code,
            envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
            headers,
        )

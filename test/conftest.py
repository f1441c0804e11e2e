from datetime import datetime, timedelta, timezone

import pytest

from core.application.handle_request import TaskRequestHandler
from core.application.validate_request import RawRequest
from core.domain.errors import StoreError
from core.domain.models.task import Task
from core.domain.ports.task_repository import TaskRepository, TaskStore


class InMemoryTaskRepository(TaskRepository):
    def __init__(self, store: "InMemoryTaskStore") -> None:
        self._store = store
        self.release_count = 0

    def _maybe_fail(self, operation: str) -> None:
        self._store.queries.append(operation)
        error = self._store.failures.get(operation)
        if error is not None:
            raise error

    def table_exists(self) -> bool:
        self._maybe_fail("table_exists")
        return self._store.table_created

    def create_table(self) -> None:
        self._maybe_fail("create_table")
        self._store.table_created = True

    def list(self) -> list[Task]:
        self._maybe_fail("list")
        return sorted(
            self._store.tasks, key=lambda t: (t.created_at, t.id), reverse=True
        )

    def create(self, description: str) -> Task:
        self._maybe_fail("create")
        task = Task(
            id=len(self._store.tasks) + 1,
            description=description,
            created_at=self._store.next_timestamp(),
        )
        self._store.tasks.append(task)
        return task

    def release(self) -> None:
        self.release_count += 1
        if self._store.release_error is not None:
            raise self._store.release_error


class InMemoryTaskStore(TaskStore):
    """Store falso que registra adquisiciones, consultas y liberaciones."""

    def __init__(self, tick: timedelta = timedelta(seconds=1)) -> None:
        self.tasks: list[Task] = []
        self.table_created = False
        self.queries: list[str] = []
        self.failures: dict[str, BaseException] = {}
        self.acquire_error: StoreError | None = None
        self.release_error: BaseException | None = None
        self.connections: list[InMemoryTaskRepository] = []
        self.disposed = False
        self._tick = tick
        self._now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def next_timestamp(self) -> datetime:
        self._now += self._tick
        return self._now

    @property
    def acquire_count(self) -> int:
        return len(self.connections)

    def acquire(self) -> InMemoryTaskRepository:
        if self.acquire_error is not None:
            raise self.acquire_error
        repository = InMemoryTaskRepository(self)
        self.connections.append(repository)
        return repository

    def dispose(self) -> None:
        self.disposed = True


@pytest.fixture
def store():
    return InMemoryTaskStore()


@pytest.fixture
def request_handler(store):
    return TaskRequestHandler(store=store)


@pytest.fixture
def call(request_handler):
    """Atajo: ejecuta una petición contra el handler con un requestId fijo."""

    def _call(method: str, path: str = "/tasks", body: str | None = None):
        return request_handler.handle(RawRequest(method, path, body), "req-1")

    return _call

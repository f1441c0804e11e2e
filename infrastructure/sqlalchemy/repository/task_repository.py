import logging
from typing import Any, Callable, TypeVar

from sqlalchemy import inspect, insert, select
from sqlalchemy.engine import Connection, Engine, RowMapping
from sqlalchemy.exc import SQLAlchemyError

from core.domain.errors import StoreConnectionError, StoreError
from core.domain.models.task import Task
from core.domain.ports.task_repository import TaskRepository, TaskStore
from infrastructure.resilience.retry import RetryPolicy
from infrastructure.sqlalchemy.model.models import tasks_table
from infrastructure.sqlalchemy.session.db import build_engine

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _to_store_error(
    exc: SQLAlchemyError, default_code: str, error_cls: type[StoreError] = StoreError
) -> StoreError:
    """Traduce un error de SQLAlchemy conservando el código del driver (SQLSTATE)."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or default_code
    message = str(orig).strip() if orig is not None else str(exc)
    return error_cls(message, code=code)


def _to_domain(row: RowMapping) -> Task:
    return Task(id=row["id"], description=row["description"], created_at=row["created_at"])


class SqlAlchemyTaskRepository(TaskRepository):
    """Operaciones sobre `tasks` con una conexión ya adquirida del pool."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    def _run(self, operation: Callable[[], T], default_code: str) -> T:
        # Una sentencia por transacción.
        try:
            result = operation()
            self._connection.commit()
            return result
        except SQLAlchemyError as e:
            self._rollback()
            raise _to_store_error(e, default_code) from e

    def _rollback(self) -> None:
        try:
            self._connection.rollback()
        except SQLAlchemyError as e:
            logger.warning(f"Rollback falló: {e}")

    def table_exists(self) -> bool:
        return self._run(
            lambda: inspect(self._connection).has_table(tasks_table.name),
            "DB_INIT_ERROR",
        )

    def create_table(self) -> None:
        self._run(lambda: tasks_table.create(self._connection), "DB_INIT_ERROR")

    def list(self) -> list[Task]:
        stmt = select(tasks_table).order_by(
            tasks_table.c.created_at.desc(), tasks_table.c.id.desc()
        )
        rows = self._run(
            lambda: self._connection.execute(stmt).mappings().all(), "DB_ERROR"
        )
        return [_to_domain(row) for row in rows]

    def create(self, description: str) -> Task:
        stmt = (
            insert(tasks_table)
            .values(description=description)
            .returning(*tasks_table.c)
        )
        row = self._run(
            lambda: self._connection.execute(stmt).mappings().one(), "DB_ERROR"
        )
        return _to_domain(row)

    def release(self) -> None:
        self._connection.close()


class SqlAlchemyTaskStore(TaskStore):
    """
    Pool de conexiones SQLAlchemy con ciclo de vida explícito.

    Se construye una vez por proceso y se cierra con `dispose()`. `acquire()`
    reintenta la conexión según `retry_policy` antes de rendirse.
    """

    def __init__(
        self,
        engine: Engine,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._engine = engine
        self._retry_policy = retry_policy or RetryPolicy(max_attempts=1, delay=0)

    @classmethod
    def from_url(
        cls,
        database_url: str,
        retry_policy: RetryPolicy | None = None,
        **engine_options: Any,
    ) -> "SqlAlchemyTaskStore":
        return cls(build_engine(database_url, **engine_options), retry_policy)

    @property
    def engine(self) -> Engine:
        return self._engine

    def _connect(self) -> Connection:
        try:
            return self._engine.connect()
        except SQLAlchemyError as e:
            raise _to_store_error(e, "DB_CONNECTION_ERROR", StoreConnectionError) from e

    def acquire(self) -> SqlAlchemyTaskRepository:
        return SqlAlchemyTaskRepository(self._retry_policy.call(self._connect))

    def dispose(self) -> None:
        logger.info("Cerrando el pool de conexiones")
        self._engine.dispose()

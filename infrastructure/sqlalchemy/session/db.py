import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def build_engine(
    database_url: str,
    connect_timeout: int = 5,
    pool_size: int = 5,
    max_overflow: int = 5,
) -> Engine:
    """
    Crea el engine (y su pool de conexiones) para la URL indicada.

    `pool_pre_ping` valida cada conexión al sacarla del pool, de modo que una
    conexión muerta se detecta al adquirirla y no a mitad de la consulta.
    """
    url = make_url(database_url)
    kwargs: dict = {"pool_pre_ping": True}

    if url.get_backend_name() == "postgresql":
        kwargs["connect_args"] = {"connect_timeout": connect_timeout}
        kwargs["pool_size"] = pool_size
        kwargs["max_overflow"] = max_overflow

    engine = create_engine(url, **kwargs)
    _register_pool_listeners(engine)
    logger.info(f"Engine creado para {url.render_as_string(hide_password=True)}")
    return engine


def _register_pool_listeners(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        logger.debug("Nueva conexión abierta en el pool")

    @event.listens_for(engine, "checkout")
    def _on_checkout(dbapi_connection, connection_record, connection_proxy) -> None:
        logger.debug("Conexión adquirida del pool")

    @event.listens_for(engine, "checkin")
    def _on_checkin(dbapi_connection, connection_record) -> None:
        logger.debug("Conexión devuelta al pool")

    @event.listens_for(engine, "invalidate")
    def _on_invalidate(dbapi_connection, connection_record, exception) -> None:
        logger.warning(f"Conexión invalidada y retirada del pool: {exception}")

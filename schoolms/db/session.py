import threading

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from schoolms.core.config import DATABASE_URL, STATEMENT_TIMEOUT_SECONDS

WRITE_GATE_KEY = "write_gate"


def _connect_args(url: str) -> dict:
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        return {"check_same_thread": False, "timeout": STATEMENT_TIMEOUT_SECONDS}
    if backend == "postgresql":
        millis = int(STATEMENT_TIMEOUT_SECONDS * 1000)
        return {"options": f"-c statement_timeout={millis}"}
    if backend == "mysql":
        seconds = max(1, int(STATEMENT_TIMEOUT_SECONDS))
        return {"read_timeout": seconds, "write_timeout": seconds}
    return {}


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    # pre-ping replaces connections that were closed underneath us
    return create_engine(url, pool_pre_ping=True, connect_args=_connect_args(url))


def make_session_factory(bind: Engine) -> sessionmaker:
    """
    Sessions from one factory share a single write gate, so transactional
    operations issued from different requests never interleave.
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind,
        info={WRITE_GATE_KEY: threading.RLock()},
    )


engine = create_db_engine()

SessionLocal = make_session_factory(engine)

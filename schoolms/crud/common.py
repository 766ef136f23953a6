import functools
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from schoolms.core.config import TRANSACTION_GATE_TIMEOUT_SECONDS
from schoolms.core.errors import DatabaseConnectionError, TransactionTimeout
from schoolms.db.session import WRITE_GATE_KEY
from schoolms.schemas.result import ActionResult, FailureReason

logger = logging.getLogger(__name__)

# errors that mean the database itself is unreachable
CONNECTIVITY_ERRORS = (OperationalError, InterfaceError)


@contextmanager
def write_gate(db: Session):
    """
    Serialize transactional work across all sessions of one session factory.
    Sessions created outside a gated factory run ungated.
    """
    gate = db.info.get(WRITE_GATE_KEY)
    if gate is None:
        yield
        return

    if not gate.acquire(timeout=TRANSACTION_GATE_TIMEOUT_SECONDS):
        raise TransactionTimeout(
            f"timed out after {TRANSACTION_GATE_TIMEOUT_SECONDS}s waiting for the write gate"
        )
    try:
        yield
    finally:
        gate.release()


def transactional(action: str, conflict: str | None = None):
    """
    Run a data-access function as one unit of work.

    The wrapped function stages its statements and returns an ActionResult;
    it never commits. A successful result is committed, a failed one is
    rolled back. Constraint violations become a ``duplicate`` failure,
    connectivity problems raise DatabaseConnectionError, and every other
    exception rolls back before propagating.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(db: Session, *args, **kwargs) -> ActionResult:
            with write_gate(db):
                try:
                    result = func(db, *args, **kwargs)
                    if result:
                        db.commit()
                    else:
                        db.rollback()
                    return result
                except IntegrityError as exc:
                    db.rollback()
                    logger.warning("Constraint violation while %s: %s", action, exc.orig)
                    return ActionResult.failure(
                        FailureReason.DUPLICATE,
                        conflict or f"Error {action}: record already exists",
                    )
                except CONNECTIVITY_ERRORS as exc:
                    db.rollback()
                    logger.error("Database unavailable while %s: %s", action, exc)
                    raise DatabaseConnectionError(
                        f"database unavailable while {action}"
                    ) from exc
                except SQLAlchemyError:
                    db.rollback()
                    logger.exception("Error %s", action)
                    return ActionResult.failure(FailureReason.ERROR, f"Error {action}")
                except Exception:
                    db.rollback()
                    raise

        return wrapper

    return decorator


def read_only(action: str, default_factory=list):
    """
    Listing policy: connectivity failures raise, any other storage error is
    logged and the caller gets ``default_factory()``.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(db: Session, *args, **kwargs):
            try:
                return func(db, *args, **kwargs)
            except CONNECTIVITY_ERRORS as exc:
                db.rollback()
                logger.error("Database unavailable while %s: %s", action, exc)
                raise DatabaseConnectionError(
                    f"database unavailable while {action}"
                ) from exc
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Error %s", action)
                return default_factory()

        return wrapper

    return decorator

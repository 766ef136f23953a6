from sqlalchemy.orm import sessionmaker

from schoolms.db.session import SessionLocal


def session_dependency(factory: sessionmaker):
    """FastAPI dependency yielding one session from ``factory`` per request."""

    def dependency():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    return dependency


# every request gets a fresh session from the shared factory and always closes it
get_db = session_dependency(SessionLocal)

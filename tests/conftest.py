import os

TEST_DB_FILE = "test_school.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# must be set before schoolms reads its settings
os.environ.setdefault("SCHOOLMS_DATABASE_URL", TEST_DB_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from schoolms.core.deps import get_db, session_dependency  # noqa: E402
from schoolms.db.base import Base  # noqa: E402
from schoolms.db.session import create_db_engine, make_session_factory  # noqa: E402
from schoolms.main import app  # noqa: E402

engine = create_db_engine(TEST_DB_URL)
TestingSessionLocal = make_session_factory(engine)


override_get_db = session_dependency(TestingSessionLocal)


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def clean_tables():
    """Every test starts from empty tables (child -> parent)."""
    db = TestingSessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        yield
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def session_factory():
    """For tests that open their own sessions, e.g. one per thread."""
    return TestingSessionLocal

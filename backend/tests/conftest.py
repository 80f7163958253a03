import sys
from pathlib import Path

# Add backend directory to Python path FIRST
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Now import after path is set
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from config.app_config import Settings
from database import Base, get_db, make_engine
from dependencies import build_generic_services_registry
from services.book_seed import seed_database_four_books
import models  # noqa: F401


@pytest.fixture
def engine():
    """Fresh in-memory database for each test"""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Create in-memory database for testing"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def four_books(db_session):
    """The demo books, saved to the test database"""
    return seed_database_four_books(db_session)


@pytest.fixture(scope="session")
def registry():
    """GenericServices registry holding every DTO the app uses"""
    return build_generic_services_registry()


@pytest.fixture
def client(session_factory, four_books):
    """Test client over the seeded test database (no redirects followed)"""
    from main import create_app

    app = create_app(Settings(seed_database=False))

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, follow_redirects=False) as client:
        yield client

import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# Mode cloud activé pour les tests (avant d'importer la config)
os.environ.setdefault("BACKEND_URL", "https://backend.test")
os.environ.setdefault("BACKEND_PUBLIC_KEY", "public-anon-key")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")

from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

# Créer engine SQLite pour tests AVANT d'importer app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer app
import daily_tasks.core.database
daily_tasks.core.database.engine = test_engine
daily_tasks.core.database.SessionLocal = TestingSessionLocal

# Maintenant importer app (qui utilisera notre engine SQLite)
from daily_tasks.core.database import Base, get_db
from daily_tasks.core.security import create_access_token
from daily_tasks.main import app
from daily_tasks.services.schema_capabilities import reset_capabilities

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    reset_capabilities()
    yield
    Base.metadata.drop_all(bind=test_engine)
    reset_capabilities()

# Override la dépendance
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    """Client de test FastAPI"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def alice_token():
    return create_access_token("alice-id", "alice@example.com", full_name="Alice")


@pytest.fixture
def bob_token():
    return create_access_token("bob-id", "bob@example.com", full_name="Bob")


@pytest.fixture
def alice_headers(alice_token):
    return {"Authorization": f"Bearer {alice_token}"}


@pytest.fixture
def bob_headers(bob_token):
    return {"Authorization": f"Bearer {bob_token}"}


@pytest.fixture
def failing_commit_on():
    """Remplace Session.commit par une version qui échoue au n-ième appel"""
    original = Session.commit

    def make(call_number):
        calls = []

        def commit(session):
            calls.append(session)
            if len(calls) == call_number:
                raise OperationalError("UPDATE tasks", {}, Exception("connection lost"))
            return original(session)

        return patch.object(Session, "commit", autospec=True, side_effect=commit)

    return make

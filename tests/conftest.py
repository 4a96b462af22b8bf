import os

# Settings are read once and cached, so the environment goes first
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["MONGODB_DB"] = "student_records_test"
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.auth import get_token_manager, hash_password  # noqa: E402
from app.db import mongodb  # noqa: E402
from app.main import app  # noqa: E402
from app.services import auth_service  # noqa: E402
from app.services.mongo_service import StudentStore, UserStore  # noqa: E402

ADMIN_PASSWORD = "admin-pass"


def fake_transaction(callback):
    """Stand-in for run_in_transaction on mongomock, which has no sessions.

    Runs the callback without a session and, if it raises, deletes every
    document it managed to write before re-raising.
    """
    db = mongodb.get_mongo_db()
    before = {
        name: [doc["_id"] for doc in db[name].find({}, {"_id": 1})]
        for name in mongodb.COLLECTIONS.values()
    }
    try:
        return callback(None)
    except Exception:
        for name, ids in before.items():
            db[name].delete_many({"_id": {"$nin": ids}})
        raise


@pytest.fixture(autouse=True)
def mongo(monkeypatch):
    """Fresh in-memory MongoDB with the production indexes for every test."""
    mongodb.set_mongo_client(mongomock.MongoClient())
    mongodb.init_mongo_indexes()
    monkeypatch.setattr(auth_service, "run_in_transaction", fake_transaction)
    yield mongodb.get_mongo_db()
    mongodb.set_mongo_client(None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def users():
    return UserStore()


@pytest.fixture
def students():
    return StudentStore()


def auth_headers(user_id) -> dict:
    token = get_token_manager().create_access_token(str(user_id))
    return {"Authorization": f"Bearer {token}"}


def make_user(name="Root Admin", email="root@school.edu", password=ADMIN_PASSWORD, role="admin") -> dict:
    return UserStore().insert(name, email, hash_password(password) if password else None, role)


@pytest.fixture
def admin():
    user = make_user()
    return {"id": str(user["_id"]), "email": user["email"], "headers": auth_headers(user["_id"])}


@pytest.fixture
def register_student(client):
    """POST /api/auth/register as a student, return the response JSON."""

    def _register(name="Ann", email="ann@x.com", age=20, course="CS", password="secret1"):
        response = client.post(
            "/api/auth/register",
            json={
                "name": name,
                "email": email,
                "password": password,
                "role": "student",
                "age": age,
                "course": course,
            },
        )
        assert response.status_code == 201, response.text
        body = response.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _register

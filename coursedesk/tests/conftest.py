"""
Pytest configuration and fixtures for all tests.
"""

import os

# Settings are read at import time, so configure before touching coursedesk
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["CASSANDRA_ENABLED"] = "false"
os.environ["MINIO_ENABLED"] = "false"
os.environ["WS_VERIFY_SESSION"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from coursedesk.core import redis_db
from coursedesk.core.database import SessionLocal, engine
from coursedesk.models import postgresql as models
from coursedesk.models.postgresql import Base
from coursedesk.services.connection_registry import ConnectionRegistry
from coursedesk.services.guard import Identity
from coursedesk.services.notification_service import NotificationService
from coursedesk.store.entity_store import EntityStore


class FakeRedis:
    """In-memory stand-in for the few Redis commands used for sessions."""

    def __init__(self):
        self._data = {}

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = str(value)

    def setex(self, key, ttl, value):
        self._data[key] = str(value)

    def delete(self, *keys):
        for key in keys:
            self._data.pop(key, None)


class FakeConnection:
    """Records pushes instead of writing to a socket."""

    def __init__(self, is_open=True):
        self.is_open = is_open
        self.sent = []
        self.closed = False

    def send(self, message):
        self.sent.append(message)
        return True

    async def close(self, code=1000):
        self.closed = True
        self.is_open = False


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_db, "redis_client", fake)
    return fake


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def store():
    db = SessionLocal()
    try:
        yield EntityStore(db)
    finally:
        db.close()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def notifier(store, registry):
    return NotificationService(store, registry)


# ============================================================================
# Direct data helpers
# ============================================================================

def make_user(store, role, name=None, email=None):
    name = name or f"{role.title()} {store.count(models.User) + 1}"
    user = store.insert(models.User, {
        "name": name,
        "email": email or f"{name.lower().replace(' ', '.')}@school.edu",
        "hashed_password": "not-a-real-hash",
        "role": role,
    })
    return Identity(user_id=user.id, role=user.role)


def make_course(store, teacher, title="Intro"):
    return store.insert(models.Course, {
        "title": title,
        "description": f"{title} description",
        "duration": "8 weeks",
        "teacher_id": teacher.user_id,
    })


def make_assignment(store, course, title="Essay 1"):
    return store.insert(models.Assignment, {
        "course_id": course.id,
        "title": title,
        "instructions": "Write 500 words",
        "due_date": datetime.utcnow() + timedelta(days=7),
    })


def enroll(store, student, course):
    return store.insert(models.Enrollment, {"student_id": student.user_id, "course_id": course.id})


@pytest.fixture
def teacher(store):
    return make_user(store, "teacher", name="Ada Teacher")


@pytest.fixture
def student(store):
    return make_user(store, "student", name="Sam Student")


@pytest.fixture
def course(store, teacher):
    return make_course(store, teacher)


# ============================================================================
# HTTP helpers
# ============================================================================

class ApiUser:
    def __init__(self, data):
        self.token = data["accessToken"]
        self.id = data["user"]["id"]
        self.role = data["user"]["role"]
        self.headers = {"Authorization": f"Bearer {self.token}"}


def register(client, name, role, email=None, password="password123"):
    response = client.post("/api/v1/auth/register", json={
        "name": name,
        "email": email or f"{name.lower().replace(' ', '.')}@school.edu",
        "password": password,
        "role": role,
    })
    assert response.status_code == 200, response.text
    return ApiUser(response.json())


def create_course_via_api(client, teacher, title="Intro"):
    response = client.post("/api/v1/courses", headers=teacher.headers, json={
        "title": title,
        "description": "An introduction",
        "duration": "10 weeks",
    })
    assert response.status_code == 200, response.text
    return response.json()


def create_assignment_via_api(client, teacher, course_id, title="Homework 1"):
    response = client.post("/api/v1/assignments", headers=teacher.headers, json={
        "courseId": course_id,
        "title": title,
        "instructions": "Solve all exercises",
        "dueDate": (datetime.utcnow() + timedelta(days=3)).isoformat(),
    })
    assert response.status_code == 200, response.text
    return response.json()


def enroll_via_api(client, student, course_id):
    return client.post("/api/v1/enrollments", headers=student.headers, json={"courseId": course_id})

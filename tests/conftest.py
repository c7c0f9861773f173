import os
from datetime import datetime, timedelta, timezone

# Settings читаются при импорте пакета, поэтому окружение задаём до него
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tutoring_service.infrastructure.db import get_db
from tutoring_service.infrastructure.models import (
    Assignment,
    AssignmentCompletion,
    Base,
    Group,
    GroupStudent,
    User,
)
from tutoring_service.infrastructure.security import create_access_token
from tutoring_service.main import app

# Тестовая БД в памяти: одно соединение на все потоки TestClient
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db():
    """Сессия для подготовки данных напрямую в БД"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)


class Factory:
    """Создание строк в обход API: заданий и выполнений через API не создать."""

    def __init__(self, session):
        self.session = session
        self._seq = 0
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _add(self, row):
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def user(self, role="student", name=None, email=None, username=None):
        self._seq += 1
        return self._add(User(
            email=email or f"{role}{self._seq}@example.com",
            username=username or f"{role}{self._seq}",
            password_hash="not-a-real-hash",
            name=name or f"{role.title()} {self._seq}",
            role=role,
        ))

    def teacher(self, **kw):
        return self.user(role="teacher", **kw)

    def student(self, **kw):
        return self.user(role="student", **kw)

    def group(self, teacher, name=None, description=None):
        self._seq += 1
        return self._add(Group(
            name=name or f"Group {self._seq}",
            description=description,
            teacher_id=teacher.id,
            created_at=self._tick(),
        ))

    def member(self, group, student):
        return self._add(GroupStudent(group_id=group.id, student_id=student.id, joined_at=self._tick()))

    def assignment(self, group, title=None):
        self._seq += 1
        return self._add(Assignment(
            group_id=group.id,
            title=title or f"Assignment {self._seq}",
            created_at=self._tick(),
        ))

    def complete(self, assignment, student):
        return self._add(AssignmentCompletion(assignment_id=assignment.id, student_id=student.id))


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def auth_header():
    def _make(user):
        return {"Authorization": f"Bearer {create_access_token(user_id=user.id, role=user.role)}"}
    return _make

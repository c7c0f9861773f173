from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from tutoring_service.application.use_cases.register_user import RegisterUser
from tutoring_service.domain.errors import DuplicateKey, ValidationError


@pytest.fixture
def repo():
    """Мок репозитория пользователей"""
    repo = MagicMock()
    repo.exists.return_value = False
    return repo


@pytest.fixture
def hasher():
    hasher = MagicMock()
    hasher.hash.return_value = "hashed"
    return hasher


def test_register_rejects_unknown_role(repo, hasher):
    """Роль проверяется и без HTTP-схемы: до БД дело не доходит"""
    uc = RegisterUser(repo=repo, hasher=hasher)
    with pytest.raises(ValidationError) as exc:
        uc.execute("a@example.com", "alice", "secret", None, "admin")
    assert exc.value.message == "Invalid role"
    repo.exists.assert_not_called()
    repo.create.assert_not_called()


def test_register_passes_hash_to_repository(repo, hasher):
    uc = RegisterUser(repo=repo, hasher=hasher)
    uc.execute("a@example.com", "alice", "secret", "Alice", "teacher")
    hasher.hash.assert_called_once_with("secret")
    repo.create.assert_called_once_with("a@example.com", "alice", "hashed", "Alice", "teacher")


def test_register_existing_user(repo, hasher):
    repo.exists.return_value = True
    uc = RegisterUser(repo=repo, hasher=hasher)
    with pytest.raises(DuplicateKey):
        uc.execute("a@example.com", "alice", "secret", None, "student")
    repo.create.assert_not_called()


def test_register_lost_race_is_duplicate(repo, hasher):
    """Параллельная регистрация прошла проверку, уникальный индекс отказал"""
    repo.create.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
    uc = RegisterUser(repo=repo, hasher=hasher)
    with pytest.raises(DuplicateKey) as exc:
        uc.execute("a@example.com", "alice", "secret", None, "student")
    assert exc.value.message == "Email or username already exists"

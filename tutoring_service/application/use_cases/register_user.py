import structlog
from sqlalchemy.exc import IntegrityError

from ...domain.entities import ROLES
from ...domain.errors import DuplicateKey, ValidationError
from ...infrastructure.models import UserORM

logger = structlog.get_logger()

DUPLICATE_MESSAGE = "Email or username already exists"

class IUserRepository:
    def exists(self, email: str, username: str) -> bool: ...
    def create(self, email: str, username: str, password_hash: str, name: str | None, role: str) -> UserORM: ...

class IPasswordHasher:
    def hash(self, plain: str) -> str: ...

class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, email: str, username: str, password: str, name: str | None, role: str) -> UserORM:
        if role not in ROLES:
            raise ValidationError("Invalid role")
        if self.repo.exists(email, username):
            raise DuplicateKey(DUPLICATE_MESSAGE)
        pwd_hash = self.hasher.hash(password)
        try:
            user = self.repo.create(email, username, pwd_hash, name, role)
        except IntegrityError as e:
            # проиграли гонку с параллельной регистрацией
            raise DuplicateKey(DUPLICATE_MESSAGE) from e
        logger.info("user_registered", user_id=user.id, role=user.role)
        return user

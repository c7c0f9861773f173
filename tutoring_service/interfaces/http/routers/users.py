from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.orm import Session

from ....application.use_cases.register_user import RegisterUser
from ....domain.errors import InvalidCredentials, NotFound
from ....infrastructure.db import get_db
from ....infrastructure.metrics import login_failures_total
from ....infrastructure.rate_limit import limiter, login_limit, register_limit
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token
from ..errors import persistence_guard
from ..schemas import (
    DB_INT_MAX,
    LoginReq,
    LoginResp,
    LoginResult,
    RegisterReq,
    UserOut,
    UserResp,
    UserResult,
)

router = APIRouter(prefix="/api/users", tags=["users"])

@router.post("/register", response_model=UserResp, status_code=status.HTTP_201_CREATED)
@limiter.limit(register_limit)
def register(request: Request, payload: RegisterReq, db: Session = Depends(get_db)):
    uc = RegisterUser(repo=UserRepository(db), hasher=PasswordHasher())
    with persistence_guard("Internal server error", "register"):
        user = uc.execute(payload.email, payload.username, payload.password, payload.name, payload.role)
    return UserResp(result=UserResult(user=UserOut.model_validate(user)))

@router.post("/login", response_model=LoginResp)
@limiter.limit(login_limit)
def login(request: Request, payload: LoginReq, db: Session = Depends(get_db)):
    hasher = PasswordHasher()
    with persistence_guard("Internal server error", "login"):
        row = UserRepository(db).get_by_email(payload.email)
    if row is None:
        # одинаковая стоимость ответа для неизвестного email и неверного пароля
        hasher.dummy_verify()
        login_failures_total.inc()
        raise InvalidCredentials()
    if not hasher.verify(payload.password, row.password_hash):
        login_failures_total.inc()
        raise InvalidCredentials()

    token = create_access_token(user_id=row.id, role=row.role)
    return LoginResp(result=LoginResult(
        user=UserOut.model_validate(row),
        user_id=row.id,
        role=row.role,
        access_token=token,
    ))

@router.get("/profile/{user_id}", response_model=UserResp)
def profile(user_id: int = Path(le=DB_INT_MAX), db: Session = Depends(get_db)):
    with persistence_guard("Failed to fetch user", "profile"):
        row = UserRepository(db).get(user_id)
    if row is None:
        raise NotFound("User not found")
    return UserResp(result=UserResult(user=UserOut.model_validate(row)))

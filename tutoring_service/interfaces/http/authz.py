from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from ...domain.errors import InvalidToken
from ...infrastructure.security import decode_token

# auto_error=False: отсутствие заголовка отдаём как 401 в общем конверте
bearer = HTTPBearer(auto_error=False)

def get_user_id(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> int:
    if creds is None:
        raise InvalidToken("Not authenticated")
    try:
        return decode_token(creds.credentials)
    except JWTError:
        raise InvalidToken()

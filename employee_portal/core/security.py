from datetime import datetime, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError
from employee_portal.core.config import settings
from employee_portal.core.errors import InvalidToken
from employee_portal.db.models.user import Role

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS)
ALGORITHM = "HS256"


class Claims(BaseModel):
    """Identity carried inside an access token."""
    user_id: int
    role: Role
    employee_id: int | None = None


def hash_password(p: str) -> str:
    return pwd_context.hash(p)

def verify_password(p: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(p, hashed)
    except (ValueError, TypeError):
        # unrecognised or empty hash
        return False


def create_access_token(claims: Claims, now: datetime | None = None) -> str:
    issued = int((now or datetime.now(timezone.utc)).timestamp())
    payload = {
        "userId": claims.user_id,
        "role": claims.role.value,
        "employeeId": claims.employee_id,
        "iat": issued,
        "exp": issued + settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)

def decode_token(token: str, now: datetime | None = None) -> Claims:
    """Verify signature and expiry, returning the embedded claims.

    Expiry is checked here rather than by jose so that a token is rejected at
    exactly ``exp`` and the clock can be injected.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM], options={"verify_exp": False})
    except JWTError:
        raise InvalidToken()

    exp = payload.get("exp")
    if not isinstance(exp, (int, float)):
        raise InvalidToken()
    current = (now or datetime.now(timezone.utc)).timestamp()
    if current >= exp:
        raise InvalidToken()

    try:
        return Claims(user_id=payload["userId"], role=payload["role"], employee_id=payload.get("employeeId"))
    except (KeyError, ValidationError):
        raise InvalidToken()

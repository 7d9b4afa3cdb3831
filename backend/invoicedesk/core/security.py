from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import ValidationError

from invoicedesk.core.config import settings
from invoicedesk.schemas.user import TokenPayload

# Rounds are lowered through BCRYPT_ROUNDS in tests
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None) -> str:
    """
    Signed JWT whose subject is the user id.
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": str(subject), "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def decode_token(token: str) -> Optional[TokenPayload]:
    """
    The token's payload, or None when it is malformed, expired, badly signed
    or has no subject.
    """
    try:
        payload = TokenPayload.model_validate(
            jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        )
    except (JWTError, ValidationError):
        return None
    return payload if payload.sub else None

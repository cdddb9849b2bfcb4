from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from . import crud, models
from .config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, REFRESH_TOKEN_EXPIRE_MINUTES
from .database import get_db
from .errors import AuthError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"

# bcrypt safety limit
def _safe_password(pw: str) -> str:
    return pw[:72] if pw else pw

def hash_password(password: str) -> str:
    return pwd_context.hash(_safe_password(password))

def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(_safe_password(password), hashed)

def _create_token(data: dict, token_type: str, expires_minutes: int) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def create_access_token(data: dict, expires_delta: int = None) -> str:
    return _create_token(data, ACCESS, expires_delta if expires_delta is not None else ACCESS_TOKEN_EXPIRE_MINUTES)

def create_refresh_token(data: dict, expires_delta: int = None) -> str:
    return _create_token(data, REFRESH, expires_delta if expires_delta is not None else REFRESH_TOKEN_EXPIRE_MINUTES)

def decode_token(token: str, expected_type: str = ACCESS) -> int:
    """Return the user id carried by a valid, unexpired token of the given type."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or expired token.")
    user_id = payload.get("user_id")
    if user_id is None or payload.get("type") != expected_type:
        raise AuthError("Invalid or expired token.")
    return user_id


# -------- CURRENT USER --------
security = HTTPBearer(auto_error=False)

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> models.User:
    if credentials is None or not credentials.credentials:
        raise AuthError("Access denied. No token provided.")

    user_id = decode_token(credentials.credentials, ACCESS)
    user = crud.get_user(db, user_id)
    if not user:
        raise AuthError("Invalid or expired token.")
    return user

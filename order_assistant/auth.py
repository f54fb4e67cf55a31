# order_assistant/auth.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import get_settings
from .errors import AuthorizationFailed
from .models import User

pwd = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """False for a wrong password and for a stored hash passlib cannot identify."""
    if not password_hash:
        return False
    try:
        return pwd.verify(password, password_hash)
    except ValueError:
        return False


def create_token(user_id: int) -> str:
    cfg = get_settings()
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "iat": issued,
        "exp": issued + timedelta(minutes=cfg.jwt_expire_minutes),
    }
    return jwt.encode(claims, cfg.jwt_secret, algorithm=cfg.jwt_algorithm)


def decode_token(token: str) -> Optional[int]:
    """User id carried in ``sub``, or None for a bad signature, expiry or subject."""
    cfg = get_settings()
    try:
        claims = jwt.decode(token, cfg.jwt_secret, algorithms=[cfg.jwt_algorithm])
    except JWTError:
        return None
    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub.isdigit():
        return None
    return int(sub)


def optional_user_id(authorization: str | None = Header(default=None)) -> Optional[int]:
    """User id from a valid Bearer token, else None. Rejection is left to the caller."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return decode_token(token.strip())


def authorize_customer(db: Session, user_id: Optional[int], customer_id: str) -> User:
    """The signed-in user must be bound to ``customer_id``."""
    if user_id is None:
        raise AuthorizationFailed("Unauthorized", status_code=401)

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthorizationFailed("Unauthorized", status_code=401)
    if user.customer_id != customer_id:
        raise AuthorizationFailed("Unauthorized access to customer data", status_code=403)
    return user

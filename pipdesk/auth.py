# pipdesk/auth.py
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
import hashlib
import hmac
import secrets

from .config import settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a 'sha256:<salt>$<hex>' hash"""
    if not hashed_password or ':' not in hashed_password:
        return False

    algo, stored = hashed_password.split(':', 1)
    if algo != 'sha256' or '$' not in stored:
        return False

    salt, stored_hash = stored.split('$', 1)
    computed_hash = hashlib.sha256(f"{salt}{plain_password}".encode()).hexdigest()
    return hmac.compare_digest(stored_hash, computed_hash)


def get_password_hash(password: str) -> str:
    salt = secrets.token_hex(8)
    hex_hash = hashlib.sha256(f"{salt}{password}".encode()).hexdigest()
    return f"sha256:{salt}${hex_hash}"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def verify_token(token: str, token_type: str = "access") -> Optional[dict]:
    """Decode a token; None when invalid, expired or of the wrong type"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload

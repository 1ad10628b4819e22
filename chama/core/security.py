# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""PIN digests and signed session tokens."""
import hashlib
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from chama.core.errors import InvalidToken

PIN_RE = re.compile(r"[0-9]{4}")
EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


def hash_pin(pin: str) -> str:
    return hashlib.sha256(pin.encode("utf-8")).hexdigest()


def is_valid_pin(pin: str) -> bool:
    return isinstance(pin, str) and PIN_RE.fullmatch(pin) is not None


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and EMAIL_RE.fullmatch(email) is not None


def issue_token(claims: Dict[str, Any], secret: str, ttl_seconds: int,
                algorithm: str = "HS256") -> str:
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + timedelta(seconds=ttl_seconds)
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Dict[str, Any]:
    # Expired and forged tokens get the same answer
    try:
        return jwt.decode(token, secret, algorithms=[algorithm], options={"require": ["exp"]})
    except jwt.PyJWTError:
        raise InvalidToken()

"""Bearer token codec.

Uses HS256 with the application's secret key. Tokens carry the user id in
`sub` plus the standard `iat`/`exp`/`iss`/`aud` claims and a random `jti`, so
two tokens issued for one user in the same second still differ.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Optional

import jwt
from jwt import InvalidTokenError

from hive.domain.errors import InvalidToken
from hive.settings import settings


def issue(user_id: str, *, ttl_seconds: Optional[int] = None, now: Optional[float] = None) -> str:
    """Encode a signed token for `user_id` that expires after `ttl_seconds`."""
    issued_at = int(now if now is not None else time.time())
    ttl = settings.jwt_ttl_seconds if ttl_seconds is None else int(ttl_seconds)
    body: Dict[str, Any] = {
        "sub": str(user_id),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": issued_at,
        "exp": issued_at + ttl,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(body, settings.secret_key, algorithm="HS256")


def verify(token: str) -> str:
    """Return the user id carried by `token`.

    Raises InvalidToken on a bad signature, malformed structure, missing
    claims or expiry.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["sub", "exp", "iat"]},
        )
    except InvalidTokenError as exc:
        raise InvalidToken() from exc
    sub = str(payload.get("sub") or "").strip()
    if not sub:
        raise InvalidToken()
    return sub


def read_expiry(token: str) -> Optional[int]:
    """Return the unverified `exp` claim, or None when it cannot be read."""
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except InvalidTokenError:
        return None
    exp = payload.get("exp")
    if isinstance(exp, (int, float)):
        return int(exp)
    return None

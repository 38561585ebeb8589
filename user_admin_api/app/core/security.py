"""
Session tokens for signed‑in users.

Instead of keeping the current user in browser storage, clients
exchange credentials for a bearer token and present it on later
requests.  The ``get_current_session`` dependency turns the token back
into a ``Session`` object for the request.

Tokens follow the JSON Web Token layout (``header.payload.signature``)
with an HMAC‑SHA256 signature over base64url encoded parts.  The
payload carries the user id in ``sub`` and an expiration timestamp in
``exp``.  The secret key comes from the application settings.
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .dependencies import UserServiceDep
from .exceptions import UserNotFoundError
from ..schemas.user import Session, UserPublic
from ..services.user_service import dashboard_for


logger = logging.getLogger(__name__)


_TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


def _encode_segment(obj: dict) -> str:
    raw = json.dumps(obj, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _decode_segment(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _signature(signed_part: str) -> str:
    digest = hmac.new(settings.secret_key.encode("utf-8"), signed_part.encode("ascii"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def create_access_token(claims: Dict[str, str], expires_delta: Optional[int] = None) -> str:
    """Sign ``claims`` into a session token.

    Args:
        claims: Token claims; sessions put the user id in ``sub``.
        expires_delta: Lifetime in seconds.  Defaults to
            ``ACCESS_TOKEN_EXPIRE_MINUTES``.
    """
    lifetime = expires_delta or settings.access_token_expire_minutes * 60
    payload = dict(claims, exp=int(time.time()) + lifetime)
    signed_part = f"{_encode_segment(_TOKEN_HEADER)}.{_encode_segment(payload)}"
    return f"{signed_part}.{_signature(signed_part)}"


def decode_access_token(token: str) -> Optional[Dict[str, str]]:
    """Return the claims of a valid, unexpired token, else ``None``."""
    signed_part, _, signature = token.rpartition(".")
    if signed_part.count(".") != 1:
        return None
    try:
        if not hmac.compare_digest(_signature(signed_part), signature):
            return None
        claims = json.loads(_decode_segment(signed_part.split(".")[1]))
        expires_at = int(claims["exp"])
    except (ValueError, TypeError, KeyError) as exc:
        # malformed segments or claims
        logger.debug("Rejected malformed token: %s", exc)
        return None
    if expires_at < int(time.time()):
        return None
    return claims


def issue_session_token(user: UserPublic) -> str:
    """Create a session token whose subject is the user's id."""
    return create_access_token({"sub": user.id})


security = HTTPBearer(auto_error=False)


async def get_current_session(
    service: UserServiceDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Session:
    """Dependency that resolves the bearer token into a ``Session``.

    Raises HTTP 401 if the header is missing, the token is invalid or
    expired, or the user it names no longer exists.  The user is
    re‑read on every request so edits are visible immediately.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        record = await service.get_user(payload.get("sub"))
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = UserPublic.from_record(record)
    return Session(user=user, dashboard=dashboard_for(user.role))

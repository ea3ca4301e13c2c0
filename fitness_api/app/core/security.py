"""
Authentication primitives and route guards.

Access tokens are compact HS256 JWTs built with ``hmac`` and
``base64`` only: ``<header>.<claims>.<signature>``, each part
base64url encoded without padding.  Claims carry the user id
(``sub``), e-mail and role plus an ``exp`` UNIX timestamp; the key is
``settings.secret_key``.  Stored passwords have the form
``<salt hex>$<pbkdf2-sha256 hex>``.

``require_permissions`` builds the authorisation guard used by the
routers: the user must hold every listed permission.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000
SALT_BYTES = 16
TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


def _encode_segment(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _decode_segment(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _json_segment(value: Dict[str, Any]) -> str:
    return _encode_segment(json.dumps(value, separators=(",", ":"), default=str).encode("utf-8"))


def _signature(signing_input: str) -> bytes:
    return hmac.new(settings.secret_key.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Sign ``claims`` into a bearer token.

    Parameters
    ----------
    claims : dict
        Usually ``{"sub": <user id>, "email": ..., "role": ...}``.
    expires_delta : Optional[int]
        Lifetime in seconds; ``ACCESS_TOKEN_EXPIRE_MINUTES`` when omitted.
    """
    lifetime = expires_delta or settings.access_token_expire_minutes * 60
    body = dict(claims, exp=int(time.time()) + lifetime)
    signing_input = f"{_json_segment(TOKEN_HEADER)}.{_json_segment(body)}"
    return f"{signing_input}.{_encode_segment(_signature(signing_input))}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid, unexpired token, else ``None``."""
    try:
        header_segment, claims_segment, signature_segment = token.split(".")
        signing_input = f"{header_segment}.{claims_segment}"
        if not hmac.compare_digest(_signature(signing_input), _decode_segment(signature_segment)):
            return None
        claims = json.loads(_decode_segment(claims_segment))
    except (ValueError, TypeError, UnicodeError):
        return None
    expires_at = claims.get("exp")
    if not isinstance(expires_at, (int, float)) or expires_at < time.time():
        return None
    return claims


def _pbkdf2(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)


def hash_password(password: str) -> str:
    salt = os.urandom(SALT_BYTES)
    return f"{salt.hex()}${_pbkdf2(password, salt).hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a password against a stored ``salt$hash`` string."""
    if not hashed_password or "$" not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split("$", 1)
    try:
        salt, expected = bytes.fromhex(salt_hex), bytes.fromhex(hash_hex)
    except ValueError:
        return False
    return hmac.compare_digest(_pbkdf2(plain_password or "", salt), expected)


security = HTTPBearer(auto_error=False)


def _value(item: Any) -> str:
    """Return the plain string behind an enum member or string."""
    return getattr(item, "value", item)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """Dependency that retrieves the current authenticated user.

    The token only identifies the user; role and permissions are read
    from the database on every request so that revoking a permission
    takes effect immediately.  Returns a dict with ``user_id``,
    ``email``, ``role`` and ``permissions``.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise _unauthorized("Invalid or expired token")

    from ..services.user_service import UserService

    user = UserService.get_active_user(payload["sub"])
    if user is None:
        raise _unauthorized("User no longer exists")
    if not user.get("is_active", True):
        logger.warning("Rejected token for disabled user %s", payload["sub"])
        raise _unauthorized("User account disabled")
    return {
        "user_id": str(user["_id"]),
        "email": user.get("email"),
        "role": user.get("role"),
        "permissions": list(user.get("permissions") or []),
    }


# ---------------------------------------------------------------------------
# Authorisation guards
# ---------------------------------------------------------------------------

def require_permissions(*permissions: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory: the current user must hold every permission.

    Use as ``Depends(require_permissions(UserPermission.MANAGE_USERS))``.
    With no permissions listed the guard only requires authentication.
    """

    def _permission_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        granted = set(current_user.get("permissions") or [])
        if not all(_value(permission) in granted for permission in permissions):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _permission_dependency


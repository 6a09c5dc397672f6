"""Caller identity from externally issued bearer tokens.

Tokens are issued and signed by the identity provider. This module only
verifies them and extracts a stable subject identifier; it never stores
credentials.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

from babytracker.config import settings
from babytracker.core.exceptions import UnauthenticatedError

_EMAIL_CLAIMS = ("email", "preferred_username", "upn")


@dataclass(frozen=True)
class CallerIdentity:
    """The authenticated caller, passed explicitly into every service call."""

    user_id: str
    email: str | None = None
    name: str | None = None


def _verification_key() -> str:
    return settings.JWT_PUBLIC_KEY or settings.SECRET_KEY


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and (when configured) audience and issuer.

    Raises:
        jose.JWTError: If the token is malformed or fails verification.
    """
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    return jwt.decode(
        token,
        _verification_key(),
        algorithms=[settings.ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        options=options,
    )


def resolve_identity(claims: dict[str, Any]) -> CallerIdentity:
    """Map validated token claims to a :class:`CallerIdentity`.

    The user id is the first non-empty claim listed in
    ``settings.USER_ID_CLAIMS``.
    """
    user_id = next(
        (str(claims[name]) for name in settings.USER_ID_CLAIMS if claims.get(name)),
        None,
    )
    if user_id is None:
        raise UnauthenticatedError("User ID not found in token claims")

    email = next((claims[name] for name in _EMAIL_CLAIMS if claims.get(name)), None)
    return CallerIdentity(
        user_id=user_id,
        email=email.lower() if isinstance(email, str) else None,
        name=claims.get("name"),
    )


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a token with the configured symmetric key.

    Development and test helper; production tokens come from the identity
    provider.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    if settings.JWT_AUDIENCE is not None:
        to_encode.setdefault("aud", settings.JWT_AUDIENCE)
    if settings.JWT_ISSUER is not None:
        to_encode.setdefault("iss", settings.JWT_ISSUER)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

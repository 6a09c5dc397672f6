import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from babytracker.core.exceptions import UnauthenticatedError
from babytracker.core.security import CallerIdentity, decode_token, resolve_identity

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> CallerIdentity:
    """Resolve the caller from the ``Authorization: Bearer`` header.

    The token was issued by the external identity provider; only its
    signature and claims are checked here.

    Raises:
        HTTPException 401: If the token is missing, invalid, or carries no
            user id.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        claims = decode_token(credentials.credentials)
        return resolve_identity(claims)
    except (JWTError, UnauthenticatedError) as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise credentials_exception

"""Domain errors raised by the service layer.

Services raise these at the point of violation and never catch them; the
REST exception handlers and the GraphQL router translate them into
status codes at the transport boundary.
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class BabyTrackerError(Exception):
    """Base exception for domain errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def extensions(self) -> dict:
        # Picked up by graphql-core when the error is located in a resolver.
        return {"code": self.code}


class NotFoundError(BabyTrackerError):
    """Entity does not resolve, or an invitation token is invalid or expired."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ValidationError(BabyTrackerError):
    """Malformed input (date/time strings, missing fields)."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"


class ForbiddenError(BabyTrackerError):
    """Caller lacks membership, ownership or creator rights."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class ConflictError(BabyTrackerError):
    """State conflict: duplicate active sleep, duplicate membership, ..."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class UnauthenticatedError(BabyTrackerError):
    """No usable caller identity on the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"


async def _domain_error_handler(request: Request, exc: BabyTrackerError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors()), "code": ValidationError.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BabyTrackerError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

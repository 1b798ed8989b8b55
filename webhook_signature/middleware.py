"""
Starlette / FastAPI adapters for the Validator.

- validate_request: validate a Starlette Request directly
- SignatureVerifier: FastAPI dependency guarding a single route
- SignatureValidationMiddleware: gatekeeper in front of a set of path prefixes

Every validation failure is answered with the same 401 body. A body that
cannot be read (client disconnect) is answered with 400.
"""

import logging
from typing import Callable, Iterable

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect
from starlette.types import ASGIApp

from webhook_signature.errors import PUBLIC_MESSAGE, BodyReadError, SignatureValidationError
from webhook_signature.logging_utils import log_signature_result
from webhook_signature.metrics import record_validation_outcome
from webhook_signature.validator import Validator


logger = logging.getLogger(__name__)

BODY_READ_ERROR_MESSAGE = "request body could not be read"


async def validate_request(validator: Validator, request: Request) -> bytes:
    """
    Validate a Starlette request.

    Starlette caches the body on the request, so endpoints and downstream
    middleware can still read it after validation.

    Returns:
        The body bytes

    Raises:
        SignatureValidationError: the request must be rejected
        BodyReadError: the client went away before the body was read
    """
    try:
        timestamp, signature = validator.read_headers(request.headers)
    except SignatureValidationError as e:
        log_signature_result(request, e.reason)
        raise

    try:
        body = await request.body()
    except ClientDisconnect as e:
        logger.error("Client disconnected before the request body was read")
        log_signature_result(request, "body_read_error")
        record_validation_outcome("body_read_error")
        raise BodyReadError(BODY_READ_ERROR_MESSAGE) from e

    try:
        validator.verify(timestamp, signature, request.url.query, body)
    except SignatureValidationError as e:
        log_signature_result(request, e.reason)
        raise

    log_signature_result(request, "valid")
    return body


class SignatureVerifier:
    """
    FastAPI dependency that rejects unsigned or badly signed requests.

    Usage:
        verify = SignatureVerifier(validator)

        @app.post("/webhook")
        async def webhook(body: bytes = Depends(verify)):
            ...
    """

    def __init__(self, validator: Validator):
        self.validator = validator

    async def __call__(self, request: Request) -> bytes:
        try:
            return await validate_request(self.validator, request)
        except SignatureValidationError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=PUBLIC_MESSAGE
            )
        except BodyReadError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=BODY_READ_ERROR_MESSAGE
            )


class SignatureValidationMiddleware(BaseHTTPMiddleware):
    """
    Reject requests to protected paths before any route handler runs.

    Only paths starting with one of ``protected_paths`` are checked; all other
    requests pass through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        validator: Validator,
        protected_paths: Iterable[str] = ("/webhook",),
    ):
        super().__init__(app)
        self.validator = validator
        self.protected_paths = tuple(protected_paths)

    def is_protected(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.protected_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.is_protected(request.url.path):
            return await call_next(request)

        try:
            await validate_request(self.validator, request)
        except SignatureValidationError:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": PUBLIC_MESSAGE}
            )
        except BodyReadError:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"detail": BODY_READ_ERROR_MESSAGE}
            )

        # The body read above is replayed to the downstream app
        return await call_next(request)

from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from credential_registry.models.identity import normalize_address
from credential_registry.models.principal import Principal
from credential_registry.services import token_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_caller(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Principal:
    """Validate the bearer JWT and return the caller's identity.

    Used as a FastAPI dependency on every submission endpoint.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        claims = token_service.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    try:
        identity = normalize_address(str(claims["sub"]))
    except ValueError:
        logger.warning("Token subject is not an address: %r", claims["sub"])
        raise _unauthorized("Token subject is not a valid identity") from None

    logger.debug("Token validated for caller=%s", identity)
    return Principal(identity=identity)


def parse_identity(raw: str) -> str:
    """Normalize an identity from a path parameter, or 422."""
    try:
        return normalize_address(raw)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None

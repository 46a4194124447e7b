"""FastAPI auth dependencies — the identity gate.

get_current_user is attached to every resource router at the
include_router level, so a route cannot be mounted without it. The
handlers then depend on it again to read the caller's user id; FastAPI
caches the result per request, so the token is verified once.

Failures are domain errors, rendered as 401 by ledgerly.errors:
- Unauthenticated: no Authorization header, or not "Bearer <token>"
- InvalidCredential: bad signature, expired, wrong token type, bad subject
"""

import uuid
from typing import Optional

import structlog
from fastapi import Header

from ledgerly.auth.jwt import TokenError, token_subject, verify_token
from ledgerly.errors import InvalidCredential, Unauthenticated

logger = structlog.get_logger()


class CurrentIdentity:
    """The verified caller. user_id scopes every resource query."""

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id})"


def authenticate(authorization: Optional[str]) -> CurrentIdentity:
    """Turn an Authorization header value into a verified identity."""
    if not authorization:
        raise Unauthenticated()

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated("Authorization header must be 'Bearer <token>'")

    try:
        payload = verify_token(token)
        if payload.get("type", "access") != "access":
            raise TokenError("Not an access token")
        user_id = uuid.UUID(token_subject(payload))
    except TokenError as e:
        logger.info("auth.token_rejected", reason=str(e))
        raise InvalidCredential(str(e))
    except ValueError:
        logger.info("auth.token_rejected", reason="subject is not a user id")
        raise InvalidCredential("Invalid token subject")

    return CurrentIdentity(user_id=user_id)


async def get_current_user(
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Extract the current identity (required — 401 if missing or invalid)."""
    identity = authenticate(authorization)
    structlog.contextvars.bind_contextvars(user_id=str(identity.user_id))
    return identity

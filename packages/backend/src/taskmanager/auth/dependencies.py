"""FastAPI auth dependencies.

get_current_user is the gate in front of every protected route. It
resolves the bearer token to a user, or rejects the request with one
uniform 401 whatever went wrong: missing header, bad signature,
unknown user, or a token that was logged out.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.auth.tokens import TokenService
from taskmanager.config import settings
from taskmanager.db.engine import get_db
from taskmanager.db.models import User, UserToken
from taskmanager.errors import TokenError

logger = structlog.get_logger()

AUTH_ERROR = "Please authenticate."


@dataclass
class CurrentIdentity:
    """The authenticated user plus the exact token they presented.

    Handlers need the token to log out the current session only.
    """

    user: User
    token: str


def get_token_service(db: AsyncSession = Depends(get_db)) -> TokenService:
    return TokenService(db, secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _reject() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=AUTH_ERROR,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """Resolve the acting user from `Authorization: Bearer <token>`."""
    if not authorization or not authorization.startswith("Bearer "):
        raise _reject()
    token = authorization[len("Bearer "):].strip()

    try:
        user_id = tokens.verify(token)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=str(e))
        raise _reject()

    # The token must still be on the user's active list.
    q = (
        select(User)
        .join(UserToken, UserToken.user_id == User.id)
        .where(User.id == user_id, UserToken.token == token)
    )
    result = await tokens.db.execute(q)
    user = result.scalars().first()
    if not user:
        logger.info("auth.token_revoked_or_unknown_user", user_id=str(user_id))
        raise _reject()

    return CurrentIdentity(user=user, token=token)

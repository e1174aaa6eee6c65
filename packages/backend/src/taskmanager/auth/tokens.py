"""Bearer token issuance, verification and revocation.

Tokens are HS256 JWTs carrying the user id in `sub`, plus `iat` and a
random `jti` so concurrent sessions never share a token string. There
is no `exp`: a token stays valid exactly as long as its row exists in
user_tokens. Issuing and revoking both commit.
"""

import secrets
import uuid
from datetime import datetime, timezone

import jwt
import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.db.models import UserToken
from taskmanager.errors import TokenError

logger = structlog.get_logger()


class TokenService:
    """Signs tokens with an injected secret and tracks them per user."""

    def __init__(self, db: AsyncSession, secret: str, algorithm: str = "HS256"):
        self.db = db
        self.secret = secret
        self.algorithm = algorithm

    # ─── Signing ─────────────────────────────────────────

    def sign(self, user_id: uuid.UUID) -> str:
        payload = {
            "sub": str(user_id),
            "iat": datetime.now(timezone.utc),
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> uuid.UUID:
        """Check the signature and return the embedded user id.

        Raises TokenError on a bad signature or a malformed payload.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        try:
            return uuid.UUID(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise TokenError("Invalid token: bad subject")

    # ─── Token list ──────────────────────────────────────

    async def issue(self, user_id: uuid.UUID) -> str:
        """Sign a new token and append it to the user's active list."""
        token = self.sign(user_id)
        self.db.add(UserToken(user_id=user_id, token=token))
        await self.db.commit()
        logger.info("token.issued", user_id=str(user_id))
        return token

    async def revoke(self, user_id: uuid.UUID, token: str) -> None:
        """Remove one token. No-op if it is already gone."""
        await self.db.execute(
            delete(UserToken).where(
                UserToken.user_id == user_id, UserToken.token == token
            )
        )
        await self.db.commit()
        logger.info("token.revoked", user_id=str(user_id))

    async def revoke_all(self, user_id: uuid.UUID) -> None:
        """Clear the user's whole token list."""
        await self.db.execute(delete(UserToken).where(UserToken.user_id == user_id))
        await self.db.commit()
        logger.info("token.revoked_all", user_id=str(user_id))

    async def active_tokens(self, user_id: uuid.UUID) -> list[str]:
        result = await self.db.execute(
            select(UserToken.token)
            .where(UserToken.user_id == user_id)
            .order_by(UserToken.id)
        )
        return list(result.scalars().all())

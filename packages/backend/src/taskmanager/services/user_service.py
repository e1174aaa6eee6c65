"""User service — the credential store.

Creates, authenticates, updates and deletes user accounts. Passwords
are hashed here and nowhere else, so every write path that touches
the password column goes through hash_password.

Deleting a user removes their tasks and tokens first, in the same
transaction, so no orphaned tasks are ever visible.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.auth.password import burn_verification, hash_password, verify_password
from taskmanager.db.models import Task, User, UserToken
from taskmanager.errors import AuthFailure, ValidationError
from taskmanager.schemas.user import UserCreate, UserUpdate

logger = structlog.get_logger()

EMAIL_TAKEN = "Email is already in use"


class UserService:
    """Business logic for accounts and profiles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create(self, body: UserCreate) -> User:
        """Persist a new user with a hashed password.

        Raises ValidationError when the email is already registered.
        """
        if await self._email_taken(body.email):
            raise ValidationError(EMAIL_TAKEN)

        user = User(
            name=body.name,
            email=body.email,
            age=body.age,
            password_hash=hash_password(body.password),
        )
        self.db.add(user)
        await self._commit_unique_email()
        await self.db.refresh(user)
        logger.info("user.created", user_id=str(user.id))
        return user

    # ─── Read ────────────────────────────────────────────

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_credentials(self, email: str, password: str) -> User:
        """Return the user for an email/password pair.

        Unknown email and wrong password raise the same AuthFailure.
        """
        q = select(User).where(User.email == email.strip().lower())
        result = await self.db.execute(q)
        user = result.scalars().first()

        if not user:
            burn_verification(password)
            raise AuthFailure("Unable to login")
        if not verify_password(password, user.password_hash):
            raise AuthFailure("Unable to login")
        return user

    # ─── Update ──────────────────────────────────────────

    async def update(self, user: User, body: UserUpdate) -> User:
        """Apply the fields present in `body`. Re-hashes a new password."""
        changes = body.model_dump(exclude_unset=True)

        if "email" in changes and changes["email"] != user.email:
            if await self._email_taken(changes["email"]):
                raise ValidationError(EMAIL_TAKEN)

        for field, value in changes.items():
            if field == "password":
                user.password_hash = hash_password(value)
            else:
                setattr(user, field, value)

        await self._commit_unique_email()
        await self.db.refresh(user)
        logger.info("user.updated", user_id=str(user.id), fields=sorted(changes))
        return user

    async def set_avatar(self, user: User, avatar: Optional[bytes]) -> None:
        user.avatar = avatar
        await self.db.commit()

    async def get_avatar(self, user_id: uuid.UUID) -> Optional[bytes]:
        result = await self.db.execute(select(User.avatar).where(User.id == user_id))
        return result.scalars().first()

    # ─── Delete ──────────────────────────────────────────

    async def delete(self, user: User) -> None:
        """Remove the account along with every task and token it owns."""
        await self.db.execute(delete(Task).where(Task.owner_id == user.id))
        await self.db.execute(delete(UserToken).where(UserToken.user_id == user.id))
        await self.db.delete(user)
        await self.db.commit()
        logger.info("user.deleted", user_id=str(user.id))

    # ─── Helpers ─────────────────────────────────────────

    async def _email_taken(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email))
        return result.first() is not None

    async def _commit_unique_email(self) -> None:
        # The pre-check can race with a concurrent signup; the unique
        # constraint is what actually decides.
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError(EMAIL_TAKEN)

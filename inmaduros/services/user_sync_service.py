"""
Los Inmaduros Backend — User Sync Service
==========================================

What:  Mirrors Clerk identities into the local `users` table.
Why:   Foreign keys need a local row, but users sign up in Clerk, never here.
How:   On every authenticated request the token subject (`clerk_id`) is
       looked up locally; the first time it is unknown the profile is fetched
       from Clerk and inserted with role USER.

Race Handling:
    Two first requests of a new user can arrive together. Both miss the
    lookup and both try to insert; the loser hits the unique constraint on
    clerk_id, rolls back its savepoint and re-reads the winner's row.
"""

import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.exceptions import IdentityProviderError
from inmaduros.models import User, UserRole
from inmaduros.services.clerk_service import clerk_client, primary_email

logger = logging.getLogger(__name__)


def _profile_fields(clerk_user: Dict[str, Any]) -> Dict[str, Any]:
    email = primary_email(clerk_user)
    if not email:
        raise IdentityProviderError(
            message="Clerk user has no email address",
            context={"clerk_id": clerk_user.get("id")},
        )
    return {
        "email": email,
        "name": clerk_user.get("first_name") or "User",
        "last_name": clerk_user.get("last_name"),
        "image_url": clerk_user.get("image_url"),
    }


class UserSyncService:

    async def get_by_clerk_id(self, db: AsyncSession, clerk_id: str):
        result = await db.execute(select(User).where(User.clerk_id == clerk_id))
        return result.scalar_one_or_none()

    async def get_or_create_user(self, db: AsyncSession, clerk_id: str) -> User:
        """
        Return the local user for a Clerk id, creating it on first sight.

        Raises:
            NotFoundError: Clerk does not know the id
            IdentityProviderError: Clerk API unavailable
        """
        user = await self.get_by_clerk_id(db, clerk_id)
        if user is not None:
            return user

        clerk_user = await clerk_client.get_user(clerk_id)
        user = User(clerk_id=clerk_id, role=UserRole.USER, **_profile_fields(clerk_user))

        try:
            async with db.begin_nested():
                db.add(user)
        except IntegrityError:
            logger.info("User %s was created concurrently, re-reading", clerk_id)
            existing = await self.get_by_clerk_id(db, clerk_id)
            if existing is None:
                # Unique email clash with a different clerk_id
                raise
            return existing

        logger.info("Synced new user from Clerk: %s (%s)", user.id, clerk_id)
        return user

    async def update_user_from_clerk(self, db: AsyncSession, clerk_id: str) -> User:
        """
        Refresh name, email and avatar of an existing local user from Clerk.
        Creates the user if it is not mirrored yet.
        """
        user = await self.get_by_clerk_id(db, clerk_id)
        if user is None:
            return await self.get_or_create_user(db, clerk_id)

        clerk_user = await clerk_client.get_user(clerk_id)
        for field, value in _profile_fields(clerk_user).items():
            setattr(user, field, value)
        await db.flush()
        logger.info("Refreshed user %s from Clerk", user.id)
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
user_sync_service = UserSyncService()

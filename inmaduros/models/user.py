"""
Los Inmaduros Backend — User SQLAlchemy Model
==============================================

What:  Local mirror of a Clerk identity.
Why:   Foreign keys (organizer, reviewer, uploader, moderator) need a local
       row; Clerk stays the source of truth for credentials and profile.
How:   Rows are created lazily by UserSyncService the first time a verified
       token for an unknown `clerk_id` is seen.
"""

from typing import Optional

from sqlalchemy import Enum as SAEnum
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from inmaduros.database import Base
from inmaduros.models.enums import UserRole
from inmaduros.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "users"

    # Clerk user id ("user_2abc..."); the subject of every session token
    clerk_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.USER,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, clerk_id='{self.clerk_id}', role='{self.role}')>"

"""
Los Inmaduros Backend — Route SQLAlchemy Model
===============================================

What:  A predefined skating route of the club's catalog.
Why:   Route calls, reviews, favorites and the route photo gallery all hang
       off this table.
How:   Seeded from `inmaduros.seed`; looked up by `slug` in public URLs.

Levels are stored as a JSON list of RouteLevel names (a route can suit
several levels, e.g. ["INTERMEDIATE", "ADVANCED"]). Aggregates shown in the
API (review/favorite/route-call/photo counts, average rating) are attached
as column properties in `inmaduros.models`.
"""

from typing import List

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inmaduros.database import Base
from inmaduros.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class Route(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "routes"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    image: Mapped[str] = mapped_column(String(1024), nullable=False)

    # Free-form, e.g. "18 km"
    approximate_distance: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    map_embed_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    levels: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Route(slug='{self.slug}')>"

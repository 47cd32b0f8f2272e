"""
rolesmith.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- reaction_role_menus — One row per menu, carrying its wizard state
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Rolesmith ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class MenuState(enum.StrEnum):
    """Lifecycle of a menu through the creation wizard."""
    CREATED = "created"
    ROLES_ASSIGNED = "roles_assigned"
    TYPE_ASSIGNED = "type_assigned"
    PUBLISHED = "published"


class SelectionType(enum.StrEnum):
    """Presentation modes a published menu can use."""
    DROPDOWN = "dropdown"
    BUTTON = "button"


# ---------------------------------------------------------------------------
# Reaction role menus
# ---------------------------------------------------------------------------
class ReactionRoleMenu(Base):
    """A guild-scoped role menu.

    ``roles`` and ``selection_type`` are JSON lists so the same schema runs
    on SQLite and PostgreSQL.  ``revision`` is bumped on every update and
    doubles as the optimistic-concurrency token.
    """
    __tablename__ = "reaction_role_menus"

    # Integer (not BigInteger) so SQLite treats it as a rowid alias.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    roles: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    selection_type: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MenuState.CREATED.value
    )
    channel_id: Mapped[int | None] = mapped_column(BigInteger, default=None)
    message_id: Mapped[int | None] = mapped_column(BigInteger, default=None)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_reaction_role_menus_guild_id", "guild_id", "id"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<ReactionRoleMenu id={self.id} name={self.name!r} state={self.state}>"

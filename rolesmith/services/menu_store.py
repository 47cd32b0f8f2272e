"""
rolesmith.services.menu_store — Menu Persistence
=================================================

The single owner of menu state.  Callers get immutable
:class:`MenuSnapshot` values; ORM rows never leave a session.

Every partial update is one conditional ``UPDATE`` guarded by the wizard
step's allowed source states (and optionally the expected revision), in
the same style as an atomic guard-clause update.  A racing duplicate step
therefore loses with :class:`MenuStateConflict` instead of silently
overwriting.

All methods are synchronous; call them via ``await run_db(store.get, id)``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Engine, select, update

from rolesmith.database.engine import get_session
from rolesmith.database.models import MenuState, ReactionRoleMenu, SelectionType
from rolesmith.engine.workflow import ALLOWED_SOURCES, TARGET_STATE, Step
from rolesmith.errors import MenuNotFound, MenuStateConflict

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MenuSnapshot:
    """Read-only view of a stored menu."""

    id: int
    guild_id: int
    name: str
    description: str
    roles: tuple[int, ...]
    selection_type: frozenset[SelectionType]
    state: MenuState
    channel_id: int | None
    message_id: int | None
    revision: int

    @property
    def is_published(self) -> bool:
        return self.state is MenuState.PUBLISHED

    @property
    def jump_url(self) -> str | None:
        if self.channel_id is None or self.message_id is None:
            return None
        return (
            f"https://discord.com/channels/{self.guild_id}"
            f"/{self.channel_id}/{self.message_id}"
        )

    @classmethod
    def from_row(cls, row: ReactionRoleMenu) -> MenuSnapshot:
        return cls(
            id=row.id,
            guild_id=row.guild_id,
            name=row.name,
            description=row.description,
            roles=tuple(int(r) for r in row.roles or ()),
            selection_type=frozenset(SelectionType(t) for t in row.selection_type or ()),
            state=MenuState(row.state),
            channel_id=row.channel_id,
            message_id=row.message_id,
            revision=row.revision,
        )


def coerce_menu_id(raw: int | str | None) -> int:
    """Parse a menu id from a routing segment; anything unparsable is unknown."""
    if isinstance(raw, int):
        return raw
    try:
        return int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise MenuNotFound(raw) from None


class MenuStore:
    """Menu repository backed by a SQLAlchemy :class:`Engine`.

    No delete operation exists; menus live for the lifetime of the database.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # -------------------------------------------------------------------
    # Create / read
    # -------------------------------------------------------------------
    def create(self, guild_id: int, name: str, desc: str) -> int:
        """Store a new menu in the ``created`` state and return its id."""
        with get_session(self.engine) as session:
            row = ReactionRoleMenu(
                guild_id=guild_id,
                name=name,
                description=desc,
                roles=[],
                selection_type=[],
                state=MenuState.CREATED.value,
                channel_id=None,
                message_id=None,
                revision=0,
            )
            session.add(row)
            session.flush()
            return row.id

    def get(self, menu_id: int | str) -> MenuSnapshot:
        menu_id = coerce_menu_id(menu_id)
        with get_session(self.engine) as session:
            row = session.get(ReactionRoleMenu, menu_id)
            if row is None:
                raise MenuNotFound(menu_id)
            return MenuSnapshot.from_row(row)

    def list_by_guild(self, guild_id: int) -> list[MenuSnapshot]:
        """All menus for *guild_id* in creation order (empty list if none)."""
        with get_session(self.engine) as session:
            rows = session.scalars(
                select(ReactionRoleMenu)
                .where(ReactionRoleMenu.guild_id == guild_id)
                .order_by(ReactionRoleMenu.id)
            ).all()
            return [MenuSnapshot.from_row(r) for r in rows]

    # -------------------------------------------------------------------
    # Partial updates (one per wizard step)
    # -------------------------------------------------------------------
    def set_roles(
        self,
        menu_id: int | str,
        roles: Sequence[int],
        *,
        expected_revision: int | None = None,
    ) -> MenuSnapshot:
        return self._apply_step(
            Step.SET_ROLES,
            menu_id,
            {"roles": [int(r) for r in roles]},
            expected_revision,
        )

    def set_selection_type(
        self,
        menu_id: int | str,
        types: Iterable[SelectionType | str],
        *,
        expected_revision: int | None = None,
    ) -> MenuSnapshot:
        values = sorted({SelectionType(t).value for t in types})
        return self._apply_step(
            Step.SET_TYPE,
            menu_id,
            {"selection_type": values},
            expected_revision,
        )

    def set_message_location(
        self,
        menu_id: int | str,
        channel_id: int,
        message_id: int,
        *,
        expected_revision: int | None = None,
    ) -> MenuSnapshot:
        return self._apply_step(
            Step.PUBLISH,
            menu_id,
            {"channel_id": channel_id, "message_id": message_id},
            expected_revision,
        )

    def _apply_step(
        self,
        step: Step,
        menu_id: int | str,
        values: dict[str, Any],
        expected_revision: int | None,
    ) -> MenuSnapshot:
        """Compare-and-swap *values* onto the menu for one wizard *step*."""
        menu_id = coerce_menu_id(menu_id)
        sources = [s.value for s in ALLOWED_SOURCES[step]]

        stmt = (
            update(ReactionRoleMenu)
            .where(
                ReactionRoleMenu.id == menu_id,
                ReactionRoleMenu.state.in_(sources),
            )
            .values(
                **values,
                state=TARGET_STATE[step].value,
                revision=ReactionRoleMenu.revision + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if expected_revision is not None:
            stmt = stmt.where(ReactionRoleMenu.revision == expected_revision)

        with get_session(self.engine) as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                row = session.get(ReactionRoleMenu, menu_id)
                if row is None:
                    raise MenuNotFound(menu_id)
                logger.warning(
                    "Menu %d: %s rejected (state=%s, revision=%d, expected=%s)",
                    menu_id, step.value, row.state, row.revision, expected_revision,
                )
                raise MenuStateConflict()
            session.expire_all()
            row = session.get(ReactionRoleMenu, menu_id)
            return MenuSnapshot.from_row(row)

"""
rolesmith.engine.workflow — Menu Creation Wizard
=================================================

The wizard moves a menu through four states::

    created ──roles──▶ roles_assigned ──type──▶ type_assigned ──publish──▶ published

There are no reverse transitions.  A step may be repeated while the menu
still sits in that step's target state (e.g. choosing a different type
before publishing), which the :data:`ALLOWED_SOURCES` table encodes.

Validation lives here so the store only ever persists well-formed data.
The ``start_menu`` / ``assign_roles`` / ``assign_type`` functions are
synchronous and meant to be called through ``run_db``.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from rolesmith.constants import (
    BOTH_TOKEN,
    BUTTONS_PER_ROW,
    MAX_ACTION_ROWS,
    MAX_MENU_DESCRIPTION,
    MAX_MENU_NAME,
    MAX_SELECT_OPTIONS,
)
from rolesmith.database.models import MenuState, SelectionType
from rolesmith.errors import ValidationFailure

if TYPE_CHECKING:
    from rolesmith.services.menu_store import MenuSnapshot, MenuStore

logger = logging.getLogger(__name__)


class Step(enum.StrEnum):
    """One persisted wizard step (one store update each)."""
    SET_ROLES = "set_roles"
    SET_TYPE = "set_selection_type"
    PUBLISH = "set_message_location"


# Source states a step may run from, and the state it leaves the menu in.
ALLOWED_SOURCES: dict[Step, frozenset[MenuState]] = {
    Step.SET_ROLES: frozenset({MenuState.CREATED, MenuState.ROLES_ASSIGNED}),
    Step.SET_TYPE: frozenset({MenuState.ROLES_ASSIGNED, MenuState.TYPE_ASSIGNED}),
    Step.PUBLISH: frozenset({MenuState.TYPE_ASSIGNED}),
}

TARGET_STATE: dict[Step, MenuState] = {
    Step.SET_ROLES: MenuState.ROLES_ASSIGNED,
    Step.SET_TYPE: MenuState.TYPE_ASSIGNED,
    Step.PUBLISH: MenuState.PUBLISHED,
}


def can_run(step: Step, state: MenuState | str) -> bool:
    """Return True if *step* may run while the menu is in *state*."""
    return MenuState(state) in ALLOWED_SOURCES[step]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def clean_menu_text(name: str | None, desc: str | None) -> tuple[str, str]:
    """Strip and bound the modal inputs.  A blank name is rejected."""
    name = (name or "").strip()
    desc = (desc or "").strip()
    if not name:
        raise ValidationFailure("❌ The menu needs a name.")
    if len(name) > MAX_MENU_NAME:
        raise ValidationFailure(f"❌ Menu names are limited to {MAX_MENU_NAME} characters.")
    if len(desc) > MAX_MENU_DESCRIPTION:
        raise ValidationFailure(
            f"❌ Descriptions are limited to {MAX_MENU_DESCRIPTION} characters."
        )
    return name, desc


def normalize_roles(role_ids: Iterable[int | str]) -> list[int]:
    """Coerce to ints, drop duplicates (first occurrence wins), check bounds."""
    seen: set[int] = set()
    roles: list[int] = []
    for raw in role_ids:
        try:
            role_id = int(raw)
        except (TypeError, ValueError):
            raise ValidationFailure(f"❌ `{raw}` is not a role.") from None
        if role_id not in seen:
            seen.add(role_id)
            roles.append(role_id)

    if not roles:
        raise ValidationFailure("❌ Pick at least one role.")
    if len(roles) > MAX_SELECT_OPTIONS:
        raise ValidationFailure(
            f"❌ A menu can hold at most {MAX_SELECT_OPTIONS} roles."
        )
    return roles


def parse_selection_type(token: str | None) -> frozenset[SelectionType]:
    """Map a type button token to a set of :class:`SelectionType`.

    ``both`` → {dropdown, button}; ``dropdown`` / ``button`` → singleton.
    """
    if token == BOTH_TOKEN:
        return frozenset({SelectionType.DROPDOWN, SelectionType.BUTTON})
    try:
        return frozenset({SelectionType(token)})
    except ValueError:
        raise ValidationFailure(f"❌ Unknown menu type `{token}`.") from None


def max_roles_for(types: Iterable[SelectionType]) -> int:
    """Largest role count a message can present with *types*."""
    types = set(types)
    if not types:
        raise ValidationFailure("❌ Pick a menu type.")
    limit = MAX_SELECT_OPTIONS
    if SelectionType.BUTTON in types:
        rows = MAX_ACTION_ROWS - (1 if SelectionType.DROPDOWN in types else 0)
        limit = min(limit, rows * BUTTONS_PER_ROW)
    return limit


def validate_selection(types: Iterable[SelectionType], role_count: int) -> None:
    limit = max_roles_for(types)
    if role_count > limit:
        raise ValidationFailure(
            f"❌ That layout fits at most {limit} roles; this menu has {role_count}."
        )


# ---------------------------------------------------------------------------
# Steps (sync — call via run_db)
# ---------------------------------------------------------------------------
def start_menu(store: MenuStore, guild_id: int, name: str | None, desc: str | None) -> int:
    """Wizard step 1: validate the modal inputs and create the menu."""
    name, desc = clean_menu_text(name, desc)
    menu_id = store.create(guild_id, name, desc)
    logger.info("Menu %d (%r) created in guild %d", menu_id, name, guild_id)
    return menu_id


def assign_roles(store: MenuStore, menu_id: int, role_ids: Iterable[int | str]) -> MenuSnapshot:
    """Wizard step 2: record the chosen roles."""
    roles = normalize_roles(role_ids)
    menu = store.set_roles(menu_id, roles)
    logger.info("Menu %d: %d roles assigned", menu_id, len(roles))
    return menu


def assign_type(store: MenuStore, menu_id: int, token: str | None) -> MenuSnapshot:
    """Wizard step 3: record the presentation mode(s).

    The role count is read and the update is conditioned on that same
    revision, so a concurrent role change cannot slip past the check.
    """
    types = parse_selection_type(token)
    current = store.get(menu_id)
    validate_selection(types, len(current.roles))
    menu = store.set_selection_type(menu_id, types, expected_revision=current.revision)
    logger.info("Menu %d: selection type set to %s", menu_id, sorted(types))
    return menu

"""
rolesmith.services.publisher — Public Menu Messages
====================================================

Turns a menu in the ``type_assigned`` state into the message members
interact with:

* a dropdown (``rr:use:<menu>``) listing every menu role, and/or
* rows of at most five buttons (``rr:assign:<role>:<menu>``).

:func:`build_menu_layout` is pure data so limits can be checked without a
Discord connection; :func:`render_menu` turns it into discord.py objects.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import discord

from rolesmith.constants import (
    BUTTONS_PER_ROW,
    MAX_BUTTON_LABEL,
    MAX_OPTION_LABEL,
)
from rolesmith.database.engine import run_db
from rolesmith.database.models import MenuState, SelectionType
from rolesmith.engine.routing import encode
from rolesmith.engine.workflow import validate_selection
from rolesmith.errors import MenuStateConflict, PublishFailed
from rolesmith.services.menu_store import MenuSnapshot

if TYPE_CHECKING:
    from discord.abc import Messageable

    from rolesmith.services.menu_store import MenuStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RoleControl:
    """One role entry: a dropdown option (value = role id) or a button (value = custom_id)."""

    label: str
    role_id: int
    value: str


@dataclass(frozen=True, slots=True)
class MenuLayout:
    title: str
    description: str
    dropdown_id: str | None = None
    dropdown: tuple[RoleControl, ...] = ()
    button_rows: tuple[tuple[RoleControl, ...], ...] = field(default_factory=tuple)

    @property
    def row_count(self) -> int:
        return len(self.button_rows) + (1 if self.dropdown_id else 0)


def role_label(role_id: int, role_names: Mapping[int, str]) -> str:
    return role_names.get(role_id) or f"Role {role_id}"


def chunk(items: tuple, size: int) -> tuple[tuple, ...]:
    return tuple(items[i:i + size] for i in range(0, len(items), size))


def build_menu_layout(menu: MenuSnapshot, role_names: Mapping[int, str]) -> MenuLayout:
    """Describe the public message for *menu* without touching Discord."""
    validate_selection(menu.selection_type, len(menu.roles))

    dropdown_id = None
    dropdown: tuple[RoleControl, ...] = ()
    if SelectionType.DROPDOWN in menu.selection_type:
        dropdown_id = encode("rr", "use", menu.id)
        dropdown = tuple(
            RoleControl(role_label(r, role_names)[:MAX_OPTION_LABEL], r, str(r))
            for r in menu.roles
        )

    rows: tuple[tuple[RoleControl, ...], ...] = ()
    if SelectionType.BUTTON in menu.selection_type:
        buttons = tuple(
            RoleControl(
                role_label(r, role_names)[:MAX_BUTTON_LABEL],
                r,
                encode("rr", "assign", r, menu.id),
            )
            for r in menu.roles
        )
        rows = chunk(buttons, BUTTONS_PER_ROW)

    return MenuLayout(
        title=menu.name,
        description=menu.description,
        dropdown_id=dropdown_id,
        dropdown=dropdown,
        button_rows=rows,
    )


def render_menu(layout: MenuLayout, color: int | None = None) -> tuple[discord.Embed, discord.ui.View]:
    """Build the embed and view for *layout*.  Needs a running event loop."""
    embed = discord.Embed(
        title=layout.title,
        description=layout.description or None,
        color=discord.Color(color) if color is not None else discord.Color.blurple(),
    )
    view = discord.ui.View(timeout=None)
    row = 0
    if layout.dropdown_id:
        view.add_item(discord.ui.Select(
            custom_id=layout.dropdown_id,
            placeholder="Choose your roles…",
            min_values=0,
            max_values=len(layout.dropdown),
            options=[
                discord.SelectOption(label=opt.label, value=opt.value)
                for opt in layout.dropdown
            ],
            row=row,
        ))
        row += 1
    for buttons in layout.button_rows:
        for btn in buttons:
            view.add_item(discord.ui.Button(
                label=btn.label,
                style=discord.ButtonStyle.secondary,
                custom_id=btn.value,
                row=row,
            ))
        row += 1
    return embed, view


async def publish_menu(
    store: MenuStore,
    channel: Messageable,
    menu: MenuSnapshot,
    role_names: Mapping[int, str],
    *,
    color: int | None = None,
) -> MenuSnapshot:
    """Send *menu* to *channel* and record where it landed.

    Raises
    ------
    MenuStateConflict
        If the menu isn't ready (no type yet) or was already published.
    PublishFailed
        If Discord refuses the message.
    """
    if menu.state is not MenuState.TYPE_ASSIGNED:
        if menu.state is MenuState.PUBLISHED:
            raise MenuStateConflict(
                f"⚠️ **{menu.name}** is already published: {menu.jump_url}"
            )
        raise MenuStateConflict("⚠️ Finish choosing roles and a menu type first.")

    layout = build_menu_layout(menu, role_names)
    embed, view = render_menu(layout, color)
    try:
        message = await channel.send(embed=embed, view=view)
    except discord.HTTPException as exc:
        logger.warning("Publishing menu %d failed: %s", menu.id, exc)
        raise PublishFailed() from exc
    finally:
        # Presses reach the on_interaction listener; drop the view-store entry.
        view.stop()

    try:
        published = await run_db(
            store.set_message_location,
            menu.id,
            message.channel.id,
            message.id,
            expected_revision=menu.revision,
        )
    except Exception:
        # An unrecorded message would slip past the re-publish guard.
        logger.warning("Recording menu %d failed; deleting message %d", menu.id, message.id)
        try:
            await message.delete()
        except discord.HTTPException:
            logger.exception("Could not delete orphaned menu message %d", message.id)
        raise
    logger.info(
        "Menu %d published to channel %d (message %d)",
        menu.id, message.channel.id, message.id,
    )
    return published

"""
rolesmith.services.components — Dashboard & Wizard Components
==============================================================

All embed/view/modal construction for the configuration side lives here,
so the router only supplies data.  Every ``custom_id`` goes through
:func:`rolesmith.engine.routing.encode` so it round-trips through the
router.

Views are created with ``timeout=None`` and carry no callbacks: the
``on_interaction`` listener dispatches on ``custom_id`` instead, which
keeps buttons working across restarts.  Views need a running event loop,
so build them from async handlers.
"""

from __future__ import annotations

from collections.abc import Sequence

import discord

from rolesmith.constants import (
    MAX_MENU_DESCRIPTION,
    MAX_MENU_NAME,
    MAX_OPTION_LABEL,
    MAX_SELECT_OPTIONS,
    STATE_BADGES,
)
from rolesmith.engine.routing import (
    DASH_BACK,
    DASH_REACTION_ROLES,
    RR_CREATE,
    RR_MODAL_CREATE,
    encode,
)
from rolesmith.services.menu_store import MenuSnapshot

# Text inputs on the creation modal
NAME_INPUT = "name"
DESC_INPUT = "desc"

EMBED_DESCRIPTION_LIMIT = 4096


def _color(value: int | None) -> discord.Color:
    return discord.Color(value) if value is not None else discord.Color.blurple()


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------
def build_main_dashboard(color: int | None = None) -> tuple[discord.Embed, discord.ui.View]:
    embed = discord.Embed(
        title="\U0001f6e0️ Server Dashboard",
        description="Click a button to configure:",
        color=_color(color),
    )
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Button(
        label="Reaction Roles",
        style=discord.ButtonStyle.primary,
        custom_id=DASH_REACTION_ROLES,
    ))
    view.add_item(discord.ui.Button(
        label="Back",
        style=discord.ButtonStyle.secondary,
        custom_id=DASH_BACK,
        disabled=True,
    ))
    return embed, view


def format_menu_line(index: int, menu: MenuSnapshot) -> str:
    badge = STATE_BADGES.get(menu.state.value, "")
    line = f"**{index}.** {menu.name} {badge} `{menu.state.value}`"
    if menu.jump_url:
        line += f" · [message]({menu.jump_url})"
    return line


def build_reaction_roles_dashboard(
    menus: Sequence[MenuSnapshot],
    color: int | None = None,
) -> tuple[discord.Embed, discord.ui.View]:
    """List the guild's menus with a Create button."""
    if menus:
        lines: list[str] = []
        used = 0
        for i, menu in enumerate(menus, start=1):
            line = format_menu_line(i, menu)
            if used + len(line) + 1 > EMBED_DESCRIPTION_LIMIT - 32:
                lines.append(f"*…and {len(menus) - i + 1} more*")
                break
            lines.append(line)
            used += len(line) + 1
        description = "\n".join(lines)
    else:
        description = "*No menus yet*"

    embed = discord.Embed(
        title="\U0001f3a8 Reaction Roles",
        description=description,
        color=_color(color),
    )
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Button(
        label="➕ Create New",
        style=discord.ButtonStyle.success,
        custom_id=RR_CREATE,
    ))
    view.add_item(discord.ui.Button(
        label="\U0001f519 Back",
        style=discord.ButtonStyle.secondary,
        custom_id=DASH_BACK,
    ))
    return embed, view


# ---------------------------------------------------------------------------
# Wizard step 1 — name & description
# ---------------------------------------------------------------------------
def build_create_modal() -> discord.ui.Modal:
    modal = discord.ui.Modal(title="New Reaction Role Menu", custom_id=RR_MODAL_CREATE)
    modal.add_item(discord.ui.TextInput(
        label="Menu Name",
        custom_id=NAME_INPUT,
        style=discord.TextStyle.short,
        max_length=MAX_MENU_NAME,
    ))
    modal.add_item(discord.ui.TextInput(
        label="Embed Description",
        custom_id=DESC_INPUT,
        style=discord.TextStyle.paragraph,
        max_length=MAX_MENU_DESCRIPTION,
        required=False,
    ))
    return modal


def modal_values(data: dict | None) -> dict[str, str]:
    """Flatten a modal submit payload into ``{custom_id: value}``."""
    values: dict[str, str] = {}
    for row in (data or {}).get("components", []):
        for component in row.get("components", []):
            if "custom_id" in component:
                values[component["custom_id"]] = component.get("value") or ""
    return values


# ---------------------------------------------------------------------------
# Wizard step 2 — roles
# ---------------------------------------------------------------------------
def eligible_roles(guild: discord.Guild) -> list[discord.Role]:
    """Roles a menu may offer: not integration-managed, not @everyone.

    Highest roles first, capped at the select-menu option limit.
    """
    roles = [
        r for r in reversed(guild.roles)
        if not r.managed and r.id != guild.id
    ]
    return roles[:MAX_SELECT_OPTIONS]


def build_role_select(menu_id: int, roles: Sequence[discord.Role]) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Select(
        custom_id=encode("rr", "select", menu_id),
        placeholder="Select roles to include…",
        min_values=1,
        max_values=len(roles),
        options=[
            discord.SelectOption(label=r.name[:MAX_OPTION_LABEL], value=str(r.id))
            for r in roles
        ],
    ))
    return view


# ---------------------------------------------------------------------------
# Wizard step 3 — selection type
# ---------------------------------------------------------------------------
TYPE_BUTTONS: tuple[tuple[str, str], ...] = (
    ("dropdown", "\U0001f4dc Dropdown"),
    ("button", "\U0001f518 Buttons"),
    ("both", "✨ Both"),
)


def build_type_select(menu_id: int) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    for token, label in TYPE_BUTTONS:
        view.add_item(discord.ui.Button(
            label=label,
            style=discord.ButtonStyle.primary,
            custom_id=encode("rr", "type", token, menu_id),
        ))
    view.add_item(discord.ui.Button(
        label="\U0001f519 Back",
        style=discord.ButtonStyle.secondary,
        custom_id=DASH_BACK,
    ))
    return view


# ---------------------------------------------------------------------------
# Wizard step 4 — publish
# ---------------------------------------------------------------------------
def build_publish_controls(menu_id: int) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Button(
        label="\U0001f680 Publish",
        style=discord.ButtonStyle.primary,
        custom_id=encode("rr", "publish", menu_id),
    ))
    view.add_item(discord.ui.Button(
        label="\U0001f519 Back",
        style=discord.ButtonStyle.secondary,
        custom_id=DASH_BACK,
    ))
    return view

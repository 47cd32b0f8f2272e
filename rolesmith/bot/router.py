"""
rolesmith.bot.router — Interaction Dispatch
============================================

Every component press and modal submission reaches :meth:`CommandRouter.dispatch`.
The router decodes the ``custom_id`` routing key, picks exactly one handler,
and sends exactly one response:

==========================  ==========================================
key                         handler
==========================  ==========================================
``dash:reaction-roles``     reaction-roles dashboard
``dash:back``               main dashboard
``rr:create``               creation modal
``rr:modal:create`` (form)  create menu → role select
``rr:select:<menu>``        record roles → type buttons
``rr:type:<type>:<menu>``   record type → publish controls
``rr:publish:<menu>``       publish the menu
``rr:assign:<role>:<menu>`` toggle one role (button)
``rr:use:<menu>``           sync roles (dropdown)
==========================  ==========================================

Failures derived from :class:`~rolesmith.errors.RolesmithError` become a
private message; anything else is logged and answered with a generic
error.  Nothing escapes to the gateway task.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import discord

from rolesmith.bot.responses import Reply, respond
from rolesmith.database.engine import run_db
from rolesmith.database.models import SelectionType
from rolesmith.engine.locks import KeyedLock, member_key, menu_key
from rolesmith.engine.role_sync import (
    RoleAction,
    SyncResult,
    ToggleResult,
    apply_sync,
    apply_toggle,
    plan_sync,
)
from rolesmith.engine.routing import RR_MODAL_CREATE, RoutingKey, decode
from rolesmith.engine.workflow import assign_roles, assign_type, start_menu
from rolesmith.errors import (
    MalformedRouting,
    MenuNotFound,
    PermissionDenied,
    RolesmithError,
    ValidationFailure,
)
from rolesmith.services import components
from rolesmith.services.menu_store import MenuSnapshot, MenuStore, coerce_menu_id
from rolesmith.services.publisher import publish_menu

if TYPE_CHECKING:
    from rolesmith.engine.role_sync import RoleFailure

logger = logging.getLogger(__name__)

Handler = Callable[[discord.Interaction, RoutingKey], Awaitable[Reply]]

GENERIC_ERROR = "❌ Something went wrong while handling that. Please try again."
GUILD_ONLY = "❌ Role menus only work inside a server."

TYPE_LABELS = {
    SelectionType.DROPDOWN: "a dropdown",
    SelectionType.BUTTON: "buttons",
}


def _role_mentions(role_ids) -> str:
    return ", ".join(f"<@&{r}>" for r in role_ids)


def describe_toggle(result: ToggleResult) -> str:
    mention = f"<@&{result.role_id}>"
    if not result.ok:
        verb = "give you" if result.action is RoleAction.ADDED else "remove"
        return f"⚠️ I couldn't {verb} {mention}: {result.error}."
    if result.action is RoleAction.ADDED:
        return f"✅ Added {mention}."
    return f"➖ Removed {mention}."


def describe_sync(result: SyncResult) -> str:
    lines: list[str] = []
    if result.added:
        lines.append(f"✅ Added: {_role_mentions(result.added)}")
    if result.removed:
        lines.append(f"➖ Removed: {_role_mentions(result.removed)}")
    failed: list[RoleFailure] = result.failed
    for failure in failed:
        verb = "add" if failure.action is RoleAction.ADDED else "remove"
        lines.append(f"⚠️ Couldn't {verb} <@&{failure.role_id}>: {failure.reason}")
    if not lines:
        return "Your roles already match that selection."
    if result.changed and result.ok:
        lines.insert(0, "Your roles have been updated!")
    return "\n".join(lines)


def describe_types(types) -> str:
    labels = [TYPE_LABELS[t] for t in (SelectionType.DROPDOWN, SelectionType.BUTTON) if t in types]
    return " and ".join(labels)


class CommandRouter:
    """Routes interactions for the dashboard, the wizard and published menus.

    Parameters
    ----------
    store:
        The :class:`MenuStore` every handler reads and writes through.
    color:
        Embed colour for dashboards and published menus.
    """

    def __init__(self, store: MenuStore, *, color: int | None = None) -> None:
        self.store = store
        self.color = color
        self.locks = KeyedLock()

        self._buttons: dict[tuple[str, str], Handler] = {
            ("dash", "reaction-roles"): self.show_reaction_roles,
            ("dash", "back"): self.show_main_dashboard,
            ("rr", "create"): self.open_create_form,
            ("rr", "publish"): self.publish,
            ("rr", "type"): self.choose_type,
            ("rr", "assign"): self.toggle_role,
        }
        self._selects: dict[tuple[str, str], Handler] = {
            ("rr", "select"): self.choose_roles,
            ("rr", "use"): self.sync_roles,
        }

    # -------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------
    async def dispatch(self, interaction: discord.Interaction) -> bool:
        """Handle one interaction.  Returns False if it isn't ours to answer.

        Slash commands and autocomplete belong to the app-command tree.
        """
        if interaction.type not in (
            discord.InteractionType.component,
            discord.InteractionType.modal_submit,
        ):
            return False

        try:
            reply = await self._route(interaction)
        except RolesmithError as exc:
            logger.info(
                "Interaction %s from user %s rejected: %s",
                (interaction.data or {}).get("custom_id"), interaction.user.id, exc,
            )
            reply = Reply.private(exc.user_message)
        except Exception:
            logger.exception(
                "Unhandled error for custom_id %r from user %s",
                (interaction.data or {}).get("custom_id"), interaction.user.id,
            )
            reply = Reply.private(GENERIC_ERROR)

        await self._send(interaction, reply)
        return True

    async def _send(self, interaction: discord.Interaction, reply: Reply) -> None:
        if interaction.response.is_done():
            logger.warning(
                "Interaction %s already acknowledged; dropping reply", interaction.id,
            )
            return
        try:
            await respond(interaction, reply)
        except discord.HTTPException:
            logger.exception("Failed to respond to interaction %s", interaction.id)

    async def _route(self, interaction: discord.Interaction) -> Reply:
        data = interaction.data or {}
        custom_id = data.get("custom_id")

        if interaction.guild is None:
            raise RolesmithError(GUILD_ONLY)

        if interaction.type is discord.InteractionType.modal_submit:
            if custom_id == RR_MODAL_CREATE:
                return await self.create_menu(interaction)
            raise MalformedRouting()

        key = decode(custom_id)
        if data.get("component_type") == discord.ComponentType.string_select.value:
            handler = self._selects.get(key.pair)
        else:
            handler = self._buttons.get(key.pair)
        if handler is None:
            raise MalformedRouting()
        return await handler(interaction, key)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def _require_manager(interaction: discord.Interaction) -> None:
        perms = getattr(interaction.user, "guild_permissions", None)
        if perms is None or not (perms.manage_roles or perms.administrator):
            raise PermissionDenied()

    async def _guild_menu(self, interaction: discord.Interaction, raw_id: str | None) -> MenuSnapshot:
        """Load a menu, treating another guild's menu as unknown."""
        menu = await run_db(self.store.get, coerce_menu_id(raw_id))
        if menu.guild_id != interaction.guild_id:
            raise MenuNotFound(raw_id)
        return menu

    @staticmethod
    def _held_role_ids(member: discord.Member) -> set[int]:
        return {r.id for r in getattr(member, "roles", [])}

    @staticmethod
    async def _current_member(interaction: discord.Interaction) -> discord.Member:
        """Re-read the member so role decisions see changes from earlier presses.

        The payload's role list is a snapshot from when the component was
        clicked; call this while holding the member lock.
        """
        return await interaction.guild.fetch_member(interaction.user.id)

    def _role_names(self, guild: discord.Guild, role_ids) -> dict[int, str]:
        names: dict[int, str] = {}
        for role_id in role_ids:
            role = guild.get_role(role_id)
            if role is not None:
                names[role_id] = role.name
        return names

    def main_dashboard(self, *, update: bool) -> Reply:
        embed, view = components.build_main_dashboard(self.color)
        if update:
            return Reply.update(embed=embed, view=view)
        return Reply.private(None, embed=embed, view=view)

    # -------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------
    async def show_main_dashboard(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        return self.main_dashboard(update=True)

    async def show_reaction_roles(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        self._require_manager(interaction)
        menus = await run_db(self.store.list_by_guild, interaction.guild_id)
        embed, view = components.build_reaction_roles_dashboard(menus, self.color)
        return Reply.update(embed=embed, view=view)

    # -------------------------------------------------------------------
    # Wizard
    # -------------------------------------------------------------------
    async def open_create_form(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        self._require_manager(interaction)
        return Reply.form(components.build_create_modal())

    async def create_menu(self, interaction: discord.Interaction) -> Reply:
        """Step 1: modal submitted → store the menu, offer the role picker."""
        self._require_manager(interaction)
        values = components.modal_values(interaction.data)
        menu_id = await run_db(
            start_menu,
            self.store,
            interaction.guild_id,
            values.get(components.NAME_INPUT),
            values.get(components.DESC_INPUT),
        )

        roles = components.eligible_roles(interaction.guild)
        if not roles:
            return Reply.private(
                "⚠️ Menu saved, but this server has no roles I can offer. "
                "Create some roles and start again."
            )
        return Reply.private(
            "Select roles to include:",
            view=components.build_role_select(menu_id, roles),
        )

    async def choose_roles(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        """Step 2: role select submitted → offer the type buttons."""
        self._require_manager(interaction)
        menu_id = coerce_menu_id(key.extra)
        async with self.locks.hold(menu_key(menu_id)):
            await self._guild_menu(interaction, key.extra)
            menu = await run_db(
                assign_roles, self.store, menu_id, (interaction.data or {}).get("values", []),
            )
        return Reply.update(
            f"✅ Saved {len(menu.roles)} role(s) for **{menu.name}**. "
            "How should members pick them?",
            view=components.build_type_select(menu.id),
        )

    async def choose_type(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        """Step 3: type button pressed → offer Publish."""
        self._require_manager(interaction)
        if key.menu_id is None:
            raise MalformedRouting()
        menu_id = coerce_menu_id(key.menu_id)
        async with self.locks.hold(menu_key(menu_id)):
            await self._guild_menu(interaction, key.menu_id)
            menu = await run_db(assign_type, self.store, menu_id, key.extra)
        return Reply.update(
            f"✅ **{menu.name}** will use {describe_types(menu.selection_type)}. "
            "Click Publish to post it in this channel.",
            view=components.build_publish_controls(menu.id),
        )

    async def publish(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        """Step 4: post the menu in the invoking channel."""
        self._require_manager(interaction)
        menu_id = coerce_menu_id(key.extra)
        channel = interaction.channel
        if channel is None or not hasattr(channel, "send"):
            raise ValidationFailure("❌ I can't post in this channel.")
        async with self.locks.hold(menu_key(menu_id)):
            menu = await self._guild_menu(interaction, key.extra)
            published = await publish_menu(
                self.store,
                channel,
                menu,
                self._role_names(interaction.guild, menu.roles),
                color=self.color,
            )
        return Reply.update(f"\U0001f680 Published! {published.jump_url}", view=None)

    # -------------------------------------------------------------------
    # Published menus
    # -------------------------------------------------------------------
    async def toggle_role(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        """A role button: flip that one role on the member."""
        try:
            role_id = int(key.extra)
        except (TypeError, ValueError):
            raise MalformedRouting() from None
        if key.menu_id is None:
            raise MalformedRouting()

        menu = await self._guild_menu(interaction, key.menu_id)
        if role_id not in menu.roles:
            raise ValidationFailure("❌ That role is no longer part of this menu.")

        lock = member_key(interaction.guild_id, interaction.user.id, menu.id)
        async with self.locks.hold(lock):
            member = await self._current_member(interaction)
            result = await apply_toggle(member, role_id, self._held_role_ids(member))
        return Reply.private(describe_toggle(result))

    async def sync_roles(self, interaction: discord.Interaction, key: RoutingKey) -> Reply:
        """The dropdown: make the member's menu roles match their selection."""
        menu = await self._guild_menu(interaction, key.extra)
        desired = []
        for raw in (interaction.data or {}).get("values", []):
            try:
                desired.append(int(raw))
            except (TypeError, ValueError):
                raise MalformedRouting() from None

        lock = member_key(interaction.guild_id, interaction.user.id, menu.id)
        async with self.locks.hold(lock):
            member = await self._current_member(interaction)
            plan = plan_sync(menu.roles, self._held_role_ids(member), desired)
            result = await apply_sync(member, plan)
        if result.failed:
            logger.warning(
                "Menu %d sync for member %s: %d role change(s) failed",
                menu.id, interaction.user.id, len(result.failed),
            )
        return Reply.private(describe_sync(result))

"""
rolesmith.bot.core — Bot Instance & Cog Loader
===============================================

Defines :class:`RolesmithBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``), menu store (``bot.store``) and
   interaction router (``bot.router``) so cogs reach them via ``self.bot``.
2. Loads every cog listed in :data:`EXTENSIONS`.
3. Syncs the slash-command tree on startup (guild-scoped when a dev guild
   is configured, global otherwise).
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands

from rolesmith.bot.router import CommandRouter
from rolesmith.config import RolesmithConfig
from rolesmith.services.menu_store import MenuStore

logger = logging.getLogger(__name__)

EXTENSIONS: list[str] = [
    "rolesmith.bot.cogs.dashboard",
    "rolesmith.bot.cogs.interactions",
]


class RolesmithBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`RolesmithConfig` from ``config.yaml``.
    store:
        The :class:`MenuStore` backing every menu.
    """

    def __init__(self, cfg: RolesmithConfig, store: MenuStore) -> None:
        # Guilds is enough: member roles arrive with each interaction.
        intents = discord.Intents.none()
        intents.guilds = True

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description=f"{cfg.bot_name} — self-service role menus",
        )

        self.cfg = cfg
        self.store = store
        self.router = CommandRouter(store, color=cfg.embed_color)

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all cog extensions, then sync the command tree.

        A cog that fails to load is logged and skipped.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

        await self._sync_commands()

    async def _sync_commands(self) -> None:
        dev_guild_id = os.getenv("DEV_GUILD_ID") or self.cfg.dev_guild_id
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))

    async def on_ready(self) -> None:
        assert self.user is not None
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

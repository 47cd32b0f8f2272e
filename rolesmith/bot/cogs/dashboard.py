"""
rolesmith.bot.cogs.dashboard — /dashboard Slash Command
========================================================

The single slash command.  It opens the main dashboard privately; every
button from there on is handled by the interaction router.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from rolesmith.bot.responses import respond

if TYPE_CHECKING:
    from rolesmith.bot.core import RolesmithBot

logger = logging.getLogger(__name__)


class Dashboard(commands.Cog, name="Dashboard"):
    """Entry point into the role-menu wizard."""

    def __init__(self, bot: RolesmithBot) -> None:
        self.bot = bot

    @app_commands.command(name="dashboard", description="Open the guild dashboard")
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_roles=True)
    async def dashboard(self, interaction: discord.Interaction) -> None:
        """Show the main dashboard to the invoking admin."""
        logger.info(
            "/dashboard opened by %s in guild %s", interaction.user.id, interaction.guild_id,
        )
        await respond(interaction, self.bot.router.main_dashboard(update=False))


async def setup(bot: RolesmithBot) -> None:
    await bot.add_cog(Dashboard(bot))

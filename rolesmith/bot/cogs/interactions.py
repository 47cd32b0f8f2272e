"""
rolesmith.bot.cogs.interactions — Component & Modal Listener
=============================================================

Forwards every gateway interaction to :class:`~rolesmith.bot.router.CommandRouter`.
Routing on ``custom_id`` (rather than persistent ``View`` callbacks) means
menus published before a restart keep working with no re-registration.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from rolesmith.bot.core import RolesmithBot

logger = logging.getLogger(__name__)


class Interactions(commands.Cog, name="Interactions"):
    """Dispatches button presses, selects and modal submissions."""

    def __init__(self, bot: RolesmithBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_interaction(self, interaction: discord.Interaction) -> None:
        try:
            await self.bot.router.dispatch(interaction)
        except Exception:
            logger.exception("Error dispatching interaction %s", interaction.id)


async def setup(bot: RolesmithBot) -> None:
    await bot.add_cog(Interactions(bot))

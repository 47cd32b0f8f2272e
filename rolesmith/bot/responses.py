"""
rolesmith.bot.responses — Interaction Reply Descriptors
========================================================

Handlers return a :class:`Reply` instead of talking to Discord, and the
router sends it with a single :func:`respond` call.  That keeps the
one-acknowledgement-per-interaction rule in one place.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

import discord


class ReplyKind(enum.StrEnum):
    SEND = "send"        # new message (ephemeral by default)
    UPDATE = "update"    # edit the message the component lives on
    MODAL = "modal"      # open a form


@dataclass(slots=True)
class Reply:
    kind: ReplyKind
    content: str | None = None
    embed: discord.Embed | None = None
    view: discord.ui.View | None = None
    modal: discord.ui.Modal | None = None
    ephemeral: bool = True

    @classmethod
    def private(cls, content: str, **kwargs: Any) -> Reply:
        return cls(ReplyKind.SEND, content=content, ephemeral=True, **kwargs)

    @classmethod
    def update(cls, content: str | None = None, **kwargs: Any) -> Reply:
        return cls(ReplyKind.UPDATE, content=content, **kwargs)

    @classmethod
    def form(cls, modal: discord.ui.Modal) -> Reply:
        return cls(ReplyKind.MODAL, modal=modal)


async def respond(interaction: discord.Interaction, reply: Reply) -> None:
    """Send *reply* as the interaction's one response.

    Components are routed by ``custom_id`` in the ``on_interaction``
    listener, so the sent view or modal is stopped afterwards to release
    its entry in discord.py's view store.
    """
    try:
        if reply.kind is ReplyKind.MODAL:
            await interaction.response.send_modal(reply.modal)
        elif reply.kind is ReplyKind.UPDATE:
            # Explicit None clears whatever the previous step left behind.
            await interaction.response.edit_message(
                content=reply.content,
                embed=reply.embed,
                view=reply.view,
            )
        else:
            kwargs: dict[str, Any] = {"ephemeral": reply.ephemeral}
            if reply.embed is not None:
                kwargs["embed"] = reply.embed
            if reply.view is not None:
                kwargs["view"] = reply.view
            await interaction.response.send_message(reply.content, **kwargs)
    finally:
        for item in (reply.view, reply.modal):
            if item is not None:
                item.stop()

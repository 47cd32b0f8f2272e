"""
rolesmith.engine.routing — Routing Keys
========================================

Every component and modal this bot creates carries a ``custom_id`` in the
form::

    context:action[:extra[:menu_id]]

The router splits on ``:`` to decide which handler an interaction reaches,
so anything built here must round-trip through :func:`decode`.
"""

from __future__ import annotations

from dataclasses import dataclass

from rolesmith.errors import MalformedRouting

__all__ = [
    "CUSTOM_ID_MAX_LENGTH",
    "RoutingKey",
    "decode",
    "encode",
    "DASH_REACTION_ROLES",
    "DASH_BACK",
    "RR_CREATE",
    "RR_MODAL_CREATE",
]

# Discord rejects custom ids longer than this.
CUSTOM_ID_MAX_LENGTH = 100

SEPARATOR = ":"


@dataclass(frozen=True, slots=True)
class RoutingKey:
    """A decoded ``custom_id``."""

    context: str
    action: str
    extra: str | None = None
    menu_id: str | None = None

    @property
    def pair(self) -> tuple[str, str]:
        return self.context, self.action

    def __str__(self) -> str:
        return encode(self.context, self.action, self.extra, self.menu_id)


def encode(
    context: str,
    action: str,
    extra: str | int | None = None,
    menu_id: str | int | None = None,
) -> str:
    """Join the segments into a ``custom_id``.

    A trailing *menu_id* without an *extra* segment is not representable
    and raises :class:`ValueError`.
    """
    parts = [context, action]
    if extra is not None:
        parts.append(str(extra))
    if menu_id is not None:
        if extra is None:
            raise ValueError("menu_id requires an extra segment")
        parts.append(str(menu_id))

    for part in parts:
        if not part or SEPARATOR in part:
            raise ValueError(f"Invalid routing segment: {part!r}")

    custom_id = SEPARATOR.join(parts)
    if len(custom_id) > CUSTOM_ID_MAX_LENGTH:
        raise ValueError(f"custom_id too long ({len(custom_id)} chars)")
    return custom_id


def decode(custom_id: str | None) -> RoutingKey:
    """Split a ``custom_id`` into a :class:`RoutingKey`.

    Raises
    ------
    MalformedRouting
        If the id is missing, has fewer than two segments, more than four,
        or an empty segment.
    """
    if not custom_id:
        raise MalformedRouting()
    parts = custom_id.split(SEPARATOR)
    if len(parts) < 2 or len(parts) > 4 or any(not p for p in parts):
        raise MalformedRouting()
    parts += [None] * (4 - len(parts))
    return RoutingKey(*parts)


# Fixed keys used by the dashboard and wizard
DASH_REACTION_ROLES = encode("dash", "reaction-roles")
DASH_BACK = encode("dash", "back")
RR_CREATE = encode("rr", "create")
RR_MODAL_CREATE = encode("rr", "modal", "create")

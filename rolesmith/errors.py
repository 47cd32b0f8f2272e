"""
rolesmith.errors — User-Facing Failures
========================================

Every error the router knows how to report privately derives from
:class:`RolesmithError` and carries a ``user_message``.
"""

from __future__ import annotations


class RolesmithError(Exception):
    """Base class for failures reported back to the invoking user."""

    user_message = "❌ Something went wrong."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.user_message)
        if detail:
            self.user_message = detail


class MenuNotFound(RolesmithError, LookupError):
    """The menu id does not resolve to a stored menu."""

    user_message = "❌ Menu not found."

    def __init__(self, menu_id: object) -> None:
        super().__init__()
        self.menu_id = menu_id

    def __str__(self) -> str:
        return f"menu {self.menu_id!r} not found"


class MenuStateConflict(RolesmithError):
    """A wizard step was attempted from a state that does not allow it."""

    user_message = "⚠️ This menu has already moved past that step."


class MalformedRouting(RolesmithError, ValueError):
    """The routing key does not decode or matches no handler."""

    user_message = "⚠️ Unrecognized action."


class ValidationFailure(RolesmithError, ValueError):
    """A wizard step received an empty, duplicate or over-limit selection."""

    user_message = "❌ That selection isn't valid."


class PublishFailed(RolesmithError):
    """The menu message could not be sent to the channel."""

    user_message = "❌ I couldn't post the menu in this channel."


class PermissionDenied(RolesmithError):
    """The member may not configure menus."""

    user_message = "\U0001f512 You need the Manage Roles permission to configure role menus."

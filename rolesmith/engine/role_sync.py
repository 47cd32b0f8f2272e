"""
rolesmith.engine.role_sync — Member Role Reconciliation
========================================================

Two modes, both scoped to a menu's stored role list:

* **Toggle** — a role button flips exactly one role.
* **Sync** — a dropdown submission names the member's desired subset of
  the menu; roles held but not chosen are removed, roles chosen but not
  held are added.  Roles outside the menu are never touched.

Planning is pure and deterministic.  Application issues one Discord call
per role and records each failure instead of aborting the pass, so a
single forbidden role never blocks the rest.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

import discord

logger = logging.getLogger(__name__)

AUDIT_REASON = "Rolesmith: self-assigned via role menu"


class RoleAction(enum.StrEnum):
    ADDED = "added"
    REMOVED = "removed"


class RoleMember(Protocol):
    """The part of :class:`discord.Member` the synchronizer needs."""

    async def add_roles(self, *roles: discord.abc.Snowflake, reason: str | None = None) -> None: ...

    async def remove_roles(self, *roles: discord.abc.Snowflake, reason: str | None = None) -> None: ...


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class RoleFailure:
    role_id: int
    action: RoleAction
    reason: str


@dataclass(frozen=True, slots=True)
class SyncPlan:
    to_add: tuple[int, ...] = ()
    to_remove: tuple[int, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_remove


@dataclass(slots=True)
class SyncResult:
    added: list[int] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)
    failed: list[RoleFailure] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True, slots=True)
class ToggleResult:
    role_id: int
    action: RoleAction
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Planning (pure)
# ---------------------------------------------------------------------------
def plan_toggle(role_id: int, held_ids: Iterable[int]) -> RoleAction:
    """Remove *role_id* if the member holds it, add it otherwise."""
    return RoleAction.REMOVED if role_id in set(held_ids) else RoleAction.ADDED


def plan_sync(
    menu_roles: Iterable[int],
    held_ids: Iterable[int],
    desired_ids: Iterable[int],
) -> SyncPlan:
    """Compute the add/remove sets that make the member's menu roles equal
    *desired_ids* (restricted to the menu).  Output follows menu order.
    """
    menu_order = list(dict.fromkeys(int(r) for r in menu_roles))
    held = {int(r) for r in held_ids}
    desired = {int(r) for r in desired_ids}

    to_add = tuple(r for r in menu_order if r in desired and r not in held)
    to_remove = tuple(r for r in menu_order if r in held and r not in desired)
    return SyncPlan(to_add=to_add, to_remove=to_remove)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------
def _describe_failure(exc: discord.HTTPException) -> str:
    if isinstance(exc, discord.Forbidden):
        return "missing permission"
    if isinstance(exc, discord.NotFound):
        return "role no longer exists"
    return exc.text or f"HTTP {exc.status}"


async def _mutate(member: RoleMember, role_id: int, action: RoleAction) -> str | None:
    """Add or remove one role; return a failure reason or None."""
    role = discord.Object(id=role_id)
    try:
        if action is RoleAction.ADDED:
            await member.add_roles(role, reason=AUDIT_REASON)
        else:
            await member.remove_roles(role, reason=AUDIT_REASON)
    except discord.HTTPException as exc:
        reason = _describe_failure(exc)
        logger.warning(
            "Could not %s role %d for member %s: %s",
            "add" if action is RoleAction.ADDED else "remove",
            role_id, getattr(member, "id", "?"), reason,
        )
        return reason
    return None


async def apply_toggle(member: RoleMember, role_id: int, held_ids: Iterable[int]) -> ToggleResult:
    action = plan_toggle(role_id, held_ids)
    error = await _mutate(member, role_id, action)
    return ToggleResult(role_id=role_id, action=action, error=error)


async def apply_sync(member: RoleMember, plan: SyncPlan) -> SyncResult:
    """Apply *plan* one role at a time.  Failures never stop the pass."""
    result = SyncResult()
    for role_id in plan.to_remove:
        error = await _mutate(member, role_id, RoleAction.REMOVED)
        if error is None:
            result.removed.append(role_id)
        else:
            result.failed.append(RoleFailure(role_id, RoleAction.REMOVED, error))
    for role_id in plan.to_add:
        error = await _mutate(member, role_id, RoleAction.ADDED)
        if error is None:
            result.added.append(role_id)
        else:
            result.failed.append(RoleFailure(role_id, RoleAction.ADDED, error))
    return result

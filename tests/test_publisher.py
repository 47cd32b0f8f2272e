"""
tests/test_publisher.py — Publisher Tests
==========================================
Layout limits, rendering, and the publish/record path.
"""

from __future__ import annotations

import asyncio
import math
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from rolesmith.database.models import MenuState, SelectionType
from rolesmith.errors import MenuStateConflict, PublishFailed
from rolesmith.services.menu_store import MenuSnapshot
from rolesmith.services.publisher import build_menu_layout, publish_menu, render_menu

GUILD_ID = 111222333


def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.get_event_loop_policy().new_event_loop().run_until_complete(coro)


def _snapshot(roles, types, *, state=MenuState.TYPE_ASSIGNED, menu_id=7) -> MenuSnapshot:
    return MenuSnapshot(
        id=menu_id,
        guild_id=GUILD_ID,
        name="Colors",
        description="Pick a colour",
        roles=tuple(roles),
        selection_type=frozenset(types),
        state=state,
        channel_id=None,
        message_id=None,
        revision=2,
    )


def _make_channel(channel_id: int = 777, message_id: int = 555) -> MagicMock:
    ch = MagicMock(spec=discord.TextChannel)
    ch.id = channel_id
    ch.send = AsyncMock(
        return_value=SimpleNamespace(id=message_id, channel=SimpleNamespace(id=channel_id)),
    )
    return ch


def _ready_menu(store, roles, token_types):
    menu_id = store.create(GUILD_ID, "Colors", "Pick a colour")
    store.set_roles(menu_id, roles)
    return store.set_selection_type(menu_id, token_types)


class TestBuildMenuLayout:
    @pytest.mark.parametrize("count", [1, 4, 5, 6, 11, 25])
    def test_button_rows_bounded(self, count):
        layout = build_menu_layout(_snapshot(range(1, count + 1), {SelectionType.BUTTON}), {})
        assert len(layout.button_rows) == math.ceil(count / 5)
        assert all(len(row) <= 5 for row in layout.button_rows)
        assert sum(len(row) for row in layout.button_rows) == count
        assert layout.dropdown_id is None

    def test_dropdown_only(self):
        layout = build_menu_layout(_snapshot([1, 2], {SelectionType.DROPDOWN}), {1: "Red"})
        assert layout.dropdown_id == "rr:use:7"
        assert [(o.label, o.value) for o in layout.dropdown] == [("Red", "1"), ("Role 2", "2")]
        assert layout.button_rows == ()

    def test_both_encodes_menu_on_buttons(self):
        layout = build_menu_layout(
            _snapshot([10, 20], {SelectionType.DROPDOWN, SelectionType.BUTTON}), {},
        )
        assert layout.row_count == 2
        assert [b.value for b in layout.button_rows[0]] == ["rr:assign:10:7", "rr:assign:20:7"]


class TestRenderMenu:
    def test_both_renders_select_then_buttons(self):
        async def _inner():
            layout = build_menu_layout(
                _snapshot(range(1, 8), {SelectionType.DROPDOWN, SelectionType.BUTTON}), {},
            )
            return render_menu(layout, 0x123456)

        embed, view = run_async(_inner())
        assert embed.title == "Colors"
        assert embed.description == "Pick a colour"

        selects = [c for c in view.children if isinstance(c, discord.ui.Select)]
        buttons = [c for c in view.children if isinstance(c, discord.ui.Button)]
        assert len(selects) == 1
        assert selects[0].min_values == 0
        assert selects[0].max_values == 7
        assert len(buttons) == 7
        assert {b.row for b in buttons} == {1, 2}


class TestPublishMenu:
    def test_publish_records_location(self, store):
        menu = _ready_menu(store, [1, 2], ["dropdown", "button"])
        channel = _make_channel()

        published = run_async(publish_menu(store, channel, menu, {1: "Red", 2: "Blue"}))

        channel.send.assert_awaited_once()
        assert published.state is MenuState.PUBLISHED
        stored = store.get(menu.id)
        assert (stored.channel_id, stored.message_id) == (777, 555)

    def test_republish_rejected(self, store):
        menu = _ready_menu(store, [1], ["button"])
        run_async(publish_menu(store, _make_channel(), menu, {}))

        again = _make_channel(888, 999)
        with pytest.raises(MenuStateConflict):
            run_async(publish_menu(store, again, store.get(menu.id), {}))
        again.send.assert_not_called()
        assert store.get(menu.id).message_id == 555

    def test_not_ready_rejected(self, store):
        menu_id = store.create(GUILD_ID, "Colors", "")
        channel = _make_channel()
        with pytest.raises(MenuStateConflict):
            run_async(publish_menu(store, channel, store.get(menu_id), {}))
        channel.send.assert_not_called()

    def test_send_failure_leaves_menu_unpublished(self, store):
        menu = _ready_menu(store, [1], ["button"])
        channel = _make_channel()
        channel.send.side_effect = discord.Forbidden(
            MagicMock(status=403, reason="Forbidden"), "Missing Access",
        )

        with pytest.raises(PublishFailed):
            run_async(publish_menu(store, channel, menu, {}))
        stored = store.get(menu.id)
        assert stored.state is MenuState.TYPE_ASSIGNED
        assert stored.channel_id is None and stored.message_id is None

    def test_sent_view_is_released(self, store):
        menu = _ready_menu(store, [1, 2], ["button"])
        channel = _make_channel()

        run_async(publish_menu(store, channel, menu, {}))

        view = channel.send.call_args.kwargs["view"]
        assert view.is_finished()

    def test_unrecorded_message_is_deleted(self, store, monkeypatch):
        menu = _ready_menu(store, [1], ["button"])
        message = MagicMock(id=555, channel=SimpleNamespace(id=777))
        message.delete = AsyncMock()
        channel = _make_channel()
        channel.send.return_value = message

        def _db_down(*args, **kwargs):
            raise RuntimeError("db down")

        monkeypatch.setattr(store, "set_message_location", _db_down)

        with pytest.raises(RuntimeError):
            run_async(publish_menu(store, channel, menu, {}))
        message.delete.assert_awaited_once()
        assert store.get(menu.id).state is MenuState.TYPE_ASSIGNED

    def test_lost_race_deletes_duplicate_message(self, store):
        menu = _ready_menu(store, [1], ["button"])
        run_async(publish_menu(store, _make_channel(), menu, {}))

        # A second publish that read the menu before the first one recorded it.
        message = MagicMock(id=999, channel=SimpleNamespace(id=888))
        message.delete = AsyncMock()
        late = _make_channel(888, 999)
        late.send.return_value = message

        with pytest.raises(MenuStateConflict):
            run_async(publish_menu(store, late, menu, {}))
        message.delete.assert_awaited_once()
        assert store.get(menu.id).message_id == 555

"""
tests/test_config.py — Config Loader Tests
===========================================
"""

from __future__ import annotations

import pytest

from rolesmith.config import DEFAULT_EMBED_COLOR, load_config


def test_loads_required_and_optional(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        'bot_name: Rolesmith\nbot_prefix: "!"\nembed_color: "#FF0000"\ndev_guild_id: 42\n',
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.bot_name == "Rolesmith"
    assert cfg.bot_prefix == "!"
    assert cfg.embed_color == 0xFF0000
    assert cfg.dev_guild_id == 42


def test_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text('bot_name: R\nbot_prefix: "?"\n', encoding="utf-8")
    cfg = load_config(path)
    assert cfg.embed_color == DEFAULT_EMBED_COLOR
    assert cfg.dev_guild_id is None


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_missing_key(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("bot_name: R\n", encoding="utf-8")
    with pytest.raises(KeyError):
        load_config(path)

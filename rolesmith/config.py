"""
rolesmith.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for the bot's soft settings (name, prefix, embed
colour, optional dev guild).  Secrets such as ``DISCORD_TOKEN`` and
``DATABASE_URL`` stay in ``.env``.

Usage::

    from rolesmith.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.bot_name)          # "Rolesmith"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_EMBED_COLOR = 0x5865F2


@dataclass(frozen=True, slots=True)
class RolesmithConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    bot_name: str

    # Discord
    bot_prefix: str

    # Presentation
    embed_color: int = DEFAULT_EMBED_COLOR

    # Optional guild for instant slash-command sync during development
    dev_guild_id: int | None = None


def _parse_color(raw: object) -> int:
    """Accept ``0x5865F2``, ``"#5865F2"`` or ``"5865F2"``."""
    if raw is None:
        return DEFAULT_EMBED_COLOR
    if isinstance(raw, int):
        return raw
    return int(str(raw).lstrip("#"), 16)


def load_config(path: str | Path = "config.yaml") -> RolesmithConfig:
    """Read *path* and return a :class:`RolesmithConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return RolesmithConfig(
        bot_name=raw["bot_name"],
        bot_prefix=raw["bot_prefix"],
        embed_color=_parse_color(raw.get("embed_color")),
        dev_guild_id=int(raw["dev_guild_id"]) if raw.get("dev_guild_id") else None,
    )

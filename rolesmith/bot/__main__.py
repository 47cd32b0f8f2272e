"""
rolesmith.bot.__main__ — Entry point for ``python -m rolesmith.bot``
====================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Create the RolesmithBot with a MenuStore.
5. Start the bot (blocking — runs the asyncio event loop).
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from rolesmith.bot.core import RolesmithBot
from rolesmith.config import load_config
from rolesmith.database.engine import create_db_engine, init_db
from rolesmith.services.menu_store import MenuStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("rolesmith")


def main() -> None:
    """Bootstrap and run the Rolesmith bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config(os.getenv("ROLESMITH_CONFIG", "config.yaml"))
    logger.info("Config loaded — Bot: %s", cfg.bot_name)

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)

    # 4. Bot.
    bot = RolesmithBot(cfg=cfg, store=MenuStore(engine))

    # 5. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting Rolesmith bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()

"""
rolesmith.constants — Shared Constants
=======================================

Discord component limits and presentation strings.  Import from here
instead of duplicating in the router, components and publisher.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Discord component limits
# ---------------------------------------------------------------------------
MAX_SELECT_OPTIONS = 25      # options per select menu
BUTTONS_PER_ROW = 5          # buttons per action row
MAX_ACTION_ROWS = 5          # action rows per message
MAX_BUTTON_LABEL = 80
MAX_OPTION_LABEL = 100

# Menu text limits (modal inputs)
MAX_MENU_NAME = 100
MAX_MENU_DESCRIPTION = 4000

# Routing-key token that selects both presentation modes
BOTH_TOKEN = "both"

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
STATE_BADGES: dict[str, str] = {
    "created": "\U0001f4dd",         # 📝
    "roles_assigned": "\U0001f3ad",  # 🎭
    "type_assigned": "\U0001f39b",   # 🎛
    "published": "\U0001f680",       # 🚀
}

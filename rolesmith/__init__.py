"""
Rolesmith — Self-Service Role Menus for Discord
================================================
Lets server operators build "reaction role" menus through a dashboard
wizard, publish them as buttons and/or a dropdown, and keeps each member's
roles in line with what they pick.

Package layout::

    rolesmith/
    ├── config.py          # YAML → typed Python config
    ├── errors.py          # User-facing exception taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # ReactionRoleMenu ORM model
    ├── engine/
    │   ├── routing.py     # custom_id routing keys (encode / decode)
    │   ├── workflow.py    # Menu wizard state machine + validation
    │   ├── role_sync.py   # Toggle / sync planning and application
    │   └── locks.py       # Per-key asyncio locks
    ├── services/
    │   ├── menu_store.py  # Menu persistence (CAS updates)
    │   ├── components.py  # Embeds, views and modals for the wizard
    │   └── publisher.py   # Public menu layout + publish
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        ├── router.py      # Interaction → handler dispatch
        └── cogs/
            ├── dashboard.py     # /dashboard
            └── interactions.py  # on_interaction → router
"""

__version__ = "0.1.0"

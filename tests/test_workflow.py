"""
tests/test_workflow.py — Wizard State Machine Tests
====================================================
Validation rules, selection-type parsing and the step functions.
"""

from __future__ import annotations

import pytest

from rolesmith.database.models import MenuState, SelectionType
from rolesmith.engine.workflow import (
    Step,
    assign_roles,
    assign_type,
    can_run,
    clean_menu_text,
    max_roles_for,
    normalize_roles,
    parse_selection_type,
    start_menu,
)
from rolesmith.errors import MenuStateConflict, ValidationFailure

GUILD_ID = 111222333


class TestParseSelectionType:
    def test_both_maps_to_dropdown_and_button(self):
        assert parse_selection_type("both") == {SelectionType.DROPDOWN, SelectionType.BUTTON}

    @pytest.mark.parametrize("token", ["dropdown", "button"])
    def test_single_token_maps_to_singleton(self, token):
        assert parse_selection_type(token) == {SelectionType(token)}

    @pytest.mark.parametrize("token", ["", "buttons", "BOTH", None])
    def test_unknown_token_rejected(self, token):
        with pytest.raises(ValidationFailure):
            parse_selection_type(token)


class TestNormalizeRoles:
    def test_dedupes_preserving_order(self):
        assert normalize_roles(["3", "1", "3", 2, "1"]) == [3, 1, 2]

    def test_empty_rejected(self):
        with pytest.raises(ValidationFailure):
            normalize_roles([])

    def test_over_limit_rejected(self):
        with pytest.raises(ValidationFailure):
            normalize_roles(range(1, 27))

    def test_non_numeric_rejected(self):
        with pytest.raises(ValidationFailure):
            normalize_roles(["abc"])


class TestLimits:
    def test_dropdown_holds_25(self):
        assert max_roles_for({SelectionType.DROPDOWN}) == 25

    def test_buttons_hold_25(self):
        assert max_roles_for({SelectionType.BUTTON}) == 25

    def test_both_leaves_four_button_rows(self):
        assert max_roles_for({SelectionType.DROPDOWN, SelectionType.BUTTON}) == 20

    def test_clean_menu_text_strips(self):
        assert clean_menu_text("  Colors ", " hi ") == ("Colors", "hi")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationFailure):
            clean_menu_text("   ", "desc")


class TestTransitions:
    @pytest.mark.parametrize("step, state, allowed", [
        (Step.SET_ROLES, MenuState.CREATED, True),
        (Step.SET_ROLES, MenuState.ROLES_ASSIGNED, True),
        (Step.SET_ROLES, MenuState.TYPE_ASSIGNED, False),
        (Step.SET_TYPE, MenuState.CREATED, False),
        (Step.SET_TYPE, MenuState.TYPE_ASSIGNED, True),
        (Step.PUBLISH, MenuState.ROLES_ASSIGNED, False),
        (Step.PUBLISH, MenuState.TYPE_ASSIGNED, True),
        (Step.PUBLISH, MenuState.PUBLISHED, False),
    ])
    def test_can_run(self, step, state, allowed):
        assert can_run(step, state) is allowed


class TestSteps:
    def test_walkthrough(self, store):
        menu_id = start_menu(store, GUILD_ID, "Colors", "desc")
        assign_roles(store, menu_id, ["10", "20"])
        menu = assign_type(store, menu_id, "both")

        assert menu.roles == (10, 20)
        assert menu.selection_type == {SelectionType.DROPDOWN, SelectionType.BUTTON}
        assert menu.state is MenuState.TYPE_ASSIGNED

    def test_type_can_be_rechosen_before_publish(self, store):
        menu_id = start_menu(store, GUILD_ID, "Colors", "desc")
        assign_roles(store, menu_id, [1])
        assign_type(store, menu_id, "dropdown")
        menu = assign_type(store, menu_id, "button")
        assert menu.selection_type == {SelectionType.BUTTON}

    def test_empty_roles_not_persisted(self, store):
        menu_id = start_menu(store, GUILD_ID, "Colors", "desc")
        with pytest.raises(ValidationFailure):
            assign_roles(store, menu_id, [])
        assert store.get(menu_id).state is MenuState.CREATED

    def test_both_rejected_for_too_many_roles(self, store):
        menu_id = start_menu(store, GUILD_ID, "Big", "")
        assign_roles(store, menu_id, range(1, 24))
        with pytest.raises(ValidationFailure):
            assign_type(store, menu_id, "both")
        # Buttons alone still fit.
        assert assign_type(store, menu_id, "button").state is MenuState.TYPE_ASSIGNED

    def test_type_before_roles_conflicts(self, store):
        menu_id = start_menu(store, GUILD_ID, "Colors", "desc")
        with pytest.raises(MenuStateConflict):
            assign_type(store, menu_id, "button")

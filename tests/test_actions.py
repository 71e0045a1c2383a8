"""Tests for action naming, classification and detail formatting."""

from datetime import datetime, timezone

import pytest

from session_report.actions import (
    UNKNOWN_ACTION,
    categorize_action,
    derive_action_name,
    extract_action_name,
    extract_event_type,
    format_action_details,
)
from session_report.config import ParserConfig
from session_report.models import LogEntry

CONFIG = ParserConfig()


def _entry(message: str, params: dict | None = None) -> LogEntry:
    return LogEntry(
        timestamp=datetime(2025, 10, 24, 10, 0, 0, tzinfo=timezone.utc),
        level="info",
        category="App.analytics",
        message=message,
        params=params or {},
    )


class TestExtractEventType:
    def test_with_params(self):
        msg = "[App] sendEvent: ui_button_tap, params: name:CREATE_NOTE"
        assert extract_event_type(msg) == "ui_button_tap"

    def test_without_comma(self):
        assert extract_event_type("[App] sendEvent: app_background") == "app_background"

    def test_no_marker(self):
        assert extract_event_type("App launched") is None

    def test_empty_event(self):
        assert extract_event_type("[App] sendEvent:") == "sendEvent"

    def test_custom_marker(self):
        assert extract_event_type("track: purchase, sku=1", marker="track:") == "purchase"


class TestExtractActionName:
    def test_send_event_wins_over_params(self):
        entry = _entry("[App] sendEvent: NOTE_OPENED, params: nil", {"name": "ignored"})
        assert extract_action_name(entry, CONFIG) == "NOTE_OPENED"

    def test_action_param(self):
        entry = _entry("user did something", {"action": "refresh"})
        assert extract_action_name(entry, CONFIG) == "refresh"

    def test_logged_event(self):
        entry = _entry("Tracker has logged event: 'purchase_done'")
        assert extract_action_name(entry, CONFIG) == "purchase_done"

    def test_user_property_from_message(self):
        entry = _entry("setUserProperty: theme -> dark")
        assert extract_action_name(entry, CONFIG) == "Set User Property: Theme"

    def test_user_property_from_params(self):
        entry = _entry("property changed", {"property_name": "dark_mode"})
        assert extract_action_name(entry, CONFIG) == "Set User Property: Dark Mode"

    def test_derived_from_message(self):
        entry = _entry("[App] User opened settings (from menu)")
        assert extract_action_name(entry, CONFIG) == "User opened settings"

    @pytest.mark.parametrize("message", ["", "[App] ...", "[App] sendEvent"])
    def test_unknown(self, message):
        assert extract_action_name(_entry(message), CONFIG) == UNKNOWN_ACTION

    def test_derive_skips_leading_colon(self):
        assert derive_action_name("[App] : Sync finished, items=3") == "Sync finished"


class TestCategorizeAction:
    @pytest.mark.parametrize("message,expected", [
        ("[App] sendEvent: ui_button_tap, params: name:SAVE", "👆"),
        ("toggle dark mode", "🔄"),
        ("paywall_purchase", "💳"),
        ("delete_note", "🗑️"),
        ("xyz", "⚡"),
    ])
    def test_default_rules(self, message, expected):
        assert categorize_action(message, CONFIG) == expected

    def test_first_rule_wins(self):
        # 'tap' and 'delete' both present; the tap rule comes first
        assert categorize_action("tap delete", CONFIG) == "👆"

    def test_custom_rules(self):
        config = ParserConfig(action_categories=(("🎵", ("play",)),), default_action_tag="•")
        assert categorize_action("Play_Song", config) == "🎵"
        assert categorize_action("pause", config) == "•"


class TestFormatActionDetails:
    def test_button_uses_name_param(self):
        entry = _entry("sendEvent: ui_button_tap", {"name": "CREATE_NOTE", "view_name": "DASHBOARD"})
        assert format_action_details("ui_button_tap", entry, "Dashboard") == "Create Note"

    def test_other_screen_is_mentioned(self):
        entry = _entry("sendEvent: ui_button_tap", {"name": "CREATE_NOTE", "view_name": "DASHBOARD"})
        assert format_action_details("ui_button_tap", entry, "Settings") == "Create Note (on Dashboard)"

    def test_value_transition(self):
        entry = _entry(
            "sendEvent: NOTE_MODE_CHANGED",
            {"from": "plainText", "to": "checklist", "timeDelta": "1.6"},
        )
        assert format_action_details("NOTE_MODE_CHANGED", entry, "Edit Note") == (
            "Note Mode Changed (→ Checklist, from Plaintext)"
        )

    def test_remaining_params_sorted_and_filtered(self):
        entry = _entry(
            "sendEvent: FONT_SIZE_CHANGED",
            {"font_size": "16", "b_key": "x", "nil_key": "nil", "empty": ""},
        )
        assert format_action_details("FONT_SIZE_CHANGED", entry) == (
            "Font Size Changed (B Key: X, Font Size: 16)"
        )

    def test_no_params(self):
        assert format_action_details("NOTE_OPENED", _entry("sendEvent: NOTE_OPENED")) == "Note Opened"

"""Event-name extraction, action classification, and action detail formatting."""

import re
import string

from session_report.config import ParserConfig
from session_report.models import LogEntry
from session_report.naming import format_name

UNKNOWN_ACTION = "Unknown Action"

_LOGGED_EVENT_RE = re.compile(r"has logged event: '([^']+)'")
_USER_PROPERTY_RE = re.compile(r"setuserproperty[^\w]*[:=]\s*([^,\n]+)", re.IGNORECASE)

USER_PROPERTY_KEYS = ("setuserproperty", "set_user_property", "property_name")

# Params already folded into the details text, or pure timing noise
_DETAIL_KEYS = ("name", "button", "view_name", "screen", "newValue", "value",
                "to", "from", "previous", "detail")
EXCLUDED_DETAIL_KEYS = frozenset(_DETAIL_KEYS + ("timeDelta", "timestamp") + USER_PROPERTY_KEYS)

_TRIM_CHARS = string.whitespace + string.punctuation


def extract_event_type(message: str, marker: str = "sendEvent:") -> str | None:
    """'sendEvent: ui_button_tap, params: ...' -> 'ui_button_tap'.

    Returns None when the marker is absent, 'sendEvent' when nothing follows it.
    """
    start = message.find(marker)
    if start == -1:
        return None
    event_type = message[start + len(marker):].split(",", 1)[0].strip()
    return event_type or marker.rstrip(": ")


def _user_property_name(entry: LogEntry) -> str | None:
    lowered_params = {k.lower(): v for k, v in entry.params.items()}
    for key in USER_PROPERTY_KEYS:
        value = lowered_params.get(key)
        if value and value.strip():
            return value

    if "setuserproperty" not in entry.message.lower():
        return None

    m = _USER_PROPERTY_RE.search(entry.message)
    if not m:
        return None
    prop = m.group(1).split("->", 1)[0].split(",", 1)[0].strip()
    return prop or None


def derive_action_name(message: str) -> str | None:
    """Best-effort name from the free text after the last ']'."""
    text = message.strip()
    if not text:
        return None

    closing = text.rfind("]")
    if closing != -1:
        text = text[closing + 1:]
    text = text.strip()
    if text.startswith(":"):
        text = text[1:].strip()

    lowered = text.lower()
    if lowered.startswith("sendevent") or lowered.startswith("has logged event"):
        return None

    for stop in ("(", ","):
        idx = text.find(stop)
        if idx != -1:
            text = text[:idx]

    text = text.strip(_TRIM_CHARS)
    return text or None


def extract_action_name(entry: LogEntry, config: ParserConfig) -> str:
    """Raw action name; never 'Unknown Action' for send-event messages."""
    event_type = extract_event_type(entry.message, config.send_event_marker)
    if event_type is not None:
        return event_type

    for param in config.action_param_names:
        if param in entry.params:
            return entry.params[param]

    m = _LOGGED_EVENT_RE.search(entry.message)
    if m:
        return m.group(1)

    prop = _user_property_name(entry)
    if prop:
        return f"Set User Property: {format_name(prop)}"

    return derive_action_name(entry.message) or UNKNOWN_ACTION


def categorize_action(message: str, config: ParserConfig) -> str:
    """Icon tag from the first rule whose keyword appears in the message."""
    lowered = message.lower()
    for tag, keywords in config.action_categories:
        if any(keyword in lowered for keyword in keywords):
            return tag
    return config.default_action_tag


def format_action_details(
    action_name: str,
    entry: LogEntry,
    current_screen: str | None = None,
) -> str:
    """Readable description: name, then value/screen/param fragments in parens."""
    params = entry.params
    details = format_name(action_name)
    extra: list[str] = []

    button = params.get("name") or params.get("button")
    if "button" in action_name.lower() and button:
        details = format_name(button)
    elif "name" in params:
        details = format_name(params["name"])

    new_value = params.get("newValue") or params.get("value") or params.get("to")
    if new_value:
        extra.append(f"→ {format_name(new_value)}")

    old_value = params.get("from") or params.get("previous")
    if old_value:
        extra.append(f"from {format_name(old_value)}")

    view_name = params.get("view_name") or params.get("screen")
    if (
        view_name
        and current_screen is not None
        and format_name(view_name).lower() != current_screen.lower()
    ):
        extra.append(f"on {format_name(view_name)}")

    for key in sorted(params):
        value = params[key]
        if key in EXCLUDED_DETAIL_KEYS or not value or value == "nil":
            continue
        extra.append(f"{format_name(key)}: {format_name(value)}")

    if extra:
        details += " (" + ", ".join(extra) + ")"
    return details

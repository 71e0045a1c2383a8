"""Configuration loading from an optional YAML file and environment variables."""

import logging
import os
from dataclasses import dataclass, fields, replace

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SESSION_REPORT_CONFIG"

DEFAULT_ACTION_CATEGORIES = (
    ("👆", ("button", "tap", "click", "press")),
    ("🔄", ("toggle", "switch", "change")),
    ("👁️", ("view", "open", "show", "display")),
    ("💳", ("purchase", "subscription", "paywall", "premium")),
    ("💾", ("save", "update", "modify", "edit")),
    ("➕", ("create", "add", "new")),
    ("🗑️", ("delete", "remove", "clear")),
    ("⚙️", ("settings", "setting", "config", "preference", "property", "setuserproperty")),
    ("📤", ("share", "export", "send")),
    ("🚀", ("onboarding", "tutorial", "intro")),
    ("🧭", ("navigate", "go_to", "back")),
    ("🔍", ("search", "filter", "find")),
    ("🔄", ("refresh", "reload")),
    ("⚡", ("speedtest", "speed", "test")),
    ("🔐", ("vpn", "connect", "server")),
    ("✨", ("engagement", "completed")),
)


@dataclass(frozen=True)
class ParserConfig:
    session_start_keywords: tuple = (
        "app_launch", "app launch", "session_start", "launch completed",
        "app started", "application started", "bootstrap", "initialization complete",
    )
    session_end_keywords: tuple = (
        "app_close", "session_end", "app_background", "app_terminated",
        "application_will_terminate", "session_ended",
    )
    screen_view_keywords: tuple = (
        "ui_view_show", "screen_view", "view_show", "page_view", "screen_displayed",
        "view_appeared", "screen_appeared", "navigate_to", "open_screen",
    )
    action_keywords: tuple = (
        "ui_button_tap", "button_tap", "button_tapped", "click", "tap", "press",
        "action", "event", "interaction", "user_action", "gesture",
        "swipe", "scroll", "select", "toggle", "change", "update",
        "create", "delete", "save", "share", "refresh", "search",
    )
    screen_view_events: tuple = ("ui_view_show", "screen_view")
    send_event_marker: str = "sendEvent:"
    screen_param_names: tuple = ("name", "screen", "screen_name", "view", "page", "view_name")
    action_param_names: tuple = (
        "name", "action", "event", "button", "type", "event_name",
        "eventName", "event_type", "identifier", "title", "label",
    )
    allowed_categories: tuple = ("analytics", "tracking", "events", "metrics")
    main_categories: tuple = ("main",)
    main_relevance_keywords: tuple = ("launch", "premium status", "app", "session")
    adaptor_marker: str = "Adaptor:"
    adaptor_noise_phrases: tuple = (
        "has logged event:", "has been started", "Starting with install type",
        "Skipping Configuring", "setUserProperty:",
    )
    separator_markers: tuple = ("-- ** ** ** --", "===", "***")
    metadata_keys: tuple = (
        "version", "app_version", "build", "os_version", "device",
        "platform", "to_version", "to_build",
    )
    launch_count_keys: tuple = ("launchCount", "launch_count")
    minimum_screen_duration: float = 0.1
    duplicate_screen_window: float = 2.0
    revisit_window: float = 10.0
    inferred_start_offset: float = 1.0
    allowed_navigation: tuple = ()
    follow_action_screens: bool = False
    action_categories: tuple = DEFAULT_ACTION_CATEGORIES
    default_action_tag: str = "⚡"
    diagnostic_sample_size: int = 10
    diagnostic_marker_sample_size: int = 5


_FIELD_NAMES = {f.name for f in fields(ParserConfig)}


def _to_tuple(value) -> tuple:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _parse_navigation(value) -> tuple:
    """Accept [[from, to], ...] or [{"from": .., "to": ..}, ...]."""
    pairs = []
    for item in value or []:
        if isinstance(item, dict):
            pairs.append((str(item["from"]), str(item["to"])))
        else:
            source, target = item
            pairs.append((str(source), str(target)))
    return tuple(pairs)


def _parse_action_categories(value) -> tuple:
    """Accept [{"tag": .., "keywords": [..]}, ...] or [[tag, [..]], ...]."""
    rules = []
    for item in value or []:
        if isinstance(item, dict):
            rules.append((str(item["tag"]), _to_tuple(item.get("keywords", []))))
        else:
            tag, keywords = item
            rules.append((str(tag), _to_tuple(keywords)))
    return tuple(rules)


def load_yaml_config(path: str | None) -> dict:
    """Load parser settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML in %s (%s), using defaults", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    logger.info("Loaded YAML config from %s", path)
    return data


def config_from_dict(data: dict) -> ParserConfig:
    """Build a ParserConfig from a plain dict, ignoring unknown keys."""
    defaults = ParserConfig()
    overrides = {}
    for key, value in data.items():
        if key not in _FIELD_NAMES:
            logger.warning("Unknown config key '%s' ignored", key)
            continue
        if key == "allowed_navigation":
            overrides[key] = _parse_navigation(value)
        elif key == "action_categories":
            overrides[key] = _parse_action_categories(value)
        elif isinstance(getattr(defaults, key), tuple):
            overrides[key] = _to_tuple(value or ())
        elif isinstance(getattr(defaults, key), bool):
            overrides[key] = bool(value)
        elif isinstance(getattr(defaults, key), float):
            overrides[key] = float(value)
        elif isinstance(getattr(defaults, key), int):
            overrides[key] = int(value)
        else:
            overrides[key] = str(value)
    return replace(defaults, **overrides)


def _apply_env(config: ParserConfig) -> ParserConfig:
    overrides = {}

    min_duration = os.environ.get("SESSION_REPORT_MIN_SCREEN_DURATION")
    if min_duration is not None:
        try:
            overrides["minimum_screen_duration"] = float(min_duration)
        except ValueError:
            logger.warning(
                "Invalid SESSION_REPORT_MIN_SCREEN_DURATION '%s', keeping %.2f",
                min_duration, config.minimum_screen_duration,
            )

    categories = os.environ.get("SESSION_REPORT_ALLOWED_CATEGORIES")
    if categories:
        overrides["allowed_categories"] = tuple(
            c.strip() for c in categories.split(",") if c.strip()
        )

    return replace(config, **overrides) if overrides else config


def load_config(path: str | None = None) -> ParserConfig:
    """Build ParserConfig from defaults, an optional YAML file, then env vars."""
    path = path or os.environ.get(CONFIG_ENV_VAR)
    try:
        config = config_from_dict(load_yaml_config(path))
    except (TypeError, ValueError, KeyError) as e:
        logger.warning("Invalid value in config %s (%s), using defaults", path, e)
        config = ParserConfig()
    return _apply_env(config)

"""Regex-based parser for application log lines with a bracketed category.

Line formats are tried in order, most specific first:
  1. timestamp level [category] : message
  2. timestamp level [category] message
  3. timestamp ... [category] ... : message   (loose fallback, level = info)
First match with a parseable timestamp wins.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from session_report.models import LogEntry

# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

_TIMESTAMP = (
    r"(?P<timestamp>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}"
    r"(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)"
)


@dataclass(frozen=True)
class LineFormat:
    name: str
    pattern: re.Pattern
    default_level: str = "info"


LINE_FORMATS = (
    LineFormat(
        "colon",
        re.compile(
            r"^" + _TIMESTAMP + r"\s+(?P<level>\w+)\s+"
            r"\[(?P<category>[^\]]+)\]\s+:\s+(?P<message>.+)$"
        ),
    ),
    LineFormat(
        "plain",
        re.compile(
            r"^" + _TIMESTAMP + r"\s+(?P<level>\w+)\s+"
            r"\[(?P<category>[^\]]+)\]\s+(?P<message>.+)$"
        ),
    ),
    LineFormat(
        "loose",
        re.compile(
            r"^" + _TIMESTAMP + r".*?\[(?P<category>[^\]]+)\].*?:\s*(?P<message>.+)$"
        ),
    ),
)

TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
)

# Later patterns overwrite keys found by earlier ones
PARAM_PATTERNS = (
    re.compile(r"(\w+):([^,\s\]]+)"),
    re.compile(r"(\w+)=([^,\s\]]+)"),
    re.compile(r"(\w+):\s*'([^']*?)'"),
    re.compile(r"(\w+)=\s*'([^']*?)'"),
    re.compile(r'(\w+):\s*"([^"]*?)"'),
    re.compile(r'(\w+)=\s*"([^"]*?)"'),
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_timestamp(text: str) -> datetime | None:
    """Try each known format in order. Naive results are taken as UTC."""
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def extract_params(message: str) -> dict[str, str]:
    """Collect key:value / key=value pairs (optionally quoted) from a message."""
    params: dict[str, str] = {}
    for pattern in PARAM_PATTERNS:
        for key, value in pattern.findall(message):
            params[key] = value
    return params


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_line(line: str) -> LogEntry | None:
    """Parse a single log line into a LogEntry. Returns None for unparseable lines."""
    stripped = line.strip()
    if not stripped or "[" not in stripped or "]" not in stripped:
        return None

    for line_format in LINE_FORMATS:
        m = line_format.pattern.match(stripped)
        if not m:
            continue

        timestamp = parse_timestamp(m.group("timestamp"))
        if timestamp is None:
            continue

        groups = m.groupdict()
        message = groups["message"]
        return LogEntry(
            timestamp=timestamp,
            level=groups.get("level") or line_format.default_level,
            category=groups["category"],
            message=message,
            params=extract_params(message),
        )

    return None

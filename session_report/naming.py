"""Pure formatting helpers shared by the reconstructor and the report."""

from datetime import datetime


def format_name(name: str) -> str:
    """'CREATE_NOTE' / 'edit-note' -> 'Create Note' / 'Edit Note'."""
    spaced = name.replace("_", " ").replace("-", " ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in spaced.split(" "))


def format_key(key: str) -> str:
    """Metadata key for display: 'app_version' -> 'App Version'."""
    return format_name(key.replace("-", "_"))


def _split(seconds: float) -> tuple[float, int, float]:
    total = max(seconds, 0.0)
    return total, int(total) // 60, total % 60


def format_screen_duration(seconds: float) -> str:
    """'1m 5.0s', '3.4s' or '0.10s'."""
    total, mins, secs = _split(seconds)
    if mins > 0:
        return f"{mins}m {secs:.1f}s"
    if total >= 1:
        return f"{total:.1f}s"
    return f"{total:.2f}s"


def format_session_duration(seconds: float) -> str:
    """Like format_screen_duration, but whole seconds from 10s up to a minute."""
    total, mins, secs = _split(seconds)
    if mins > 0:
        return f"{mins}m {secs:.1f}s"
    if total >= 10:
        return f"{total:.0f}s"
    if total >= 1:
        return f"{total:.1f}s"
    return f"{total:.2f}s"


def format_clock(moment: datetime) -> str:
    return moment.strftime("%H:%M:%S")

"""Statistics — session count, average duration, screens and actions."""

from dataclasses import dataclass
from typing import Iterable

from session_report.models import Session


@dataclass
class SessionStats:
    session_count: int = 0
    screen_count: int = 0
    action_count: int = 0
    avg_duration: float = 0.0
    avg_screens: float = 0.0


def compute_stats(sessions: Iterable[Session]) -> SessionStats:
    """Aggregate over sessions. Zero-length sessions don't drag the average down."""
    total = 0
    screens = 0
    actions = 0
    durations = []

    for session in sessions:
        total += 1
        screens += len(session.screens)
        actions += sum(len(screen.actions) for screen in session.screens)
        if session.duration > 0:
            durations.append(session.duration)

    return SessionStats(
        session_count=total,
        screen_count=screens,
        action_count=actions,
        avg_duration=sum(durations) / len(durations) if durations else 0.0,
        avg_screens=screens / total if total else 0.0,
    )

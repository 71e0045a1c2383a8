"""Session timeline dataclasses — one parse call owns every instance."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    level: str
    category: str
    message: str
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UserAction:
    timestamp: datetime
    action_type: str
    details: str
    raw_event: str


@dataclass
class ScreenVisit:
    screen_name: str
    entry_time: datetime
    exit_time: datetime | None = None
    actions: list[UserAction] = field(default_factory=list)

    @property
    def duration(self) -> float:
        """Seconds on screen; 0 while the visit is still open."""
        if self.exit_time is None:
            return 0.0
        return (self.exit_time - self.entry_time).total_seconds()


@dataclass
class Session:
    session_number: int
    start_time: datetime
    end_time: datetime | None = None
    screens: list[ScreenVisit] = field(default_factory=list)
    launch_count: int = 0
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        """Seconds between start and end; 0 until finalized."""
        if self.end_time is None:
            return 0.0
        return max((self.end_time - self.start_time).total_seconds(), 0.0)

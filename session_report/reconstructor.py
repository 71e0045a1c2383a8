"""Single-pass state machine that folds LogEntry records into sessions.

State is one cursor: the index of the open session, or None. Each entry is
filtered (category, adaptor noise, duplicates), then may open a session,
move the user to a new screen, append an action, or close the session.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable

from session_report.actions import (
    categorize_action,
    extract_action_name,
    extract_event_type,
    format_action_details,
)
from session_report.config import ParserConfig
from session_report.models import LogEntry, ScreenVisit, Session, UserAction
from session_report.naming import format_name
from session_report.parser import parse_line

logger = logging.getLogger(__name__)

FALLBACK_SCREEN = "App"
INFERRED_START_MESSAGE = "App launched (inferred)"


def _shift(moment: datetime, seconds: float) -> datetime:
    """moment + seconds, or moment unchanged if that leaves the datetime range."""
    try:
        return moment + timedelta(seconds=seconds)
    except OverflowError:
        return moment


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


class SessionReconstructor:
    """Rebuilds Session -> ScreenVisit -> UserAction timelines from log text.

    Not safe to share between concurrent parse calls; use one instance each.
    """

    def __init__(self, config: ParserConfig | None = None):
        self._config = config or ParserConfig()
        self._sessions: list[Session] = []
        self._current: int | None = None
        self._seen: set[tuple[datetime, int]] = set()
        self._allowed_navigation = {
            (format_name(source), format_name(target))
            for source, target in self._config.allowed_navigation
        }

    @property
    def config(self) -> ParserConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, text: str) -> list[Session]:
        """Parse a full log dump into sessions, numbered 1..N."""
        return self.parse_lines(text.splitlines())

    def parse_lines(self, lines: Iterable[str]) -> list[Session]:
        self._reset()
        total = 0
        parsed = 0
        for line in lines:
            total += 1
            if self.is_separator(line):
                self.finalize_current_session()
                continue
            entry = parse_line(line)
            if entry is None:
                continue
            parsed += 1
            self.process_entry(entry)
        self.finalize_current_session()

        logger.debug(
            "Parsed %d/%d lines into %d session(s)", parsed, total, len(self._sessions)
        )
        return self._sessions

    def is_separator(self, line: str) -> bool:
        return any(marker in line for marker in self._config.separator_markers)

    def process_entry(self, entry: LogEntry) -> None:
        """Fold one entry into the session state."""
        if not self._is_relevant(entry) or self._is_adaptor_noise(entry):
            return

        event_id = (entry.timestamp, hash(entry.message))
        if event_id in self._seen:
            return
        self._seen.add(event_id)

        if self.is_session_start(entry) and self._current is None:
            self._start_session(entry)
            return

        screen_view = self.is_screen_view(entry)
        user_action = self.is_user_action(entry)

        if self._current is None and (screen_view or user_action):
            self._start_session(LogEntry(
                timestamp=_shift(entry.timestamp, -self._config.inferred_start_offset),
                level=entry.level,
                category=entry.category,
                message=INFERRED_START_MESSAGE,
            ))

        if self._current is None:
            return
        idx = self._current

        if screen_view:
            screen_name = self.extract_screen_name(entry)
            if screen_name:
                self.add_screen_visit(idx, screen_name, entry.timestamp)

        if user_action and not screen_view:
            self.add_user_action(idx, entry)

        if self.is_session_end(entry):
            self._sessions[idx].end_time = entry.timestamp
            self.finalize_current_session()

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _is_relevant(self, entry: LogEntry) -> bool:
        category = entry.category.lower()
        if any(allowed.lower() in category for allowed in self._config.allowed_categories):
            return True
        if not any(main.lower() in category for main in self._config.main_categories):
            return False
        return (
            self.is_session_start(entry)
            or self.is_session_end(entry)
            or _contains_any(entry.message, self._config.main_relevance_keywords)
        )

    def _is_adaptor_noise(self, entry: LogEntry) -> bool:
        if self._config.adaptor_marker not in entry.message:
            return False
        return any(phrase in entry.message for phrase in self._config.adaptor_noise_phrases)

    def _event_type(self, entry: LogEntry) -> str | None:
        return extract_event_type(entry.message, self._config.send_event_marker)

    def is_session_start(self, entry: LogEntry) -> bool:
        return _contains_any(entry.message, self._config.session_start_keywords)

    def is_session_end(self, entry: LogEntry) -> bool:
        return _contains_any(entry.message, self._config.session_end_keywords)

    def is_screen_view(self, entry: LogEntry) -> bool:
        if self._event_type(entry) in self._config.screen_view_events:
            return True
        if self._config.adaptor_marker in entry.message:
            return False
        return _contains_any(entry.message, self._config.screen_view_keywords)

    def is_user_action(self, entry: LogEntry) -> bool:
        if self._config.adaptor_marker in entry.message:
            return False
        event_type = self._event_type(entry)
        if event_type is not None:
            return event_type not in self._config.screen_view_events
        return _contains_any(entry.message, self._config.action_keywords)

    def extract_screen_name(self, entry: LogEntry) -> str | None:
        params = entry.params
        if self._event_type(entry) in self._config.screen_view_events:
            if "secondary_view_name" in params:
                primary = params.get("name", "Screen")
                return format_name(f"{primary} > {params['secondary_view_name']}")
            if "name" in params:
                return format_name(params["name"])
            if "type" in params:
                return format_name(f"Paywall ({params['type']})")

        for param in self._config.screen_param_names:
            if param in params:
                return format_name(params[param])
        return None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self._sessions = []
        self._current = None
        self._seen = set()

    def _launch_count(self, entry: LogEntry) -> int:
        for key in self._config.launch_count_keys:
            if key in entry.params:
                try:
                    return int(entry.params[key])
                except ValueError:
                    break
        return len(self._sessions) + 1

    def _start_session(self, entry: LogEntry) -> None:
        self.finalize_current_session()

        session = Session(
            session_number=len(self._sessions) + 1,
            start_time=entry.timestamp,
            launch_count=self._launch_count(entry),
            metadata={
                key: entry.params[key]
                for key in self._config.metadata_keys
                if key in entry.params
            },
        )
        self._sessions.append(session)
        self._current = len(self._sessions) - 1
        logger.debug(
            "Session #%d opened at %s (%s)",
            session.session_number, session.start_time.isoformat(), entry.message,
        )

    def _clamped_exit(self, entry_time: datetime, exit_time: datetime) -> datetime:
        floor = _shift(entry_time, self._config.minimum_screen_duration)
        return exit_time if exit_time >= floor else floor

    def finalize_current_session(self) -> None:
        """Close the open session, giving it and its screens exit times."""
        if self._current is None:
            return
        session = self._sessions[self._current]
        self._current = None

        if session.end_time is None:
            if session.screens:
                last = session.screens[-1]
                session.end_time = last.exit_time or last.entry_time
            else:
                session.end_time = session.start_time

        screens = session.screens
        for i, screen in enumerate(screens):
            if screen.exit_time is not None:
                continue
            if i < len(screens) - 1:
                candidate = screens[i + 1].entry_time
            else:
                candidate = session.end_time
            screen.exit_time = self._clamped_exit(screen.entry_time, candidate)

        logger.debug(
            "Session #%d closed: %d screen(s), %.2fs",
            session.session_number, len(screens), session.duration,
        )

    # ------------------------------------------------------------------
    # Screens and actions
    # ------------------------------------------------------------------

    def add_screen_visit(self, session_index: int, screen_name: str, timestamp: datetime) -> None:
        """Move the session to a new screen unless it looks like re-emission."""
        session = self._sessions[session_index]
        name = format_name(screen_name)
        screens = session.screens

        if screens:
            last = screens[-1]
            since_last = (timestamp - last.entry_time).total_seconds()
            if last.screen_name == name and since_last < self._config.duplicate_screen_window:
                return

            earlier = [i for i, s in enumerate(screens) if s.screen_name == name]
            if earlier and (last.screen_name, name) not in self._allowed_navigation:
                since_seen = (timestamp - screens[earlier[-1]].entry_time).total_seconds()
                if since_seen < self._config.revisit_window:
                    return

            last.exit_time = self._clamped_exit(last.entry_time, timestamp)

        screens.append(ScreenVisit(screen_name=name, entry_time=timestamp))

    def add_user_action(self, session_index: int, entry: LogEntry) -> None:
        session = self._sessions[session_index]
        if not session.screens:
            session.screens.append(ScreenVisit(screen_name=FALLBACK_SCREEN, entry_time=entry.timestamp))

        if self._config.follow_action_screens:
            target = entry.params.get("view_name") or entry.params.get("screen")
            if target and format_name(target) != session.screens[-1].screen_name:
                self.add_screen_visit(session_index, target, entry.timestamp)

        screen = session.screens[-1]
        action_name = extract_action_name(entry, self._config)
        screen.actions.append(UserAction(
            timestamp=entry.timestamp,
            action_type=categorize_action(entry.message, self._config),
            details=format_action_details(action_name, entry, screen.screen_name),
            raw_event=action_name,
        ))

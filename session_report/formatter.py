"""Plain-text session report, plus a diagnostic variant for logs with no sessions."""

from itertools import groupby

from session_report.config import ParserConfig
from session_report.models import Session, UserAction
from session_report.naming import (
    format_clock,
    format_key,
    format_screen_duration,
    format_session_duration,
)
from session_report.reconstructor import SessionReconstructor
from session_report.stats import compute_stats

TITLE = "📊 SESSION ANALYTICS"
NO_SESSIONS = "No sessions found."
NO_SCREENS = "No screen activity."

HEADER_RULE = "═" * 26
SUMMARY_RULE = "─" * 10
SESSION_RULE = "─" * 20
JOURNEY_RULE = "─" * 15
SESSION_SEPARATOR = "═" * 30


def group_consecutive(actions: list[UserAction]) -> list[list[UserAction]]:
    """Split actions into runs sharing the same action_type, order preserved."""
    return [list(run) for _, run in groupby(actions, key=lambda a: a.action_type)]


def _format_actions(actions: list[UserAction]) -> list[str]:
    lines = []
    for run in group_consecutive(actions):
        if len(run) == 1:
            lines.append(f"     {run[0].action_type} {run[0].details}")
            continue

        by_detail: dict[str, list[UserAction]] = {}
        for action in run:
            by_detail.setdefault(action.details, []).append(action)
        for detail in sorted(by_detail):
            same = by_detail[detail]
            suffix = f" ×{len(same)}" if len(same) > 1 else ""
            lines.append(f"     {same[0].action_type} {detail}{suffix}")
    return lines


class ReportGenerator:
    """Renders sessions as an emoji-annotated text report. No hidden state."""

    def generate(self, sessions: list[Session]) -> str:
        report = f"{TITLE}\n{HEADER_RULE}\n"

        if not sessions:
            return report + f"{NO_SESSIONS}\n"

        report += self._summary(sessions) + "\n\n"

        for index, session in enumerate(sessions):
            is_last = index == len(sessions) - 1
            report += self._session_block(session, is_last)
            if not is_last:
                report += "\n"
        return report

    def _summary(self, sessions: list[Session]) -> str:
        stats = compute_stats(sessions)
        return "\n".join([
            "📈 SUMMARY",
            SUMMARY_RULE,
            f"Sessions: {stats.session_count}",
            f"Avg Duration: {format_session_duration(stats.avg_duration)}",
            f"Avg Screens: {stats.avg_screens:.1f}",
        ])

    def _session_block(self, session: Session, is_last: bool) -> str:
        lines = [
            f"🎯 SESSION #{session.session_number}",
            SESSION_RULE,
            f"Started: {format_clock(session.start_time)}",
            f"Duration: {format_session_duration(session.duration)}",
        ]
        if session.launch_count > 0:
            lines.append(f"Launch: #{session.launch_count}")
        for key in sorted(session.metadata):
            lines.append(f"{format_key(key)}: {session.metadata[key]}")
        block = "\n".join(lines) + "\n\n"

        if not session.screens:
            block += f"{NO_SCREENS}\n"
            if not is_last:
                block += f"\n{SESSION_SEPARATOR}\n"
            return block

        block += f"📱 USER JOURNEY\n{JOURNEY_RULE}\n\n"
        screen_blocks = []
        for number, screen in enumerate(session.screens, start=1):
            screen_lines = [
                f"{number}. {screen.screen_name}",
                f"   ⏱ {format_screen_duration(screen.duration)}",
            ]
            if screen.actions:
                screen_lines.append(f"   📍 Actions ({len(screen.actions)}):")
                screen_lines.extend(_format_actions(screen.actions))
            screen_blocks.append("\n".join(screen_lines) + "\n")
        block += "\n".join(screen_blocks)

        if not is_last:
            block += f"\n\n{SESSION_SEPARATOR}\n"
        return block


def generate_diagnostic_report(text: str, config: ParserConfig | None = None) -> str:
    """Explain an empty result: line counts, a sample, and category-marker hits."""
    config = config or ParserConfig()
    lines = text.splitlines()
    non_empty = [line for line in lines if line.strip()]
    markers = [c.lower() for c in config.allowed_categories]
    marked = [line for line in lines if any(m in line.lower() for m in markers)]

    out = [
        f"{TITLE} - DEBUG MODE",
        "═" * 34,
        "",
        f"❌ {NO_SESSIONS}",
        "",
        "📋 DEBUG INFORMATION:",
        "─" * 20,
        "",
        f"Total lines: {len(lines)}",
        f"Non-empty lines: {len(non_empty)}",
        "",
        f"📄 FIRST {config.diagnostic_sample_size} NON-EMPTY LINES:",
        "─" * 29,
    ]
    for number, line in enumerate(non_empty[:config.diagnostic_sample_size], start=1):
        out.append(f"{number}. {line}")

    out.append("")
    out.append(f"🔍 {'/'.join(markers).upper()} LINES FOUND: {len(marked)}")
    out.append("─" * 37)
    for number, line in enumerate(marked[:config.diagnostic_marker_sample_size], start=1):
        out.append(f"{number}. {line}")

    if not marked:
        out.append("")
        out.append(f"⚠️ No lines containing {', '.join(repr(m) for m in markers)} found.")
        out.append("The parser only keeps events from these categories.")
        out.append("Check if your logs use a different category name.")

    return "\n".join(out) + "\n"


def build_report(text: str, config: ParserConfig | None = None, diagnostics: bool = True) -> str:
    """Parse log text and render the report (diagnostic variant if nothing was found)."""
    sessions = SessionReconstructor(config).parse(text)
    if not sessions and diagnostics:
        return generate_diagnostic_report(text, config)
    return ReportGenerator().generate(sessions)

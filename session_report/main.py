"""session-report — rebuild analytics sessions from app logs and print a report."""

import logging
import sys
from argparse import ArgumentParser

from session_report.config import load_config
from session_report.formatter import build_report
from session_report.reader import expand_paths, read_multiple

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="session-report",
        description="Reconstruct user sessions from analytics log lines.",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="Log file path(s) or glob pattern(s)",
    )
    parser.add_argument(
        "--config",
        help="YAML file overriding keyword lists and timing thresholds",
    )
    parser.add_argument(
        "--output", "-o",
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "--no-diagnostics",
        action="store_true",
        help="Print the plain report even when no sessions are found",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log parser decisions to stderr",
    )
    return parser


def run(args) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [session-report] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        paths = expand_paths(args.files)
        # Files are read in order; a file boundary doesn't end a session
        text = "\n".join(read_multiple(paths))
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = load_config(args.config)
    report = build_report(text, config, diagnostics=not args.no_diagnostics)

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(report)
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        logger.info("Report written to %s", args.output)
    else:
        print(report, end="")
    return 0


def main():
    parser = build_parser()
    args = parser.parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)

"""Entry point for python -m break_reminder."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .config import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_TICK_INTERVAL,
    DEFAULT_WORK_MINUTES,
    ConfigError,
    Settings,
)
from .controller import START_BREAK_ACTION, TimerController
from .logging_config import setup_logging
from .notifications import DesktopBackend, NotificationCenter
from .ui import run_ui


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="break-reminder",
        description="Terminal break reminder: work countdown, break prompt, break countdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Controls:
  s        Start work
  b        Start break (after the work countdown, or early)
  Space    Pause/Resume
  x        Stop cycle
  q        Quit

Examples:
  break-reminder                  # 45 minutes of work, 2 minute breaks
  break-reminder --work 25 --break 5
  break-reminder --no-notify      # No bell or desktop popups
""",
    )

    parser.add_argument(
        "--work",
        type=int,
        default=DEFAULT_WORK_MINUTES,
        metavar="MINS",
        help=f"Work duration in minutes (default: {DEFAULT_WORK_MINUTES})",
    )
    parser.add_argument(
        "--break",
        type=int,
        default=DEFAULT_BREAK_MINUTES,
        dest="break_",
        metavar="MINS",
        help=f"Break duration in minutes (default: {DEFAULT_BREAK_MINUTES})",
    )
    parser.add_argument(
        "--tick",
        type=float,
        default=DEFAULT_TICK_INTERVAL,
        metavar="SECONDS",
        help=f"Wall-clock seconds per countdown second (default: {DEFAULT_TICK_INTERVAL})",
    )

    # Notifications
    parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Disable notifications (bell, desktop and in-app)",
    )
    parser.add_argument(
        "--no-bell",
        action="store_true",
        help="Don't ring the terminal bell with notifications",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat commands that don't apply to the current phase as errors",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Also write log records to this file",
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> Tuple[argparse.Namespace, Settings]:
    """Parse command line arguments into a namespace and validated settings."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = Settings.from_args(args)
    except ConfigError as exc:
        parser.error(str(exc))
    return args, settings


def build_controller(settings: Settings) -> Tuple[TimerController, NotificationCenter]:
    """Wire the controller and its notification collaborator."""
    notifications = NotificationCenter(enabled=settings.notify)
    notifications.add_backend(
        DesktopBackend(bell=settings.bell, on_action=notifications.respond_to_action)
    )
    controller = TimerController(
        work_seconds=settings.work_seconds,
        break_seconds=settings.break_seconds,
        tick_interval=settings.tick_interval,
        notifier=notifications,
        strict=settings.strict,
    )
    notifications.bind_action(START_BREAK_ACTION, controller.accept_break)
    return controller, notifications


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args, settings = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    controller, notifications = build_controller(settings)

    try:
        run_ui(controller, notifications)
    except KeyboardInterrupt:
        pass
    finally:
        controller.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())

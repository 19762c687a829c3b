"""Runtime settings for the break reminder."""

import argparse
from dataclasses import dataclass

DEFAULT_WORK_MINUTES = 45
DEFAULT_BREAK_MINUTES = 2
DEFAULT_TICK_INTERVAL = 1.0


class ConfigError(ValueError):
    """Invalid setting value."""


@dataclass
class Settings:
    """Durations and switches chosen on the command line."""
    work_minutes: int = DEFAULT_WORK_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    tick_interval: float = DEFAULT_TICK_INTERVAL
    notify: bool = True
    bell: bool = True
    strict: bool = False

    @property
    def work_seconds(self) -> int:
        return self.work_minutes * 60

    @property
    def break_seconds(self) -> int:
        return self.break_minutes * 60

    def validate(self) -> "Settings":
        if self.work_minutes <= 0:
            raise ConfigError(f"work duration must be positive, got {self.work_minutes}")
        if self.break_minutes <= 0:
            raise ConfigError(f"break duration must be positive, got {self.break_minutes}")
        if self.tick_interval <= 0:
            raise ConfigError(f"tick interval must be positive, got {self.tick_interval}")
        return self

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Settings":
        return cls(
            work_minutes=args.work,
            break_minutes=args.break_,
            tick_interval=args.tick,
            notify=not args.no_notify,
            bell=not args.no_bell,
            strict=args.strict,
        ).validate()

"""Break reminder: a work/break countdown with an intrusive notification gate."""

from .controller import IllegalTransition, Phase, Snapshot, TimerController
from .notifications import NotificationCenter

__version__ = "0.1.0"

__all__ = [
    "IllegalTransition",
    "NotificationCenter",
    "Phase",
    "Snapshot",
    "TimerController",
]

"""Break timer state machine.

The controller alternates between a work countdown and a break countdown
with a notification gate in between. It knows nothing about rendering or
platform notifications: it calls a notifier and a scheduler that the
composition root hands it.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)

NOTIFICATION_ID = 0
START_BREAK_ACTION = "start_break_action"
WORK_DONE_PAYLOAD = "work_done"
BREAK_DONE_PAYLOAD = "break_done"

WORK_DONE_TITLE = "Time to Stand Up!"
BREAK_DONE_TITLE = "Break Over"


class Phase(Enum):
    """Controller phases."""
    IDLE = auto()
    WORKING = auto()
    AWAITING_BREAK = auto()
    BREAKING = auto()


class IllegalTransition(Exception):
    """Raised for a command the current phase does not accept (strict mode only)."""

    def __init__(self, command: str, phase: Phase):
        super().__init__(f"{command}() is not allowed in phase {phase.name}")
        self.command = command
        self.phase = phase


class Notifier(Protocol):
    def request_notification(
        self,
        notification_id: int,
        title: str,
        body: str,
        action_id: Optional[str] = None,
        payload: Optional[str] = None,
    ) -> None: ...

    def cancel_notification(self, notification_id: int) -> None: ...


class TickHandle(Protocol):
    def stop(self) -> None: ...


# Same shape as textual's App.set_interval(interval, callback).
Scheduler = Callable[[float, Callable[[], None]], TickHandle]


def format_seconds(seconds: int) -> str:
    """Format seconds as MM:SS."""
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the controller published to observers."""
    phase: Phase
    remaining_seconds: int
    running: bool
    total_seconds: int = 0

    @property
    def remaining_formatted(self) -> str:
        return format_seconds(self.remaining_seconds)

    @property
    def progress(self) -> float:
        """Progress through the current countdown (0.0 to 1.0)."""
        if self.phase == Phase.AWAITING_BREAK:
            return 1.0
        if self.total_seconds <= 0:
            return 0.0
        return 1.0 - (self.remaining_seconds / self.total_seconds)


Listener = Callable[[Snapshot], None]


class TimerController:
    """Work/break timer with a notification gate.

    Phases cycle WORKING -> AWAITING_BREAK -> BREAKING -> WORKING until
    stop() returns the controller to IDLE. Commands that the current phase
    does not accept are ignored and publish nothing, unless the controller
    was built with strict=True.
    """

    def __init__(
        self,
        work_seconds: int = 45 * 60,
        break_seconds: int = 2 * 60,
        tick_interval: float = 1.0,
        notifier: Optional[Notifier] = None,
        scheduler: Optional[Scheduler] = None,
        strict: bool = False,
    ):
        """Initialize the controller.

        Args:
            work_seconds: Length of the work countdown.
            break_seconds: Length of the break countdown.
            tick_interval: Wall-clock seconds between ticks. Every tick
                removes one second of remaining time.
            notifier: Notification collaborator. None disables notifications.
            scheduler: Callable(interval, callback) returning a handle with
                stop(), such as textual's App.set_interval. May be attached
                later with set_scheduler().
            strict: Raise IllegalTransition instead of ignoring commands.
        """
        if work_seconds <= 0 or break_seconds <= 0:
            raise ValueError("work and break durations must be positive")
        if tick_interval <= 0:
            raise ValueError("tick interval must be positive")

        self.work_seconds = int(work_seconds)
        self.break_seconds = int(break_seconds)
        self.tick_interval = tick_interval
        self.notifier = notifier
        self.strict = strict
        self._scheduler = scheduler

        self._phase = Phase.IDLE
        self._remaining = 0
        self._running = False
        self._tick_handle: Optional[TickHandle] = None
        self._listeners: List[Listener] = []
        self._disposed = False

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    @property
    def remaining_formatted(self) -> str:
        return format_seconds(self._remaining)

    @property
    def total_seconds(self) -> int:
        """Full length of the countdown for the current phase."""
        if self._phase == Phase.WORKING:
            return self.work_seconds
        elif self._phase == Phase.BREAKING:
            return self.break_seconds
        return 0

    @property
    def work_minutes(self) -> int:
        return self.work_seconds // 60

    @property
    def break_minutes(self) -> int:
        return self.break_seconds // 60

    @property
    def phase_title(self) -> str:
        """Human-readable heading for the current phase."""
        if self._phase == Phase.IDLE:
            return "Ready to Start Work"
        elif self._phase == Phase.WORKING:
            return f"Focus Time! ({self.work_minutes} mins)"
        elif self._phase == Phase.AWAITING_BREAK:
            return "BREAK TIME!"
        return f"{self.break_minutes}-Minute Walk"

    @property
    def scheduler(self) -> Optional[Scheduler]:
        return self._scheduler

    def set_scheduler(self, scheduler: Scheduler) -> None:
        """Attach the tick source, e.g. textual's App.set_interval.

        A running countdown moves over to the new scheduler.
        """
        self._scheduler = scheduler
        if self._running:
            self._start_ticking()

    def snapshot(self) -> Snapshot:
        return Snapshot(
            phase=self._phase,
            remaining_seconds=self._remaining,
            running=self._running,
            total_seconds=self.total_seconds,
        )

    # ----- Observers -----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for state changes.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("State listener %r failed", listener)

    # ----- Commands -----

    def start_work(self) -> None:
        """Begin a work countdown from IDLE or BREAKING."""
        if self._disposed or self._phase not in (Phase.IDLE, Phase.BREAKING):
            self._reject("start_work")
            return
        self._enter_working()
        self._publish()

    def accept_break(self) -> None:
        """Begin the break countdown.

        WORKING is accepted as well as AWAITING_BREAK so a notification tap
        that arrives before the completion tick is observed still counts.
        """
        if self._disposed or self._phase not in (Phase.AWAITING_BREAK, Phase.WORKING):
            self._reject("accept_break")
            return
        self._cancel_notification()
        self._phase = Phase.BREAKING
        self._remaining = self.break_seconds
        self._start_ticking()
        logger.info("Break started (%d seconds)", self.break_seconds)
        self._publish()

    def pause_resume(self) -> None:
        """Toggle the countdown of the current work or break phase."""
        if self._disposed or self._phase not in (Phase.WORKING, Phase.BREAKING):
            self._reject("pause_resume")
            return
        if self._running:
            self._stop_ticking()
            logger.info("Paused %s at %s", self._phase.name, self.remaining_formatted)
        else:
            self._start_ticking()
            logger.info("Resumed %s at %s", self._phase.name, self.remaining_formatted)
        self._publish()

    def stop(self) -> None:
        """Return to IDLE from any phase."""
        if self._disposed:
            return
        self._stop_ticking()
        self._cancel_notification()
        if self._phase != Phase.IDLE:
            logger.info("Cycle stopped")
        self._phase = Phase.IDLE
        self._remaining = 0
        self._publish()

    def dispose(self) -> None:
        """Release the tick source and drop all listeners."""
        self._stop_ticking()
        self._listeners.clear()
        self._disposed = True

    # ----- Countdown -----

    def tick(self) -> None:
        """Advance the countdown by one second.

        Called by the tick source. Does nothing while paused. The tick that
        brings the countdown to zero publishes the zero first and then
        completes the phase.
        """
        if not self._running or self._disposed:
            return

        if self._remaining > 0:
            self._remaining -= 1
            self._publish()

        if self._remaining == 0:
            self._stop_ticking()
            self._handle_completion()

    def _handle_completion(self) -> None:
        if self._phase == Phase.WORKING:
            self._phase = Phase.AWAITING_BREAK
            logger.info("Work finished, waiting for break")
            self._notify(
                WORK_DONE_TITLE,
                f"Time for your {self.break_minutes}-minute break! "
                "Click Start Break to begin the walk timer.",
                action_id=START_BREAK_ACTION,
                payload=WORK_DONE_PAYLOAD,
            )
            self._publish()
        elif self._phase == Phase.BREAKING:
            logger.info("Break finished, resuming work")
            self._notify(
                BREAK_DONE_TITLE,
                f"Break Over! Resuming work for {self.work_minutes} minutes.",
                payload=BREAK_DONE_PAYLOAD,
            )
            self._enter_working()
            self._publish()

    def _enter_working(self) -> None:
        self._phase = Phase.WORKING
        self._remaining = self.work_seconds
        self._start_ticking()
        logger.info("Work started (%d seconds)", self.work_seconds)

    def _start_ticking(self) -> None:
        if self._scheduler is None:
            raise RuntimeError("no tick scheduler attached; call set_scheduler() first")
        self._stop_ticking()
        self._tick_handle = self._scheduler(self.tick_interval, self.tick)
        self._running = True

    def _stop_ticking(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.stop()
            self._tick_handle = None
        self._running = False

    def _reject(self, command: str) -> None:
        if self._disposed:
            return
        if self.strict:
            raise IllegalTransition(command, self._phase)
        logger.debug("Ignoring %s() in phase %s", command, self._phase.name)

    # ----- Notifications -----

    def _notify(
        self,
        title: str,
        body: str,
        action_id: Optional[str] = None,
        payload: Optional[str] = None,
    ) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.cancel_notification(NOTIFICATION_ID)
            self.notifier.request_notification(
                NOTIFICATION_ID, title, body, action_id=action_id, payload=payload
            )
        except Exception:
            logger.warning("Notification delivery failed: %s", title, exc_info=True)

    def _cancel_notification(self) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.cancel_notification(NOTIFICATION_ID)
        except Exception:
            logger.warning("Could not cancel notification %d", NOTIFICATION_ID, exc_info=True)

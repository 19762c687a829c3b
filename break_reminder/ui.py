"""Textual-based UI for the break reminder."""

from typing import Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.widgets import Digits, Footer, ProgressBar, Static

from .controller import START_BREAK_ACTION, IllegalTransition, Phase, Snapshot, TimerController
from .notifications import NotificationCenter, ToastBackend

PHASE_CLASSES = {
    Phase.IDLE: "idle",
    Phase.WORKING: "working",
    Phase.AWAITING_BREAK: "awaiting-break",
    Phase.BREAKING: "breaking",
}

MODULE_STATUS = "Module Status: TimerController is Active."


class PhaseTitle(Static):
    """Heading for the current phase."""

    def __init__(self, controller: TimerController, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller = controller

    def on_mount(self) -> None:
        self.update_display()

    def update_display(self) -> None:
        self.update(self.controller.phase_title)


class StatusBadge(Static):
    """Running/paused indicator with the keys that apply right now."""

    def __init__(self, controller: TimerController, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller = controller

    def on_mount(self) -> None:
        self.update_display()

    def update_display(self) -> None:
        phase = self.controller.phase
        if phase == Phase.IDLE:
            self.update("Press s to Start Work")
        elif phase == Phase.AWAITING_BREAK:
            self.update(f"Press b to Start {self.controller.break_minutes} Min Break")
        elif self.controller.running:
            self.update("▶ RUNNING")
        else:
            self.update("⏸ PAUSED")
        self.set_class(self.controller.running, "running")
        self.set_class(not self.controller.running, "paused")


class BreakReminderApp(App):
    """Break reminder application."""

    CSS_PATH = "break_reminder.tcss"
    TITLE = "Modular Break Reminder"

    BINDINGS = [
        Binding("s", "start_work", "Start Work"),
        Binding("b", "start_break", "Start Break"),
        Binding("space", "pause_resume", "Pause/Resume"),
        Binding("x", "stop", "Stop Cycle"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        controller: TimerController,
        notifications: Optional[NotificationCenter] = None,
    ) -> None:
        super().__init__()
        self.controller = controller
        self.notifications = notifications
        self._unsubscribe: Optional[Callable[[], None]] = None

    def compose(self) -> ComposeResult:
        with Container(id="main"):
            with Vertical(id="timer-container"):
                yield PhaseTitle(self.controller, id="phase-title")
                yield Digits(self.controller.remaining_formatted, id="clock")
                yield StatusBadge(self.controller, id="status-badge")
                yield ProgressBar(id="progress", total=100, show_eta=False, show_percentage=False)
                yield Static(MODULE_STATUS, id="module-status")
        yield Footer()

    def on_mount(self) -> None:
        if self.controller.scheduler is None:
            self.controller.set_scheduler(self.set_interval)
        if self.notifications is not None:
            self.notifications.add_backend(
                ToastBackend(
                    self.notify,
                    self.clear_notifications,
                    action_hints={START_BREAK_ACTION: "Press b to start your break."},
                )
            )
        self._unsubscribe = self.controller.subscribe(self._on_state_change)
        self._refresh_display(self.controller.snapshot())

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.controller.dispose()

    def _on_state_change(self, snapshot: Snapshot) -> None:
        self._refresh_display(snapshot)

    def _refresh_display(self, snapshot: Snapshot) -> None:
        """Update all display elements."""
        self.query_one("#clock", Digits).update(snapshot.remaining_formatted)
        self.query_one("#phase-title", PhaseTitle).update_display()
        self.query_one("#status-badge", StatusBadge).update_display()
        self.query_one("#progress", ProgressBar).update(progress=snapshot.progress * 100)

        container = self.query_one("#timer-container")
        container.remove_class(*PHASE_CLASSES.values())
        container.add_class(PHASE_CLASSES[snapshot.phase])

    def _run_command(self, command: Callable[[], None]) -> None:
        try:
            command()
        except IllegalTransition as exc:
            self.notify(str(exc), severity="error")

    def action_start_work(self) -> None:
        self._run_command(self.controller.start_work)

    def action_start_break(self) -> None:
        self._run_command(self.controller.accept_break)

    def action_pause_resume(self) -> None:
        self._run_command(self.controller.pause_resume)

    def action_stop(self) -> None:
        self.controller.stop()


def run_ui(controller: TimerController, notifications: Optional[NotificationCenter] = None) -> None:
    """Run the break reminder UI.

    Args:
        controller: The timer controller.
        notifications: Notification center that should also show in-app toasts.
    """
    app = BreakReminderApp(controller, notifications)
    app.run()

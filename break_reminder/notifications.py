"""Notification delivery and action routing for the break timer."""

import asyncio
import logging
import platform
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from .controller import START_BREAK_ACTION, WORK_DONE_PAYLOAD, IllegalTransition

logger = logging.getLogger(__name__)

# App name shown on desktop popups
APP_NAME = "Break Reminder"
NOTIFIER_TIMEOUT = 5.0

ACTION_LABELS = {
    START_BREAK_ACTION: "Start Break",
}


@dataclass(frozen=True)
class Notification:
    """An outstanding user-visible alert."""
    notification_id: int
    title: str
    body: str
    action_id: Optional[str] = None
    payload: Optional[str] = None


class Backend(Protocol):
    def show(self, notification: Notification) -> None: ...

    def dismiss(self, notification_id: int) -> None: ...


def _send_bell() -> None:
    """Send terminal bell."""
    sys.stdout.write("\a")
    sys.stdout.flush()


def macos_command(notification: Notification) -> List[str]:
    """osascript invocation for a macOS notification (no actions)."""
    script = f'display notification "{notification.body}" with title "{notification.title}"'
    return ["osascript", "-e", script]


def linux_command(notification: Notification) -> List[str]:
    """notify-send invocation; actionable notifications wait for the click."""
    argv = ["notify-send", "--urgency=critical", f"--app-name={APP_NAME}"]
    if notification.action_id:
        label = ACTION_LABELS.get(notification.action_id, notification.action_id)
        argv += [f"--action={notification.action_id}={label}", "--wait"]
    return argv + [notification.title, notification.body]


async def run_notifier(argv: Sequence[str], timeout: Optional[float] = NOTIFIER_TIMEOUT) -> Optional[str]:
    """Run a notifier command without blocking the event loop.

    Returns:
        The command's stripped stdout, or None if it could not run.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, OSError):
        return None

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        return None
    except asyncio.CancelledError:
        # popup withdrawn: don't leave notify-send waiting
        proc.kill()
        raise

    if proc.returncode != 0:
        return None
    return stdout.decode(errors="replace").strip()


class DesktopBackend:
    """Terminal bell plus a native popup where the platform has one.

    Popups are delivered by a task on the running event loop. On Linux an
    actionable notification carries a button; the clicked action id is
    passed to `on_action`. dismiss() stops waiting for that click.
    """

    def __init__(self, bell: bool = True, on_action: Optional[Callable[[str], None]] = None):
        self.bell = bell
        self.on_action = on_action
        self._pending: Dict[int, asyncio.Task] = {}

    def show(self, notification: Notification) -> None:
        if self.bell:
            _send_bell()

        system = platform.system()
        if system == "Darwin":
            argv = macos_command(notification)
        elif system == "Linux":
            argv = linux_command(notification)
        else:
            # Windows and other platforms: bell only
            return

        task = asyncio.get_running_loop().create_task(self._deliver(notification, argv, system))
        self._pending[notification.notification_id] = task

    def dismiss(self, notification_id: int) -> None:
        task = self._pending.pop(notification_id, None)
        if task is not None and not task.done():
            task.cancel()

    async def _deliver(self, notification: Notification, argv: List[str], system: str) -> None:
        waits = "--wait" in argv
        output = await run_notifier(argv, timeout=None if waits else NOTIFIER_TIMEOUT)
        if self._pending.get(notification.notification_id) is asyncio.current_task():
            del self._pending[notification.notification_id]

        if output is None:
            logger.warning("Native notification unavailable on %s", system)
            return
        if waits and output and self.on_action is not None:
            self.on_action(output.splitlines()[-1])


class ToastBackend:
    """In-app toast through a callable such as textual's App.notify."""

    def __init__(
        self,
        post: Callable[..., None],
        clear: Optional[Callable[[], None]] = None,
        timeout: float = 30.0,
        action_hints: Optional[Dict[str, str]] = None,
    ):
        self.post = post
        self.clear = clear
        self.timeout = timeout
        self.action_hints = action_hints or {}

    def show(self, notification: Notification) -> None:
        severity = "warning" if notification.action_id else "information"
        message = notification.body
        hint = self.action_hints.get(notification.action_id) if notification.action_id else None
        if hint:
            message = f"{message}\n{hint}"
        self.post(
            message,
            title=notification.title,
            severity=severity,
            timeout=self.timeout,
        )

    def dismiss(self, notification_id: int) -> None:
        if self.clear is not None:
            self.clear()


class NotificationCenter:
    """Notification collaborator for TimerController.

    Holds at most one outstanding notification per id, fans it out to the
    delivery backends and routes user responses to callbacks bound with
    bind_action().
    """

    def __init__(self, backends: Optional[List[Backend]] = None, enabled: bool = True):
        self.backends: List[Backend] = list(backends or [])
        self.enabled = enabled
        self._outstanding: Dict[int, Notification] = {}
        self._actions: Dict[str, Callable[[], None]] = {}

    def add_backend(self, backend: Backend) -> None:
        self.backends.append(backend)

    def bind_action(self, action_id: str, callback: Callable[[], None]) -> None:
        """Route a notification action to a callback."""
        self._actions[action_id] = callback

    def outstanding(self, notification_id: int) -> Optional[Notification]:
        return self._outstanding.get(notification_id)

    def request_notification(
        self,
        notification_id: int,
        title: str,
        body: str,
        action_id: Optional[str] = None,
        payload: Optional[str] = None,
    ) -> None:
        if notification_id in self._outstanding:
            self.cancel_notification(notification_id)

        notification = Notification(notification_id, title, body, action_id, payload)
        self._outstanding[notification_id] = notification
        logger.info("Notification %d: %s", notification_id, body)

        if not self.enabled:
            return
        for backend in self.backends:
            try:
                backend.show(notification)
            except Exception:
                logger.warning("Backend %r could not show notification", backend, exc_info=True)

    def cancel_notification(self, notification_id: int) -> None:
        if self._outstanding.pop(notification_id, None) is None:
            return
        if not self.enabled:
            return
        for backend in self.backends:
            try:
                backend.dismiss(notification_id)
            except Exception:
                logger.warning("Backend %r could not dismiss notification", backend, exc_info=True)

    def handle_response(self, payload: Optional[str] = None, action_id: Optional[str] = None) -> bool:
        """Handle a user tap on a notification or one of its actions.

        Returns:
            True if the response was routed to a bound action.
        """
        if payload == WORK_DONE_PAYLOAD and action_id is None:
            action_id = START_BREAK_ACTION

        callback = self._actions.get(action_id) if action_id else None
        if callback is None:
            logger.debug("Notification response ignored (payload=%s, action=%s)", payload, action_id)
            return False

        logger.info("Notification action %s", action_id)
        try:
            callback()
        except IllegalTransition as exc:
            logger.warning("Notification action %s rejected: %s", action_id, exc)
            return False
        return True

    def respond_to_action(self, action_id: str) -> bool:
        """Entry point for backends reporting a clicked action."""
        return self.handle_response(action_id=action_id)

"""Shared fakes for driving the controller without an event loop."""

import pytest

from break_reminder.controller import TimerController


class FakeTicker:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True


class ManualScheduler:
    """Scheduler whose ticks fire only when the test says so."""

    def __init__(self):
        self.tickers = []

    def __call__(self, interval, callback):
        ticker = FakeTicker(interval, callback)
        self.tickers.append(ticker)
        return ticker

    @property
    def active(self):
        return [t for t in self.tickers if not t.stopped]

    def advance(self, ticks=1):
        for _ in range(ticks):
            for ticker in self.active:
                if not ticker.stopped:
                    ticker.callback()


class RecordingNotifier:
    def __init__(self):
        self.requests = []
        self.cancels = []

    def request_notification(self, notification_id, title, body, action_id=None, payload=None):
        self.requests.append(
            {
                "id": notification_id,
                "title": title,
                "body": body,
                "action_id": action_id,
                "payload": payload,
            }
        )

    def cancel_notification(self, notification_id):
        self.cancels.append(notification_id)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def controller(scheduler, notifier):
    """5 second work, 3 second break."""
    return TimerController(
        work_seconds=5,
        break_seconds=3,
        notifier=notifier,
        scheduler=scheduler,
    )


@pytest.fixture
def events(controller):
    received = []
    controller.subscribe(received.append)
    return received


@pytest.fixture
def other_scheduler():
    return ManualScheduler()

"""Tests for the command line, settings and logging setup."""

import logging

import pytest
from textual.logging import TextualHandler

from break_reminder.__main__ import build_controller, parse_args
from break_reminder.config import ConfigError, Settings
from break_reminder.controller import START_BREAK_ACTION, Phase
from break_reminder.logging_config import LOGGER_NAME, setup_logging
from break_reminder.notifications import DesktopBackend


@pytest.fixture
def package_logger():
    """Restore the package logger after setup_logging() changes it."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self):
        args, settings = parse_args([])
        assert settings.work_minutes == 45
        assert settings.break_minutes == 2
        assert settings.tick_interval == 1.0
        assert settings.notify is True
        assert settings.bell is True
        assert settings.strict is False
        assert args.log_level == "INFO"
        assert args.log_file is None

    def test_custom_values(self):
        _, settings = parse_args(
            ["--work", "25", "--break", "5", "--tick", "0.5", "--no-notify", "--no-bell", "--strict"]
        )
        assert settings.work_seconds == 25 * 60
        assert settings.break_seconds == 5 * 60
        assert settings.tick_interval == 0.5
        assert settings.notify is False
        assert settings.bell is False
        assert settings.strict is True

    @pytest.mark.parametrize("argv", [["--work", "0"], ["--break", "-2"], ["--tick", "0"]])
    def test_invalid_values_exit(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(argv)
        assert excinfo.value.code == 2
        assert "must be positive" in capsys.readouterr().err


class TestSettings:
    """Test the Settings dataclass."""

    def test_validate_returns_self(self):
        settings = Settings()
        assert settings.validate() is settings

    def test_validate_rejects(self):
        with pytest.raises(ConfigError):
            Settings(work_minutes=-1).validate()

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestBuildController:
    """Test the composition root."""

    def test_controller_uses_settings(self):
        controller, notifications = build_controller(Settings(work_minutes=30, break_minutes=3, strict=True))
        assert controller.work_seconds == 30 * 60
        assert controller.break_seconds == 3 * 60
        assert controller.strict is True
        assert controller.notifier is notifications
        assert controller.phase == Phase.IDLE

    def test_notifications_configured(self):
        _, notifications = build_controller(Settings(notify=False, bell=False))
        assert notifications.enabled is False
        assert isinstance(notifications.backends[0], DesktopBackend)
        assert notifications.backends[0].bell is False
        assert notifications.backends[0].on_action == notifications.respond_to_action

    def test_start_break_action_bound(self):
        """A tap on the prompt reaches the controller."""
        controller, notifications = build_controller(Settings())
        assert notifications.handle_response(action_id=START_BREAK_ACTION) is True
        # no cycle running, so the command is ignored
        assert controller.phase == Phase.IDLE


class TestSetupLogging:
    """Test logging configuration."""

    def test_textual_handler(self, package_logger):
        logger = setup_logging("debug")
        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, TextualHandler) for h in logger.handlers)

    def test_log_file(self, package_logger, tmp_path):
        log_file = tmp_path / "break.log"
        logger = setup_logging(logging.INFO, log_file)
        logging.getLogger("break_reminder.controller").info("Work started")
        for handler in logger.handlers:
            handler.flush()
        assert "Work started" in log_file.read_text(encoding="utf-8")

    def test_no_duplicate_handlers(self, package_logger):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

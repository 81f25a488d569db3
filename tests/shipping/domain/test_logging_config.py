import logging

import pytest
import structlog
from shipping.utils.logging import configure_logging, get_log_level


@pytest.fixture
def restore_logging():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()


class TestLogLevel:
    @pytest.mark.parametrize(
        "env,expected",
        [("production", "INFO"), ("development", "DEBUG"), ("test", "WARNING"), ("unknown", "INFO")],
    )
    def test_level_follows_environment(self, monkeypatch, env, expected):
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", env)
        assert get_log_level() == expected

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_log_level() == "ERROR"


class TestConfigureLogging:
    def test_installs_single_stdout_handler(self, monkeypatch, restore_logging):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        configure_logging()
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert root_logger.level == logging.WARNING

    def test_json_renderer_in_production(self, monkeypatch, restore_logging):
        monkeypatch.setenv("ENVIRONMENT", "production")
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

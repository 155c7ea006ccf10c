"""Tests for settings and logging configuration."""

import logging
from datetime import datetime, timezone

import pytest
import yaml

from mcsi.config import logging_config
from mcsi.config.settings import Config
from mcsi.constants import TRACE_LEVEL


class TestConfig:

    def test_defaults_without_file(self, tmp_path) -> None:
        settings = Config(tmp_path / "config.yaml")

        assert settings.get("downloads.max_retries") == 3
        assert settings.get("java.executable") is None
        assert settings.get("missing.key", "fallback") == "fallback"
        assert not settings.config_file.exists()

    def test_user_values_merge_with_defaults(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"downloads": {"max_retries": 5}, "java": {"executable": "/opt/java"}}))

        settings = Config(path)

        assert settings.get("downloads.max_retries") == 5
        assert settings.get("downloads.chunk_size") == 8192
        assert settings.get("java.executable") == "/opt/java"

    def test_invalid_file_falls_back_to_defaults(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        assert Config(path).get("logging.level") == "info"

    def test_environment_override(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "elsewhere.yaml"
        monkeypatch.setenv("MCSI_CONFIG", str(path))

        assert Config().config_file == path

    def test_set_and_save(self, tmp_path) -> None:
        settings = Config(tmp_path / "nested" / "config.yaml")
        settings.set("ui.progress_bar", False)

        assert settings.save_config()
        assert Config(settings.config_file).get("ui.progress_bar") is False

    def test_flatten(self, tmp_path) -> None:
        flat = dict(Config(tmp_path / "config.yaml").flatten())

        assert flat["api.timeout"] == 30.0
        assert "ui" not in flat


class TestLogging:

    @pytest.mark.parametrize("name, level", [
        ("error", logging.ERROR),
        ("WARN", logging.WARNING),
        ("info", logging.INFO),
        ("debug", logging.DEBUG),
        ("trace", TRACE_LEVEL),
    ])
    def test_resolve_level(self, name: str, level: int) -> None:
        assert logging_config.resolve_level(name) == level

    def test_resolve_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            logging_config.resolve_level("loud")

    def test_off_installs_null_handler(self) -> None:
        logging_config.setup_logging("off", colored_output=False)

        root = logging.getLogger()
        assert root.level == logging_config.OFF_LEVEL
        assert all(isinstance(h, logging.NullHandler) for h in root.handlers)

    def test_http_loggers_quiet_unless_trace(self) -> None:
        logging_config.setup_logging("debug", colored_output=False)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_log_file_name_has_no_colons(self) -> None:
        now = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)
        assert logging_config.log_file_name(now) == "2024-03-05T070809+0000.log"

    def test_file_logging_writes_into_logs_dir(self, tmp_path) -> None:
        logging_config.setup_logging("info", colored_output=False)
        log_file = logging_config.add_file_logging(tmp_path / "logs", "info")

        logging.getLogger("mcsi.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert log_file.parent == tmp_path / "logs"
        assert "hello file" in log_file.read_text()

        root = logging.getLogger()
        for handler in list(root.handlers):
            if isinstance(handler, logging.FileHandler):
                root.removeHandler(handler)
                handler.close()

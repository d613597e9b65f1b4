"""Tests for vault_operator.logger."""

import io
import json
import logging
import os
from unittest import mock

import pytest

from vault_operator.logger import (
    DefaultLogger,
    Logger,
    StructuredLogger,
    create_logger,
    get_logger,
)


class TestLoggerInterface:
    """Tests for the Logger abstract interface."""

    def test_logger_is_abstract(self):
        """Logger can't be instantiated."""
        with pytest.raises(TypeError):
            Logger()  # type: ignore

    def test_logger_has_required_methods(self):
        """Logger declares every level and get_session_id."""
        for method in ("debug", "info", "warning", "error", "critical", "get_session_id"):
            assert hasattr(Logger, method)


class TestDefaultLogger:
    """Tests for the DefaultLogger implementation."""

    def test_session_id_is_uuid(self):
        """The session id is a full UUID."""
        logger = DefaultLogger()
        assert len(logger.get_session_id()) == 36

    def test_writes_to_output(self):
        """Messages go to the configured stream."""
        output = io.StringIO()
        logger = DefaultLogger(name="vault-bootstrap", output=output)
        logger.info("vault is already initialized")

        line = output.getvalue()
        assert "[INFO]" in line
        assert "[vault-bootstrap]" in line
        assert "vault is already initialized" in line

    def test_can_disable_timestamp(self):
        """Timestamps can be turned off."""
        output = io.StringIO()
        logger = DefaultLogger(output=output, include_timestamp=False)
        logger.info("msg")

        assert output.getvalue().startswith("[INFO]")

    def test_kwargs_rendered(self):
        """Context kwargs are rendered as key=value."""
        output = io.StringIO()
        logger = DefaultLogger(output=output)
        logger.warning("unseal key stored", key="unseal-key-0")

        assert "(key=unseal-key-0)" in output.getvalue()


class TestStructuredLogger:
    """Tests for the StructuredLogger implementation."""

    def test_session_id_truncated(self):
        """The structured logger shows a short session id."""
        logger = StructuredLogger(name="test-structured")
        assert len(logger.get_session_id()) == 8

    def test_text_format(self, capsys):
        """Text output carries level and context."""
        logger = StructuredLogger(name="test-text", json_format=False)
        logger.info("mounting secret engine", path="secret")

        captured = capsys.readouterr()
        assert "INFO" in captured.out
        assert "mounting secret engine" in captured.out
        assert "path=secret" in captured.out

    def test_json_format(self, capsys):
        """JSON output is one object per line."""
        logger = StructuredLogger(name="test-json", json_format=True)
        logger.info("vault unsealed", shares_submitted=3)

        log_entry = json.loads(capsys.readouterr().out.strip())
        assert log_entry["level"] == "INFO"
        assert log_entry["message"] == "vault unsealed"
        assert log_entry["logger"] == "test-json"
        assert log_entry["shares_submitted"] == 3
        assert "session_id" in log_entry

    def test_file_output(self, tmp_path):
        """Entries are also written to the log file."""
        log_file = tmp_path / "operator.log"
        logger = StructuredLogger(name="test-file", log_file=str(log_file))
        logger.info("File test message")

        for handler in logger._logger.handlers:
            handler.flush()

        assert "File test message" in log_file.read_text()

    def test_reserved_kwargs_prefixed(self, capsys):
        """Kwargs clashing with LogRecord fields are prefixed."""
        logger = StructuredLogger(name="test-reserved", json_format=True)
        logger.info("Test", name="should be prefixed")

        log_entry = json.loads(capsys.readouterr().out.strip())
        assert log_entry["_name"] == "should be prefixed"

    def test_reinitialising_does_not_duplicate_output(self, capsys):
        """A second logger with the same name doesn't double output."""
        StructuredLogger(name="test-dup")
        logger = StructuredLogger(name="test-dup")
        logger.info("once")

        assert capsys.readouterr().out.count("once") == 1


class TestLoggerFactoryFunctions:
    """Tests for create_logger and get_logger."""

    def test_create_logger_returns_logger(self):
        """create_logger returns a Logger."""
        assert isinstance(create_logger(name="test-factory"), Logger)

    def test_create_logger_respects_level(self, capsys):
        """Messages below the level are dropped."""
        logger = create_logger(name="test-level-factory", level=logging.WARNING)
        logger.info("Should not appear")
        logger.warning("Should appear")

        captured = capsys.readouterr()
        assert "Should not appear" not in captured.out
        assert "Should appear" in captured.out

    def test_get_logger_reads_env_json(self, capsys):
        """get_logger reads the JSON switch from the environment."""
        with mock.patch.dict(os.environ, {"TEST_JSON_ENV_LOG_JSON": "true"}):
            logger = get_logger("test-json-env")
            logger.info("JSON env test")

        log_entry = json.loads(capsys.readouterr().out.strip())
        assert log_entry["message"] == "JSON env test"

    def test_env_prefix_conversion(self):
        """Dashes in the name become underscores in the env prefix."""
        with mock.patch.dict(os.environ, {"VAULT_CONFIGURER_LOG_LEVEL": "DEBUG"}):
            logger = get_logger("vault-configurer")
            assert logger._logger.level == logging.DEBUG

    def test_default_level_is_info(self, capsys):
        """Debug messages are hidden by default."""
        logger = get_logger("test-default-level")
        logger.debug("Debug should not appear")
        logger.info("Info should appear")

        captured = capsys.readouterr()
        assert "Debug should not appear" not in captured.out
        assert "Info should appear" in captured.out

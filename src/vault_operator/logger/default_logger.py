"""
Default logger implementation with session tracking.

Writes formatted lines to a stream (stderr by default). Handy for scripts
and for tests that capture output through an in-memory stream.
"""

import sys
import uuid
from datetime import datetime, timezone
from typing import Any, TextIO

from .interface import Logger


class DefaultLogger(Logger):
    """Stream logger with optional timestamps and session tracking.

    Example:
        logger = DefaultLogger(name="vault-bootstrap")
        logger.info("vault is already initialized")
        logger.error("unseal failed", key="unseal-key-2")
    """

    def __init__(
        self,
        name: str = "vault-operator",
        output: TextIO = sys.stderr,
        include_timestamp: bool = True,
    ):
        self._name = name
        self._session_id = str(uuid.uuid4())
        self._output = output
        self._include_timestamp = include_timestamp

    def get_session_id(self) -> str:
        """Get the current session ID."""
        return self._session_id

    def _format_message(self, level: str, message: str, **kwargs: Any) -> str:
        parts = []

        if self._include_timestamp:
            parts.append(datetime.now(timezone.utc).isoformat())

        parts.append(f"[{level}]")
        parts.append(f"[{self._name}]")
        parts.append(f"[session:{self._session_id[:8]}]")
        parts.append(message)

        if kwargs:
            extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
            parts.append(f"({extra})")

        return " ".join(parts)

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        print(self._format_message(level, message, **kwargs), file=self._output, flush=True)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log("CRITICAL", message, **kwargs)

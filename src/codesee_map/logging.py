from __future__ import annotations

import json
import sys
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator


def _escape_workflow_command(value: str) -> str:
    """Escape a string for GitHub workflow commands."""
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class MapActionLogger:
    """Structured JSON logger with GitHub Actions integration."""

    def __init__(self, run_id: str):
        self.run_id = run_id

    def debug(self, message: str, **kwargs: Any) -> None:
        # Only shown when the workflow enables step debug logging.
        detail = json.dumps(self._sanitize(kwargs), ensure_ascii=False, default=str) if kwargs else ""
        text = f"{message} {detail}".rstrip()
        self._write(f"::debug::{_escape_workflow_command(text)}")

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("error", message, **kwargs)

    def exception(self, message: str, exc: BaseException, **kwargs: Any) -> None:
        """Log an error together with the exception's stack trace."""
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._emit("error", f"{message}: {exc}", traceback=stack, **kwargs)

    def add_mask(self, value: str) -> None:
        """Ask the runner to mask ``value`` in all subsequent job output."""
        if value:
            self._write(f"::add-mask::{value}")

    @contextmanager
    def group(self, name: str) -> Iterator[None]:
        """Fold the enclosed output into a collapsible log group and time it."""
        start = datetime.now(timezone.utc)
        self._write(f"::group::{_escape_workflow_command(name)}")
        status = "ok"
        try:
            yield
        except Exception:
            status = "error"
            raise
        finally:
            duration_ms = int((datetime.now(timezone.utc) - start).total_seconds() * 1000)
            self._write("::endgroup::")
            self.info("group_end", group=name, duration_ms=duration_ms, status=status)

    def _emit(self, level: str, message: str, **kwargs: Any) -> None:
        """Emit structured JSON log + GitHub annotation for warnings and errors."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "run_id": self.run_id,
            "message": message,
        }
        payload.update(self._sanitize(kwargs))

        self._write(json.dumps(payload, ensure_ascii=False, default=str))

        if level == "error":
            self._write(f"::error::{_escape_workflow_command(message)}")
        elif level == "warning":
            self._write(f"::warning::{_escape_workflow_command(message)}")

    @staticmethod
    def _write(line: str) -> None:
        sys.stderr.write(line + "\n")
        sys.stderr.flush()

    @staticmethod
    def _sanitize(fields: Dict[str, Any]) -> Dict[str, Any]:
        redacted: Dict[str, Any] = {}
        for key, value in fields.items():
            if MapActionLogger._is_sensitive_key(key):
                redacted[key] = "***"
            elif isinstance(value, dict):
                redacted[key] = MapActionLogger._sanitize(value)
            else:
                redacted[key] = value
        return redacted

    @staticmethod
    def _is_sensitive_key(key: str) -> bool:
        lowered = key.lower()
        return any(token in lowered for token in ("token", "secret", "password", "api_key", "apikey"))

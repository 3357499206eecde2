"""
Logging setup for the contact upsert demo.

setup_logging() configures the root logger once per process. The demo
script logs through DemoLogger so every line of one run carries the same
run tag and can be grepped together. DEBUG_MODE=true forces DEBUG level.
"""

import json
import logging
import os
import sys
from typing import Optional

DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; run/step tags become fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key in ("run_id", "step"):
            value = getattr(record, key, None)
            if value:
                entry[key] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DemoLogger(logging.LoggerAdapter):
    """
    Adapter tagging messages with the demo run and step.

    Output (simple format):
        [run:1a2b3c4d] [updateExisting] matched=1 modified=0
    """

    def __init__(
        self,
        name: str,
        run_id: Optional[str] = None,
        step: Optional[str] = None,
        debug_mode: Optional[bool] = None,
    ):
        super().__init__(logging.getLogger(name), {"run_id": run_id, "step": step})
        self.run_id = run_id
        self.step = step
        self._debug_mode = DEBUG_MODE if debug_mode is None else debug_mode
        if self._debug_mode:
            self.logger.setLevel(logging.DEBUG)

    def for_step(self, step: str) -> "DemoLogger":
        """Same run, different step tag."""
        return DemoLogger(self.logger.name, self.run_id, step, self._debug_mode)

    def tag(self, message: str) -> str:
        tags = []
        if self.run_id:
            tags.append(f"[run:{self.run_id[:8]}]")
        if self.step:
            tags.append(f"[{self.step}]")
        return " ".join(tags + [message]) if tags else message

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return self.tag(str(msg)), kwargs


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Replace the root handlers with a single stdout handler.

    Args:
        level: Log level name; unknown names fall back to INFO
        format: "simple" for human-readable lines, "json" for one object per line
    """
    log_level = logging.DEBUG if DEBUG_MODE else getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)


def get_logger(name: str, run_id: Optional[str] = None, step: Optional[str] = None) -> DemoLogger:
    """DemoLogger for `name`, tagged with the given run and step."""
    return DemoLogger(name, run_id=run_id, step=step)

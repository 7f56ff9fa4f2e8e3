"""Progress and error messages sent back to the host application."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

MessageSink = Callable[[Dict[str, Any]], None]


class Reporter:
    """Forwards log, progress and error messages to the host.

    Every message is also written to the standard logger. When no sink is
    given, logging is the only output.
    """

    def __init__(self, sink: Optional[MessageSink] = None, plugin: str = "github", hook: str = "deploy") -> None:
        self.sink = sink
        self.plugin = plugin
        self.hook = hook

    def set_hook(self, hook: str) -> None:
        self.hook = hook

    def log(self, level: str, message: str) -> None:
        logger.log(_LEVELS.get(level, logging.INFO), message)
        self._send({"type": "log", "level": level, "message": message})

    def progress(self, phase: str, current: int, total: int, message: Optional[str] = None) -> None:
        logger.info("[%s %d/%d] %s", phase, current, total, message or "")
        self._send(
            {
                "type": "progress",
                "phase": phase,
                "current": current,
                "total": total,
                "message": message,
            }
        )

    def error(self, error: str, context: Optional[str] = None, fatal: bool = False) -> None:
        logger.log(logging.ERROR if fatal else logging.WARNING, error)
        self._send({"type": "error", "error": error, "context": context, "fatal": fatal})

    def _send(self, payload: Dict[str, Any]) -> None:
        if self.sink is None:
            return
        payload = {"plugin": self.plugin, "hook": self.hook, **payload}
        try:
            self.sink(payload)
        except Exception:
            logger.debug("Dropping host message %s", payload.get("type"), exc_info=True)


_LEVELS = {
    "log": logging.INFO,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "debug": logging.DEBUG,
}

"""
Logging for scrivener.

One package logger, "scrivener", with children per layer:

    scrivener           adapters, session manager, server
    scrivener.tools     per-invocation records (ToolLogger)

Extractors never log. Nothing is configured on import; server.py and cli.py
call configure_logging() once at startup.
"""

import logging
import sys
from typing import Any, MutableMapping

logger = logging.getLogger("scrivener")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Chatty at INFO/WARNING without saying anything actionable
_NOISY_LOGGERS = ("googleapiclient.discovery_cache", "google_auth_httplib2")


def configure_logging(level: str = "INFO") -> None:
    """
    Send scrivener logs to stderr at `level`.

    stdout is reserved for the MCP stdio transport, so nothing may be
    written there. Safe to call more than once.
    """
    logger.setLevel(level.upper())

    if not any(getattr(h, "_scrivener", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        handler._scrivener = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)


class ToolLogger(logging.LoggerAdapter):
    """Per-invocation logging sink. Prefixes every record with the tool name."""

    def __init__(self, tool_name: str, base: logging.Logger | None = None) -> None:
        super().__init__(base or logger.getChild("tools"), {"tool": tool_name})
        self.tool_name = tool_name

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.tool_name}] {msg}", kwargs

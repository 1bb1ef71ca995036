from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Optional


class SensitiveDataFilter(logging.Filter):
    """Filter to mask Tailscale keys and login names in log messages."""

    PATTERNS = {
        "key": r"\b(?:nodekey|mkey|discokey|nlpub):[a-f0-9]{16,}",
        "authkey": r"\btskey-[a-zA-Z0-9\-]{8,}",
        "email": r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()

        message = re.sub(self.PATTERNS["key"], "[MASKED_KEY]", message, flags=re.IGNORECASE)
        message = re.sub(self.PATTERNS["authkey"], "[MASKED_AUTHKEY]", message)
        message = re.sub(self.PATTERNS["email"], "[MASKED_EMAIL]", message)

        record.msg = message
        record.args = None
        return True


class ColoredFormatter(logging.Formatter):
    """Formatter that adds ANSI colours for terminal output."""

    COLOURS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        colour = self.COLOURS.get(record.levelno, "")
        if colour and sys.stderr.isatty():
            record.levelname = f"{colour}{record.levelname}{self.RESET}"
        return super().format(record)


def _resolve_level(level: str) -> int:
    """Convert string level names to logging constants."""
    try:
        value = getattr(logging, level.upper())
        if isinstance(value, int):
            return value
    except AttributeError:
        return logging.WARNING
    return logging.WARNING


def setup_logging(
    level: str = "WARNING",
    mask_sensitive: bool = True,
    *,
    log_file: Optional[str | Path] = None,
    use_color: Optional[bool] = None,
) -> None:
    """
    Configure application-wide logging.

    Log records go to stderr so that command output on stdout stays clean.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        mask_sensitive: Apply masking filter for keys and login names.
        log_file: Optional log file path; None disables file logging. File
            records carry timestamps and source locations.
        use_color: Force colour output. Defaults to auto-detect (TTY only).
    """
    log_level_value = _resolve_level(level)

    fmt = "%(levelname)s - %(message)s"
    file_fmt = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

    colour_output = use_color if use_color is not None else sys.stderr.isatty()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_value)
    root_logger.handlers.clear()

    formatter = ColoredFormatter(fmt) if colour_output else logging.Formatter(fmt)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level_value)
    console_handler.setFormatter(formatter)
    if mask_sensitive:
        console_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(log_level_value)
        file_handler.setFormatter(logging.Formatter(file_fmt))
        if mask_sensitive:
            file_handler.addFilter(SensitiveDataFilter())
        root_logger.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

"""
Logging utilities for the gateway.

This module provides:
- Test/production environment tagging of log records
- Redaction of Copilot/GitHub tokens from log output
- Root logger configuration used by the CLI entry point
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import sys
from typing import Literal

import structlog

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(env_tag)s] %(name)s:%(lineno)d %(message)s"

# GitHub token families (ghp_, gho_, ghu_, ghs_, ghr_) and Copilot session tokens
GITHUB_TOKEN_PATTERN = re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}\b")
COPILOT_TOKEN_PATTERN = re.compile(r"\btid=[A-Za-z0-9]+;[^\s\"']+")
BEARER_TOKEN_PATTERN = re.compile(r"Bearer\s+([a-zA-Z0-9._~+/=;:-]+)")


def _is_running_under_pytest() -> bool:
    return "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST") is not None


def _get_environment_tag() -> str:
    """Return 'test' when running under pytest, 'prod' otherwise."""
    return "test" if _is_running_under_pytest() else "prod"


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Optional logger name

    Returns:
        A structured logger
    """
    return structlog.get_logger(name)  # type: ignore


class EnvironmentTaggingFilter(logging.Filter):
    """Logging filter that adds environment tags to log records."""

    def __init__(self) -> None:
        super().__init__()
        self._env_tag = _get_environment_tag()

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.env_tag = self._env_tag
        return True


class EnvironmentTaggingFormatter(logging.Formatter):
    """Logging formatter that includes environment tags."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "%",
    ) -> None:
        super().__init__(fmt or LOG_FORMAT, datefmt, style=style)


def redact(value: str, mask: str = "***") -> str:
    """Redact a sensitive value, keeping its first and last two characters."""
    if not value:
        return value

    if len(value) > 6:
        return f"{value[0:2]}{mask}{value[-2:]}"
    return mask


class ApiKeyRedactionFilter(logging.Filter):
    """Logging filter that redacts tokens from log records.

    Sanitizes `record.msg` and `record.args` (strings or containers of
    strings), replacing any configured secret and any generic GitHub,
    Copilot or bearer token with a mask.
    """

    def __init__(
        self, secrets: list[str] | set[str] | None = None, mask: str = "***"
    ) -> None:
        super().__init__()
        self.mask = mask
        keys = {k for k in (secrets or []) if k}
        self.patterns: list[re.Pattern[str]] = []
        if keys:
            # Longer secrets first so overlapping values are fully masked
            escaped = sorted((re.escape(k) for k in keys), key=len, reverse=True)
            self.patterns.append(re.compile("|".join(escaped)))

        self.patterns.append(BEARER_TOKEN_PATTERN)
        self.patterns.append(GITHUB_TOKEN_PATTERN)
        self.patterns.append(COPILOT_TOKEN_PATTERN)

    def _sanitize(self, obj: object) -> object:
        """Recursively sanitize strings inside common containers."""
        if isinstance(obj, str):
            s = obj
            for pat in self.patterns:
                if pat is BEARER_TOKEN_PATTERN:
                    s = pat.sub(f"Bearer {self.mask}", s)
                else:
                    s = pat.sub(self.mask, s)
            return s
        if isinstance(obj, dict):
            return {k: self._sanitize(v) for k, v in obj.items()}
        if isinstance(obj, list | tuple):
            return type(obj)(self._sanitize(v) for v in obj)
        return obj

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            if isinstance(record.msg, str):
                record.msg = self._sanitize(record.msg)  # type: ignore[assignment]

            if record.args:
                if isinstance(record.args, dict):
                    record.args = self._sanitize(record.args)  # type: ignore[assignment]
                elif isinstance(record.args, tuple):
                    record.args = tuple(self._sanitize(a) for a in record.args)
        except Exception:
            # Never let logging filtering raise
            return True
        return True


def install_environment_tagging() -> None:
    """Install environment tagging filter on the root logger and its handlers."""
    root = logging.getLogger()
    filter_instance = EnvironmentTaggingFilter()
    root.addFilter(filter_instance)

    for handler in list(root.handlers):
        handler.addFilter(filter_instance)
        if isinstance(handler.formatter, logging.Formatter) and not isinstance(
            handler.formatter, EnvironmentTaggingFormatter
        ):
            handler.setFormatter(
                EnvironmentTaggingFormatter(datefmt=handler.formatter.datefmt)
            )


def install_api_key_redaction_filter(
    secrets: list[str] | set[str] | None, mask: str = "***"
) -> None:
    """Install the token redaction filter on the root logger and its handlers.

    Safe to call multiple times; each call adds a new filter instance.
    """
    root = logging.getLogger()
    filter_instance = ApiKeyRedactionFilter(secrets or [], mask=mask)
    root.addFilter(filter_instance)

    for handler in list(root.handlers):
        with contextlib.suppress(AttributeError):
            handler.addFilter(filter_instance)


def configure_logging_with_environment_tagging(
    level: int = logging.INFO,
    log_format: str | None = None,
    log_file: str | None = None,
) -> None:
    """Configure root logging with environment tagging.

    Args:
        level: Logging level
        log_format: Optional log format string
        log_file: Optional log file path
    """
    formatter = EnvironmentTaggingFormatter(fmt=log_format)

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    install_environment_tagging()

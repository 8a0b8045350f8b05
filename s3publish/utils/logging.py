"""
Logging utilities for s3publish.

Every line of an upload run carries a correlation ID (the CI build number
when the CLI knows it) so log collectors can group a run's output.
LOG_FORMAT=json switches the console to one JSON object per line.

Example usage:
    >>> from s3publish.utils.logging import get_logger, log_function_call
    >>>
    >>> logger = get_logger(__name__)
    >>>
    >>> @log_function_call
    >>> def publish(path: str) -> bool:
    >>>     logger.info("Publishing", extra={"file": path})
    >>>     return True
"""

import functools
import json
import logging
import os
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar, cast

import coloredlogs

F = TypeVar("F", bound=Callable[..., Any])

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# CI variables reported with every JSON record, first match wins
CI_ENVIRONMENT = {
    "repo": ("DRONE_REPO", "CI_REPO", "GITHUB_REPOSITORY"),
    "build": ("DRONE_BUILD_NUMBER", "CI_BUILD_NUMBER", "GITHUB_RUN_NUMBER"),
    "commit": ("DRONE_COMMIT_SHA", "CI_COMMIT_SHA", "GITHUB_SHA"),
}

# Anything on a record outside this set came in through `extra`
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def get_correlation_id() -> str:
    """Return the run's correlation ID, generating one on first use."""
    corr_id = _correlation_id.get()
    if corr_id is None:
        corr_id = str(uuid.uuid4())
        _correlation_id.set(corr_id)
    return corr_id


def set_correlation_id(corr_id: str) -> None:
    _correlation_id.set(corr_id)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def _ci_environment() -> Dict[str, str]:
    environment = {}
    for key, names in CI_ENVIRONMENT.items():
        value = next((os.environ[n] for n in names if os.environ.get(n)), None)
        if value:
            environment[key] = value
    return environment


class JSONFormatter(logging.Formatter):
    """
    Render a record as a single JSON object.

    Example output:
        {"timestamp": "2026-01-04T10:30:15.123456+00:00", "level": "INFO",
         "logger": "s3publish.uploader.uploader", "message": "Uploading file",
         "correlation_id": "build-1024",
         "extra": {"file": "dist/app.js", "target": "/bundle/dist/app.js"},
         "environment": {"build": "1024"}}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": get_correlation_id(),
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["environment"] = _ci_environment()
        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    enable_colors: bool = True,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name
        enable_colors: Use coloredlogs for text output
        log_format: "json" or "text"; defaults to the LOG_FORMAT variable
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if log_format is None:
        log_format = os.getenv("LOG_FORMAT", "text")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if log_format.lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)
    elif enable_colors:
        coloredlogs.install(
            level=log_level,
            fmt=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            logger=root_logger,
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(handler)

    # botocore at DEBUG echoes request signing details
    logging.getLogger("botocore").setLevel(max(log_level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_function_call(func: F) -> F:
    """
    Log entry and exit of ``func`` at DEBUG, and any exception at ERROR.

    Arguments are rendered with repr, so values passed to decorated
    functions must keep secrets out of their reprs.
    """
    logger = get_logger(func.__module__)
    arg_names = func.__code__.co_varnames[: func.__code__.co_argcount]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        call = ", ".join(
            [f"{name}={value!r}" for name, value in zip(arg_names, args)]
            + [f"{key}={value!r}" for key, value in kwargs.items()]
        )
        fields = {"function": func.__name__, "func_module": func.__module__}
        logger.debug(
            f"ENTER {func.__name__}({call})",
            extra={**fields, "event": "function_entry"},
        )

        started = time.monotonic()
        try:
            result = func(*args, **kwargs)
        except Exception as error:
            logger.error(
                f"ERROR {func.__name__} raised {type(error).__name__}: {error}",
                extra={
                    **fields,
                    "event": "function_error",
                    "duration_seconds": time.monotonic() - started,
                    "error_type": type(error).__name__,
                },
                exc_info=True,
            )
            raise

        elapsed = time.monotonic() - started
        logger.debug(
            f"EXIT {func.__name__} -> {result!r} ({elapsed:.2f}s)",
            extra={**fields, "event": "function_exit", "duration_seconds": elapsed},
        )
        return result

    return cast(F, wrapper)

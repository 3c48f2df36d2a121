"""
Logging for the weather monitor.

Call `setup_logging()` once from an entrypoint; modules get their logger from
`get_tagged_logger(__name__, tag=...)`.

Every line carries the job name and a tag, and whatever was passed as
`extra=` is rendered after the message, e.g.

    2024-06-01 12:00:00 | INFO | weathermon | scheduler | Sweep finished [alerts=1 failed=0 processed=6]

so `logger.info("Sweep finished", extra={...})` stays readable without a
structured-log backend.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(message)s%(context)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_JOB_NAME = "weathermon"

# Attributes every LogRecord has; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "tag", "job_name", "context", "taskName"}

_SECRET_QUERY_KEYS = ("pass", "pwd", "secret", "token", "key")

_CONFIGURED = False

# Until setup_logging runs, INFO from import-time code still reaches stderr.
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s", datefmt=DATE_FORMAT)


class MaxLevelFilter(logging.Filter):
    """Drop records above `max_level`; keeps warnings off stdout."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class RecordContextFilter(logging.Filter):
    """Fill in `job_name`, `tag` and the rendered `context` suffix."""

    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self.job_name = job_name or DEFAULT_JOB_NAME

    @staticmethod
    def extras(record: logging.LogRecord) -> Dict[str, Any]:
        return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS and not k.startswith("_")}

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "job_name"):
            record.job_name = self.job_name
        if not hasattr(record, "tag"):
            record.tag = record.name.rsplit(".", 1)[-1] if record.name else "-"
        extras = self.extras(record)
        record.context = (" [" + " ".join(f"{k}={extras[k]}" for k in sorted(extras)) + "]") if extras else ""
        return True


def build_logging_config(*, level: str | int = "INFO", job_name: Optional[str] = None) -> Mapping[str, Any]:
    """dictConfig with INFO and below on stdout and WARNING and above on stderr."""
    handler = {"class": "logging.StreamHandler", "formatter": "weathermon"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "context": {"()": RecordContextFilter, "job_name": job_name},
            "below_warning": {"()": MaxLevelFilter, "max_level": logging.INFO},
        },
        "formatters": {"weathermon": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT}},
        "handlers": {
            "stdout": {**handler, "level": "DEBUG", "stream": "ext://sys.stdout", "filters": ["context", "below_warning"]},
            "stderr": {**handler, "level": "WARNING", "stream": "ext://sys.stderr", "filters": ["context"]},
        },
        "root": {"level": level, "handlers": ["stdout", "stderr"]},
    }


def setup_logging(*, level: str | int = "INFO", job_name: Optional[str] = None, force: bool = False) -> None:
    """Configure logging once per process; later calls are ignored unless `force`."""
    global _CONFIGURED
    if _CONFIGURED and not force:
        return
    logging.config.dictConfig(build_logging_config(level=level, job_name=job_name))
    _CONFIGURED = True


def get_tagged_logger(name: str, *, tag: Optional[str] = None) -> logging.LoggerAdapter:
    """LoggerAdapter tagging each record; the tag defaults to the module's short name."""
    return logging.LoggerAdapter(logging.getLogger(name), {"tag": tag or name.rsplit(".", 1)[-1]})


def mask_url(url: str) -> str:
    """Hide credentials in a database or Redis URL before it is logged.

    postgresql://user:secret@db:5432/weather -> postgresql://***:***@db:5432/weather
    redis://:secret@cache:6379/0 -> redis://:***@cache:6379/0
    sqlite:///./weather.db is returned unchanged.
    """
    try:
        parsed = urlparse(url)
        host, port = parsed.hostname, parsed.port
    except ValueError:
        return url

    query = urlencode(
        [
            (k, "***" if any(s in k.lower() for s in _SECRET_QUERY_KEYS) else v)
            for k, v in parse_qsl(parsed.query, keep_blank_values=True)
        ]
    )

    userinfo = ("***" if parsed.username else "") + (":***" if parsed.password is not None else "")
    netloc = (f"{userinfo}@" if userinfo else "") + (host or "") + (f":{port}" if port else "")

    if not netloc and parsed.path.startswith("/"):
        # sqlite:///relative/path has an empty netloc that urlunparse would drop
        masked = f"{parsed.scheme}:///{parsed.path.lstrip('/')}"
        return f"{masked}?{query}" if query else masked

    return urlunparse((parsed.scheme, netloc, parsed.path, parsed.params, query, parsed.fragment))

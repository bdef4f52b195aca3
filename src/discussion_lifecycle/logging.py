"""Loguru setup and context helpers for the lifecycle engine.

Every record can carry the context of the work it describes:

- ``name``: the module (or stdlib logger) that emitted it
- ``repo`` / ``discussion``: the repository and discussion being handled,
  shown on stderr as ``[owner/name#12]``
- ``rate_limit``: the GraphQL quota a response reported

The optional file sink keeps the whole ``extra`` dict on each line, or
writes JSON when ``serialize`` is set.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

    from discussion_lifecycle.config import LoggingConfig
    from discussion_lifecycle.github.rate_limit import PoolRateLimit

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# stdlib loggers of the HTTP stack under githubkit
HTTP_LOGGERS = ("httpx", "httpcore", "githubkit")


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru under the stdlib logger's name."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real call site
        frame = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(name=record.name).log(
            level, record.getMessage()
        )


def _where(extra: dict[str, Any]) -> str:
    repo = extra.get("repo")
    number = extra.get("discussion")
    if repo and number is not None:
        return f" [{repo}#{number}]"
    if repo:
        return f" [{repo}]"
    if number is not None:
        return f" [#{number}]"
    return ""


def _console_format(record: Record) -> str:
    record["extra"]["where"] = _where(record["extra"])
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    return (
        "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
        f"<cyan>{source}</cyan>{{extra[where]}} - <level>{{message}}</level>\n{{exception}}"
    )


def _file_format(record: Record) -> str:
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    return (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
        f"{source}:{{function}}:{{line}} | {{extra}} | {{message}}\n{{exception}}"
    )


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    config: LoggingConfig | None = None,
) -> Logger:
    """Install the stderr sink, the optional file sink and stdlib interception.

    ``verbose`` (DEBUG) beats ``quiet`` (WARNING), and both beat ``level``.
    The file sink, when ``config.log_file`` is set, always records DEBUG.
    """
    if verbose:
        effective: LogLevel = "DEBUG"
    elif quiet:
        effective = "WARNING"
    else:
        effective = level

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective,
        format=_console_format,
        backtrace=True,
        diagnose=True,
    )

    if config is not None and config.log_file:
        logger.add(
            Path(config.log_file),
            level="DEBUG",
            format=_file_format,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
            serialize=config.serialize,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    http_level = logging.DEBUG if effective in ("TRACE", "DEBUG") else logging.WARNING
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    return logger


def get_logger(name: str) -> Logger:
    """Module logger: ``logger = get_logger(__name__)``."""
    return logger.bind(name=name)


def bind_repository(repository: str) -> Logger:
    return logger.bind(name="lifecycle", repo=repository)


def bind_discussion(repository: str, number: int) -> Logger:
    return logger.bind(name="lifecycle", repo=repository, discussion=number)


@contextmanager
def discussion_context(repository: str, number: int) -> Iterator[None]:
    """Attach repository and discussion to every record logged inside the block.

    Unlike ``bind_discussion`` this reaches loggers created elsewhere, such as
    the transport's and the repository's, while one discussion is handled.
    """
    with logger.contextualize(repo=repository, discussion=number):
        yield


def log_rate_limit(limit: PoolRateLimit, *, source: str = "headers") -> None:
    """Log the quota a response reported, bound as ``rate_limit`` context.

    An exhausted pool logs a warning; anything else is DEBUG noise.
    """
    quota = {
        "pool": limit.pool.value,
        "limit": limit.limit,
        "remaining": limit.remaining,
        "reset_at": limit.reset_at.isoformat(),
        "source": source,
    }
    bound = logger.bind(name="rate_limit", rate_limit=quota)
    if limit.remaining == 0:
        bound.warning("{} quota exhausted, resets at {}", quota["pool"], quota["reset_at"])
    else:
        bound.debug(
            "{} quota {}/{} remaining, resets at {}",
            quota["pool"],
            limit.remaining,
            limit.limit,
            quota["reset_at"],
        )

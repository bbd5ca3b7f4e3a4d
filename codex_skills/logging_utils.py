"""Structured logging with a per-invocation run_id and skill routing events."""
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

# Context variable for run_id so it is attached to every log in the current invocation
run_id_ctx: ContextVar[str | None] = ContextVar("run_id", default=None)


def get_run_id() -> str | None:
    return run_id_ctx.get()


def set_run_id(run_id: str | None = None) -> str:
    """Set (or generate) the run_id for this invocation and return it."""
    run_id = run_id or uuid.uuid4().hex[:12]
    run_id_ctx.set(run_id)
    return run_id


def clear_run_id() -> None:
    run_id_ctx.set(None)


def add_run_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add run_id to every event."""
    rid = get_run_id()
    if rid:
        event_dict["run_id"] = rid
    return event_dict


def configure_logging(log_level: str = "WARNING") -> None:
    """Configure structlog and stdlib logging. Call once at startup.

    Events go to stderr through stdlib logging so command output on stdout stays parseable.
    """
    log_level = log_level.upper()
    level = getattr(logging, log_level, logging.WARNING)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_run_id,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False)
            if log_level == "DEBUG"
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# Convenience: log routing events with consistent event names
def log_pick_start(
    logger: structlog.stdlib.BoundLogger,
    query: str,
    top: int,
    corpus_size: int,
) -> None:
    msg = query[:200] + "..." if len(query) > 200 else query
    logger.info("pick_start", query=msg, top=top, corpus_size=corpus_size)


def log_pick_end(
    logger: structlog.stdlib.BoundLogger,
    result_names: list[str],
    best_score: float | None,
) -> None:
    logger.info(
        "pick_end",
        results=result_names,
        best_score=best_score,
    )


def log_no_match(
    logger: structlog.stdlib.BoundLogger,
    query: str,
    closest: list[str],
) -> None:
    logger.info("pick_no_match", query=query[:200], closest=closest)

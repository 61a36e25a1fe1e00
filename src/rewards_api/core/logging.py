"""Structured JSON logging for the rewards service."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from loguru import logger
from opentelemetry import trace


class InterceptHandler(logging.Handler):
    """Forward uvicorn, sqlalchemy and httpx records into the Loguru sink."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - bridging glue
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        bound = logger.opt(depth=6, exception=record.exc_info).bind(logger_name=record.name)
        bound.log(level, record.getMessage())


def _span_ids() -> dict[str, str]:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return {}
    return {
        "trace_id": f"{span_context.trace_id:032x}",
        "span_id": f"{span_context.span_id:016x}",
    }


def build_log_payload(record: dict[str, Any], service: dict[str, str]) -> dict[str, Any]:
    """Flatten a Loguru record into one JSON-ready log line."""

    extra = dict(record["extra"])
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name.lower(),
        "message": record["message"],
        "logger": extra.pop("logger_name", record["name"]),
        **service,
        **_span_ids(),
        **extra,
    }

    if record["exception"] is not None and record["exception"].type is not None:
        payload["exception"] = record["exception"].type.__name__
    return payload


def configure_logging(*, service_name: str, environment: str, version: str) -> None:
    """Replace Loguru's default sink with JSON lines on stdout."""

    service = {"service": service_name, "environment": environment, "version": version}

    def sink(message) -> None:
        sys.stdout.write(json.dumps(build_log_payload(message.record, service), default=str) + "\n")

    logger.remove()
    logger.add(sink, backtrace=False, diagnose=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for noisy in ("uvicorn.access", "aiosqlite", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

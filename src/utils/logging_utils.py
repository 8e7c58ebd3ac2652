"""Log level, env-driven sinks and the per-fetch result line."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any

from loguru import logger

TRUTHY = {"1", "true", "yes", "on"}
JSON_SINK_PATTERN = "nyc_property_{time}.jsonl"


def env_log_level(default: str = "INFO") -> str:
    return os.getenv("LOG_LEVEL", default).upper()


def add_optional_sinks(log_dir: str | Path = "logs") -> list[int]:
    """Attach the sinks switched on by environment variables.

    ``LOG_DEBUG_FILE`` names a plain-text DEBUG sink. A truthy ``LOG_JSON``
    adds a serialized sink under ``log_dir``. Returns the loguru sink ids.
    """
    sink_ids = []
    debug_file = os.getenv("LOG_DEBUG_FILE")
    if debug_file:
        sink_ids.append(logger.add(debug_file, level="DEBUG", backtrace=True, diagnose=True))

    if os.getenv("LOG_JSON", "0").strip().lower() in TRUTHY:
        json_dir = Path(log_dir)
        json_dir.mkdir(parents=True, exist_ok=True)
        sink_ids.append(
            logger.add(json_dir / JSON_SINK_PATTERN, level="DEBUG", serialize=True, backtrace=True)
        )
    return sink_ids


def log_search(
    *,
    source: str,
    query: Any,
    results_raw: int,
    results_kept: int | None = None,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    """One INFO line per dataset fetch, with the counts bound as extras.

    ``source`` names the dataset ("ACRIS documents", "ACRIS parties",
    "DOF valuation"), ``query`` the BBL or id-set it was asked for.
    ``results_kept`` is the count left after filtering, when that differs.
    """
    extra: dict[str, Any] = {"source": source, "query": query, "results_raw": results_raw, **context}
    if results_kept is not None:
        extra["results_kept"] = results_kept
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 1)
    logger.bind(**extra).info(
        "search source={} query={} raw={} kept={}",
        source,
        query,
        results_raw,
        "-" if results_kept is None else results_kept,
    )


class Timer:
    """Context manager; ``elapsed_ms`` is set on exit."""

    elapsed_ms: float = 0.0

    def __enter__(self) -> Timer:
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000

"""Minimal structured logging helper for generation events.

Emits one ``key=value`` line (or a JSON object) per event with a timestamp
and level on stderr, so stdout stays free for command output (eg. the JSON
summary of `run.py generate`).

Usage:
    from hexdelve.logging_utils import get_logger
    log = get_logger("worldgen")
    log.info(event="worldgen_sector", seed=7, depth=3)
    with log.timed("worldgen_complete", seed=7):
        ...

Environment: HEXDELVE_LOG_LEVEL (debug|info|warn|error, default info),
HEXDELVE_LOG_JSON=1 for JSON lines. Reserved keys: level, ts, logger.
"""

from __future__ import annotations

import json
import os
import sys
import time
from contextlib import contextmanager

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}


def _current_level() -> int:
    return LEVELS.get(os.getenv("HEXDELVE_LOG_LEVEL", "info").lower(), 20)


def _json_mode() -> bool:
    return os.getenv("HEXDELVE_LOG_JSON", "0").lower() in ("1", "true", "yes", "on")


def _format(level: str, **fields) -> str:
    if _json_mode():
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = level
        rec["ts"] = int(time.time())
        return json.dumps(rec, separators=(",", ":"), default=str)
    parts = [f"level={level}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            parts.append(f"{k}={str(v).replace(' ', '_')}")
    return " ".join(parts)


class _Logger:
    def __init__(self, name: str):
        self.name = name

    def _log(self, lvl: str, **fields):
        if LEVELS[lvl] < _current_level():
            return
        fields.setdefault("logger", self.name)
        print(_format(lvl, **fields), file=sys.stderr)

    def debug(self, **fields):
        self._log("debug", **fields)

    def info(self, **fields):
        self._log("info", **fields)

    def warn(self, **fields):
        self._log("warn", **fields)

    def error(self, **fields):
        self._log("error", **fields)

    @contextmanager
    def timed(self, event: str, **fields):
        """Log ``event`` at info with ``ms`` once the block finishes.

        Failures are logged at error level with the exception type and
        re-raised.
        """
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.error(event=event, ok=False, error=type(e).__name__, detail=str(e), **fields)
            raise
        ms = int((time.perf_counter() - start) * 1000)
        self.info(event=event, ms=ms, **fields)


_LOGGER_CACHE = {}


def get_logger(name: str) -> _Logger:
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = _Logger(name)
    return _LOGGER_CACHE[name]


log = get_logger("hexdelve")

from __future__ import annotations

from contextvars import ContextVar, Token
import os
import sys

_VERBOSE_LOGGING: ContextVar[bool] = ContextVar(
    "snipper_verbose_logging", default=False
)

_DEFAULT_JOBS = 4
_MAX_JOBS = 64


def _read_positive_int_env(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    return min(value, _MAX_JOBS)


def get_verbose_logging() -> bool:
    return _VERBOSE_LOGGING.get()


def set_verbose_logging(enabled: bool) -> Token[bool]:
    return _VERBOSE_LOGGING.set(bool(enabled))


def reset_verbose_logging(token: Token[bool]) -> None:
    _VERBOSE_LOGGING.reset(token)


def log(msg: str) -> None:
    if get_verbose_logging():
        print(msg, file=sys.stderr, flush=True)


def clamp_jobs(value: int) -> int:
    return max(1, min(int(value), _MAX_JOBS))


def get_jobs(default: int | None = None) -> int:
    """Worker count: SNIPPER_JOBS if set and valid, else ``default``, else 4."""
    fallback = clamp_jobs(default) if default else _DEFAULT_JOBS
    return _read_positive_int_env("SNIPPER_JOBS", fallback)

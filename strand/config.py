from __future__ import annotations
import os


# Defaults
DEFAULT_MAX_DEPTH = 1024
DEFAULT_STEP_LIMIT = 100_000
DEFAULT_TRACE_DEPTH = 1024


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if not raw or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{var} must be positive, got {value}")
    return value


def get_max_depth() -> int:
    return int_from_env('STRAND_MAX_DEPTH', DEFAULT_MAX_DEPTH)


def get_step_limit() -> int:
    return int_from_env('STRAND_STEP_LIMIT', DEFAULT_STEP_LIMIT)


def get_trace_depth() -> int:
    return int_from_env('STRAND_TRACE_DEPTH', DEFAULT_TRACE_DEPTH)

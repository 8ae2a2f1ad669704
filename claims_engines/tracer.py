"""
claims_engines.tracer -- Engine invocation tracer emitting CLAIMS_ENGINE_TRACE.

Responsibility:
    Provide a lightweight decorator (``@traced_engine``) that wraps pure
    calculator invocations with structured trace logging.  The trace
    captures engine_name, engine_version, input_fingerprint (SHA-256 of
    selected keyword inputs) and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; no I/O is introduced into the calculators.
    Logs under ``claims_kernel.engines.tracer`` so the kernel's
    ``configure_logging`` picks the records up without engines importing
    the kernel logging module.

Invariants enforced:
    - Deterministic fingerprints: values are canonicalized (dict keys
      sorted, Decimals rendered as strings) before hashing.
    - Engine purity: the decorator only reads kwargs; it never mutates
      inputs.

Failure modes:
    - Fingerprint fields missing from kwargs are recorded as "null".
    - Unknown types fall back to ``str(value)``; frozen dataclasses have a
      stable repr, so this is deterministic for every engine input.

Usage:
    from claims_engines.tracer import traced_engine

    @traced_engine("injury", "1.0", fingerprint_fields=("annual_wage",))
    def injury_row_compensation(*, annual_wage, doctor_percentage, factor):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import logging
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Any

_logger = logging.getLogger("claims_kernel.engines.tracer")


def _canonicalize(value: Any) -> str:
    """Produce a stable string representation of a value for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """Compute a 16-char SHA-256 prefix over the selected keyword inputs."""
    parts: list[str] = []
    for field in fingerprint_fields:
        parts.append(f"{field}={_canonicalize(kwargs.get(field))}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits CLAIMS_ENGINE_TRACE for calculator invocations.

    Args:
        engine_name: Engine identifier (e.g., "death_split").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Keyword argument names included in the
            input fingerprint hash.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                fp = compute_input_fingerprint(fingerprint_fields, kwargs)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "CLAIMS_ENGINE_TRACE",
                extra={
                    "trace_type": "CLAIMS_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator

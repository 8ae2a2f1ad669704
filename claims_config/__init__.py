"""
claims_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``EngineConfiguration``
    holding the document checklists, review status labels and parameter
    fallbacks.  YAML loading is internal tooling and never exposed to
    callers.

Architecture position:
    Configuration -- sits above ``claims_kernel`` and below
    ``claims_services``.  The kernel and the engines MUST NEVER import
    from ``claims_config``; services pass the values they need down.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - A configuration is validated before it is returned.
    - Deterministic checksum: the same YAML always yields the same
      checksum.

Failure modes:
    - ``FileNotFoundError`` -- sets directory missing, or no set matches.
    - ``ConfigurationError`` -- structural validation failed.

Audit relevance:
    Every successful call emits a ``CLAIMS_CONFIG_TRACE`` log record with
    the config_id, version and checksum, tying each finalized calculation
    to the configuration that governed its document gate.
"""

from __future__ import annotations

import logging
from pathlib import Path

from claims_kernel.exceptions import ConfigurationError
from claims_config.loader import ROOT_FILE, load_configuration
from claims_config.schema import (
    DocumentChecklist,
    EngineConfiguration,
    ParameterDefaults,
    ReviewStatusLabels,
)
from claims_config.validator import validate_configuration

_logger = logging.getLogger("claims_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = [
    "DocumentChecklist",
    "EngineConfiguration",
    "ParameterDefaults",
    "ReviewStatusLabels",
    "get_active_config",
]


def get_active_config(
    config_id: str | None = None,
    config_dir: Path | None = None,
) -> EngineConfiguration:
    """The ONLY public configuration entrypoint.

    Args:
        config_id: Select a set by id.  When omitted the sole available
            set is used.
        config_dir: Override path to the configuration sets directory.
            Defaults to claims_config/sets/.

    Raises:
        FileNotFoundError: No sets directory, or no matching set.
        ConfigurationError: The selected set failed validation.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    config = _find_matching_config(sets_dir, config_id)

    validation = validate_configuration(config)
    for warning in validation.warnings:
        _logger.warning(
            "config_validation_warning",
            extra={"config_set_id": config.config_id, "warning": warning},
        )
    if not validation.is_valid:
        raise ConfigurationError(config.config_id, validation.errors)

    _logger.info(
        "CLAIMS_CONFIG_TRACE",
        extra={
            "trace_type": "CLAIMS_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "checklist_count": len(config.checklists),
        },
    )
    return config


def _find_matching_config(sets_dir: Path, config_id: str | None) -> EngineConfiguration:
    if not sets_dir.is_dir():
        raise FileNotFoundError(f"Configuration sets directory not found: {sets_dir}")

    configs = [
        load_configuration(subdir)
        for subdir in sorted(sets_dir.iterdir())
        if subdir.is_dir() and (subdir / ROOT_FILE).exists()
    ]

    if config_id is not None:
        matches = [c for c in configs if c.config_id == config_id]
        if not matches:
            raise FileNotFoundError(
                f"No configuration set with config_id='{config_id}' in {sets_dir}"
            )
        return max(matches, key=lambda c: c.version)

    if len(configs) == 1:
        return configs[0]
    raise FileNotFoundError(
        f"Expected exactly one configuration set in {sets_dir}, found {len(configs)}; "
        "pass config_id to choose"
    )

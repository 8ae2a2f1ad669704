"""
Configuration Loader (``claims_config.loader``).

Responsibility
--------------
Loads a configuration set's ``root.yaml`` and parses it into the frozen
``claims_config.schema`` dataclasses.  Build/test tooling only: runtime
callers go through ``claims_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unknown incident type  -> ``ValueError`` from ``IncidentType``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from claims_kernel.domain.claim import IncidentType
from claims_config.schema import (
    DocumentChecklist,
    EngineConfiguration,
    ParameterDefaults,
    ReviewStatusLabels,
)

ROOT_FILE = "root.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_checklist(incident_type: str, data: dict[str, Any]) -> DocumentChecklist:
    return DocumentChecklist(
        incident_type=IncidentType(incident_type),
        required=tuple(str(d) for d in data.get("required") or ()),
        hard_mandatory=tuple(str(d) for d in data.get("hard_mandatory") or ()),
    )


def parse_status_labels(data: dict[str, Any] | None) -> ReviewStatusLabels:
    if not data:
        return ReviewStatusLabels()
    defaults = ReviewStatusLabels()
    return ReviewStatusLabels(
        pending=str(data.get("pending", defaults.pending)),
        accepted=str(data.get("accepted", defaults.accepted)),
        rejected=str(data.get("rejected", defaults.rejected)),
        compensation_calculated=str(
            data.get("compensation_calculated", defaults.compensation_calculated)
        ),
    )


def parse_parameters(data: dict[str, Any] | None) -> ParameterDefaults:
    if not data:
        return ParameterDefaults()
    return ParameterDefaults(
        default_max_child_age=int(
            data.get("default_max_child_age", ParameterDefaults().default_max_child_age)
        )
    )


def parse_configuration(data: dict[str, Any]) -> EngineConfiguration:
    """Parse a raw YAML mapping into an EngineConfiguration."""
    documents = data["documents"]
    return EngineConfiguration(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        checklists=tuple(
            parse_checklist(incident_type, checklist)
            for incident_type, checklist in documents.items()
        ),
        status_labels=parse_status_labels(data.get("status_labels")),
        parameters=parse_parameters(data.get("parameters")),
        checksum=compute_checksum(data),
    )


def load_configuration(set_dir: Path) -> EngineConfiguration:
    """Load and parse the configuration set rooted at ``set_dir``."""
    return parse_configuration(load_yaml_file(set_dir / ROOT_FILE))

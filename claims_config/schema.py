"""
Configuration Schema (``claims_config.schema``).

Responsibility
--------------
Frozen dataclasses describing one compensation engine configuration set:
the per-incident document checklists, the review status labels written
on finalize, and parameter fallbacks.

Architecture position
---------------------
**Config layer** -- pure data definitions.  Consumed by the loader, the
validator and, at runtime, by ``claims_services``.  Imports only kernel
domain enums.

Invariants enforced
-------------------
* All dataclasses are ``frozen=True``.
* Checklists are keyed by ``IncidentType``; lookups for a missing type
  raise ``KeyError`` rather than returning an empty list.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from claims_kernel.domain.claim import IncidentType
from claims_kernel.domain.reference import DEFAULT_MAX_CHILD_AGE


@dataclass(frozen=True)
class DocumentChecklist:
    """Statutory documents for one incident type."""

    incident_type: IncidentType
    required: tuple[str, ...]
    hard_mandatory: tuple[str, ...]


@dataclass(frozen=True)
class ReviewStatusLabels:
    """Status strings written to the review records."""

    pending: str = "Pending"
    accepted: str = "Accepted"
    rejected: str = "Rejected"
    compensation_calculated: str = "CompensationCalculated"


@dataclass(frozen=True)
class ParameterDefaults:
    default_max_child_age: int = DEFAULT_MAX_CHILD_AGE


@dataclass(frozen=True)
class EngineConfiguration:
    """
    A complete, validated configuration set.

    ``checksum`` is the SHA-256 of the canonical JSON of the source YAML.
    """

    config_id: str
    version: int
    checklists: tuple[DocumentChecklist, ...]
    status_labels: ReviewStatusLabels = field(default_factory=ReviewStatusLabels)
    parameters: ParameterDefaults = field(default_factory=ParameterDefaults)
    checksum: str = ""

    def checklist_for(self, incident_type: IncidentType) -> DocumentChecklist:
        for checklist in self.checklists:
            if checklist.incident_type is incident_type:
                return checklist
        raise KeyError(f"No document checklist for incident type {incident_type.value}")

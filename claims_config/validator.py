"""
Configuration Validator (``claims_config.validator``).

Responsibility
--------------
Structural checks on a parsed ``EngineConfiguration`` before it is handed
to the runtime:

* both incident types have a checklist, and no type appears twice;
* every hard-mandatory document is on the required list of its type;
* required lists contain no duplicates (case-insensitive);
* status labels are non-empty;
* the default max child age is positive.

Failure modes
-------------
Errors make ``get_active_config()`` raise ``ConfigurationError``.
Warnings are logged but do not block.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from claims_kernel.domain.claim import IncidentType
from claims_config.schema import EngineConfiguration


@dataclass
class ConfigValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: EngineConfiguration) -> ConfigValidationResult:
    result = ConfigValidationResult()
    _validate_checklists(config, result)
    _validate_status_labels(config, result)

    if config.parameters.default_max_child_age <= 0:
        result.add_error(
            f"default_max_child_age must be positive, got {config.parameters.default_max_child_age}"
        )
    return result


def _validate_checklists(config: EngineConfiguration, result: ConfigValidationResult) -> None:
    seen: set[IncidentType] = set()
    for checklist in config.checklists:
        label = checklist.incident_type.value
        if checklist.incident_type in seen:
            result.add_error(f"Duplicate document checklist for {label}")
        seen.add(checklist.incident_type)

        if not checklist.required:
            result.add_error(f"Document checklist for {label} is empty")

        normalized = [d.strip().lower() for d in checklist.required]
        if len(set(normalized)) != len(normalized):
            result.add_error(f"Document checklist for {label} has duplicate entries")

        required = set(normalized)
        for doc in checklist.hard_mandatory:
            if doc.strip().lower() not in required:
                result.add_error(
                    f"Hard-mandatory document '{doc}' is not required for {label}"
                )
        if not checklist.hard_mandatory:
            result.add_warning(f"No hard-mandatory documents for {label}")

    for incident_type in IncidentType:
        if incident_type not in seen:
            result.add_error(f"Missing document checklist for {incident_type.value}")


def _validate_status_labels(config: EngineConfiguration, result: ConfigValidationResult) -> None:
    labels = config.status_labels
    for name in ("pending", "accepted", "rejected", "compensation_calculated"):
        if not getattr(labels, name).strip():
            result.add_error(f"Status label '{name}' is empty")

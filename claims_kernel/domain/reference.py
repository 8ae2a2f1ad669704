"""
Reference data types (``claims_kernel.domain.reference``).

Pure value objects for the two dictionary-backed lookups the calculators
read: injury criteria factors (``InjuryPercent``) and named system
parameters (``SystemParameter``).  Parameter values stay strings as stored
and are parsed on access, so a corrupt value reads as zero instead of
failing the load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from claims_kernel.domain.values import parse_numeric

INJURY_PERCENT_TYPE = "InjuryPercent"
SYSTEM_PARAMETER_TYPE = "SystemParameter"

MIN_COMPENSATION_DEATH = "MinCompensationAmountDeath"
MAX_COMPENSATION_DEATH = "MaxCompensationAmountDeath"
WEEKLY_COMPENSATION_PER_CHILD = "WeeklyCompensationPerChildDeath"
MAX_CHILD_AGE = "MaxChildAge"

DEFAULT_MAX_CHILD_AGE = 16


@dataclass(frozen=True)
class InjuryCriterion:
    """One row of the statutory injury schedule."""

    key: str
    factor: Decimal


@dataclass(frozen=True)
class SystemParameters:
    """
    Named system parameters.

    Contract: frozen view over the raw key -> string dictionary rows.
    Guarantees: numeric accessors never raise; missing or non-numeric
    values read as zero, except ``max_child_age`` which falls back to
    ``default_max_child_age``.
    """

    values: Mapping[str, str] = field(default_factory=dict)
    default_max_child_age: int = DEFAULT_MAX_CHILD_AGE

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def numeric(self, key: str) -> Decimal:
        return parse_numeric(self.values.get(key))

    @property
    def min_compensation_death(self) -> Decimal:
        return self.numeric(MIN_COMPENSATION_DEATH)

    @property
    def max_compensation_death(self) -> Decimal:
        return self.numeric(MAX_COMPENSATION_DEATH)

    @property
    def weekly_compensation_per_child(self) -> Decimal:
        return self.numeric(WEEKLY_COMPENSATION_PER_CHILD)

    @property
    def max_child_age(self) -> int:
        age = self.numeric(MAX_CHILD_AGE)
        if age == 0:
            return self.default_max_child_age
        return int(age)


@dataclass(frozen=True)
class ReferenceData:
    """Everything the calculators need from the reference dictionary."""

    criteria: tuple[InjuryCriterion, ...]
    parameters: SystemParameters

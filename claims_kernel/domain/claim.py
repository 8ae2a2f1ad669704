"""
Claim domain types (``claims_kernel.domain.claim``).

Responsibility
--------------
Frozen value objects for the read-only inputs of a compensation
calculation: the claim itself, the worker (with optional spouse), the
worker's dependants and the wage record.  Also owns the classification of
free-text dependant types into *child* and *additional* categories.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Claims are immutable once created by intake; nothing here mutates them.
* Dependant classification is a pure function of the type label.
* Annual wage is weekly wage x 52, a fixed statutory multiplier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

WEEKS_PER_YEAR = Decimal("52")

_CHILD_PATTERN = re.compile(
    r"(child|children|son|daughter|step.?child|dependent\s*child|grandchild)"
)


class IncidentType(str, Enum):
    """Kind of incident a claim was raised for."""

    INJURY = "Injury"
    DEATH = "Death"


class DependantCategory(str, Enum):
    """Category used by the death split table."""

    SPOUSE = "spouse"
    CHILD = "child"
    ADDITIONAL = "additional"


def is_child_type(dependant_type: str | None) -> bool:
    """True when a free-text dependant type denotes a child."""
    label = (dependant_type or "").strip().lower()
    return _CHILD_PATTERN.search(label) is not None


@dataclass(frozen=True)
class Spouse:
    first_name: str
    last_name: str = ""
    date_of_birth: date | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Worker:
    """
    The injured or deceased worker.

    Contract: frozen.  ``spouse`` is None when no spouse first name is on
    record; the split table treats that as "no spouse".
    """

    worker_id: str
    first_name: str
    last_name: str
    date_of_birth: date | None = None
    marital_status: str = ""
    spouse: Spouse | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_spouse(self) -> bool:
        return self.spouse is not None


@dataclass(frozen=True)
class Dependant:
    """A dependant of the worker as recorded at intake."""

    dependant_id: str
    worker_id: str
    first_name: str
    last_name: str
    dependant_type: str
    date_of_birth: date | None = None
    degree_of_dependence: Decimal = Decimal("0")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def category(self) -> DependantCategory:
        if is_child_type(self.dependant_type):
            return DependantCategory.CHILD
        return DependantCategory.ADDITIONAL

    @property
    def is_child(self) -> bool:
        return self.category is DependantCategory.CHILD


@dataclass(frozen=True)
class EmploymentDetails:
    """Wage record for the worker at time of claim."""

    average_weekly_wage: Decimal = Decimal("0")

    @property
    def annual_wage(self) -> Decimal:
        return self.average_weekly_wage * WEEKS_PER_YEAR


@dataclass(frozen=True)
class Claim:
    """
    A compensation claim.

    Contract: frozen.  ``irn`` is the internal reference number used as the
    key for every record the engine writes.
    """

    irn: str
    display_irn: str
    worker_id: str
    incident_type: IncidentType
    incident_date: date | None = None

    @property
    def is_injury(self) -> bool:
        return self.incident_type is IncidentType.INJURY

    @property
    def is_death(self) -> bool:
        return self.incident_type is IncidentType.DEATH

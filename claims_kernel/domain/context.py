"""
Claim context (``claims_kernel.domain.context``).

Everything the calculators and the document gate need for one claim,
gathered by the ClaimContextResolver in a single pass: the claim, the
worker, dependants, the wage record, submitted documents, and whatever a
previous draft or finalize persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from claims_kernel.domain.claim import Claim, Dependant, EmploymentDetails, Worker


@dataclass(frozen=True)
class PersistedChecklistRow:
    """A checklist row as written by an earlier save."""

    criterion: str
    factor: Decimal
    doctor_percentage: Decimal
    compensation: Decimal


@dataclass(frozen=True)
class PriorAdjustments:
    """Adjustments and narrative restored from an earlier save."""

    medical_expenses: Decimal = Decimal("0")
    misc_expenses: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    deduction_notes: str = ""
    findings: str = ""
    recommendations: str = ""
    compensation_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class ClaimContext:
    """
    Read-only inputs for one claim.

    Contract: frozen; derived fresh on every load and discarded on close.
    """

    claim: Claim
    worker: Worker
    dependants: tuple[Dependant, ...]
    employment: EmploymentDetails
    submitted_documents: tuple[str, ...]
    persisted_checklist: tuple[PersistedChecklistRow, ...] = ()
    prior_adjustments: PriorAdjustments | None = None

    @property
    def irn(self) -> str:
        return self.claim.irn

    @property
    def annual_wage(self) -> Decimal:
        return self.employment.annual_wage

"""
claims_engines.compensation -- Claim-level calculation result.

Responsibility:
    Select the injury or death calculator by incident type and assemble
    one ``CalculationResult`` from the claim context, reference data,
    the current checklist rows and the officer's adjustments.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Called on every
    recompute, so it must stay side-effect free and cheap.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from claims_kernel.domain.claim import IncidentType
from claims_kernel.domain.context import ClaimContext
from claims_kernel.domain.reference import ReferenceData
from claims_kernel.domain.values import ZERO
from claims_engines.death import (
    ChildBenefit,
    DeathSummary,
    DependantShare,
    child_benefit_schedule,
    compute_splits,
    death_base_amount,
    death_total,
)
from claims_engines.injury import ChecklistRow, InjurySummary, injury_total, summarize


@dataclass(frozen=True)
class Adjustments:
    medical: Decimal = ZERO
    misc: Decimal = ZERO
    deductions: Decimal = ZERO


@dataclass(frozen=True)
class CalculationResult:
    """
    Outcome of a compensation calculation.

    Exactly one of ``injury`` / ``death`` is set, matching
    ``incident_type``.  ``child_benefits`` is informational and is not
    part of ``final_amount``.
    """

    incident_type: IncidentType
    annual_wage: Decimal
    adjustments: Adjustments
    final_amount: Decimal
    injury: InjurySummary | None = None
    death: DeathSummary | None = None
    shares: tuple[DependantShare, ...] = ()
    child_benefits: tuple[ChildBenefit, ...] = ()

    @property
    def base_amount(self) -> Decimal:
        if self.death is not None:
            return self.death.base_amount
        return ZERO


def calculate(
    context: ClaimContext,
    reference: ReferenceData,
    rows: Sequence[ChecklistRow],
    adjustments: Adjustments,
) -> CalculationResult:
    annual = context.annual_wage
    if context.claim.incident_type is IncidentType.INJURY:
        return CalculationResult(
            incident_type=IncidentType.INJURY,
            annual_wage=annual,
            adjustments=adjustments,
            final_amount=injury_total(
                rows=rows,
                medical=adjustments.medical,
                misc=adjustments.misc,
                deductions=adjustments.deductions,
            ),
            injury=summarize(rows),
        )

    params = reference.parameters
    base = death_base_amount(
        annual_earnings=annual,
        minimum=params.min_compensation_death,
        maximum=params.max_compensation_death,
    )
    total = death_total(
        base_amount=base,
        medical=adjustments.medical,
        misc=adjustments.misc,
        deductions=adjustments.deductions,
    )
    incident_date = context.claim.incident_date
    return CalculationResult(
        incident_type=IncidentType.DEATH,
        annual_wage=annual,
        adjustments=adjustments,
        final_amount=total,
        death=DeathSummary(annual_earnings=annual, base_amount=base),
        shares=compute_splits(
            worker=context.worker,
            dependants=context.dependants,
            base_amount=base,
            final_total=total,
            incident_date=incident_date,
        ),
        child_benefits=child_benefit_schedule(
            dependants=context.dependants,
            incident_date=incident_date,
            weekly_rate=params.weekly_compensation_per_child,
        ),
    )

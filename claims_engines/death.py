"""
claims_engines.death -- Death compensation calculator.

Responsibility:
    Compute the statutory base amount for a death claim, apportion it
    among the spouse, children and additional dependants through a fixed
    eight-case split table, rescale the shares to the adjusted total, and
    build the informational weekly child-benefit schedule.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import claims_kernel/domain types.

Invariants enforced:
    - ``base = 8 * annual`` when ``annual < MinCompensationAmountDeath``
      (strict), else ``MaxCompensationAmountDeath``.
    - The split is a table lookup on (spouse, any child, any additional);
      all eight cases are enumerated in ``SPLIT_TABLE``.
    - Group shares are ``round2(portion * base / count)``; final shares
      are ``round2(final_total * share / base)``.  Rounding drift between
      the sum of final shares and the final total is not reconciled; it
      stays within 0.02 per dependant.
    - Child benefit rows exist only for children whose 16th birthday is
      strictly after the incident date.  The schedule never feeds the
      total.

Failure modes:
    - A zero base yields zero final shares and zero percentages.
    - Children without a date of birth, and claims without an incident
      date, produce no child-benefit rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from claims_kernel.domain.claim import Dependant, DependantCategory, Worker
from claims_kernel.domain.values import (
    ZERO,
    add_years,
    calculate_age,
    round2,
    round_places,
)
from claims_engines.tracer import traced_engine

DEATH_MULTIPLIER = Decimal("8")
CHILD_BENEFIT_AGE = 16

_HUNDRED = Decimal("100")
_SEVEN = Decimal("7")


@dataclass(frozen=True)
class SplitRule:
    """Portions of the base amount owned by each group."""

    spouse: Decimal = ZERO
    children: Decimal = ZERO
    additional: Decimal = ZERO

    @property
    def distributes(self) -> bool:
        return (self.spouse + self.children + self.additional) > 0


_NONE = SplitRule()
_HALF = Decimal("0.5")
_QUARTER = Decimal("0.25")
_WHOLE = Decimal("1")

# (spouse present, any child, any additional) -> portions
SPLIT_TABLE: dict[tuple[bool, bool, bool], SplitRule] = {
    (False, False, False): _NONE,
    (True, False, False): SplitRule(spouse=_WHOLE),
    (True, False, True): SplitRule(spouse=_HALF, additional=_HALF),
    (True, True, False): SplitRule(spouse=_HALF, children=_HALF),
    (True, True, True): SplitRule(spouse=_HALF, children=_QUARTER, additional=_QUARTER),
    (False, True, False): SplitRule(children=_WHOLE),
    (False, True, True): SplitRule(children=_HALF, additional=_HALF),
    # additional dependants alone are not recognised claimants
    (False, False, True): _NONE,
}


@dataclass(frozen=True)
class DeathSummary:
    annual_earnings: Decimal
    base_amount: Decimal


@dataclass(frozen=True)
class DependantShare:
    """
    One claimant's share of a death award.

    ``dependant_id`` is None for the spouse.  ``original_amount`` is the
    base-proportional share; ``final_amount`` is rescaled to the adjusted
    total.
    """

    category: DependantCategory
    dependant_id: str | None
    name: str
    date_of_birth: date | None
    age_at_incident: int | None
    original_amount: Decimal
    final_amount: Decimal
    percentage: int


@dataclass(frozen=True)
class ChildBenefit:
    """Weekly benefit owed to a child until its 16th birthday."""

    dependant_id: str
    name: str
    date_of_birth: date
    age_at_incident: int
    days_until_16: int
    weeks_until_16: Decimal
    benefit: Decimal


@traced_engine("death_base", "1.0", fingerprint_fields=("annual_earnings", "minimum", "maximum"))
def death_base_amount(
    *,
    annual_earnings: Decimal,
    minimum: Decimal,
    maximum: Decimal,
) -> Decimal:
    """Base award: eight years of earnings below the minimum, else the cap."""
    if annual_earnings < minimum:
        return DEATH_MULTIPLIER * annual_earnings
    return maximum


def split_rule_for(
    spouse_present: bool, child_count: int, additional_count: int
) -> SplitRule:
    return SPLIT_TABLE[(spouse_present, child_count > 0, additional_count > 0)]


def _age_at(dob: date | None, reference: date | None) -> int | None:
    if dob is None or reference is None:
        return None
    return calculate_age(dob, reference)


def _percentage(share: Decimal, base: Decimal) -> int:
    if base == 0:
        return 0
    return int(round_places(share / base * _HUNDRED, 0))


def _rescale(share: Decimal, base: Decimal, final_total: Decimal) -> Decimal:
    if base == 0:
        return ZERO
    return round2(final_total * share / base)


@traced_engine("death_split", "1.0", fingerprint_fields=("base_amount", "final_total"))
def compute_splits(
    *,
    worker: Worker,
    dependants: Sequence[Dependant],
    base_amount: Decimal,
    final_total: Decimal,
    incident_date: date | None = None,
) -> tuple[DependantShare, ...]:
    """Apportion ``base_amount`` among the spouse and dependants.

    Spouse first, then children, then additional dependants, each group in
    roster order.  Returns an empty tuple when the table prescribes no
    distribution.
    """
    children = [d for d in dependants if d.category is DependantCategory.CHILD]
    additional = [d for d in dependants if d.category is DependantCategory.ADDITIONAL]
    rule = split_rule_for(worker.has_spouse, len(children), len(additional))
    if not rule.distributes:
        return ()

    shares: list[DependantShare] = []

    def add(
        category: DependantCategory,
        dependant_id: str | None,
        name: str,
        dob: date | None,
        original: Decimal,
    ) -> None:
        shares.append(
            DependantShare(
                category=category,
                dependant_id=dependant_id,
                name=name,
                date_of_birth=dob,
                age_at_incident=_age_at(dob, incident_date),
                original_amount=original,
                final_amount=_rescale(original, base_amount, final_total),
                percentage=_percentage(original, base_amount),
            )
        )

    if rule.spouse > 0 and worker.spouse is not None:
        add(
            DependantCategory.SPOUSE,
            None,
            worker.spouse.full_name,
            worker.spouse.date_of_birth,
            round2(base_amount * rule.spouse),
        )

    for portion, group, category in (
        (rule.children, children, DependantCategory.CHILD),
        (rule.additional, additional, DependantCategory.ADDITIONAL),
    ):
        if portion <= 0 or not group:
            continue
        each = round2(base_amount * portion / len(group))
        for d in group:
            add(category, d.dependant_id, d.full_name, d.date_of_birth, each)

    return tuple(shares)


@traced_engine("child_benefit", "1.0", fingerprint_fields=("incident_date", "weekly_rate"))
def child_benefit_schedule(
    *,
    dependants: Sequence[Dependant],
    incident_date: date | None,
    weekly_rate: Decimal,
) -> tuple[ChildBenefit, ...]:
    """Weekly benefit rows for children still under 16 at the incident."""
    if incident_date is None:
        return ()

    rows: list[ChildBenefit] = []
    for d in dependants:
        if not d.is_child or d.date_of_birth is None:
            continue
        sixteenth = add_years(d.date_of_birth, CHILD_BENEFIT_AGE)
        if sixteenth <= incident_date:
            continue
        days = max(0, (sixteenth - incident_date).days)
        weeks = round_places(Decimal(days) / _SEVEN, 3)
        rows.append(
            ChildBenefit(
                dependant_id=d.dependant_id,
                name=d.full_name,
                date_of_birth=d.date_of_birth,
                age_at_incident=calculate_age(d.date_of_birth, incident_date),
                days_until_16=days,
                weeks_until_16=weeks,
                benefit=round2(weekly_rate * weeks),
            )
        )
    return tuple(rows)


@traced_engine("death_total", "1.0", fingerprint_fields=("base_amount", "medical", "misc", "deductions"))
def death_total(
    *,
    base_amount: Decimal,
    medical: Decimal,
    misc: Decimal,
    deductions: Decimal,
) -> Decimal:
    """Claim-level death total, floored at zero."""
    return max(ZERO, round2(base_amount + medical + misc - deductions))

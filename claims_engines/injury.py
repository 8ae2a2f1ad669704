"""
claims_engines.injury -- Injury checklist and compensation calculator.

Responsibility:
    Build the per-claim injury checklist from the statutory criteria list,
    merge previously persisted rows into it, apply checklist edits, and
    compute per-row compensation and the claim-level injury total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import claims_kernel/domain types.

Invariants enforced:
    - Row compensation is ``ceil(((A * 8 * p * f) / 100) / 100)``: the two
      divisions are evaluated literally in Decimal and the only rounding is
      the ceiling at the end.
    - After a merge, ``checked`` is true exactly when the row carries a
      percentage or a compensation.
    - Unchecking a row zeroes percentage, calculation string and
      compensation, including a manually overridden compensation.
    - A manual override forces ``checked`` and leaves percentage and
      calculation string as they were.
    - Rows are immutable; every edit returns a new tuple.

Failure modes:
    - InvalidPercentageError for a doctor percentage outside [0, 100].
    - UnknownCriterionError when an edit names a criterion not on the
      checklist.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from claims_kernel.domain.context import PersistedChecklistRow
from claims_kernel.domain.reference import InjuryCriterion
from claims_kernel.domain.values import (
    ZERO,
    ceil_whole,
    format_number,
    parse_numeric,
    round2,
)
from claims_kernel.exceptions import InvalidPercentageError, UnknownCriterionError
from claims_engines.tracer import traced_engine

NO_CALCULATION = "--"

_EIGHT = Decimal("8")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ChecklistRow:
    """One statutory injury criterion as assessed for a claim."""

    criterion: str
    factor: Decimal
    checked: bool = False
    doctor_percentage: Decimal = ZERO
    calculation: str = NO_CALCULATION
    compensation: Decimal = ZERO

    @property
    def is_compensable(self) -> bool:
        return self.checked and self.compensation > 0


@dataclass(frozen=True)
class InjurySummary:
    """Checked rows and their compensation sum."""

    selected_rows: tuple[ChecklistRow, ...]
    row_sum: Decimal


@traced_engine("injury_row", "1.0", fingerprint_fields=("annual_wage", "doctor_percentage", "factor"))
def injury_row_compensation(
    *,
    annual_wage: Decimal,
    doctor_percentage: Decimal,
    factor: Decimal,
) -> Decimal:
    """Per-row compensation, rounded up to a whole amount."""
    raw = ((annual_wage * _EIGHT * doctor_percentage * factor) / _HUNDRED) / _HUNDRED
    return max(ZERO, ceil_whole(raw))


def calculation_string(annual_wage: Decimal, doctor_percentage: Decimal, factor: Decimal) -> str:
    """The formula with values substituted, as shown on the checklist."""
    return (
        f"(({format_number(annual_wage)}*8*{format_number(doctor_percentage)}"
        f"*{format_number(factor)})/100)/100"
    )


def build_checklist(criteria: Iterable[InjuryCriterion]) -> tuple[ChecklistRow, ...]:
    """Fresh, unchecked rows in criteria order."""
    return tuple(ChecklistRow(criterion=c.key, factor=c.factor) for c in criteria)


@traced_engine("injury_merge", "1.0", fingerprint_fields=("annual_wage",))
def merge_checklist(
    *,
    criteria: Sequence[InjuryCriterion],
    persisted: Sequence[PersistedChecklistRow],
    annual_wage: Decimal,
) -> tuple[ChecklistRow, ...]:
    """Left join of the criteria list with persisted rows, keyed by label.

    Persisted rows whose criterion is no longer on the list are dropped.
    The persisted compensation is kept as stored, not recomputed.
    """
    by_label: dict[str, PersistedChecklistRow] = {}
    for p in persisted:
        by_label.setdefault(p.criterion, p)

    rows: list[ChecklistRow] = []
    for criterion in criteria:
        match = by_label.get(criterion.key)
        if match is None:
            rows.append(ChecklistRow(criterion=criterion.key, factor=criterion.factor))
            continue
        factor = match.factor if match.factor != 0 else criterion.factor
        checked = match.doctor_percentage > 0 or match.compensation > 0
        rows.append(
            ChecklistRow(
                criterion=criterion.key,
                factor=factor,
                checked=checked,
                doctor_percentage=match.doctor_percentage,
                calculation=(
                    calculation_string(annual_wage, match.doctor_percentage, factor)
                    if checked
                    else NO_CALCULATION
                ),
                compensation=match.compensation,
            )
        )
    return tuple(rows)


def _index_of(rows: Sequence[ChecklistRow], criterion: str) -> int:
    for i, row in enumerate(rows):
        if row.criterion == criterion:
            return i
    raise UnknownCriterionError(criterion)


def _replace_at(
    rows: Sequence[ChecklistRow], index: int, row: ChecklistRow
) -> tuple[ChecklistRow, ...]:
    updated = list(rows)
    updated[index] = row
    return tuple(updated)


def set_checked(
    rows: Sequence[ChecklistRow], criterion: str, checked: bool
) -> tuple[ChecklistRow, ...]:
    """Tick or untick a row.  Unticking always zeroes it."""
    i = _index_of(rows, criterion)
    row = rows[i]
    if checked:
        return _replace_at(rows, i, replace(row, checked=True))
    return _replace_at(
        rows,
        i,
        replace(
            row,
            checked=False,
            doctor_percentage=ZERO,
            calculation=NO_CALCULATION,
            compensation=ZERO,
        ),
    )


def set_doctor_percentage(
    rows: Sequence[ChecklistRow],
    criterion: str,
    percentage: Any,
    annual_wage: Decimal,
) -> tuple[ChecklistRow, ...]:
    """Record the doctor-assessed percentage for a row.

    A positive percentage ticks the row.  A ticked row has its calculation
    string and compensation recomputed.
    """
    i = _index_of(rows, criterion)
    pct = parse_numeric(percentage)
    if pct < 0 or pct > _HUNDRED:
        raise InvalidPercentageError(criterion, str(percentage))

    row = rows[i]
    checked = row.checked or pct > 0
    row = replace(row, doctor_percentage=pct, checked=checked)
    if checked:
        row = replace(
            row,
            calculation=calculation_string(annual_wage, pct, row.factor),
            compensation=injury_row_compensation(
                annual_wage=annual_wage, doctor_percentage=pct, factor=row.factor
            ),
        )
    return _replace_at(rows, i, row)


def override_compensation(
    rows: Sequence[ChecklistRow], criterion: str, amount: Any
) -> tuple[ChecklistRow, ...]:
    """Manually set a row's compensation (clamped to >= 0); ticks the row."""
    i = _index_of(rows, criterion)
    value = max(ZERO, parse_numeric(amount))
    return _replace_at(rows, i, replace(rows[i], compensation=value, checked=True))


def summarize(rows: Sequence[ChecklistRow]) -> InjurySummary:
    selected = tuple(r for r in rows if r.checked)
    return InjurySummary(
        selected_rows=selected,
        row_sum=sum((r.compensation for r in selected), ZERO),
    )


@traced_engine("injury_total", "1.0", fingerprint_fields=("medical", "misc", "deductions"))
def injury_total(
    *,
    rows: Sequence[ChecklistRow],
    medical: Decimal,
    misc: Decimal,
    deductions: Decimal,
) -> Decimal:
    """Claim-level injury total, floored at zero."""
    row_sum = summarize(rows).row_sum
    return max(ZERO, round2(row_sum + medical + misc - deductions))


def rows_to_persist(rows: Sequence[ChecklistRow]) -> tuple[ChecklistRow, ...]:
    """Rows worth writing back: ticked, or carrying a percentage or amount."""
    return tuple(
        r for r in rows if r.checked or r.doctor_percentage > 0 or r.compensation > 0
    )

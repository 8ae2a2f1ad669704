"""
Module: claims_engines
Responsibility:
    Package entrypoint re-exporting the pure calculators: injury checklist,
    death split, document gate, accept-preview gate and the claim-level
    result.  Canonical import surface for ``claims_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import claims_kernel/domain (and sibling engine modules).
    MUST NOT import claims_services.

Invariants enforced:
    - Purity: engines never read the clock; dates are passed in.
    - Decimal-only arithmetic for every amount.
    - Every public calculator is wrapped in ``@traced_engine``.
"""

from claims_engines.compensation import Adjustments, CalculationResult, calculate
from claims_engines.death import (
    SPLIT_TABLE,
    ChildBenefit,
    DeathSummary,
    DependantShare,
    SplitRule,
    child_benefit_schedule,
    compute_splits,
    death_base_amount,
    death_total,
    split_rule_for,
)
from claims_engines.documents import DocumentStatus, evaluate_documents
from claims_engines.injury import (
    NO_CALCULATION,
    ChecklistRow,
    InjurySummary,
    build_checklist,
    calculation_string,
    injury_row_compensation,
    injury_total,
    merge_checklist,
    override_compensation,
    rows_to_persist,
    set_checked,
    set_doctor_percentage,
    summarize,
)
from claims_engines.review import (
    AcceptPreviewEvaluation,
    ValidationReason,
    evaluate_accept_preview,
    next_state,
    resolve_transition,
)

__all__ = [
    "AcceptPreviewEvaluation",
    "Adjustments",
    "CalculationResult",
    "ChecklistRow",
    "ChildBenefit",
    "DeathSummary",
    "DependantShare",
    "DocumentStatus",
    "InjurySummary",
    "NO_CALCULATION",
    "SPLIT_TABLE",
    "SplitRule",
    "ValidationReason",
    "build_checklist",
    "calculate",
    "calculation_string",
    "child_benefit_schedule",
    "compute_splits",
    "death_base_amount",
    "death_total",
    "evaluate_accept_preview",
    "evaluate_documents",
    "injury_row_compensation",
    "injury_total",
    "merge_checklist",
    "next_state",
    "override_compensation",
    "resolve_transition",
    "rows_to_persist",
    "set_checked",
    "set_doctor_percentage",
    "split_rule_for",
    "summarize",
]

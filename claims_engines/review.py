"""
claims_engines.review -- Accept-preview gate and review state transitions.

Responsibility:
    Decide whether a claim may enter the accept preview and resolve
    review state transitions against ``CLAIM_REVIEW_WORKFLOW``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The orchestration
    (persisting, locking, status propagation) lives in
    ``claims_services.claim_review_service``.

Invariants enforced:
    - Every failing guard is reported; evaluation never stops at the
      first failure.
    - Validation failures are values, never exceptions.
    - Only transitions declared on the workflow are allowed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from claims_kernel.domain.claim import IncidentType
from claims_kernel.domain.workflow import (
    CLAIM_REVIEW_WORKFLOW,
    COMPENSABLE_INJURY_ROW,
    FINDINGS_RECORDED,
    HARD_MANDATORY_DOCUMENTS_PRESENT,
    RECOMMENDATIONS_RECORDED,
    ReviewAction,
    ReviewState,
    Transition,
    Workflow,
)
from claims_kernel.exceptions import InvalidTransitionError
from claims_engines.documents import DocumentStatus
from claims_engines.injury import ChecklistRow
from claims_engines.tracer import traced_engine


@dataclass(frozen=True)
class ValidationReason:
    """A failed accept guard, with the message shown to the officer."""

    code: str
    message: str


@dataclass(frozen=True)
class AcceptPreviewEvaluation:
    reasons: tuple[ValidationReason, ...] = ()

    @property
    def allowed(self) -> bool:
        return not self.reasons

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(r.code for r in self.reasons)

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(r.message for r in self.reasons)


@traced_engine("accept_preview_gate", "1.0", fingerprint_fields=("incident_type",))
def evaluate_accept_preview(
    *,
    incident_type: IncidentType,
    findings: str,
    recommendations: str,
    documents: DocumentStatus,
    rows: Sequence[ChecklistRow] = (),
) -> AcceptPreviewEvaluation:
    """Check every accept guard and collect the failures."""
    reasons: list[ValidationReason] = []

    if not (findings or "").strip():
        reasons.append(
            ValidationReason(
                FINDINGS_RECORDED.name,
                "Please fill in Findings before accepting.",
            )
        )
    if not (recommendations or "").strip():
        reasons.append(
            ValidationReason(
                RECOMMENDATIONS_RECORDED.name,
                "Please fill in Recommendations before accepting.",
            )
        )
    if documents.blocks_accept:
        reasons.append(
            ValidationReason(
                HARD_MANDATORY_DOCUMENTS_PRESENT.name,
                "Mandatory documents missing: "
                + ", ".join(documents.missing_hard_mandatory),
            )
        )
    if incident_type is IncidentType.INJURY and not any(r.is_compensable for r in rows):
        reasons.append(
            ValidationReason(
                COMPENSABLE_INJURY_ROW.name,
                "Please select at least one injury criteria (with a non-zero value) "
                "before accepting.",
            )
        )

    return AcceptPreviewEvaluation(reasons=tuple(reasons))


def resolve_transition(
    irn: str,
    current: ReviewState,
    action: ReviewAction,
    to_state: ReviewState | None = None,
    workflow: Workflow = CLAIM_REVIEW_WORKFLOW,
) -> Transition:
    """Find the declared transition or raise InvalidTransitionError."""
    transition = workflow.find_transition(
        current.value,
        action.value,
        to_state.value if to_state is not None else None,
    )
    if transition is None:
        raise InvalidTransitionError(irn, current.value, action.value)
    return transition


def next_state(
    irn: str,
    current: ReviewState,
    action: ReviewAction,
    to_state: ReviewState | None = None,
) -> ReviewState:
    return ReviewState(resolve_transition(irn, current, action, to_state).to_state)

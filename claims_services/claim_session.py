"""
claims_services.claim_session -- In-memory state of one claim under review.

Responsibility:
    Holds the editable state of a loaded claim (checklist rows, expenses,
    deduction notes, findings, recommendations) together with its review
    state, and recomputes the calculation result and document status on
    demand.

Architecture position:
    Services layer.  No I/O: loading and saving are done by
    ``ClaimReviewService``; this object is what they load into and save
    from.

Invariants enforced:
    - ``recompute()`` and ``document_status()`` are pure functions of the
      current state; calling them repeatedly has no side effects.
    - Any edit made while in ACCEPT_PREVIEW drops the preview and returns
      to the state the preview was entered from, so a stale preview can
      never be finalized.
    - A finalized session rejects further edits (InvalidTransitionError).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from claims_engines import injury
from claims_engines.compensation import Adjustments, CalculationResult, calculate
from claims_engines.documents import DocumentStatus, evaluate_documents
from claims_engines.injury import ChecklistRow
from claims_engines.review import AcceptPreviewEvaluation
from claims_kernel.domain.claim import IncidentType
from claims_kernel.domain.context import ClaimContext
from claims_kernel.domain.reference import ReferenceData
from claims_kernel.domain.values import ZERO, parse_numeric
from claims_kernel.domain.workflow import ReviewState
from claims_kernel.exceptions import InvalidTransitionError
from claims_kernel.logging_config import get_logger
from claims_config.schema import DocumentChecklist

logger = get_logger("services.claim_session")

_EDIT_ACTION = "edit"


class ClaimSession:
    """
    Editable calculation state for one loaded claim.

    Created by ``ClaimReviewService.load_claim``; discarded when the claim
    is closed or reloaded.
    """

    def __init__(
        self,
        context: ClaimContext,
        reference: ReferenceData,
        checklist: DocumentChecklist,
    ):
        self.context = context
        self.reference = reference
        self.checklist = checklist
        self.state = ReviewState.LOADED
        self.preview_origin: ReviewState | None = None
        self.last_evaluation: AcceptPreviewEvaluation | None = None

        self.rows: tuple[ChecklistRow, ...] = ()
        if context.claim.is_injury:
            self.rows = injury.merge_checklist(
                criteria=reference.criteria,
                persisted=context.persisted_checklist,
                annual_wage=context.annual_wage,
            )

        prior = context.prior_adjustments
        self.medical_expenses: Decimal = prior.medical_expenses if prior else ZERO
        self.misc_expenses: Decimal = prior.misc_expenses if prior else ZERO
        self.deductions: Decimal = prior.deductions if prior else ZERO
        self.deduction_notes: str = prior.deduction_notes if prior else ""
        self.findings: str = prior.findings if prior else ""
        self.recommendations: str = prior.recommendations if prior else ""

    @property
    def irn(self) -> str:
        return self.context.irn

    @property
    def incident_type(self) -> IncidentType:
        return self.context.claim.incident_type

    @property
    def adjustments(self) -> Adjustments:
        return Adjustments(
            medical=self.medical_expenses,
            misc=self.misc_expenses,
            deductions=self.deductions,
        )

    # -- pure views ------------------------------------------------------

    def recompute(self) -> CalculationResult:
        return calculate(self.context, self.reference, self.rows, self.adjustments)

    def document_status(self) -> DocumentStatus:
        return evaluate_documents(
            required=self.checklist.required,
            hard_mandatory=self.checklist.hard_mandatory,
            submitted=self.context.submitted_documents,
        )

    # -- edits -------------------------------------------------------------

    def _before_edit(self) -> None:
        if self.state is ReviewState.ACCEPT_FINALIZED:
            raise InvalidTransitionError(self.irn, self.state.value, _EDIT_ACTION)
        if self.state is ReviewState.ACCEPT_PREVIEW:
            self.state = self.preview_origin or ReviewState.LOADED
            self.preview_origin = None
            logger.info(
                "accept_preview_dropped",
                extra={"irn": self.irn, "state": self.state.value},
            )

    def set_checked(self, criterion: str, checked: bool) -> None:
        self._before_edit()
        self.rows = injury.set_checked(self.rows, criterion, checked)

    def set_doctor_percentage(self, criterion: str, percentage: Any) -> None:
        self._before_edit()
        self.rows = injury.set_doctor_percentage(
            self.rows, criterion, percentage, self.context.annual_wage
        )

    def override_compensation(self, criterion: str, amount: Any) -> None:
        self._before_edit()
        self.rows = injury.override_compensation(self.rows, criterion, amount)

    def set_medical_expenses(self, value: Any) -> None:
        self._before_edit()
        self.medical_expenses = parse_numeric(value)

    def set_misc_expenses(self, value: Any) -> None:
        self._before_edit()
        self.misc_expenses = parse_numeric(value)

    def set_deductions(self, value: Any) -> None:
        self._before_edit()
        self.deductions = parse_numeric(value)

    def set_deduction_notes(self, notes: str) -> None:
        self._before_edit()
        self.deduction_notes = notes or ""

    def set_findings(self, findings: str) -> None:
        self._before_edit()
        self.findings = findings or ""

    def set_recommendations(self, recommendations: str) -> None:
        self._before_edit()
        self.recommendations = recommendations or ""

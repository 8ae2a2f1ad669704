"""
Tests for the accept-preview gate and review transitions.

Each accept guard is checked in isolation, then all together, then the
declared workflow transitions.
"""

from decimal import Decimal

import pytest

from claims_engines.documents import evaluate_documents
from claims_engines.injury import ChecklistRow
from claims_engines.review import evaluate_accept_preview, next_state, resolve_transition
from claims_kernel.domain.claim import IncidentType
from claims_kernel.domain.workflow import CLAIM_REVIEW_WORKFLOW, ReviewAction, ReviewState
from claims_kernel.exceptions import InvalidTransitionError

REQUIRED = ("Form 18", "Supervisor statement", "Death Certificate")
HARD = ("Supervisor statement", "Death Certificate")

COMPENSABLE_ROW = ChecklistRow(
    "Loss of thumb", Decimal("5"), checked=True, doctor_percentage=Decimal("10"),
    compensation=Decimal("6500"),
)


def _documents(submitted=HARD):
    return evaluate_documents(required=REQUIRED, hard_mandatory=HARD, submitted=submitted)


def _evaluate(**overrides):
    kwargs = {
        "incident_type": IncidentType.INJURY,
        "findings": "Fracture confirmed by X-ray",
        "recommendations": "Pay as assessed",
        "documents": _documents(),
        "rows": (COMPENSABLE_ROW,),
    }
    kwargs.update(overrides)
    return evaluate_accept_preview(**kwargs)


class TestAcceptPreviewGate:

    def test_everything_in_order(self):
        evaluation = _evaluate()
        assert evaluation.allowed
        assert evaluation.reasons == ()

    def test_findings_missing(self):
        evaluation = _evaluate(findings="   ")
        assert evaluation.codes == ("findings_recorded",)
        assert evaluation.messages == ("Please fill in Findings before accepting.",)

    def test_recommendations_missing(self):
        evaluation = _evaluate(recommendations="")
        assert evaluation.codes == ("recommendations_recorded",)
        assert evaluation.messages == ("Please fill in Recommendations before accepting.",)

    @pytest.mark.parametrize("blank", ["\t", " \n "])
    def test_whitespace_only_narrative_is_empty(self, blank):
        evaluation = _evaluate(findings=blank, recommendations=blank)
        assert evaluation.codes == ("findings_recorded", "recommendations_recorded")

    def test_hard_mandatory_document_missing(self):
        evaluation = _evaluate(documents=_documents(submitted=["Form 18"]))
        assert evaluation.codes == ("hard_mandatory_documents_present",)
        assert evaluation.messages == (
            "Mandatory documents missing: Supervisor statement, Death Certificate",
        )

    def test_advisory_document_missing_does_not_refuse(self):
        evaluation = _evaluate(documents=_documents(submitted=HARD))
        assert evaluation.allowed

    def test_injury_without_compensable_row(self):
        evaluation = _evaluate(rows=())
        assert evaluation.codes == ("compensable_injury_row",)

    def test_injury_checked_row_with_zero_amount_not_enough(self):
        row = ChecklistRow("Loss of thumb", Decimal("5"), checked=True)
        evaluation = _evaluate(rows=(row,))
        assert evaluation.codes == ("compensable_injury_row",)

    def test_death_needs_no_rows(self):
        evaluation = _evaluate(incident_type=IncidentType.DEATH, rows=())
        assert evaluation.allowed

    def test_every_failure_reported(self):
        evaluation = _evaluate(
            findings="",
            recommendations="",
            documents=_documents(submitted=[]),
            rows=(),
        )
        assert not evaluation.allowed
        assert evaluation.codes == (
            "findings_recorded",
            "recommendations_recorded",
            "hard_mandatory_documents_present",
            "compensable_injury_row",
        )


class TestReviewTransitions:

    @pytest.mark.parametrize(
        "current,action,expected",
        [
            (ReviewState.LOADED, ReviewAction.SAVE_DRAFT, ReviewState.DRAFT_SAVED),
            (ReviewState.DRAFT_SAVED, ReviewAction.SAVE_DRAFT, ReviewState.DRAFT_SAVED),
            (ReviewState.ACCEPT_PREVIEW, ReviewAction.SAVE_DRAFT, ReviewState.DRAFT_SAVED),
            (ReviewState.LOADED, ReviewAction.ACCEPT_PREVIEW, ReviewState.ACCEPT_PREVIEW),
            (ReviewState.DRAFT_SAVED, ReviewAction.ACCEPT_PREVIEW, ReviewState.ACCEPT_PREVIEW),
            (ReviewState.ACCEPT_PREVIEW, ReviewAction.ACCEPT_FINALIZE, ReviewState.ACCEPT_FINALIZED),
        ],
    )
    def test_declared_transitions(self, current, action, expected):
        assert next_state("IRN-1", current, action) == expected

    @pytest.mark.parametrize("origin", [ReviewState.LOADED, ReviewState.DRAFT_SAVED])
    def test_cancel_returns_to_origin(self, origin):
        state = next_state("IRN-1", ReviewState.ACCEPT_PREVIEW, ReviewAction.CANCEL_PREVIEW, origin)
        assert state == origin

    @pytest.mark.parametrize(
        "current,action",
        [
            (ReviewState.LOADED, ReviewAction.ACCEPT_FINALIZE),
            (ReviewState.DRAFT_SAVED, ReviewAction.ACCEPT_FINALIZE),
            (ReviewState.LOADED, ReviewAction.CANCEL_PREVIEW),
            (ReviewState.ACCEPT_PREVIEW, ReviewAction.ACCEPT_PREVIEW),
            (ReviewState.ACCEPT_FINALIZED, ReviewAction.SAVE_DRAFT),
            (ReviewState.ACCEPT_FINALIZED, ReviewAction.ACCEPT_PREVIEW),
        ],
    )
    def test_undeclared_transitions_rejected(self, current, action):
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_state("IRN-1", current, action)
        assert exc_info.value.from_state == current.value
        assert exc_info.value.action == action.value

    def test_finalized_is_terminal(self):
        final = ReviewState.ACCEPT_FINALIZED.value
        assert final in CLAIM_REVIEW_WORKFLOW.terminal_states
        assert not [t for t in CLAIM_REVIEW_WORKFLOW.transitions if t.from_state == final]

    def test_preview_carries_accept_guards(self):
        transition = resolve_transition("IRN-1", ReviewState.DRAFT_SAVED, ReviewAction.ACCEPT_PREVIEW)
        assert [g.name for g in transition.guards] == [
            "findings_recorded",
            "recommendations_recorded",
            "hard_mandatory_documents_present",
            "compensable_injury_row",
        ]
        assert transition.persists is False

    def test_finalize_persists(self):
        transition = resolve_transition(
            "IRN-1", ReviewState.ACCEPT_PREVIEW, ReviewAction.ACCEPT_FINALIZE
        )
        assert transition.persists is True

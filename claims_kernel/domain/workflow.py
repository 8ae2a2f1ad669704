"""
Canonical workflow types (``claims_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for state machines, and the claim review workflow
definition built from them: ``LOADED -> DRAFT_SAVED -> ACCEPT_PREVIEW ->
ACCEPT_FINALIZED``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``services/`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* ``ACCEPT_FINALIZED`` is terminal: it has no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the review engine does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow.

    ``persists=True`` marks transitions that write to the record store.
    """
    from_state: str
    to_state: str
    action: str
    guards: tuple[Guard, ...] = ()
    persists: bool = False


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Initial state {self.initial_state!r} is not a state of {self.name}"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Transition {t.action!r} references an unknown state in {self.name}"
                )

    def find_transition(
        self,
        from_state: str,
        action: str,
        to_state: str | None = None,
    ) -> Transition | None:
        for t in self.transitions:
            if t.from_state != from_state or t.action != action:
                continue
            if to_state is None or t.to_state == to_state:
                return t
        return None


class ReviewState(str, Enum):
    """Engine-local state of a claim under compensation review."""

    LOADED = "loaded"
    DRAFT_SAVED = "draft_saved"
    ACCEPT_PREVIEW = "accept_preview"
    ACCEPT_FINALIZED = "accept_finalized"


class ReviewAction(str, Enum):
    SAVE_DRAFT = "save_draft"
    ACCEPT_PREVIEW = "accept_preview"
    CANCEL_PREVIEW = "cancel_preview"
    ACCEPT_FINALIZE = "accept_finalize"


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

FINDINGS_RECORDED = Guard(
    name="findings_recorded",
    description="Findings are not empty",
)

RECOMMENDATIONS_RECORDED = Guard(
    name="recommendations_recorded",
    description="Recommendations are not empty",
)

HARD_MANDATORY_DOCUMENTS_PRESENT = Guard(
    name="hard_mandatory_documents_present",
    description="No hard-mandatory document is missing",
)

COMPENSABLE_INJURY_ROW = Guard(
    name="compensable_injury_row",
    description="Injury claims have at least one checked row with compensation",
)

ACCEPT_GUARDS = (
    FINDINGS_RECORDED,
    RECOMMENDATIONS_RECORDED,
    HARD_MANDATORY_DOCUMENTS_PRESENT,
    COMPENSABLE_INJURY_ROW,
)


_LOADED = ReviewState.LOADED.value
_DRAFT = ReviewState.DRAFT_SAVED.value
_PREVIEW = ReviewState.ACCEPT_PREVIEW.value
_FINAL = ReviewState.ACCEPT_FINALIZED.value

CLAIM_REVIEW_WORKFLOW = Workflow(
    name="claim_compensation_review",
    description="Compensation calculation review of a single claim",
    initial_state=_LOADED,
    states=(_LOADED, _DRAFT, _PREVIEW, _FINAL),
    transitions=(
        Transition(_LOADED, _DRAFT, action=ReviewAction.SAVE_DRAFT.value, persists=True),
        Transition(_DRAFT, _DRAFT, action=ReviewAction.SAVE_DRAFT.value, persists=True),
        Transition(_PREVIEW, _DRAFT, action=ReviewAction.SAVE_DRAFT.value, persists=True),
        Transition(_LOADED, _PREVIEW, action=ReviewAction.ACCEPT_PREVIEW.value, guards=ACCEPT_GUARDS),
        Transition(_DRAFT, _PREVIEW, action=ReviewAction.ACCEPT_PREVIEW.value, guards=ACCEPT_GUARDS),
        # cancel returns to whichever state the preview was entered from
        Transition(_PREVIEW, _LOADED, action=ReviewAction.CANCEL_PREVIEW.value),
        Transition(_PREVIEW, _DRAFT, action=ReviewAction.CANCEL_PREVIEW.value),
        Transition(_PREVIEW, _FINAL, action=ReviewAction.ACCEPT_FINALIZE.value, persists=True),
    ),
    terminal_states=(_FINAL,),
)

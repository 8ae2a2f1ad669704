"""
claims_services.claim_review_service -- Compensation review orchestration.

Responsibility:
    Drives a claim through LOADED -> DRAFT_SAVED -> ACCEPT_PREVIEW ->
    ACCEPT_FINALIZED.  Thin coordinator: context loading is delegated to
    ClaimContextResolver and ReferenceDataLoader, calculation to the pure
    engines, the accept gate to ``claims_engines.review``, and writes to
    the persistence adapter.

Architecture position:
    Services layer.  May import from claims_engines/ (pure engines),
    claims_kernel/ (domain, services) and claims_config/.

Invariants enforced:
    - Only transitions declared on CLAIM_REVIEW_WORKFLOW are executed.
    - Accept-preview is a pure gate; a refused preview leaves the state
      unchanged and reports every failing reason.
    - Mutating operations refuse a claim locked by a different actor.
    - One finalize per claim at a time (local in-flight flag).
    - The injected Clock supplies the submission timestamp and "today";
      nothing here reads the system time directly.

Failure modes:
    - ClaimNotFoundError / WorkerNotFoundError / UnsupportedIncidentTypeError
      from load_claim.
    - ReferenceDataUnavailableError when reference data cannot be loaded
      and nothing is cached.
    - MissingClaimContextError from save_draft without an IRN.
    - InvalidTransitionError, FinalizeInProgressError, ClaimLockedError.
    - PersistenceError with the store's own message.
"""

from __future__ import annotations

from claims_engines.compensation import CalculationResult
from claims_engines.review import (
    AcceptPreviewEvaluation,
    evaluate_accept_preview,
    next_state,
)
from claims_kernel.domain.clock import Clock, SystemClock
from claims_kernel.domain.workflow import ReviewAction, ReviewState
from claims_kernel.exceptions import (
    ClaimLockedError,
    FinalizeInProgressError,
    MissingClaimContextError,
)
from claims_kernel.logging_config import LogContext, get_logger
from claims_kernel.services.claim_context_resolver import ClaimContextResolver
from claims_kernel.services.collaborators import ActorIdentity, AdvisoryLock
from claims_kernel.services.record_store import RecordStore
from claims_kernel.services.reference_data_loader import ReferenceDataLoader
from claims_config import EngineConfiguration, get_active_config
from claims_services import persistence_adapter
from claims_services.claim_session import ClaimSession

logger = get_logger("services.claim_review_service")


class ClaimReviewService:
    """
    Loads claims into sessions and moves them through the review workflow.

    Collaborators are injected: the record store, the advisory lock and
    the actor identity.  One service instance may serve many claims
    concurrently; per-claim state lives on the ClaimSession.
    """

    def __init__(
        self,
        store: RecordStore,
        lock: AdvisoryLock,
        identity: ActorIdentity,
        config: EngineConfiguration | None = None,
        clock: Clock | None = None,
        reference_loader: ReferenceDataLoader | None = None,
    ):
        self._store = store
        self._lock = lock
        self._identity = identity
        self._config = config or get_active_config()
        self._clock = clock or SystemClock()
        self._resolver = ClaimContextResolver(store)
        self._reference_loader = reference_loader or ReferenceDataLoader(
            store,
            default_max_child_age=self._config.parameters.default_max_child_age,
        )
        self._finalizing: set[str] = set()

    @property
    def config(self) -> EngineConfiguration:
        return self._config

    # -- load --------------------------------------------------------------

    async def load_claim(self, irn: str) -> ClaimSession:
        """Fetch a claim and build a fresh session in LOADED.

        Loading again discards any in-memory edits and re-enters LOADED.
        """
        with LogContext.bind(claim_irn=irn, actor_id=self._identity.current_actor_id()):
            reference = await self._reference_loader.load()
            context = await self._resolver.resolve(irn)
            checklist = self._config.checklist_for(context.claim.incident_type)
            session = ClaimSession(context, reference, checklist)
            logger.info(
                "claim_loaded",
                extra={
                    "irn": irn,
                    "incident_type": session.incident_type.value,
                    "checklist_rows": len(session.rows),
                },
            )
            return session

    # -- draft -------------------------------------------------------------

    async def save_draft(self, session: ClaimSession | None) -> CalculationResult:
        """Persist the checklist and worker summary without validation.

        Does not touch the external review status.
        """
        if session is None or not session.irn:
            raise MissingClaimContextError("save")

        irn = session.irn
        with LogContext.bind(claim_irn=irn, actor_id=self._identity.current_actor_id()):
            target = next_state(irn, session.state, ReviewAction.SAVE_DRAFT)
            await self._ensure_not_locked_by_other(irn)

            result = session.recompute()
            plan = persistence_adapter.plan_draft(session, result)
            await persistence_adapter.execute(self._store, plan)

            session.state = target
            session.preview_origin = None
            logger.info(
                "draft_saved",
                extra={
                    "irn": irn,
                    "compensation_amount": result.final_amount,
                    "command_count": len(plan.commands),
                },
            )
            return result

    # -- accept ------------------------------------------------------------

    def accept_preview(self, session: ClaimSession) -> AcceptPreviewEvaluation:
        """Run the accept gate; enter ACCEPT_PREVIEW only when it passes."""
        irn = session.irn
        target = next_state(irn, session.state, ReviewAction.ACCEPT_PREVIEW)

        evaluation = evaluate_accept_preview(
            incident_type=session.incident_type,
            findings=session.findings,
            recommendations=session.recommendations,
            documents=session.document_status(),
            rows=session.rows,
        )
        session.last_evaluation = evaluation

        if not evaluation.allowed:
            logger.info(
                "accept_preview_refused",
                extra={
                    "irn": irn,
                    "state": session.state.value,
                    "reasons": list(evaluation.codes),
                },
            )
            return evaluation

        session.preview_origin = session.state
        session.state = target
        logger.info("accept_preview_entered", extra={"irn": irn})
        return evaluation

    def cancel_preview(self, session: ClaimSession) -> None:
        """Leave ACCEPT_PREVIEW for the state it was entered from."""
        origin = session.preview_origin or ReviewState.LOADED
        session.state = next_state(
            session.irn, session.state, ReviewAction.CANCEL_PREVIEW, origin
        )
        session.preview_origin = None
        logger.info(
            "accept_preview_cancelled",
            extra={"irn": session.irn, "state": session.state.value},
        )

    async def accept_finalize(self, session: ClaimSession) -> CalculationResult:
        """Persist the accepted calculation and hand the claim to the next stage.

        Writes the checklist (Injury) or dependant shares, the worker
        summary, the current-stage status and the next-stage review, then
        releases the advisory lock when the current actor is known.
        """
        irn = session.irn
        actor_id = self._identity.current_actor_id()
        if irn in self._finalizing:
            raise FinalizeInProgressError(irn)

        with LogContext.bind(claim_irn=irn, actor_id=actor_id):
            target = next_state(irn, session.state, ReviewAction.ACCEPT_FINALIZE)
            self._finalizing.add(irn)
            try:
                await self._ensure_not_locked_by_other(irn)

                result = session.recompute()
                now = self._clock.now()
                plan = persistence_adapter.plan_finalize(
                    session,
                    result,
                    self._config.status_labels,
                    submitted_at=now,
                    today=now.date(),
                )
                await persistence_adapter.execute(self._store, plan)

                if actor_id:
                    await self._lock.release(irn)

                session.state = target
                session.preview_origin = None
                logger.info(
                    "accept_finalized",
                    extra={
                        "irn": irn,
                        "incident_type": session.incident_type.value,
                        "compensation_amount": result.final_amount,
                        "share_count": len(result.shares),
                        "lock_released": bool(actor_id),
                    },
                )
                return result
            finally:
                self._finalizing.discard(irn)

    def is_finalizing(self, irn: str) -> bool:
        return irn in self._finalizing

    # -- lock --------------------------------------------------------------

    async def _ensure_not_locked_by_other(self, irn: str) -> None:
        holder = await self._lock.status(irn)
        if holder is None:
            return
        if holder != self._identity.current_actor_id():
            logger.warning(
                "claim_locked_by_other",
                extra={"irn": irn, "locked_by": holder},
            )
            raise ClaimLockedError(irn, holder)

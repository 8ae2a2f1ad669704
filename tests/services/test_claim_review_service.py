"""
End-to-end tests for ClaimReviewService.

Drives injury and death claims through load, draft, preview and finalize
against the in-memory record store, with a deterministic clock and a
fixed officer identity.
"""

import asyncio
from decimal import Decimal

import pytest

from claims_kernel.domain.records import RecordTable
from claims_kernel.domain.workflow import ReviewState
from claims_kernel.exceptions import (
    ClaimLockedError,
    ClaimNotFoundError,
    FinalizeInProgressError,
    InvalidTransitionError,
    MissingClaimContextError,
    PersistenceError,
)
from claims_kernel.services.collaborators import FixedActorIdentity, RecordStoreAdvisoryLock
from claims_kernel.services.record_store import InMemoryRecordStore
from claims_services import ClaimReviewService
from tests.conftest import (
    DEATH_IRN,
    INJURY_IRN,
    OFFICER_ID,
    seed_death_claim,
    seed_injury_claim,
)

CHECKLIST = RecordTable.INJURY_CHECKLIST.value
WORKER_DETAILS = RecordTable.COMPENSATION_WORKER_DETAILS.value
PERSON_DETAILS = RecordTable.COMPENSATION_PERSON_DETAILS.value
REVIEWS = RecordTable.CLAIM_REVIEWS.value
NEXT_STAGE = RecordTable.NEXT_STAGE_REVIEWS.value


def _make_service(store, engine_config, deterministic_clock, actor=OFFICER_ID):
    return ClaimReviewService(
        store=store,
        lock=RecordStoreAdvisoryLock(store),
        identity=FixedActorIdentity(actor),
        config=engine_config,
        clock=deterministic_clock,
    )


def _fill_injury(session):
    session.set_doctor_percentage("Loss of thumb", "100")
    session.set_medical_expenses("500")
    session.set_deductions("100")
    session.set_findings("Thumb amputated at the first joint")
    session.set_recommendations("Pay as assessed")


def _fill_narrative(session):
    session.set_findings("Fatal fall from scaffolding")
    session.set_recommendations("Pay dependants per schedule")


class TestLoadClaim:

    @pytest.mark.asyncio
    async def test_fresh_injury_session(self, review_service, memory_store):
        seed_injury_claim(memory_store)

        session = await review_service.load_claim(INJURY_IRN)

        assert session.state is ReviewState.LOADED
        assert [r.criterion for r in session.rows] == ["Loss of arm", "Loss of hand", "Loss of thumb"]
        assert session.recompute().final_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_death_session_has_no_checklist(self, review_service, memory_store):
        seed_death_claim(memory_store)

        session = await review_service.load_claim(DEATH_IRN)

        assert session.rows == ()

    @pytest.mark.asyncio
    async def test_unknown_claim(self, review_service):
        with pytest.raises(ClaimNotFoundError):
            await review_service.load_claim("IRN-404")

    @pytest.mark.asyncio
    async def test_document_status(self, review_service, memory_store):
        seed_injury_claim(memory_store)

        status = (await review_service.load_claim(INJURY_IRN)).document_status()

        assert not status.blocks_accept
        assert "Form 18 Scan" in status.missing
        assert set(status.available) == {"Supervisor statement", "Final medical report"}


class TestInjuryCalculation:

    @pytest.mark.asyncio
    async def test_total_with_adjustments(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        result = session.recompute()

        assert result.injury.row_sum == Decimal("65000")
        assert result.final_amount == Decimal("65400.00")

    @pytest.mark.asyncio
    async def test_recompute_is_pure(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        assert session.recompute() == session.recompute()
        assert memory_store.rows(WORKER_DETAILS) == []


class TestSaveDraft:

    @pytest.mark.asyncio
    async def test_draft_persisted_and_restored(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        session.set_deduction_notes("salary advance")

        result = await review_service.save_draft(session)

        assert session.state is ReviewState.DRAFT_SAVED
        assert result.final_amount == Decimal("65400.00")
        assert len(memory_store.rows(CHECKLIST)) == 1
        assert memory_store.rows(REVIEWS) == []

        reloaded = await review_service.load_claim(INJURY_IRN)
        assert reloaded.state is ReviewState.LOADED
        assert reloaded.recompute().final_amount == Decimal("65400.00")
        assert reloaded.deduction_notes == "salary advance"
        assert reloaded.findings == "Thumb amputated at the first joint"
        thumb = [r for r in reloaded.rows if r.criterion == "Loss of thumb"][0]
        assert thumb.checked
        assert thumb.compensation == Decimal("65000")

    @pytest.mark.asyncio
    async def test_saving_twice_keeps_one_copy(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        await review_service.save_draft(session)
        session.set_checked("Loss of arm", True)
        await review_service.save_draft(session)

        assert len(memory_store.rows(CHECKLIST)) == 2
        assert len(memory_store.rows(WORKER_DETAILS)) == 1

    @pytest.mark.asyncio
    async def test_unticked_row_removed_on_save(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        await review_service.save_draft(session)

        session.set_checked("Loss of thumb", False)
        await review_service.save_draft(session)

        assert memory_store.rows(CHECKLIST) == []

    @pytest.mark.asyncio
    async def test_without_session(self, review_service):
        with pytest.raises(MissingClaimContextError) as exc_info:
            await review_service.save_draft(None)
        assert exc_info.value.operation == "save"

    @pytest.mark.asyncio
    async def test_refused_when_locked_by_other(self, review_service, memory_store, captured_logs):
        seed_injury_claim(memory_store)
        memory_store.seed(REVIEWS, [{"irn": INJURY_IRN, "review_status": "Pending", "locked_by": "officer-99"}])
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        with pytest.raises(ClaimLockedError) as exc_info:
            await review_service.save_draft(session)

        assert exc_info.value.locked_by == "officer-99"
        assert session.state is ReviewState.LOADED
        assert memory_store.rows(WORKER_DETAILS) == []
        assert any(r["message"] == "claim_locked_by_other" for r in captured_logs())

    @pytest.mark.asyncio
    async def test_allowed_when_locked_by_self(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        await RecordStoreAdvisoryLock(memory_store).acquire(INJURY_IRN, OFFICER_ID)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        await review_service.save_draft(session)

        assert session.state is ReviewState.DRAFT_SAVED

    @pytest.mark.asyncio
    async def test_log_carries_claim_context(self, review_service, memory_store, captured_logs):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        await review_service.save_draft(session)

        saved = [r for r in captured_logs() if r["message"] == "draft_saved"]
        assert len(saved) == 1
        assert saved[0]["claim_irn"] == INJURY_IRN
        assert saved[0]["actor_id"] == OFFICER_ID
        assert saved[0]["compensation_amount"] == "65400.00"


class TestAcceptPreview:

    @pytest.mark.asyncio
    async def test_refused_preview_leaves_state(self, review_service, memory_store, captured_logs):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)

        evaluation = review_service.accept_preview(session)

        assert not evaluation.allowed
        assert evaluation.codes == (
            "findings_recorded",
            "recommendations_recorded",
            "compensable_injury_row",
        )
        assert session.state is ReviewState.LOADED
        assert session.last_evaluation is evaluation
        assert any(r["message"] == "accept_preview_refused" for r in captured_logs())

    @pytest.mark.asyncio
    async def test_missing_hard_mandatory_document(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        await memory_store.delete_by_key(RecordTable.ATTACHMENTS.value, {"irn": INJURY_IRN})
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        evaluation = review_service.accept_preview(session)

        assert evaluation.codes == ("hard_mandatory_documents_present",)
        assert evaluation.messages == (
            "Mandatory documents missing: Supervisor statement, Final medical report",
        )

    @pytest.mark.asyncio
    async def test_preview_writes_nothing(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        evaluation = review_service.accept_preview(session)

        assert evaluation.allowed
        assert session.state is ReviewState.ACCEPT_PREVIEW
        assert memory_store.rows(CHECKLIST) == []
        assert memory_store.rows(WORKER_DETAILS) == []

    @pytest.mark.asyncio
    async def test_cancel_returns_to_draft(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        await review_service.save_draft(session)
        review_service.accept_preview(session)

        review_service.cancel_preview(session)

        assert session.state is ReviewState.DRAFT_SAVED
        assert session.preview_origin is None

    @pytest.mark.asyncio
    async def test_cancel_returns_to_loaded(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        review_service.accept_preview(session)

        review_service.cancel_preview(session)

        assert session.state is ReviewState.LOADED

    @pytest.mark.asyncio
    async def test_cancel_outside_preview_rejected(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)

        with pytest.raises(InvalidTransitionError):
            review_service.cancel_preview(session)

    @pytest.mark.asyncio
    async def test_edit_drops_preview(self, review_service, memory_store, captured_logs):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        await review_service.save_draft(session)
        review_service.accept_preview(session)

        session.set_medical_expenses("900")

        assert session.state is ReviewState.DRAFT_SAVED
        assert any(r["message"] == "accept_preview_dropped" for r in captured_logs())
        with pytest.raises(InvalidTransitionError):
            await review_service.accept_finalize(session)

    @pytest.mark.asyncio
    async def test_save_draft_from_preview(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        review_service.accept_preview(session)

        await review_service.save_draft(session)

        assert session.state is ReviewState.DRAFT_SAVED
        assert session.preview_origin is None


class TestAcceptFinalize:

    @pytest.mark.asyncio
    async def test_injury_finalize(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        await RecordStoreAdvisoryLock(memory_store).acquire(INJURY_IRN, OFFICER_ID)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        review_service.accept_preview(session)

        result = await review_service.accept_finalize(session)

        assert session.state is ReviewState.ACCEPT_FINALIZED
        assert result.final_amount == Decimal("65400.00")
        assert memory_store.rows(REVIEWS) == [
            {"irn": INJURY_IRN, "review_status": "CompensationCalculated", "locked_by": None}
        ]
        assert memory_store.rows(NEXT_STAGE) == [
            {
                "irn": INJURY_IRN,
                "review_status": "Pending",
                "submission_date": "2024-06-01T09:30:00+00:00",
                "incident_type": "Injury",
            }
        ]
        assert memory_store.rows(WORKER_DETAILS)[0]["compensation_amount"] == Decimal("65400.00")
        assert not review_service.is_finalizing(INJURY_IRN)

    @pytest.mark.asyncio
    async def test_finalize_releases_lock(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        lock = RecordStoreAdvisoryLock(memory_store)
        await lock.acquire(INJURY_IRN, OFFICER_ID)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        review_service.accept_preview(session)

        await review_service.accept_finalize(session)

        assert await lock.status(INJURY_IRN) is None

    @pytest.mark.asyncio
    async def test_anonymous_finalize_keeps_lock_record(
        self, memory_store, engine_config, deterministic_clock, captured_logs
    ):
        seed_death_claim(memory_store)
        service = _make_service(memory_store, engine_config, deterministic_clock, actor=None)
        session = await service.load_claim(DEATH_IRN)
        _fill_narrative(session)
        service.accept_preview(session)

        await service.accept_finalize(session)

        finalized = [r for r in captured_logs() if r["message"] == "accept_finalized"]
        assert finalized[0]["lock_released"] is False

    @pytest.mark.asyncio
    async def test_finalized_session_is_read_only(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        review_service.accept_preview(session)
        await review_service.accept_finalize(session)

        with pytest.raises(InvalidTransitionError):
            session.set_findings("changed")
        with pytest.raises(InvalidTransitionError):
            await review_service.accept_finalize(session)
        with pytest.raises(InvalidTransitionError):
            await review_service.save_draft(session)

    @pytest.mark.asyncio
    async def test_finalize_requires_preview(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)

        with pytest.raises(InvalidTransitionError):
            await review_service.accept_finalize(session)
        assert memory_store.rows(REVIEWS) == []

    @pytest.mark.asyncio
    async def test_refinalize_after_reload_replaces_rows(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        for _ in range(2):
            session = await review_service.load_claim(INJURY_IRN)
            _fill_injury(session)
            review_service.accept_preview(session)
            await review_service.accept_finalize(session)

        assert len(memory_store.rows(CHECKLIST)) == 1
        assert len(memory_store.rows(WORKER_DETAILS)) == 1
        assert len(memory_store.rows(PERSON_DETAILS)) == 2
        assert len(memory_store.rows(REVIEWS)) == 1
        assert len(memory_store.rows(NEXT_STAGE)) == 1

    @pytest.mark.asyncio
    async def test_locked_by_other(self, review_service, memory_store):
        seed_injury_claim(memory_store)
        session = await review_service.load_claim(INJURY_IRN)
        _fill_injury(session)
        review_service.accept_preview(session)
        await RecordStoreAdvisoryLock(memory_store).acquire(INJURY_IRN, "officer-99")

        with pytest.raises(ClaimLockedError):
            await review_service.accept_finalize(session)

        assert session.state is ReviewState.ACCEPT_PREVIEW
        assert memory_store.rows(NEXT_STAGE) == []
        assert not review_service.is_finalizing(INJURY_IRN)

    @pytest.mark.asyncio
    async def test_store_failure_keeps_preview(self, engine_config, deterministic_clock):
        class NoNextStageStore(InMemoryRecordStore):
            async def upsert_by_key(self, table, key, fields):
                if table == NEXT_STAGE:
                    raise RuntimeError("next-stage table unavailable")
                await super().upsert_by_key(table, key, fields)

        store = NoNextStageStore()
        seed_injury_claim(store)
        service = _make_service(store, engine_config, deterministic_clock)
        session = await service.load_claim(INJURY_IRN)
        _fill_injury(session)
        service.accept_preview(session)

        with pytest.raises(PersistenceError) as exc_info:
            await service.accept_finalize(session)

        assert exc_info.value.store_message == "next-stage table unavailable"
        assert session.state is ReviewState.ACCEPT_PREVIEW
        assert not service.is_finalizing(INJURY_IRN)

    @pytest.mark.asyncio
    async def test_second_finalize_while_in_flight(self, engine_config, deterministic_clock):
        class GatedStore(InMemoryRecordStore):
            def __init__(self):
                super().__init__()
                self.entered = asyncio.Event()
                self.gate = asyncio.Event()

            async def delete_by_key(self, table, key):
                self.entered.set()
                await self.gate.wait()
                return await super().delete_by_key(table, key)

        store = GatedStore()
        seed_injury_claim(store)
        service = _make_service(store, engine_config, deterministic_clock)
        first = await service.load_claim(INJURY_IRN)
        second = await service.load_claim(INJURY_IRN)
        for session in (first, second):
            _fill_injury(session)
            service.accept_preview(session)

        task = asyncio.create_task(service.accept_finalize(first))
        await store.entered.wait()
        assert service.is_finalizing(INJURY_IRN)

        with pytest.raises(FinalizeInProgressError):
            await service.accept_finalize(second)

        store.gate.set()
        await task
        assert first.state is ReviewState.ACCEPT_FINALIZED
        assert second.state is ReviewState.ACCEPT_PREVIEW
        assert not service.is_finalizing(INJURY_IRN)


class TestDeathClaim:

    @pytest.mark.asyncio
    async def test_death_calculation(self, review_service, memory_store):
        seed_death_claim(memory_store)
        session = await review_service.load_claim(DEATH_IRN)
        session.set_misc_expenses("2500")

        result = session.recompute()

        assert result.annual_wage == Decimal("260000")
        assert result.base_amount == Decimal("100000")
        assert result.final_amount == Decimal("102500.00")
        assert [s.original_amount for s in result.shares] == [
            Decimal("50000.00"),
            Decimal("25000.00"),
            Decimal("25000.00"),
        ]
        assert [s.final_amount for s in result.shares] == [
            Decimal("51250.00"),
            Decimal("25625.00"),
            Decimal("25625.00"),
        ]
        assert [b.dependant_id for b in result.child_benefits] == ["D-21"]
        assert result.child_benefits[0].benefit == Decimal("10557.15")

    @pytest.mark.asyncio
    async def test_low_earner_base(self, review_service, memory_store):
        seed_death_claim(memory_store, weekly_wage="300")
        session = await review_service.load_claim(DEATH_IRN)

        result = session.recompute()

        # 300 x 52 = 15600 < 20000
        assert result.base_amount == Decimal("124800")

    @pytest.mark.asyncio
    async def test_death_accepts_without_checklist(self, review_service, memory_store):
        seed_death_claim(memory_store)
        session = await review_service.load_claim(DEATH_IRN)
        _fill_narrative(session)

        assert review_service.accept_preview(session).allowed

        await review_service.accept_finalize(session)

        people = memory_store.rows(PERSON_DETAILS)
        assert [p["relation_to_worker"] for p in people] == ["Spouse", "Daughter", "son"]
        assert memory_store.rows(CHECKLIST) == []
        assert memory_store.rows(NEXT_STAGE)[0]["incident_type"] == "Death"

    @pytest.mark.asyncio
    async def test_refinalize_keeps_same_person_rows(self, review_service, memory_store):
        seed_death_claim(memory_store)
        snapshots = []
        for _ in range(2):
            session = await review_service.load_claim(DEATH_IRN)
            _fill_narrative(session)
            review_service.accept_preview(session)
            await review_service.accept_finalize(session)
            snapshots.append(memory_store.rows(PERSON_DETAILS))

        first, second = snapshots
        assert len(first) == 3
        assert second == first
        assert [p["compensation_amount"] for p in second] == [
            Decimal("50000.00"),
            Decimal("25000.00"),
            Decimal("25000.00"),
        ]
        assert len(memory_store.rows(WORKER_DETAILS)) == 1
        assert len(memory_store.rows(NEXT_STAGE)) == 1

"""Tests for ClaimContextResolver."""

from datetime import date
from decimal import Decimal

import pytest

from claims_kernel.domain.claim import IncidentType
from claims_kernel.domain.records import RecordTable
from claims_kernel.exceptions import (
    ClaimNotFoundError,
    UnsupportedIncidentTypeError,
    WorkerNotFoundError,
)
from claims_kernel.services.claim_context_resolver import ClaimContextResolver
from tests.conftest import (
    DEATH_IRN,
    INJURY_HARD_MANDATORY,
    INJURY_IRN,
    claim_row,
    seed_death_claim,
    seed_injury_claim,
    worker_row,
)


class TestClaimContextResolver:

    @pytest.mark.asyncio
    async def test_injury_claim(self, memory_store):
        seed_injury_claim(memory_store)

        context = await ClaimContextResolver(memory_store).resolve(INJURY_IRN)

        assert context.irn == INJURY_IRN
        assert context.claim.incident_type is IncidentType.INJURY
        assert context.claim.incident_date == date(2024, 3, 15)
        assert context.worker.full_name == "John Kila"
        assert context.worker.spouse.full_name == "Mary Kila"
        assert context.annual_wage == Decimal("162500")
        assert [d.dependant_id for d in context.dependants] == ["D-1"]
        assert context.submitted_documents == tuple(INJURY_HARD_MANDATORY)
        assert context.persisted_checklist == ()
        assert context.prior_adjustments is None

    @pytest.mark.asyncio
    async def test_death_claim_dependants(self, memory_store):
        seed_death_claim(memory_store)

        context = await ClaimContextResolver(memory_store).resolve(DEATH_IRN)

        assert context.claim.is_death
        assert [(d.dependant_id, d.is_child) for d in context.dependants] == [
            ("D-21", True),
            ("D-22", True),
        ]
        assert context.dependants[0].date_of_birth == date(2012, 4, 1)

    @pytest.mark.asyncio
    async def test_incident_type_case_insensitive(self, memory_store):
        memory_store.seed(RecordTable.CLAIMS.value, [claim_row("IRN-X", " death ")])
        memory_store.seed(RecordTable.WORKERS.value, [worker_row()])

        context = await ClaimContextResolver(memory_store).resolve("IRN-X")

        assert context.claim.incident_type is IncidentType.DEATH

    @pytest.mark.asyncio
    async def test_unsupported_incident_type(self, memory_store):
        memory_store.seed(RecordTable.CLAIMS.value, [claim_row("IRN-X", "Illness")])
        memory_store.seed(RecordTable.WORKERS.value, [worker_row()])

        with pytest.raises(UnsupportedIncidentTypeError) as exc_info:
            await ClaimContextResolver(memory_store).resolve("IRN-X")
        assert exc_info.value.incident_type == "Illness"

    @pytest.mark.asyncio
    async def test_claim_not_found(self, memory_store):
        with pytest.raises(ClaimNotFoundError) as exc_info:
            await ClaimContextResolver(memory_store).resolve("IRN-404")
        assert exc_info.value.irn == "IRN-404"

    @pytest.mark.asyncio
    async def test_worker_not_found(self, memory_store):
        memory_store.seed(RecordTable.CLAIMS.value, [claim_row("IRN-X", "Injury", worker_id="W-404")])

        with pytest.raises(WorkerNotFoundError) as exc_info:
            await ClaimContextResolver(memory_store).resolve("IRN-X")
        assert exc_info.value.worker_id == "W-404"

    @pytest.mark.asyncio
    async def test_blank_spouse_name_means_no_spouse(self, memory_store):
        memory_store.seed(RecordTable.CLAIMS.value, [claim_row("IRN-X", "Death")])
        memory_store.seed(RecordTable.WORKERS.value, [worker_row(spouse_first_name="  ")])

        context = await ClaimContextResolver(memory_store).resolve("IRN-X")

        assert context.worker.spouse is None

    @pytest.mark.asyncio
    async def test_missing_wage_record_reads_zero(self, memory_store):
        memory_store.seed(RecordTable.CLAIMS.value, [claim_row("IRN-X", "Injury")])
        memory_store.seed(RecordTable.WORKERS.value, [worker_row()])

        context = await ClaimContextResolver(memory_store).resolve("IRN-X")

        assert context.annual_wage == Decimal("0")

    @pytest.mark.asyncio
    async def test_unparseable_incident_date_is_none(self, memory_store):
        memory_store.seed(
            RecordTable.CLAIMS.value, [claim_row("IRN-X", "Death", incident_date="sometime")]
        )
        memory_store.seed(RecordTable.WORKERS.value, [worker_row()])

        context = await ClaimContextResolver(memory_store).resolve("IRN-X")

        assert context.claim.incident_date is None

    @pytest.mark.asyncio
    async def test_restores_saved_draft(self, memory_store):
        seed_injury_claim(memory_store)
        memory_store.seed(
            RecordTable.INJURY_CHECKLIST.value,
            [
                {
                    "irn": INJURY_IRN,
                    "criterion": "Loss of thumb",
                    "factor": Decimal("5"),
                    "doctor_percentage": Decimal("10"),
                    "compensation_amount": Decimal("6500"),
                }
            ],
        )
        memory_store.seed(
            RecordTable.COMPENSATION_WORKER_DETAILS.value,
            [
                {
                    "irn": INJURY_IRN,
                    "medical_expenses": "500",
                    "misc_expenses": "0",
                    "deductions": "100",
                    "deduction_notes": "advance paid",
                    "findings": "Fracture",
                    "recommendations": "Pay",
                    "compensation_amount": Decimal("6900"),
                }
            ],
        )

        context = await ClaimContextResolver(memory_store).resolve(INJURY_IRN)

        assert len(context.persisted_checklist) == 1
        assert context.persisted_checklist[0].compensation == Decimal("6500")
        prior = context.prior_adjustments
        assert prior.medical_expenses == Decimal("500")
        assert prior.deductions == Decimal("100")
        assert prior.deduction_notes == "advance paid"
        assert prior.findings == "Fracture"

    @pytest.mark.asyncio
    async def test_death_claim_ignores_checklist_rows(self, memory_store):
        seed_death_claim(memory_store)
        memory_store.seed(
            RecordTable.INJURY_CHECKLIST.value,
            [{"irn": DEATH_IRN, "criterion": "Loss of arm", "factor": 70,
              "doctor_percentage": 10, "compensation_amount": 1}],
        )

        context = await ClaimContextResolver(memory_store).resolve(DEATH_IRN)

        assert context.persisted_checklist == ()

    @pytest.mark.asyncio
    async def test_resolves_from_sql_store(self, sql_store):
        await sql_store.insert(RecordTable.CLAIMS.value, claim_row("IRN-SQL", "Injury"))
        await sql_store.insert(RecordTable.WORKERS.value, worker_row())
        await sql_store.insert(
            RecordTable.EMPLOYMENT_DETAILS.value,
            {"worker_id": "W-1", "average_weekly_wage": Decimal("3125")},
        )

        context = await ClaimContextResolver(sql_store).resolve("IRN-SQL")

        assert context.annual_wage == Decimal("162500")
        assert context.worker.date_of_birth == date(1980, 5, 2)

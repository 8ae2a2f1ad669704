"""
Claim Context Resolver - Loads everything a calculation needs for one claim.

Given an IRN, reads the claim, its worker, the worker's dependants and
wage record, the documents submitted against the claim, and any checklist
and compensation records a previous draft or finalize left behind, and
returns them as one frozen ClaimContext.

Failure modes:
    - ClaimNotFoundError when no claim row has the IRN.
    - WorkerNotFoundError when the claim's worker does not exist.
    - UnsupportedIncidentTypeError for incident types other than
      Injury / Death.
    - A missing wage record is not an error: the weekly wage reads as zero.
    - Store errors propagate unchanged (PersistenceError for the SQL store).
"""

from __future__ import annotations

from typing import Any

from claims_kernel.domain.claim import (
    Claim,
    Dependant,
    EmploymentDetails,
    IncidentType,
    Spouse,
    Worker,
)
from claims_kernel.domain.context import (
    ClaimContext,
    PersistedChecklistRow,
    PriorAdjustments,
)
from claims_kernel.domain.records import RecordTable
from claims_kernel.domain.values import parse_date, parse_numeric
from claims_kernel.exceptions import (
    ClaimNotFoundError,
    UnsupportedIncidentTypeError,
    WorkerNotFoundError,
)
from claims_kernel.logging_config import get_logger
from claims_kernel.services.record_store import RecordStore

logger = get_logger("services.claim_context_resolver")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _incident_type(irn: str, raw: Any) -> IncidentType:
    label = _text(raw).strip().lower()
    for member in IncidentType:
        if member.value.lower() == label:
            return member
    raise UnsupportedIncidentTypeError(irn, _text(raw))


def _worker_from_record(row: dict[str, Any]) -> Worker:
    spouse = None
    if _text(row.get("spouse_first_name")).strip():
        spouse = Spouse(
            first_name=_text(row.get("spouse_first_name")).strip(),
            last_name=_text(row.get("spouse_last_name")).strip(),
            date_of_birth=parse_date(row.get("spouse_date_of_birth")),
        )
    return Worker(
        worker_id=_text(row.get("worker_id")),
        first_name=_text(row.get("first_name")),
        last_name=_text(row.get("last_name")),
        date_of_birth=parse_date(row.get("date_of_birth")),
        marital_status=_text(row.get("marital_status")),
        spouse=spouse,
    )


def _dependant_from_record(row: dict[str, Any]) -> Dependant:
    return Dependant(
        dependant_id=_text(row.get("dependant_id")),
        worker_id=_text(row.get("worker_id")),
        first_name=_text(row.get("first_name")),
        last_name=_text(row.get("last_name")),
        dependant_type=_text(row.get("dependant_type")),
        date_of_birth=parse_date(row.get("date_of_birth")),
        degree_of_dependence=parse_numeric(row.get("degree_of_dependence")),
    )


class ClaimContextResolver:
    """
    Resolves a ClaimContext from the record store.

    Contract:
        ``resolve`` is read-only; it never writes to the store.
    """

    def __init__(self, store: RecordStore):
        self._store = store

    async def resolve(self, irn: str) -> ClaimContext:
        """
        Load the full context for a claim.

        Args:
            irn: Internal reference number of the claim.

        Returns:
            ClaimContext for the calculators and the document gate.
        """
        claim = await self._load_claim(irn)
        worker = await self._load_worker(claim)

        dependant_rows = await self._store.find(
            RecordTable.DEPENDANTS.value, {"worker_id": claim.worker_id}
        )
        dependants = tuple(_dependant_from_record(r) for r in dependant_rows)

        employment_rows = await self._store.find(
            RecordTable.EMPLOYMENT_DETAILS.value, {"worker_id": claim.worker_id}
        )
        employment = EmploymentDetails(
            average_weekly_wage=parse_numeric(
                employment_rows[0].get("average_weekly_wage") if employment_rows else None
            )
        )

        attachment_rows = await self._store.find(
            RecordTable.ATTACHMENTS.value, {"irn": irn}
        )
        submitted = tuple(_text(r.get("document_type")) for r in attachment_rows)

        persisted_checklist: tuple[PersistedChecklistRow, ...] = ()
        if claim.is_injury:
            persisted_checklist = await self._load_persisted_checklist(irn)

        prior = await self._load_prior_adjustments(irn)

        context = ClaimContext(
            claim=claim,
            worker=worker,
            dependants=dependants,
            employment=employment,
            submitted_documents=submitted,
            persisted_checklist=persisted_checklist,
            prior_adjustments=prior,
        )
        logger.info(
            "claim_context_resolved",
            extra={
                "irn": irn,
                "incident_type": claim.incident_type.value,
                "dependant_count": len(dependants),
                "submitted_document_count": len(submitted),
                "persisted_checklist_rows": len(persisted_checklist),
                "has_prior_adjustments": prior is not None,
            },
        )
        return context

    async def _load_claim(self, irn: str) -> Claim:
        rows = await self._store.find(RecordTable.CLAIMS.value, {"irn": irn})
        if not rows:
            raise ClaimNotFoundError(irn)
        row = rows[0]
        return Claim(
            irn=_text(row.get("irn")),
            display_irn=_text(row.get("display_irn")),
            worker_id=_text(row.get("worker_id")),
            incident_type=_incident_type(irn, row.get("incident_type")),
            incident_date=parse_date(row.get("incident_date")),
        )

    async def _load_worker(self, claim: Claim) -> Worker:
        rows = await self._store.find(
            RecordTable.WORKERS.value, {"worker_id": claim.worker_id}
        )
        if not rows:
            raise WorkerNotFoundError(claim.irn, claim.worker_id)
        return _worker_from_record(rows[0])

    async def _load_persisted_checklist(
        self, irn: str
    ) -> tuple[PersistedChecklistRow, ...]:
        rows = await self._store.find(RecordTable.INJURY_CHECKLIST.value, {"irn": irn})
        return tuple(
            PersistedChecklistRow(
                criterion=_text(r.get("criterion")),
                factor=parse_numeric(r.get("factor")),
                doctor_percentage=parse_numeric(r.get("doctor_percentage")),
                compensation=parse_numeric(r.get("compensation_amount")),
            )
            for r in rows
        )

    async def _load_prior_adjustments(self, irn: str) -> PriorAdjustments | None:
        rows = await self._store.find(
            RecordTable.COMPENSATION_WORKER_DETAILS.value, {"irn": irn}
        )
        if not rows:
            return None
        row = rows[0]
        return PriorAdjustments(
            medical_expenses=parse_numeric(row.get("medical_expenses")),
            misc_expenses=parse_numeric(row.get("misc_expenses")),
            deductions=parse_numeric(row.get("deductions")),
            deduction_notes=_text(row.get("deduction_notes")),
            findings=_text(row.get("findings")),
            recommendations=_text(row.get("recommendations")),
            compensation_amount=parse_numeric(row.get("compensation_amount")),
        )

"""
claims_services.persistence_adapter -- Calculation output to store commands.

Responsibility:
    Translate a claim session and its calculation result into an ordered
    list of record-store commands (upsert / insert / delete), and execute
    that list against a ``RecordStore``.

Architecture position:
    Services layer.  Planning is pure; only ``execute`` performs I/O.

Invariants enforced:
    - Checklist rows and person rows are replaced as a whole per IRN:
      one delete by IRN followed by the inserts.  Running the same plan
      twice leaves the same rows, never duplicates.
    - Worker summary and next-stage review hold one row per IRN (upsert).
    - Only checklist rows that are ticked or carry a percentage or an
      amount are written.

Failure modes:
    - ``execute`` stops at the first failing command and raises
      PersistenceError with the store's own message.  Commands already
      applied stay applied; a retry replays the whole plan.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from claims_engines.compensation import CalculationResult
from claims_engines.death import DependantShare
from claims_engines.injury import rows_to_persist
from claims_kernel.domain.claim import DependantCategory
from claims_kernel.domain.records import RecordTable
from claims_kernel.domain.values import ZERO, calculate_age, format_number
from claims_kernel.exceptions import ClaimsKernelError, PersistenceError
from claims_kernel.logging_config import get_logger
from claims_kernel.services.record_store import RecordStore
from claims_config.schema import ReviewStatusLabels
from claims_services.claim_session import ClaimSession

logger = get_logger("services.persistence_adapter")

SPOUSE_RELATION = "Spouse"
SPOUSE_DEGREE_OF_DEPENDENCE = Decimal("100")


@dataclass(frozen=True)
class UpsertCommand:
    table: RecordTable
    key: Mapping[str, Any]
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class InsertCommand:
    table: RecordTable
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteCommand:
    table: RecordTable
    key: Mapping[str, Any]


Command = UpsertCommand | InsertCommand | DeleteCommand


@dataclass
class PersistencePlan:
    irn: str
    commands: list[Command] = field(default_factory=list)

    def tables(self) -> tuple[str, ...]:
        return tuple(c.table.value for c in self.commands)


def _iso(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _checklist_commands(session: ClaimSession) -> list[Command]:
    irn = session.irn
    commands: list[Command] = [DeleteCommand(RecordTable.INJURY_CHECKLIST, {"irn": irn})]
    for row in rows_to_persist(session.rows):
        commands.append(
            InsertCommand(
                RecordTable.INJURY_CHECKLIST,
                {
                    "irn": irn,
                    "criterion": row.criterion,
                    "factor": row.factor,
                    "doctor_percentage": row.doctor_percentage,
                    "compensation_amount": row.compensation,
                },
            )
        )
    return commands


def _worker_summary_command(
    session: ClaimSession, result: CalculationResult
) -> UpsertCommand:
    worker = session.context.worker
    return UpsertCommand(
        RecordTable.COMPENSATION_WORKER_DETAILS,
        {"irn": session.irn},
        {
            "worker_first_name": worker.first_name or None,
            "worker_last_name": worker.last_name or None,
            "worker_date_of_birth": _iso(worker.date_of_birth),
            "annual_wage": result.annual_wage,
            "compensation_amount": result.final_amount,
            "medical_expenses": format_number(session.medical_expenses),
            "misc_expenses": format_number(session.misc_expenses),
            "deductions": format_number(session.deductions),
            "deduction_notes": session.deduction_notes,
            "findings": session.findings,
            "recommendations": session.recommendations,
        },
    )


def _find_share(
    shares: Sequence[DependantShare], dependant_id: str | None
) -> DependantShare | None:
    for share in shares:
        if dependant_id is None and share.category is DependantCategory.SPOUSE:
            return share
        if dependant_id is not None and share.dependant_id == dependant_id:
            return share
    return None


def _person_commands(
    session: ClaimSession, result: CalculationResult, today: date
) -> list[Command]:
    irn = session.irn
    context = session.context
    params = session.reference.parameters
    max_child_age = params.max_child_age
    weekly_rate = params.weekly_compensation_per_child

    commands: list[Command] = [
        DeleteCommand(RecordTable.COMPENSATION_PERSON_DETAILS, {"irn": irn})
    ]

    spouse = context.worker.spouse
    if spouse is not None:
        share = _find_share(result.shares, None)
        commands.append(
            InsertCommand(
                RecordTable.COMPENSATION_PERSON_DETAILS,
                {
                    "irn": irn,
                    "person_first_name": spouse.first_name,
                    "person_last_name": spouse.last_name,
                    "person_date_of_birth": _iso(spouse.date_of_birth),
                    "relation_to_worker": SPOUSE_RELATION,
                    "degree_of_dependence": SPOUSE_DEGREE_OF_DEPENDENCE,
                    "original_compensation_amount": share.original_amount if share else ZERO,
                    "compensation_amount": share.final_amount if share else ZERO,
                    "weekly_compensation_amount": ZERO,
                },
            )
        )

    for d in context.dependants:
        share = _find_share(result.shares, d.dependant_id)
        weekly = ZERO
        if (
            d.is_child
            and d.date_of_birth is not None
            and calculate_age(d.date_of_birth, today) < max_child_age
        ):
            weekly = weekly_rate
        commands.append(
            InsertCommand(
                RecordTable.COMPENSATION_PERSON_DETAILS,
                {
                    "irn": irn,
                    "person_first_name": d.first_name,
                    "person_last_name": d.last_name,
                    "person_date_of_birth": _iso(d.date_of_birth),
                    "relation_to_worker": d.dependant_type,
                    "degree_of_dependence": d.degree_of_dependence,
                    "original_compensation_amount": share.original_amount if share else ZERO,
                    "compensation_amount": share.final_amount if share else ZERO,
                    "weekly_compensation_amount": weekly,
                },
            )
        )
    return commands


def plan_draft(session: ClaimSession, result: CalculationResult) -> PersistencePlan:
    """Commands for Save-Draft: checklist (Injury) and worker summary."""
    plan = PersistencePlan(irn=session.irn)
    if session.context.claim.is_injury:
        plan.commands.extend(_checklist_commands(session))
    plan.commands.append(_worker_summary_command(session, result))
    return plan


def plan_finalize(
    session: ClaimSession,
    result: CalculationResult,
    labels: ReviewStatusLabels,
    submitted_at: datetime,
    today: date,
) -> PersistencePlan:
    """Commands for Accept-Finalize.

    Order: checklist (Injury), worker summary, person breakdown, current
    review status, next-stage review.
    """
    irn = session.irn
    plan = PersistencePlan(irn=irn)
    if session.context.claim.is_injury:
        plan.commands.extend(_checklist_commands(session))
    plan.commands.append(_worker_summary_command(session, result))
    plan.commands.extend(_person_commands(session, result, today))
    plan.commands.append(
        UpsertCommand(
            RecordTable.CLAIM_REVIEWS,
            {"irn": irn},
            {"review_status": labels.compensation_calculated},
        )
    )
    plan.commands.append(
        UpsertCommand(
            RecordTable.NEXT_STAGE_REVIEWS,
            {"irn": irn},
            {
                "review_status": labels.pending,
                "submission_date": submitted_at.isoformat(),
                "incident_type": session.incident_type.value,
            },
        )
    )
    return plan


async def execute(store: RecordStore, plan: PersistencePlan) -> None:
    """Apply a plan in order.  Stops at the first failure."""
    for command in plan.commands:
        table = command.table.value
        try:
            if isinstance(command, DeleteCommand):
                await store.delete_by_key(table, command.key)
            elif isinstance(command, InsertCommand):
                await store.insert(table, command.fields)
            else:
                await store.upsert_by_key(table, command.key, command.fields)
        except ClaimsKernelError:
            raise
        except Exception as exc:
            logger.error(
                "persistence_command_failed",
                extra={"irn": plan.irn, "table": table},
                exc_info=True,
            )
            raise PersistenceError(type(command).__name__, table, str(exc)) from exc

    logger.debug(
        "persistence_plan_executed",
        extra={"irn": plan.irn, "command_count": len(plan.commands)},
    )

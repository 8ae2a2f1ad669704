"""
Module: claims_kernel.models.compensation
Responsibility: ORM persistence for everything the compensation engine
    writes: the injury checklist, the worker and per-person compensation
    breakdown, the current-stage review record (which also carries the
    advisory lock holder) and the next-stage review record.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (by the writer, not the schema):
    - injury_checklist and compensation_person_details are replaced as a
      whole per IRN (delete-then-insert), so a retried finalize leaves no
      stale rows from an earlier split.
    - compensation_worker_details and next_stage_reviews hold at most one
      row per IRN (upsert by IRN).
"""

from decimal import Decimal

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from claims_kernel.db.base import Base
from claims_kernel.domain.records import RecordTable


class InjuryChecklistModel(Base):
    __tablename__ = RecordTable.INJURY_CHECKLIST.value

    __table_args__ = (
        Index("idx_injury_checklist_irn", "irn"),
    )

    irn: Mapped[str] = mapped_column(String(50), nullable=False)
    criterion: Mapped[str] = mapped_column(String(200), nullable=False)
    factor: Mapped[Decimal] = mapped_column(nullable=False)
    doctor_percentage: Mapped[Decimal] = mapped_column(nullable=False)
    compensation_amount: Mapped[Decimal] = mapped_column(nullable=False)


class CompensationWorkerDetailsModel(Base):
    __tablename__ = RecordTable.COMPENSATION_WORKER_DETAILS.value

    __table_args__ = (
        Index("idx_comp_worker_irn", "irn", unique=True),
    )

    irn: Mapped[str] = mapped_column(String(50), nullable=False)
    worker_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    worker_last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    worker_date_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)
    annual_wage: Mapped[Decimal] = mapped_column(nullable=False)
    compensation_amount: Mapped[Decimal] = mapped_column(nullable=False)
    # expenses are stored as entered text, like the rest of intake
    medical_expenses: Mapped[str] = mapped_column(String(50), nullable=False, default="0")
    misc_expenses: Mapped[str] = mapped_column(String(50), nullable=False, default="0")
    deductions: Mapped[str] = mapped_column(String(50), nullable=False, default="0")
    deduction_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    findings: Mapped[str] = mapped_column(Text, nullable=False, default="")
    recommendations: Mapped[str] = mapped_column(Text, nullable=False, default="")


class CompensationPersonDetailsModel(Base):
    __tablename__ = RecordTable.COMPENSATION_PERSON_DETAILS.value

    __table_args__ = (
        Index("idx_comp_person_irn", "irn"),
    )

    irn: Mapped[str] = mapped_column(String(50), nullable=False)
    person_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    person_last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    person_date_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)
    relation_to_worker: Mapped[str] = mapped_column(String(50), nullable=False)
    degree_of_dependence: Mapped[Decimal] = mapped_column(nullable=False)
    original_compensation_amount: Mapped[Decimal] = mapped_column(nullable=False)
    compensation_amount: Mapped[Decimal] = mapped_column(nullable=False)
    weekly_compensation_amount: Mapped[Decimal] = mapped_column(nullable=False)


class ClaimReviewModel(Base):
    """Current-stage (claims officer) review of a claim.

    ``locked_by`` holds the actor currently editing the claim; empty when free.
    """

    __tablename__ = RecordTable.CLAIM_REVIEWS.value

    __table_args__ = (
        Index("idx_claim_reviews_irn", "irn", unique=True),
    )

    irn: Mapped[str] = mapped_column(String(50), nullable=False)
    review_status: Mapped[str] = mapped_column(String(50), nullable=False)
    locked_by: Mapped[str | None] = mapped_column(String(50), nullable=True)


class NextStageReviewModel(Base):
    """Claims manager review queued by an accepted calculation."""

    __tablename__ = RecordTable.NEXT_STAGE_REVIEWS.value

    __table_args__ = (
        Index("idx_next_stage_reviews_irn", "irn", unique=True),
    )

    irn: Mapped[str] = mapped_column(String(50), nullable=False)
    review_status: Mapped[str] = mapped_column(String(50), nullable=False)
    submission_date: Mapped[str] = mapped_column(String(40), nullable=False)
    incident_type: Mapped[str] = mapped_column(String(20), nullable=False)

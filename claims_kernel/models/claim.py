"""
Module: claims_kernel.models.claim
Responsibility: ORM persistence for intake records the engine only reads:
    claims, workers, dependants, wage records and document attachments.
Architecture position: Kernel > Models.  May import from db/base.py only.

Dates are stored as ISO-8601 strings, the format intake writes them in.
"""

from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from claims_kernel.db.base import Base
from claims_kernel.domain.records import RecordTable


class ClaimModel(Base):
    __tablename__ = RecordTable.CLAIMS.value

    __table_args__ = (
        Index("idx_claims_irn", "irn", unique=True),
    )

    irn: Mapped[str] = mapped_column(String(50), nullable=False)
    display_irn: Mapped[str] = mapped_column(String(50), nullable=False)
    worker_id: Mapped[str] = mapped_column(String(50), nullable=False)
    incident_type: Mapped[str] = mapped_column(String(20), nullable=False)
    incident_date: Mapped[str | None] = mapped_column(String(32), nullable=True)


class WorkerModel(Base):
    __tablename__ = RecordTable.WORKERS.value

    __table_args__ = (
        Index("idx_workers_worker_id", "worker_id", unique=True),
    )

    worker_id: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    date_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)
    marital_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    spouse_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    spouse_last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    spouse_date_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)


class DependantModel(Base):
    __tablename__ = RecordTable.DEPENDANTS.value

    __table_args__ = (
        Index("idx_dependants_worker_id", "worker_id"),
    )

    dependant_id: Mapped[str] = mapped_column(String(50), nullable=False)
    worker_id: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    dependant_type: Mapped[str] = mapped_column(String(50), nullable=False)
    date_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)
    degree_of_dependence: Mapped[Decimal | None] = mapped_column(nullable=True)


class EmploymentDetailsModel(Base):
    __tablename__ = RecordTable.EMPLOYMENT_DETAILS.value

    __table_args__ = (
        Index("idx_employment_worker_id", "worker_id"),
    )

    worker_id: Mapped[str] = mapped_column(String(50), nullable=False)
    average_weekly_wage: Mapped[Decimal | None] = mapped_column(nullable=True)


class AttachmentModel(Base):
    """A document submitted against a claim, identified by its type label."""

    __tablename__ = RecordTable.ATTACHMENTS.value

    __table_args__ = (
        Index("idx_attachments_irn", "irn"),
    )

    irn: Mapped[str] = mapped_column(String(50), nullable=False)
    document_type: Mapped[str] = mapped_column(String(200), nullable=False)

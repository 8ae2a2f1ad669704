"""
Record-store table names (``claims_kernel.domain.records``).

The engine exchanges plain dict records with the record store.  These are
the tables it reads and writes; the SQLAlchemy models in
``claims_kernel.models`` declare the same names.
"""

from enum import Enum


class RecordTable(str, Enum):
    # reference data
    DICTIONARY = "dictionary"

    # intake (read-only to the engine)
    CLAIMS = "claims"
    WORKERS = "workers"
    DEPENDANTS = "dependants"
    EMPLOYMENT_DETAILS = "employment_details"
    ATTACHMENTS = "attachments"

    # written by the engine
    INJURY_CHECKLIST = "injury_checklist"
    COMPENSATION_WORKER_DETAILS = "compensation_worker_details"
    COMPENSATION_PERSON_DETAILS = "compensation_person_details"
    CLAIM_REVIEWS = "claim_reviews"
    NEXT_STAGE_REVIEWS = "next_stage_reviews"

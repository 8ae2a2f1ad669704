#!/usr/bin/env python3
"""
Seed a database with reference data and two sample claims.

Drops all tables, recreates them, and writes the reference dictionary
(injury criteria and system parameters) plus one Injury and one Death
claim with their workers, dependants, wage records and attachments.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --database-url sqlite:///claims.db
    python3 scripts/calculate_claim.py IRN-DEMO-INJ
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_DB_URL = "sqlite:///claims.db"

INJURY_CRITERIA = {
    "Loss of arm at shoulder": "70",
    "Loss of hand": "60",
    "Loss of thumb": "25",
    "Loss of index finger": "14",
    "Total loss of hearing (both ears)": "60",
    "Loss of one eye": "50",
}

SYSTEM_PARAMETERS = {
    "MinCompensationAmountDeath": "20000",
    "MaxCompensationAmountDeath": "100000",
    "WeeklyCompensationPerChildDeath": "50",
    "MaxChildAge": "16",
}

CLAIMS = [
    {
        "irn": "IRN-DEMO-INJ",
        "display_irn": "OWC/2024/000101",
        "worker_id": "WKR-1001",
        "incident_type": "Injury",
        "incident_date": "2024-02-12",
    },
    {
        "irn": "IRN-DEMO-DTH",
        "display_irn": "OWC/2024/000102",
        "worker_id": "WKR-1002",
        "incident_type": "Death",
        "incident_date": "2024-03-15",
    },
]

WORKERS = [
    {
        "worker_id": "WKR-1001",
        "first_name": "Peter",
        "last_name": "Tamate",
        "date_of_birth": "1988-07-19",
        "marital_status": "Single",
        "spouse_first_name": None,
        "spouse_last_name": None,
        "spouse_date_of_birth": None,
    },
    {
        "worker_id": "WKR-1002",
        "first_name": "John",
        "last_name": "Kila",
        "date_of_birth": "1980-05-02",
        "marital_status": "Married",
        "spouse_first_name": "Mary",
        "spouse_last_name": "Kila",
        "spouse_date_of_birth": "1982-09-10",
    },
]

DEPENDANTS = [
    {
        "dependant_id": "DEP-2001",
        "worker_id": "WKR-1002",
        "first_name": "Ana",
        "last_name": "Kila",
        "dependant_type": "Daughter",
        "date_of_birth": "2012-04-01",
        "degree_of_dependence": "100",
    },
    {
        "dependant_id": "DEP-2002",
        "worker_id": "WKR-1002",
        "first_name": "Rose",
        "last_name": "Kila",
        "dependant_type": "Mother",
        "date_of_birth": "1955-01-01",
        "degree_of_dependence": "50",
    },
]

WAGES = [
    {"worker_id": "WKR-1001", "average_weekly_wage": "850"},
    {"worker_id": "WKR-1002", "average_weekly_wage": "300"},
]

ATTACHMENTS = [
    ("IRN-DEMO-INJ", "Supervisor statement"),
    ("IRN-DEMO-INJ", "Final medical report"),
    ("IRN-DEMO-INJ", "Form 18 Scan"),
    ("IRN-DEMO-DTH", "Supervisor statement"),
    ("IRN-DEMO-DTH", "Death Certificate"),
]


async def seed(database_url: str) -> int:
    from decimal import Decimal

    from claims_kernel.db.engine import (
        create_tables,
        drop_tables,
        get_session_factory,
        init_engine_from_url,
    )
    from claims_kernel.domain.records import RecordTable
    from claims_kernel.domain.reference import INJURY_PERCENT_TYPE, SYSTEM_PARAMETER_TYPE
    from claims_kernel.services.record_store import SqlRecordStore

    init_engine_from_url(database_url)
    drop_tables()
    create_tables()
    store = SqlRecordStore(get_session_factory())

    count = 0
    for key, value in INJURY_CRITERIA.items():
        await store.insert(
            RecordTable.DICTIONARY.value,
            {"type": INJURY_PERCENT_TYPE, "key": key, "value": value},
        )
        count += 1
    for key, value in SYSTEM_PARAMETERS.items():
        await store.insert(
            RecordTable.DICTIONARY.value,
            {"type": SYSTEM_PARAMETER_TYPE, "key": key, "value": value},
        )
        count += 1

    for table, rows in (
        (RecordTable.CLAIMS, CLAIMS),
        (RecordTable.WORKERS, WORKERS),
    ):
        for row in rows:
            await store.insert(table.value, row)
            count += 1

    for row in DEPENDANTS:
        await store.insert(
            RecordTable.DEPENDANTS.value,
            {**row, "degree_of_dependence": Decimal(row["degree_of_dependence"])},
        )
        count += 1
    for row in WAGES:
        await store.insert(
            RecordTable.EMPLOYMENT_DETAILS.value,
            {**row, "average_weekly_wage": Decimal(row["average_weekly_wage"])},
        )
        count += 1
    for irn, document_type in ATTACHMENTS:
        await store.insert(
            RecordTable.ATTACHMENTS.value, {"irn": irn, "document_type": document_type}
        )
        count += 1

    return count


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed sample claims")
    parser.add_argument(
        "--database-url",
        default=DEFAULT_DB_URL,
        help=f"SQLAlchemy database URL (default: {DEFAULT_DB_URL})",
    )
    args = parser.parse_args()

    from claims_kernel.exceptions import ClaimsKernelError
    from claims_kernel.logging_config import configure_logging

    configure_logging(level=logging.WARNING, stream=sys.stderr)

    print(f"  Seeding {args.database_url} ...")
    try:
        count = asyncio.run(seed(args.database_url))
    except ClaimsKernelError as exc:
        print(f"  FAILED: {exc.code}: {exc}", file=sys.stderr)
        return 1

    print(f"  {count} records written.")
    for claim in CLAIMS:
        print(f"    {claim['irn']:<14} {claim['incident_type']:<7} {claim['display_irn']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Pytest fixtures for the compensation engine test suite.

Provides:
- Structured logging configuration and a ``captured_logs`` fixture
- A deterministic clock
- In-memory and SQLite-backed record stores
- Factory helpers for claims, workers, dependants and reference data

No external database is needed: SQL tests run against in-memory SQLite.
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from claims_config import get_active_config
from claims_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url, reset_engine
from claims_kernel.domain.clock import DeterministicClock
from claims_kernel.domain.records import RecordTable
from claims_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from claims_kernel.services.collaborators import FixedActorIdentity, RecordStoreAdvisoryLock
from claims_kernel.services.record_store import InMemoryRecordStore, SqlRecordStore
from claims_services import ClaimReviewService

INJURY_IRN = "IRN-INJ-001"
DEATH_IRN = "IRN-DTH-001"
OFFICER_ID = "officer-17"

INJURY_CRITERIA = {
    "Loss of arm": "70",
    "Loss of hand": "60",
    "Loss of thumb": "5",
}

SYSTEM_PARAMETERS = {
    "MinCompensationAmountDeath": "20000",
    "MaxCompensationAmountDeath": "100000",
    "WeeklyCompensationPerChildDeath": "50",
    "MaxChildAge": "16",
}


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture claims_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, review_service):
            ...
            logs = captured_logs()
            assert any(r["message"] == "draft_saved" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("claims_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc))


# =============================================================================
# Record factories
# =============================================================================


def dictionary_rows(
    criteria: dict[str, str] | None = None,
    parameters: dict[str, str] | None = None,
) -> list[dict]:
    rows = [
        {"type": "InjuryPercent", "key": key, "value": value}
        for key, value in (INJURY_CRITERIA if criteria is None else criteria).items()
    ]
    rows.extend(
        {"type": "SystemParameter", "key": key, "value": value}
        for key, value in (SYSTEM_PARAMETERS if parameters is None else parameters).items()
    )
    return rows


def claim_row(irn: str, incident_type: str, worker_id: str = "W-1", incident_date: str = "2024-03-15") -> dict:
    return {
        "irn": irn,
        "display_irn": f"CLM/{irn}",
        "worker_id": worker_id,
        "incident_type": incident_type,
        "incident_date": incident_date,
    }


def worker_row(worker_id: str = "W-1", spouse_first_name: str | None = "Mary") -> dict:
    return {
        "worker_id": worker_id,
        "first_name": "John",
        "last_name": "Kila",
        "date_of_birth": "1980-05-02",
        "marital_status": "Married" if spouse_first_name else "Single",
        "spouse_first_name": spouse_first_name,
        "spouse_last_name": "Kila" if spouse_first_name else None,
        "spouse_date_of_birth": "1982-09-10" if spouse_first_name else None,
    }


def dependant_row(
    dependant_id: str,
    dependant_type: str,
    date_of_birth: str,
    worker_id: str = "W-1",
    first_name: str | None = None,
) -> dict:
    return {
        "dependant_id": dependant_id,
        "worker_id": worker_id,
        "first_name": first_name or f"Dep{dependant_id}",
        "last_name": "Kila",
        "dependant_type": dependant_type,
        "date_of_birth": date_of_birth,
        "degree_of_dependence": Decimal("100"),
    }


def attachment_rows(irn: str, labels: list[str]) -> list[dict]:
    return [{"irn": irn, "document_type": label} for label in labels]


INJURY_HARD_MANDATORY = ["Supervisor statement", "Final medical report"]
DEATH_HARD_MANDATORY = ["Supervisor statement", "Death Certificate"]


def seed_injury_claim(store: InMemoryRecordStore, weekly_wage: str = "3125") -> None:
    """Injury claim with an annual wage of 162500 (3125 x 52)."""
    store.seed(RecordTable.DICTIONARY.value, dictionary_rows())
    store.seed(RecordTable.CLAIMS.value, [claim_row(INJURY_IRN, "Injury")])
    store.seed(RecordTable.WORKERS.value, [worker_row()])
    store.seed(
        RecordTable.DEPENDANTS.value,
        [dependant_row("D-1", "Son", "2015-01-20")],
    )
    store.seed(
        RecordTable.EMPLOYMENT_DETAILS.value,
        [{"worker_id": "W-1", "average_weekly_wage": weekly_wage}],
    )
    store.seed(
        RecordTable.ATTACHMENTS.value,
        attachment_rows(INJURY_IRN, INJURY_HARD_MANDATORY),
    )


def seed_death_claim(store: InMemoryRecordStore, weekly_wage: str = "5000") -> None:
    """Death claim: annual 260000 >= min 20000, so the base is the 100000 cap."""
    store.seed(RecordTable.DICTIONARY.value, dictionary_rows())
    store.seed(RecordTable.CLAIMS.value, [claim_row(DEATH_IRN, "Death", worker_id="W-2")])
    store.seed(RecordTable.WORKERS.value, [worker_row("W-2")])
    store.seed(
        RecordTable.DEPENDANTS.value,
        [
            dependant_row("D-21", "Daughter", "2012-04-01", worker_id="W-2"),
            dependant_row("D-22", "son", "2006-02-01", worker_id="W-2"),
        ],
    )
    store.seed(
        RecordTable.EMPLOYMENT_DETAILS.value,
        [{"worker_id": "W-2", "average_weekly_wage": weekly_wage}],
    )
    store.seed(
        RecordTable.ATTACHMENTS.value,
        attachment_rows(DEATH_IRN, DEATH_HARD_MANDATORY),
    )


# =============================================================================
# Store and service fixtures
# =============================================================================


@pytest.fixture
def memory_store():
    return InMemoryRecordStore()


@pytest.fixture
def sql_store():
    """SqlRecordStore over a fresh in-memory SQLite database."""
    init_engine_from_url("sqlite://")
    create_tables()
    yield SqlRecordStore(get_session_factory())
    reset_engine()


@pytest.fixture
def engine_config():
    return get_active_config()


@pytest.fixture
def officer_identity():
    return FixedActorIdentity(OFFICER_ID)


@pytest.fixture
def review_service(memory_store, officer_identity, engine_config, deterministic_clock):
    return ClaimReviewService(
        store=memory_store,
        lock=RecordStoreAdvisoryLock(memory_store),
        identity=officer_identity,
        config=engine_config,
        clock=deterministic_clock,
    )

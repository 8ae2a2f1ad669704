#!/usr/bin/env python3
"""
Calculate compensation for one claim and print it as JSON.

Loads the claim from a SQL database through the real record store, runs
the injury or death calculator with any previously saved draft state,
and prints the calculation result together with the document status.
Nothing is written back.

Usage:
    python3 scripts/calculate_claim.py IRN-000123
    python3 scripts/calculate_claim.py IRN-000123 --database-url sqlite:///claims.db
    python3 scripts/calculate_claim.py IRN-000123 --log-level INFO
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DEFAULT_DB_URL = "sqlite:///claims.db"


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {k: _jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


async def calculate_claim(irn: str, database_url: str, config_id: str | None) -> dict[str, Any]:
    from claims_config import get_active_config
    from claims_kernel.db.engine import get_session_factory, init_engine_from_url
    from claims_kernel.services.collaborators import (
        FixedActorIdentity,
        RecordStoreAdvisoryLock,
    )
    from claims_kernel.services.record_store import SqlRecordStore
    from claims_services import ClaimReviewService

    init_engine_from_url(database_url)
    store = SqlRecordStore(get_session_factory())
    service = ClaimReviewService(
        store=store,
        lock=RecordStoreAdvisoryLock(store),
        identity=FixedActorIdentity(None),
        config=get_active_config(config_id),
    )

    session = await service.load_claim(irn)
    result = session.recompute()
    documents = session.document_status()
    return {
        "irn": session.irn,
        "display_irn": session.context.claim.display_irn,
        "worker": session.context.worker.full_name,
        "result": _jsonable(result),
        "checklist": _jsonable(session.rows),
        "documents": {
            **_jsonable(documents),
            "blocks_accept": documents.blocks_accept,
        },
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Calculate compensation for a claim")
    parser.add_argument("irn", help="Internal reference number of the claim")
    parser.add_argument(
        "--database-url",
        default=DEFAULT_DB_URL,
        help=f"SQLAlchemy database URL (default: {DEFAULT_DB_URL})",
    )
    parser.add_argument("--config-id", default=None, help="Configuration set id")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Structured log level written to stderr",
    )
    args = parser.parse_args()

    from claims_kernel.exceptions import ClaimsKernelError
    from claims_kernel.logging_config import configure_logging

    configure_logging(level=getattr(logging, args.log_level), stream=sys.stderr)

    try:
        payload = asyncio.run(calculate_claim(args.irn, args.database_url, args.config_id))
    except ClaimsKernelError as exc:
        print(json.dumps({"error": exc.code, "message": str(exc)}), file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

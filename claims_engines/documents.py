"""
claims_engines.documents -- Document completeness gate.

Responsibility:
    Compare the statutory document checklist for a claim's incident type
    with the document types actually attached to the claim, and report
    which documents are missing and which of those block acceptance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The checklists come from
    ``claims_config``; the submitted labels come from the attachment
    registry via the claim context.

Invariants enforced:
    - Matching is trimmed, case-insensitive equality.
    - Only missing hard-mandatory documents block Accept; every other
      missing document is advisory.
    - Lists keep checklist order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from claims_engines.tracer import traced_engine


def _normalize(label: str | None) -> str:
    return (label or "").strip().lower()


@dataclass(frozen=True)
class DocumentStatus:
    required: tuple[str, ...]
    available: tuple[str, ...]
    missing: tuple[str, ...]
    hard_mandatory: tuple[str, ...]
    missing_hard_mandatory: tuple[str, ...]

    @property
    def blocks_accept(self) -> bool:
        return bool(self.missing_hard_mandatory)

    @property
    def is_complete(self) -> bool:
        return not self.missing


@traced_engine("document_gate", "1.0", fingerprint_fields=("required", "submitted"))
def evaluate_documents(
    *,
    required: Sequence[str],
    hard_mandatory: Sequence[str],
    submitted: Iterable[str],
) -> DocumentStatus:
    """Split the required list into available and missing documents."""
    present = {_normalize(s) for s in submitted if _normalize(s)}
    available = tuple(doc for doc in required if _normalize(doc) in present)
    missing = tuple(doc for doc in required if _normalize(doc) not in present)
    missing_hard = tuple(doc for doc in hard_mandatory if _normalize(doc) not in present)
    return DocumentStatus(
        required=tuple(required),
        available=available,
        missing=missing,
        hard_mandatory=tuple(hard_mandatory),
        missing_hard_mandatory=missing_hard,
    )

"""
Module: claims_services
Responsibility:
    Orchestration above the pure engines: the per-claim session, the
    review workflow service and the persistence adapter.

Architecture position:
    Services -- may import claims_engines, claims_kernel and claims_config.
"""

from claims_services.claim_review_service import ClaimReviewService
from claims_services.claim_session import ClaimSession

__all__ = ["ClaimReviewService", "ClaimSession"]

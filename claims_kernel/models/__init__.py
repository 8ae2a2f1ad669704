"""Record-store models for the claims kernel."""

from claims_kernel.models.claim import (
    AttachmentModel,
    ClaimModel,
    DependantModel,
    EmploymentDetailsModel,
    WorkerModel,
)
from claims_kernel.models.compensation import (
    ClaimReviewModel,
    CompensationPersonDetailsModel,
    CompensationWorkerDetailsModel,
    InjuryChecklistModel,
    NextStageReviewModel,
)
from claims_kernel.models.reference import DictionaryEntryModel

__all__ = [
    "AttachmentModel",
    "ClaimModel",
    "ClaimReviewModel",
    "CompensationPersonDetailsModel",
    "CompensationWorkerDetailsModel",
    "DependantModel",
    "DictionaryEntryModel",
    "EmploymentDetailsModel",
    "InjuryChecklistModel",
    "NextStageReviewModel",
    "WorkerModel",
]

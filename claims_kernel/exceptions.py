"""
Typed Exception Hierarchy for the Claims Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the compensation engine (screens, batch jobs, the reporting
script) must react to failures precisely: a missing claim is fatal for the
current operation, a lock held by another officer is worth a retry later,
and a store failure must be shown with the store's own message. Catching by
type and reading structured attributes keeps that logic independent of
message wording.

Every exception:
  1. Is a subclass of ClaimsKernelError (catch the group)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        session = await service.load_claim(irn)
    except ClaimNotFoundError as e:
        show_error(e.code, str(e))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ClaimsKernelError (base)
    |
    +-- ContextError
    |   +-- ClaimNotFoundError
    |   +-- WorkerNotFoundError
    |   +-- UnsupportedIncidentTypeError
    |   +-- MissingClaimContextError
    |
    +-- ReferenceDataError
    |   +-- ReferenceDataUnavailableError
    |
    +-- CalculationInputError
    |   +-- InvalidPercentageError
    |   +-- UnknownCriterionError
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |   +-- FinalizeInProgressError
    |
    +-- ConcurrencyError
    |   +-- ClaimLockedError
    |
    +-- PersistenceError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Context         | CLAIM_NOT_FOUND             | No claim row for the IRN
                | WORKER_NOT_FOUND            | Claim references an unknown worker
                | UNSUPPORTED_INCIDENT_TYPE   | Incident type is not Injury or Death
                | MISSING_CLAIM_CONTEXT       | Operation needs an IRN and none is set
----------------|-----------------------------|-----------------------------------------
Reference data  | REFERENCE_DATA_UNAVAILABLE  | Fetch failed and nothing is cached
----------------|-----------------------------|-----------------------------------------
Input           | INVALID_PERCENTAGE          | Doctor percentage outside [0, 100]
                | UNKNOWN_CRITERION           | Checklist edit names no known row
----------------|-----------------------------|-----------------------------------------
Workflow        | INVALID_TRANSITION          | Action not allowed from current state
                | FINALIZE_IN_PROGRESS        | Second finalize while one is in flight
----------------|-----------------------------|-----------------------------------------
Concurrency     | CLAIM_LOCKED                | Claim locked by a different actor
----------------|-----------------------------|-----------------------------------------
Persistence     | PERSISTENCE_FAILED          | Record store rejected a write or read
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_INVALID       | YAML set failed structural validation

Validation failures of the accept preview are NOT exceptions: they are
reported as ValidationReason values on the preview evaluation, since several
reasons are shown to the officer at once.
"""


class ClaimsKernelError(Exception):
    """
    Base exception for all claims kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CLAIMS_KERNEL_ERROR"


# Context exceptions


class ContextError(ClaimsKernelError):
    """Base exception for claim context resolution errors."""

    code: str = "CONTEXT_ERROR"


class ClaimNotFoundError(ContextError):
    """No claim exists with the given IRN."""

    code: str = "CLAIM_NOT_FOUND"

    def __init__(self, irn: str):
        self.irn = irn
        super().__init__("No claim found with this IRN")


class WorkerNotFoundError(ContextError):
    """The claim references a worker that does not exist."""

    code: str = "WORKER_NOT_FOUND"

    def __init__(self, irn: str, worker_id: str):
        self.irn = irn
        self.worker_id = worker_id
        super().__init__(f"Worker {worker_id} not found for claim {irn}")


class UnsupportedIncidentTypeError(ContextError):
    """The claim's incident type is neither Injury nor Death."""

    code: str = "UNSUPPORTED_INCIDENT_TYPE"

    def __init__(self, irn: str, incident_type: str):
        self.irn = irn
        self.incident_type = incident_type
        super().__init__(
            f"Claim {irn} has unsupported incident type '{incident_type}'"
        )


class MissingClaimContextError(ContextError):
    """An operation that needs a claim was invoked without one."""

    code: str = "MISSING_CLAIM_CONTEXT"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"No IRN context for {operation}")


# Reference data exceptions


class ReferenceDataError(ClaimsKernelError):
    """Base exception for reference data errors."""

    code: str = "REFERENCE_DATA_ERROR"


class ReferenceDataUnavailableError(ReferenceDataError):
    """Reference data could not be fetched and no cached copy exists."""

    code: str = "REFERENCE_DATA_UNAVAILABLE"

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__("Failed to load reference data")


# Calculation input exceptions


class CalculationInputError(ClaimsKernelError):
    """Base exception for rejected calculator inputs."""

    code: str = "CALCULATION_INPUT_ERROR"


class InvalidPercentageError(CalculationInputError):
    """Doctor-assessed percentage outside the 0-100 range."""

    code: str = "INVALID_PERCENTAGE"

    def __init__(self, criterion: str, value: str):
        self.criterion = criterion
        self.value = value
        super().__init__(
            f"Doctor percentage {value} for '{criterion}' must be between 0 and 100"
        )


class UnknownCriterionError(CalculationInputError):
    """A checklist edit referenced a criterion that is not on the checklist."""

    code: str = "UNKNOWN_CRITERION"

    def __init__(self, criterion: str):
        self.criterion = criterion
        super().__init__(f"Unknown injury criterion: {criterion}")


# Workflow exceptions


class WorkflowError(ClaimsKernelError):
    """Base exception for review state machine errors."""

    code: str = "WORKFLOW_ERROR"


class InvalidTransitionError(WorkflowError):
    """The requested action is not allowed from the current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, irn: str, from_state: str, action: str):
        self.irn = irn
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"Action '{action}' is not allowed from state '{from_state}' for claim {irn}"
        )


class FinalizeInProgressError(WorkflowError):
    """A finalize for this claim is already in flight."""

    code: str = "FINALIZE_IN_PROGRESS"

    def __init__(self, irn: str):
        self.irn = irn
        super().__init__(f"Finalize already in progress for claim {irn}")


# Concurrency exceptions


class ConcurrencyError(ClaimsKernelError):
    """Base exception for concurrency errors."""

    code: str = "CONCURRENCY_ERROR"


class ClaimLockedError(ConcurrencyError):
    """The claim is locked by a different actor."""

    code: str = "CLAIM_LOCKED"

    def __init__(self, irn: str, locked_by: str):
        self.irn = irn
        self.locked_by = locked_by
        super().__init__(
            f"Claim {irn} is currently being processed by {locked_by}"
        )


# Persistence exceptions


class PersistenceError(ClaimsKernelError):
    """The record store failed; the message is the store's own message."""

    code: str = "PERSISTENCE_FAILED"

    def __init__(self, operation: str, table: str, message: str):
        self.operation = operation
        self.table = table
        self.store_message = message
        super().__init__(message)


# Configuration exceptions


class ConfigurationError(ClaimsKernelError):
    """Engine configuration failed structural validation."""

    code: str = "CONFIGURATION_INVALID"

    def __init__(self, config_id: str, errors: list[str]):
        self.config_id = config_id
        self.errors = errors
        super().__init__(
            f"Configuration {config_id} is invalid: {'; '.join(errors)}"
        )

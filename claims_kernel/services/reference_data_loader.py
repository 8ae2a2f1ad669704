"""
Reference Data Loader - Loads reference data for the pure calculators.

The ReferenceDataLoader queries the reference dictionary to build a
ReferenceData object (injury criteria factors + named system parameters)
that can be passed to the pure injury and death calculators.

This keeps record-store access out of the pure engine layer.  The last
successful load is kept; if a later fetch fails, the cached copy is served
and the failure is logged.  With nothing cached the failure surfaces as
ReferenceDataUnavailableError and calculation stays disabled until a retry
succeeds.
"""

from claims_kernel.domain.records import RecordTable
from claims_kernel.domain.reference import (
    DEFAULT_MAX_CHILD_AGE,
    INJURY_PERCENT_TYPE,
    SYSTEM_PARAMETER_TYPE,
    InjuryCriterion,
    ReferenceData,
    SystemParameters,
)
from claims_kernel.domain.values import parse_numeric
from claims_kernel.exceptions import ReferenceDataUnavailableError
from claims_kernel.logging_config import get_logger
from claims_kernel.services.record_store import RecordStore

logger = get_logger("services.reference_data_loader")


class ReferenceDataLoader:
    """
    Loads reference data from the record store for the pure calculator layer.

    Creates a ReferenceData object containing:
    - Injury criteria, ordered by key, with parsed factors
    - System parameters as stored (parsed on access)
    """

    def __init__(
        self,
        store: RecordStore,
        default_max_child_age: int = DEFAULT_MAX_CHILD_AGE,
    ):
        """
        Initialize the loader.

        Args:
            store: Record store holding the ``dictionary`` table.
            default_max_child_age: Used when ``MaxChildAge`` is missing or zero.
        """
        self._store = store
        self._default_max_child_age = default_max_child_age
        self._cached: ReferenceData | None = None

    @property
    def cached(self) -> ReferenceData | None:
        """The last successfully loaded reference data, if any."""
        return self._cached

    async def load(self) -> ReferenceData:
        """
        Load reference data from the record store.

        Returns:
            ReferenceData for the pure layer.

        Raises:
            ReferenceDataUnavailableError: fetch failed and nothing is cached.
        """
        try:
            criteria = await self._load_criteria()
            parameters = await self._load_parameters()
        except Exception as exc:
            if self._cached is not None:
                logger.warning(
                    "reference_data_cache_fallback",
                    extra={"cause": str(exc)},
                )
                return self._cached
            logger.error("reference_data_unavailable", exc_info=True)
            raise ReferenceDataUnavailableError(str(exc)) from exc

        self._cached = ReferenceData(criteria=criteria, parameters=parameters)
        logger.info(
            "reference_data_loaded",
            extra={
                "criteria_count": len(criteria),
                "parameter_count": len(parameters.values),
            },
        )
        return self._cached

    async def _load_criteria(self) -> tuple[InjuryCriterion, ...]:
        """Load InjuryPercent rows ordered by key."""
        rows = await self._store.find(
            RecordTable.DICTIONARY.value, {"type": INJURY_PERCENT_TYPE}
        )
        rows = sorted(rows, key=lambda r: str(r.get("key") or ""))
        return tuple(
            InjuryCriterion(key=str(r.get("key") or ""), factor=parse_numeric(r.get("value")))
            for r in rows
        )

    async def _load_parameters(self) -> SystemParameters:
        """Load SystemParameter rows into a key -> raw string lookup."""
        rows = await self._store.find(
            RecordTable.DICTIONARY.value, {"type": SYSTEM_PARAMETER_TYPE}
        )
        values = {
            str(r.get("key")): "" if r.get("value") is None else str(r.get("value"))
            for r in rows
            if r.get("key") is not None
        }
        return SystemParameters(
            values=values, default_max_child_age=self._default_max_child_age
        )

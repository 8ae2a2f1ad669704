"""
Injected collaborator capabilities: actor identity and advisory locking.

Responsibility:
    The engine never authenticates and never owns record locking.  It is
    handed two small capabilities and calls them:

    * ``ActorIdentity.current_actor_id()`` -- who is operating, or None.
    * ``AdvisoryLock`` -- ``acquire`` / ``release`` / ``status`` per claim.

    ``RecordStoreAdvisoryLock`` is the portal's lock: the holder is kept in
    ``claim_reviews.locked_by`` for the claim, empty when the claim is free.

Architecture position:
    Kernel > Services.  Protocols only depend on the record store.

Invariants enforced:
    - A claim locked by one actor cannot be acquired by another
      (``ClaimLockedError``); re-acquiring by the holder is a no-op.
    - Lock state is never global: every consumer receives its lock
      instance by injection.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from claims_kernel.domain.records import RecordTable
from claims_kernel.exceptions import ClaimLockedError
from claims_kernel.logging_config import get_logger
from claims_kernel.services.record_store import RecordStore

logger = get_logger("services.collaborators")

_UNLOCKED_VALUES = ("", "0")


@runtime_checkable
class ActorIdentity(Protocol):
    def current_actor_id(self) -> str | None:
        ...


@runtime_checkable
class AdvisoryLock(Protocol):
    async def acquire(self, irn: str, actor_id: str) -> None:
        ...

    async def release(self, irn: str) -> None:
        ...

    async def status(self, irn: str) -> str | None:
        ...


class FixedActorIdentity:
    """Identity that always reports the same actor (scripts, tests)."""

    def __init__(self, actor_id: str | None):
        self._actor_id = actor_id

    def current_actor_id(self) -> str | None:
        return self._actor_id


class RecordStoreAdvisoryLock:
    """Advisory lock kept on the current-stage review record of a claim."""

    def __init__(self, store: RecordStore, initial_review_status: str = "Pending"):
        self._store = store
        self._initial_review_status = initial_review_status

    async def status(self, irn: str) -> str | None:
        rows = await self._store.find(RecordTable.CLAIM_REVIEWS.value, {"irn": irn})
        if not rows:
            return None
        holder = rows[0].get("locked_by")
        if holder is None or str(holder).strip() in _UNLOCKED_VALUES:
            return None
        return str(holder)

    async def acquire(self, irn: str, actor_id: str) -> None:
        holder = await self.status(irn)
        if holder is not None and holder != actor_id:
            raise ClaimLockedError(irn, holder)

        rows = await self._store.find(RecordTable.CLAIM_REVIEWS.value, {"irn": irn})
        if rows:
            await self._store.upsert_by_key(
                RecordTable.CLAIM_REVIEWS.value, {"irn": irn}, {"locked_by": actor_id}
            )
        else:
            await self._store.insert(
                RecordTable.CLAIM_REVIEWS.value,
                {
                    "irn": irn,
                    "review_status": self._initial_review_status,
                    "locked_by": actor_id,
                },
            )
        logger.info("claim_lock_acquired", extra={"irn": irn, "locked_by": actor_id})

    async def release(self, irn: str) -> None:
        rows = await self._store.find(RecordTable.CLAIM_REVIEWS.value, {"irn": irn})
        if not rows:
            return
        await self._store.upsert_by_key(
            RecordTable.CLAIM_REVIEWS.value, {"irn": irn}, {"locked_by": None}
        )
        logger.info("claim_lock_released", extra={"irn": irn})

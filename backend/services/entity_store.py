"""
PM Scan Engine - Entity Store
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-17): A ledger write error no longer hides the generation error
v1.1.0 (2026-10-12): Batch re-entrancy guard; partial batches merged on failure
v1.0.0 (2026-10-05): Initial in-memory snapshot holder

Owns the in-memory entity snapshot the resolver and generator read from.
The snapshot is loaded from the sheet web app and only changes here: on reload,
or when a generation batch merges the records it created.
"""

import asyncio
import logging
from typing import Optional, Sequence

from models.generation import GenerationContext, GenerationResult
from models.maintenance import Asset, EntitySnapshot
from services import pm_generator
from services.generation_ledger import GenerationLedger, get_ledger
from services.pm_generator import GenerationError
from services.sheet_client import SheetClient, get_client

logger = logging.getLogger(__name__)


class SnapshotNotLoadedError(Exception):
    """No snapshot has been loaded yet"""
    pass


class BatchInProgressError(Exception):
    """A generation batch is already running"""
    pass


class EntityStore:
    """In-memory snapshot plus the generation workflow around it."""

    def __init__(self, client: Optional[SheetClient] = None,
                 ledger: Optional[GenerationLedger] = None):
        self.client = client or get_client()
        self.ledger = ledger or get_ledger()
        self._snapshot: Optional[EntitySnapshot] = None
        self._batch_lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> EntitySnapshot:
        if self._snapshot is None:
            raise SnapshotNotLoadedError("Entity snapshot not loaded")
        return self._snapshot

    @property
    def batch_running(self) -> bool:
        return self._batch_lock.locked()

    def replace(self, snapshot: EntitySnapshot) -> None:
        self._snapshot = snapshot

    async def reload(self) -> EntitySnapshot:
        """Fetch a fresh snapshot from the sheet web app."""
        snapshot = await self.client.fetch_snapshot()
        self._snapshot = snapshot
        logger.info("Entity snapshot reloaded")
        return snapshot

    def find_asset(self, asset_id: str) -> Optional[Asset]:
        return next((a for a in self.snapshot.assets if a.id == asset_id), None)

    def merge(self, result: GenerationResult) -> None:
        """New work orders go first (newest on top), tasks are appended."""
        snapshot = self.snapshot
        snapshot.work_orders = list(reversed(result.work_orders)) + snapshot.work_orders
        snapshot.tasks = snapshot.tasks + result.tasks

    async def run_batch(self, plan_ids: Sequence[str],
                        context: GenerationContext) -> GenerationResult:
        """
        Generate work orders for a confirmed selection and merge them.

        Raises:
            BatchInProgressError: Another batch is running
            GenerationError: A remote call failed; whatever was created before
                the failure has still been merged and logged
        """
        if not plan_ids:
            return GenerationResult()
        if self._batch_lock.locked():
            raise BatchInProgressError("A generation batch is already running")

        async with self._batch_lock:
            snapshot = self.snapshot
            batch_id = await self.ledger.start_batch(plan_ids, context)
            try:
                result = await pm_generator.generate(plan_ids, context, snapshot,
                                                     self.client)
            except GenerationError as e:
                self.merge(GenerationResult(work_orders=e.created_work_orders,
                                            tasks=e.created_tasks))
                try:
                    await self.ledger.fail_batch(batch_id, e)
                except Exception as ledger_error:
                    logger.error(f"Batch {batch_id}: could not record failure: {ledger_error}")
                raise

            self.merge(result)
            await self.ledger.complete_batch(batch_id, result)
            logger.info(f"Batch {batch_id}: generated {len(result.work_orders)} work order(s)")
            return result


# Singleton
_store: Optional[EntityStore] = None


def get_store() -> EntityStore:
    global _store
    if _store is None:
        _store = EntityStore()
    return _store

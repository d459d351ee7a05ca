"""
PM Scan Engine - Generation Ledger
Version: 1.0.0

Records every generation batch in SQLite: what was selected, what got created,
and where a failed batch stopped. Failed batches leave their already-created
work orders on the remote, so this is where an operator looks before retrying.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from database import (
    get_db, execute_all, execute_insert, execute_one, execute_update,
    ids_from_text, ids_to_text,
)
from models.generation import GenerationContext, GenerationResult
from models.maintenance import WorkOrder
from services.pm_generator import GenerationError

logger = logging.getLogger(__name__)


class GenerationLedger:
    """SQLite-backed log of generation batches."""

    async def start_batch(self, plan_ids: Sequence[str],
                          context: GenerationContext) -> int:
        """Insert a 'running' batch row and return its id."""
        async with get_db() as db:
            batch_id = await execute_insert(db, """
                INSERT INTO generation_batches
                    (plan_ids, scanned_code, company_id, location_id, asset_id,
                     priority, requested_by, status, started_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, 'running', ?)
            """, (
                ids_to_text(plan_ids),
                context.scanned_code,
                context.filters.company_id,
                context.filters.location_id,
                context.asset.id if context.asset else None,
                context.priority.value,
                context.requested_by,
                datetime.now().isoformat(),
            ))
        logger.info(f"Generation batch {batch_id} started with {len(plan_ids)} plan(s)")
        return batch_id

    async def complete_batch(self, batch_id: int, result: GenerationResult) -> None:
        async with get_db() as db:
            await self._insert_items(db, batch_id, result.work_orders,
                                     self._task_counts(result))
            await execute_update(db, """
                UPDATE generation_batches
                SET status = 'completed', finished_at = ?
                WHERE id = ?
            """, (datetime.now().isoformat(), batch_id))

    async def fail_batch(self, batch_id: int, error: GenerationError) -> None:
        """Mark a batch failed, keeping the work orders it did create."""
        partial = GenerationResult(work_orders=error.created_work_orders,
                                   tasks=error.created_tasks)
        async with get_db() as db:
            await self._insert_items(db, batch_id, partial.work_orders,
                                     self._task_counts(partial))
            await execute_update(db, """
                UPDATE generation_batches
                SET status = 'failed', finished_at = ?, error_message = ?,
                    failed_plan_id = ?, remaining_plan_ids = ?
                WHERE id = ?
            """, (
                datetime.now().isoformat(), str(error), error.failed_plan_id,
                ids_to_text(error.remaining_plan_ids), batch_id,
            ))
        logger.warning(f"Generation batch {batch_id} failed at plan {error.failed_plan_id}: "
                       f"{len(partial.work_orders)} work order(s) already created")

    async def list_batches(self, status: Optional[str] = None,
                           limit: int = 50) -> List[Dict[str, Any]]:
        query = "SELECT * FROM generation_batches"
        params: List[Any] = []
        if status:
            query += " WHERE status = ?"
            params.append(status)
        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        async with get_db() as db:
            rows = await execute_all(db, query, params)
        return [self._decode(row) for row in rows]

    async def get_batch(self, batch_id: int) -> Optional[Dict[str, Any]]:
        async with get_db() as db:
            row = await execute_one(
                db, "SELECT * FROM generation_batches WHERE id = ?", (batch_id,))
            if not row:
                return None
            items = await execute_all(db, """
                SELECT * FROM generation_batch_items
                WHERE batch_id = ? ORDER BY id ASC
            """, (batch_id,))
        batch = self._decode(row)
        batch["items"] = items
        return batch

    @staticmethod
    def _task_counts(result: GenerationResult) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for task in result.tasks:
            counts[task.work_order_id] = counts.get(task.work_order_id, 0) + 1
        return counts

    @staticmethod
    def _decode(row: Dict[str, Any]) -> Dict[str, Any]:
        row["plan_ids"] = ids_from_text(row.get("plan_ids"))
        row["remaining_plan_ids"] = ids_from_text(row.get("remaining_plan_ids"))
        return row

    async def _insert_items(self, db, batch_id: int, work_orders: List[WorkOrder],
                            task_counts: Dict[str, int]) -> None:
        for wo in work_orders:
            await db.execute("""
                INSERT INTO generation_batch_items
                    (batch_id, plan_id, work_order_id, work_order_number,
                     asset_id, task_count)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (batch_id, wo.plan_id or "", wo.id, wo.number, wo.asset_id,
                  task_counts.get(wo.id, 0)))


# Singleton
_ledger = GenerationLedger()


def get_ledger() -> GenerationLedger:
    return _ledger

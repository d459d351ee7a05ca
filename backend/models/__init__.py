"""
PM Scan Engine - Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Generation ledger schema (generation_batches,
                      generation_batch_items)
v1.0.0 (2026-10-05): Initial models module
"""

from .maintenance import (
    Asset, Company, EntitySnapshot, EquipmentType, Location, MaintenancePlan,
    PlanStep, Priority, ScopeFilters, Status, System, Task, WorkOrder, WorkType,
)
from .resolution import (
    AssetMatch, NotFound, PlanSelection, ResolutionOutcome, WorkOrderMatch,
)
from .generation import CreatedWorkOrder, GenerationContext, GenerationResult

import logging

from database import get_db

logger = logging.getLogger(__name__)


async def init_db():
    """Initialize SQLite database with the generation ledger schema"""
    async with get_db() as db:
        # ================================================================
        # GENERATION BATCHES (one row per confirmed plan selection)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS generation_batches (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                plan_ids TEXT NOT NULL DEFAULT '[]',
                scanned_code TEXT,
                company_id TEXT,
                location_id TEXT,
                asset_id TEXT,
                priority TEXT,
                requested_by TEXT,
                status TEXT NOT NULL DEFAULT 'running',
                failed_plan_id TEXT,
                remaining_plan_ids TEXT NOT NULL DEFAULT '[]',
                error_message TEXT,
                started_at TIMESTAMP NOT NULL,
                finished_at TIMESTAMP
            )
        """)

        # ================================================================
        # GENERATION BATCH ITEMS (work orders created by a batch)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS generation_batch_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                batch_id INTEGER NOT NULL REFERENCES generation_batches(id) ON DELETE CASCADE,
                plan_id TEXT NOT NULL,
                work_order_id TEXT NOT NULL,
                work_order_number TEXT,
                asset_id TEXT,
                task_count INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("CREATE INDEX IF NOT EXISTS idx_gb_status ON generation_batches(status)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_gbi_batch ON generation_batch_items(batch_id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_gbi_plan ON generation_batch_items(plan_id)")

        await db.commit()

    logger.info("Database initialized successfully (generation ledger)")


__all__ = [
    'Asset', 'Company', 'EntitySnapshot', 'EquipmentType', 'Location',
    'MaintenancePlan', 'PlanStep', 'Priority', 'ScopeFilters', 'Status',
    'System', 'Task', 'WorkOrder', 'WorkType',
    'AssetMatch', 'NotFound', 'PlanSelection', 'ResolutionOutcome', 'WorkOrderMatch',
    'CreatedWorkOrder', 'GenerationContext', 'GenerationResult',
    'init_db'
]

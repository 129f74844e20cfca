"""SQLite-backed client-side state that survives reloads."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite

from ebook_analyzer.models.report import Report

logger = logging.getLogger("ebook_analyzer.client.state")

ACTIVE_SLOT = "active_job"


class ClientStateStore:
    """Persists the in-flight job ID and the set of jobs known to be complete.

    This is what lets a restarted client pick up where it left off instead
    of submitting again or restarting its progress estimate.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the state store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = Path(db_path)
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the database schema."""
        if self._initialized:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS client_slots (
                    slot TEXT PRIMARY KEY,
                    job_id TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS completed_jobs (
                    job_id TEXT PRIMARY KEY,
                    completed_at TEXT NOT NULL,
                    report_json TEXT
                )
            """)

            await db.commit()

        self._initialized = True
        logger.debug(f"Client state database initialized at {self._db_path}")

    async def set_active(self, job_id: str) -> None:
        """Remember the job currently being waited on."""
        await self.initialize()

        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO client_slots (slot, job_id, updated_at)
                VALUES (?, ?, ?)
                """,
                (ACTIVE_SLOT, job_id, datetime.now(timezone.utc).isoformat()),
            )
            await db.commit()

    async def get_active(self) -> Optional[str]:
        """The job ID left in the active slot, if any."""
        await self.initialize()

        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT job_id FROM client_slots WHERE slot = ?", (ACTIVE_SLOT,)
            ) as cursor:
                row = await cursor.fetchone()

        return row[0] if row else None

    async def clear_active(self, job_id: Optional[str] = None) -> None:
        """Empty the active slot (only if it holds ``job_id``, when given)."""
        await self.initialize()

        async with aiosqlite.connect(self._db_path) as db:
            if job_id is None:
                await db.execute("DELETE FROM client_slots WHERE slot = ?", (ACTIVE_SLOT,))
            else:
                await db.execute(
                    "DELETE FROM client_slots WHERE slot = ? AND job_id = ?",
                    (ACTIVE_SLOT, job_id),
                )
            await db.commit()

    async def mark_completed(self, job_id: str, report: Optional[Report] = None) -> None:
        """Add a job to the known-completed set, keeping its report if we have one."""
        await self.initialize()

        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                INSERT INTO completed_jobs (job_id, completed_at, report_json)
                VALUES (?, ?, ?)
                ON CONFLICT(job_id) DO UPDATE SET
                    report_json = COALESCE(excluded.report_json, completed_jobs.report_json)
                """,
                (
                    job_id,
                    datetime.now(timezone.utc).isoformat(),
                    report.model_dump_json() if report is not None else None,
                ),
            )
            await db.commit()

        logger.debug(f"Marked job {job_id} as completed")

    async def is_completed(self, job_id: str) -> bool:
        """Whether the job is in the known-completed set."""
        await self.initialize()

        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT 1 FROM completed_jobs WHERE job_id = ?", (job_id,)
            ) as cursor:
                row = await cursor.fetchone()

        return row is not None

    async def get_report(self, job_id: str) -> Optional[Report]:
        """Report cached when the job was marked complete, if any."""
        await self.initialize()

        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT report_json FROM completed_jobs WHERE job_id = ?", (job_id,)
            ) as cursor:
                row = await cursor.fetchone()

        if row is None or row[0] is None:
            return None
        return Report.model_validate_json(row[0])

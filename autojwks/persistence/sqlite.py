"""SQLite implementation of the rotation repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import RotationRecord, StepRecord
from .repository import RotationRepository


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteRotationRepository(RotationRepository):
    """Persist rotation history using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS rotations (
                rotation_id TEXT PRIMARY KEY,
                request TEXT NOT NULL,
                status TEXT NOT NULL,
                kid TEXT,
                backup_name TEXT,
                warnings TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS rotation_steps (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                rotation_id TEXT NOT NULL,
                step_name TEXT NOT NULL,
                started_at TEXT,
                completed_at TEXT,
                status TEXT,
                output TEXT
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    @staticmethod
    def _to_record(row: sqlite3.Row, steps: list[StepRecord]) -> RotationRecord:
        return RotationRecord(
            rotation_id=row["rotation_id"],
            request=json.loads(row["request"]),
            status=row["status"],
            kid=row["kid"],
            backup_name=row["backup_name"],
            warnings=json.loads(row["warnings"]) if row["warnings"] else [],
            steps=steps,
        )

    # ------------------------------------------------------------------
    # Repository API
    async def create_rotation(self, rotation_id: str, request: dict) -> None:
        await asyncio.to_thread(
            self._execute,
            "INSERT INTO rotations (rotation_id, request, status) VALUES (?, ?, ?)",
            rotation_id,
            json.dumps(request),
            "in_progress",
        )

    async def mark_step_started(self, rotation_id: str, step_name: str) -> None:
        existing = await asyncio.to_thread(
            self._fetchone,
            "SELECT id FROM rotation_steps WHERE rotation_id = ? AND step_name = ?",
            rotation_id,
            step_name,
        )
        if existing:
            return
        await asyncio.to_thread(
            self._execute,
            "INSERT INTO rotation_steps (rotation_id, step_name, started_at) VALUES (?, ?, ?)",
            rotation_id,
            step_name,
            _now(),
        )

    async def mark_step_completed(
        self,
        rotation_id: str,
        step_name: str,
        status: str,
        output: dict | None = None,
    ) -> None:
        await asyncio.to_thread(
            self._execute,
            """
            UPDATE rotation_steps
            SET completed_at = ?, status = ?, output = ?
            WHERE rotation_id = ? AND step_name = ? AND completed_at IS NULL
            """,
            _now(),
            status,
            json.dumps(output or {}),
            rotation_id,
            step_name,
        )

    async def mark_rotation_completed(
        self,
        rotation_id: str,
        status: str = "completed",
        kid: str | None = None,
        backup_name: str | None = None,
        warnings: list[dict] | None = None,
    ) -> None:
        await asyncio.to_thread(
            self._execute,
            """
            UPDATE rotations
            SET status = ?, kid = COALESCE(?, kid), backup_name = COALESCE(?, backup_name),
                warnings = ?
            WHERE rotation_id = ?
            """,
            status,
            kid,
            backup_name,
            json.dumps(warnings or []),
            rotation_id,
        )

    async def get_rotation(self, rotation_id: str) -> RotationRecord | None:
        row = await asyncio.to_thread(
            self._fetchone,
            "SELECT rotation_id, request, status, kid, backup_name, warnings FROM rotations WHERE rotation_id = ?",
            rotation_id,
        )
        if not row:
            return None
        steps_rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT id, rotation_id, step_name, started_at, completed_at, status, output FROM rotation_steps WHERE rotation_id = ? ORDER BY id",
            rotation_id,
        )
        steps = [
            StepRecord(
                id=r["id"],
                rotation_id=r["rotation_id"],
                step_name=r["step_name"],
                started_at=datetime.fromisoformat(r["started_at"]) if r["started_at"] else None,
                completed_at=datetime.fromisoformat(r["completed_at"]) if r["completed_at"] else None,
                status=r["status"],
                output=json.loads(r["output"]) if r["output"] else None,
            )
            for r in steps_rows
        ]
        return self._to_record(row, steps)

    async def list_rotations(self) -> list[RotationRecord]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT rotation_id, request, status, kid, backup_name, warnings FROM rotations",
        )
        return [self._to_record(row, []) for row in rows]

"""In-memory implementation of the rotation repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from .models import RotationRecord, StepRecord
from .repository import RotationRepository


class InMemoryRotationRepository(RotationRepository):
    """Store rotation history in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._rotations: Dict[str, RotationRecord] = {}
        self._step_id = 0

    # ------------------------------------------------------------------
    async def create_rotation(self, rotation_id: str, request: dict) -> None:
        self._rotations[rotation_id] = RotationRecord(
            rotation_id=rotation_id,
            request=dict(request),
            status="in_progress",
        )

    async def mark_step_started(self, rotation_id: str, step_name: str) -> None:
        rotation = self._rotations.get(rotation_id)
        if not rotation:
            return
        # ignore duplicate starts
        for step in rotation.steps:
            if step.step_name == step_name:
                return
        self._step_id += 1
        rotation.steps.append(
            StepRecord(
                id=self._step_id,
                rotation_id=rotation_id,
                step_name=step_name,
                started_at=datetime.now(timezone.utc),
            )
        )

    async def mark_step_completed(
        self,
        rotation_id: str,
        step_name: str,
        status: str,
        output: dict | None = None,
    ) -> None:
        rotation = self._rotations.get(rotation_id)
        if not rotation:
            return
        for step in rotation.steps:
            if step.step_name == step_name and step.completed_at is None:
                step.completed_at = datetime.now(timezone.utc)
                step.status = status
                step.output = output or {}
                break

    async def mark_rotation_completed(
        self,
        rotation_id: str,
        status: str = "completed",
        kid: str | None = None,
        backup_name: str | None = None,
        warnings: list[dict] | None = None,
    ) -> None:
        rotation = self._rotations.get(rotation_id)
        if rotation:
            rotation.status = status
            rotation.kid = kid or rotation.kid
            rotation.backup_name = backup_name or rotation.backup_name
            rotation.warnings = list(warnings or [])

    async def get_rotation(self, rotation_id: str) -> RotationRecord | None:
        return self._rotations.get(rotation_id)

    async def list_rotations(self) -> list[RotationRecord]:
        return list(self._rotations.values())

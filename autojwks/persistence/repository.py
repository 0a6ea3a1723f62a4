"""Repository abstraction for rotation history."""

from __future__ import annotations

from typing import Protocol

from .models import RotationRecord


class RotationRepository(Protocol):
    """Protocol for rotation history backends."""

    async def create_rotation(self, rotation_id: str, request: dict) -> None:
        """Persist the start of a rotation."""

    async def mark_step_started(self, rotation_id: str, step_name: str) -> None:
        """Record start of a stage."""

    async def mark_step_completed(
        self,
        rotation_id: str,
        step_name: str,
        status: str,
        output: dict | None = None,
    ) -> None:
        """Record completion of a stage."""

    async def mark_rotation_completed(
        self,
        rotation_id: str,
        status: str = "completed",
        kid: str | None = None,
        backup_name: str | None = None,
        warnings: list[dict] | None = None,
    ) -> None:
        """Mark the rotation as finished."""

    async def get_rotation(self, rotation_id: str) -> RotationRecord | None:
        """Retrieve a rotation by id."""

    async def list_rotations(self) -> list[RotationRecord]:
        """Return all recorded rotations."""

"""Data models for recorded rotations."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class StepRecord(BaseModel):
    """Record of an individual stage execution."""

    id: Optional[int] = None
    rotation_id: str
    step_name: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: Optional[str] = None
    output: Optional[dict[str, Any]] = None


class RotationRecord(BaseModel):
    """Persisted history of one rotation."""

    rotation_id: str
    request: dict[str, Any] = Field(default_factory=dict)
    status: str = "in_progress"
    kid: Optional[str] = None
    backup_name: Optional[str] = None
    warnings: list[dict[str, Any]] = Field(default_factory=list)
    steps: list[StepRecord] = Field(default_factory=list)

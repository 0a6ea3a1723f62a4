"""Rotation history for autojwks."""

from __future__ import annotations

import os
from typing import Optional

from ..config import AutoJwksConfig, load_config
from .inmemory import InMemoryRotationRepository
from .models import RotationRecord, StepRecord
from .repository import RotationRepository
from .sqlite import SQLiteRotationRepository

_repository_instance: RotationRepository | None = None
_repository_url: str | None = None


def get_repository(
    database_url: Optional[str] = None, config: Optional[AutoJwksConfig] = None
) -> RotationRepository:
    """Factory function to obtain a rotation repository.

    The backend is selected from ``database_url``, which can be provided
    explicitly, via the ``AUTOJWKS_DATABASE_URL`` environment variable, or
    from loaded configuration. When no database is configured, an in-memory
    repository is returned. The repository is cached and reused for as long
    as the resolved URL stays the same.
    """

    global _repository_instance, _repository_url
    if _repository_instance is not None and database_url is None and config is None:
        return _repository_instance

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("AUTOJWKS_DATABASE_URL")
        or getattr(config, "database_url", None)
    )

    if not database_url:
        if _repository_url is not None or _repository_instance is None:
            _repository_instance = InMemoryRotationRepository()
            _repository_url = None
        return _repository_instance

    if _repository_instance is not None and database_url == _repository_url:
        return _repository_instance

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        _repository_instance = SQLiteRotationRepository(path)
        _repository_url = database_url
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _repository_instance


__all__ = [
    "InMemoryRotationRepository",
    "RotationRecord",
    "RotationRepository",
    "SQLiteRotationRepository",
    "StepRecord",
    "get_repository",
]

"""Provider factory and initialization."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from ..config import AutoJwksConfig, load_config
from .base import CacheInvalidationService, KeyManagementService, ObjectStore
from .inmemory import (
    InMemoryCacheInvalidationService,
    InMemoryKeyManagementService,
    InMemoryObjectStore,
)


@dataclass
class Providers:
    """The three services a rotation depends on."""

    kms: KeyManagementService
    store: ObjectStore
    cdn: CacheInvalidationService


def get_providers(
    backend: Optional[str] = None, config: Optional[AutoJwksConfig] = None
) -> Providers:
    """Factory function to get the configured providers."""

    config = config or load_config()
    backend = (
        backend or os.getenv("AUTOJWKS_PROVIDER") or config.provider.backend
    ).lower()

    if backend == "inmemory":
        return Providers(
            kms=InMemoryKeyManagementService(),
            store=InMemoryObjectStore(),
            cdn=InMemoryCacheInvalidationService(),
        )
    elif backend == "aws":
        from .aws import (
            AwsKeyManagementService,
            CloudFrontInvalidationService,
            S3ObjectStore,
        )

        aws_conf = config.provider.aws
        return Providers(
            kms=AwsKeyManagementService(config=aws_conf),
            store=S3ObjectStore(config=aws_conf),
            cdn=CloudFrontInvalidationService(config=aws_conf),
        )
    else:
        raise ValueError(f"Unsupported provider backend: {backend}")


__all__ = [
    "CacheInvalidationService",
    "InMemoryCacheInvalidationService",
    "InMemoryKeyManagementService",
    "InMemoryObjectStore",
    "KeyManagementService",
    "ObjectStore",
    "Providers",
    "get_providers",
]

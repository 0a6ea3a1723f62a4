"""Narrow interfaces for the services a rotation talks to."""

from __future__ import annotations

import abc
from typing import Dict, Optional, Sequence


class KeyManagementService(metaclass=abc.ABCMeta):
    """Creates asymmetric keys, grants their use and exports public halves."""

    @abc.abstractmethod
    async def create_key(
        self,
        key_spec: str,
        key_usage: str,
        tags: Dict[str, str],
        description: Optional[str] = None,
    ) -> str:
        """Create a key and return its provider-assigned identifier."""
        raise NotImplementedError

    @abc.abstractmethod
    async def create_grant(
        self,
        key_id: str,
        grantee: str,
        operations: Sequence[str],
        name: Optional[str] = None,
    ) -> str:
        """Allow ``grantee`` to perform ``operations`` with ``key_id``."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_public_key(self, key_id: str) -> bytes:
        """Return the DER-encoded SubjectPublicKeyInfo of ``key_id``."""
        raise NotImplementedError


class ObjectStore(metaclass=abc.ABCMeta):
    """Durable named blobs grouped into containers."""

    @abc.abstractmethod
    async def get(self, container: str, name: str) -> bytes:
        """Return the object's bytes.

        Raises:
            ObjectNotFoundError: If no object exists under ``name``.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def put(
        self,
        container: str,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = True,
    ) -> None:
        """Store ``data`` under ``name``.

        With ``overwrite=False`` the write only succeeds if ``name`` does not
        exist yet.

        Raises:
            ObjectExistsError: If ``overwrite`` is false and ``name`` exists.
        """
        raise NotImplementedError


class CacheInvalidationService(metaclass=abc.ABCMeta):
    """Evicts paths from an edge cache."""

    @abc.abstractmethod
    async def invalidate(
        self, distribution_id: str, paths: Sequence[str], caller_reference: str
    ) -> str:
        """Request eviction of ``paths`` and return the invalidation id."""
        raise NotImplementedError

"""In-memory providers for tests and dry runs."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ..constants import KEY_SPEC_P256
from ..errors import ObjectExistsError, ObjectNotFoundError
from .base import CacheInvalidationService, KeyManagementService, ObjectStore

_CURVES = {KEY_SPEC_P256: ec.SECP256R1, "ECC_NIST_P384": ec.SECP384R1}


@dataclass
class StoredKey:
    key_id: str
    key_spec: str
    key_usage: str
    tags: Dict[str, str]
    description: Optional[str]
    private_key: ec.EllipticCurvePrivateKey


@dataclass
class Grant:
    grant_id: str
    key_id: str
    grantee: str
    operations: List[str]
    name: Optional[str] = None


class InMemoryKeyManagementService(KeyManagementService):
    """Generates real EC key pairs locally and records grants."""

    def __init__(self) -> None:
        self.keys: Dict[str, StoredKey] = {}
        self.grants: List[Grant] = []

    async def create_key(
        self,
        key_spec: str,
        key_usage: str,
        tags: Dict[str, str],
        description: Optional[str] = None,
    ) -> str:
        curve = _CURVES.get(key_spec)
        if curve is None:
            raise ValueError(f"Unsupported key spec: {key_spec}")
        key_id = str(uuid.uuid4())
        self.keys[key_id] = StoredKey(
            key_id=key_id,
            key_spec=key_spec,
            key_usage=key_usage,
            tags=dict(tags),
            description=description,
            private_key=ec.generate_private_key(curve()),
        )
        return key_id

    async def create_grant(
        self,
        key_id: str,
        grantee: str,
        operations: Sequence[str],
        name: Optional[str] = None,
    ) -> str:
        if key_id not in self.keys:
            raise KeyError(f"Unknown key: {key_id}")
        grant = Grant(
            grant_id=uuid.uuid4().hex,
            key_id=key_id,
            grantee=grantee,
            operations=list(operations),
            name=name,
        )
        self.grants.append(grant)
        return grant.grant_id

    async def get_public_key(self, key_id: str) -> bytes:
        stored = self.keys.get(key_id)
        if stored is None:
            raise KeyError(f"Unknown key: {key_id}")
        return stored.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )


@dataclass
class PutRecord:
    container: str
    name: str
    data: bytes
    content_type: Optional[str] = None


class InMemoryObjectStore(ObjectStore):
    """Dictionary-backed object store that remembers every write in order."""

    def __init__(self, objects: Optional[Dict[Tuple[str, str], bytes]] = None) -> None:
        self.objects: Dict[Tuple[str, str], bytes] = dict(objects or {})
        self.puts: List[PutRecord] = []

    async def get(self, container: str, name: str) -> bytes:
        try:
            return self.objects[(container, name)]
        except KeyError:
            raise ObjectNotFoundError(container, name) from None

    async def put(
        self,
        container: str,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = True,
    ) -> None:
        if not overwrite and (container, name) in self.objects:
            raise ObjectExistsError(container, name)
        self.objects[(container, name)] = bytes(data)
        self.puts.append(PutRecord(container, name, bytes(data), content_type))

    def names(self, container: str) -> List[str]:
        return [name for (c, name) in self.objects if c == container]


@dataclass
class InvalidationRecord:
    invalidation_id: str
    distribution_id: str
    paths: List[str]
    caller_reference: str


class InMemoryCacheInvalidationService(CacheInvalidationService):
    """Records invalidation requests."""

    def __init__(self) -> None:
        self.invalidations: List[InvalidationRecord] = []

    async def invalidate(
        self, distribution_id: str, paths: Sequence[str], caller_reference: str
    ) -> str:
        record = InvalidationRecord(
            invalidation_id=uuid.uuid4().hex[:14].upper(),
            distribution_id=distribution_id,
            paths=list(paths),
            caller_reference=caller_reference,
        )
        self.invalidations.append(record)
        return record.invalidation_id

"""Tests for the key set read-backup-write sequence."""

import json

import pytest

from autojwks.config import KeySetConfig
from autojwks.contracts import Jwk
from autojwks.errors import (
    BackupWriteError,
    KeySetReadError,
    MalformedKeySetError,
    ObjectExistsError,
    PublishWriteError,
)
from autojwks.providers import InMemoryObjectStore
from autojwks.stages import KeySetPublisher
from tests.fixtures.clock import BUCKET, STAMP, backup_name, fixed_clock
from tests.fixtures.providers import FailingStore

ORIGINAL = b'{"keys":[{"kid":"K0","kty":"EC","use":"sig","crv":"P-256","x":"a","y":"b"}]}'
BACKUP_NAME = backup_name("K1")


def _entry(kid: str = "K1") -> Jwk:
    return Jwk(kid=kid, crv="P-256", x="xx", y="yy")


@pytest.mark.asyncio
async def test_publish_backs_up_exact_bytes_then_appends():
    store = InMemoryObjectStore({(BUCKET, "jwks.json"): ORIGINAL})
    publisher = KeySetPublisher(store, clock=fixed_clock)

    outcome = await publisher.publish(BUCKET, _entry())

    assert outcome.backup_name == BACKUP_NAME
    assert outcome.key_count_before == 1
    assert outcome.key_count_after == 2
    assert [p.name for p in store.puts] == [BACKUP_NAME, "jwks.json"]
    assert store.objects[(BUCKET, BACKUP_NAME)] == ORIGINAL

    published = json.loads(store.objects[(BUCKET, "jwks.json")])
    assert [k["kid"] for k in published["keys"]] == ["K0", "K1"]
    assert store.puts[-1].content_type == "application/json"


@pytest.mark.asyncio
async def test_publish_honours_configured_names():
    keyset = KeySetConfig(path="keys/jwks.json", backup_prefix="keys/old-", backup_suffix=".json")
    store = InMemoryObjectStore({(BUCKET, "keys/jwks.json"): b'{"keys": []}'})

    outcome = await KeySetPublisher(store, keyset, clock=fixed_clock).publish(BUCKET, _entry())

    assert outcome.backup_name == f"keys/old-{STAMP}-K1.json"
    assert sorted(store.names(BUCKET)) == ["keys/jwks.json", outcome.backup_name]


@pytest.mark.asyncio
async def test_missing_key_set_writes_nothing():
    store = InMemoryObjectStore()

    with pytest.raises(KeySetReadError) as exc_info:
        await KeySetPublisher(store).publish(BUCKET, _entry())

    assert exc_info.value.stage == "read"
    assert store.puts == []


@pytest.mark.asyncio
async def test_malformed_key_set_writes_nothing():
    store = InMemoryObjectStore({(BUCKET, "jwks.json"): b"<html>oops</html>"})

    with pytest.raises(MalformedKeySetError):
        await KeySetPublisher(store).publish(BUCKET, _entry())

    assert store.puts == []


@pytest.mark.asyncio
async def test_backup_failure_leaves_canonical_document_unchanged():
    store = FailingStore({(BUCKET, "jwks.json"): ORIGINAL}, fail_names={BACKUP_NAME})

    with pytest.raises(BackupWriteError):
        await KeySetPublisher(store, clock=fixed_clock).publish(BUCKET, _entry())

    assert store.objects[(BUCKET, "jwks.json")] == ORIGINAL
    assert store.puts == []


@pytest.mark.asyncio
async def test_canonical_write_failure_keeps_backup():
    store = FailingStore({(BUCKET, "jwks.json"): ORIGINAL}, fail_names={"jwks.json"})

    with pytest.raises(PublishWriteError) as exc_info:
        await KeySetPublisher(store, clock=fixed_clock).publish(BUCKET, _entry())

    assert BACKUP_NAME in str(exc_info.value)
    assert store.objects[(BUCKET, BACKUP_NAME)] == ORIGINAL


@pytest.mark.asyncio
async def test_existing_backup_is_never_replaced():
    earlier = b'{"keys": []}'
    store = InMemoryObjectStore(
        {(BUCKET, "jwks.json"): ORIGINAL, (BUCKET, BACKUP_NAME): earlier}
    )

    with pytest.raises(BackupWriteError) as exc_info:
        await KeySetPublisher(store, clock=fixed_clock).publish(BUCKET, _entry())

    assert exc_info.value.stage == "backup"
    assert isinstance(exc_info.value.__cause__, ObjectExistsError)
    assert store.objects[(BUCKET, BACKUP_NAME)] == earlier
    assert store.objects[(BUCKET, "jwks.json")] == ORIGINAL
    assert store.puts == []


@pytest.mark.asyncio
async def test_backup_names_differ_for_keys_published_in_the_same_instant():
    store = InMemoryObjectStore({(BUCKET, "jwks.json"): b'{"keys": []}'})
    publisher = KeySetPublisher(store, clock=fixed_clock)

    first = await publisher.publish(BUCKET, _entry("K1"))
    second = await publisher.publish(BUCKET, _entry("K2"))

    assert first.backup_name != second.backup_name
    assert store.objects[(BUCKET, first.backup_name)] == b'{"keys": []}'
    kids = [k["kid"] for k in json.loads(store.objects[(BUCKET, second.backup_name)])["keys"]]
    assert kids == ["K1"]

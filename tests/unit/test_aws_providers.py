"""Tests for the boto3-backed providers using stand-in clients."""

import io
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from autojwks.errors import InvalidationError, ObjectExistsError, ObjectNotFoundError
from autojwks.providers.aws import (
    AwsKeyManagementService,
    CloudFrontInvalidationService,
    S3ObjectStore,
)


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.mark.asyncio
async def test_kms_create_key_and_grant_requests():
    client = Mock()
    client.create_key.return_value = {"KeyMetadata": {"KeyId": "key-123"}}
    client.create_grant.return_value = {"GrantId": "grant-1"}
    kms = AwsKeyManagementService(client=client)

    key_id = await kms.create_key(
        "ECC_NIST_P256", "SIGN_VERIFY", {"purpose": "auto-rotate"}, description="d"
    )
    grant_id = await kms.create_grant("key-123", "arn:role", ["Sign", "Verify"], name="n")

    assert key_id == "key-123"
    assert grant_id == "grant-1"
    client.create_key.assert_called_once_with(
        KeySpec="ECC_NIST_P256",
        KeyUsage="SIGN_VERIFY",
        Tags=[{"TagKey": "purpose", "TagValue": "auto-rotate"}],
        Description="d",
    )
    client.create_grant.assert_called_once_with(
        KeyId="key-123",
        GranteePrincipal="arn:role",
        Operations=["Sign", "Verify"],
        Name="n",
    )


@pytest.mark.asyncio
async def test_kms_get_public_key_returns_bytes():
    client = Mock()
    client.get_public_key.return_value = {"PublicKey": bytearray(b"\x30\x59")}

    material = await AwsKeyManagementService(client=client).get_public_key("key-123")

    assert material == b"\x30\x59"
    client.get_public_key.assert_called_once_with(KeyId="key-123")


@pytest.mark.asyncio
async def test_s3_get_and_put():
    client = Mock()
    client.get_object.return_value = {"Body": io.BytesIO(b'{"keys": []}')}
    store = S3ObjectStore(client=client)

    assert await store.get("bucket", "jwks.json") == b'{"keys": []}'
    await store.put("bucket", "jwks.json", b"{}", content_type="application/json")

    client.get_object.assert_called_once_with(Bucket="bucket", Key="jwks.json")
    client.put_object.assert_called_once_with(
        Bucket="bucket", Key="jwks.json", Body=b"{}", ContentType="application/json"
    )


@pytest.mark.asyncio
async def test_s3_create_only_put_sends_precondition():
    client = Mock()
    store = S3ObjectStore(client=client)

    await store.put("bucket", "jwks-backup.json", b"{}", overwrite=False)

    client.put_object.assert_called_once_with(
        Bucket="bucket", Key="jwks-backup.json", Body=b"{}", IfNoneMatch="*"
    )


@pytest.mark.asyncio
async def test_s3_failed_precondition_maps_to_exists():
    client = Mock()
    client.put_object.side_effect = _client_error("PreconditionFailed", "PutObject")

    with pytest.raises(ObjectExistsError):
        await S3ObjectStore(client=client).put("bucket", "jwks-backup.json", b"{}", overwrite=False)

@pytest.mark.asyncio
async def test_s3_missing_object_maps_to_not_found():
    client = Mock()
    client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")

    with pytest.raises(ObjectNotFoundError):
        await S3ObjectStore(client=client).get("bucket", "jwks.json")


@pytest.mark.asyncio
async def test_s3_other_errors_propagate():
    client = Mock()
    client.get_object.side_effect = _client_error("AccessDenied", "GetObject")

    with pytest.raises(ClientError):
        await S3ObjectStore(client=client).get("bucket", "jwks.json")


@pytest.mark.asyncio
async def test_cloudfront_invalidation_batch():
    client = Mock()
    client.create_invalidation.return_value = {"Invalidation": {"Id": "I123"}}

    invalidation_id = await CloudFrontInvalidationService(client=client).invalidate(
        "E2EXAMPLE", ["/jwks.json"], caller_reference="2024-01-02T03:04:05.678Z"
    )

    assert invalidation_id == "I123"
    client.create_invalidation.assert_called_once_with(
        DistributionId="E2EXAMPLE",
        InvalidationBatch={
            "Paths": {"Quantity": 1, "Items": ["/jwks.json"]},
            "CallerReference": "2024-01-02T03:04:05.678Z",
        },
    )


@pytest.mark.asyncio
async def test_cloudfront_errors_map_to_invalidation_error():
    client = Mock()
    client.create_invalidation.side_effect = _client_error("NoSuchDistribution", "CreateInvalidation")

    with pytest.raises(InvalidationError):
        await CloudFrontInvalidationService(client=client).invalidate(
            "E2EXAMPLE", ["/jwks.json"], caller_reference="ref"
        )

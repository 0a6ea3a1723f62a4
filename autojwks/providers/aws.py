"""AWS providers backed by boto3.

boto3 clients are blocking, so every call is pushed onto a worker thread with
``asyncio.to_thread``. Clients use the standard boto3 credential chain (env
vars, shared credentials, instance roles) unless pre-built clients are passed
in.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

import boto3
from botocore.exceptions import ClientError

from ..config import AwsConfig
from ..errors import InvalidationError, ObjectExistsError, ObjectNotFoundError
from .base import CacheInvalidationService, KeyManagementService, ObjectStore

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}
_EXISTS_CODES = {"PreconditionFailed", "412", "ConditionalRequestConflict"}


def make_client(service: str, config: Optional[AwsConfig] = None) -> Any:
    """Create a boto3 client for ``service`` using ``config``."""
    config = config or AwsConfig()
    session = boto3.session.Session(
        profile_name=config.profile, region_name=config.region
    )
    return session.client(service, endpoint_url=config.endpoint_url)


class AwsKeyManagementService(KeyManagementService):
    """AWS KMS implementation."""

    def __init__(self, client: Any = None, config: Optional[AwsConfig] = None) -> None:
        self.client = client or make_client("kms", config)

    async def create_key(
        self,
        key_spec: str,
        key_usage: str,
        tags: Dict[str, str],
        description: Optional[str] = None,
    ) -> str:
        params: Dict[str, Any] = {
            "KeySpec": key_spec,
            "KeyUsage": key_usage,
            "Tags": [{"TagKey": k, "TagValue": v} for k, v in tags.items()],
        }
        if description:
            params["Description"] = description
        response = await asyncio.to_thread(self.client.create_key, **params)
        return response["KeyMetadata"]["KeyId"]

    async def create_grant(
        self,
        key_id: str,
        grantee: str,
        operations: Sequence[str],
        name: Optional[str] = None,
    ) -> str:
        params: Dict[str, Any] = {
            "KeyId": key_id,
            "GranteePrincipal": grantee,
            "Operations": list(operations),
        }
        if name:
            params["Name"] = name
        response = await asyncio.to_thread(self.client.create_grant, **params)
        return response["GrantId"]

    async def get_public_key(self, key_id: str) -> bytes:
        response = await asyncio.to_thread(self.client.get_public_key, KeyId=key_id)
        return bytes(response["PublicKey"])


class S3ObjectStore(ObjectStore):
    """Amazon S3 implementation; containers are bucket names."""

    def __init__(self, client: Any = None, config: Optional[AwsConfig] = None) -> None:
        self.client = client or make_client("s3", config)

    def _read(self, container: str, name: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=container, Key=name)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(container, name) from exc
            raise
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    async def get(self, container: str, name: str) -> bytes:
        return await asyncio.to_thread(self._read, container, name)

    async def put(
        self,
        container: str,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = True,
    ) -> None:
        params: Dict[str, Any] = {"Bucket": container, "Key": name, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        if not overwrite:
            params["IfNoneMatch"] = "*"
        await asyncio.to_thread(self._write, container, name, params)

    def _write(self, container: str, name: str, params: Dict[str, Any]) -> None:
        try:
            self.client.put_object(**params)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in _EXISTS_CODES:
                raise ObjectExistsError(container, name) from exc
            raise


class CloudFrontInvalidationService(CacheInvalidationService):
    """Amazon CloudFront implementation."""

    def __init__(self, client: Any = None, config: Optional[AwsConfig] = None) -> None:
        self.client = client or make_client("cloudfront", config)

    async def invalidate(
        self, distribution_id: str, paths: Sequence[str], caller_reference: str
    ) -> str:
        batch = {
            "Paths": {"Quantity": len(paths), "Items": list(paths)},
            "CallerReference": caller_reference,
        }
        try:
            response = await asyncio.to_thread(
                self.client.create_invalidation,
                DistributionId=distribution_id,
                InvalidationBatch=batch,
            )
        except ClientError as exc:
            raise InvalidationError(
                f"CloudFront rejected invalidation for {distribution_id}: {exc}"
            ) from exc
        invalidation_id = response["Invalidation"]["Id"]
        logger.debug(f"Created invalidation {invalidation_id} on {distribution_id}")
        return invalidation_id

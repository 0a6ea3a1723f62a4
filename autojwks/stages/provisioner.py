"""Creates the new signing key and authorizes the signer principal."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..constants import (
    DEFAULT_KEY_TAGS,
    KEY_SPEC_P256,
    KEY_USAGE_SIGN_VERIFY,
    SIGNER_GRANT_OPERATIONS,
)
from ..contracts import RotationRequest, RotationWarning, SigningKey
from ..errors import ProvisioningError
from ..providers.base import KeyManagementService

logger = logging.getLogger(__name__)


class KeyProvisioner:
    """Provisions one P-256 sign/verify key per rotation."""

    def __init__(
        self,
        kms: KeyManagementService,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._kms = kms
        self._tags = dict(DEFAULT_KEY_TAGS if tags is None else tags)

    def key_tags(self, request: RotationRequest) -> Dict[str, str]:
        return {**self._tags, "key-alias": request.key_alias}

    async def provision(
        self,
        request: RotationRequest,
        warnings: Optional[List[RotationWarning]] = None,
    ) -> SigningKey:
        """Create the key and grant ``request.can_sign_role_arn`` access to it.

        Only key creation is fatal. A rejected grant is appended to
        ``warnings`` and the key is returned without it.

        Raises:
            ProvisioningError: If the key management service refuses to
                create the key.
        """
        tags = self.key_tags(request)
        try:
            key_id = await self._kms.create_key(
                key_spec=KEY_SPEC_P256,
                key_usage=KEY_USAGE_SIGN_VERIFY,
                tags=tags,
                description=f"Signing key for {request.key_alias}",
            )
        except Exception as exc:
            logger.error(f"Key creation failed for alias {request.key_alias}: {exc}")
            raise ProvisioningError(f"Key creation failed: {exc}") from exc
        logger.info(f"Created signing key {key_id} for alias {request.key_alias}")

        grants: Dict[str, List[str]] = {}
        operations = list(SIGNER_GRANT_OPERATIONS)
        try:
            await self._kms.create_grant(
                key_id=key_id,
                grantee=request.can_sign_role_arn,
                operations=operations,
                name=f"Role {request.can_sign_role_arn} can Sign with key",
            )
        except Exception as exc:
            message = (
                f"Grant for {request.can_sign_role_arn} on key {key_id} failed: {exc}"
            )
            logger.warning(message)
            if warnings is not None:
                warnings.append(RotationWarning(stage="grant", message=message))
        else:
            grants[request.can_sign_role_arn] = operations
            logger.info(f"Granted {request.can_sign_role_arn} signing access to {key_id}")

        return SigningKey(key_id=key_id, grants=grants, tags=tags)

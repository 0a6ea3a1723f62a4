"""Rotation workflow: provision, export, publish, invalidate."""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from .config import AutoJwksConfig
from .contracts import RotationRequest, RotationResult, RotationWarning
from .errors import InvalidationError, RotationError
from .persistence import RotationRepository
from .providers import Providers
from .providers.base import CacheInvalidationService, KeyManagementService, ObjectStore
from .stages import CacheInvalidator, KeyExporter, KeyProvisioner, KeySetPublisher
from .utils.timestamps import Clock, utc_now

logger = logging.getLogger(__name__)


class RotationWorkflow:
    """Runs the four rotation stages strictly in sequence.

    A failing stage stops the rotation and its ``RotationError`` propagates.
    The signer grant and the cache invalidation are best effort: their
    failures are returned as warnings on the result instead.
    """

    def __init__(
        self,
        kms: KeyManagementService,
        store: ObjectStore,
        cdn: CacheInvalidationService,
        config: Optional[AutoJwksConfig] = None,
        repository: RotationRepository | None = None,
        clock: Clock = utc_now,
    ) -> None:
        config = config or AutoJwksConfig()
        self.provisioner = KeyProvisioner(kms, tags=config.key.tags)
        self.exporter = KeyExporter(kms)
        self.publisher = KeySetPublisher(store, config.keyset, clock=clock)
        self.invalidator = CacheInvalidator(cdn, clock=clock)
        self._repository = repository

    @classmethod
    def from_providers(
        cls, providers: Providers, **kwargs
    ) -> "RotationWorkflow":
        return cls(providers.kms, providers.store, providers.cdn, **kwargs)

    async def rotate(self, request: RotationRequest) -> RotationResult:
        """Rotate the signing key described by ``request``.

        Raises:
            RotationError: The subclass names the stage that failed.
        """
        rotation_id = str(uuid.uuid4())
        warnings: List[RotationWarning] = []
        if self._repository is not None:
            await self._repository.create_rotation(rotation_id, request.to_wire())
        logger.info(
            f"Starting rotation {rotation_id} for {request.key_alias} "
            f"in {request.public_keys_bucket_name}"
        )

        key = None
        step = "provision"
        try:
            await self._step_started(rotation_id, step)
            key = await self.provisioner.provision(request, warnings)
            await self._step_completed(rotation_id, step, "completed", {"kid": key.key_id})

            step = "export"
            await self._step_started(rotation_id, step)
            jwk = await self.exporter.export(key.key_id)
            await self._step_completed(rotation_id, step, "completed", jwk.to_dict())

            step = "publish"
            await self._step_started(rotation_id, step)
            outcome = await self.publisher.publish(request.public_keys_bucket_name, jwk)
            await self._step_completed(
                rotation_id, step, "completed", outcome.model_dump()
            )
        except RotationError as exc:
            logger.error(f"Rotation {rotation_id} failed at {exc.stage}: {exc}")
            await self._step_completed(
                rotation_id, step, "failed", {"error": str(exc), "stage": exc.stage}
            )
            await self._rotation_completed(
                rotation_id,
                "failed",
                kid=key.key_id if key is not None else None,
                warnings=warnings,
            )
            raise

        step = "invalidate"
        invalidation_id: Optional[str] = None
        await self._step_started(rotation_id, step)
        try:
            invalidation_id = await self.invalidator.invalidate(
                request.cloudfront_distribution_id, [self.publisher.path]
            )
        except InvalidationError as exc:
            logger.warning(f"Rotation {rotation_id}: {exc}")
            warnings.append(RotationWarning(stage=step, message=str(exc)))
            await self._step_completed(rotation_id, step, "failed", {"error": str(exc)})
        else:
            await self._step_completed(
                rotation_id, step, "completed", {"invalidation_id": invalidation_id}
            )

        await self._rotation_completed(
            rotation_id,
            "completed",
            kid=key.key_id,
            backup_name=outcome.backup_name,
            warnings=warnings,
        )
        logger.info(
            f"Rotation {rotation_id} published {key.key_id} "
            f"with {len(warnings)} warning(s)"
        )
        return RotationResult(
            rotation_id=rotation_id,
            request=request,
            key=key,
            jwk=jwk,
            backup_name=outcome.backup_name,
            key_count_before=outcome.key_count_before,
            key_count_after=outcome.key_count_after,
            invalidation_id=invalidation_id,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    async def _step_started(self, rotation_id: str, step: str) -> None:
        if self._repository is not None:
            await self._repository.mark_step_started(rotation_id, step)

    async def _step_completed(
        self, rotation_id: str, step: str, status: str, output: dict | None = None
    ) -> None:
        if self._repository is not None:
            await self._repository.mark_step_completed(rotation_id, step, status, output)

    async def _rotation_completed(
        self,
        rotation_id: str,
        status: str,
        kid: str | None = None,
        backup_name: str | None = None,
        warnings: List[RotationWarning] | None = None,
    ) -> None:
        if self._repository is not None:
            await self._repository.mark_rotation_completed(
                rotation_id,
                status=status,
                kid=kid,
                backup_name=backup_name,
                warnings=[w.model_dump() for w in warnings or []],
            )

"""Edge cache invalidation of the published key set."""

from __future__ import annotations

import logging
from typing import Sequence

from ..errors import InvalidationError
from ..providers.base import CacheInvalidationService
from ..utils.timestamps import Clock, iso_timestamp, utc_now

logger = logging.getLogger(__name__)


def cache_path(name: str) -> str:
    """CloudFront paths are absolute."""
    return name if name.startswith("/") else f"/{name}"


class CacheInvalidator:
    """Requests eviction of the key set path so consumers see the new key."""

    def __init__(self, cdn: CacheInvalidationService, clock: Clock = utc_now) -> None:
        self._cdn = cdn
        self._clock = clock

    async def invalidate(self, distribution: str, paths: Sequence[str]) -> str:
        """Issue one invalidation for ``paths``.

        The caller reference is the current timestamp so that repeated
        requests are not collapsed by the provider.

        Raises:
            InvalidationError: If the provider rejects the request.
        """
        items = [cache_path(p) for p in paths]
        reference = iso_timestamp(self._clock())
        try:
            invalidation_id = await self._cdn.invalidate(
                distribution, items, caller_reference=reference
            )
        except InvalidationError:
            raise
        except Exception as exc:
            raise InvalidationError(
                f"Invalidating {', '.join(items)} on {distribution} failed: {exc}"
            ) from exc
        logger.info(f"Requested invalidation {invalidation_id} of {items} on {distribution}")
        return invalidation_id

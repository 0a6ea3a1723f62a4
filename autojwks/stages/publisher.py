"""Read-modify-write of the published key set with a prior backup."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import KeySetConfig
from ..constants import JSON_CONTENT_TYPE
from ..contracts import Jwk, Jwks, PublishOutcome
from ..errors import BackupWriteError, KeySetReadError, PublishWriteError
from ..providers.base import ObjectStore
from ..utils.timestamps import Clock, iso_timestamp, utc_now

logger = logging.getLogger(__name__)


class KeySetPublisher:
    """Appends a JWK to the key set stored under the canonical name.

    The sequence is read, back up the exact bytes read under a new name that
    is never overwritten, then overwrite the canonical object. The canonical
    write has no concurrency control: two publishers racing on one container
    can each read the same base document, and the last writer's version
    replaces the other's. Callers must serialize rotations against a
    container themselves.
    """

    def __init__(
        self,
        store: ObjectStore,
        keyset: Optional[KeySetConfig] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._keyset = keyset or KeySetConfig()
        self._clock = clock

    @property
    def path(self) -> str:
        return self._keyset.path

    def backup_name(self, kid: str) -> str:
        """Name for a backup taken now before publishing ``kid``.

        Every rotation provisions a fresh key, so the kid keeps names taken in
        the same millisecond apart.
        """
        stamp = iso_timestamp(self._clock())
        return f"{self._keyset.backup_prefix}{stamp}-{kid}{self._keyset.backup_suffix}"

    async def read(self, container: str) -> tuple[bytes, Jwks]:
        """Fetch and parse the canonical key set.

        Raises:
            KeySetReadError: If the document is missing or unreadable.
            MalformedKeySetError: If the document is not a key set.
        """
        try:
            current = await self._store.get(container, self.path)
        except Exception as exc:
            logger.error(f"Reading {container}/{self.path} failed: {exc}")
            raise KeySetReadError(f"Reading key set failed: {exc}") from exc
        return current, Jwks.parse(current)

    async def publish(self, container: str, new_entry: Jwk) -> PublishOutcome:
        """Back up the current key set and write it back with ``new_entry``.

        Raises:
            KeySetReadError: Nothing was written.
            BackupWriteError: The canonical document was not touched.
            PublishWriteError: The backup exists; the canonical document may
                need restoring from it.
        """
        current, keyset = await self.read(container)

        backup_name = self.backup_name(new_entry.kid)
        try:
            await self._store.put(
                container,
                backup_name,
                current,
                content_type=JSON_CONTENT_TYPE,
                overwrite=False,
            )
        except Exception as exc:
            logger.error(f"Backup of {container}/{self.path} failed: {exc}")
            raise BackupWriteError(f"Writing backup {backup_name} failed: {exc}") from exc
        logger.info(f"Backed up {container}/{self.path} to {backup_name}")

        updated = keyset.append(new_entry)
        try:
            await self._store.put(
                container, self.path, updated.to_bytes(), content_type=JSON_CONTENT_TYPE
            )
        except Exception as exc:
            logger.error(
                f"Writing {container}/{self.path} failed after backup {backup_name}: {exc}. "
                "Canonical key set may need to be restored from the backup."
            )
            raise PublishWriteError(
                f"Writing key set failed (backup at {backup_name}): {exc}"
            ) from exc

        logger.info(
            f"Published {new_entry.kid} to {container}/{self.path} "
            f"({len(keyset.keys)} -> {len(updated.keys)} keys)"
        )
        return PublishOutcome(
            backup_name=backup_name,
            key_count_before=len(keyset.keys),
            key_count_after=len(updated.keys),
        )

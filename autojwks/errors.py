"""Error taxonomy for key rotation."""

from __future__ import annotations


class AutoJwksError(Exception):
    """Base class for all autojwks errors."""


class InvalidRequestError(AutoJwksError):
    """Raised when a rotation request cannot be constructed from its input."""


class ObjectNotFoundError(AutoJwksError, KeyError):
    """Raised by object stores when a named object does not exist."""

    def __init__(self, container: str, name: str) -> None:
        super().__init__(f"{container}/{name} not found")
        self.container = container
        self.name = name

    def __str__(self) -> str:
        return f"{self.container}/{self.name} not found"


class ObjectExistsError(AutoJwksError):
    """Raised by object stores when a create-only write finds an existing object."""

    def __init__(self, container: str, name: str) -> None:
        super().__init__(f"{container}/{name} already exists")
        self.container = container
        self.name = name


class InvalidationError(AutoJwksError):
    """Raised by cache invalidation providers."""


class RotationError(AutoJwksError):
    """A rotation stage failed; remaining stages were not run."""

    stage = "rotation"

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ProvisioningError(RotationError):
    """Key creation was rejected by the key management service."""

    stage = "provision"


class ExportError(RotationError):
    """Public key material could not be fetched or converted to a JWK."""

    stage = "export"


class KeySetReadError(RotationError):
    """The published key set could not be read."""

    stage = "read"


class MalformedKeySetError(KeySetReadError):
    """The published key set is not a valid JWKS document."""


class BackupWriteError(RotationError):
    """The backup of the published key set could not be written."""

    stage = "backup"


class PublishWriteError(RotationError):
    """The updated key set could not be written to the canonical name."""

    stage = "publish"

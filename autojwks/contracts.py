"""Typed request, key and result contracts for key rotation."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import KEY_SPEC_P256, KEY_USAGE_SIGN_VERIFY
from .errors import InvalidRequestError, MalformedKeySetError


class RotationRequest(BaseModel):
    """The sole input of a rotation, validated once at the boundary."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key_alias: str = Field(alias="keyAlias", min_length=1)
    can_sign_role_arn: str = Field(alias="canSignRoleArn", min_length=1)
    key_management_role_arn: str = Field(alias="keyManagementRoleArn", min_length=1)
    public_keys_bucket_name: str = Field(alias="publicKeysBucketName", min_length=1)
    cloudfront_distribution_id: str = Field(
        alias="cloudfrontDistributionId", min_length=1
    )

    @classmethod
    def from_json(cls, data: str | bytes | None) -> "RotationRequest":
        """Build a request from a JSON document using the camelCase wire names."""
        if not data:
            raise InvalidRequestError("Request body is empty")
        try:
            return cls.model_validate_json(data)
        except ValidationError as exc:
            missing = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
            raise InvalidRequestError(
                f"Invalid rotation request: {', '.join(missing) or exc}"
            ) from exc

    @classmethod
    def from_event(cls, event: Dict[str, Any] | None) -> "RotationRequest":
        """Build a request from an HTTP-style event carrying a JSON ``body``."""
        if not event:
            raise InvalidRequestError("Event is empty")
        return cls.from_json(event.get("body"))

    def to_wire(self) -> Dict[str, str]:
        """Return the request using its camelCase wire names."""
        return self.model_dump(by_alias=True)


class SigningKey(BaseModel):
    """An asymmetric signing key created for one rotation."""

    model_config = ConfigDict(frozen=True)

    key_id: str
    key_spec: str = KEY_SPEC_P256
    key_usage: str = KEY_USAGE_SIGN_VERIFY
    grants: Dict[str, List[str]] = Field(default_factory=dict)
    tags: Dict[str, str] = Field(default_factory=dict)


class Jwk(BaseModel):
    """Public half of a signing key in JSON Web Key form."""

    model_config = ConfigDict(frozen=True, extra="allow")

    kid: str
    kty: str = "EC"
    use: str = "sig"
    crv: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Jwks(BaseModel):
    """A published JSON Web Key Set.

    Entries are kept as plain mappings so that members this package does not
    model survive a read-modify-write cycle untouched.
    """

    model_config = ConfigDict(extra="allow")

    keys: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def parse(cls, data: bytes | str) -> "Jwks":
        """Parse a stored key set document.

        Raises:
            MalformedKeySetError: If the document is not a JSON object with a
                list of key objects under ``keys``.
        """
        try:
            document = json.loads(data)
        except (TypeError, ValueError) as exc:
            raise MalformedKeySetError(f"Key set is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise MalformedKeySetError("Key set document must be a JSON object")
        if not isinstance(document.get("keys"), list):
            raise MalformedKeySetError("Key set document has no 'keys' list")
        try:
            return cls.model_validate(document)
        except ValidationError as exc:
            raise MalformedKeySetError(f"Key set entries are invalid: {exc}") from exc

    def append(self, entry: Jwk | Dict[str, Any]) -> "Jwks":
        """Return a new key set with ``entry`` appended. Duplicates are kept."""
        new_entry = entry.to_dict() if isinstance(entry, Jwk) else dict(entry)
        return self.model_copy(update={"keys": [*self.keys, new_entry]})

    def kids(self) -> List[Optional[str]]:
        return [key.get("kid") for key in self.keys]

    def to_bytes(self) -> bytes:
        return json.dumps(self.model_dump()).encode("utf-8")


class RotationWarning(BaseModel):
    """Failure of a best-effort side action that did not stop the rotation."""

    stage: str
    message: str


class PublishOutcome(BaseModel):
    """What the key set publisher wrote."""

    backup_name: str
    key_count_before: int
    key_count_after: int


class RotationResult(BaseModel):
    """Primary outcome of a rotation plus any auxiliary warnings."""

    rotation_id: str
    request: RotationRequest
    key: SigningKey
    jwk: Jwk
    backup_name: str
    key_count_before: int
    key_count_after: int
    invalidation_id: Optional[str] = None
    warnings: List[RotationWarning] = Field(default_factory=list)

    def to_response_body(self) -> Dict[str, Any]:
        """Echo the request together with what the rotation produced."""
        return {
            "message": "Signing key rotated",
            **self.request.to_wire(),
            "rotationId": self.rotation_id,
            "kid": self.key.key_id,
            "backupName": self.backup_name,
            "invalidationId": self.invalidation_id,
            "warnings": [w.model_dump() for w in self.warnings],
        }

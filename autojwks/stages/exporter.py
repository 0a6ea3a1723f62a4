"""Converts a key's public half into a JSON Web Key."""

from __future__ import annotations

import logging

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from jwt.algorithms import ECAlgorithm

from ..constants import SIGNING_ALGORITHM
from ..contracts import Jwk
from ..errors import ExportError
from ..providers.base import KeyManagementService

logger = logging.getLogger(__name__)


def load_public_key(material: bytes) -> ec.EllipticCurvePublicKey:
    """Load DER or PEM SubjectPublicKeyInfo as a P-256 public key.

    ES256 is the only signing algorithm published, so any other key type or
    curve is rejected.
    """
    try:
        if material.lstrip().startswith(b"-----BEGIN"):
            public_key = serialization.load_pem_public_key(material)
        else:
            public_key = serialization.load_der_public_key(material)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise ExportError(f"Unreadable public key material: {exc}") from exc

    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise ExportError("Public key is not an elliptic curve key")
    if not isinstance(public_key.curve, ec.SECP256R1):
        raise ExportError(
            f"{SIGNING_ALGORITHM} requires a P-256 key, got curve {public_key.curve.name}"
        )
    return public_key


def public_key_to_jwk(material: bytes, kid: str) -> Jwk:
    """Build the published JWK for ``material``.

    ``kid``, ``use`` and ``kty`` are always set here, whatever the conversion
    produced.
    """
    public_key = load_public_key(material)
    fields = ECAlgorithm.to_jwk(public_key, as_dict=True)
    return Jwk(**{**fields, "kid": kid, "use": "sig", "kty": "EC"})


class KeyExporter:
    """Fetches public key material from the key management service."""

    def __init__(self, kms: KeyManagementService) -> None:
        self._kms = kms

    async def export(self, key_id: str) -> Jwk:
        """Return the JWK for ``key_id``.

        Raises:
            ExportError: If the public key cannot be fetched or converted.
        """
        try:
            material = await self._kms.get_public_key(key_id)
        except Exception as exc:
            logger.error(f"Fetching public key {key_id} failed: {exc}")
            raise ExportError(f"Fetching public key failed: {exc}") from exc

        jwk = public_key_to_jwk(material, kid=key_id)
        logger.info(f"Exported public key {key_id} as JWK")
        return jwk

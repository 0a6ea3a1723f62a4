"""The four rotation stages, run in order by ``RotationWorkflow``."""

from .exporter import KeyExporter, public_key_to_jwk
from .invalidator import CacheInvalidator
from .provisioner import KeyProvisioner
from .publisher import KeySetPublisher

__all__ = [
    "CacheInvalidator",
    "KeyExporter",
    "KeyProvisioner",
    "KeySetPublisher",
    "public_key_to_jwk",
]

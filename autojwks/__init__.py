"""autojwks: rotate an asymmetric signing key and republish the JWKS."""

from .contracts import Jwk, Jwks, RotationRequest, RotationResult, SigningKey
from .errors import InvalidRequestError, RotationError
from .handler import handler, run_rotation
from .persistence import get_repository
from .providers import get_providers
from .rotation import RotationWorkflow

__version__ = "0.1.0"
__all__ = [
    "InvalidRequestError",
    "Jwk",
    "Jwks",
    "RotationError",
    "RotationRequest",
    "RotationResult",
    "RotationWorkflow",
    "SigningKey",
    "get_providers",
    "get_repository",
    "handler",
    "run_rotation",
]

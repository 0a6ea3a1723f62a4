"""Request/response entrypoint for running a rotation.

``handler`` accepts an API-Gateway style event whose ``body`` is the JSON
rotation request and returns a ``statusCode``/``body`` mapping.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from .config import AutoJwksConfig, load_config
from .contracts import RotationRequest, RotationResult
from .errors import InvalidRequestError, RotationError
from .persistence import RotationRepository, get_repository
from .providers import Providers, get_providers
from .rotation import RotationWorkflow

logger = logging.getLogger(__name__)


async def run_rotation(
    request: RotationRequest,
    providers: Optional[Providers] = None,
    config: Optional[AutoJwksConfig] = None,
    repository: RotationRepository | None = None,
) -> RotationResult:
    """Build a workflow from configuration and rotate once."""
    config = config or load_config()
    providers = providers or get_providers(config=config)
    repository = repository or get_repository(config=config)
    workflow = RotationWorkflow.from_providers(
        providers, config=config, repository=repository
    )
    return await workflow.rotate(request)


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


async def handle_event(
    event: Dict[str, Any],
    providers: Optional[Providers] = None,
    config: Optional[AutoJwksConfig] = None,
    repository: RotationRepository | None = None,
) -> Dict[str, Any]:
    try:
        request = RotationRequest.from_event(event)
    except InvalidRequestError as exc:
        logger.warning(f"Rejected rotation request: {exc}")
        return _response(400, {"error": str(exc)})

    try:
        config = config or load_config()
        providers = providers or get_providers(config=config)
        repository = repository or get_repository(config=config)
    except Exception as exc:
        logger.exception(f"Rotation setup failed: {exc}")
        return _response(500, {"error": str(exc), "stage": "setup"})

    try:
        result = await run_rotation(
            request, providers=providers, config=config, repository=repository
        )
    except RotationError as exc:
        return _response(500, {"error": str(exc), "stage": exc.stage})
    except Exception as exc:
        logger.exception(f"Rotation aborted unexpectedly: {exc}")
        return _response(500, {"error": str(exc), "stage": RotationError.stage})
    return _response(200, result.to_response_body())


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Synchronous entrypoint for serverless runtimes."""
    return asyncio.run(handle_event(event))

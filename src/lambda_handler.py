"""AWS Lambda entry point for API Gateway (REST and HTTP API) requests.

Requests are passed to the FastAPI application through the Mangum ASGI
adapter. The app is built once per container and reused on warm starts.
Nothing is built when ENVIRONMENT=test so the module can be imported by
unit tests without AWS settings.
"""

import logging
import os
from typing import Any

from mangum import Mangum

from lambda_dependencies import get_fastapi_app, initialize_lambda_environment

logger = logging.getLogger(__name__)

mangum_handler: Any = None
if os.getenv("ENVIRONMENT") != "test":
    initialize_lambda_environment()
    mangum_handler = Mangum(get_fastapi_app(), lifespan="off")

UNSUPPORTED_EVENT = {"statusCode": 400, "body": "Unsupported event type"}
INTERNAL_ERROR = {"statusCode": 500, "body": "Internal server error"}


def is_api_gateway_event(event: dict[str, Any]) -> bool:
    """Return True for API Gateway payloads.

    REST API (v1) events carry ``httpMethod``, HTTP API (v2) events carry
    ``rawPath``; both have a ``requestContext``.
    """
    return "requestContext" in event and ("httpMethod" in event or "rawPath" in event)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    request_id = getattr(context, "aws_request_id", "unknown")

    if not is_api_gateway_event(event):
        logger.warning(f"Rejecting non API Gateway event (request_id: {request_id})")
        return dict(UNSUPPORTED_EVENT)

    logger.info(f"Handling API Gateway request {request_id}")
    try:
        response: dict[str, Any] = mangum_handler(event, context)
    except Exception:
        logger.exception(f"Unhandled error while serving request {request_id}")
        return dict(INTERNAL_ERROR)
    return response

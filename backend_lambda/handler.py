"""
Punto de entrada AWS Lambda (API Gateway HTTP API o REST API).

    handler(event, context) -> {"statusCode", "headers", "body"}
"""

import logging
import os
from typing import Any
from uuid import uuid4

from core.application.handle_request import TaskRequestHandler, unavailable_response
from core.application.responses import HttpResponse
from core.application.validate_request import normalize_lambda_event
from core.domain.models.result import Failure
from infrastructure.container import get_request_handler
from infrastructure.observability.logging_config import configure_logging

configure_logging(os.getenv("LOG_LEVEL", "info"))

logger = logging.getLogger(__name__)


def _request_id(context: Any) -> str:
    return getattr(context, "aws_request_id", None) or str(uuid4())


def _to_lambda_response(response: HttpResponse) -> dict[str, Any]:
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": response.body,
    }


def handle_event(
    event: Any, context: Any, request_handler: TaskRequestHandler
) -> dict[str, Any]:
    request_id = _request_id(context)
    normalized = normalize_lambda_event(event)
    if isinstance(normalized, Failure):
        logger.warning(f"Evento inválido ({request_id}): {normalized.message}")
        return _to_lambda_response(request_handler.reject(normalized, request_id))
    return _to_lambda_response(request_handler.handle(normalized.value, request_id))


def handler(event: Any, context: Any) -> dict[str, Any]:
    try:
        request_handler = get_request_handler()
    except Exception as e:
        return _to_lambda_response(unavailable_response(e, _request_id(context)))
    return handle_event(event, context, request_handler)

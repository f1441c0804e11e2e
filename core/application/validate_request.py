"""
Normalización de la petición entrante, independiente del runtime.

Tanto los eventos de API Gateway (Lambda) como las peticiones del servidor
local terminan en un `RawRequest(method, path, body)`. El body se entrega sin
parsear: interpretar el JSON es responsabilidad del caso de uso.
"""

import base64
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from core.domain.models.result import ErrorKind, Failure, Ok, Result


@dataclass(slots=True, frozen=True)
class RawRequest:
    method: str
    path: str
    body: str | None = None


def normalize_request(
    method: str | None, path: str | None, body: str | None = None
) -> Result[RawRequest]:
    if not method:
        return Failure(
            ErrorKind.MALFORMED_REQUEST,
            "Missing http method in request",
            details={"missing": ["method"]},
        )
    if not isinstance(method, str):
        return Failure(
            ErrorKind.MALFORMED_REQUEST,
            "Http method must be a string",
            details={"invalid": ["method"]},
        )
    if not path:
        return Failure(
            ErrorKind.ROUTE_NOT_FOUND,
            "Missing path in request",
            details={"missing": ["path"]},
        )
    if not isinstance(path, str):
        return Failure(
            ErrorKind.MALFORMED_REQUEST,
            "Path must be a string",
            details={"invalid": ["path"]},
        )
    if body is not None and not isinstance(body, str):
        return Failure(
            ErrorKind.MALFORMED_REQUEST,
            "Body must be a string",
            details={"invalid": ["body"]},
        )
    return Ok(RawRequest(method=method.upper(), path=_normalize_path(path), body=body))


def normalize_lambda_event(event: Any) -> Result[RawRequest]:
    """
    Valida un evento de API Gateway y lo convierte en `RawRequest`.

    Acepta el formato HTTP API v2 (`requestContext.http.method` + `rawPath`)
    y, como alternativa, el formato REST v1 (`httpMethod` + `path`).
    """
    if not isinstance(event, Mapping):
        return Failure(ErrorKind.MALFORMED_REQUEST, "Event must be a JSON object")

    if "httpMethod" in event:
        method, path = event.get("httpMethod"), event.get("path")
    else:
        request_context = event.get("requestContext")
        if not isinstance(request_context, Mapping):
            return Failure(ErrorKind.MALFORMED_REQUEST, "Missing requestContext in event")
        http = request_context.get("http")
        if not isinstance(http, Mapping):
            return Failure(
                ErrorKind.MALFORMED_REQUEST, "Missing http context in event.requestContext"
            )
        method, path = http.get("method"), event.get("rawPath")

    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body, validate=True).decode("utf-8")
        except (ValueError, TypeError) as e:
            return Failure(
                ErrorKind.MALFORMED_REQUEST, f"Body is not valid base64: {e}", cause=e
            )

    return normalize_request(method, path, body)


def _normalize_path(path: str) -> str:
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path

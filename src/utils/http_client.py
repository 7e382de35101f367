"""HTTP client utilities for calling external tool services."""

import json
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from src.errors import AuthenticationError, ServiceError, TransportError, ValidationError

logger = logging.getLogger(__name__)


class ServiceHTTPClient:
    """
    Thin synchronous wrapper around httpx for one external service.

    A fresh ``httpx.Client`` is opened per request so that each tool
    invocation maps to exactly one outbound call. Failures are raised as
    typed adapter errors instead of being returned as ``None``.
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        service_name: str = "service",
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self.service_name = service_name
        self._transport = transport

    def post_json(
        self,
        path: str,
        data: Dict[str, Any],
        timeout: float,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[Dict[str, Any], httpx.Response]:
        """
        POST a JSON body and return the decoded JSON object with the raw response.

        Raises:
            ValidationError: A header value is not ASCII and cannot be sent
            TransportError: The request failed before a response arrived
            AuthenticationError: The service answered 401 or 403
            ServiceError: Any other non-2xx status, or a body that is not a JSON object
        """
        endpoint = f"{self.base_url}/{path.lstrip('/')}"
        headers = {**self.headers, **(extra_headers or {})}
        for name, value in headers.items():
            if not value.isascii():
                raise ValidationError(f"Header '{name}' for {self.service_name} must contain only ASCII characters")

        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.post(endpoint, json=data, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(f"Request to {self.service_name} timed out after {timeout}s: {endpoint}")
            raise TransportError(f"Request to {self.service_name} timed out after {timeout}s") from e
        except httpx.RequestError as e:
            logger.warning(f"Request error for {endpoint}: {e}")
            raise TransportError(f"Could not reach {self.service_name}: {e}") from e

        if response.status_code in (401, 403):
            logger.error(f"{self.service_name} rejected credentials with HTTP {response.status_code}")
            raise AuthenticationError(
                f"{self.service_name} rejected the request credentials (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        if response.is_error:
            detail = _error_detail(response)
            logger.error(f"HTTP {response.status_code} error for {endpoint}: {detail}")
            raise ServiceError(
                f"{self.service_name} returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise ServiceError(
                f"{self.service_name} returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise ServiceError(
                f"{self.service_name} returned an unexpected JSON body of type {type(body).__name__}",
                status_code=response.status_code,
            )

        return body, response


def _error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of an error message from a failed response."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text[:500] or response.reason_phrase

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "detail", "error", "status"):
            if body.get(key):
                return str(body[key])
    return str(body)[:500]

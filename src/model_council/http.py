"""Shared async POST helper mapping HTTP outcomes onto the error taxonomy."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from model_council.exceptions import ModerationError, ProtocolError, TransportError, VendorError

logger = logging.getLogger(__name__)


def join_url(base_url: str, suffix: str) -> str:
    return f"{base_url.rstrip('/')}/{suffix.lstrip('/')}"


def extract_error_message(body: str) -> str | None:
    """Pull the human-readable message out of a vendor error body.

    Handles ``{"error": {"message": ...}}`` (OpenAI, Anthropic, Google, xAI),
    ``{"error": "..."}`` and ``{"message": ...}``. Returns None when the body
    is not JSON or has none of these fields.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    if data.get("message"):
        return str(data["message"])
    return None


def raise_for_vendor_status(
    provider: str,
    response: httpx.Response,
    moderation_markers: tuple[str, ...] = (),
) -> None:
    """Raise VendorError (or ModerationError) for a non-2xx response."""
    if response.is_success:
        return
    body = response.text
    vendor_message = extract_error_message(body) or body or "Unknown error"
    logger.error(f"{provider} API error ({response.status_code}): {body[:500]}")
    lowered = body.lower()
    if any(marker in lowered for marker in moderation_markers):
        raise ModerationError(
            f"{provider} safety system blocked this request: {vendor_message}",
            provider=provider,
            status_code=response.status_code,
            body=body,
        )
    raise VendorError(
        f"{provider} API error ({response.status_code}): {vendor_message}",
        provider=provider,
        status_code=response.status_code,
        body=body,
    )


def transport_error(provider: str, url: str, e: Exception) -> TransportError:
    return TransportError(
        f"Network error connecting to {provider} at {url}: {e}. "
        "Check the base URL and your network connection; a browser-side or "
        "proxy CORS restriction produces this same failure.",
        provider=provider,
    )


async def post(
    provider: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    json_body: Any = None,
    data: dict[str, Any] | None = None,
    files: list | None = None,
    timeout: float = 120.0,
    transport: httpx.AsyncBaseTransport | None = None,
    moderation_markers: tuple[str, ...] = (),
) -> dict:
    """POST to a provider endpoint and return the decoded JSON body.

    Either ``json_body`` (text-to-X requests) or ``data``/``files``
    (multipart image input) is sent.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            if json_body is not None:
                response = await client.post(url, headers=headers, params=params, json=json_body)
            else:
                response = await client.post(url, headers=headers, params=params, data=data, files=files)
    except httpx.TransportError as e:
        logger.error(f"{provider} request to {url} failed: {e}")
        raise transport_error(provider, url, e) from e

    raise_for_vendor_status(provider, response, moderation_markers)

    try:
        payload = response.json()
    except ValueError as e:
        raise ProtocolError(
            f"{provider} returned a non-JSON response: {response.text[:200]}",
            provider=provider,
            status_code=response.status_code,
            body=response.text,
        ) from e
    if not isinstance(payload, dict):
        raise ProtocolError(
            f"{provider} returned an unexpected response shape",
            provider=provider,
            status_code=response.status_code,
            body=response.text,
        )
    return payload

"""
The three stages every RecipeShare request passes through.

Each stage is a plain function over httpx objects so it can be tested on its
own; ``RequestPipeline`` is the only place that decides their order.
"""

import json
import logging
from typing import Any, Optional

import httpx

from recipeshare.client.errors import ApiError, normalize_error
from recipeshare.utils.sanitize import sanitize_object

logger = logging.getLogger(__name__)

# Headers that describe the encoded body and are wrong once the body is re-encoded
_BODY_ENCODING_HEADERS = ("content-length", "content-encoding")


def inject_auth(request: httpx.Request, token: Optional[str]) -> httpx.Request:
    """
    Attach the bearer credential to an outgoing request.

    Args:
        request: The request about to be sent. It is never mutated.
        token: The current session token, read fresh for this request.

    Returns:
        A copy of the request with ``Authorization: Bearer <token>`` set and
        every other header kept, or the original request when there is no
        usable token.
    """
    if not token:
        return request

    headers = request.headers.copy()
    headers["Authorization"] = f"Bearer {token}"
    return httpx.Request(
        request.method,
        request.url,
        headers=headers,
        stream=request.stream,
        extensions=request.extensions,
    )


def is_json_response(response: httpx.Response) -> bool:
    content_type = response.headers.get("Content-Type", "")
    return "json" in content_type.lower()


def _with_json_body(response: httpx.Response, body: Any) -> httpx.Response:
    headers = [
        (name, value)
        for name, value in response.headers.multi_items()
        if name.lower() not in _BODY_ENCODING_HEADERS
    ]
    return httpx.Response(
        status_code=response.status_code,
        headers=headers,
        content=json.dumps(body, ensure_ascii=False).encode("utf-8"),
        request=response.request,
        extensions=response.extensions,
    )


def sanitize_response(response: httpx.Response) -> httpx.Response:
    """
    Strip markup from every string in a JSON response body.

    Empty and non-JSON bodies are passed through unchanged.
    """
    if not response.content or not is_json_response(response):
        return response

    try:
        body = response.json()
    except ValueError:
        logger.warning(
            f"sanitize_response says: body labelled as JSON could not be decoded "
            f"(status: {response.status_code}), passing it through"
        )
        return response

    return _with_json_body(response, sanitize_object(body))


def raise_for_failure(response: httpx.Response) -> httpx.Response:
    """
    Let 2xx responses through and turn everything else into an ApiError.

    Only the status code survives; the failure body and headers are dropped.
    """
    if response.is_success:
        return response

    logger.error(f"raise_for_failure says: request failed with status {response.status_code}")
    raise ApiError(normalize_error(response.status_code))

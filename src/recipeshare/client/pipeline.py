import logging
from typing import Any, Callable, Optional

import httpx

from recipeshare.client.errors import ApiError, normalize_error
from recipeshare.client.interceptors import (
    inject_auth,
    is_json_response,
    raise_for_failure,
    sanitize_response,
)

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]
ResponseStage = Callable[[httpx.Response], httpx.Response]

# Order matters: bodies are sanitized before anything can observe them, and
# failures are normalized before they reach the caller.
RESPONSE_STAGES: tuple[ResponseStage, ...] = (sanitize_response, raise_for_failure)


def _no_token() -> Optional[str]:
    return None


class RequestPipeline:
    """
    HTTP client for the RecipeShare backend.

    Every request goes through the same fixed chain:

    1. inject_auth (attaches the bearer token, read fresh for each request)
    2. the network call
    3. sanitize_response (strips markup from JSON bodies)
    4. raise_for_failure (non-2xx becomes an ApiError with a safe message)

    Request failures, including redirect loops and broken content
    encodings, never reach the caller as httpx exceptions; they are
    reported as an ApiError with status 0.
    """

    response_stages: tuple[ResponseStage, ...] = RESPONSE_STAGES

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float | None = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Root URL of the backend, e.g. "http://localhost:8080".
            token_provider: Returns the current session token or None. Called
                once per request, never cached.
            timeout: Request timeout in seconds, None for no timeout.
            transport: Optional httpx transport, used by tests to stand in
                for the backend.
        """
        self.base_url = base_url.rstrip("/")
        self.token_provider: TokenProvider = token_provider or _no_token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "RequestPipeline":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Request:
        return self._client.build_request(method, path, json=json, params=params, headers=headers)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """
        Send a request through the full pipeline.

        Returns:
            The sanitized 2xx response.

        Raises:
            ApiError: For any non-2xx status or transport failure.
        """
        request = inject_auth(request, self.token_provider())
        logger.info(f"send says: {request.method} {request.url}")

        failed = False
        try:
            response = await self._client.send(request)
        except httpx.RequestError as e:
            logger.error(f"send says: request failure for {request.method} {request.url}: {type(e).__name__}")
            failed = True

        # raised outside the except block so the transport error is not attached as context
        if failed:
            raise ApiError(normalize_error(None))

        logger.info(f"send says: received status {response.status_code} for {request.method} {request.url}")
        for stage in self.response_stages:
            response = stage(response)
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """
        Issue a request and return the sanitized body.

        Returns:
            The decoded JSON body, the text of a non-JSON body, or None when
            the response has no body (e.g. 204).

        Raises:
            ApiError: As for send(), and when a body labelled as JSON cannot
                be decoded.
        """
        request = self.build_request(method, path, json=json, params=params, headers=headers)
        response = await self.send(request)

        if not response.content:
            return None
        if not is_json_response(response):
            return response.text

        try:
            return response.json()
        except ValueError:
            # the decode error carries the raw body, keep it away from the caller
            logger.error(f"request says: undecodable JSON body from {method} {path}")
        raise ApiError(normalize_error(response.status_code))

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from recipeshare.client.errors import ApiError
from recipeshare.client.interceptors import raise_for_failure, sanitize_response
from recipeshare.client.pipeline import RESPONSE_STAGES, RequestPipeline

BASE_URL = "http://recipeshare.test"


class TokenHolder:
    """Stands in for the session store: counts how often the token is read."""

    def __init__(self, token=None):
        self.token = token
        self.calls = 0

    def get_token(self):
        self.calls += 1
        return self.token


class RecordingBackend:
    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, httpx.Response] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path in self.responses:
            return self.responses[request.url.path]
        return httpx.Response(200, json={"ok": True})


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def tokens():
    return TokenHolder("mock-token-123")


@pytest_asyncio.fixture
async def pipeline(backend, tokens):
    pipeline = RequestPipeline(BASE_URL, token_provider=tokens.get_token, transport=httpx.MockTransport(backend))
    yield pipeline
    await pipeline.aclose()


def test_stage_order_is_fixed():
    assert RESPONSE_STAGES == (sanitize_response, raise_for_failure)
    assert RequestPipeline.response_stages == RESPONSE_STAGES


@pytest.mark.asyncio
async def test_attaches_token(pipeline, backend):
    await pipeline.get("/api/test")
    assert backend.requests[0].headers["Authorization"] == "Bearer mock-token-123"


@pytest.mark.asyncio
async def test_no_token_no_header(pipeline, backend, tokens):
    tokens.token = None
    await pipeline.get("/api/test")
    assert "Authorization" not in backend.requests[0].headers


@pytest.mark.asyncio
async def test_without_token_provider(backend):
    async with RequestPipeline(BASE_URL, transport=httpx.MockTransport(backend)) as pipeline:
        await pipeline.get("/api/test")
    assert "Authorization" not in backend.requests[0].headers


@pytest.mark.asyncio
async def test_token_read_for_every_request(pipeline, tokens):
    for _ in range(3):
        await pipeline.get("/api/test")
    assert tokens.calls == 3


@pytest.mark.asyncio
async def test_token_change_between_requests(pipeline, backend, tokens):
    tokens.token = "token-1"
    await pipeline.get("/api/test1")
    tokens.token = "token-2"
    await pipeline.get("/api/test2")
    tokens.token = None
    await pipeline.get("/api/test3")

    assert backend.requests[0].headers["Authorization"] == "Bearer token-1"
    assert backend.requests[1].headers["Authorization"] == "Bearer token-2"
    assert "Authorization" not in backend.requests[2].headers


@pytest.mark.asyncio
async def test_concurrent_requests_each_get_a_token(pipeline, backend):
    await asyncio.gather(*(pipeline.get(f"/api/test{i}") for i in range(5)))
    assert len(backend.requests) == 5
    assert all(r.headers["Authorization"] == "Bearer mock-token-123" for r in backend.requests)


@pytest.mark.asyncio
async def test_post_body_and_custom_headers_preserved(pipeline, backend):
    await pipeline.post("/api/test", json={"name": "test"}, headers={"X-Custom-Header": "custom-value"})
    sent = backend.requests[0]
    assert sent.method == "POST"
    assert sent.headers["X-Custom-Header"] == "custom-value"
    assert sent.headers["Authorization"] == "Bearer mock-token-123"
    assert json.loads(sent.content) == {"name": "test"}


@pytest.mark.asyncio
async def test_success_body_is_sanitized(pipeline, backend):
    backend.responses["/api/recipe/1"] = httpx.Response(
        200, json={"title": "<script>alert(1)</script>Cake", "tags": ["ok", "<b>bold</b>"]}
    )
    body = await pipeline.get("/api/recipe/1")
    assert body == {"title": "Cake", "tags": ["ok", "bold"]}


@pytest.mark.asyncio
async def test_send_returns_sanitized_response(pipeline, backend):
    backend.responses["/api/recipe/1"] = httpx.Response(200, json=["<i>a</i>"])
    response = await pipeline.send(pipeline.build_request("GET", "/api/recipe/1"))
    assert response.json() == ["a"]


@pytest.mark.asyncio
async def test_empty_body_returns_none(pipeline, backend):
    backend.responses["/api/recipe/1"] = httpx.Response(204)
    assert await pipeline.delete("/api/recipe/1") is None


@pytest.mark.asyncio
async def test_text_body_returned_as_text(pipeline, backend):
    backend.responses["/api/health"] = httpx.Response(200, text="UP")
    assert await pipeline.get("/api/health") == "UP"


@pytest.mark.asyncio
async def test_failure_is_normalized(pipeline, backend):
    backend.responses["/api/users/9"] = httpx.Response(404, json={"message": "/internal/path/leaked.sql"})

    with pytest.raises(ApiError) as exc_info:
        await pipeline.get("/api/users/9")

    assert exc_info.value.status_code == 404
    assert exc_info.value.safe_message == "The requested resource was not found."
    assert "leaked" not in repr(exc_info.value)


@pytest.mark.asyncio
async def test_failure_still_carries_credential(pipeline, backend):
    backend.responses["/api/test"] = httpx.Response(401, text="Unauthorized")
    with pytest.raises(ApiError) as exc_info:
        await pipeline.get("/api/test")
    assert exc_info.value.status_code == 401
    assert backend.requests[0].headers["Authorization"] == "Bearer mock-token-123"


@pytest.mark.asyncio
async def test_network_failure_is_normalized(tokens):
    def refuse(request):
        raise httpx.ConnectError("connection refused to 10.0.0.5:8080", request=request)

    async with RequestPipeline(BASE_URL, token_provider=tokens.get_token, transport=httpx.MockTransport(refuse)) as pipeline:
        with pytest.raises(ApiError) as exc_info:
            await pipeline.get("/api/test")

    error = exc_info.value
    assert error.status_code == 0
    assert error.safe_message == "An unexpected error occurred. Please try again."
    assert error.__cause__ is None
    assert error.__context__ is None


@pytest.mark.asyncio
async def test_timeout_is_normalized(tokens):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with RequestPipeline(BASE_URL, transport=httpx.MockTransport(slow)) as pipeline:
        with pytest.raises(ApiError) as exc_info:
            await pipeline.get("/api/test")
    assert exc_info.value.status_code == 0


@pytest.mark.asyncio
async def test_undecodable_json_raises_api_error(pipeline, backend):
    backend.responses["/api/test"] = httpx.Response(
        200, content=b"<html>secret stack</html>", headers={"Content-Type": "application/json"}
    )
    with pytest.raises(ApiError) as exc_info:
        await pipeline.get("/api/test")
    assert exc_info.value.status_code == 200
    assert "secret" not in str(exc_info.value)
    assert exc_info.value.__context__ is None


@pytest.mark.asyncio
async def test_sanitizer_runs_before_normalizer(pipeline, backend):
    seen = []

    def spy_sanitize(response):
        seen.append(("sanitize", response.status_code))
        return sanitize_response(response)

    def spy_normalize(response):
        seen.append(("normalize", response.status_code))
        return raise_for_failure(response)

    pipeline.response_stages = (spy_sanitize, spy_normalize)
    backend.responses["/api/fail"] = httpx.Response(500, json={"trace": "<b>boom</b>"})

    with pytest.raises(ApiError):
        await pipeline.get("/api/fail")
    assert seen == [("sanitize", 500), ("normalize", 500)]


@pytest.mark.asyncio
async def test_cancellation_is_not_intercepted(tokens):
    started = asyncio.Event()

    async def hang(request):
        started.set()
        await asyncio.sleep(60)
        return httpx.Response(200)

    async with RequestPipeline(BASE_URL, token_provider=tokens.get_token, transport=httpx.MockTransport(hang)) as pipeline:
        task = asyncio.create_task(pipeline.get("/api/slow"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_redirect_loop_is_normalized(tokens):
    def loop(request):
        return httpx.Response(302, headers={"Location": "/internal/secret/loop"})

    async with RequestPipeline(BASE_URL, token_provider=tokens.get_token, transport=httpx.MockTransport(loop)) as pipeline:
        with pytest.raises(ApiError) as exc_info:
            await pipeline.get("/api/a")

    error = exc_info.value
    assert error.status_code == 0
    assert "secret" not in str(error)
    assert error.__context__ is None


@pytest.mark.asyncio
async def test_broken_content_encoding_is_normalized(tokens):
    def broken_gzip(request):
        return httpx.Response(
            200,
            stream=httpx.ByteStream(b"not gzip at /srv/secret"),
            headers={"Content-Encoding": "gzip", "Content-Type": "application/json"},
        )

    async with RequestPipeline(
        BASE_URL, token_provider=tokens.get_token, transport=httpx.MockTransport(broken_gzip)
    ) as pipeline:
        with pytest.raises(ApiError) as exc_info:
            await pipeline.get("/api/a")

    error = exc_info.value
    assert error.status_code == 0
    assert "/srv/secret" not in repr(error)
    assert error.__context__ is None

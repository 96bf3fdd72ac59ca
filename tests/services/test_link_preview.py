import httpx
import pytest

from vault.errors import InvalidArgument, UnknownFailure, UpstreamFailure
from vault.services.link_preview import LinkPreviewService

ENDPOINT = "https://preview.example/"


def make_service(handler, api_key="lp-key"):
    transport = httpx.MockTransport(handler)
    client = httpx.AsyncClient(transport=transport)
    return LinkPreviewService(api_key=api_key, endpoint=ENDPOINT, http_client=client)


@pytest.mark.asyncio
async def test_preview_normalizes_provider_payload():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200, json={"title": "Example", "description": None, "image": "https://img"}
        )

    preview = await make_service(handler).preview("https://example.com/a?b=1")

    assert seen["params"] == {"key": "lp-key", "q": "https://example.com/a?b=1"}
    assert preview.title == "Example"
    assert preview.description == ""
    assert preview.image == "https://img"
    assert preview.url == "https://example.com/a?b=1"


@pytest.mark.asyncio
async def test_preview_keeps_provider_canonical_url():
    def handler(_request):
        return httpx.Response(200, json={"url": "https://example.com/canonical"})

    preview = await make_service(handler).preview("http://example.com")

    assert preview.url == "https://example.com/canonical"


@pytest.mark.asyncio
async def test_preview_surfaces_upstream_status_and_description():
    def handler(_request):
        return httpx.Response(423, json={"description": "Too many requests", "error": 423})

    with pytest.raises(UpstreamFailure) as excinfo:
        await make_service(handler).preview("https://example.com")

    assert excinfo.value.status_code == 423
    assert excinfo.value.message == "Too many requests"


@pytest.mark.asyncio
async def test_preview_malformed_body_is_upstream_failure():
    def handler(_request):
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(UpstreamFailure) as excinfo:
        await make_service(handler).preview("https://example.com")

    assert excinfo.value.message == "malformed link preview response"


@pytest.mark.asyncio
async def test_preview_network_error_is_upstream_failure():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamFailure) as excinfo:
        await make_service(handler).preview("https://example.com")

    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url, message",
    [(None, "missing url"), ("", "missing url"), (42, "missing url"), ("ftp://x", "invalid url")],
)
async def test_preview_validates_url(url, message):
    def handler(_request):
        raise AssertionError("provider must not be called")

    with pytest.raises(InvalidArgument) as excinfo:
        await make_service(handler).preview(url)

    assert excinfo.value.message == message


@pytest.mark.asyncio
async def test_preview_requires_api_key():
    def handler(_request):
        raise AssertionError("provider must not be called")

    with pytest.raises(UnknownFailure) as excinfo:
        await make_service(handler, api_key="").preview("https://example.com")

    assert excinfo.value.status_code == 500

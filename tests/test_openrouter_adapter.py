import json

import httpx
import pytest

from relay.adapters.openrouter import OpenRouterAdapter, extract_content


def recording_transport(response: httpx.Response, seen: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_request_shape():
    seen = []
    ok = httpx.Response(200, json={"choices": [{"message": {"content": "pong"}}]})
    adapter = OpenRouterAdapter(
        api_key="sk-abc",
        base_url="https://upstream.test/api/v1/",
        transport=recording_transport(ok, seen),
    )

    result = await adapter.generate(model_id="meta-llama/llama-3.1-8b-instruct", message="ping")

    assert result == {
        "response": "pong",
        "model": "meta-llama/llama-3.1-8b-instruct",
        "provider": "openrouter",
    }
    (request,) = seen
    assert request.method == "POST"
    assert str(request.url) == "https://upstream.test/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-abc"
    assert json.loads(request.content) == {
        "model": "meta-llama/llama-3.1-8b-instruct",
        "messages": [{"role": "user", "content": "ping"}],
    }


@pytest.mark.asyncio
async def test_non_2xx_raises_status_error():
    adapter = OpenRouterAdapter(
        api_key="k",
        transport=recording_transport(httpx.Response(401, json={"error": {"message": "No auth"}}), []),
    )
    with pytest.raises(httpx.HTTPStatusError):
        await adapter.generate(model_id="x", message="hi")


@pytest.mark.asyncio
async def test_non_json_success_body_has_no_content():
    adapter = OpenRouterAdapter(
        api_key="k",
        transport=recording_transport(httpx.Response(200, text="<html>gateway</html>"), []),
    )
    result = await adapter.generate(model_id="x", message="hi")
    assert result["response"] is None


@pytest.mark.parametrize(
    "data",
    [
        None,
        [],
        {},
        {"choices": []},
        {"choices": "nope"},
        {"choices": [None]},
        {"choices": [{}]},
        {"choices": [{"message": None}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": ["parts"]}}]},
    ],
)
def test_extract_content_unexpected_shapes(data):
    assert extract_content(data) is None


def test_extract_content_uses_first_choice():
    data = {"choices": [{"message": {"content": "first"}}, {"message": {"content": "second"}}]}
    assert extract_content(data) == "first"

import asyncio
import json

import httpx
import pytest

from lexicon_api.completion_client import CompletionClient
from lexicon_api.errors import UpstreamError
from lexicon_api.prompts import ContentType


def make_client(handler, api_key="k-123"):
    return CompletionClient(api_key, base_url="https://llm.test/v1/", transport=httpx.MockTransport(handler))


def reply(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def run(client, content_type=ContentType.QUOTE, **params):
    async def go():
        try:
            return await client.generate(content_type, **params)
        finally:
            await client.aclose()

    return asyncio.run(go())


def test_request_shape():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return reply('{"quote": "Keep going."}')

    assert run(make_client(handler)) == '{"quote": "Keep going."}'
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer k-123"
    body = seen["body"]
    assert body["stream"] is False
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert {"model", "temperature", "top_p", "max_completion_tokens"} <= set(body)


def test_story_uses_the_creative_model():
    seen = {}

    def handler(request):
        seen["model"] = json.loads(request.content)["model"]
        return reply("{}")

    client = make_client(handler)
    run(client, ContentType.STORY, theme="space", difficulty="advanced", words_to_include=["vast"])
    assert seen["model"] == client.models["creative"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="overloaded"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}),
    ],
)
def test_bad_responses_raise_upstream_error(response):
    with pytest.raises(UpstreamError):
        run(make_client(lambda request: response))


def test_network_failure_raises_upstream_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(UpstreamError, match="request failed"):
        run(make_client(handler))


def test_missing_key_fails_without_a_request():
    calls = []
    client = make_client(lambda request: calls.append(request) or reply("{}"))
    client.api_key = ""
    with pytest.raises(UpstreamError, match="GROQ_API_KEY"):
        run(client)
    assert calls == []

"""Unit tests for API endpoints with RESPX mocking.

The app runs through TestClient (lifespan included) against a mocked NIM
upstream, so no test touches the network.
"""

import json

import httpx
import pytest

from nim_proxy.conversion.nim_sse_to_openai import DONE_EVENT
from tests.conftest import TEST_API_KEY
from tests.fixtures.mock_http import create_nim_error, create_streaming_response

CHAT_BODY = {"model": "gpt-4", "messages": [{"role": "user", "content": "Hello"}]}


def _sse_events(text: str) -> list[str]:
    return [f"{block}\n\n" for block in text.split("\n\n") if block]


@pytest.mark.unit
class TestHealthAndModels:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert data["timestamp"].endswith("Z")

    def test_health_works_without_api_key(self, keyless_client):
        assert keyless_client.get("/health").status_code == 200

    def test_models_catalog(self, keyless_client):
        response = keyless_client.get("/v1/models")

        assert response.status_code == 200
        data = response.json()
        assert data["object"] == "list"
        assert [m["id"] for m in data["data"]] == ["deepseek-3.2", "gpt-3.5-turbo"]
        for model in data["data"]:
            assert model["object"] == "model"
            assert model["created"] == 1677610602
            assert model["root"] == model["id"]
            assert model["parent"] is None
            assert model["permission"] == []

    def test_models_catalog_is_stable_across_calls(self, keyless_client):
        first = keyless_client.get("/v1/models").json()
        second = keyless_client.get("/v1/models").json()

        assert first["data"]
        assert first == second

    def test_cors_headers(self, client):
        response = client.get("/health", headers={"Origin": "http://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.unit
class TestChatCompletions:
    def test_non_streaming_completion(self, client, mock_nim_api, nim_chat_completion):
        route = mock_nim_api.post("/chat/completions").mock(
            return_value=httpx.Response(200, json=nim_chat_completion)
        )

        response = client.post("/v1/chat/completions", json={**CHAT_BODY, "temperature": 0})

        assert response.status_code == 200
        data = response.json()
        assert data["object"] == "chat.completion"
        assert data["model"] == "gpt-4"
        assert data["choices"][0]["message"] == {"role": "assistant", "content": "Hello from NIM!"}
        assert data["usage"]["total_tokens"] == 17

        upstream_request = route.calls.last.request
        assert upstream_request.headers["Authorization"] == f"Bearer {TEST_API_KEY}"
        sent = json.loads(upstream_request.content)
        assert sent["model"] == "deepseek/deepseek-chat"
        assert sent["temperature"] == 0
        assert sent["max_tokens"] == 2048
        assert sent["stream"] is False

    def test_missing_api_key_makes_no_upstream_call(self, keyless_client, mock_nim_api):
        route = mock_nim_api.post("/chat/completions")

        response = keyless_client.post("/v1/chat/completions", json=CHAT_BODY)

        assert response.status_code == 500
        assert response.json() == {
            "error": {
                "message": "NVIDIA API key not configured",
                "type": "invalid_configuration",
                "code": "missing_api_key",
            }
        }
        assert not route.called

    def test_upstream_error_status_is_mirrored(self, client, mock_nim_api):
        mock_nim_api.post("/chat/completions").mock(
            return_value=httpx.Response(429, json=create_nim_error(429, "Rate limit exceeded"))
        )

        response = client.post("/v1/chat/completions", json=CHAT_BODY)

        assert response.status_code == 429
        assert response.json()["error"] == {
            "message": "Rate limit exceeded",
            "type": "api_error",
            "code": "429",
        }

    def test_upstream_error_without_message(self, client, mock_nim_api):
        mock_nim_api.post("/chat/completions").mock(
            return_value=httpx.Response(502, content=b"Bad Gateway")
        )

        response = client.post("/v1/chat/completions", json=CHAT_BODY)

        assert response.status_code == 502
        assert response.json()["error"]["message"] == "API request failed"

    def test_connection_failure(self, client, mock_nim_api):
        mock_nim_api.post("/chat/completions").mock(side_effect=httpx.ConnectError("refused"))

        response = client.post("/v1/chat/completions", json=CHAT_BODY)

        assert response.status_code == 500
        assert response.json()["error"] == {
            "message": "Cannot connect to NVIDIA API",
            "type": "connection_error",
            "code": "server_error",
        }

    def test_timeout(self, client, mock_nim_api):
        mock_nim_api.post("/chat/completions").mock(side_effect=httpx.ReadTimeout("slow"))

        response = client.post("/v1/chat/completions", json=CHAT_BODY)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["type"] == "connection_error"
        assert error["code"] == "timeout"

    def test_upstream_without_choices(self, client, mock_nim_api):
        mock_nim_api.post("/chat/completions").mock(
            return_value=httpx.Response(200, json={"id": "x", "choices": []})
        )

        response = client.post("/v1/chat/completions", json=CHAT_BODY)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["type"] == "translation_error"
        assert error["code"] == "invalid_upstream_response"

    def test_invalid_body_is_400(self, client):
        response = client.post("/v1/chat/completions", json={"model": "gpt-4", "messages": "hi"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "invalid_request_error"
        assert error["code"] == "invalid_request"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/v1/unknown")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "invalid_request_error"


@pytest.mark.unit
class TestStreamingChatCompletions:
    def test_streaming_completion(self, client, mock_nim_api, nim_streaming_chunks):
        route = mock_nim_api.post("/chat/completions").mock(
            return_value=create_streaming_response(nim_streaming_chunks)
        )

        response = client.post("/v1/chat/completions", json={**CHAT_BODY, "stream": True})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["cache-control"] == "no-cache"

        events = _sse_events(response.text)
        assert events[-1] == DONE_EVENT
        assert events.count(DONE_EVENT) == 1
        chunks = [json.loads(event[len("data: ") :]) for event in events[:-1]]
        assert len(chunks) == 4
        assert all(chunk["model"] == "gpt-4" for chunk in chunks)
        assert "".join(c["choices"][0]["delta"].get("content") or "" for c in chunks) == "Hello"

        sent = json.loads(route.calls.last.request.content)
        assert sent["stream"] is True

    def test_stream_without_sentinel_still_terminates(self, client, mock_nim_api, nim_streaming_chunks):
        mock_nim_api.post("/chat/completions").mock(
            return_value=create_streaming_response(nim_streaming_chunks[:-1])
        )

        response = client.post("/v1/chat/completions", json={**CHAT_BODY, "stream": True})

        events = _sse_events(response.text)
        assert events[-1] == DONE_EVENT
        assert events.count(DONE_EVENT) == 1

    def test_stream_open_rejected_by_upstream(self, client, mock_nim_api):
        mock_nim_api.post("/chat/completions").mock(
            return_value=httpx.Response(401, json=create_nim_error(401, "Invalid key"))
        )

        response = client.post("/v1/chat/completions", json={**CHAT_BODY, "stream": True})

        assert response.status_code == 401
        assert response.json()["error"] == {
            "message": "Streaming request failed: Invalid key",
            "type": "stream_error",
            "code": "401",
        }

    def test_stream_open_connection_failure(self, client, mock_nim_api):
        mock_nim_api.post("/chat/completions").mock(side_effect=httpx.ConnectError("refused"))

        response = client.post("/v1/chat/completions", json={**CHAT_BODY, "stream": True})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["type"] == "stream_error"
        assert "code" not in error

    def test_streaming_without_api_key(self, keyless_client, mock_nim_api):
        route = mock_nim_api.post("/chat/completions")

        response = keyless_client.post("/v1/chat/completions", json={**CHAT_BODY, "stream": True})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "missing_api_key"
        assert not route.called

"""Tests for the AI enhancement client and endpoint, with the webhook faked by httpx.MockTransport."""

import json

import httpx
import pytest

from src.api.enhance import EnhancementClient
from src.api.errors import EnhancementTimeoutError, EnhancementUnavailableError

from helpers import auth_headers

WEBHOOK_URL = "http://ai.invalid/webhook"


def make_client(handler) -> EnhancementClient:
    return EnhancementClient(WEBHOOK_URL, timeout=1.0, transport=httpx.MockTransport(handler))


class TestEnhancementClient:
    def test_posts_text_and_reads_json_result(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"text": "A short summary."})

        assert make_client(handler).enhance("long rambling note") == "A short summary."
        assert seen == {"url": WEBHOOK_URL, "body": {"text": "long rambling note"}}

    @pytest.mark.parametrize("key", ["output", "summary"])
    def test_alternate_result_keys(self, key):
        client = make_client(lambda request: httpx.Response(200, json={key: " trimmed "}))

        assert client.enhance("note") == "trimmed"

    def test_plain_text_result(self):
        client = make_client(lambda request: httpx.Response(200, text="plain summary\n"))

        assert client.enhance("note") == "plain summary"

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(EnhancementTimeoutError):
            make_client(handler).enhance("note")

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(EnhancementUnavailableError):
            make_client(handler).enhance("note")

    def test_error_status(self):
        client = make_client(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(EnhancementUnavailableError):
            client.enhance("note")

    def test_empty_result(self):
        client = make_client(lambda request: httpx.Response(200, json={"unexpected": 1}))

        with pytest.raises(EnhancementUnavailableError):
            client.enhance("note")


class TestEnhanceEndpoint:
    def test_not_configured(self, client, alice):
        response = client.post("/api/ai/enhance", json={"text": "note"}, headers=auth_headers(alice["token"]))

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "E_ENHANCE_NOT_CONFIGURED"

    def test_returns_enhanced_text(self, app, client, alice):
        app.state.enhancer = make_client(lambda request: httpx.Response(200, json={"text": "Better."}))

        response = client.post("/api/ai/enhance", json={"text": "note"}, headers=auth_headers(alice["token"]))

        assert response.status_code == 200
        assert response.json() == {"text": "Better."}

    def test_timeout_maps_to_504(self, app, client, alice):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        app.state.enhancer = make_client(handler)

        response = client.post("/api/ai/enhance", json={"text": "note"}, headers=auth_headers(alice["token"]))

        assert response.status_code == 504
        assert response.json()["error"]["code"] == "E_ENHANCE_TIMEOUT"

    def test_failure_maps_to_502_without_detail(self, app, client, alice):
        app.state.enhancer = make_client(lambda request: httpx.Response(500, text="secret stack trace"))

        response = client.post("/api/ai/enhance", json={"text": "note"}, headers=auth_headers(alice["token"]))

        assert response.status_code == 502
        assert "secret stack trace" not in response.text

    def test_empty_text_rejected(self, client, alice):
        response = client.post("/api/ai/enhance", json={"text": ""}, headers=auth_headers(alice["token"]))

        assert response.status_code == 400
        assert "body.text" in response.json()["error"]["fields"]

    def test_empty_text_rejected_before_reaching_webhook(self, app, client, alice):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"text": "Better."})

        app.state.enhancer = make_client(handler)

        response = client.post("/api/ai/enhance", json={"text": ""}, headers=auth_headers(alice["token"]))

        assert response.status_code == 400
        assert calls == []

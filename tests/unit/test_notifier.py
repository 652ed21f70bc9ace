"""Tests for chat gateway delivery."""

from __future__ import annotations

import json

import httpx

from dingerbot.messaging.notifier import (
    ChatGatewayNotifier,
    LogNotifier,
    build_notifier,
    chat_id_for_number,
)


class TestChatIds:
    def test_strips_formatting(self):
        assert chat_id_for_number("+1 (555) 123-4567") == "15551234567@c.us"


class TestChatGatewayNotifier:
    def test_sends_to_every_target(self):
        requests = []

        def handler(request: httpx.Request):
            requests.append(request)
            return httpx.Response(200, json={"ok": True})

        notifier = ChatGatewayNotifier(
            "http://gateway:3001/",
            recipients=["+1 555 000 1111", "15550002222"],
            group_chat_id="120363000000@g.us",
            token="secret",
            transport=httpx.MockTransport(handler),
        )
        results = notifier.send("hello")

        assert [r.target for r in results] == [
            "15550001111@c.us",
            "15550002222@c.us",
            "120363000000@g.us",
        ]
        assert all(r.ok for r in results)
        assert str(requests[0].url) == "http://gateway:3001/send"
        assert requests[0].headers["Authorization"] == "Bearer secret"
        assert json.loads(requests[0].content) == {"chatId": "15550001111@c.us", "message": "hello"}

    def test_one_failed_target_does_not_stop_others(self):
        def handler(request: httpx.Request):
            if json.loads(request.content)["chatId"].startswith("1555000"):
                return httpx.Response(500)
            return httpx.Response(200)

        notifier = ChatGatewayNotifier(
            "http://gateway",
            recipients=["15550001111"],
            group_chat_id="group@g.us",
            transport=httpx.MockTransport(handler),
        )
        results = notifier.send("hello")

        assert [(r.target, r.ok) for r in results] == [
            ("15550001111@c.us", False),
            ("group@g.us", True),
        ]
        assert results[0].error

    def test_connection_error_reported(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        notifier = ChatGatewayNotifier(
            "http://gateway", recipients=["15550001111"], transport=httpx.MockTransport(handler)
        )
        results = notifier.send("hello")
        assert results[0].ok is False

    def test_no_targets(self):
        notifier = ChatGatewayNotifier("http://gateway")
        assert notifier.send("hello") == []


class TestBuildNotifier:
    def test_log_notifier_without_gateway(self, test_settings):
        notifier = build_notifier(test_settings)
        assert isinstance(notifier, LogNotifier)
        results = notifier.send("hello")
        assert results[0].ok
        assert notifier.sent == ["hello"]

    def test_gateway_notifier_when_configured(self, test_settings):
        settings = test_settings.model_copy(
            update={"chat_gateway_url": "http://gateway", "recipient_numbers": "15550001111, 15550002222"}
        )
        notifier = build_notifier(settings)
        assert isinstance(notifier, ChatGatewayNotifier)
        assert notifier.targets == ["15550001111@c.us", "15550002222@c.us"]

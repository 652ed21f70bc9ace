"""Outbound chat delivery.

The chat transport itself runs behind an HTTP gateway (a WhatsApp bridge in
production). This module only knows how to hand it a chat id and a
message, and reports success or failure for every target. Delivery is best
effort: callers never change their own state based on the results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx

from dingerbot.config import Settings, settings as default_settings
from dingerbot.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    target: str
    ok: bool
    error: str | None = None


class Notifier(Protocol):
    def send(self, message: str) -> list[DeliveryResult]: ...


def chat_id_for_number(number: str) -> str:
    """``+1 (555) 123-4567`` -> ``15551234567@c.us``."""
    digits = "".join(ch for ch in number if ch.isdigit())
    return f"{digits}@c.us"


class ChatGatewayNotifier:
    """Posts messages to every configured recipient and the group chat."""

    def __init__(
        self,
        gateway_url: str,
        recipients: list[str] | None = None,
        group_chat_id: str = "",
        token: str = "",
        timeout: float = 15,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.gateway_url = gateway_url.rstrip("/")
        self.targets = [chat_id_for_number(n) for n in (recipients or [])]
        if group_chat_id:
            self.targets.append(group_chat_id)
        self.client = httpx.Client(timeout=timeout, headers=headers, transport=transport)

    def send(self, message: str) -> list[DeliveryResult]:
        if not self.targets:
            log.warning("no_chat_targets_configured")
            return []

        results = []
        for chat_id in self.targets:
            try:
                response = self.client.post(
                    f"{self.gateway_url}/send",
                    json={"chatId": chat_id, "message": message},
                )
                response.raise_for_status()
                results.append(DeliveryResult(chat_id, ok=True))
            except httpx.HTTPError as exc:
                log.error("chat_delivery_failed", target=chat_id, error=str(exc))
                results.append(DeliveryResult(chat_id, ok=False, error=str(exc)))

        delivered = sum(r.ok for r in results)
        log.info("chat_delivery", delivered=delivered, targets=len(results))
        return results

    def close(self) -> None:
        self.client.close()


class LogNotifier:
    """Dry-run notifier: writes messages to the log instead of a chat."""

    def __init__(self) -> None:
        self.sent: list[str] = []

    def send(self, message: str) -> list[DeliveryResult]:
        self.sent.append(message)
        log.info("chat_message_dry_run", message=message)
        return [DeliveryResult("log", ok=True)]


def build_notifier(settings: Settings | None = None) -> Notifier:
    """Gateway notifier when a gateway URL is configured, else dry run."""
    settings = settings or default_settings
    if not settings.chat_gateway_url:
        log.warning("chat_gateway_not_configured", fallback="log")
        return LogNotifier()
    return ChatGatewayNotifier(
        gateway_url=settings.chat_gateway_url,
        recipients=settings.recipients,
        group_chat_id=settings.group_chat_id,
        token=settings.chat_gateway_token,
        timeout=settings.request_timeout,
    )

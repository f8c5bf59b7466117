"""Owner notifications via the Telegram Bot API."""

from __future__ import annotations

import logging

import httpx

log = logging.getLogger(__name__)


class TelegramNotifier:
    """Sends plain-text messages to the owner's Telegram chat.

    Owner ids are Telegram user ids, which double as private chat ids.
    """

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
    ) -> None:
        self._url = f"{api_base.rstrip('/')}/bot{bot_token}/sendMessage"
        self._timeout = timeout

    async def notify(self, owner_id: str, message: str) -> None:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._url,
                    json={"chat_id": owner_id, "text": message},
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            log.warning("Telegram notification to %s failed: %s", owner_id, exc)


class LogNotifier:
    """Fallback when no bot token is configured."""

    async def notify(self, owner_id: str, message: str) -> None:
        log.info("Notification for user %s: %s", owner_id, message.replace("\n", " | "))

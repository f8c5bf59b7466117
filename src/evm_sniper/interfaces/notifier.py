"""Notifier protocol - tells an owner what happened to their target."""

from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    async def notify(self, owner_id: str, message: str) -> None:
        ...

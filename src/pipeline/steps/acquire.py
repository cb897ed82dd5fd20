from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from ...chat.base import ChatMessage, ChatSession
from ..models import MediaAsset


Strategy = Callable[[ChatMessage], Awaitable[Optional[MediaAsset]]]


class MediaAcquirer:
    """Resolve attachment bytes by trying an ordered list of strategies.

    Direct download, the same download after ``retry_delay`` seconds, then the
    quoted message's attachment. Session errors count as "not resolved" and the
    next strategy runs. ``acquire`` returns ``None`` when every strategy misses.
    """

    def __init__(self, session: ChatSession, retry_delay: float = 0.7) -> None:
        self.session = session
        self.retry_delay = retry_delay

    @property
    def strategies(self) -> list[tuple[str, Strategy]]:
        return [
            ("direct", self._direct),
            ("direct_retry", self._direct_after_delay),
            ("quoted", self._quoted),
        ]

    async def _direct(self, message: ChatMessage) -> MediaAsset | None:
        return await self.session.download_attachment(message)

    async def _direct_after_delay(self, message: ChatMessage) -> MediaAsset | None:
        await asyncio.sleep(self.retry_delay)
        return await self.session.download_attachment(message)

    async def _quoted(self, message: ChatMessage) -> MediaAsset | None:
        if not message.has_quoted:
            return None
        quoted = await self.session.get_quoted_message(message)
        if quoted is None or not quoted.has_media:
            return None
        return await self.session.download_attachment(quoted)

    async def acquire(self, message: ChatMessage) -> MediaAsset | None:
        for name, strategy in self.strategies:
            try:
                asset = await strategy(message)
            except Exception as exc:
                print(f"[acquire] message={message.id} strategy={name} error={exc!r}")
                continue
            if asset is not None and asset.data:
                print(
                    f"[acquire] message={message.id} strategy={name} "
                    f"mimetype={asset.mimetype} bytes={len(asset.data)}"
                )
                return asset
        print(f"[acquire] message={message.id} not_found")
        return None

from __future__ import annotations

import asyncio
from dataclasses import replace

from ..chat.base import ChatMessage, ChatSession
from ..pipeline.models import DeliveryResult
from ..pipeline.runner import PipelineDispatcher
from ..pipeline.steps.acquire import MediaAcquirer
from ..pipeline.steps.parse_caption import parse_caption
from ..storage.settings_store import SettingsStore
from ..utils.text import clean_text


ACQUISITION_FAILED_TEXT = (
    "⚠️ Could not download media. Send the media and the caption in the same "
    "message or reply directly to the media."
)
MODE_KEYWORD = 'Caption must include "sticker"'
MODE_AUTO = "Auto on any media"


class StickerBot:
    """Turn chat messages into stickers, one task per message."""

    def __init__(
        self,
        session: ChatSession,
        settings_store: SettingsStore,
        acquirer: MediaAcquirer,
        dispatcher: PipelineDispatcher,
    ) -> None:
        self.session = session
        self.settings_store = settings_store
        self.acquirer = acquirer
        self.dispatcher = dispatcher
        self._tasks: set[asyncio.Task] = set()

    def attach(self) -> None:
        self.session.on_message(self.on_message)

    async def on_message(self, message: ChatMessage) -> None:
        task = asyncio.create_task(self.handle(message))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            print(f"[bot] message task failed: {type(exc).__name__}: {exc}")

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def handle(self, message: ChatMessage) -> DeliveryResult | None:
        raw = message.body or ""
        text = clean_text(raw).lower()

        if text in ("hi", "hello"):
            await self._welcome(message)
            return None
        if text.startswith("name "):
            credits = self.settings_store.set_user_credits(message.sender_id, name=raw.strip()[5:])
            await self.session.reply(message, f"✅ Sticker pack name saved: *{credits.pack_name}*")
            return None
        if text.startswith("author "):
            credits = self.settings_store.set_user_credits(message.sender_id, author=raw.strip()[7:])
            await self.session.reply(message, f"✅ Sticker author saved: *{credits.author_name}*")
            return None
        if text.startswith("mode "):
            await self._set_mode(message, text[5:].strip())
            return None

        if not message.has_media and not message.has_quoted:
            return None
        return await self.make_sticker(message)

    async def make_sticker(self, message: ChatMessage) -> DeliveryResult:
        settings = self.settings_store.get_global_settings()
        intent = parse_caption(message.body, requires_keyword=settings.require_caption)
        if intent.gated_out:
            print(f"[bot] message={message.id} skipped: caption lacks keyword")
            return DeliveryResult(status="skipped")

        asset = await self.acquirer.acquire(message)
        if asset is None:
            await self.session.reply(message, ACQUISITION_FAILED_TEXT)
            return DeliveryResult(status="not_found")
        return await self.dispatcher.run(message, intent, asset)

    async def _welcome(self, message: ChatMessage) -> None:
        credits = self.settings_store.get_user_credits(message.sender_id)
        await self.session.reply(
            message,
            "👋 Welcome! I'm a *Sticker Bot*.\n\n"
            "🟩 Add *square* to crop to 1:1.\n"
            "🪄 Add *rbg* to remove background (images only).\n\n"
            "⚙️ *_Your current credits:_*\n"
            f"• Pack: *{credits.pack_name}*\n"
            f"• Author: *{credits.author_name}*\n\n"
            "ℹ️ *_Update with:_*\n"
            "• Pack name: name *YOURPACK*\n"
            "• Author name: author *YOURNAME*",
        )

    async def _set_mode(self, message: ChatMessage, value: str) -> None:
        new_mode = value in ("true", "on")
        current = self.settings_store.get_global_settings()
        label = MODE_KEYWORD if new_mode else MODE_AUTO
        if current.require_caption == new_mode:
            await self.session.reply(message, f"ℹ️ Mode is already set to *{label}*.")
            return
        self.settings_store.set_global_settings(replace(current, require_caption=new_mode))
        await self.session.reply(message, f"✅ Bot mode saved: *{label}*")

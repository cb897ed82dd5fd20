from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from ..pipeline.models import MediaAsset


@dataclass
class ChatMessage:
    id: str
    chat_id: str
    body: str = ""
    author_id: Optional[str] = None
    has_media: bool = False
    has_quoted: bool = False

    @property
    def sender_id(self) -> str:
        # group messages carry the author, direct messages only the chat
        return self.author_id or self.chat_id


StickerPayload = Union[MediaAsset, Path]
MessageHandler = Callable[[ChatMessage], Awaitable[None]]


class ChatSession(ABC):
    name: str = "base"

    @abstractmethod
    def on_message(self, handler: MessageHandler) -> None:
        raise NotImplementedError

    @abstractmethod
    async def download_attachment(self, message: ChatMessage) -> MediaAsset | None:
        raise NotImplementedError

    @abstractmethod
    async def get_quoted_message(self, message: ChatMessage) -> ChatMessage | None:
        raise NotImplementedError

    @abstractmethod
    async def send_sticker(
        self,
        target_id: str,
        payload: StickerPayload,
        pack_name: str,
        author_name: str,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    async def reply(self, message: ChatMessage, text: str) -> None:
        raise NotImplementedError

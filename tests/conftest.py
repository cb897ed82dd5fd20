"""Shared fakes for the chat transport and the background-removal service."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from src.chat.base import ChatMessage, ChatSession
from src.pipeline.errors import BackgroundRemovalFailed
from src.pipeline.models import MediaAsset


def make_image_asset(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> MediaAsset:
    image = Image.new(mode, (width, height), color=(200, 30, 30) if mode == "RGB" else None)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    mimetype = "image/jpeg" if fmt == "JPEG" else f"image/{fmt.lower()}"
    return MediaAsset(data=buffer.getvalue(), mimetype=mimetype, filename=f"input.{fmt.lower()}")


def image_size(asset: MediaAsset) -> tuple[int, int]:
    with Image.open(io.BytesIO(asset.data)) as image:
        return image.size


class FakeChatSession(ChatSession):
    name = "fake"

    def __init__(self) -> None:
        self.downloads: dict[str, list] = {}
        self.quoted: dict[str, ChatMessage] = {}
        self.download_calls: list[str] = []
        self.sent: list[dict] = []
        self.replies: list[str] = []
        self.handlers = []
        self.fail_send = False

    def on_message(self, handler) -> None:
        self.handlers.append(handler)

    def queue_download(self, message_id: str, *results) -> None:
        self.downloads.setdefault(message_id, []).extend(results)

    async def download_attachment(self, message: ChatMessage) -> MediaAsset | None:
        self.download_calls.append(message.id)
        queued = self.downloads.get(message.id) or []
        if not queued:
            return None
        result = queued.pop(0) if len(queued) > 1 else queued[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def get_quoted_message(self, message: ChatMessage) -> ChatMessage | None:
        return self.quoted.get(message.id)

    async def send_sticker(self, target_id, payload, pack_name, author_name) -> None:
        if self.fail_send:
            raise ConnectionError("chat network unavailable")
        record = {"target": target_id, "pack": pack_name, "author": author_name}
        if isinstance(payload, Path):
            record["path"] = payload
            record["exists_during_send"] = payload.exists()
            record["data"] = payload.read_bytes()
            record["filename"] = payload.name
        else:
            record["data"] = payload.data
            record["filename"] = payload.filename
            record["mimetype"] = payload.mimetype
        self.sent.append(record)

    async def reply(self, message: ChatMessage, text: str) -> None:
        self.replies.append(text)


class FakeRemover:
    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.calls = 0

    def remove_background(self, asset: MediaAsset) -> MediaAsset:
        self.calls += 1
        if self.status_code != 200:
            raise BackgroundRemovalFailed(
                f"remove.bg failed: {self.status_code}",
                status_code=self.status_code,
            )
        with Image.open(io.BytesIO(asset.data)) as image:
            cutout = image.convert("RGBA")
        buffer = io.BytesIO()
        cutout.save(buffer, format="PNG")
        return MediaAsset(data=buffer.getvalue(), mimetype="image/png", filename="nobg.png")


@pytest.fixture
def session() -> FakeChatSession:
    return FakeChatSession()


@pytest.fixture
def remover() -> FakeRemover:
    return FakeRemover()


@pytest.fixture
def message() -> ChatMessage:
    return ChatMessage(id="msg-1", chat_id="chat-1", body="", author_id="user-1", has_media=True)

from __future__ import annotations

import mimetypes
import shutil
from pathlib import Path

from .base import ChatMessage, ChatSession, MessageHandler, StickerPayload
from ..pipeline.models import MediaAsset
from ..utils.file import ensure_dir, sanitize_filename


class LocalChatSession(ChatSession):
    """Filesystem-backed session: attachments are local files, stickers land in a directory."""

    name = "local"

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.attachments: dict[str, Path] = {}
        self.quoted: dict[str, ChatMessage] = {}
        self.replies: list[str] = []
        self.sent: list[Path] = []
        self._handlers: list[MessageHandler] = []

    def on_message(self, handler: MessageHandler) -> None:
        self._handlers.append(handler)

    async def emit(self, message: ChatMessage) -> None:
        for handler in self._handlers:
            await handler(message)

    def attach(self, message: ChatMessage, path: Path) -> None:
        self.attachments[message.id] = path
        message.has_media = True

    async def download_attachment(self, message: ChatMessage) -> MediaAsset | None:
        path = self.attachments.get(message.id)
        if not path or not path.is_file():
            return None
        mimetype, _ = mimetypes.guess_type(path.name)
        return MediaAsset(
            data=path.read_bytes(),
            mimetype=mimetype or "application/octet-stream",
            filename=path.name,
        )

    async def get_quoted_message(self, message: ChatMessage) -> ChatMessage | None:
        return self.quoted.get(message.id)

    async def send_sticker(
        self,
        target_id: str,
        payload: StickerPayload,
        pack_name: str,
        author_name: str,
    ) -> None:
        ensure_dir(self.output_dir)
        prefix = sanitize_filename(f"{pack_name}_{author_name}") or "sticker"
        if isinstance(payload, Path):
            out_path = self.output_dir / f"{prefix}_{payload.name}"
            shutil.copyfile(payload, out_path)
        else:
            out_path = self.output_dir / f"{prefix}_{payload.filename}"
            out_path.write_bytes(payload.data)
        self.sent.append(out_path)
        print(f"[local] sticker to={target_id} path={out_path}")

    async def reply(self, message: ChatMessage, text: str) -> None:
        self.replies.append(text)
        print(f"[reply] {text}")

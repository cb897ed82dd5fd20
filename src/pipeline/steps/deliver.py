from __future__ import annotations

import asyncio
from pathlib import Path

from ...chat.base import ChatSession, StickerPayload
from ..errors import SendFailed
from ..models import Credits


class StickerDelivery:
    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def send(
        self,
        session: ChatSession,
        target_id: str,
        payload: StickerPayload,
        credits: Credits,
    ) -> None:
        name = payload.name if isinstance(payload, Path) else payload.filename
        try:
            await asyncio.wait_for(
                session.send_sticker(
                    target_id,
                    payload,
                    pack_name=credits.pack_name,
                    author_name=credits.author_name,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise SendFailed(f"Sending {name} timed out after {self.timeout}s") from exc
        except Exception as exc:
            raise SendFailed(f"Sending {name} failed: {exc}") from exc
        print(f"[deliver] to={target_id} file={name} pack={credits.pack_name!r}")

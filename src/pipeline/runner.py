from __future__ import annotations

from pathlib import Path

from ..chat.base import ChatMessage, ChatSession, StickerPayload
from ..config import Settings
from ..removebg.client import RemoveBgClient
from ..storage.settings_store import SettingsStore
from .errors import SendFailed
from .models import Credits, DeliveryResult, Intent, MediaAsset
from .steps.deliver import StickerDelivery
from .steps.image_chain import ImageTransformChain
from .steps.video_chain import VideoTransformChain


STILL_IMAGE = "still_image"
ANIMATED_OR_VIDEO = "animated_or_video"
OTHER = "other"

FALLBACK_NOTICE = "⚠️ Processing failed. Sending original as sticker."
VIDEO_NOTICE = "🟩 Cropped video/GIF to 1:1."


def classify(asset: MediaAsset) -> str:
    if asset.is_still_image:
        return STILL_IMAGE
    if asset.is_animated_or_video:
        return ANIMATED_OR_VIDEO
    return OTHER


def image_notice(intent: Intent) -> str | None:
    if intent.wants_background_removal and intent.wants_square:
        return "🪄 Background removed and cropped to 1:1."
    if intent.wants_background_removal:
        return "🪄 Background removed."
    if intent.wants_square:
        return "🟩 Cropped to 1:1."
    return None


class PipelineDispatcher:
    """Route one acquired asset to its transform chain and deliver the result.

    Any failure inside a chain is answered with a notice and the original asset
    sent as the sticker. Only a failed send ends a run without a sticker.
    """

    def __init__(
        self,
        session: ChatSession,
        settings_store: SettingsStore,
        image_chain: ImageTransformChain,
        video_chain: VideoTransformChain,
        delivery: StickerDelivery,
    ) -> None:
        self.session = session
        self.settings_store = settings_store
        self.image_chain = image_chain
        self.video_chain = video_chain
        self.delivery = delivery

    async def run(self, message: ChatMessage, intent: Intent, asset: MediaAsset) -> DeliveryResult:
        credits = self.settings_store.get_user_credits(message.sender_id)
        branch = classify(asset)
        print(
            "[pipeline] message="
            + message.id
            + " mimetype="
            + asset.mimetype
            + " branch="
            + branch
            + " square="
            + str(intent.wants_square)
            + " rbg="
            + str(intent.wants_background_removal)
        )
        try:
            if branch == STILL_IMAGE:
                return await self._run_image(message, intent, asset, credits)
            if branch == ANIMATED_OR_VIDEO and intent.wants_square:
                return await self._run_video(message, asset, credits)
            return await self._deliver(message, asset, credits, branch)
        except SendFailed as exc:
            print(f"[pipeline] message={message.id} send_failed error={exc}")
            return DeliveryResult(status="send_failed", branch=branch, error=str(exc))
        except Exception as exc:
            return await self._fallback(message, asset, credits, branch, exc)

    async def _run_image(
        self,
        message: ChatMessage,
        intent: Intent,
        asset: MediaAsset,
        credits: Credits,
    ) -> DeliveryResult:
        result = await self.image_chain.transform(asset, intent)
        delivered = await self._deliver(message, result, credits, STILL_IMAGE)
        notice = image_notice(intent)
        if notice:
            await self._notify(message, notice)
        return delivered

    async def _run_video(self, message: ChatMessage, asset: MediaAsset, credits: Credits) -> DeliveryResult:
        async with self.video_chain.transform(asset) as output_path:
            delivered = await self._deliver(message, output_path, credits, ANIMATED_OR_VIDEO)
        await self._notify(message, VIDEO_NOTICE)
        return delivered

    async def _deliver(
        self,
        message: ChatMessage,
        payload: StickerPayload,
        credits: Credits,
        branch: str,
        used_original: bool = False,
    ) -> DeliveryResult:
        await self.delivery.send(self.session, message.chat_id, payload, credits)
        filename = payload.name if isinstance(payload, Path) else payload.filename
        return DeliveryResult(status="sent", branch=branch, filename=filename, used_original=used_original)

    async def _fallback(
        self,
        message: ChatMessage,
        asset: MediaAsset,
        credits: Credits,
        branch: str,
        exc: Exception,
    ) -> DeliveryResult:
        print(f"[pipeline] message={message.id} processing failed: {type(exc).__name__}: {exc}")
        await self._notify(message, FALLBACK_NOTICE)
        try:
            result = await self._deliver(message, asset, credits, branch, used_original=True)
        except SendFailed as send_exc:
            print(f"[pipeline] message={message.id} send_failed error={send_exc}")
            return DeliveryResult(
                status="send_failed",
                branch=branch,
                used_original=True,
                error=str(send_exc),
            )
        result.error = str(exc)
        return result

    async def _notify(self, message: ChatMessage, text: str) -> None:
        try:
            await self.session.reply(message, text)
        except Exception as exc:
            print(f"[pipeline] message={message.id} reply failed: {exc}")


class PipelineFactory:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def create(self, session: ChatSession, settings_store: SettingsStore) -> PipelineDispatcher:
        remover = RemoveBgClient(
            api_key=self.settings.remove_bg_api_key,
            url=self.settings.remove_bg_url,
            timeout=self.settings.remove_bg_timeout,
        )
        return PipelineDispatcher(
            session=session,
            settings_store=settings_store,
            image_chain=ImageTransformChain(remover, max_size=self.settings.sticker_max_size),
            video_chain=VideoTransformChain(
                max_duration=self.settings.video_max_duration,
                size=self.settings.sticker_max_size,
                fps=self.settings.video_fps,
                timeout=self.settings.encode_timeout,
            ),
            delivery=StickerDelivery(timeout=self.settings.send_timeout),
        )

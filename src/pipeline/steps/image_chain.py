from __future__ import annotations

import asyncio
import io
from typing import Protocol

from PIL import Image, UnidentifiedImageError

from ..errors import InvalidImageDimensions
from ..models import Intent, MediaAsset


class BackgroundRemover(Protocol):
    def remove_background(self, asset: MediaAsset) -> MediaAsset:
        ...


def _open_image(asset: MediaAsset) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(asset.data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageDimensions(f"Cannot read image size of {asset.filename}: {exc}") from exc
    width, height = image.size
    if not width or not height:
        raise InvalidImageDimensions(f"Cannot read image size of {asset.filename}")
    # palette and bilevel images would be resized with NEAREST
    if image.mode not in ("RGB", "RGBA", "L", "LA"):
        image = image.convert("RGBA")
    return image


def _encode_png(image: Image.Image, filename: str) -> MediaAsset:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return MediaAsset(data=buffer.getvalue(), mimetype="image/png", filename=filename)


def crop_to_square(asset: MediaAsset, max_size: int = 512) -> MediaAsset:
    image = _open_image(asset)
    width, height = image.size
    side = min(width, height)
    left = (width - side) // 2
    top = (height - side) // 2
    image = image.crop((left, top, left + side, top + side))
    if side > max_size:
        image = image.resize((max_size, max_size), Image.Resampling.LANCZOS)
    return _encode_png(image, "square.png")


def clamp_size(asset: MediaAsset, max_size: int = 512) -> MediaAsset:
    image = _open_image(asset)
    # thumbnail keeps the aspect ratio and never enlarges
    image.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
    return _encode_png(image, "resized.png")


class ImageTransformChain:
    def __init__(self, remover: BackgroundRemover, max_size: int = 512) -> None:
        self.remover = remover
        self.max_size = max_size

    async def transform(self, asset: MediaAsset, intent: Intent) -> MediaAsset:
        work = asset
        if intent.wants_background_removal:
            work = await asyncio.to_thread(self.remover.remove_background, work)
        if intent.wants_square:
            return await asyncio.to_thread(crop_to_square, work, self.max_size)
        return await asyncio.to_thread(clamp_size, work, self.max_size)

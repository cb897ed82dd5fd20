from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Intent:
    wants_square: bool = False
    wants_background_removal: bool = False
    requires_keyword: bool = False
    has_keyword: bool = False

    @property
    def gated_out(self) -> bool:
        return self.requires_keyword and not self.has_keyword


@dataclass(frozen=True)
class MediaAsset:
    data: bytes
    mimetype: str
    filename: str

    @property
    def is_still_image(self) -> bool:
        return self.mimetype.startswith("image/") and self.mimetype != "image/gif"

    @property
    def is_animated_or_video(self) -> bool:
        return self.mimetype == "image/gif" or self.mimetype.startswith("video/")


@dataclass
class VideoJob:
    input_path: Path
    output_path: Path
    max_duration_seconds: int
    square_size_px: int
    fps: int


@dataclass(frozen=True)
class Credits:
    pack_name: str
    author_name: str


@dataclass(frozen=True)
class GlobalSettings:
    default_pack: str
    default_author: str
    require_caption: bool = False


@dataclass
class DeliveryResult:
    status: str
    branch: str = ""
    filename: Optional[str] = None
    used_original: bool = False
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status == "sent"

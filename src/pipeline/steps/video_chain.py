from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from ...utils import ffmpeg as ffmpeg_utils
from ...utils.file import remove_file, suffix_for, unique_temp_path
from ..errors import VideoEncodeFailed
from ..models import MediaAsset, VideoJob


class VideoTransformChain:
    """Square-crop GIFs and videos into a short silent MP4.

    ``transform`` is an async context manager yielding the encoded file. The
    input temp file is gone once encoding ends; the output file is removed when
    the ``async with`` block exits, whatever happened inside it.
    """

    def __init__(
        self,
        max_duration: int = 8,
        size: int = 512,
        fps: int = 15,
        timeout: float | None = None,
        tmp_dir: Path | None = None,
    ) -> None:
        self.max_duration = max_duration
        self.size = size
        self.fps = fps
        self.timeout = timeout
        self.tmp_dir = tmp_dir

    def create_job(self, asset: MediaAsset) -> VideoJob:
        return VideoJob(
            input_path=unique_temp_path("sticker_in", suffix_for(asset.mimetype, asset.filename), self.tmp_dir),
            output_path=unique_temp_path("sticker_out", ".mp4", self.tmp_dir),
            max_duration_seconds=self.max_duration,
            square_size_px=self.size,
            fps=self.fps,
        )

    async def _encode(self, job: VideoJob) -> None:
        try:
            await asyncio.to_thread(
                ffmpeg_utils.encode_square_video,
                job.input_path,
                job.output_path,
                job.square_size_px,
                job.fps,
                job.max_duration_seconds,
                self.timeout,
            )
        except VideoEncodeFailed:
            raise
        except Exception as exc:
            raise VideoEncodeFailed(f"Video encoding failed: {exc}") from exc
        if not job.output_path.exists():
            raise VideoEncodeFailed("ffmpeg produced no output file")

    @asynccontextmanager
    async def transform(self, asset: MediaAsset) -> AsyncIterator[Path]:
        job = self.create_job(asset)
        try:
            await asyncio.to_thread(job.input_path.write_bytes, asset.data)
            print(
                f"[video] encode input={job.input_path.name} size={job.square_size_px} "
                f"fps={job.fps} max_duration={job.max_duration_seconds}"
            )
            await self._encode(job)
        except BaseException:
            remove_file(job.output_path)
            raise
        finally:
            remove_file(job.input_path)

        try:
            yield job.output_path
        finally:
            remove_file(job.output_path)

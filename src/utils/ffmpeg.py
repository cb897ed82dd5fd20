from pathlib import Path
import shutil
import subprocess

import ffmpeg

from ..pipeline.errors import VideoEncodeFailed


def _ensure_ffmpeg() -> None:
    if not shutil.which("ffmpeg"):
        raise FileNotFoundError(
            "ffmpeg not found in PATH. Install ffmpeg and ensure it is available in PATH."
        )


def build_square_filter(size: int, fps: int) -> str:
    # crop -> scale -> fps, so the crop is measured on the source resolution
    return ",".join(
        [
            "crop='min(iw,ih)':'min(iw,ih)'",
            f"scale={size}:{size}:flags=lanczos",
            f"fps={fps}",
        ]
    )


def build_square_stream(
    input_path: Path,
    output_path: Path,
    size: int = 512,
    fps: int = 15,
    max_duration: int = 8,
):
    return (
        ffmpeg
        .input(str(input_path))
        .output(
            str(output_path),
            vf=build_square_filter(size, fps),
            an=None,
            vcodec="libx264",
            preset="veryfast",
            t=max_duration,
            movflags="+faststart",
            pix_fmt="yuv420p",
        )
        .overwrite_output()
    )


def encode_square_video(
    input_path: Path,
    output_path: Path,
    size: int = 512,
    fps: int = 15,
    max_duration: int = 8,
    timeout: float | None = None,
) -> Path:
    _ensure_ffmpeg()
    stream = build_square_stream(input_path, output_path, size=size, fps=fps, max_duration=max_duration)
    process = stream.run_async(pipe_stdout=True, pipe_stderr=True)
    try:
        _, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.communicate()
        raise VideoEncodeFailed(f"ffmpeg timed out after {timeout}s")
    if process.returncode != 0:
        message = stderr.decode("utf-8", errors="replace") if stderr else ""
        raise VideoEncodeFailed(
            f"ffmpeg exited with code {process.returncode}",
            stderr=message,
        )
    return output_path

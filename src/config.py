import os
from dataclasses import dataclass
from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    remove_bg_api_key: str
    remove_bg_url: str
    data_dir: str
    sticker_max_size: int
    video_max_duration: int
    video_fps: int
    acquire_retry_delay: float
    remove_bg_timeout: float
    encode_timeout: float
    send_timeout: float
    default_pack: str
    default_author: str


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def get_settings() -> Settings:
    return Settings(
        remove_bg_api_key=os.getenv("REMOVE_BG_API_KEY", "").strip(),
        remove_bg_url=os.getenv("REMOVE_BG_URL", "https://api.remove.bg/v1.0/removebg"),
        data_dir=os.getenv("STICKER_DATA_DIR", "data"),
        sticker_max_size=_int_env("STICKER_MAX_SIZE", 512),
        video_max_duration=_int_env("VIDEO_MAX_DURATION", 8),
        video_fps=_int_env("VIDEO_FPS", 15),
        acquire_retry_delay=_float_env("ACQUIRE_RETRY_DELAY", 0.7),
        remove_bg_timeout=_float_env("REMOVE_BG_TIMEOUT", 30.0),
        encode_timeout=_float_env("ENCODE_TIMEOUT", 120.0),
        send_timeout=_float_env("SEND_TIMEOUT", 60.0),
        default_pack=os.getenv("DEFAULT_PACK", "My Pack"),
        default_author=os.getenv("DEFAULT_AUTHOR", "Sticker Bot"),
    )

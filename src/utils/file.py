import mimetypes
import tempfile
import uuid
from pathlib import Path


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def unique_temp_path(prefix: str, suffix: str, tmp_dir: Path | None = None) -> Path:
    root = tmp_dir or Path(tempfile.gettempdir())
    ensure_dir(root)
    return root / f"{prefix}_{uuid.uuid4().hex}{suffix}"


def suffix_for(mimetype: str, filename: str = "") -> str:
    suffix = Path(filename).suffix if filename else ""
    if suffix:
        return suffix
    return mimetypes.guess_extension(mimetype or "") or ".bin"


def remove_file(path: Path | None) -> None:
    if path is None:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        print(f"[file] failed to remove {path}: {exc}")


def sanitize_filename(name: str) -> str:
    return "".join(ch if ch not in '\\/:*?"<>|' else "_" for ch in name).strip()

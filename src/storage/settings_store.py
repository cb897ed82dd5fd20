from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from ..pipeline.models import Credits, GlobalSettings
from ..utils.file import ensure_dir


class SettingsStore(ABC):
    @abstractmethod
    def get_global_settings(self) -> GlobalSettings:
        raise NotImplementedError

    @abstractmethod
    def set_global_settings(self, settings: GlobalSettings) -> None:
        raise NotImplementedError

    @abstractmethod
    def _get_user_record(self, user_id: str) -> dict:
        raise NotImplementedError

    @abstractmethod
    def _put_user_record(self, user_id: str, record: dict) -> None:
        raise NotImplementedError

    def get_user_credits(self, user_id: str) -> Credits:
        defaults = self.get_global_settings()
        record = self._get_user_record(user_id)
        return Credits(
            pack_name=record.get("name") or defaults.default_pack,
            author_name=record.get("author") or defaults.default_author,
        )

    def set_user_credits(
        self,
        user_id: str,
        name: str | None = None,
        author: str | None = None,
    ) -> Credits:
        defaults = self.get_global_settings()
        record = dict(self._get_user_record(user_id))
        if name is not None:
            record["name"] = name.strip() or defaults.default_pack
        if author is not None:
            record["author"] = author.strip() or defaults.default_author
        self._put_user_record(user_id, record)
        return self.get_user_credits(user_id)


class InMemorySettingsStore(SettingsStore):
    def __init__(self, settings: GlobalSettings | None = None) -> None:
        self._settings = settings or GlobalSettings(default_pack="My Pack", default_author="Sticker Bot")
        self._users: dict[str, dict] = {}

    def get_global_settings(self) -> GlobalSettings:
        return self._settings

    def set_global_settings(self, settings: GlobalSettings) -> None:
        self._settings = settings

    def _get_user_record(self, user_id: str) -> dict:
        return self._users.get(user_id, {})

    def _put_user_record(self, user_id: str, record: dict) -> None:
        self._users[user_id] = record


def _write_json_atomic(path: Path, payload: dict) -> None:
    ensure_dir(path.parent)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp_path.replace(path)


class JsonSettingsStore(SettingsStore):
    """Global settings and per-user credits as two JSON documents in ``data_dir``."""

    def __init__(
        self,
        data_dir: Path,
        default_pack: str = "My Pack",
        default_author: str = "Sticker Bot",
    ) -> None:
        self.settings_path = data_dir / "settings.json"
        self.users_path = data_dir / "user-settings.json"
        self._lock = threading.Lock()
        self._settings = self._load_settings(default_pack, default_author)
        self._users = self._load_users()

    def _load_settings(self, default_pack: str, default_author: str) -> GlobalSettings:
        try:
            raw = json.loads(self.settings_path.read_text(encoding="utf-8"))
            return GlobalSettings(
                default_pack=raw.get("defaultPack") or default_pack,
                default_author=raw.get("defaultAuthor") or default_author,
                require_caption=bool(raw.get("requireCaption", False)),
            )
        except (OSError, ValueError, AttributeError):
            settings = GlobalSettings(default_pack=default_pack, default_author=default_author)
            _write_json_atomic(self.settings_path, self._settings_document(settings))
            return settings

    def _load_users(self) -> dict[str, dict]:
        try:
            raw = json.loads(self.users_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return raw if isinstance(raw, dict) else {}

    @staticmethod
    def _settings_document(settings: GlobalSettings) -> dict:
        return {
            "defaultPack": settings.default_pack,
            "defaultAuthor": settings.default_author,
            "requireCaption": settings.require_caption,
        }

    def get_global_settings(self) -> GlobalSettings:
        return self._settings

    def set_global_settings(self, settings: GlobalSettings) -> None:
        with self._lock:
            _write_json_atomic(self.settings_path, self._settings_document(settings))
            self._settings = settings

    def _get_user_record(self, user_id: str) -> dict:
        record = self._users.get(user_id)
        return record if isinstance(record, dict) else {}

    def _put_user_record(self, user_id: str, record: dict) -> None:
        with self._lock:
            users = dict(self._users)
            users[user_id] = record
            _write_json_atomic(self.users_path, users)
            self._users = users

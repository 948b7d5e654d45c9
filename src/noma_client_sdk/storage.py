from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)

SESSION_KEY = "session"
ACTIVE_ROLE_KEY = "active_role_id"
PWA_PROMPT_KEY = "pwa_install_prompt_shown"


@dataclass
class DeviceStorage:
    """Device-scoped key/value entries persisted as a single JSON document."""

    app_name: str = "noma"
    filename: str = "device.json"
    base_dir: Path | None = None

    def _path(self) -> Path:
        base = self.base_dir or Path(user_data_dir(self.app_name, "Zencora"))
        base.mkdir(parents=True, exist_ok=True)
        return base / self.filename

    def _read(self) -> dict[str, Any]:
        path = self._path()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (ValueError, OSError):
            logger.warning("device_storage_corrupt", extra={"path": str(path)})
            path.unlink(missing_ok=True)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        path = self._path()
        path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            data.pop(key)
            self._write(data)

    def clear(self) -> None:
        path = self._path()
        if path.exists():
            path.unlink()


def install_prompt_shown(storage: DeviceStorage) -> bool:
    return bool(storage.get(PWA_PROMPT_KEY, False))


def mark_install_prompt_shown(storage: DeviceStorage) -> None:
    storage.set(PWA_PROMPT_KEY, True)

"""Desktop settings file store: JSON on disk, or in-memory for tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from ghadmin.config import settings
from ghadmin.models.app_config import AppConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class ConfigStore(Protocol):
    """Interface for the persisted desktop settings."""

    def load(self) -> AppConfig: ...

    def save(self, config: AppConfig) -> None: ...


class MemoryConfigStore:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()

    def load(self) -> AppConfig:
        return self._config.model_copy(deep=True)

    def save(self, config: AppConfig) -> None:
        self._config = config.model_copy(deep=True)


class JsonConfigStore:
    """Settings file at ``path``; a missing file loads as defaults."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> AppConfig:
        if not self._path.exists():
            return AppConfig()
        return AppConfig.model_validate_json(self._path.read_text(encoding="utf-8"))

    def save(self, config: AppConfig) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(config.model_dump_json(indent=2), encoding="utf-8")


def get_config_store() -> ConfigStore:
    return JsonConfigStore(settings.config_path)

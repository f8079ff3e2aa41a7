"""Configuration loading helpers for cep-lookup."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import LookupConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_FILENAME = "cep_lookup.yaml"
HOME_ENV_VAR = "CEP_LOOKUP_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the configuration file path.

    An explicit ``config_path`` wins; otherwise ``$CEP_LOOKUP_HOME`` or the
    current directory is searched for ``cep_lookup.yaml``.
    """

    config_path: Path | None = None
    project_root: Path | None = None

    def __post_init__(self) -> None:
        if self.config_path is not None:
            self.config_path = Path(self.config_path).expanduser().resolve()
            if self.config_path.suffix not in CONFIG_EXTENSIONS:
                raise ValueError(
                    f"Unsupported config extension {self.config_path.suffix!r}; "
                    f"use one of {', '.join(CONFIG_EXTENSIONS)}"
                )
            self.project_root = self.config_path.parent
            return
        env_root = os.environ.get(HOME_ENV_VAR)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.config_path = root / CONFIG_FILENAME


class ConfigRepository:
    """Read and write :class:`LookupConfig` files."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: LookupConfig | None = None

    @property
    def path(self) -> Path:
        assert self.locator.config_path is not None
        return self.locator.config_path

    def exists(self) -> bool:
        return self.path.exists()

    def load_config(self) -> LookupConfig:
        """Return the stored configuration, or defaults when no file exists."""

        if self._cache is not None:
            return self._cache
        if self.path.exists():
            config = LookupConfig.model_validate(_read_file(self.path))
        else:
            config = LookupConfig()
        self._cache = config
        return config

    def save_config(self, config: LookupConfig) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        _write_file(self.path, config.model_dump(mode="json"))
        self._cache = config
        return self.path


__all__ = ["CONFIG_FILENAME", "ConfigLocator", "ConfigRepository", "HOME_ENV_VAR"]

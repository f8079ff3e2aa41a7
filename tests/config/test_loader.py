from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from cep_lookup.config import ConfigLocator, ConfigRepository, LookupConfig, ProviderConfig


def test_locator_uses_env_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CEP_LOOKUP_HOME", str(tmp_path))
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    assert locator.config_path == tmp_path.resolve() / "cep_lookup.yaml"


def test_locator_defaults_to_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CEP_LOOKUP_HOME", raising=False)
    monkeypatch.chdir(tmp_path)
    assert ConfigLocator().config_path == tmp_path.resolve() / "cep_lookup.yaml"


def test_locator_explicit_path_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CEP_LOOKUP_HOME", str(tmp_path / "elsewhere"))
    locator = ConfigLocator(config_path=tmp_path / "custom.json")
    assert locator.config_path == (tmp_path / "custom.json").resolve()


def test_locator_rejects_unknown_extension(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        ConfigLocator(config_path=tmp_path / "config.toml")


def test_missing_file_yields_defaults_without_writing(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_config()
    assert config == LookupConfig()
    assert not temp_config_repository.exists()


def test_yaml_roundtrip(temp_config_repository: ConfigRepository) -> None:
    config = LookupConfig(
        timeout=2.5,
        providers=[ProviderConfig(name="ViaCEP", kind="viacep")],
        user_agent="cep-lookup/test",
    )
    path = temp_config_repository.save_config(config)
    assert path.exists()
    stored = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert stored["timeout"] == 2.5

    reloaded = ConfigRepository(ConfigLocator(config_path=path)).load_config()
    assert reloaded == config


def test_json_file_is_supported(tmp_path: Path) -> None:
    path = tmp_path / "cep.json"
    path.write_text(
        json.dumps({"timeout": 0.5, "providers": [{"name": "BrasilAPI", "kind": "brasilapi"}]}),
        encoding="utf-8",
    )
    config = ConfigRepository(ConfigLocator(config_path=path)).load_config()
    assert config.timeout == 0.5
    assert [p.name for p in config.providers] == ["BrasilAPI"]


def test_non_mapping_file_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "cep_lookup.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        ConfigRepository(ConfigLocator(config_path=path)).load_config()


def test_invalid_values_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "cep_lookup.yaml"
    path.write_text("timeout: -3\n", encoding="utf-8")
    with pytest.raises(ValueError):
        ConfigRepository(ConfigLocator(config_path=path)).load_config()

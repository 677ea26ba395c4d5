"""
Tests for configuration loading — provision.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from provisioner.core.config.loader import (
    ConfigError,
    ProvisionConfig,
    find_config_file,
    load_config,
)


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / ".tiangong" / "provision.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content))
    return path


class TestDefaults:
    def test_thresholds(self):
        config = ProvisionConfig()
        assert config.python_binary == "python3.12"
        assert config.node_baseline == 18
        assert config.node_target == 22
        assert config.pandoc_min == 3
        assert config.ubuntu_default_repo_min == "24.04"

    def test_repository_dir(self):
        assert ProvisionConfig().repository_dir == "TianGong-AI-for-Sustainability"

    def test_known_group(self):
        config = ProvisionConfig()
        assert "3rd" in config.optional_groups
        assert "uk-grid-intensity" in config.describe_group("3rd")
        assert config.describe_group("viz") == "Optional dependency group 'viz'"

    def test_search_paths_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert ProvisionConfig().search_paths() == [
            str(tmp_path / ".cargo" / "bin"),
            str(tmp_path / ".local" / "bin"),
        ]


class TestLoadConfig:
    def test_no_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config() == ProvisionConfig()

    def test_overrides(self, tmp_path):
        path = _write(tmp_path, """\
            python_version: "3.13"
            node_target: 24
            optional_groups:
              viz: "Visualization extras"
        """)
        config = load_config(path)
        assert config.python_binary == "python3.13"
        assert config.node_target == 24
        assert config.optional_groups == {"viz": "Visualization extras"}

    def test_nested_under_provision_key(self, tmp_path):
        path = _write(tmp_path, """\
            provision:
              pandoc_min: 4
        """)
        assert load_config(path).pandoc_min == 4

    def test_empty_file_gives_defaults(self, tmp_path):
        path = _write(tmp_path, "")
        assert load_config(path) == ProvisionConfig()

    def test_search_upward(self, tmp_path, monkeypatch):
        _write(tmp_path, "node_baseline: 20\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert find_config_file() == tmp_path / ".tiangong" / "provision.yml"
        assert load_config().node_baseline == 20

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "node_target: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = _write(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_value(self, tmp_path):
        path = _write(tmp_path, "node_target: twenty-two\n")
        with pytest.raises(ConfigError, match="Invalid provisioner configuration"):
            load_config(path)

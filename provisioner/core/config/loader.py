"""
Configuration loader — reads provision.yml into a ProvisionConfig.

The file is optional.  Without it every threshold, URL and group
description falls back to the built-in defaults, which match what the
project needs today.  With it, any subset can be overridden:

    node_target: 22
    optional_groups:
      3rd: "Third-party research libraries"
      viz: "Extra plotting helpers"
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Default config location, relative to the project directory
CONFIG_DIR = ".tiangong"
CONFIG_FILE = "provision.yml"


class ConfigError(Exception):
    """Raised when provision.yml is present but invalid."""


def _default_groups() -> dict[str, str]:
    return {
        "3rd": "Third-party research libraries (uk-grid-intensity CLI for carbon metrics)",
    }


class ProvisionConfig(BaseModel):
    """Thresholds and locations used by detection, planning and execution."""

    # ── Interpreter ──────────────────────────────────────────────
    python_version: str = "3.12"
    ubuntu_default_repo_min: str = "24.04"
    python_ppa: str = "ppa:deadsnakes/ppa"

    # ── Dependency manager ───────────────────────────────────────
    uv_install_url: str = "https://astral.sh/uv/install.sh"
    extra_search_paths: list[str] = Field(
        default_factory=lambda: ["~/.cargo/bin", "~/.local/bin"],
    )
    shell_rc: str = "~/.bashrc"

    # ── Chart runtime ────────────────────────────────────────────
    node_baseline: int = 18
    node_target: int = 22
    nodesource_url: str = "https://deb.nodesource.com/setup_22.x"

    # ── Document export ──────────────────────────────────────────
    pandoc_min: int = 3

    # ── Project ──────────────────────────────────────────────────
    repository_url: str = "https://github.com/linancn/TianGong-AI-for-Sustainability.git"
    project_marker: str = "pyproject.toml"
    cache_dir: str = CONFIG_DIR
    cli_name: str = "tiangong-research"
    optional_groups: dict[str, str] = Field(default_factory=_default_groups)
    group_probes: dict[str, list[str]] = Field(
        default_factory=lambda: {"3rd": ["uk-grid-intensity", "--help"]},
    )

    @property
    def python_binary(self) -> str:
        return f"python{self.python_version}"

    @property
    def repository_dir(self) -> str:
        """Directory name ``git clone`` creates for ``repository_url``."""
        name = self.repository_url.rstrip("/").rsplit("/", 1)[-1]
        return name[:-4] if name.endswith(".git") else name

    def describe_group(self, group: str) -> str:
        return self.optional_groups.get(group, f"Optional dependency group '{group}'")

    def search_paths(self) -> list[str]:
        """Extra PATH entries, user-expanded."""
        return [str(Path(p).expanduser()) for p in self.extra_search_paths]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for .tiangong/provision.yml starting from ``start_dir``, walking up.

    Returns:
        Path to the config file, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_DIR / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, *, search: bool = True) -> ProvisionConfig:
    """Load provisioner configuration.

    Args:
        path: Explicit path to provision.yml.  When None and ``search``
            is True, searches upward from the working directory.
        search: Whether to search when no path is given.

    Returns:
        Validated ProvisionConfig (defaults when no file exists).

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None and search:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return ProvisionConfig()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return ProvisionConfig()

    logger.debug("Loading provisioner config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return ProvisionConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Allow everything nested under a "provision" key
    if "provision" in data and isinstance(data["provision"], dict):
        data = data["provision"]

    try:
        config = ProvisionConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid provisioner configuration: {e}") from e

    logger.info("Loaded provisioner config from %s", path)
    return config

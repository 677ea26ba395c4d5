"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from provisioner.core.config.loader import ProvisionConfig
from provisioner.core.models.environment import ExecutionContext
from tests.helpers import FakeRunner


@pytest.fixture
def config() -> ProvisionConfig:
    return ProvisionConfig()


@pytest.fixture
def host() -> ExecutionContext:
    return ExecutionContext(containerized=False)


@pytest.fixture
def container() -> ExecutionContext:
    return ExecutionContext(containerized=True, markers=["/.dockerenv"])


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A directory holding the project marker."""
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
    return tmp_path


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()

"""
Tests for CLI commands — global options, plan, status and verify.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from provisioner.core.models import ExecutionContext
from provisioner.main import cli
from tests.helpers import make_status, make_statuses

_DETECT = "provisioner.core.services.provision.detection.environment.detect_context"
_ORCH = "provisioner.core.services.provision.orchestration.orchestrator"
_TV = "provisioner.core.services.provision.detection.tool_version"
_VERIFY = "provisioner.core.services.provision.orchestration.verification"


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    """No stray provision.yml is picked up from the real working tree."""
    monkeypatch.chdir(tmp_path)


def _project(tmp_path: Path) -> Path:
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
    return tmp_path


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "TianGong AI for Sustainability" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_unknown_flag_is_usage_error(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["install", "--bogus"])
        assert result.exit_code == 2
        assert "No such option" in result.output

    def test_install_help_lists_flags(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["install", "--help"])
        assert result.exit_code == 0
        for flag in ("--full", "--minimal", "--with-pdf", "--with-charts", "--with-carbon",
                     "--with-group", "--local", "--latex"):
            assert flag in result.output

    def test_invalid_config_exits_1(self, tmp_path):
        bad = tmp_path / "bad.yml"
        bad.write_text("node_target: [unclosed\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["-c", str(bad), "status"])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output


class TestPlanCommand:
    def _invoke(self, args, statuses=None, context=None):
        runner = CliRunner()
        with patch(_DETECT, return_value=context or ExecutionContext()), \
             patch(f"{_ORCH}.probe_tools", return_value=statuses or make_statuses()), \
             patch(f"{_ORCH}.detect_os_version", return_value="24.04"):
            return runner.invoke(cli, ["plan", *args])

    def test_json_minimal(self, tmp_path):
        result = self._invoke(["--minimal", "--json", "--project-dir", str(_project(tmp_path))])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["mode"] == "minimal"
        keys = [a["key"] for a in data["plan"]["actions"]]
        assert keys == ["refresh-index", "sync"]

    def test_with_carbon_adds_group(self, tmp_path):
        result = self._invoke([
            "--minimal", "--with-carbon", "--with-group", "3rd", "--json",
            "--project-dir", str(_project(tmp_path)),
        ])
        data = json.loads(result.output)
        assert data["plan"]["groups"] == ["3rd"]

    def test_full_covers_features(self, tmp_path):
        result = self._invoke(["--full", "--json", "--project-dir", str(_project(tmp_path))])
        data = json.loads(result.output)
        features = {a["feature"] for a in data["plan"]["actions"]}
        assert {"charts", "pdf", "groups"} <= features

    @pytest.mark.parametrize("flags, mode", [
        (["--full", "--minimal"], "minimal"),
        (["--minimal", "--full"], "full"),
    ])
    def test_last_preset_wins(self, tmp_path, flags, mode):
        result = self._invoke([*flags, "--json", "--project-dir", str(_project(tmp_path))])
        assert result.exit_code == 0
        assert json.loads(result.output)["mode"] == mode

    def test_container_defaults_to_minimal(self, tmp_path):
        context = ExecutionContext(containerized=True, markers=["/.dockerenv"])
        statuses = make_statuses(interpreter="python3")
        result = self._invoke(
            ["--json", "--project-dir", str(_project(tmp_path))], statuses, context,
        )
        data = json.loads(result.output)
        assert data["context"] == "container"
        assert data["mode"] == "minimal"

    def test_container_without_marker_fails(self, tmp_path):
        context = ExecutionContext(containerized=True, markers=["/.dockerenv"])
        result = self._invoke(["--json", "--project-dir", str(tmp_path)], context=context)
        assert result.exit_code == 1
        assert "pyproject.toml not found" in json.loads(result.output)["error"]

    def test_text_output(self, tmp_path):
        statuses = make_statuses(node=None)
        result = self._invoke(
            ["--with-charts", "--no-input", "--project-dir", str(_project(tmp_path))], statuses,
        )
        assert result.exit_code == 0
        assert "Install Node.js 22 from NodeSource" in result.output
        assert "Install project dependencies (required)" in result.output


class TestStatusCommand:
    def test_json(self):
        runner = CliRunner()
        with patch(_DETECT, return_value=ExecutionContext()), \
             patch(f"{_TV}.probe_tools", return_value=make_statuses(node="v20.1.0")):
            result = runner.invoke(cli, ["status", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["context"] == "local"
        assert data["tools"]["node"]["version"] == "v20.1.0"

    def test_text(self):
        runner = CliRunner()
        with patch(_DETECT, return_value=ExecutionContext()), \
             patch(f"{_TV}.probe_tools", return_value=make_statuses(node="v20.1.0", pandoc=None)):
            result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "degraded" in result.output
        assert "missing" in result.output


class TestVerifyCommand:
    def test_json_reads_group_record(self, tmp_path):
        project = _project(tmp_path)
        record = project / ".tiangong" / "uv-groups.selected"
        record.parent.mkdir()
        record.write_text("3rd\n")

        def reprobe(tool, minimum=None, *, path=None):
            return make_status(tool, "v22.0.0" if tool == "node" else "tool 3.0", minimum)

        runner = CliRunner()
        with patch(_DETECT, return_value=ExecutionContext()), \
             patch(f"{_VERIFY}.probe_tool", side_effect=reprobe), \
             patch(f"{_VERIFY}.shutil.which", return_value=None):
            result = runner.invoke(cli, ["verify", "--json", "--project-dir", str(project)])
        assert result.exit_code == 0
        rows = json.loads(result.output)["verification"]
        names = [r["name"] for r in rows]
        assert "tiangong-research CLI" in names
        assert "uk-grid-intensity (group '3rd')" in names
        assert rows[0]["status"] == "satisfied"

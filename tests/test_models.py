"""
Tests for domain models — options, group selection, plan helpers.
"""

import pytest
from pydantic import ValidationError

from provisioner.core.models import (
    ActionKind,
    ExecutionContext,
    InstallAction,
    InstallationPlan,
    InstallMode,
    OptionalGroupSelection,
    ProvisionOptions,
    ToolStatus,
)


class TestOptionalGroupSelection:
    def test_duplicates_collapse(self):
        sel = OptionalGroupSelection().add("3rd").add("3rd")
        assert len(sel) == 1
        assert sel.sorted() == ["3rd"]

    def test_add_is_immutable(self):
        empty = OptionalGroupSelection()
        sel = empty.add("viz")
        assert len(empty) == 0
        assert "viz" in sel

    def test_sorted_order(self):
        sel = OptionalGroupSelection().add("zeta", "alpha", "mid")
        assert sel.sorted() == ["alpha", "mid", "zeta"]

    def test_empty_names_ignored(self):
        assert not OptionalGroupSelection().add("", "")

    def test_frozen(self):
        sel = OptionalGroupSelection()
        with pytest.raises(ValidationError):
            sel.names = frozenset({"x"})


class TestProvisionOptions:
    def test_default_interactive_on_host(self):
        opts = ProvisionOptions.from_flags(containerized=False)
        assert opts.mode == InstallMode.INTERACTIVE

    def test_default_minimal_in_container(self):
        opts = ProvisionOptions.from_flags(containerized=True)
        assert opts.mode == InstallMode.MINIMAL

    def test_local_override_restores_interactive(self):
        opts = ProvisionOptions.from_flags(containerized=True, force_local=True)
        assert opts.mode == InstallMode.INTERACTIVE
        assert opts.force_local is True

    def test_full_implies_features_and_groups(self):
        opts = ProvisionOptions.from_flags(
            containerized=False, full=True, known_groups=["3rd", "viz"],
        )
        assert opts.mode == InstallMode.FULL
        assert opts.with_pdf and opts.with_charts
        assert opts.groups.sorted() == ["3rd", "viz"]

    def test_minimal_flag(self):
        opts = ProvisionOptions.from_flags(containerized=False, minimal=True, with_pdf=True)
        assert opts.mode == InstallMode.MINIMAL
        assert opts.with_pdf is True

    def test_repeated_group_flag(self):
        opts = ProvisionOptions.from_flags(containerized=False, groups=["3rd", "3rd"])
        assert opts.groups.sorted() == ["3rd"]

    def test_mode_is_fixed(self):
        opts = ProvisionOptions.from_flags(containerized=False)
        with pytest.raises(ValidationError):
            opts.mode = InstallMode.FULL


class TestToolStatus:
    def test_absent(self):
        s = ToolStatus.absent("node", 18)
        assert s.present is False
        assert s.meets_minimum is False
        assert s.major == 0
        assert s.minimum == 18


class TestInstallationPlan:
    def _plan(self) -> InstallationPlan:
        return InstallationPlan(
            context=ExecutionContext(),
            mode=InstallMode.FULL,
            actions=[
                InstallAction(key="node", tool="node", feature="charts"),
                InstallAction(key="pandoc", tool="pandoc", feature="pdf", kind=ActionKind.SKIP),
            ],
        )

    def test_scheduled_excludes_skips(self):
        plan = self._plan()
        assert [a.key for a in plan.scheduled()] == ["node"]

    def test_features_include_skips(self):
        assert self._plan().features() == {"charts", "pdf"}

    def test_get(self):
        plan = self._plan()
        assert plan.get("pandoc").kind == ActionKind.SKIP
        assert plan.get("missing") is None

    def test_to_dict(self):
        d = self._plan().to_dict()
        assert d["mode"] == "full"
        assert d["context"] == "local"
        assert [a["kind"] for a in d["actions"]] == ["install", "skip"]

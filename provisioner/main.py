"""
TianGong provisioner — CLI entrypoint.

Usage:
    tiangong-setup --help
    tiangong-setup install --full
    tiangong-setup plan --with-charts --json
    tiangong-setup status
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from provisioner import __version__
from provisioner.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="tiangong-setup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to provision.yml (default: .tiangong/provision.yml, searched upward).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """TianGong AI for Sustainability — environment setup."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


# ── Shared helpers ──────────────────────────────────────────────


def _load_config(ctx: click.Context):
    from provisioner.core.config.loader import ConfigError, load_config

    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def _remember_preset(ctx: click.Context, param: click.Parameter, value: bool) -> bool:
    """Record the mode preset; when both are given the later one wins."""
    if value:
        ctx.meta["preset"] = param.name
    return value


_INSTALL_OPTIONS = [
    click.option(
        "--full", is_flag=True, callback=_remember_preset,
        help="Install all optional components (charts, PDF, groups).",
    ),
    click.option(
        "--minimal", is_flag=True, callback=_remember_preset,
        help="Install only core dependencies (default in container).",
    ),
    click.option("--with-pdf", is_flag=True, help="Include Pandoc & LaTeX for PDF/DOCX export."),
    click.option("--with-charts", is_flag=True, help="Install/upgrade Node.js 22+ for chart workflows."),
    click.option("--with-carbon", is_flag=True, help="Include the '3rd' group (uk-grid-intensity)."),
    click.option(
        "--with-group", "groups", multiple=True, metavar="NAME",
        help="Include an optional uv dependency group (repeatable).",
    ),
    click.option("--local", "force_local", is_flag=True, help="Ignore container detection."),
    click.option(
        "--latex", "latex_profile", type=click.Choice(["full", "minimal"]), default=None,
        help="TeX Live size when LaTeX gets installed.",
    ),
    click.option(
        "--project-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
        help="Project directory (default: current directory).",
    ),
]


def _install_options(func):
    """Flags shared by ``install`` and ``plan``."""
    for option in reversed(_INSTALL_OPTIONS):
        func = option(func)
    return func


def _build_options(config, *, full, minimal, with_pdf, with_charts, with_carbon, groups,
                   force_local, latex_profile):
    from provisioner.core.models.plan import ProvisionOptions
    from provisioner.core.services.provision.detection.environment import detect_context

    if full and minimal:
        preset = click.get_current_context().meta.get("preset")
        full, minimal = preset == "full", preset == "minimal"

    context = detect_context(force_local=force_local)
    selected = list(groups)
    if with_carbon:
        selected.append("3rd")
    options = ProvisionOptions.from_flags(
        containerized=context.containerized,
        full=full,
        minimal=minimal,
        with_pdf=with_pdf,
        with_charts=with_charts,
        groups=selected,
        force_local=force_local,
        latex_profile=latex_profile,
        known_groups=sorted(config.optional_groups),
    )
    return context, options


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@_install_options
@click.pass_context
def install(
    ctx: click.Context,
    full: bool,
    minimal: bool,
    with_pdf: bool,
    with_charts: bool,
    with_carbon: bool,
    groups: tuple[str, ...],
    force_local: bool,
    latex_profile: str | None,
    project_dir: Path | None,
) -> None:
    """Install dependencies and set up the project.

    Examples:

        tiangong-setup install

        tiangong-setup install --minimal

        tiangong-setup install --full

        tiangong-setup install --with-charts --with-carbon
    """
    from provisioner.core.services.provision.orchestration.orchestrator import run_provision
    from provisioner.ui.cli.console import ClickPrompter, ConsoleReporter

    config = _load_config(ctx)
    context, options = _build_options(
        config, full=full, minimal=minimal, with_pdf=with_pdf, with_charts=with_charts,
        with_carbon=with_carbon, groups=groups, force_local=force_local,
        latex_profile=latex_profile,
    )

    result = run_provision(
        context,
        options,
        config,
        (project_dir or Path.cwd()).resolve(),
        ClickPrompter(),
        ConsoleReporter(quiet=ctx.obj.get("quiet", False)),
    )

    if result.error:
        click.echo()
        sys.exit(result.exit_code)


@cli.command()
@_install_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--no-input", is_flag=True, help="Don't prompt; unanswered questions count as 'no'.")
@click.pass_context
def plan(
    ctx: click.Context,
    full: bool,
    minimal: bool,
    with_pdf: bool,
    with_charts: bool,
    with_carbon: bool,
    groups: tuple[str, ...],
    force_local: bool,
    latex_profile: str | None,
    project_dir: Path | None,
    as_json: bool,
    no_input: bool,
) -> None:
    """Show what ``install`` would do, without doing it."""
    from provisioner.core.observability.reporter import Reporter
    from provisioner.core.services.provision.orchestration.orchestrator import prepare_plan
    from provisioner.core.services.provision.orchestration.prompts import Prompter
    from provisioner.ui.cli.console import ClickPrompter

    config = _load_config(ctx)
    context, options = _build_options(
        config, full=full, minimal=minimal, with_pdf=with_pdf, with_charts=with_charts,
        with_carbon=with_carbon, groups=groups, force_local=force_local,
        latex_profile=latex_profile,
    )
    prompter = Prompter() if (no_input or as_json) else ClickPrompter()

    result = prepare_plan(
        context, options, config, (project_dir or Path.cwd()).resolve(),
        prompter, Reporter(),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)
        return

    if result.error or result.plan is None:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    p = result.plan
    click.secho(f"\n📋 Plan — {context.label}, mode {p.mode.value}", fg="cyan", bold=True)
    if p.python_source:
        click.echo(f"   Python source: {p.python_source}")
    if p.groups:
        click.echo(f"   Optional groups: {', '.join(p.groups.sorted())}")
    click.echo()

    for action in p.actions:
        if action.scheduled:
            flag = " (required)" if action.mandatory else ""
            click.secho(f"   ▸ {action.kind.value:<8}", fg="green", nl=False)
            click.echo(f"{action.label}{flag}")
            if ctx.obj.get("verbose"):
                if action.script_url:
                    click.echo(f"     │ curl -LsSf {action.script_url} | {' '.join(action.script_runner)}")
                for cmd in action.commands:
                    click.echo(f"     │ {' '.join(cmd)}")
        else:
            click.secho("   ⊘ skip    ", fg="yellow", nl=False)
            click.echo(f"{action.label} ({action.reason})")

    if p.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in p.warnings:
            click.echo(f"   • {warn}")
    click.echo()


@cli.command()
@click.option("--local", "force_local", is_flag=True, help="Ignore container detection.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, force_local: bool, as_json: bool) -> None:
    """Show execution context and tool status."""
    from provisioner.core.services.provision.data.constants import TOOL_LABELS
    from provisioner.core.services.provision.detection.environment import detect_context
    from provisioner.core.services.provision.detection.tool_version import probe_tools
    from provisioner.core.services.provision.orchestration.verification import classify

    config = _load_config(ctx)
    context = detect_context(force_local=force_local)
    statuses = probe_tools(context, config)

    if as_json:
        click.echo(json.dumps({
            "context": context.label,
            "markers": context.markers,
            "tools": {name: s.to_dict() for name, s in statuses.items()},
        }, indent=2))
        return

    click.secho(f"\n🔍 Environment: {context.label}", fg="cyan", bold=True)
    if context.markers:
        forced = " (ignored: --local)" if context.forced_local else ""
        click.echo(f"   Markers: {', '.join(context.markers)}{forced}")
    click.echo()

    colors = {"satisfied": "green", "degraded": "yellow", "missing": "red"}
    for name, s in statuses.items():
        target = config.node_target if name == "node" else None
        verdict = classify(s, target)
        click.secho(f"   {verdict:<10}", fg=colors[verdict], nl=False)
        click.echo(f"{TOOL_LABELS.get(name, name):<8} {s.version or '—'}")
    click.echo()


@cli.command()
@click.option("--local", "force_local", is_flag=True, help="Ignore container detection.")
@click.option(
    "--project-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
    help="Project directory (default: current directory).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def verify(ctx: click.Context, force_local: bool, project_dir: Path | None, as_json: bool) -> None:
    """Run the post-install verification checks."""
    from provisioner.core.persistence.group_record import default_record_path, read_group_record
    from provisioner.core.services.provision.detection.environment import detect_context
    from provisioner.core.services.provision.detection.tool_version import search_path
    from provisioner.core.services.provision.orchestration.orchestrator import report_verification
    from provisioner.core.services.provision.orchestration.verification import verify_installation
    from provisioner.ui.cli.console import ConsoleReporter

    config = _load_config(ctx)
    context = detect_context(force_local=force_local)
    root = (project_dir or Path.cwd()).resolve()
    has_project = (root / config.project_marker).is_file()
    groups = read_group_record(default_record_path(root, config.cache_dir)) if has_project else []

    rows = verify_installation(
        context,
        config,
        path=search_path(config.search_paths()),
        project_dir=root if has_project else None,
        groups=groups,
    )

    if as_json:
        click.echo(json.dumps({"verification": [r.to_dict() for r in rows]}, indent=2))
        return

    report_verification(rows, ConsoleReporter(quiet=ctx.obj.get("quiet", False)))


if __name__ == "__main__":
    cli()

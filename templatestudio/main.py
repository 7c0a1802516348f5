"""
Template Studio — CLI entrypoint.

Usage:
    python -m templatestudio.main --help
    python -m templatestudio.main compose selection.yml
    python -m templatestudio.main catalog check
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from templatestudio import __version__
from templatestudio.core.observability.logging_config import level_from_flags, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="templatestudio")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging and fail fast on catalog errors.")
@click.option("--strict", is_flag=True, help="Fail on missing dependencies instead of reporting them.")
@click.option(
    "--catalog",
    "-c",
    "catalog_path",
    type=click.Path(exists=False),
    envvar="TS_CATALOG",
    default=None,
    help="Path to catalog.yml or a template directory (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    strict: bool,
    catalog_path: str | None,
) -> None:
    """Template Studio — resolve wizard selections into generation plans."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["strict"] = strict or debug
    ctx.obj["catalog_path"] = Path(catalog_path) if catalog_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=level_from_flags(debug=debug, verbose=verbose, quiet=quiet))


def _build_context(
    ctx: click.Context,
    selection_path: Path,
    project_name: str | None,
    namespace: str | None,
):
    """Load catalog + selection and build a ResolutionContext.

    Returns (selection, context) or exits with a message on ConfigError.
    """
    from templatestudio.adapters import EnvironmentShell, StaticShell, TemplateRepository
    from templatestudio.core.config.loader import ConfigError, load_catalog
    from templatestudio.core.config.selection_loader import load_selection
    from templatestudio.core.context import FailurePolicy
    from templatestudio.core.use_cases.compose import make_context

    try:
        catalog = load_catalog(ctx.obj.get("catalog_path"))
        selection_file = load_selection(selection_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    env_shell = EnvironmentShell()
    shell = StaticShell(
        project_name=(
            project_name
            or selection_file.project_name
            or env_shell.get_active_project_name()
        ),
        project_namespace=(
            namespace
            or selection_file.project_namespace
            or env_shell.get_active_project_namespace()
        ),
        user_name=env_shell.get_user_name(),
    )
    policy = FailurePolicy.FAIL_FAST if ctx.obj.get("strict") else FailurePolicy.from_env()
    context = make_context(TemplateRepository(catalog), shell, failure_policy=policy)
    return selection_file.selection, context


def _echo_diagnostics(context) -> None:
    context.diagnostics.flush()
    diagnostics = context.diagnostics.history
    if not diagnostics:
        return
    click.echo()
    click.secho("⚠️  Diagnostics:", fg="yellow")
    for d in diagnostics:
        click.echo(f"   • {d.message}")


def _echo_json(result, context) -> None:
    """Print *result* as JSON with the diagnostics it reported."""
    data = result.to_dict()
    context.diagnostics.flush()
    data["diagnostics"] = [d.to_dict() for d in context.diagnostics.history]
    click.echo(json.dumps(data, indent=2))


_selection_argument = click.argument(
    "selection_path", type=click.Path(exists=False, path_type=Path),
)
_json_option = click.option(
    "--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.",
)
_project_name_option = click.option(
    "--project-name", "-n", default=None, help="Active project name.",
)
_namespace_option = click.option(
    "--namespace", default=None, help="Active project root namespace (new-item flow).",
)


@cli.command()
@_selection_argument
@_json_option
@_project_name_option
@_namespace_option
@click.option("--new-item", is_flag=True, help="Add items to an existing project (no project stage).")
@click.pass_context
def compose(
    ctx: click.Context,
    selection_path: Path,
    as_json: bool,
    project_name: str | None,
    namespace: str | None,
    new_item: bool,
) -> None:
    """Resolve a selection into an ordered generation plan.

    Examples:

        templatestudio compose selection.yml

        templatestudio compose selection.yml --new-item --namespace Contoso.App

        templatestudio --strict compose selection.yml --json
    """
    from templatestudio.core.use_cases.compose import run_compose

    selection, context = _build_context(ctx, selection_path, project_name, namespace)
    result = run_compose(selection, context, new_item=new_item)

    if as_json:
        _echo_json(result, context)
        sys.exit(0 if result.ok else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        if result.template_identity:
            click.echo(f"   Template: {result.template_identity}")
        sys.exit(1)

    if result.incomplete:
        click.secho("⊘ Selection is incomplete (project type or front-end framework missing)", fg="yellow")
        click.echo("   Nothing to generate.")
        return

    mode_label = "[new item] " if new_item else ""
    if not ctx.obj.get("quiet"):
        click.secho(
            f"\n🧩 {mode_label}{selection.project_type} / {selection.front_end_framework}",
            fg="cyan",
            bold=True,
        )
        click.echo(f"   Items: {len(result.items)}")
        click.echo()

    for index, item in enumerate(result.items, start=1):
        click.secho(f"   {index:>3}. {item.name} ", fg="green", nl=False)
        click.echo(f"[{item.identity}] ({item.template.type.value})")
        if ctx.obj.get("verbose"):
            for key, value in item.parameters.items():
                click.echo(f"        │ {key} = {value}")

    _echo_diagnostics(context)
    click.echo()


@cli.command()
@_selection_argument
@_json_option
@_project_name_option
@click.pass_context
def licenses(
    ctx: click.Context,
    selection_path: Path,
    as_json: bool,
    project_name: str | None,
) -> None:
    """List the licenses of every template a selection pulls in."""
    from templatestudio.core.use_cases.compose import run_licenses

    selection, context = _build_context(ctx, selection_path, project_name, None)
    result = run_licenses(selection, context)

    if as_json:
        _echo_json(result, context)
        sys.exit(0 if result.error is None else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n📜 Licenses: {len(result.values)}", fg="cyan", bold=True)
    for lic in result.values:
        url = f"  → {lic.url}" if lic.url else ""
        click.echo(f"   • {lic.text}{url}")
    _echo_diagnostics(context)
    click.echo()


@cli.command()
@_selection_argument
@_json_option
@_project_name_option
@click.pass_context
def versions(
    ctx: click.Context,
    selection_path: Path,
    as_json: bool,
    project_name: str | None,
) -> None:
    """List the tool/runtime versions a selection requires."""
    from templatestudio.core.use_cases.compose import run_required_versions

    selection, context = _build_context(ctx, selection_path, project_name, None)
    result = run_required_versions(selection, context)

    if as_json:
        _echo_json(result, context)
        sys.exit(0 if result.error is None else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n🔧 Required versions: {len(result.values)}", fg="cyan", bold=True)
    for version in result.values:
        click.echo(f"   • {version}")
    _echo_diagnostics(context)
    click.echo()


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", "-p", default=8000, type=int, help="Port number.")
@click.pass_context
def web(ctx: click.Context, host: str, port: int) -> None:
    "Start the composition HTTP API."
    from templatestudio.core.context import FailurePolicy
    from templatestudio.ui.web.server import create_app, run_server

    policy = FailurePolicy.FAIL_FAST if ctx.obj.get("strict") else FailurePolicy.from_env()
    app = create_app(
        catalog_path=ctx.obj.get("catalog_path"),
        failure_policy=policy,
    )

    click.echo()
    click.secho("⚡ Template Studio — composition API", bold=True)
    click.echo(f"   API:     http://{host}:{port}/api")
    click.echo(f"   Catalog: {ctx.obj.get('catalog_path') or '(sync required)'}")
    if policy is FailurePolicy.FAIL_FAST:
        click.secho("   Failure policy: fail fast", fg="yellow")
    click.echo()

    run_server(app, host=host, port=port, debug=ctx.obj.get("debug", False))


# ── Register sub-command groups from templatestudio/ui/cli/ ───────

from templatestudio.ui.cli.catalog import catalog  # noqa: E402

cli.add_command(catalog)


if __name__ == "__main__":
    cli()

"""
CLI commands for the template catalog.

Thin wrappers over ``templatestudio.core.use_cases.catalog_check`` and
``templatestudio.core.config.loader``.
"""

from __future__ import annotations

import json
import sys

import click


@click.group("catalog")
def catalog() -> None:
    """Catalog — validate and inspect the template catalog."""


# ── Check ───────────────────────────────────────────────────────


@catalog.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Validate the catalog: identities, references, composition filters."""
    from templatestudio.core.use_cases.catalog_check import check_catalog

    result = check_catalog(catalog_path=ctx.obj.get("catalog_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid:
        assert result.catalog is not None  # guaranteed when valid
        click.secho("✅ Catalog is valid", fg="green", bold=True)
        click.echo(f"   Version:   {result.catalog.version}")
        click.echo(f"   Templates: {len(result.catalog.templates)}")
    else:
        click.secho("❌ Catalog errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


# ── List ────────────────────────────────────────────────────────


@catalog.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--type", "template_type", default=None, help="Only templates of this type.")
@click.option("--platform", default=None, help="Only templates for this platform.")
@click.pass_context
def list_templates(
    ctx: click.Context,
    as_json: bool,
    template_type: str | None,
    platform: str | None,
) -> None:
    """List catalog templates, grouped by type."""
    from templatestudio.core.config.loader import ConfigError, load_catalog

    try:
        loaded = load_catalog(ctx.obj.get("catalog_path"))
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
            return
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    templates = [
        t for t in loaded.templates
        if (template_type is None or t.type.value == template_type.lower())
        and (platform is None or t.platform.lower() == platform.lower())
    ]

    if as_json:
        click.echo(json.dumps({
            "version": loaded.version,
            "templates": [t.model_dump(mode="json") for t in templates],
        }, indent=2))
        return

    click.secho(f"\n📚 Catalog v{loaded.version}: {len(templates)} templates", fg="cyan", bold=True)
    current_type = None
    for t in sorted(templates, key=lambda t: (t.type.value, t.composition_order, t.identity)):
        if t.type != current_type:
            current_type = t.type
            click.echo()
            click.secho(f"   {t.type.value}", fg="white", bold=True)
        order = f" #{t.composition_order}" if t.composition_order else ""
        label = f" — {t.name}" if t.name else ""
        click.echo(f"     • {t.identity}{order}{label}")
        if ctx.obj.get("verbose"):
            if t.dependencies:
                click.echo(f"       depends on: {', '.join(t.dependencies)}")
            if t.composition_filter:
                click.echo(f"       filter: {t.composition_filter}")

    click.echo()

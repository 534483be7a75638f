"""
pkgconverge — CLI entrypoint.

Usage:
    python -m pkgconverge.main --help
    pkgconverge install ImageMagick-c++ --source /tmp/ImageMagick-c++-6.5.4.7-7.el6_5.x86_64.rpm
    pkgconverge remove ImageMagick-c++
    pkgconverge apply --config packages.yml
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path

import click

from pkgconverge import __version__
from pkgconverge.core.domain.commands import DEFAULT_TIMEOUT, DEFAULT_TOOL
from pkgconverge.core.observability.logging_config import resolve_level, setup_from_environment


@click.group()
@click.version_option(version=__version__, prog_name="pkgconverge")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to packages.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """pkgconverge — converge native packages to their declared state."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_from_environment(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Package operations ──────────────────────────────────────────


_PACKAGE_OPTIONS = [
    click.argument("name"),
    click.option("--source", "-s", default=None, help="Artifact path or URI."),
    click.option("--version", "desired_version", default=None, help="Desired version-release."),
    click.option(
        "--options",
        "-o",
        "tool_options",
        default=None,
        help="Extra flags for the package tool, inserted verbatim.",
    ),
    click.option("--package-name", default=None, help="Installed name to query when NAME is a path."),
    click.option("--allow-downgrade", is_flag=True, help="Permit replacing a newer installed version."),
    click.option("--tool", default=DEFAULT_TOOL, show_default=True, help="Package tool executable."),
    click.option(
        "--timeout",
        default=DEFAULT_TIMEOUT,
        show_default=True,
        type=int,
        help="Per-command timeout in seconds.",
    ),
    click.option("--dry-run", is_flag=True, help="Plan but don't execute."),
    click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."),
]


def _package_options(func: Callable) -> Callable:
    """Options shared by install/upgrade/remove/purge."""
    for decorator in reversed(_PACKAGE_OPTIONS):
        func = decorator(func)
    return func


def _run_operation(
    ctx: click.Context,
    operation: str,
    name: str,
    source: str | None,
    desired_version: str | None,
    tool_options: str | None,
    package_name: str | None,
    allow_downgrade: bool,
    tool: str,
    timeout: int,
    dry_run: bool,
    as_json: bool,
) -> None:
    from pydantic import ValidationError

    from pkgconverge.core.models.package import PackageSpec
    from pkgconverge.core.use_cases.reconcile import reconcile_package

    try:
        spec = PackageSpec(
            name=name,
            source=source,
            version=desired_version,
            options=tool_options,
            allow_downgrade=allow_downgrade,
            action=operation,
            package_name=package_name,
        )
    except ValidationError as e:
        for err in e.errors():
            click.secho(f"❌ {name}: {err['msg']}", fg="red", err=True)
        sys.exit(1)

    result = reconcile_package(spec, tool=tool, timeout=timeout, dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    _print_result(result, verbose=ctx.obj.get("verbose", False))
    if not result.ok:
        sys.exit(1)


def _print_result(result, verbose: bool = False) -> None:
    name = result.spec.name
    if not result.ok:
        click.secho(f"❌ {name}: {result.error}", fg="red")
        for line in result.output.split("\n")[:20]:
            if line:
                click.echo(f"   │ {line}")
        return

    action = result.action.kind if result.action else "noop"
    if action == "noop":
        version_label = f" ({result.version})" if result.version else ""
        click.secho(f"✓ {name}{version_label} — up to date", fg="green")
        return

    mode_label = "[dry-run] " if result.dry_run else ""
    click.secho(f"⚡ {mode_label}{name}: {action}", fg="cyan", bold=True)
    click.echo(f"   $ {result.command}")
    if result.version:
        click.echo(f"   version: {result.version}")
    for note in result.notes:
        click.secho(f"   ⚠️  {note}", fg="yellow")
    if verbose and result.receipt and result.receipt.output:
        for line in result.receipt.output.split("\n")[:10]:
            click.echo(f"     │ {line}")


@cli.command()
@_package_options
@click.pass_context
def install(ctx: click.Context, **kwargs) -> None:
    """Install a package, or bring it to the declared version.

    Examples:

        pkgconverge install ImageMagick-c++ --source /tmp/ImageMagick-c++-6.5.4.7-7.el6_5.x86_64.rpm

        pkgconverge install /tmp/supermarket-1.10.1~alpha.0-1.el5.x86_64.rpm
    """
    _run_operation(ctx, "install", **kwargs)


@cli.command()
@_package_options
@click.pass_context
def upgrade(ctx: click.Context, **kwargs) -> None:
    """Upgrade a package to the artifact's version."""
    _run_operation(ctx, "upgrade", **kwargs)


@cli.command()
@_package_options
@click.pass_context
def remove(ctx: click.Context, **kwargs) -> None:
    """Remove an installed package."""
    _run_operation(ctx, "remove", **kwargs)


@cli.command()
@_package_options
@click.pass_context
def purge(ctx: click.Context, **kwargs) -> None:
    """Remove an installed package (same as remove for rpm)."""
    _run_operation(ctx, "purge", **kwargs)


# ── Observe ─────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("--source", "-s", default=None, help="Artifact path or URI.")
@click.option("--package-name", default=None, help="Installed name to query when NAME is a path.")
@click.option("--tool", default=DEFAULT_TOOL, show_default=True, help="Package tool executable.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def status(
    name: str,
    source: str | None,
    package_name: str | None,
    tool: str,
    as_json: bool,
) -> None:
    """Show installed and candidate state without changing anything."""
    from pkgconverge.core.use_cases.status import get_package_status

    result = get_package_status(name, source=source, package_name=package_name, tool=tool)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n📦 {result.installed_name or name}", fg="cyan", bold=True)
    installed = result.installed
    assert installed is not None  # always probed when classification succeeds
    if installed.is_present:
        click.secho(f"   Installed: {installed.version}", fg="green")
    elif installed.is_absent:
        click.secho("   Installed: no", fg="yellow")
    else:
        click.secho("   Installed: unknown (package tool failed)", fg="red")
        for line in installed.detail.split("\n")[:5]:
            if line:
                click.echo(f"     │ {line}")

    if result.candidate:
        click.echo(f"   Artifact:  {result.candidate.name} {result.candidate.version}")
    click.echo()


@cli.command()
@click.argument("a")
@click.argument("b")
def compare(a: str, b: str) -> None:
    """Compare two version-release strings (prints <, = or >)."""
    from pkgconverge.core.domain.version import compare_versions

    symbol = {-1: "<", 0: "=", 1: ">"}[compare_versions(a, b)]
    click.echo(f"{a} {symbol} {b}")


# ── Manifest ────────────────────────────────────────────────────


@cli.command()
@click.option("--dry-run", is_flag=True, help="Plan but don't execute.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def apply(ctx: click.Context, dry_run: bool, as_json: bool) -> None:
    """Reconcile every package declared in packages.yml."""
    from pkgconverge.core.use_cases.apply import apply_manifest

    result = apply_manifest(config_path=ctx.obj.get("config_path"), dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    for outcome in result.results:
        _print_result(outcome, verbose=ctx.obj.get("verbose", False))

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(
        result.status, "white"
    )
    click.secho(
        f"   Result: {result.total - result.failed}/{result.total} converged, "
        f"{result.changed} changed",
        fg=status_color,
        bold=True,
    )

    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()

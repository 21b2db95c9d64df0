"""CLI entry point: depsweep.

Subcommands:
    depsweep scan /path/to/solution          # report packages with no evidence of use
    depsweep scan . --verbose --json         # include evidence trails, JSON output
    depsweep tokens Vendor.Logging.Client    # show how a package id is matched
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from depsweep.core.config import Settings
from depsweep.core.logging import setup_logging
from depsweep.exceptions import ConfigError


@click.group()
@click.option("--log-level", default=None, help="Log level (default: $DEPSWEEP_LOG_LEVEL or WARNING)")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Log renderer (default: $DEPSWEEP_LOG_FORMAT or console)",
)
def main(log_level: str | None, log_format: str | None) -> None:
    """depsweep: find declared packages with no evidence of use."""
    setup_logging(log_level, log_format)


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@main.command("scan")
@click.argument(
    "path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.option("--exclude", "excludes", multiple=True, help="Package id to drop (repeatable)")
@click.option("-v", "--verbose", is_flag=True, help="Show evidence for used packages")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--concurrency", type=click.IntRange(min=1), default=None, help="Worker threads")
@click.option("--no-manifests", is_flag=True, help="Ignore runtime *.deps.json manifests")
@click.option("--fail-on-unused", is_flag=True, help="Exit 1 when unused packages are found")
def scan_cmd(
    path: Path,
    excludes: tuple[str, ...],
    verbose: bool,
    as_json: bool,
    concurrency: int | None,
    no_manifests: bool,
    fail_on_unused: bool,
) -> None:
    """Scan a project tree for declared-but-unused packages."""
    from depsweep.report import build_report, render_json, render_text
    from depsweep.scanner import scan

    settings = _load_settings()
    if concurrency is not None:
        settings.concurrency = concurrency

    partition = asyncio.run(
        scan(path, settings, use_manifests=not no_manifests, extra_excludes=excludes)
    )
    report = build_report(partition, verbose=verbose)
    click.echo(render_json(report) if as_json else render_text(report), nl=as_json)

    if fail_on_unused and report.unused:
        sys.exit(1)


@main.command("tokens")
@click.argument("package_id")
@click.option("--exclude", "excludes", multiple=True, help="Package id to treat as excluded")
def tokens_cmd(package_id: str, excludes: tuple[str, ...]) -> None:
    """Show the tokens and exemption class derived for PACKAGE_ID."""
    from depsweep.engine.exemptions import classify
    from depsweep.engine.tokens import derive_tokens

    settings = _load_settings()
    kind = classify(package_id, {*settings.exclude, *excludes}, settings.tool_prefixes)
    click.echo(f"{package_id}  exemption: {kind.value}")
    tokens = derive_tokens(package_id)
    for token in tokens:
        click.echo(f"  {token:<40} {tokens.origin(token)}")


if __name__ == "__main__":
    main()

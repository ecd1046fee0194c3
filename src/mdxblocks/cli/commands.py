"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from mdxblocks.config import Settings, configure_logging, load_config
from mdxblocks.core.errors import ComponentError
from mdxblocks.core.export import write_unhandled
from mdxblocks.core.pipeline import aggregate_unhandled, run_convert, run_scan
from mdxblocks.core.registry import (
    ComponentRegistry,
    dump_registry,
    implementation_report,
    load_registry,
    register_unhandled,
)
from mdxblocks.core.validate import format_unhandled


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, verbose: bool = False) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
        configure_logging("DEBUG" if verbose else settings.log_level)
    except ValueError as e:
        _fail(str(e))
    return settings


def _registry(settings: Settings) -> ComponentRegistry:
    try:
        return load_registry(Path(settings.registry_path))
    except ValueError as e:
        _fail(str(e))


def _echo_failure(e: RuntimeError) -> None:
    """Print a conversion failure; component diagnostics get the full suggestion text."""
    if isinstance(e.__cause__, ComponentError):
        typer.echo("MIGRATION FAILED", err=True)
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    _fail(str(e))


def convert_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to convert")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    registry: Annotated[Optional[str], typer.Option("--registry", help="Component registry YAML")] = None,
    collect: Annotated[bool, typer.Option("--collect", help="Tally unhandled components instead of failing")] = False,
    converter: Annotated[Optional[str], typer.Option("--converter", help="lexical or fallback")] = None,
    fmt: Annotated[Optional[str], typer.Option("--format", help="blocks or payload")] = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Documents converted in parallel")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    ):
    """Convert MDX files into ordered rich-text and component blocks."""
    settings = _settings(overrides={
        "output_dir": out, "registry_path": registry, "converter": converter,
        "output_format": fmt, "max_workers": workers,
        "mode": "collect" if collect else None,
    }, verbose=verbose)
    lookup = _registry(settings)

    try:
        results = run_convert(path, settings, lookup)
    except RuntimeError as e:
        _echo_failure(e)

    for src, out_file, _ in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Converted {len(results)} document(s) to {settings.output_dir}/")

    warnings = sum(len(doc.content.warnings) for _, _, doc in results)
    if warnings:
        typer.echo(f"{warnings} warning(s); run with --verbose for details")
    unhandled = aggregate_unhandled(doc for _, _, doc in results)
    if unhandled:
        typer.echo(format_unhandled(unhandled))


def scan_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to scan")],
    registry: Annotated[Optional[str], typer.Option("--registry", help="Component registry YAML")] = None,
    update: Annotated[Optional[str], typer.Option("--update-registry", help="Write a registry snapshot with stubs for unhandled components")] = None,
    report: Annotated[Optional[str], typer.Option("--report-file", help="Write the unhandled list as JSON")] = None,
    limit: Annotated[int, typer.Option("--limit", help="Number of components listed")] = 10,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    ):
    """Find every component the registry cannot migrate yet, ranked by usage."""
    settings = _settings(overrides={"registry_path": registry}, verbose=verbose)
    lookup = _registry(settings)

    try:
        unhandled = run_scan(path, settings, lookup)
    except RuntimeError as e:
        _fail(str(e))

    if report:
        write_unhandled(unhandled, Path(report))
        typer.echo(f"Unhandled report written to {report}")

    if update:
        dump_registry(register_unhandled(lookup, unhandled), Path(update))
        typer.echo(f"Registry snapshot written to {update}")

    if not unhandled:
        typer.echo("All components are mapped")
        return
    typer.echo(format_unhandled(unhandled, limit=limit))
    raise typer.Exit(1)


def report_cmd(
    registry: Annotated[Optional[str], typer.Option("--registry", help="Component registry YAML")] = None,
    ):
    """Print the component implementation status report."""
    settings = _settings(overrides={"registry_path": registry})
    typer.echo(implementation_report(_registry(settings)))

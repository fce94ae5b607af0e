"""Command line interface for blogindex."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from blogindex.config import (
    BlogIndexConfig,
    ConfigError,
    ConfigManager,
    require_search_settings,
)
from blogindex.indexing import (
    IndexLifecycleManager,
    LifecycleError,
    SearchServiceClient,
    SearchServiceError,
    build_schema,
    index_definition,
)
from blogindex.log_setup import configure_logging
from blogindex.pipeline import SyncPipeline, SyncResult
from blogindex.site import LocalSiteBuilder, resolve_timezone

console = Console()

_MASK = "********"


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _load_config(
    site_root: Path,
    config_path: str | None,
    *,
    cli_overrides: dict[str, Any] | None = None,
    include_env: bool = True,
) -> BlogIndexConfig:
    manager = ConfigManager(
        site_root,
        config_path=Path(config_path) if config_path else None,
    )
    return manager.load(cli_overrides=cli_overrides, include_env=include_env)


def _emit_sync_result(
    result: SyncResult,
    root: Path,
    *,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> None:
    if json_output:
        console.print_json(data=result.to_payload())
        return

    if not result.index_deleted:
        _emit_message(
            "[cyan]No existing index was deleted before recreation.[/cyan]",
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )

    if result.rejected:
        _emit_message(
            f"[yellow]{len(result.rejected)} post(s) were not indexed:[/yellow]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )
        for slug, reason in result.rejected:
            _emit_message(
                f"  - {slug or '<no slug>'}: {reason}",
                mode="warning",
                quiet=quiet,
                summary_only=summary_only,
            )

    _emit_message(
        _format_summary_line(
            "sync",
            root,
            {
                "collected": result.collected,
                "uploaded": result.uploaded,
                "chunks": result.chunks,
                "rejected": len(result.rejected),
                "skipped": result.skipped_unpublished,
            },
        ),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="blogindex")
def cli() -> None:
    """blogindex pushes a static site's posts into a hosted search index."""


@cli.command()
@click.argument(
    "site_root",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=str),
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Site configuration file (defaults to SITE_ROOT/_config.yml).",
)
@click.option("--service-url", type=str, help="Override the search service URL.")
@click.option("--index-name", type=str, help="Override the target index name.")
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    help="Maximum number of documents per upload request.",
)
@click.option(
    "--excerpt-limit",
    type=click.IntRange(min=1),
    help="Maximum excerpt length in characters.",
)
@click.option("--verbose", is_flag=True, help="Log debug output and full response bodies.")
@click.option("--json", "json_output", is_flag=True, help="Emit the run result as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def sync(
    site_root: str,
    config_path: str | None,
    service_url: str | None,
    index_name: str | None,
    chunk_size: int | None,
    excerpt_limit: int | None,
    verbose: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Clean and generate SITE_ROOT, then replace the search index with its posts.

    Post bodies are indexed as written. Markdown is not rendered, so excerpts
    of Markdown posts keep their markup characters.

    Args:
        site_root: Root directory of the static site.
        config_path: Optional path to the site configuration file.
        service_url: Optional search service URL override.
        index_name: Optional index name override.
        chunk_size: Optional upload chunk size override.
        excerpt_limit: Optional excerpt length override.
        verbose: When True, log debug output and full response bodies.
        json_output: When True, emit the run result as JSON.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.

    Raises:
        click.ClickException: If configuration is invalid or the run fails.
    """

    if json_output and quiet:
        raise click.ClickException("--json cannot be combined with --quiet.")
    if json_output and summary_mode:
        raise click.ClickException("--json cannot be combined with --summary.")
    if quiet and summary_mode:
        raise click.ClickException("--quiet and --summary cannot both be enabled.")

    overrides: dict[str, Any] = {}
    for key, value in (
        ("search.service_url", service_url),
        ("search.index_name", index_name),
        ("search.chunk_size", chunk_size),
        ("search.excerpt_limit", excerpt_limit),
    ):
        if value is not None:
            overrides[key] = value
    if verbose:
        overrides["search.verbose"] = True
        overrides["logging.level"] = "DEBUG"

    root = Path(site_root).expanduser().resolve()
    try:
        config = _load_config(root, config_path, cli_overrides=overrides)
        settings = require_search_settings(config.search)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    level = config.logging.level
    if quiet:
        level = "ERROR"
    elif (json_output or summary_mode) and not verbose:
        level = "WARNING"
    configure_logging(level)

    builder = LocalSiteBuilder(root, config.site)
    with SearchServiceClient.from_settings(settings) as client:
        manager = IndexLifecycleManager(client, settings)
        pipeline = SyncPipeline(
            builder,
            manager,
            settings,
            default_tz=resolve_timezone(config.site.timezone),
        )
        try:
            result = pipeline.run()
        except LifecycleError as exc:
            _handle_cli_error(
                str(exc),
                code="lifecycle_error",
                json_output=json_output,
                details={"phase": exc.phase},
                original=exc,
            )
            return
        except SearchServiceError as exc:
            _handle_cli_error(
                f"Search service {exc.operation} failed: {exc}",
                code=f"{exc.operation}_error",
                json_output=json_output,
                details={"status_code": exc.status_code, "payload": exc.payload},
                original=exc,
            )
            return

    _emit_sync_result(
        result,
        root,
        json_output=json_output,
        quiet=quiet,
        summary_only=summary_mode,
    )


@cli.command()
@click.argument(
    "site_root",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=str),
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Site configuration file (defaults to SITE_ROOT/_config.yml).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the index definition as JSON.")
def schema(site_root: str, config_path: str | None, json_output: bool) -> None:
    """Show the index fields a sync run would create.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """

    try:
        config = _load_config(Path(site_root).expanduser().resolve(), config_path)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    fields = build_schema(config.search)
    if json_output:
        console.print_json(data=index_definition(config.search.index_name or "", fields))
        return

    table = Table(title=f"Index {config.search.index_name or '(unnamed)'}")
    table.add_column("Field")
    table.add_column("Type")
    for flag in ("searchable", "filterable", "retrievable", "sortable", "facetable", "key"):
        table.add_column(flag.capitalize(), justify="center")
    table.add_column("Analyzer")
    for field in fields:
        flags = (
            field.searchable,
            field.filterable,
            field.retrievable,
            field.sortable,
            field.facetable,
            field.key,
        )
        table.add_row(
            field.name,
            field.type.value,
            *("yes" if flag else "-" for flag in flags),
            field.analyzer or "",
        )
    console.print(table)


@cli.group()
def config() -> None:
    """Inspect blogindex configuration."""


@config.command("view")
@click.argument(
    "site_root",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=str),
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Site configuration file (defaults to SITE_ROOT/_config.yml).",
)
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(site_root: str, config_path: str | None, no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        loaded = _load_config(
            Path(site_root).expanduser().resolve(), config_path, include_env=not no_env
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    data = loaded.model_dump(mode="python")
    if data["search"].get("admin_key"):
        data["search"]["admin_key"] = _MASK
    yaml_text = yaml.safe_dump(data, sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()

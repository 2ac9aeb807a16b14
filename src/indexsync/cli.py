"""Command line interface for indexsync."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from indexsync.cli_support import Runtime, build_runtime, configure_logging
from indexsync.config import ConfigError, ConfigManager, IndexSyncConfig, resolve_with_precedence
from indexsync.errors import EngineError, IndexSyncError, UnknownRecordType
from indexsync.identity import IdentityCodec
from indexsync.search import drop_index

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

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

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Print ``message`` unless quiet or summary-only mode filters it out."""

    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, target: str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        target: Record type or other target the command acted on.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary line.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {target}: {parts}.[/green]"


def _manager(ctx: click.Context) -> ConfigManager:
    """Return a configuration manager for the ``--config`` path, if any.

    Args:
        ctx: Click context carrying the group options.

    Returns:
        ConfigManager: Manager bound to the selected configuration file.
    """

    return ConfigManager(config_path=ctx.obj.get("config_path"))


def _load_config(ctx: click.Context, *, json_output: bool = False) -> IndexSyncConfig:
    """Load the effective configuration and configure logging from it.

    Args:
        ctx: Click context carrying the group options.
        json_output: Indicates whether errors should be emitted as JSON.

    Returns:
        IndexSyncConfig: Effective configuration.
    """

    try:
        config = _manager(ctx).load()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        raise  # pragma: no cover - _handle_cli_error always raises
    configure_logging(config.logging.level)
    return config


def _runtime(
    ctx: click.Context,
    *,
    json_output: bool,
    config: IndexSyncConfig | None = None,
) -> Runtime:
    """Build the runtime collaborators for a command.

    Args:
        ctx: Click context carrying the group options.
        json_output: Indicates whether errors should be emitted as JSON.
        config: Already loaded configuration; loaded from ``ctx`` when omitted.

    Returns:
        Runtime: Registries, store, engine, and services wired together.
    """

    if config is None:
        config = _load_config(ctx, json_output=json_output)
    try:
        return build_runtime(config)
    except (ConfigError, IndexSyncError) as exc:
        _handle_cli_error(
            f"Unable to initialize indexsync: {exc}",
            code="runtime_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )
        raise  # pragma: no cover - _handle_cli_error always raises


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Args:
        target: Mapping to mutate in-place.
        path: Sequence of keys representing the nested location.
        value: Value to assign at the nested location.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="indexsync")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file to use instead of ~/.indexsync/config.yaml.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """indexsync keeps a full-text search index in step with your records."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("type_names", nargs=-1, required=True)
@click.option("--clear", is_flag=True, help="Drop the whole index before rebuilding.")
@click.option("--json", "json_output", is_flag=True, help="Emit rebuild counts as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def rebuild(
    ctx: click.Context,
    type_names: tuple[str, ...],
    clear: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Reindex every record of each TYPE_NAME.

    Without --clear the index is kept; existing documents are replaced and
    records excluded by their blueprint are removed. --clear drops the
    configured index, including documents of other types, before rebuilding.
    """

    config = _load_config(ctx, json_output=json_output)
    if clear:
        try:
            drop_index(config.engine)
        except (ConfigError, IndexSyncError) as exc:
            _handle_cli_error(
                f"Unable to clear the index: {exc}",
                code="engine_error",
                json_output=json_output,
                details={"exception": type(exc).__name__},
                original=exc,
            )
            raise  # pragma: no cover - _handle_cli_error always raises
    runtime = _runtime(ctx, json_output=json_output, config=config)
    quiet = quiet or runtime.config.cli.quiet_default
    summary_only = summary_mode or runtime.config.cli.summary_default

    results = []
    for type_name in type_names:
        _emit_message(
            f"[cyan]Rebuilding {type_name}...[/cyan]",
            mode="detail",
            quiet=quiet or json_output,
            summary_only=summary_only,
        )
        try:
            result = runtime.rebuilder.run(type_name)
        except IndexSyncError as exc:
            if isinstance(exc, UnknownRecordType):
                message, code = str(exc), "unknown_type"
            elif isinstance(exc, EngineError):
                message = f"Indexing engine failed while rebuilding {type_name}: {exc}"
                code = "engine_error"
            else:
                message, code = f"Rebuild of {type_name} failed: {exc}", "rebuild_error"
            _handle_cli_error(
                message,
                code=code,
                json_output=json_output,
                details={"exception": type(exc).__name__},
                original=exc,
            )
            raise  # pragma: no cover - _handle_cli_error always raises
        results.append(result)
        if not json_output:
            _emit_message(
                _format_summary_line(
                    "Rebuild",
                    type_name,
                    {
                        "indexed": result.indexed,
                        "excluded": result.excluded,
                        "skipped": result.skipped,
                    },
                ),
                mode="summary",
                quiet=quiet,
                summary_only=summary_only,
            )

    if json_output:
        console.print_json(
            data={
                "results": [result.as_dict() for result in results],
                "counts": {"indexed": sum(result.indexed for result in results)},
            }
        )


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit blueprints as JSON.")
@click.pass_context
def blueprints(ctx: click.Context, json_output: bool) -> None:
    """List configured record types and their indexing policy."""

    runtime = _runtime(ctx, json_output=json_output)
    rows = []
    for blueprint in runtime.blueprints:
        rows.append(
            {
                "type": blueprint.type_name,
                "autoindex": blueprint.autoindex,
                "hooks": blueprint.type_name in runtime.hooks,
                "indexed_attributes": list(blueprint.indexed_attributes),
                "excludes": blueprint.ignore_if is not None,
                "dependencies": [
                    {
                        "source": rule.source_type,
                        "when_changed": sorted(rule.when_changed),
                    }
                    for rule in blueprint.dependencies
                ],
            }
        )

    if json_output:
        console.print_json(data={"blueprints": rows})
        return

    if not rows:
        console.print("[yellow]No blueprints configured. Set app.blueprints in the config.[/yellow]")
        return

    table = Table(title="Blueprints")
    table.add_column("Type", style="cyan")
    table.add_column("Autoindex")
    table.add_column("Indexed attributes")
    table.add_column("Exclusion")
    table.add_column("Depends on")
    for row in rows:
        depends = "; ".join(
            f"{dep['source']} ({', '.join(dep['when_changed'])})" for dep in row["dependencies"]
        )
        table.add_row(
            row["type"],
            "yes" if row["autoindex"] else "no",
            ", ".join(row["indexed_attributes"]) or "(all text)",
            "yes" if row["excludes"] else "-",
            depends or "-",
        )
    console.print(table)


@cli.group()
def identity() -> None:
    """Encode and decode document identities."""


@identity.command("encode")
@click.argument("type_name")
@click.argument("key")
@click.pass_context
def identity_encode(ctx: click.Context, type_name: str, key: str) -> None:
    """Print the document identity for TYPE_NAME and KEY."""
    config = _load_config(ctx)
    try:
        value = IdentityCodec(config.identity.separator).encode(type_name, key)
    except IndexSyncError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(value)


@identity.command("decode")
@click.argument("value")
@click.option("--json", "json_output", is_flag=True, help="Emit the parts as JSON.")
@click.pass_context
def identity_decode(ctx: click.Context, value: str, json_output: bool) -> None:
    """Split a document identity into its type name and key."""
    config = _load_config(ctx, json_output=json_output)
    try:
        type_name, key = IdentityCodec(config.identity.separator).decode(value)
    except IndexSyncError as exc:
        _handle_cli_error(str(exc), code="malformed_identity", json_output=json_output, original=exc)
        return
    if json_output:
        console.print_json(data={"type": type_name, "key": key})
        return
    console.print(f"type={type_name} key={key}")


@cli.group()
def config() -> None:
    """Manage indexsync configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = _manager(ctx)
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = _manager(ctx)
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'engine.backend'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    file_data = manager.load_file_overrides()
    try:
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=IndexSyncConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()
    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if "Last updated:" not in line
    ]
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()

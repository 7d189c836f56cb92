"""Command line interface for simsmods."""

from __future__ import annotations

import copy
import difflib
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.text import Text

from simsmods.cli_support import (
    PHASE_TITLES,
    describe_outcome,
    mod_payload,
    reconciliation_payload,
    render_collision,
    render_mod,
    render_tag,
    render_verification,
)
from simsmods.config import ConfigError, ConfigManager, SimsModsConfig, resolve_config
from simsmods.config.resolver import assign_dotted
from simsmods.editing import EditMenu, apply_mod_edit
from simsmods.inventory import InventoryError, InventoryScanner
from simsmods.log import configure_logging
from simsmods.prompts import Prompter, QuestionaryPrompter, validate_source_url
from simsmods.reconcile import HashCollision, VerificationReport, verify_directory
from simsmods.reconcile import verify as verify_inventory
from simsmods.reconcile.reconciler import (
    DirectoryOutcome,
    DirectoryReconciler,
    DirectoryState,
    Outcome,
    ScanMode,
)
from simsmods.reconcile.tags import parse_tag_list
from simsmods.store import ModStore, StoreError, StoreExistsError, queries

console = Console()

_WARNING_OUTCOMES = {
    Outcome.FOUND,
    Outcome.MISSING,
    Outcome.FAILED,
    Outcome.LEFT,
    Outcome.CANCELLED,
    Outcome.REJECTED,
}


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


def _handle_domain_error(exc: Exception, *, json_output: bool) -> None:
    """Map a configuration, store, inventory, or I/O failure onto a CLI error."""
    if isinstance(exc, ConfigError):
        code = "config_error"
    elif isinstance(exc, StoreError):
        code = "store_error"
    elif isinstance(exc, InventoryError):
        code = "inventory_error"
    else:
        code = "io_error"
    _handle_cli_error(
        str(exc),
        code=code,
        json_output=json_output,
        details={"exception": type(exc).__name__},
        original=exc,
    )


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
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        root: Target root path relevant to the command.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(str(root))}: {parts}.[/green]"


def _load_config(ctx: click.Context) -> SimsModsConfig:
    """Load the effective configuration and configure logging from it."""
    config = ConfigManager().load()
    verbosity = (ctx.find_root().obj or {}).get("verbosity", 0)
    configure_logging(config.logging, verbosity)
    return config


def _resolve_output_modes(
    ctx: click.Context,
    config: SimsModsConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults into (quiet, summary_only).

    Raises:
        click.ClickException: If the requested modes conflict.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _build_scanner(config: SimsModsConfig) -> InventoryScanner:
    return InventoryScanner(
        extensions=config.scanning.extensions,
        ignored_directories=config.scanning.ignored_directories,
    )


def _make_prompter() -> Prompter:
    """Return the interactive prompter used by fixing scans and the edit menu."""
    return QuestionaryPrompter()


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="simsmods")
@click.option("-v", "--verbose", "verbosity", count=True, help="Increase log verbosity.")
@click.pass_context
def cli(ctx: click.Context, verbosity: int) -> None:
    """Track installed Sims 4 mods and detect changes to their files."""
    ctx.ensure_object(dict)
    ctx.obj["verbosity"] = verbosity


@cli.command()
@click.option("--force", is_flag=True, help="Replace an existing database.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create the mod database.

    Args:
        ctx: Click context carrying global options.
        force: Delete and recreate an existing database.

    Raises:
        click.ClickException: If the database exists and ``--force`` was not given.
    """
    try:
        config = _load_config(ctx)
        database = config.paths.resolved_database()
        ModStore.initialize(database, force=force).dispose()
    except StoreExistsError as exc:
        raise click.ClickException(f"{exc}. Use --force to replace it.") from exc
    except (ConfigError, StoreError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[green]Initialized mod database at {escape(str(database))}.[/green]")


@cli.command("list")
@click.option("--tags", type=str, help="Comma-separated tags; show mods carrying any of them.")
@click.option("--verify", is_flag=True, help="Verify each mod's files against the recorded hashes.")
@click.option("--details", is_flag=True, help="Show every recorded field of each mod.")
@click.option("--json", "json_output", is_flag=True, help="Emit the mod list as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def list_mods(
    ctx: click.Context,
    tags: str | None,
    verify: bool,
    details: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List recorded mods, optionally filtered by tag and verified against disk."""
    try:
        config = _load_config(ctx)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        root = config.paths.resolved_mods_dir()
        scanner = _build_scanner(config)
        labels = parse_tag_list(tags) if tags else []

        store = ModStore.open(config.paths.resolved_database())
        try:
            with store.session() as session:
                records = (
                    queries.mods_for_tags(session, labels) if labels else queries.all_mods(session)
                )
                entries = [
                    (
                        record,
                        [tag.tag for tag in queries.tags_for_mod(session, record.id)],
                        queries.hashes_for_mod(session, record.id),
                    )
                    for record in records
                ]
        finally:
            store.dispose()

        if verify and not root.is_dir():
            raise InventoryError(f"Could not locate mod directory at {root}")

        rows: list[tuple[Any, list[str], VerificationReport | None]] = []
        for record, tag_labels, recorded in entries:
            report = None
            if verify:
                directory = root / record.directory
                report = (
                    verify_directory(directory, recorded, scanner)
                    if directory.is_dir()
                    else verify_inventory(recorded, {})
                )
            rows.append((record, tag_labels, report))
    except click.ClickException:
        raise
    except (ConfigError, StoreError, InventoryError, OSError) as exc:
        _handle_domain_error(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(
            data={
                "mods": [
                    mod_payload(record, labels_, report) for record, labels_, report in rows
                ]
            }
        )
        return

    if not rows:
        _emit_message(
            "[yellow]No mods found.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    for record, tag_labels, report in rows:
        _emit_message(
            render_mod(record, tag_labels, details=details),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        if report is not None:
            _emit_message(
                render_verification(report, f"Verification for {record.name}"),
                mode="detail" if report.passed else "warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    metrics: dict[str, Any] = {"mods": len(rows)}
    if verify:
        passed = sum(1 for _, _, report in rows if report is not None and report.passed)
        metrics["passed"] = passed
        metrics["failed"] = len(rows) - passed
    _emit_message(
        _format_summary_line("List", root, metrics),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.option("--verify", is_flag=True, help="Verify recorded mods against the files on disk.")
@click.option("--fix", is_flag=True, help="Interactively add, remove, and update mods.")
@click.option(
    "--sync-hashes",
    is_flag=True,
    help="Accept the files on disk as the new recorded state without asking.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the scan result as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    verify: bool,
    fix: bool,
    sync_hashes: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Compare the mods folder with the database and reconcile the differences.

    Args:
        ctx: Click context used for parameter source inspection.
        verify: Verify recorded mods in addition to detecting new and missing ones.
        fix: Prompt to add new mods, remove missing ones, and update changed ones.
        sync_hashes: Rewrite the recorded hashes of changed mods without prompting.
        json_output: Emit a JSON payload instead of console output.
        summary_mode: Limit output to summary lines and warnings.
        quiet: Suppress non-error output.

    Raises:
        click.ClickException: If options conflict or the scan fails.
    """
    if fix and sync_hashes:
        raise click.ClickException("--fix cannot be combined with --sync-hashes.")
    if fix and json_output:
        raise click.ClickException("--json cannot be combined with --fix.")

    mode = ScanMode.FIX if fix else ScanMode.SYNC_HASHES if sync_hashes else ScanMode.REPORT

    try:
        config = _load_config(ctx)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
    except ConfigError as exc:
        _handle_domain_error(exc, json_output=json_output)
        return

    def _on_phase(state: DirectoryState, directories: tuple[str, ...]) -> None:
        if not json_output:
            _emit_message(
                f"[bold]{PHASE_TITLES[state]} ({len(directories)})[/bold]",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    def _on_outcome(entry: DirectoryOutcome) -> None:
        if json_output:
            return
        mode_name = "warning" if entry.outcome in _WARNING_OUTCOMES else "detail"
        _emit_message(
            describe_outcome(entry), mode=mode_name, quiet=quiet_enabled, summary_only=summary_only
        )
        if entry.report is not None and not entry.report.passed:
            _emit_message(
                render_verification(entry.report, entry.mod_name or entry.directory),
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    def _on_collision(collision: HashCollision) -> None:
        if not json_output:
            _emit_message(
                render_collision(collision),
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    root = config.paths.resolved_mods_dir()
    try:
        store = ModStore.open(config.paths.resolved_database())
        try:
            reconciler = DirectoryReconciler(
                store,
                _build_scanner(config),
                root,
                mode=mode,
                verify=verify,
                prompter=_make_prompter() if mode is ScanMode.FIX else None,
                prompt_settings=config.prompts,
                on_phase=_on_phase,
                on_outcome=_on_outcome,
                on_collision=_on_collision,
            )
            result = reconciler.run()
        finally:
            store.dispose()
    except (StoreError, InventoryError, OSError) as exc:
        _handle_domain_error(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(data=reconciliation_payload(result))
        return

    _emit_message(
        _format_summary_line("Scan", root, result.counts()),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.option("--delete", "delete_label", type=str, help="Delete TAG from every mod.")
@click.option("--tags", type=str, help="Comma-separated tags to show.")
@click.option("--json", "json_output", is_flag=True, help="Emit tags and their mods as JSON.")
@click.pass_context
def tags(ctx: click.Context, delete_label: str | None, tags: str | None, json_output: bool) -> None:
    """Show tags with the mods carrying them, or delete a tag."""
    if delete_label is not None and tags is not None:
        raise click.ClickException("--delete cannot be combined with --tags.")

    try:
        config = _load_config(ctx)
        store = ModStore.open(config.paths.resolved_database())
        try:
            if delete_label is not None:
                with store.transaction() as session:
                    tag = queries.require_tag(session, delete_label.strip())
                    queries.delete_tag(session, tag.id)
                console.print(f"[green]Deleted tag {escape(tag.tag)}.[/green]")
                return

            with store.session() as session:
                labels = parse_tag_list(tags) if tags else None
                grouped = [
                    (tag.tag, queries.mods_for_tags(session, [tag.tag]))
                    for tag in queries.all_tags(session, labels)
                ]
        finally:
            store.dispose()
    except (ConfigError, StoreError) as exc:
        _handle_domain_error(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(
            data={
                "tags": [
                    {"tag": label, "mods": [{"id": mod.id, "name": mod.name} for mod in members]}
                    for label, members in grouped
                ]
            }
        )
        return

    if not grouped:
        console.print("[yellow]No tags found.[/yellow]")
        return
    for label, members in grouped:
        console.print(render_tag(label, members))


def _run_edit_menu(ctx: click.Context) -> None:
    try:
        config = _load_config(ctx)
        store = ModStore.open(config.paths.resolved_database())
        try:
            EditMenu(
                store,
                _make_prompter(),
                prompt_settings=config.prompts,
                notify=lambda message: console.print(Text(message)),
            ).run()
        finally:
            store.dispose()
    except (ConfigError, StoreError) as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.option("-i", "--interactive", is_flag=True, help="Browse and edit mods through menus.")
@click.option("--mod-id", type=int, help="ID of the mod to edit.")
@click.option("--name", type=str, help="New mod name.")
@click.option("--source-url", type=str, help="New source URL.")
@click.option("--mod-version", type=str, help="New version label.")
@click.option("--tags", type=str, help="Comma-separated tags replacing the mod's current tags.")
@click.pass_context
def edit(
    ctx: click.Context,
    interactive: bool,
    mod_id: int | None,
    name: str | None,
    source_url: str | None,
    mod_version: str | None,
    tags: str | None,
) -> None:
    """Edit a recorded mod, or browse mods and tags interactively with -i.

    Raises:
        click.ClickException: If the options are inconsistent or the edit fails.
    """
    fields = {"name": name, "source_url": source_url, "version": mod_version, "tags": tags}
    if interactive:
        if mod_id is not None or any(value is not None for value in fields.values()):
            raise click.ClickException("--interactive cannot be combined with other edit options.")
        _run_edit_menu(ctx)
        return

    if mod_id is None:
        raise click.ClickException("--mod-id is required unless --interactive is given.")
    if all(value is None for value in fields.values()):
        raise click.ClickException(
            "Provide at least one of --name, --source-url, --mod-version or --tags."
        )
    if name is not None and not name.strip():
        raise click.ClickException("--name cannot be empty.")
    if source_url is not None:
        verdict = validate_source_url(source_url)
        if verdict is not True:
            raise click.ClickException(str(verdict))

    try:
        config = _load_config(ctx)
        store = ModStore.open(config.paths.resolved_database())
        try:
            record = apply_mod_edit(
                store,
                mod_id,
                name=name.strip() if name is not None else None,
                source_url=source_url.strip() if source_url is not None else None,
                version=mod_version,
                tags=parse_tag_list(tags) if tags is not None else None,
            )
        finally:
            store.dispose()
    except (ConfigError, StoreError) as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[green]Updated mod {escape(record.name)} ({record.id}).[/green]")


@cli.command("open-mod-dir")
@click.pass_context
def open_mod_dir(ctx: click.Context) -> None:
    """Open the mods folder in the system file browser."""
    try:
        config = _load_config(ctx)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    root = config.paths.resolved_mods_dir()
    if not root.is_dir():
        raise click.ClickException(f"Could not locate Sims 4 mods folder at {root}")
    click.launch(str(root))


@cli.group()
def config() -> None:
    """View or change the simsmods configuration file."""


def _write_validated(manager: ConfigManager, data: dict[str, Any]) -> None:
    """Validate ``data`` as file contents and write it, or fail the command."""
    try:
        resolve_config(file=data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    manager.write(data)


@config.command("view")
@click.option("--no-env", is_flag=True, help="Leave SIMSMODS__ environment overrides out.")
def config_view(no_env: bool) -> None:
    """Print the effective configuration as YAML."""
    try:
        effective = ConfigManager().load(use_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    rendered = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML value stored at KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE at the dotted KEY of the configuration file and show the change.

    Raises:
        click.ClickException: If KEY or VALUE is malformed or the result does not validate.
    """
    path = [part.strip() for part in key.split(".") if part.strip()]
    if not path:
        raise click.ClickException("KEY must be a dotted path such as 'paths.mods_dir'.")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        stored = manager.read()
        updated = copy.deepcopy(stored)
        assign_dotted(updated, path, parsed, origin="command line")
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    before = yaml.safe_dump(stored, sort_keys=False).splitlines()
    after = yaml.safe_dump(updated, sort_keys=False).splitlines()
    if before == after:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    _write_validated(manager, updated)
    diff = difflib.unified_diff(before, after, "config.yaml", "config.yaml", lineterm="")
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {escape('.'.join(path))}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR, keeping it only if it validates."""
    manager = ConfigManager()
    manager.ensure_exists()
    original = manager.text()
    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes applied.[/yellow]")
        return

    try:
        data = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise click.ClickException("Configuration file must contain a mapping at the top level.")
    _write_validated(manager, data)
    console.print("[green]Configuration updated.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()

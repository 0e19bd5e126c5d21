"""Command line interface for the Smart File Organizer."""

from __future__ import annotations

import difflib
import re
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from smart_organizer.config import (
    ConfigError,
    ConfigManager,
    OrganizerConfig,
    assign_dotted,
    resolve_with_precedence,
)
from smart_organizer.errors import AdvisorError
from smart_organizer.logs import configure_logging
from smart_organizer.organization.advisor import parse_actions
from smart_organizer.organization.models import OrganizeReport
from smart_organizer.organization.service import MODES, SmartOrganizer

console = Console()

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kmg]?)b?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "k": 1024, "m": 1024**2, "g": 1024**3}


class SizeParamType(click.ParamType):
    """Byte counts written as plain integers or with a KB/MB/GB suffix."""

    name = "size"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> int:
        if isinstance(value, int):
            return value
        match = _SIZE_PATTERN.match(str(value))
        if match is None:
            self.fail(f"{value!r} is not a size such as 500, 10KB, or 1.5MB.", param, ctx)
        number, unit = match.groups()
        return int(float(number) * _SIZE_UNITS[unit.lower()])


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
        payload: dict[str, Any] = {"success": False, "error": message, "code": code}
        if details is not None:
            payload["details"] = details
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


def _relative(path: Path | None, root: Path | None) -> str:
    if path is None:
        return "-"
    if root is None:
        return path.as_posix()
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _build_report_table(report: OrganizeReport) -> Table:
    table = Table(title=f"Organize plan ({report.mode})")
    table.add_column("Action", style="cyan")
    table.add_column("Source")
    table.add_column("Destination")
    table.add_column("Status")

    if report.results:
        for result in report.results:
            status = "[green]ok[/green]" if result.success else f"[red]{result.error}[/red]"
            table.add_row(
                result.kind,
                _relative(getattr(result.action, "src", None), report.root),
                _relative(result.destination or getattr(result.action, "dest", None), report.root),
                status,
            )
    else:
        for action in report.plan.actions:
            table.add_row(
                action.kind,
                _relative(getattr(action, "src", None), report.root),
                _relative(getattr(action, "dest", None), report.root),
                "[yellow]planned[/yellow]",
            )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="smart-organizer")
def cli() -> None:
    """Smart File Organizer sorts directories by rule or by advisor-suggested actions."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--mode",
    type=click.Choice(MODES),
    required=True,
    help="Organizing strategy to apply.",
)
@click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option("--threshold", type=SizeParamType(), help="Size threshold for --mode size (e.g. 10MB).")
@click.option("--min-age-days", type=click.IntRange(min=0), help="Age threshold for --mode archive.")
@click.option("--pattern", help="Text to strip from file names for --mode rename.")
@click.option("--regex", "use_regex", is_flag=True, help="Treat --pattern as a regular expression.")
@click.option("--case-sensitive", is_flag=True, help="Match --pattern with exact case.")
@click.option(
    "--actions",
    "actions_file",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="JSON file with suggested actions for --mode ai.",
)
@click.option("--dry-run", is_flag=True, help="Preview changes without modifying files.")
@click.option("--json", "json_output", is_flag=True, help="Emit the result envelope as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def org(
    ctx: click.Context,
    path: str,
    mode: str,
    recursive: bool,
    threshold: int | None,
    min_age_days: int | None,
    pattern: str | None,
    use_regex: bool,
    case_sensitive: bool,
    actions_file: str | None,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Organize files rooted at PATH using the selected mode.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Root directory to organize.
        mode: Organizing strategy name.
        recursive: Whether to include subdirectories.
        threshold: Byte threshold for size mode.
        min_age_days: Day threshold for archive mode.
        pattern: Text or regular expression stripped in rename mode.
        use_regex: Whether `pattern` is a regular expression.
        case_sensitive: Whether `pattern` matching respects case.
        actions_file: JSON file with raw actions for ai mode.
        dry_run: If True, skip making filesystem mutations.
        json_output: If True, emit the result envelope as JSON.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
    """

    json_enabled = json_output
    try:
        manager = ConfigManager()
        manager.ensure_exists()
        config = manager.load()
        configure_logging(config.logging)

        explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
        explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

        quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
        summary_only = summary_mode if explicit_summary else config.cli.summary_default

        if json_output:
            if explicit_quiet and quiet_enabled:
                raise click.ClickException("--json cannot be combined with --quiet.")
            if explicit_summary and summary_only:
                raise click.ClickException("--json cannot be combined with --summary.")
            quiet_enabled = False
            summary_only = False

        if quiet_enabled and summary_only:
            raise click.ClickException(
                "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
            )

        raw_actions: Any = None
        if mode == "ai":
            if actions_file is None:
                raise click.ClickException("--actions is required for --mode ai.")
            try:
                raw_actions = parse_actions(Path(actions_file).read_text(encoding="utf-8"))
            except AdvisorError as exc:
                raise click.ClickException(f"Unable to read actions from {actions_file}: {exc}") from exc

        organizer = SmartOrganizer(config)
        report = organizer.organize(
            mode,
            path,
            recursive=recursive,
            size_threshold=threshold,
            min_age_days=min_age_days,
            pattern=pattern,
            use_regex=use_regex,
            case_sensitive=case_sensitive,
            raw_actions=raw_actions,
            dry_run=dry_run,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_enabled, original=exc)
        return
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_enabled, original=exc)
        return

    envelope = report.to_envelope()
    if json_output:
        if dry_run:
            envelope["dry_run"] = True
            envelope["plan"] = [action.model_dump(mode="json") for action in report.plan.actions]
        console.print_json(data=envelope)
        if not report.success:
            raise SystemExit(1)
        return

    if not report.success:
        raise click.ClickException(report.error or "Organization failed.")

    if report.plan.actions:
        _emit_message(
            _build_report_table(report),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    for rejection in report.rejected:
        _emit_message(
            f"[yellow]Rejected action #{rejection.index} ({rejection.kind or 'unknown'}): "
            f"{rejection.reason}[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    metrics: dict[str, Any] = {
        "mode": mode,
        "planned": len(report.plan),
        "succeeded": report.succeeded,
        "failed": report.failed,
    }
    if report.rejected:
        metrics["rejected"] = len(report.rejected)
    _emit_message(
        _format_summary_line("Organization", report.root, metrics),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )
    if dry_run:
        _emit_message(
            "[yellow]Dry run selected; no files were changed.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )


@cli.group()
def config() -> None:
    """Manage Smart File Organizer configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        config = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'archive.min_age_days'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        assign_dotted(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=OrganizerConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    changed = [line for line in diff if line.startswith(("+", "-")) and "Last updated" not in line]
    changed = [line for line in changed if not line.startswith(("+++", "---"))]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("path")
def config_path() -> None:
    """Print the location of the configuration file."""
    console.print(str(ConfigManager().config_path), soft_wrap=True)


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()

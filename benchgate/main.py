"""benchgate CLI entry point and wiring."""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from pathlib import Path

import click

from benchgate.config import BenchGateSettings, load_config
from benchgate.core.logging import setup_logging
from benchgate.export import CsvResultsExporter
from benchgate.models.results import ValidationResult, ValidationSummary
from benchgate.models.sessions import SessionQuery
from benchgate.models.values import ValueKind
from benchgate.sessions import GameBenchClient, SessionFetchError, SessionLoadError, SessionStore
from benchgate.validation import (
    RuleEvaluator,
    RuleSetRegistry,
    ValidationRunError,
    ValidationRunner,
    ValidationWorkspace,
    conditions_for,
    kind_for,
)

_DEFAULT_CONFIG_PATH = Path("config/benchgate.yaml")

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help=f"YAML config file (default: {_DEFAULT_CONFIG_PATH} when present).",
)


@click.group()
def cli() -> None:
    """Validate GameBench performance sessions against rule sets."""
    setup_logging(stream=sys.stderr)


def _load_settings(config_path: Path | None) -> BenchGateSettings:
    try:
        if config_path is not None:
            settings = load_config(config_path)
        elif _DEFAULT_CONFIG_PATH.exists():
            settings = load_config(_DEFAULT_CONFIG_PATH)
        else:
            settings = BenchGateSettings()
    except (FileNotFoundError, ValueError) as exc:
        # pydantic.ValidationError is a ValueError.
        raise click.ClickException(str(exc)) from exc
    setup_logging(
        settings.logging.level,
        json_output=settings.logging.json_output,
        stream=sys.stderr,
    )
    return settings


def build_workspace(settings: BenchGateSettings) -> ValidationWorkspace:
    evaluator = RuleEvaluator(float_tolerance=settings.validation.float_tolerance)
    runner = ValidationRunner(evaluator, chunk_size=settings.validation.chunk_size)
    return ValidationWorkspace(RuleSetRegistry.with_defaults(settings.rules), runner)


def _echo_results(results: Sequence[ValidationResult]) -> None:
    for result in results:
        label = "PASS" if result.passed else "FAIL"
        click.echo(f"{label}  {result.session_id}  {result.app_name}  {result.device_model}")
        for outcome in result.failures:
            click.echo(f"    - {outcome.rule_name}: {outcome.reason}")


@cli.command("validate")
@click.argument("sessions_file", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@_config_option
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    default=None,
    help="Rule set YAML to use instead of the configured rules.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write per-rule results to this CSV file.",
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON.")
@click.option("--strict", is_flag=True, help="Exit with status 1 when any session fails.")
def validate_command(
    sessions_file: Path,
    config_path: Path | None,
    rules_path: Path | None,
    output_path: Path | None,
    as_json: bool,
    strict: bool,
) -> None:
    """Validate the sessions in SESSIONS_FILE."""
    settings = _load_settings(config_path)
    workspace = build_workspace(settings)

    if rules_path is not None:
        try:
            rule_set = workspace.rule_sets.import_yaml(rules_path, replace=True)
        except (FileNotFoundError, ValueError) as exc:
            raise click.ClickException(f"cannot load rules: {exc}") from exc
        workspace.rule_sets.select_set(rule_set.name)

    store = SessionStore(resolver=workspace.runner.evaluator.resolver)
    try:
        store.load_file(sessions_file)
    except SessionLoadError as exc:
        raise click.ClickException(str(exc)) from exc
    workspace.save_sessions(store.sessions)

    try:
        results = workspace.validate()
    except ValidationRunError as exc:
        raise click.ClickException(str(exc)) from exc

    if output_path is not None:
        CsvResultsExporter(output_path).consume(results)

    summary = ValidationSummary.from_results(results)
    if as_json:
        payload = {
            "summary": summary.model_dump(),
            "results": [result.model_dump(mode="json") for result in results],
        }
        click.echo(json.dumps(payload, indent=2, default=str))
    else:
        _echo_results(results)
        click.echo(summary.describe())

    if strict and summary.failed:
        click.get_current_context().exit(1)


@cli.command("conditions")
@click.option(
    "--kind",
    type=click.Choice([kind.value for kind in ValueKind]),
    default=None,
    help="Only list conditions for this value kind.",
)
def conditions_command(kind: str | None) -> None:
    """List the conditions available for each value kind."""
    kinds = [ValueKind(kind)] if kind else list(ValueKind)
    for value_kind in kinds:
        click.echo(f"{value_kind.value}:")
        for option in conditions_for(value_kind):
            click.echo(f"  {option.condition.value:<12} {option.label}")


@cli.command("kind")
@click.argument("field_path")
def kind_command(field_path: str) -> None:
    """Print the inferred value kind of FIELD_PATH."""
    click.echo(kind_for(field_path).value)


@cli.group("rules")
def rules_group() -> None:
    """Inspect and export configured rules."""


@rules_group.command("list")
@_config_option
def rules_list_command(config_path: Path | None) -> None:
    """List the configured rules."""
    settings = _load_settings(config_path)
    for rule in settings.rules:
        state = "on " if rule.enabled else "off"
        value = "" if rule.value is None else f" {rule.value}"
        click.echo(f"[{state}] {rule.id}  {rule.name}: {rule.field} {rule.condition.value}{value}")


@rules_group.command("export")
@click.argument("path", type=click.Path(path_type=Path, dir_okay=False))
@_config_option
def rules_export_command(path: Path, config_path: Path | None) -> None:
    """Write the configured rules to PATH as a YAML rule set."""
    settings = _load_settings(config_path)
    registry = RuleSetRegistry.with_defaults(settings.rules)
    target = registry.export_yaml(path)
    click.echo(f"Exported {len(registry.list_rules())} rules to {target}")


@cli.command("fetch")
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False),
    required=True,
    help="JSON file to write the fetched page to.",
)
@_config_option
@click.option("--page", type=click.IntRange(min=0), default=0, show_default=True)
@click.option("--page-size", type=click.IntRange(min=1), default=15, show_default=True)
@click.option("--app", "apps", multiple=True, help="Filter by app package (repeatable).")
@click.option("--device", "devices", multiple=True, help="Filter by device model (repeatable).")
def fetch_command(
    output_path: Path,
    config_path: Path | None,
    page: int,
    page_size: int,
    apps: tuple[str, ...],
    devices: tuple[str, ...],
) -> None:
    """Fetch a page of sessions from the GameBench API."""
    settings = _load_settings(config_path)
    try:
        client = GameBenchClient.from_config(settings.api)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    query = SessionQuery(page=page, page_size=page_size, apps=list(apps), devices=list(devices))
    with client:
        try:
            result = client.search_sessions(query)
        except SessionFetchError as exc:
            raise click.ClickException(str(exc)) from exc

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "content": result.content,
        "totalElements": result.total_elements,
        "totalPages": result.total_pages,
        "size": result.size,
        "number": result.number,
    }
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    click.echo(f"Fetched {len(result.content)} of {result.total_elements} sessions to {output_path}")


__all__ = ["build_workspace", "cli"]


if __name__ == "__main__":
    cli()

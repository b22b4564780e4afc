"""shardplan CLI — top-level command group."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import asdict
from pathlib import Path
from typing import Any, TypeVar

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from shardplan import __version__
from shardplan.config import PlanConfig, load_config, validate_config
from shardplan.reporters.terminal import reporter
from shardplan.sharding.locator import DiscoveryError, locate_suites
from shardplan.sharding.plan_file import write_plan
from shardplan.sharding.planner import plan_suites

logger = logging.getLogger(__name__)
console = Console()

_F = TypeVar("_F", bound=Callable[..., Any])

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _config_to_dict(config: PlanConfig) -> dict[str, Any]:
    """Convert PlanConfig to dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _plan_options(func: _F) -> _F:
    """Options shared by every command that discovers suites."""
    options = [
        click.option(
            "--path",
            default=".",
            type=click.Path(exists=True, file_okay=False, resolve_path=True),
            help="Directory containing .shardplan.yml.",
        ),
        click.option(
            "--suites",
            "test_suites_path",
            default=None,
            help="Glob pattern (or deprecated directory) locating the test suites.",
        ),
        click.option(
            "--threads",
            "thread_count",
            type=click.IntRange(min=1),
            default=None,
            help="Number of parallel worker threads.",
        ),
        click.option(
            "--weights",
            "weights_json",
            type=click.Path(dir_okay=False),
            default=None,
            help="JSON weight table keyed by path suffix.",
        ),
        click.option(
            "--default-weight",
            type=float,
            default=None,
            help="Weight of suites not listed in the weight table.",
        ),
        click.option("--verbose", is_flag=True, help="List every suite found."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_config(kwargs: dict[str, Any]) -> PlanConfig:
    """Load ``.shardplan.yml`` and apply command-line overrides."""
    try:
        config = load_config(kwargs["path"])
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {escape(str(e))}")
        raise click.Abort from e

    config = config.with_overrides(
        test_suites_path=kwargs.get("test_suites_path"),
        thread_count=kwargs.get("thread_count"),
        weights_json=kwargs.get("weights_json"),
        default_weight=kwargs.get("default_weight"),
        verbose=kwargs.get("verbose") or None,
    )

    errors = validate_config(config)
    if errors:
        raise click.UsageError("; ".join(errors))

    if config.verbose and logging.getLogger().level > logging.INFO:
        logging.getLogger().setLevel(logging.INFO)
    return config


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity (logs go to stderr).",
)
@click.version_option(version=__version__, prog_name="shardplan")
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    """Split test suites across parallel workers by weight."""
    ctx.ensure_object(dict)
    _configure_logging(log_level.upper())


@cli.group("config")
def config_group() -> None:
    """Inspect `.shardplan.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory containing .shardplan.yml.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration.

    Example:
      shardplan config show
      shardplan config show --json-output
    """
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {escape(str(e))}")
        raise click.Abort from e

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        console.print()
        console.print("[bold cyan]Configuration:[/bold cyan]")
        console.print()
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory containing .shardplan.yml.",
)
def config_validate(path: str) -> None:
    """Validate `.shardplan.yml`.

    Example:
      shardplan config validate
    """
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {escape(str(e))}")
        raise click.Abort from e

    errors = validate_config(config)

    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{escape(error)}[/red]")
    console.print()
    raise click.Abort


@cli.command()
@_plan_options
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of text.")
def locate(**kwargs: Any) -> None:
    """List the test suites that would be planned."""
    as_json: bool = kwargs["as_json"]
    config = _resolve_config(kwargs)

    try:
        discovery = locate_suites(config)
    except DiscoveryError as e:
        reporter.print_error(escape(str(e)))
        raise click.Abort from e

    if as_json:
        click.echo(
            json.dumps(
                {
                    "strategy": discovery.strategy,
                    "thread_count": discovery.config.thread_count,
                    "suites": list(discovery.suites),
                },
                indent=2,
            )
        )
        return

    reporter.print_header("shardplan locate")
    reporter.print_suite_list(discovery.suites)
    console.print()
    reporter.print_info(
        f"{len(discovery.suites)} suite(s) via {discovery.strategy}, "
        f"{discovery.config.thread_count} thread(s)"
    )


@cli.command()
@_plan_options
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of tables.")
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the plan to this JSON file for the worker launcher.",
)
@click.option("--show-suites", is_flag=True, help="List suite paths in the thread table.")
def plan(**kwargs: Any) -> None:
    """Discover test suites and split them across worker threads by weight."""
    as_json: bool = kwargs["as_json"]
    output_path: str | None = kwargs.get("output_path")
    show_suites: bool = kwargs["show_suites"]
    config = _resolve_config(kwargs)

    try:
        suite_plan = plan_suites(config)
    except DiscoveryError as e:
        reporter.print_error(escape(str(e)))
        raise click.Abort from e

    if output_path:
        logger.debug("Writing plan to %s", output_path)
        write_plan(suite_plan, Path(output_path))

    if as_json:
        click.echo(json.dumps(suite_plan.assignment.to_dict(), indent=2))
        return

    reporter.print_header("shardplan plan")
    if suite_plan.config.thread_count != config.thread_count:
        reporter.print_warning(
            f"Only {suite_plan.assignment.suite_count} suite(s) found; "
            f"using {suite_plan.config.thread_count} of {config.thread_count} thread(s)"
        )
    if suite_plan.assignment.bins:
        reporter.print_assignment(suite_plan.assignment, show_suites=show_suites)
    reporter.print_plan_summary(suite_plan)
    if output_path:
        reporter.print_success(f"Plan written to {escape(output_path)}")

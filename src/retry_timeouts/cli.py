"""CLI interface for retry-timeouts"""

import logging
import random
from pathlib import Path
from typing import List, Optional, Tuple

import click
import yaml

from retry_timeouts.application.simulator import simulate as simulate_schedule
from retry_timeouts.domain.config import ConfigurationError, RetryTimeoutsConfig
from retry_timeouts.domain.models.schedule import ScheduleEntry
from retry_timeouts.infrastructure.config.config_manager import ConfigManager

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger("retry_timeouts").setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_retry_config(ctx: click.Context, no_jitter: bool = False) -> RetryTimeoutsConfig:
    """Load retry configuration, optionally with jitter turned off

    Args:
        ctx: Click context holding the config path
        no_jitter: Disable delay and timeout jitter

    Returns:
        Retry configuration model
    """
    verbose = ctx.obj.get("verbose", False)
    try:
        config = ConfigManager(config_path=ctx.obj.get("config_path")).get_retry_config()
    except ConfigurationError as e:
        _die(str(e), verbose=verbose, exc=e)

    if no_jitter:
        config = config.model_copy(update={"jitter_factor": 0.0, "timeout_jitter_factor": 0.0})
    return config


def _format_entry(entry: ScheduleEntry) -> str:
    """Format a schedule entry as a table row"""
    delay = "give up" if entry.aborted else f"{entry.delay:.2f}s"
    timeout = "-" if entry.timeout < 0 else f"{entry.timeout:.2f}s"
    return (
        f"{entry.attempt:>3}  {entry.outcome.value:<4}  {entry.started_at:>8.2f}s  "
        f"{entry.duration:>8.2f}s  {delay:>9}  {timeout:>9}"
    )


def _output_schedule(entries: List[ScheduleEntry]) -> None:
    """Output simulated schedule to console"""
    if entries and entries[0].attempt_timeout >= 0:
        click.echo(f"Initial timeout: {entries[0].attempt_timeout:.2f}s\n")
    else:
        click.echo("Initial timeout: disabled\n")
    click.echo("  #  out      start  duration      delay    timeout")
    click.echo("-" * 52)
    for entry in entries:
        click.echo(_format_entry(entry))

    if entries and entries[-1].aborted:
        click.echo("\nGiving up: out of attempts or time")
    elif entries:
        last = entries[-1]
        click.echo(f"\nFinished at {last.finished_at:.2f}s after {len(entries)} attempts")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .retry-timeouts.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """retry-timeouts - Exponential backoff with adjustable timeouts"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("attempts", nargs=-1, required=True)
@click.option("--no-jitter", is_flag=True, help="Disable delay and timeout jitter")
@click.option("--seed", type=int, help="Seed the jitter random generator")
@click.pass_context
def simulate(ctx, attempts: Tuple[str, ...], no_jitter: bool, seed: Optional[int]):
    """Simulate a retry schedule without waiting.

    ATTEMPTS: Scripted attempts such as fail:0, fail:timeout or ok:1.5
    """
    verbose = ctx.obj.get("verbose", False)
    config = _load_retry_config(ctx, no_jitter)
    rng = random.Random(seed) if seed is not None else None

    try:
        entries = simulate_schedule(config, attempts, rng=rng)
    except ValueError as e:
        _die(str(e), verbose=verbose, exc=e)

    _output_schedule(entries)


@cli.command("show-config")
@click.pass_context
def show_config(ctx):
    """Print the effective retry configuration as YAML."""
    config = _load_retry_config(ctx)
    click.echo(yaml.safe_dump({"retry": config.model_dump()}, sort_keys=False), nl=False)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()

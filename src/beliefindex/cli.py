"""
Command-line interface for the belief index engine.
"""

import sys
from itertools import groupby
from pathlib import Path
from typing import List, Optional

import click
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .bsi import BeliefEngine, BeliefInflection, BeliefSignal, ConfigurationError
from .config import Config
from .logger import get_bsi_logger, get_logger

_signal_list = TypeAdapter(List[BeliefSignal])


@click.group()
@click.version_option(version=__version__, prog_name="beliefindex")
@click.option(
    "--env-file",
    "-e",
    type=click.Path(exists=True, path_type=Path),
    help="Path to a .env configuration file"
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging"
)
@click.pass_context
def main(ctx: click.Context, env_file: Optional[Path], verbose: bool) -> None:
    """
    Beliefindex: streaming belief signal fusion.

    Fuses belief signals into a Belief State Index and reports
    inflection events detected in the resulting series.
    """
    ctx.ensure_object(dict)

    try:
        ctx.obj["config"] = Config.load_from_env(str(env_file) if env_file else None)
    except (ValidationError, ValueError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if verbose:
        ctx.obj["config"].logging.level = "DEBUG"

    logging_config = ctx.obj["config"].logging
    ctx.obj["logger"] = get_logger(
        "beliefindex",
        logging_config.level,
        log_file=logging_config.file_path
    )
    get_bsi_logger(logging_config.level)


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration and whether it validates."""
    config: Config = ctx.obj["config"]
    console = Console()

    table = Table(title="Beliefindex Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Smoothing window", f"{config.bsi.smoothing_window}s")
    table.add_row("Decay factor", f"{config.bsi.decay_factor}")
    table.add_row("Min signal count", f"{config.bsi.min_signal_count}")
    table.add_row("Outlier threshold", f"{config.bsi.outlier_threshold}")
    for name, weight in config.bsi.signal_weights.model_dump().items():
        table.add_row(f"Weight: {name}", f"{weight}")
    table.add_row("Max buffer size", f"{config.aggregator.max_buffer_size}")
    table.add_row("Recent window", f"{config.aggregator.recent_window_seconds}s")
    table.add_row("Inflection threshold", f"{config.monitor.threshold}")
    table.add_row("Min persistence", f"{config.monitor.min_persistence}s")
    table.add_row("Log level", config.logging.level)
    console.print(table)

    try:
        config.bsi.validate_config()
        console.print("[green]Configuration valid[/green]")
    except ConfigurationError as e:
        console.print(f"[red]Configuration invalid: {e}[/red]")
        sys.exit(1)


@main.command()
@click.argument("signals_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--domain", "-d", default="BTC", help="Domain tag for the index")
@click.option("--step-seconds", "-s", default=60, type=int, help="Seconds of signals per index step")
@click.pass_context
def replay(ctx: click.Context, signals_file: Path, domain: str, step_seconds: int) -> None:
    """Replay a JSON array of belief signals through the engine."""
    config: Config = ctx.obj["config"]
    logger = ctx.obj["logger"]
    console = Console()

    if step_seconds <= 0:
        click.echo("--step-seconds must be positive", err=True)
        sys.exit(1)

    try:
        signals = _signal_list.validate_json(signals_file.read_bytes())
    except ValidationError as e:
        click.echo(f"Invalid signals file: {e}", err=True)
        sys.exit(1)

    try:
        engine = BeliefEngine.from_config(domain, config)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    if not signals:
        console.print("[yellow]No signals to replay[/yellow]")
        return

    signals.sort(key=lambda s: s.timestamp)
    origin = signals[0].timestamp

    table = Table(title=f"BSI Replay: {domain}", show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Velocity", justify="right")
    table.add_column("Volatility", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Signals", justify="right")
    table.add_column("Inflection", style="yellow")

    inflections: List[BeliefInflection] = []

    for _, bucket in groupby(signals, key=lambda s: (s.timestamp - origin) // step_seconds):
        batch = list(bucket)
        engine.ingest(batch)
        update = engine.step(now=batch[-1].timestamp)

        if update.inflection is not None:
            inflections.append(update.inflection)

        bsi = update.bsi
        table.add_row(
            str(bsi.last_updated),
            f"{bsi.value:.4f}",
            f"{bsi.velocity:.4f}",
            f"{bsi.volatility:.4f}",
            f"{bsi.confidence:.2%}",
            str(bsi.signal_count),
            update.inflection.inflection_type.value if update.inflection else ""
        )

    console.print(table)

    summary = [f"Steps: {engine.steps_run}", f"Inflections: {len(inflections)}"]
    for inflection in inflections:
        persisted = engine.validate_persistence(inflection)
        summary.append(
            f"{inflection.timestamp} {inflection.inflection_type.value}: "
            f"{'validated' if persisted else 'not validated'} "
            f"({inflection.persistence_duration}s)"
        )

    console.print(Panel("\n".join(summary), title="Inflections", style="green"))
    logger.info(f"Replayed {len(signals)} signals for {domain} in {engine.steps_run} steps")


if __name__ == "__main__":
    main()

"""Concord CLI.

    concord ask creative_writing
    concord ask report -c fusion_required=yes -c topic=ui
    concord classify security_audit
    concord dream --seconds 3 --idle
    concord dream --probe cpu
    concord config
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import replace
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from concord.cli.async_runner import async_command
from concord.config import ConcordConfig, get_config, load_config
from concord.core.errors import ConcordError
from concord.dream import PROBE_KINDS, DreamMode, build_probe
from concord.engine import ConsciousnessEngine
from concord.foundation.logging import configure_logging
from concord.models import MockBackend, demo_registry
from concord.routing import route
from concord.types.config import DreamConfig
from concord.types.core import Request

console = Console()


def cli_entrypoint() -> None:
    """Entrypoint with ConcordError formatting instead of tracebacks."""
    try:
        main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("\n[dim]Interrupted[/dim]")
        sys.exit(130)
    except ConcordError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _parse_context(pairs: tuple[str, ...]) -> dict[str, Any] | None:
    """Parse repeated ``key=value`` options into a context mapping."""
    if not pairs:
        return None
    context: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--context")
        context[key] = value
    return context


def _demo_dream_config(base: DreamConfig) -> DreamConfig:
    """Dream timings compressed so a demo session fits in a few seconds."""
    return replace(
        base,
        poll_interval=0.2,
        settle_delay=0.1,
        wake_delay=0.1,
        cycle_delay_min=0.1,
        cycle_delay_max=0.3,
        simulation_delay=0.05,
        quantum_delay=0.05,
    )


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a config.yaml",
)
@click.pass_context
def main(ctx: click.Context, debug: bool, config_path: str | None) -> None:
    """Concord - consciousness orchestration for cooperating agents."""
    config = load_config(config_path)
    configure_logging(debug=debug or config.debug)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _config(ctx: click.Context) -> ConcordConfig:
    return ctx.obj.get("config") if ctx.obj else get_config()


@main.command()
@click.argument("request_type")
@click.option("-c", "--context", "pairs", multiple=True, help="Context entry as key=value")
@click.option("--json", "json_output", is_flag=True, help="Print the response as JSON")
@click.pass_context
@async_command
async def ask(ctx: click.Context, request_type: str, pairs: tuple[str, ...], json_output: bool) -> None:
    """Run one request through a demo engine."""
    config = _config(ctx)
    engine = ConsciousnessEngine(demo_registry(), backend=MockBackend(), config=config.engine)
    await engine.initialize()
    try:
        response = await engine.process_request(Request(request_type, _parse_context(pairs)))
        await engine.insights.drain()
    finally:
        await engine.cleanup()

    if json_output:
        click.echo(json.dumps(response.to_dict(), indent=2, default=str))
        return

    color = "green" if response.confidence >= 0.7 else "yellow" if response.confidence >= 0.3 else "red"
    console.print(f"[bold]{response.content or '(no content)'}[/bold]")
    console.print(f"   confidence: [{color}]{response.confidence:.2f}[/{color}]")
    if response.error:
        console.print(f"   error: [red]{response.error}[/red]")
    for key, value in response.metadata.items():
        console.print(f"   [dim]{key}:[/dim] {value}")


@main.command()
@click.argument("request_type")
@click.option("-c", "--context", "pairs", multiple=True, help="Context entry as key=value")
@click.pass_context
def classify(ctx: click.Context, request_type: str, pairs: tuple[str, ...]) -> None:
    """Show the complexity tier and target worker for a request."""
    decision = route(Request(request_type, _parse_context(pairs)), _config(ctx).engine.routes)
    console.print(f"complexity: [bold]{decision.complexity.value}[/bold]")
    if decision.worker is not None:
        console.print(f"worker: {decision.worker} (keyword '{decision.keyword}')")


@main.command()
@click.option("--seconds", default=3.0, show_default=True, help="How long to stay in dream mode")
@click.option("--idle/--busy", default=True, help="What the static probe reports")
@click.option(
    "--probe",
    "probe_kind",
    type=click.Choice(PROBE_KINDS),
    default="static",
    show_default=True,
    help="Idle probe: static answer or psutil CPU sampling",
)
@click.option("--lucid", is_flag=True, help="Force one lucid dream while dreaming")
@click.pass_context
@async_command
async def dream(
    ctx: click.Context, seconds: float, idle: bool, probe_kind: str, lucid: bool
) -> None:
    """Run dream mode with compressed delays.

    The cpu probe dreams only while CPU use stays below
    ``dream.idle_cpu_percent``.
    """
    config = _config(ctx)
    engine = ConsciousnessEngine(demo_registry(), backend=MockBackend(), config=config.engine)
    await engine.initialize()

    dreams = DreamMode(
        build_probe(probe_kind, config.dream, idle=idle),
        config=_demo_dream_config(config.dream),
        integrate=engine.integrate_dream_insight,
    )
    dreams.start()
    try:
        await asyncio.sleep(seconds)
        if lucid:
            await dreams.force_lucid_dream()
        await dreams.exit()
    finally:
        await dreams.stop()
        await engine.insights.drain()
        await engine.cleanup()

    recent = dreams.recent_dreams(10)
    if not recent:
        console.print("[dim]No dreams recorded[/dim]")
        return

    table = Table(title="Recent dreams")
    table.add_column("#", justify="right")
    table.add_column("Primary")
    table.add_column("Secondary")
    table.add_column("Content")
    table.add_column("Insights")
    for d in recent:
        table.add_row(
            str(d.cycle.id),
            d.cycle.primary_type.value,
            d.cycle.secondary_type.value,
            "\n".join(d.content),
            "\n".join(d.insights),
        )
    console.print(table)
    console.print(
        f"Insights applied: {len(dreams.applied_insights)}  "
        f"insight count: {engine.insight_count.value}"
    )


@main.command(name="config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the resolved configuration."""
    click.echo(yaml.safe_dump(_config(ctx).to_dict(), sort_keys=False))

"""Click commands for SpaceWx.

    spacewx serve            run the scheduler and REST API
    spacewx fetch [--json]   run one refresh cycle and print the result
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import replace

import click

from spacewx.config import load_config
from spacewx.engine.pipeline import RefreshPipeline, donki_client_factory
from spacewx.engine.store import StateStore
from spacewx.errors import RefreshError
from spacewx.models.config import SpaceWxConfig
from spacewx.models.snapshot import Snapshot
from spacewx.observability.logging import setup_logging
from spacewx.settings import SettingsStore
from spacewx.timeutil import format_display


def _load() -> SpaceWxConfig:
    try:
        return load_config()
    except ValueError as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc


@click.group()
@click.version_option(package_name="spacewx")
def cli() -> None:
    """Space-weather refresh, analytics and alerting."""


@cli.command()
def serve() -> None:
    """Run the refresh scheduler and REST API until interrupted."""
    from spacewx.app import main

    asyncio.run(main())


@cli.command()
@click.option("--api-key", envvar="SPACEWX_API_KEY", default=None, help="DONKI API key (default: DEMO_KEY).")
@click.option("--json", "as_json", is_flag=True, help="Print the full snapshot and alerts as JSON.")
def fetch(api_key: str | None, as_json: bool) -> None:
    """Run one refresh cycle and print the result."""
    config = _load()
    setup_logging("error" if as_json else "warning", json_output=False)
    refresh = replace(config.refresh, api_key=api_key) if api_key else config.refresh

    settings = SettingsStore(initial=refresh, kid_mode=config.kid_mode)
    store = StateStore()
    pipeline = RefreshPipeline(
        settings=settings,
        store=store,
        client_factory=donki_client_factory(config.donki.base_url, float(config.donki.timeout_seconds)),
        window_days=config.donki.window_days,
    )

    try:
        snapshot = asyncio.run(pipeline.run_cycle())
    except RefreshError as exc:
        click.echo(store.status or f"Error: {exc}", err=True)
        sys.exit(1)

    alerts = store.alerts().entries
    if as_json:
        payload = {"snapshot": snapshot.to_dict(), "alerts": [a.to_dict() for a in alerts]}
        click.echo(json.dumps(payload, indent=2))
        return

    for line in render_summary(snapshot, kid_mode=settings.kid_mode):
        click.echo(line)
    for record in alerts:
        click.secho(f"ALERT  {record.message}", fg="yellow")
    click.echo(store.status)


def render_summary(snapshot: Snapshot, kid_mode: bool = True) -> list[str]:
    """Dashboard-style text lines for a snapshot."""
    counts = snapshot.class_counts
    lines = [f"Flares (last 30 days): C={counts.c}, M={counts.m}, X={counts.x}"]

    flare = snapshot.latest_significant_flare
    if flare is not None:
        lines.append(f"Last significant flare: {flare.class_type} at {format_display(flare.begin_time)}")
    else:
        lines.append("Last significant flare: None in past 30 days")

    if snapshot.latest_kp is None:
        lines.append("Latest Kp: N/A")
    else:
        kp_line = f"Latest Kp: {snapshot.latest_kp:.1f}"
        if kid_mode and snapshot.latest_kp >= 5.0:
            kp_line += " (storm! auroras possible)"
        lines.append(kp_line)

    lines.append(f"CMEs: {len(snapshot.cmes)}")
    return lines

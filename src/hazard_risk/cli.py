"""CLI interface using Typer."""

from __future__ import annotations

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from hazard_risk import __version__
from hazard_risk.cache import ObservationCache
from hazard_risk.config import HazardRiskConfig
from hazard_risk.exporters import export_json
from hazard_risk.fetchers import magnitude_class
from hazard_risk.geo import format_time_ago
from hazard_risk.http import create_session
from hazard_risk.models import (
    HAZARD_LABELS,
    Hazard,
    HazardAssessment,
    Location,
    RiskLevel,
    SeismicReport,
    Storm,
)
from hazard_risk.pipeline import run_assessment, run_seismic_report
from hazard_risk.scheduler import RefreshScheduler

app = typer.Typer(
    name="hazard-risk",
    help="Multi-hazard risk scoring for a geographic point.",
    add_completion=False,
)
console = Console()

LEVEL_STYLES: dict[str, str] = {
    RiskLevel.LOW.value: "green",
    RiskLevel.MODERATE.value: "yellow",
    RiskLevel.HIGH.value: "red",
    RiskLevel.SEVERE.value: "bold red",
    RiskLevel.EXTREME.value: "bold magenta",
}

STATUS_STYLES: dict[str, str] = {"fresh": "green", "stale": "yellow", "unavailable": "red"}


class EventOrder(str, Enum):
    DISTANCE = "distance"
    TIME = "time"
    MAGNITUDE = "magnitude"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"hazard-risk {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


def _hazard_label(name: str) -> str:
    try:
        return HAZARD_LABELS[Hazard(name)]
    except ValueError:
        return name


def _styled(level: str) -> str:
    style = LEVEL_STYLES.get(level, "")
    return f"[{style}]{level}[/{style}]" if style else level


def _print_status(data_status: dict[str, str]) -> None:
    parts = [
        f"{name}: [{STATUS_STYLES.get(status, 'white')}]{status}[/{STATUS_STYLES.get(status, 'white')}]"
        for name, status in data_status.items()
    ]
    console.print("Data " + ", ".join(parts))


def _print_assessment(assessment: HazardAssessment) -> None:
    table = Table(title="Hazard Risk Assessment")
    table.add_column("Hazard", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Level")
    table.add_column("Reasoning")

    for name, risk in assessment.scores.items():
        table.add_row(
            _hazard_label(name),
            str(risk.score),
            _styled(risk.level.label),
            risk.reasoning,
        )
    console.print(table)

    index = assessment.index
    concern = _hazard_label(index.primary_concern)
    console.print(
        f"\nComposite index: [bold]{index.score}[/bold] {_styled(index.level.label)}"
        f"  (primary concern: {concern}, high-risk hazards: {index.high_risk_count})"
    )

    for alert in assessment.alerts:
        console.print(f"  {_styled(alert.severity)} {alert.type}: {alert.message}")

    telemetry = assessment.storm_telemetry
    if telemetry is not None and telemetry.storms:
        _print_storms(telemetry.storms)

    _print_status(assessment.data_status)
    if assessment.degraded:
        console.print("[yellow]Some data is stale or unavailable; scores may be understated.[/yellow]")


def _print_storms(storms: tuple[Storm, ...]) -> None:
    table = Table(title="Active Storm Systems")
    table.add_column("Type", style="bold")
    table.add_column("Category", justify="right")
    table.add_column("Wind", justify="right")
    table.add_column("Gusts", justify="right")
    table.add_column("Direction")

    for storm in storms:
        table.add_row(
            storm.kind.value,
            str(storm.category) if storm.category is not None else "-",
            f"{storm.wind_speed_kmh:.0f} km/h",
            f"{storm.wind_gusts_kmh:.0f} km/h",
            storm.direction,
        )
    console.print(table)


def _print_seismic(report: SeismicReport) -> None:
    table = Table(title="Nearby Seismic Events")
    table.add_column("Mag", justify="right", style="bold")
    table.add_column("Class")
    table.add_column("Place")
    table.add_column("Distance", justify="right")
    table.add_column("Depth", justify="right")
    table.add_column("When")
    table.add_column("Tsunami")

    for ev in report.events:
        table.add_row(
            f"{ev.magnitude:.1f}",
            magnitude_class(ev.magnitude).level,
            ev.place,
            f"{ev.distance_km:.0f} km",
            f"{ev.depth_km:.0f} km",
            format_time_ago(ev.time_ms),
            "[red]yes[/red]" if ev.tsunami else "-",
        )
    console.print(table)
    console.print(
        f"Earthquake risk: [bold]{report.score.score}[/bold] {_styled(report.score.level.label)}"
        f" - {report.score.reasoning}"
    )
    _print_status({"seismic": report.status})


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Hazard Risk - explainable multi-hazard risk scores and alerts."""


@app.command()
def assess(
    lat: Annotated[float, typer.Option("--lat", min=-90.0, max=90.0, help="Latitude.")],
    lon: Annotated[float, typer.Option("--lon", min=-180.0, max=180.0, help="Longitude.")],
    radius: Annotated[
        float,
        typer.Option(
            "--radius", "-r", min=1.0, max=20001.0, help="Seismic search radius in km."
        ),
    ] = 500.0,
    min_magnitude: Annotated[
        float,
        typer.Option(
            "--min-magnitude", "-m", min=0.0, max=10.0, help="Minimum earthquake magnitude."
        ),
    ] = 2.5,
    heatwave: Annotated[
        str | None,
        typer.Option("--heatwave", help="Externally assessed heatwave level: LOW, MODERATE, HIGH."),
    ] = None,
    derive_heatwave: Annotated[
        bool,
        typer.Option("--derive-heatwave", help="Classify heatwave level from current weather."),
    ] = False,
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output JSON file path."),
    ] = Path("hazard_risk_output.json"),
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Run one hazard assessment for a location."""
    _configure_logging(verbose)

    config = HazardRiskConfig(
        seismic_radius_km=radius,
        min_magnitude=min_magnitude,
        derive_heatwave=derive_heatwave,
        output_file=output,
    )

    try:
        assessment = run_assessment(Location(lat, lon), config=config, heatwave_level=heatwave)
    except Exception as exc:
        console.print(f"[red]Assessment failed:[/red] {exc}")
        raise typer.Exit(code=1) from None

    export_json(assessment, config.output_file)
    console.print()
    _print_assessment(assessment)
    console.print(f"\nJSON written to [bold]{config.output_file}[/bold]")


@app.command()
def watch(
    lat: Annotated[float, typer.Option("--lat", min=-90.0, max=90.0, help="Latitude.")],
    lon: Annotated[float, typer.Option("--lon", min=-180.0, max=180.0, help="Longitude.")],
    seismic_only: Annotated[
        bool,
        typer.Option("--seismic-only", help="Refresh seismic data only (5 minute default)."),
    ] = False,
    interval: Annotated[
        int | None,
        typer.Option("--interval", "-i", min=1, help="Refresh interval in seconds."),
    ] = None,
    sort: Annotated[
        EventOrder,
        typer.Option("--sort", help="Seismic event order: distance, time or magnitude."),
    ] = EventOrder.DISTANCE,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Refresh an assessment periodically until interrupted."""
    _configure_logging(verbose)

    config = HazardRiskConfig()
    location = Location(lat, lon)
    cache = ObservationCache(ttl_seconds=config.cache_ttl_seconds)
    session = create_session()

    if seismic_only:
        period = interval or config.seismic_refresh_interval_seconds

        def cycle() -> None:
            report = run_seismic_report(
                location, config, cache=cache, session=session, sort_by=sort.value
            )
            _print_seismic(report)
    else:
        period = interval or config.refresh_interval_seconds

        def cycle() -> None:
            _print_assessment(run_assessment(location, config, cache=cache, session=session))

    scheduler = RefreshScheduler(cycle, interval_seconds=period)
    console.print(f"Refreshing every {period}s. Press Ctrl+C to stop.")
    scheduler.start()
    try:
        while scheduler.running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        console.print("\nStopping...")
    finally:
        scheduler.stop()

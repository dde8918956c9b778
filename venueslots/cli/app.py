"""
Main CLI application using Typer.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..adapters.booking_api_client import BookingApiClient
from ..adapters.mock_booking_client import MockBookingClient
from ..config import AppConfig, get_default_config_path
from ..domain.availability import AvailabilityEngine
from ..domain.exceptions import SlotUnavailableError, VenueSlotsError
from ..domain.timeconv import format_duration
from ..services.availability_service import AvailabilityService
from ..services.booking_commit import BookingCommitService, BookingRequest

app = typer.Typer(
    name="venueslots",
    help="Find free gaps and bookable times for venues",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use bundled mock data instead of the booking backend.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]
DateOption = Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD). Defaults to today.")]


def setup_logging(verbose: bool) -> None:
    """Configure logging to stderr."""
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    """Load the YAML config; mock mode runs on defaults when no file exists."""
    config_path = config_file or get_default_config_path()
    if mock and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _build_services(config: AppConfig, mock: bool):
    """Create the store adapter and the services on top of it."""
    if mock:
        store = MockBookingClient(config=config)
    else:
        store = BookingApiClient(
            base_url=config.api.base_url,
            token=config.api.token,
            timeout=config.api.timeout_seconds,
            max_retries=config.api.max_retries,
            backoff_seconds=config.api.retry_backoff_seconds,
            timezone=config.timezone,
        )

    availability = AvailabilityService(
        store,
        policy=config.slot_policy(),
        timezone=config.timezone,
        serving_interval_minutes=config.defaults.serving_interval_minutes,
    )
    commit = BookingCommitService(availability, store, notifier=store, timezone=config.timezone)
    return store, availability, commit


def _resolve_date(date_option: Optional[str], tz: str) -> str:
    """Validate a YYYY-MM-DD option or fall back to today."""
    if not date_option:
        return pendulum.now(tz).to_date_string()
    try:
        return pendulum.from_format(date_option, "YYYY-MM-DD", tz=tz).to_date_string()
    except ValueError as e:
        console.print(f"[red]Could not parse date {date_option!r}: {e}[/red]")
        raise typer.Exit(1)


def _resolve_place(store, identifier: str) -> str:
    """Map a place id or name to its id."""
    for place in store.get_places(active_only=False):
        if str(place.get("id")) == identifier or str(place.get("name", "")).lower() == identifier.lower():
            return str(place.get("id"))
    console.print(f"[bold red]Error:[/bold red] Unknown place: {identifier!r}")
    raise typer.Exit(1)


@app.command()
def places(
    date: DateOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    List places that accept bookings on a date.
    """
    setup_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        _, availability, _ = _build_services(config, mock)
        booking_date = _resolve_date(date, config.timezone)

        available = availability.available_places(booking_date)
        if not available:
            console.print(f"[yellow]No places accept bookings on {booking_date}.[/yellow]")
            return

        table = Table(title=f"Places available on {booking_date}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("Operating hours")
        table.add_column("Slot", justify="right")

        for place in available:
            table.add_row(
                place.id,
                place.name,
                place.operating_hours,
                format_duration(place.window.slot_granularity_minutes),
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, VenueSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def gaps(
    place: Annotated[str, typer.Argument(help="Place id or name")],
    date: DateOption = None,
    exclude: Annotated[Optional[str], typer.Option("--exclude", help="Booking id to ignore (when editing it).")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Show the free gaps of a place on a date.
    """
    setup_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        store, availability, _ = _build_services(config, mock)
        booking_date = _resolve_date(date, config.timezone)
        place_id = _resolve_place(store, place)

        found = availability.find_gaps(place_id, booking_date, exclude_booking_id=exclude)

        console.print()
        if not found:
            console.print(f"[yellow]⚠ No free gaps for {place} on {booking_date}.[/yellow]\n")
            return

        summary = availability.summarize(found)
        console.print(
            f"[bold green]✓ {summary['gaps']} free gap(s), "
            f"{format_duration(summary['free_minutes'])} in total:[/bold green]\n"
        )
        for gap in found:
            console.print(f"  {gap.format_display()}")
        console.print()

    except (FileNotFoundError, ValueError, VenueSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def slots(
    place: Annotated[str, typer.Argument(help="Place id or name")],
    gap: Annotated[str, typer.Argument(help="Gap label, e.g. '11:00 - 17:00'")],
    date: DateOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Chosen start time; lists end times instead.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    List start times within a gap, or end times for a chosen start.
    """
    setup_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        store, availability, _ = _build_services(config, mock)
        booking_date = _resolve_date(date, config.timezone)
        place_id = _resolve_place(store, place)

        if availability.find_gap(place_id, booking_date, gap) is None:
            console.print(f"[yellow]⚠ Gap {gap} is not available on {booking_date}.[/yellow]")
            raise typer.Exit(1)

        if start:
            times = availability.end_times(place_id, booking_date, gap, start)
            heading = f"End times for a start at {start}"
        else:
            times = availability.start_times(place_id, booking_date, gap)
            heading = f"Start times within {gap}"

        if not times:
            console.print("[yellow]⚠ No selectable times.[/yellow]")
            raise typer.Exit(1)

        console.print(f"\n[bold cyan]{heading}:[/bold cyan]")
        console.print("  " + ", ".join(times) + "\n")

    except (FileNotFoundError, ValueError, VenueSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def serving(
    start: Annotated[str, typer.Argument(help="Booking start (HH:MM)")],
    end: Annotated[str, typer.Argument(help="Booking end (HH:MM)")],
    interval: Annotated[int, typer.Option("--interval", "-i", help="Minutes between options")] = 15,
):
    """
    List refreshment serving times for a booking.
    """
    try:
        times = AvailabilityEngine().compute_serving_window(start, end, interval)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not times:
        console.print("[yellow]⚠ Booking too short for refreshments.[/yellow]")
        return

    console.print(f"\n[bold cyan]Serving times:[/bold cyan] {', '.join(times)}\n")


@app.command()
def book(
    place: Annotated[str, typer.Argument(help="Place id or name")],
    start: Annotated[str, typer.Option("--start", help="Start time (HH:MM)")],
    end: Annotated[str, typer.Option("--end", help="End time (HH:MM)")],
    title: Annotated[str, typer.Option("--title", "-t", help="Booking title")],
    date: DateOption = None,
    description: Annotated[str, typer.Option("--description", help="Booking description")] = "",
    participants: Annotated[Optional[List[str]], typer.Option("--participant", "-p", help="Participant email; repeatable.")] = None,
    booking_id: Annotated[Optional[str], typer.Option("--update", help="Update this booking instead of creating one.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Create or update a booking after re-checking availability.
    """
    setup_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        store, _, commit = _build_services(config, mock)
        booking_date = _resolve_date(date, config.timezone)
        place_id = _resolve_place(store, place)

        request = BookingRequest(
            place_id=place_id,
            date=booking_date,
            start_time=start,
            end_time=end,
            title=title,
            description=description,
            booking_id=booking_id,
            participant_emails=[p.lower() for p in participants or []],
        )
        record = commit.commit(request)

        console.print(
            f"\n[bold green]✓ Booking {record.get('id', booking_id)} saved:[/bold green] "
            f"{booking_date} {start} - {end}\n"
        )

    except SlotUnavailableError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, VenueSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    console.print(f"\n[bold cyan]venueslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.google_calendar import GoogleCalendarClient
from ..adapters.mock_calendar import MockCalendarClient
from ..config import AppConfig, Leader, get_default_config_path
from ..domain.exceptions import SchedulingError
from ..domain.models import DateRange, WEEKDAY_NAMES, weekday_index
from ..services.availability import AvailabilityEngine

app = typer.Typer(
    name="leaderslots",
    help="Find open appointment slots on a leader's Google Calendar",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use mock calendar data instead of Google Calendar.")]
DurationOption = Annotated[Optional[int], typer.Option("--duration", "-d", help="Appointment duration in minutes")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Schedule appointments around leaders' existing commitments.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_engine(config: AppConfig, mock: bool) -> AvailabilityEngine:
    """Create the engine with either the mock or the Google busy-time source."""
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using sample calendar data[/yellow]\n")
        source = MockCalendarClient(timezone=config.timezone)
    else:
        source = GoogleCalendarClient(
            access_token=config.google.resolve_access_token(),
            base_url=config.google.base_url,
            timeout_seconds=config.google.timeout_seconds,
        )

    return AvailabilityEngine(source, timeout=config.lookup_timeout_seconds)


def _determine_date_range(
    *,
    tz: str,
    start_option: Optional[str],
    end_option: Optional[str]
) -> DateRange:
    """
    Resolve the search window from explicit dates.
    Defaults to today through seven days from the start date.
    """
    now = pendulum.now(tz)

    if start_option:
        start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).start_of("day")
    else:
        start_date = now.start_of("day")

    if end_option:
        end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).end_of("day")
    else:
        end_date = start_date.add(days=7).end_of("day")

    return DateRange(start=start_date, end=end_date)


def _prepare(config_file: Optional[Path], leader_name: str, mock: bool) -> Tuple[AppConfig, Leader, AvailabilityEngine]:
    config = _load_config(config_file)
    leader = config.resolve_leader(leader_name)
    engine = _build_engine(config, mock)
    return config, leader, engine


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def find(
    leader: Annotated[str, typer.Argument(help="Leader name or calendar id")],
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    duration: DurationOption = None,
    mock: MockOption = False,
):
    """
    List every open slot for a leader, in chronological order.

    Examples:

        leaderslots find john
        leaderslots find john --start 2024-01-15 --end 2024-01-19 --duration 60
        leaderslots find john --mock
    """
    try:
        config, resolved, engine = _prepare(config_file, leader, mock)
        date_range = _determine_date_range(tz=config.timezone, start_option=start, end_option=end)
        minutes = duration if duration is not None else config.defaults.duration_minutes

        console.print(f"[bold cyan]📊 Searching {resolved.name}[/bold cyan] ({resolved.calendar_id})")
        console.print(f"   Period: {date_range.start.format('YYYY-MM-DD')} - {date_range.end.format('YYYY-MM-DD')}")
        console.print(f"   Duration: {minutes} minutes\n")

        slots = asyncio.run(
            engine.find_available_slots(
                resolved.calendar_id,
                minutes,
                date_range,
                config.build_preferences(),
            )
        )
    except (SchedulingError, ValueError) as e:
        _fail(e)

    if not slots:
        console.print(
            "[yellow]⚠ No open slots found.[/yellow]\n"
            "Try a longer period or a shorter duration."
        )
        return

    console.print(f"[bold green]✓ {len(slots)} open slot(s):[/bold green]\n")
    for slot in slots:
        console.print(f"  {slot.format_display()}")
    console.print()


@app.command()
def suggest(
    leader: Annotated[str, typer.Argument(help="Leader name or calendar id")],
    config_file: ConfigOption = None,
    duration: DurationOption = None,
    preferred_day: Annotated[Optional[List[int]], typer.Option("--preferred-day", help="Preferred weekday, 0=Sunday (repeatable)")] = None,
    mock: MockOption = False,
):
    """
    Suggest the best times over the next two weeks.
    """
    try:
        config, resolved, engine = _prepare(config_file, leader, mock)
        minutes = duration if duration is not None else config.defaults.duration_minutes
        preferences = config.build_preferences(preferred_days=preferred_day or None)

        slots = asyncio.run(engine.suggest_optimal_times(resolved.calendar_id, minutes, preferences))
    except (SchedulingError, ValueError) as e:
        _fail(e)

    if not slots:
        console.print("[yellow]⚠ No open slots in the next two weeks.[/yellow]")
        return

    table = Table(
        title=f"Suggested times for {resolved.name}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", style="dim")
    table.add_column("Day", style="bold yellow")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Score", justify="right")

    for idx, slot in enumerate(slots, 1):
        table.add_row(
            str(idx),
            WEEKDAY_NAMES[weekday_index(slot.start)],
            slot.start.format("YYYY-MM-DD"),
            f"{slot.start.format('HH:mm')} - {slot.end.format('HH:mm')}",
            str(slot.score),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def check(
    leader: Annotated[str, typer.Argument(help="Leader name or calendar id")],
    start: Annotated[str, typer.Argument(help="Slot start, e.g. '2024-01-15 18:00'")],
    config_file: ConfigOption = None,
    duration: DurationOption = None,
    buffer: Annotated[Optional[int], typer.Option("--buffer", "-b", help="Buffer minutes on both sides")] = None,
    mock: MockOption = False,
):
    """
    Check whether a single slot is free.
    """
    try:
        config, resolved, engine = _prepare(config_file, leader, mock)
        minutes = duration if duration is not None else config.defaults.duration_minutes
        buffer_minutes = buffer if buffer is not None else config.defaults.buffer_minutes
        slot_start = pendulum.parse(start, tz=config.timezone)

        available = asyncio.run(
            engine.is_slot_available(resolved.calendar_id, slot_start, minutes, buffer_minutes)
        )
    except (SchedulingError, ValueError) as e:
        _fail(e)

    when = f"{slot_start.format('YYYY-MM-DD HH:mm')} ({minutes} min)"
    if available:
        console.print(f"[bold green]✓ {resolved.name} is free at {when}[/bold green]")
    else:
        console.print(f"[bold red]✗ {resolved.name} is busy at {when}[/bold red]")
        raise typer.Exit(2)


@app.command(name="next")
def next_slot(
    leader: Annotated[str, typer.Argument(help="Leader name or calendar id")],
    config_file: ConfigOption = None,
    duration: DurationOption = None,
    mock: MockOption = False,
):
    """
    Show the next open slot within 30 days.
    """
    try:
        config, resolved, engine = _prepare(config_file, leader, mock)
        minutes = duration if duration is not None else config.defaults.duration_minutes

        slot = asyncio.run(
            engine.get_next_available_slot(resolved.calendar_id, minutes, config.build_preferences())
        )
    except (SchedulingError, ValueError) as e:
        _fail(e)

    if slot is None:
        console.print("[yellow]⚠ No open slot in the next 30 days.[/yellow]")
        return

    console.print(f"[bold green]✓ Next open slot for {resolved.name}:[/bold green] {slot.format_display()}")


@app.command()
def list_leaders(
    config_file: ConfigOption = None,
):
    """
    List all configured leaders.
    """
    try:
        config = _load_config(config_file)
    except SchedulingError as e:
        _fail(e)

    if not config.leaders:
        console.print("[yellow]No leaders defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured leaders",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name (Alias)", style="bold yellow")
    table.add_column("Role")
    table.add_column("Calendar", style="dim")
    table.add_column("Active")

    for leader in config.leaders:
        table.add_row(
            leader.name,
            leader.role,
            leader.calendar_id,
            "yes" if leader.is_active else "no",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]leaderslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

"""
Main CLI application using Typer.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.credentials import CredentialStore
from ..adapters.json_store import JsonDataStore
from ..adapters.supabase_client import SupabaseClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import LessonSlotsError
from ..domain.slot_calculator import SlotCalculator
from ..logging_config import configure_logging
from ..services.availability import BookingHorizon, SlotAvailabilityService

app = typer.Typer(
    name="lessonslots",
    help="Find bookable driving lesson times",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load the config or exit with a readable error."""
    config_path = config_file or get_default_config_path()
    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fel:[/bold red] {e}")
        raise typer.Exit(1)


def _build_data_source(config: AppConfig):
    """Create the data source adapter selected in the config."""
    if config.data_file is not None:
        return JsonDataStore(path=config.data_file, timezone=config.timezone)

    supabase = config.supabase
    api_key = supabase.resolve_api_key(CredentialStore().get_api_key(supabase.url))
    if not api_key:
        console.print(
            "[bold red]Fel:[/bold red] Ingen Supabase API-nyckel hittades. "
            "Ange den i konfigurationen, kör 'lessonslots set-key' eller exportera SUPABASE_SERVICE_ROLE_KEY."
        )
        raise typer.Exit(1)

    return SupabaseClient(
        url=supabase.url,
        api_key=api_key,
        timezone=config.timezone,
        tables=supabase.tables,
        timeout=supabase.timeout_seconds,
    )


def _build_service(config: AppConfig, enforce_horizon: bool = False) -> SlotAvailabilityService:
    horizon = None
    if enforce_horizon:
        horizon = BookingHorizon(
            min_advance_hours=config.schedule.min_advance_hours,
            max_advance_days=config.schedule.max_advance_days,
        )

    return SlotAvailabilityService(
        data_source=_build_data_source(config),
        slot_calculator=SlotCalculator(step_minutes=config.schedule.slot_step_minutes),
        schedule_defaults=config.schedule,
        timezone=config.timezone,
        horizon=horizon,
    )


def _parse_now(now: Optional[str], tz: str):
    if now is None:
        return None
    try:
        return pendulum.parse(now, tz=tz)
    except ValueError as e:
        console.print(f"[red]Kunde inte tolka --now: {e}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Find bookable driving lesson times.
    """
    configure_logging(verbose=verbose)


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Day to check (YYYY-MM-DD)")],
    lesson_id: Annotated[str, typer.Argument(help="Lesson id")],
    config_file: ConfigOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Print the JSON API response body.")] = False,
    horizon: Annotated[bool, typer.Option("--horizon/--no-horizon", help="Apply the advance-booking limits.")] = False,
    now: Annotated[Optional[str], typer.Option("--now", help="Reference time for --horizon (ISO 8601).")] = None,
):
    """
    List the bookable start times of a lesson on one day.

    Examples:

        lessonslots slots 2025-03-10 lesson-60

        lessonslots slots 2025-03-10 lesson-60 --json

        lessonslots slots 2025-03-10 lesson-60 --horizon --now 2025-03-09T12:00
    """
    config = _load_config(config_file)
    service = _build_service(config, enforce_horizon=horizon)

    try:
        found = service.find_slots(date, lesson_id, now=_parse_now(now, config.timezone))
    except LessonSlotsError as e:
        console.print(f"[bold red]Fel:[/bold red] {e}")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps([slot.to_dict() for slot in found]))
        return

    if not found:
        console.print(
            "[yellow]⚠ Inga lediga tider hittades.[/yellow]\n"
            "Prova en annan dag eller en kortare lektion."
        )
        return

    table = Table(
        title=f"Lediga tider {date}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Start", style="bold yellow")
    table.add_column("Slut", style="dim")

    for slot in found:
        table.add_row(slot.start.format(), slot.end.format())

    console.print()
    console.print(table)
    console.print(f"[bold green]✓ {len(found)} lediga tider[/bold green]\n")


@app.command()
def check(
    date: Annotated[str, typer.Argument(help="Day to check (YYYY-MM-DD)")],
    lesson_id: Annotated[str, typer.Argument(help="Lesson id")],
    start_time: Annotated[str, typer.Argument(help="Requested start time (HH:MM)")],
    config_file: ConfigOption = None,
):
    """
    Check whether a lesson can still start at the given time.
    """
    config = _load_config(config_file)
    service = _build_service(config)

    try:
        available = service.is_slot_available(date, lesson_id, start_time)
    except LessonSlotsError as e:
        console.print(f"[bold red]Fel:[/bold red] {e}")
        raise typer.Exit(1)

    if available:
        console.print(f"[green]✓ {date} {start_time} är ledig[/green]")
    else:
        console.print(f"[yellow]✗ {date} {start_time} är inte längre ledig[/yellow]")
        raise typer.Exit(1)


@app.command()
def lessons(config_file: ConfigOption = None):
    """
    List the bookable lessons.
    """
    config = _load_config(config_file)
    service = _build_service(config)

    try:
        all_lessons = service.list_lessons()
    except LessonSlotsError as e:
        console.print(f"[bold red]Fel:[/bold red] {e}")
        raise typer.Exit(1)

    if not all_lessons:
        console.print("[yellow]Inga aktiva lektioner hittades.[/yellow]")
        return

    table = Table(
        title="Lektioner",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Id", style="dim")
    table.add_column("Namn", style="bold yellow")
    table.add_column("Minuter", justify="right")

    for lesson in all_lessons:
        table.add_row(lesson.id, lesson.name, str(lesson.duration_minutes))

    console.print()
    console.print(table)
    console.print()


@app.command()
def hours(config_file: ConfigOption = None):
    """
    Show the working hours and break currently in effect.
    """
    config = _load_config(config_file)
    service = _build_service(config)

    try:
        working_window, break_window = service.current_schedule()
    except LessonSlotsError as e:
        console.print(f"[bold red]Fel:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"Arbetstid: {working_window}")
    console.print(f"Rast: {break_window if break_window else 'ingen'}")
    console.print(f"Intervall: {config.schedule.slot_step_minutes} min")


@app.command()
def set_key(
    api_key: Annotated[str, typer.Option("--api-key", prompt="Supabase API key", hide_input=True)],
    config_file: ConfigOption = None,
):
    """
    Store the Supabase API key in the system keyring.
    """
    config = _load_config(config_file)
    if config.supabase is None:
        console.print("[yellow]Ingen Supabase-datakälla är konfigurerad.[/yellow]")
        raise typer.Exit(1)

    if CredentialStore().set_api_key(config.supabase.url, api_key):
        console.print("[green]✓ API-nyckeln sparades i nyckelringen.[/green]")
    else:
        console.print("[bold red]Fel:[/bold red] Nyckelringen är inte tillgänglig, nyckeln sparades inte.")
        raise typer.Exit(1)


@app.command()
def clear_key(config_file: ConfigOption = None):
    """
    Remove the stored Supabase API key.
    """
    config = _load_config(config_file)
    if config.supabase is None:
        console.print("[yellow]Ingen Supabase-datakälla är konfigurerad.[/yellow]")
        raise typer.Exit(1)

    if CredentialStore().delete_api_key(config.supabase.url):
        console.print("[green]✓ API-nyckeln togs bort.[/green]")
    else:
        console.print("[yellow]Ingen sparad API-nyckel hittades.[/yellow]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]lessonslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

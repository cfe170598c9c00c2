"""
Main CLI application using Typer.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.yaml_store import YamlAppointmentStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingSlotsError
from ..domain.models import Appointment
from ..services.booking_service import BookingService

app = typer.Typer(
    name="bookingslots",
    help="Find and book appointment slots for telemedicine professionals",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Route stdlib logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@dataclass
class CliContext:
    """Objects shared by all commands of one invocation."""
    config: AppConfig
    service: BookingService

    def now(self) -> pendulum.DateTime:
        return pendulum.now(self.config.timezone)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Telemedicine appointment availability and booking.
    """
    configure_logging(verbose)

    if ctx.invoked_subcommand == "version":
        return

    try:
        config_path = config_file or get_default_config_path()
        config = AppConfig.load_from_yaml(config_path)
        store = YamlAppointmentStore(
            config.resolve_data_file(config_path),
            default_duration=config.defaults.appointment_duration_minutes,
        )
    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    logger.debug("Using data file %s", store.path)
    service = BookingService(store, deduplicate_slots=config.defaults.deduplicate_slots)
    ctx.obj = CliContext(config=config, service=service)


def _parse_date(value: Optional[str], cli: CliContext) -> date:
    """Parse a YYYY-MM-DD option, defaulting to today in the configured timezone."""
    if value is None:
        return cli.now().date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=cli.config.timezone).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)


def _run(coro):
    """Run a service coroutine and turn domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except (BookingSlotsError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _print_appointment(title: str, appointment: Appointment) -> None:
    console.print(Panel.fit(
        f"[bold]Appointment:[/bold] {appointment.id}\n"
        f"[bold]Professional:[/bold] {appointment.professional_id}\n"
        f"[bold]Patient:[/bold] {appointment.patient_name}\n"
        f"[bold]When:[/bold] {appointment.date.strftime('%d/%m/%Y')} {appointment.time} hs\n"
        f"[bold]Status:[/bold] {appointment.status.value}",
        title=title
    ))


@app.command()
def professionals(ctx: typer.Context):
    """
    List all professionals in the data file.
    """
    cli: CliContext = ctx.obj
    items = _run(cli.service.list_professionals())

    if not items:
        console.print("[yellow]No professionals defined in the data file.[/yellow]")
        return

    table = Table(
        title="Professionals",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("Specialty", style="dim")
    table.add_column("Duration", justify="right")
    table.add_column("Status")

    for professional in items:
        table.add_row(
            professional.id,
            professional.name,
            professional.specialty,
            f"{professional.appointment_duration} min",
            professional.status.value
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def days(
    ctx: typer.Context,
    professional_id: Annotated[str, typer.Argument(help="Professional id")],
    start: Annotated[Optional[str], typer.Option("--start", help="First date (YYYY-MM-DD). Defaults to today.")] = None,
    window: Annotated[Optional[int], typer.Option("--days", "-n", min=1, help="Number of days to check")] = None,
):
    """
    Show the dates a professional can be booked on.
    """
    cli: CliContext = ctx.obj
    today = cli.now().date()
    first = _parse_date(start, cli)
    count = window or cli.config.defaults.booking_window_days
    last = first + timedelta(days=count - 1)

    bookable = _run(cli.service.bookable_days(professional_id, first, last, today))

    if not bookable:
        console.print(
            f"[yellow]⚠ No bookable days between {first.strftime('%d/%m/%Y')} "
            f"and {last.strftime('%d/%m/%Y')}.[/yellow]"
        )
        return

    console.print(f"[bold green]✓ {len(bookable)} bookable day(s):[/bold green]\n")
    for day in bookable:
        console.print(f"  {day.strftime('%A %d/%m/%Y')}")
    console.print()


@app.command()
def slots(
    ctx: typer.Context,
    professional_id: Annotated[str, typer.Argument(help="Professional id")],
    on_date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD). Defaults to today.")] = None,
):
    """
    Show the times that can currently be booked on a date.
    """
    cli: CliContext = ctx.obj
    day = _parse_date(on_date, cli)
    available = _run(cli.service.available_slots(professional_id, day, cli.now()))

    if not available:
        console.print(f"[yellow]⚠ No available slots on {day.strftime('%d/%m/%Y')}.[/yellow]")
        return

    console.print(
        f"[bold green]✓ {len(available)} available slot(s) on "
        f"{day.strftime('%d/%m/%Y')}:[/bold green]\n"
    )
    console.print("  " + "  ".join(available))
    console.print()


@app.command()
def book(
    ctx: typer.Context,
    professional_id: Annotated[str, typer.Argument(help="Professional id")],
    time: Annotated[str, typer.Argument(help="Slot time (HH:MM)")],
    on_date: Annotated[str, typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")],
    patient_id: Annotated[str, typer.Option("--patient-id", help="Patient id")],
    patient_name: Annotated[str, typer.Option("--patient-name", help="Patient display name")],
):
    """
    Book an available slot.
    """
    cli: CliContext = ctx.obj
    day = _parse_date(on_date, cli)
    appointment = _run(cli.service.book(
        professional_id=professional_id,
        on_date=day,
        time=time,
        patient_id=patient_id,
        patient_name=patient_name,
        now=cli.now()
    ))
    _print_appointment("✓ Appointment confirmed", appointment)


@app.command()
def reschedule(
    ctx: typer.Context,
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    time: Annotated[str, typer.Argument(help="New slot time (HH:MM)")],
    on_date: Annotated[str, typer.Option("--date", "-d", help="New date (YYYY-MM-DD)")],
):
    """
    Move a confirmed appointment to another available slot.
    """
    cli: CliContext = ctx.obj
    day = _parse_date(on_date, cli)
    appointment = _run(cli.service.reschedule(
        appointment_id,
        on_date=day,
        time=time,
        now=cli.now()
    ))
    _print_appointment("✓ Appointment rescheduled", appointment)


@app.command()
def cancel(
    ctx: typer.Context,
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
):
    """
    Cancel a confirmed appointment.
    """
    cli: CliContext = ctx.obj
    appointment = _run(cli.service.cancel(appointment_id))
    _print_appointment("✓ Appointment cancelled", appointment)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

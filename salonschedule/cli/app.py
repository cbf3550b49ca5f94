"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.api_client import ScheduleApiClient
from ..adapters.authenticator import ApiAuthenticator
from ..adapters.memory_store import InMemoryScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.dates import (
    date_range,
    day_name,
    format_date,
    format_time,
    month_grid,
    parse_clock_time,
    to_calendar_date,
)
from ..domain.exceptions import ScheduleError
from ..domain.grid import GridBuilder, SlotState
from ..domain.models import BatchResult, BreakTemplate, DaySchedule, ResolvedDay, TimeTemplate
from ..domain.policy import AccessPolicy
from ..services.batch_editor import BatchEditService
from ..services.schedule_store import ScheduleStoreProtocol
from ..services.schedule_view import ScheduleViewService

app = typer.Typer(
    name="salonschedule",
    help="View and edit salon employee work schedules",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use the offline JSON store and skip authentication."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]

SLOT_SYMBOLS = {
    SlotState.AVAILABLE: "[green]■[/green]",
    SlotState.BLOCKED: "[yellow]▨[/yellow]",
    SlotState.OUTSIDE_HOURS: "[dim]·[/dim]",
    SlotState.DAY_OFF: "[dim]–[/dim]",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    """Load the config; mock mode runs on defaults when no file exists."""
    config_path = config_file or get_default_config_path()
    if mock and config_file is None and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _build_store(config: AppConfig, mock: bool) -> ScheduleStoreProtocol:
    if mock:
        return InMemoryScheduleStore(data_file=config.mock_data_file)

    authenticator = ApiAuthenticator(
        base_url=config.api.base_url,
        email=config.api.email,
        timeout=config.api.timeout_seconds,
    )
    access_token = authenticator.get_access_token()
    return ScheduleApiClient(
        base_url=config.api.base_url,
        access_token=access_token,
        timeout=config.api.timeout_seconds,
    )


def _build_editor(config: AppConfig, store: ScheduleStoreProtocol) -> BatchEditService:
    return BatchEditService(
        store=store,
        policy=AccessPolicy(config.schedule.elevated_roles),
        step_minutes=config.schedule.time_step_minutes,
        default_break_reason=config.schedule.default_break_reason,
    )


def _persist_mock(store: ScheduleStoreProtocol) -> None:
    """Write offline changes back so the next invocation sees them."""
    if isinstance(store, InMemoryScheduleStore) and store.data_file is not None:
        store.save_to_file()


def _parse_dates(values: List[str]) -> List[pendulum.Date]:
    """
    Parse date arguments; ``FROM..TO`` expands to every date in between.
    """
    dates: List[pendulum.Date] = []
    for value in values:
        if ".." in value:
            start, end = value.split("..", 1)
            dates.extend(date_range(start, end))
        else:
            dates.append(to_calendar_date(value))
    return dates


def _parse_break(value: str, reason: Optional[str]) -> BreakTemplate:
    """Parse ``HH:MM-HH:MM`` into a break."""
    try:
        start, end = value.split("-", 1)
    except ValueError:
        raise typer.BadParameter(f"Break must look like 13:00-14:00, got '{value}'") from None
    return BreakTemplate(start_time=parse_clock_time(start), end_time=parse_clock_time(end), reason=reason)


def _print_days(resolved_days: List[ResolvedDay], title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Day")
    table.add_column("Hours")
    table.add_column("Breaks")
    table.add_column("Source", style="dim")

    for resolved in resolved_days:
        if resolved.is_working_day:
            hours = f"{format_time(resolved.start_time)} – {format_time(resolved.end_time)}"
        else:
            hours = "[dim]day off[/dim]"
        breaks = ", ".join(
            f"{format_time(block.start_time)}–{format_time(block.end_time)}" for block in resolved.blocks
        )
        source = "exception" if resolved.source_is_exception else "weekly rule"
        table.add_row(format_date(resolved.date), day_name(resolved.date), hours, breaks or "-", source)

    console.print()
    console.print(table)


def _print_timeline(resolved_days: List[ResolvedDay], builder: GridBuilder) -> None:
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Hour", style="dim")
    for resolved in resolved_days:
        table.add_column(day_name(resolved.date), justify="center")

    columns = [builder.slot_states(resolved) for resolved in resolved_days]
    for row_index, (hour, _) in enumerate(columns[0]):
        cells = [SLOT_SYMBOLS[column[row_index][1]] for column in columns]
        table.add_row(f"{hour:02d}:00", *cells)

    console.print(table)
    console.print("[dim]■ available  ▨ break  · outside hours  – day off[/dim]\n")


def _print_batch_result(result: BatchResult, action: str) -> None:
    if result.succeeded_dates:
        console.print(
            f"[bold green]✓ {action}: {len(result.succeeded_dates)} date(s)[/bold green] "
            + ", ".join(format_date(day) for day in result.succeeded_dates)
        )

    if result.failures:
        table = Table(title="Failed dates", show_header=True, header_style="bold red")
        table.add_column("Date", style="bold")
        table.add_column("Error")
        table.add_column("Rolled back")
        for failure in result.failures:
            table.add_row(format_date(failure.date), failure.error, "yes" if failure.rolled_back else "no")
        console.print(table)


@app.command()
def week(
    employee_id: Annotated[str, typer.Argument(help="Employee id")],
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Any date of the week (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Show the resolved schedule for one week (Monday–Sunday).
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        store = _build_store(config, mock)
        view = ScheduleViewService(store)

        anchor = to_calendar_date(day) if day else pendulum.today().date()
        resolved_days = view.load_week(employee_id, anchor)

        _print_days(resolved_days, f"Week of {format_date(resolved_days[0].date)} | {employee_id}")
        _print_timeline(resolved_days, GridBuilder(config.grid.to_window()))

    except (FileNotFoundError, ValueError, ScheduleError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def month(
    employee_id: Annotated[str, typer.Argument(help="Employee id")],
    month_value: Annotated[Optional[str], typer.Option("--month", "-m", help="Month as YYYY-MM")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Show a month calendar with working hours per day.
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        store = _build_store(config, mock)
        view = ScheduleViewService(store)

        if month_value:
            anchor = to_calendar_date(f"{month_value}-01")
        else:
            anchor = pendulum.today().date()

        resolved_days = view.load_month(employee_id, anchor.year, anchor.month)
        by_date = {resolved.date: resolved for resolved in resolved_days}

        table = Table(
            title=f"{anchor.format('MMMM YYYY')} | {employee_id}",
            show_header=True,
            header_style="bold cyan",
            show_lines=True,
        )
        for name in ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]:
            table.add_column(name, justify="center")

        for week_cells in month_grid(anchor.year, anchor.month):
            row = []
            for cell in week_cells:
                if cell is None:
                    row.append("")
                    continue
                resolved = by_date[cell]
                if resolved.is_working_day:
                    hours = f"{format_time(resolved.start_time)}-{format_time(resolved.end_time)}"
                    row.append(f"[bold]{cell.day}[/bold]\n[green]{hours}[/green]")
                else:
                    row.append(f"[dim]{cell.day}[/dim]")
            table.add_row(*row)

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, ScheduleError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("apply-template")
def apply_template(
    employee_id: Annotated[str, typer.Argument(help="Employee id")],
    dates: Annotated[List[str], typer.Argument(help="Dates (YYYY-MM-DD) or ranges FROM..TO")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start of working hours (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End of working hours (HH:MM)")] = None,
    breaks: Annotated[Optional[List[str]], typer.Option("--break", "-b", help="Break as HH:MM-HH:MM (repeatable)")] = None,
    reason: Annotated[Optional[str], typer.Option("--reason", help="Reason stored on each break")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Apply one working-hours template with breaks to the selected dates.

    Examples:

        salonschedule apply-template emp-1 2026-02-16 2026-02-18 --start 10:00 --end 20:00

        salonschedule apply-template emp-1 2026-02-16..2026-02-20 -b 13:00-14:00
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        default = config.schedule.default_template()
        template = TimeTemplate(
            start_time=parse_clock_time(start) if start else default.start_time,
            end_time=parse_clock_time(end) if end else default.end_time,
        )
        break_templates = [_parse_break(value, reason) for value in breaks or []]
        selected = _parse_dates(dates)

        store = _build_store(config, mock)
        editor = _build_editor(config, store)

        result = editor.apply_template(
            actor=config.identity.to_actor(),
            employee_id=employee_id,
            dates=selected,
            template=template,
            breaks=break_templates,
        )
        _persist_mock(store)

    except (FileNotFoundError, ValueError, ScheduleError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _print_batch_result(result, "Template applied")
    if result.failures:
        raise typer.Exit(2)


@app.command("days-off")
def days_off(
    employee_id: Annotated[str, typer.Argument(help="Employee id")],
    dates: Annotated[List[str], typer.Argument(help="Dates (YYYY-MM-DD) or ranges FROM..TO")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Mark dates as days off and remove their breaks.
    """
    _run_day_batch(employee_id, dates, config_file, mock, verbose, revert=False)


@app.command("revert")
def revert(
    employee_id: Annotated[str, typer.Argument(help="Employee id")],
    dates: Annotated[List[str], typer.Argument(help="Dates (YYYY-MM-DD) or ranges FROM..TO")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Remove date overrides and breaks so the dates follow the weekly rule again.
    """
    _run_day_batch(employee_id, dates, config_file, mock, verbose, revert=True)


def _run_day_batch(
    employee_id: str,
    dates: List[str],
    config_file: Optional[Path],
    mock: bool,
    verbose: bool,
    revert: bool,
) -> None:
    _configure_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        selected = _parse_dates(dates)
        store = _build_store(config, mock)
        editor = _build_editor(config, store)

        operation = editor.revert_to_rule if revert else editor.make_days_off
        result = operation(
            actor=config.identity.to_actor(),
            employee_id=employee_id,
            dates=selected,
        )
        _persist_mock(store)

    except (FileNotFoundError, ValueError, ScheduleError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _print_batch_result(result, "Reverted" if revert else "Marked as day off")
    if result.failures:
        raise typer.Exit(2)


@app.command("set-day")
def set_day(
    employee_id: Annotated[str, typer.Argument(help="Employee id")],
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start of working hours (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End of working hours (HH:MM)")] = None,
    off: Annotated[bool, typer.Option("--off", help="Mark as a day off")] = False,
    recurring: Annotated[bool, typer.Option("--recurring", help="Change the weekly rule for this weekday in every week")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation for recurring changes")] = False,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Edit a single day, either for this date only or as a recurring weekly change.
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file, mock)
        target = to_calendar_date(day)

        if off:
            schedule = DaySchedule(is_working_day=False)
        else:
            schedule = DaySchedule(
                is_working_day=True,
                start_time=parse_clock_time(start) if start else None,
                end_time=parse_clock_time(end) if end else None,
            )

        if recurring and not yes:
            typer.confirm(
                f"This changes every {day_name(target, full=True)} for {employee_id}, not just {format_date(target)}. Continue?",
                abort=True,
            )

        store = _build_store(config, mock)
        editor = _build_editor(config, store)
        editor.set_day(
            actor=config.identity.to_actor(),
            employee_id=employee_id,
            day=target,
            schedule=schedule,
            as_exception=not recurring,
        )
        _persist_mock(store)

    except (FileNotFoundError, ValueError, ScheduleError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    scope = f"every {day_name(target, full=True)}" if recurring else format_date(target)
    console.print(f"[green]✓ Schedule updated for {scope}[/green]")


@app.command()
def login(
    password: Annotated[str, typer.Option(prompt=True, hide_input=True, help="Account password")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Log in to the salon API and cache the access token.
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file, mock=False)
        authenticator = ApiAuthenticator(
            base_url=config.api.base_url,
            email=config.api.email,
            timeout=config.api.timeout_seconds,
        )
        token = authenticator.login(password)

        client = ScheduleApiClient(config.api.base_url, token, config.api.timeout_seconds)
        user_info = client.test_connection()

        console.print(f"[bold green]✓ Logged in as {config.api.email}[/bold green]")
        if user_info.get("companyId"):
            console.print(f"  Company: {user_info['companyId']}")
        if authenticator.insecure_storage_warning:
            console.print(f"[yellow]⚠ {authenticator.insecure_storage_warning}[/yellow]")

    except (FileNotFoundError, ValueError, ScheduleError) as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def clear_cache(
    config_file: ConfigOption = None,
):
    """
    Clear the authentication token cache.
    """
    try:
        config = _load_config(config_file, mock=False)

        authenticator = ApiAuthenticator(
            base_url=config.api.base_url,
            email=config.api.email,
        )

        authenticator.clear_cache()
        console.print("\n[green]✓ Token cache cleared.[/green]")
        console.print("You will need to log in again on the next call.\n")

    except (FileNotFoundError, ValueError, ScheduleError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]salonschedule[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

"""Main CLI application for the host telemetry agent.

Usage:
    python -m hoststat.apps.main run -url https://collector/ingest -token TOKEN [-freq 5]
    python -m hoststat.apps.main snapshot
    python -m hoststat.apps.main history [--limit 10]
    python -m hoststat.apps.main config-show
"""

import logging
import sys
from typing import Optional
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from hoststat.apps.agent import run_agent
from hoststat.core.config import AgentSettings
from hoststat.core.exceptions import StartupError
from hoststat.monitoring.collector import SnapshotCollector
from hoststat.sources.system import SystemMetricsSource
from hoststat.storage.store import open_store
from hoststat.utils.logging import setup_logging

# Setup logging (rich handler with cycle-safe format)
setup_logging(level=logging.INFO)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Host telemetry agent - collect, store and report system snapshots")
console = Console()


def _set_log_level(log_level: str) -> None:
    try:
        logging.getLogger().setLevel(getattr(logging, log_level.upper()))
    except Exception:
        logging.getLogger().setLevel(logging.INFO)


def _load_settings(**overrides) -> AgentSettings:
    try:
        return AgentSettings.from_env(**overrides)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        sys.exit(1)


def _mask(secret: str) -> str:
    if not secret:
        return "Not set"
    if len(secret) <= 4:
        return "****"
    return f"{secret[:2]}****{secret[-2:]}"


@app.command(help="Run the agent. Example:\n  python -m hoststat.apps.main run -url https://collector.example/ingest -token TOKEN -freq 5")
def run(
    url: Optional[str] = typer.Option(None, "--url", "-url", help="URL to send reports to (required)"),
    token: Optional[str] = typer.Option(None, "--token", "-token", help="Authentication token (required)"),
    freq: Optional[int] = typer.Option(None, "--freq", "-freq", help="Reporting frequency in minutes (default 5)"),
    db: Optional[str] = typer.Option(None, "--db", help="SQLite database path (default ./server_monitor.db)"),
    verify_tls: bool = typer.Option(False, "--verify-tls", help="Verify the collector's TLS certificate"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP request timeout in seconds (default: none)"),
    cycles: Optional[int] = typer.Option(None, "--cycles", min=1, help="Stop after N cycles (default: run forever)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level: DEBUG|INFO|WARNING|ERROR"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """Run the telemetry agent."""
    settings = _load_settings(
        url=url,
        token=token,
        freq_minutes=freq,
        db_path=db,
        verify_tls=True if verify_tls else None,
        request_timeout_seconds=timeout,
        log_level=log_level,
        log_file=log_file,
    )

    if settings.log_file:
        setup_logging(log_file=settings.log_file)
    _set_log_level(settings.log_level)

    try:
        run_agent(settings, max_cycles=cycles)
    except StartupError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Agent stopped by user[/yellow]")


@app.command(help="Collect one snapshot and print it as JSON (nothing is stored or sent).")
def snapshot():
    collector = SnapshotCollector(SystemMetricsSource())
    console.print_json(collector.collect().to_json())


@app.command(help="Show the most recent stored snapshots.")
def history(
    db: Optional[str] = typer.Option(None, "--db", help="SQLite database path"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of rows to show"),
):
    """Show stored snapshots, newest first."""
    settings = _load_settings(db_path=db)
    try:
        with open_store(settings.store.db_path) as store:
            records = store.recent(limit)
            total = store.count()
    except StartupError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error reading history: {e}[/red]")
        logger.exception("History error")
        sys.exit(1)

    table = Table(title=f"Stored Snapshots ({len(records)} of {total})", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Recorded", style="cyan")
    table.add_column("Memory Used", style="magenta")
    table.add_column("Swap Used", style="magenta")
    table.add_column("Partitions", style="magenta")
    table.add_column("Cores", style="magenta")
    table.add_column("Avg CPU", style="magenta")
    table.add_column("GPU", style="magenta")

    for record in records:
        try:
            memory = record.memory
            swap = record.swap
            cpu = record.cpu
            partitions = str(len(record.storage))
        except (ValueError, TypeError) as e:
            logger.warning(f"Record {record.id} has unreadable columns: {e}")
            table.add_row(str(record.id), record.recorded_at, "?", "?", "?", "?", "?", "?")
            continue
        avg_cpu = (
            f"{sum(cpu.usage_per_core) / len(cpu.usage_per_core):.1f}%" if cpu.usage_per_core else "n/a"
        )
        gpu = f"{record.gpu_usage:.1f}%" if record.gpu_usage >= 0 else "n/a"
        table.add_row(
            str(record.id),
            record.recorded_at,
            f"{memory.used} / {memory.total}",
            f"{swap.used} / {swap.total}",
            partitions,
            str(cpu.total_cores),
            avg_cpu,
            gpu,
        )

    console.print(table)


@app.command(help="Show effective configuration (after environment and .env).")
def config_show():
    settings = _load_settings()
    table = Table(title="Effective Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("URL", settings.url or "Not set")
    table.add_row("Token", _mask(settings.token))
    table.add_row("Frequency (min)", str(settings.freq_minutes))
    table.add_row("Database", settings.db_path)
    table.add_row("Verify TLS", "Yes" if settings.verify_tls else "No")
    table.add_row(
        "Request Timeout",
        f"{settings.request_timeout_seconds}s" if settings.request_timeout_seconds else "None",
    )
    table.add_row("Log Level", settings.log_level)
    console.print(table)


if __name__ == "__main__":
    app()

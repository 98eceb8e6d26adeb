"""Agent run loop.

This module drives the sequential telemetry cycle:
- Collect one snapshot from the host
- Persist it to the local store
- Report it to the remote collector
- Sleep the configured interval, then start over

Persistence and reporting always both run; a failure in one never skips
the other. Cycles never overlap and missed intervals are not caught up.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
from rich.console import Console
from rich.panel import Panel

from hoststat.core.config import AgentSettings
from hoststat.core.exceptions import PersistenceError
from hoststat.monitoring.collector import SnapshotCollector
from hoststat.reporting.reporter import RemoteReporter, ReportResult
from hoststat.sources.system import SystemMetricsSource
from hoststat.storage.store import SnapshotStore, open_store

logger = logging.getLogger(__name__)
console = Console()


class SchedulerState(str, Enum):
    """Scheduler state enumeration."""

    IDLE = "idle"
    COLLECTING = "collecting"
    PERSISTING = "persisting"
    REPORTING = "reporting"
    SLEEPING = "sleeping"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one cycle."""

    cycle: int
    record_id: Optional[int]
    report: ReportResult

    @property
    def persisted(self) -> bool:
        return self.record_id is not None


class Scheduler:
    """Runs collect -> persist -> report -> sleep until the process stops."""

    def __init__(
        self,
        collector: SnapshotCollector,
        store: SnapshotStore,
        reporter: RemoteReporter,
        interval_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize scheduler.

        Args:
            collector: Snapshot collector
            store: Local store (already opened, schema ensured)
            reporter: Remote reporter
            interval_seconds: Fixed sleep after every cycle
            sleep: Sleep function
        """
        self.collector = collector
        self.store = store
        self.reporter = reporter
        self.interval_seconds = interval_seconds
        self.sleep = sleep
        self.state = SchedulerState.IDLE
        self.cycles_completed = 0

    def run_cycle(self) -> CycleResult:
        """Run one collect/persist/report cycle."""
        cycle = self.cycles_completed + 1
        extra = {"cycle": cycle}

        self.state = SchedulerState.COLLECTING
        snapshot = self.collector.collect()
        logger.debug(f"Collected snapshot at {snapshot.timestamp.isoformat()}", extra=extra)

        self.state = SchedulerState.PERSISTING
        record_id = None
        try:
            record_id = self.store.append(snapshot)
            logger.debug(f"Stored snapshot as record {record_id}", extra=extra)
        except PersistenceError as e:
            logger.error(str(e), extra=extra)

        self.state = SchedulerState.REPORTING
        report = self.reporter.send(snapshot)

        self.state = SchedulerState.IDLE
        self.cycles_completed = cycle
        return CycleResult(cycle=cycle, record_id=record_id, report=report)

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Run cycles until interrupted, or ``max_cycles`` cycles.

        The interval is slept after every cycle except a bounded run's last.
        """
        while max_cycles is None or self.cycles_completed < max_cycles:
            self.run_cycle()
            if max_cycles is not None and self.cycles_completed >= max_cycles:
                break
            self.state = SchedulerState.SLEEPING
            self.sleep(self.interval_seconds)
            self.state = SchedulerState.IDLE


def run_agent(settings: AgentSettings, max_cycles: Optional[int] = None) -> None:
    """Run the agent with the given settings.

    Args:
        settings: Agent settings
        max_cycles: Stop after this many cycles (None = run forever)

    Raises:
        StartupError: If configuration is incomplete or the store is unusable
    """
    reporting = settings.reporting
    store = open_store(settings.store.db_path)

    console.print(Panel.fit("Host Telemetry Agent", style="bold green"))
    console.print(f"[dim][CONFIG] Endpoint: {reporting.url}[/dim]")
    console.print(f"[dim][CONFIG] Frequency: {settings.freq_minutes} min[/dim]")
    console.print(f"[dim][CONFIG] Store: {settings.store.db_path}[/dim]")
    if not reporting.verify_tls:
        logger.warning("TLS certificate verification is disabled for the reporting endpoint")
    if reporting.timeout_seconds is None:
        logger.info("Reporting requests have no timeout")

    reporter = None
    try:
        reporter = RemoteReporter(reporting)
        scheduler = Scheduler(
            collector=SnapshotCollector(SystemMetricsSource()),
            store=store,
            reporter=reporter,
            interval_seconds=settings.interval_seconds,
        )
        scheduler.run(max_cycles=max_cycles)
    finally:
        if reporter is not None:
            reporter.close()
        store.close()

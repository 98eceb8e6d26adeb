"""hoststat - host telemetry agent.

Collects local resource snapshots, records them in SQLite and reports them
to a remote collector.
"""

__version__ = "0.1.0"

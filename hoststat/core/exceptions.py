"""Exception hierarchy for the agent.

Only StartupError is fatal. The others are raised at the point of failure
and recovered by the component one level up (collector, scheduler).
"""


class HoststatError(Exception):
    """Base class for all agent errors."""


class StartupError(HoststatError):
    """Missing required configuration or an unusable local store."""


class CollectionError(HoststatError):
    """A single metrics read failed."""


class PersistenceError(HoststatError):
    """Writing a snapshot to the local store failed."""


class ReportError(HoststatError):
    """Sending a snapshot to the remote collector failed."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code

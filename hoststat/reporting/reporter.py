"""Remote reporter for snapshot delivery.

This module POSTs the full snapshot as one JSON document to the collector
endpoint with bearer authentication. Exactly HTTP 200 counts as success;
anything else is logged and returned as a failed result. There is no retry.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from hoststat.core.config import ReportingConfig
from hoststat.core.constants import CONTENT_TYPE_JSON, SUCCESS_STATUS_CODE
from hoststat.core.exceptions import ReportError
from hoststat.core.models import SystemSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportResult:
    """Outcome of one report attempt."""

    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class RemoteReporter:
    """Sends snapshots to the remote collector."""

    def __init__(self, config: ReportingConfig, transport: Optional[httpx.BaseTransport] = None):
        """Initialize reporter.

        Args:
            config: Reporting configuration with URL and token
            transport: Optional httpx transport (tests)
        """
        self.config = config
        self.url = config.url

        # Certificate verification is off unless explicitly enabled
        self.client = httpx.Client(
            verify=config.verify_tls,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers={
                "Authorization": f"Bearer {config.token}",
                "Content-Type": CONTENT_TYPE_JSON,
            },
            transport=transport,
        )

    @staticmethod
    def encode(snapshot: SystemSnapshot) -> str:
        """Serialize the whole snapshot into the report body."""
        return snapshot.to_json()

    def post(self, snapshot: SystemSnapshot) -> int:
        """POST a snapshot.

        Args:
            snapshot: Snapshot to send

        Returns:
            HTTP status code (always 200)

        Raises:
            ReportError: On transport failure or a non-200 response
        """
        body = self.encode(snapshot)
        try:
            response = self.client.post(self.url, content=body.encode("utf-8"))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ReportError(f"Error sending report: {e}") from e

        if response.status_code != SUCCESS_STATUS_CODE:
            raise ReportError(f"Unexpected status code: {response.status_code}", status_code=response.status_code)
        return response.status_code

    def send(self, snapshot: SystemSnapshot) -> ReportResult:
        """Send a snapshot, logging instead of raising on failure.

        Returns:
            Report result
        """
        try:
            status = self.post(snapshot)
        except ReportError as e:
            logger.error(str(e))
            return ReportResult(success=False, status_code=e.status_code, error=str(e))

        logger.info("Report sent successfully")
        return ReportResult(success=True, status_code=status)

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

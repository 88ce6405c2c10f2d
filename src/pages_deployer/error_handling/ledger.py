"""In-memory deployment ledger."""

from loguru import logger

from .models import DeploymentRecord


class DeploymentLedger:
    """Append-only record of deployment attempts, oldest first.

    The ledger lives as long as its owner; nothing is persisted.
    """

    def __init__(self):
        self._records: list[DeploymentRecord] = []

    def record(self, deployment_id: str, url: str, success: bool) -> DeploymentRecord:
        entry = DeploymentRecord(id=deployment_id, url=url, success=success)
        self._records.append(entry)
        logger.debug("Recorded deployment {} (success={})", deployment_id, success)
        return entry

    def history(self) -> list[DeploymentRecord]:
        """Return a copy of the ledger, oldest first."""
        return list(self._records)

    def rollback_target(self) -> DeploymentRecord | None:
        """Most recent successful deployment before the latest entry.

        The latest entry is the current (or just failed) deployment and is
        never its own rollback target.
        """
        for entry in reversed(self._records[:-1]):
            if entry.success:
                return entry
        return None

"""Reporting abstractions for handshake-testkit.

Contains:
- Report ABC: Base class for all reports
- HandshakeReport: Snapshot of a fake server run
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from common.protocol import Outcome, Progress


class Report(ABC):
    """Abstract base class for test reports."""

    @abstractmethod
    def print(self) -> None:
        """Print the report to stdout."""
        pass

    @abstractmethod
    def success(self) -> bool:
        """Return True if the report indicates success."""
        pass


@dataclass
class HandshakeReport(Report):
    """Snapshot of a fake server run.

    error is set only for PROTOCOL_VIOLATION, IO_ERROR and ERROR outcomes.
    """

    port: int
    progress: Progress
    outcome: Outcome
    error: Exception | None = None

    @property
    def protocol_failure(self) -> bool:
        return self.outcome.is_protocol_failure

    def print(self) -> None:
        """Print the handshake report."""
        status = f"Handshake @{self.port}: {self.outcome.name} (progress={self.progress.name})"
        if self.error is not None:
            status += f" [{type(self.error).__name__}: {self.error}]"
        print(status)

    def success(self) -> bool:
        """Return True if the handshake ran to completion."""
        return self.outcome == Outcome.COMPLETED

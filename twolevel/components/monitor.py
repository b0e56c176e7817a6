"""
Monitorable capability

Components that can dump a human-readable snapshot of their state.
"""

from abc import ABC, abstractmethod


class Monitorable(ABC):
    """Exposes a read-only textual snapshot for debugging."""

    @abstractmethod
    def monitor(self) -> str:
        """Return a snapshot of the current state. Never mutates."""
        pass

"""
Run state store interface for handing the cursor from one run to the next.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import RunState


class RunStateStore(ABC):
    """
    Abstract base class for run state stores.

    A run state record holds the cursor produced by the last run, keyed
    by a name so several ingest jobs can share one store.
    """

    @abstractmethod
    def load(self, name: str) -> Optional[RunState]:
        """
        Load the run state for `name`.

        Returns:
            RunState if one was saved, None otherwise
        """
        pass

    @abstractmethod
    def save(self, name: str, state: RunState) -> None:
        """Insert or replace the run state for `name`."""
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass

"""
Entity store interface.

The comparison engine never talks to a database directly. It reads robot
rows and appends interaction events through this interface, so the hosted
Supabase store and the in-memory store are interchangeable.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.interaction import InteractionEvent


@dataclass
class RobotFilter:
    """Eligibility filter for robot selection."""
    status: Optional[str] = "active"
    category: Optional[str] = None
    manufacturer_id: Optional[str] = None
    exclude_ids: list[str] = field(default_factory=list)

    def matches(self, row: dict) -> bool:
        """Whether a raw robot row satisfies this filter."""
        if self.status is not None and row.get("status") != self.status:
            return False
        if self.category is not None and row.get("category") != self.category:
            return False
        if self.manufacturer_id is not None and str(row.get("manufacturer_id")) != self.manufacturer_id:
            return False
        return str(row.get("id")) not in self.exclude_ids


class EntityStore(ABC):
    """
    Read access to robots and append access to comparison events.

    Implementations raise DependencyFailureError / DependencyTimeoutError when
    the backing store is unavailable, and EntityNotFoundError when an event
    references a robot that does not exist.
    """

    backend_name: str = "unknown"

    @abstractmethod
    def find_by_id(
        self,
        robot_id: str,
        include_specs: bool = False,
        include_media: bool = False,
    ) -> Optional[dict]:
        """Return the raw robot row (with requested relations), or None."""
        ...

    @abstractmethod
    def find_many(
        self,
        robot_filter: RobotFilter,
        limit: Optional[int] = None,
        random_order: bool = False,
    ) -> list[dict]:
        """Return robot rows matching the filter, shuffled if random_order."""
        ...

    @abstractmethod
    def insert_event(self, event: InteractionEvent) -> str:
        """Append an interaction event and return its assigned id."""
        ...

    @abstractmethod
    def fetch_events(
        self,
        since: Optional[datetime] = None,
        robot_id: Optional[str] = None,
    ) -> list[InteractionEvent]:
        """Return events created at or after ``since`` that involve ``robot_id``."""
        ...

    def close(self):
        """Release any held resources."""

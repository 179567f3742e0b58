"""
Process-local entity store.

Holds robot rows and interaction events in memory behind a lock. Used for
local development (optionally seeded from a JSON file) and as the fake store
in tests.
"""
import copy
import json
import logging
import random
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from models.interaction import InteractionEvent
from security.exceptions import ConfigurationError, EntityNotFoundError
from store.base import EntityStore, RobotFilter

logger = logging.getLogger(__name__)


class InMemoryStore(EntityStore):
    """
    In-memory implementation of EntityStore.

    Robot rows are kept exactly as loaded. ``specifications`` and ``media``
    keys are stripped from returned rows unless explicitly requested, which
    mirrors how the hosted store only embeds relations that were selected.
    """

    backend_name = "memory"

    def __init__(self, robots: Optional[list[dict]] = None, rng: Optional[random.Random] = None):
        self._lock = threading.RLock()
        self._robots: dict[str, dict] = {}
        self._events: list[InteractionEvent] = []
        self._rng = rng or random.Random()
        for row in robots or []:
            self.add_robot(row)

    @classmethod
    def from_json_file(cls, path: Path) -> "InMemoryStore":
        """
        Load robot rows from a JSON file (a list, or an object with a "robots" list).

        Raises:
            ConfigurationError: If the file is missing or not valid JSON
        """
        try:
            with open(path, 'r') as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot load seed file {path}: {e}")

        rows = payload.get("robots", []) if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            raise ConfigurationError(f"Seed file {path} must contain a list of robots")

        logger.info("Seeding in-memory store with %d robots from %s", len(rows), path)
        return cls(rows)

    def add_robot(self, row: dict):
        """Insert or replace a robot row (keyed by its id)."""
        if "id" not in row:
            raise ValueError("Robot row must have an id")
        with self._lock:
            self._robots[str(row["id"])] = copy.deepcopy(row)

    def robot_count(self) -> int:
        with self._lock:
            return len(self._robots)

    def event_count(self) -> int:
        with self._lock:
            return len(self._events)

    def _project(self, row: dict, include_specs: bool, include_media: bool) -> dict:
        result = copy.deepcopy(row)
        if not include_specs:
            result.pop("specifications", None)
        if not include_media:
            result.pop("media", None)
        return result

    def find_by_id(self, robot_id, include_specs=False, include_media=False):
        with self._lock:
            row = self._robots.get(str(robot_id))
            if row is None:
                return None
            return self._project(row, include_specs, include_media)

    def find_many(self, robot_filter, limit=None, random_order=False):
        with self._lock:
            rows = [
                self._project(row, False, False)
                for row in self._robots.values()
                if robot_filter.matches(row)
            ]

        if random_order:
            self._rng.shuffle(rows)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert_event(self, event):
        with self._lock:
            missing = [
                robot_id for robot_id in (event.robot_a_id, event.robot_b_id)
                if robot_id not in self._robots
            ]
            if missing:
                raise EntityNotFoundError(
                    f"Robot not found: {', '.join(missing)}",
                    entity_ids=missing,
                )

            stored = event.model_copy(update={"id": event.id or str(uuid.uuid4())})
            self._events.append(stored)
            return stored.id

    def fetch_events(self, since: Optional[datetime] = None, robot_id: Optional[str] = None):
        with self._lock:
            events = list(self._events)

        if since is not None:
            events = [e for e in events if e.created_at >= since]
        if robot_id is not None:
            events = [e for e in events if robot_id in (e.robot_a_id, e.robot_b_id)]
        return events

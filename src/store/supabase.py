"""
Supabase entity store.

Reads robots and appends comparison events through the Supabase PostgREST
API (``/rest/v1/<table>``) using httpx and the service-role key. Every call
uses a single request-level timeout; failures map onto the typed exception
hierarchy and are never retried.
"""
import logging
import random
from datetime import datetime
from typing import Any, Optional

import httpx

from config import settings
from models.interaction import InteractionEvent
from security.exceptions import (
    DependencyFailureError,
    DependencyTimeoutError,
    EntityNotFoundError,
)
from security.sanitization import sanitize_text
from store.base import EntityStore, RobotFilter

logger = logging.getLogger(__name__)

# Postgres SQLSTATEs that mean the referenced robot does not exist
FOREIGN_KEY_VIOLATION = "23503"
# Raised when an id is not a valid uuid for the column type
INVALID_TEXT_REPRESENTATION = "22P02"
MISSING_ENTITY_CODES = (FOREIGN_KEY_VIOLATION, INVALID_TEXT_REPRESENTATION)

ROBOT_SELECT = "*,manufacturer:manufacturers(*)"
SPECS_SELECT = "specifications:robot_specifications(*)"
MEDIA_SELECT = "media:robot_media(*)"


def build_robot_select(include_specs: bool, include_media: bool) -> str:
    """PostgREST select clause embedding the requested relations."""
    parts = [ROBOT_SELECT]
    if include_specs:
        parts.append(SPECS_SELECT)
    if include_media:
        parts.append(MEDIA_SELECT)
    return ",".join(parts)


class SupabaseStore(EntityStore):
    """EntityStore backed by the hosted Supabase Postgres database."""

    backend_name = "supabase"
    PAGE_SIZE = 1000

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
        rng: Optional[random.Random] = None,
        robots_table: str = "robots",
        analytics_table: str = "comparison_analytics",
    ):
        self.timeout = timeout
        self.robots_table = robots_table
        self.analytics_table = analytics_table
        self._rng = rng or random.Random()
        self._client = httpx.Client(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls) -> "SupabaseStore":
        return cls(
            url=settings.SUPABASE_URL,
            service_key=settings.SUPABASE_SERVICE_ROLE_KEY,
            timeout=settings.STORE_TIMEOUT,
            robots_table=settings.ROBOTS_TABLE,
            analytics_table=settings.ANALYTICS_TABLE,
        )

    def close(self):
        self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Perform one PostgREST call and decode the JSON body.

        Raises:
            DependencyTimeoutError: If the call exceeds the configured timeout
            DependencyFailureError: On transport errors, non-2xx status or bad JSON
            EntityNotFoundError: On foreign-key violations (unknown robot id)
        """
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("Store call %s %s timed out after %ss", method, path, self.timeout)
            raise DependencyTimeoutError(
                f"Store call timed out after {self.timeout}s: {method} {path}",
                timeout_seconds=self.timeout,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Store call %s %s failed: %s", method, path, sanitize_text(str(e)))
            raise DependencyFailureError(
                f"Store request failed: {sanitize_text(str(e))}"
            ) from e

        if response.status_code >= 400:
            self._raise_for_error(response, method, path)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DependencyFailureError(
                f"Store returned invalid JSON for {method} {path}",
                status_code=response.status_code,
            ) from e

    def _raise_for_error(self, response: httpx.Response, method: str, path: str):
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or response.text or response.reason_phrase
        if body.get("code") in MISSING_ENTITY_CODES:
            raise EntityNotFoundError(f"Referenced robot does not exist: {sanitize_text(str(message))}")

        logger.error(
            "Store call %s %s returned %d: %s",
            method, path, response.status_code, sanitize_text(str(message)),
        )
        raise DependencyFailureError(
            f"Store returned {response.status_code}: {sanitize_text(str(message))}",
            status_code=response.status_code,
        )

    def find_by_id(self, robot_id, include_specs=False, include_media=False):
        try:
            rows = self._request(
                "GET",
                f"/{self.robots_table}",
                params={
                    "select": build_robot_select(include_specs, include_media),
                    "id": f"eq.{robot_id}",
                    "limit": "1",
                },
            )
        except EntityNotFoundError:
            logger.debug("Robot id %s is not a valid key", robot_id)
            return None
        if not rows:
            return None
        return rows[0]

    def find_many(self, robot_filter: RobotFilter, limit=None, random_order=False):
        params = {"select": ROBOT_SELECT}
        if robot_filter.status is not None:
            params["status"] = f"eq.{robot_filter.status}"
        if robot_filter.category is not None:
            params["category"] = f"eq.{robot_filter.category}"
        if robot_filter.manufacturer_id is not None:
            params["manufacturer_id"] = f"eq.{robot_filter.manufacturer_id}"
        if robot_filter.exclude_ids:
            params["id"] = f"not.in.({','.join(robot_filter.exclude_ids)})"

        # PostgREST has no random ordering; fetch every eligible row and shuffle here
        if limit is not None and not random_order:
            params["limit"] = str(limit)

        rows = self._request("GET", f"/{self.robots_table}", params=params) or []
        if random_order:
            self._rng.shuffle(rows)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert_event(self, event: InteractionEvent) -> str:
        row = event.to_row()
        # id and created_at are assigned by the database
        row.pop("id", None)
        row.pop("created_at", None)

        created = self._request(
            "POST",
            f"/{self.analytics_table}",
            json=row,
            headers={"Prefer": "return=representation"},
        )
        if not created or "id" not in created[0]:
            raise DependencyFailureError("Store did not return the inserted event id")
        return str(created[0]["id"])

    def fetch_events(self, since: Optional[datetime] = None, robot_id: Optional[str] = None):
        params = {"select": "*", "order": "created_at.asc"}
        if since is not None:
            params["created_at"] = f"gte.{since.isoformat()}"
        if robot_id is not None:
            params["or"] = f"(robot_1_id.eq.{robot_id},robot_2_id.eq.{robot_id})"

        events: list[InteractionEvent] = []
        offset = 0
        while True:
            try:
                page = self._request(
                    "GET",
                    f"/{self.analytics_table}",
                    params={**params, "limit": str(self.PAGE_SIZE), "offset": str(offset)},
                ) or []
            except EntityNotFoundError:
                if robot_id is None:
                    raise
                # No event can reference an id that is not a valid key
                return []
            events.extend(InteractionEvent.from_row(row) for row in page)
            if len(page) < self.PAGE_SIZE:
                break
            offset += self.PAGE_SIZE
        return events

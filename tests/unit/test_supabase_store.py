"""
Unit tests for the Supabase (PostgREST) entity store.

Uses httpx.MockTransport to stand in for the hosted API, so request shapes
and error mapping are checked without network access.
"""
import json
import random

import httpx
import pytest

from engine.dispatcher import RequestDispatcher
from engine.service import ComparisonService
from security.exceptions import (
    DependencyFailureError,
    DependencyTimeoutError,
    EntityNotFoundError,
)
from store.base import RobotFilter
from store.supabase import SupabaseStore, build_robot_select
from tests.fixtures.sample_data import make_event, make_request, make_robot

SERVICE_KEY = "test-service-key"


def make_store(handler, **kwargs) -> SupabaseStore:
    return SupabaseStore(
        url="https://example.supabase.co/",
        service_key=SERVICE_KEY,
        timeout=2.5,
        transport=httpx.MockTransport(handler),
        rng=random.Random(3),
        **kwargs,
    )


@pytest.mark.unit
class TestRobotQueries:

    def test_find_by_id_request_shape(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["request"] = request
            return httpx.Response(200, json=[make_robot("r1")])

        row = make_store(handler).find_by_id("r1", include_specs=True, include_media=True)

        request = seen["request"]
        assert row["id"] == "r1"
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/robots"
        assert request.url.params["id"] == "eq.r1"
        assert request.url.params["select"] == build_robot_select(True, True)
        assert request.headers["apikey"] == SERVICE_KEY
        assert request.headers["authorization"] == f"Bearer {SERVICE_KEY}"

    def test_select_clause(self):
        assert build_robot_select(False, False) == "*,manufacturer:manufacturers(*)"
        assert "media:robot_media(*)" in build_robot_select(False, True)
        assert "specifications" not in build_robot_select(False, True)

    def test_find_by_id_not_found(self):
        store = make_store(lambda request: httpx.Response(200, json=[]))
        assert store.find_by_id("missing") is None

    def test_find_many_filters_and_shuffle(self):
        seen = {}
        rows = [make_robot(f"r{i}") for i in range(5)]

        def handler(request: httpx.Request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=rows)

        result = make_store(handler).find_many(
            RobotFilter(category="research", manufacturer_id="unitree", exclude_ids=["x1", "x2"]),
            limit=2,
            random_order=True,
        )

        params = seen["params"]
        assert params["status"] == "eq.active"
        assert params["category"] == "eq.research"
        assert params["manufacturer_id"] == "eq.unitree"
        assert params["id"] == "not.in.(x1,x2)"
        # Random selection fetches every eligible row and slices afterwards
        assert "limit" not in params
        assert len(result) == 2
        assert {r["id"] for r in result} <= {r["id"] for r in rows}

    def test_find_many_ordered_uses_server_limit(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[make_robot("r1")])

        make_store(handler).find_many(RobotFilter(), limit=3)
        assert seen["params"]["limit"] == "3"


@pytest.mark.unit
class TestEventWrites:

    def test_insert_event(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["request"] = request
            body = json.loads(request.content)
            return httpx.Response(201, json=[{"id": 77, **body}])

        event_id = make_store(handler).insert_event(
            make_event("r1", "r2", "select", "random", session_id="s1")
        )

        request = seen["request"]
        body = json.loads(request.content)
        assert event_id == "77"
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/comparison_analytics"
        assert request.headers["prefer"] == "return=representation"
        assert body["robot_1_id"] == "r1"
        assert body["robot_2_id"] == "r2"
        assert body["interaction_type"] == "select"
        assert body["comparison_type"] == "random"
        assert body["session_id"] == "s1"
        assert "id" not in body
        assert "created_at" not in body

    def test_foreign_key_violation_is_not_found(self):
        def handler(request):
            return httpx.Response(409, json={
                "code": "23503",
                "message": "insert or update on table violates foreign key constraint",
            })

        with pytest.raises(EntityNotFoundError):
            make_store(handler).insert_event(make_event("r1", "ghost"))

    def test_missing_id_in_representation(self):
        store = make_store(lambda request: httpx.Response(201, json=[]))
        with pytest.raises(DependencyFailureError):
            store.insert_event(make_event("r1", "r2"))


@pytest.mark.unit
class TestEventReads:

    def test_fetch_events_parses_rows(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[{
                "id": 5,
                "robot_1_id": "r1",
                "robot_2_id": "r2",
                "interaction_type": "view",
                "comparison_type": None,
                "session_id": None,
                "created_at": "2026-03-15T12:00:00+00:00",
            }])

        since = make_event("a", "b").created_at
        events = make_store(handler).fetch_events(since=since, robot_id="r1")

        assert seen["params"]["or"] == "(robot_1_id.eq.r1,robot_2_id.eq.r1)"
        assert seen["params"]["created_at"] == f"gte.{since.isoformat()}"
        assert len(events) == 1
        assert events[0].id == "5"
        assert events[0].comparison_context.value == "home_page"

    def test_fetch_events_paginates(self):
        rows = [
            {
                "id": i,
                "robot_1_id": "r1",
                "robot_2_id": "r2",
                "interaction_type": "view",
                "comparison_type": "home_page",
                "created_at": "2026-03-15T12:00:00+00:00",
            }
            for i in range(5)
        ]
        offsets = []

        def handler(request: httpx.Request):
            offset = int(request.url.params["offset"])
            limit = int(request.url.params["limit"])
            offsets.append(offset)
            return httpx.Response(200, json=rows[offset:offset + limit])

        store = make_store(handler)
        store.PAGE_SIZE = 2
        events = store.fetch_events()

        assert len(events) == 5
        assert offsets == [0, 2, 4]


@pytest.mark.unit
class TestErrorMapping:

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(DependencyTimeoutError) as exc_info:
            make_store(handler).find_by_id("r1")
        assert exc_info.value.timeout_seconds == 2.5
        assert exc_info.value.error_code == "DEPENDENCY_TIMEOUT"
        assert exc_info.value.is_transient is True

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DependencyFailureError) as exc_info:
            make_store(handler).find_many(RobotFilter())
        assert not isinstance(exc_info.value, DependencyTimeoutError)

    def test_server_error(self):
        store = make_store(lambda request: httpx.Response(503, json={"message": "unavailable"}))
        with pytest.raises(DependencyFailureError) as exc_info:
            store.find_by_id("r1")
        assert exc_info.value.status_code == 503

    def test_invalid_json(self):
        store = make_store(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(DependencyFailureError):
            store.find_by_id("r1")

    def test_error_message_sanitized(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "leaky-secret-value")
        store = make_store(lambda request: httpx.Response(
            500, json={"message": "bad key leaky-secret-value"}
        ))
        with pytest.raises(DependencyFailureError) as exc_info:
            store.find_by_id("r1")
        assert "leaky-secret-value" not in str(exc_info.value)
        assert "[REDACTED]" in str(exc_info.value)


@pytest.mark.unit
class TestInvalidKeys:
    """Ids that are not valid keys for the column type (SQLSTATE 22P02)."""

    @staticmethod
    def invalid_uuid(request):
        return httpx.Response(400, json={
            "code": "22P02",
            "message": 'invalid input syntax for type uuid: "ghost"',
        })

    def test_find_by_id_returns_none(self):
        assert make_store(self.invalid_uuid).find_by_id("ghost") is None

    def test_insert_event_is_not_found(self):
        with pytest.raises(EntityNotFoundError):
            make_store(self.invalid_uuid).insert_event(make_event("r1", "ghost"))

    def test_fetch_events_for_invalid_robot_is_empty(self):
        assert make_store(self.invalid_uuid).fetch_events(robot_id="ghost") == []

    def test_fetch_events_without_robot_still_raises(self):
        with pytest.raises(EntityNotFoundError):
            make_store(self.invalid_uuid).fetch_events()

    def test_comparison_data_reports_not_found(self):
        def handler(request: httpx.Request):
            if request.url.params["id"] == "eq.ghost":
                return self.invalid_uuid(request)
            return httpx.Response(200, json=[make_robot("r1")])

        dispatcher = RequestDispatcher(ComparisonService(make_store(handler)))
        response = dispatcher.handle(
            make_request("getComparisonData", robot1Id="r1", robot2Id="ghost")
        )
        assert response.success is False
        assert response.error_code == "ENTITY_NOT_FOUND"
        assert "ghost" in response.error

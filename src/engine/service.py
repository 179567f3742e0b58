"""
Comparison operations.

One method per comparison action. Each takes its already-validated parameter
model and returns a JSON-ready dict; failures raise typed exceptions that the
dispatcher turns into error envelopes.
"""
import logging
from typing import Optional

from engine.analytics import InteractionRecorder, since_for_range
from engine.comparison import compare_robots
from models.interaction import InteractionEvent
from models.requests import (
    ComparisonDataParams,
    ComparisonStatsParams,
    PopularComparisonsParams,
    RandomRobotsParams,
    RequestContext,
    TrackInteractionParams,
)
from models.robot import Robot
from security.exceptions import EntityNotFoundError, NotEnoughCandidatesError
from store.base import EntityStore, RobotFilter

logger = logging.getLogger(__name__)


class ComparisonService:
    """Robot comparison operations over an injected store and recorder."""

    def __init__(self, store: EntityStore, recorder: Optional[InteractionRecorder] = None):
        self.store = store
        self.recorder = recorder or InteractionRecorder(store)

    def get_random_robots(self, params: RandomRobotsParams) -> dict:
        """
        Pick ``count`` distinct active robots in uniformly random order.

        Raises:
            NotEnoughCandidatesError: If fewer robots are eligible than requested
                and the caller did not set allow_fewer
        """
        robot_filter = RobotFilter(
            category=params.category,
            manufacturer_id=params.manufacturer,
            exclude_ids=list(params.exclude_ids),
        )
        candidates = self.store.find_many(robot_filter, random_order=True)

        # Duplicate rows (e.g. from joins) must not yield the same robot twice
        seen = set()
        unique = []
        for row in candidates:
            robot_id = str(row.get("id"))
            if robot_id not in seen:
                seen.add(robot_id)
                unique.append(row)

        if len(unique) < params.count and not params.allow_fewer:
            raise NotEnoughCandidatesError(
                f"Requested {params.count} robots but only {len(unique)} are eligible",
                requested=params.count,
                available=len(unique),
            )

        robots = unique[:params.count]
        return {"robots": robots, "count": len(robots)}

    def get_comparison_data(self, params: ComparisonDataParams) -> dict:
        """
        Fetch both robots and compare them.

        Raises:
            EntityNotFoundError: If either robot id does not resolve
        """
        rows = {}
        for robot_id in (params.robot_a_id, params.robot_b_id):
            if robot_id in rows:
                continue
            rows[robot_id] = self.store.find_by_id(
                robot_id,
                include_specs=params.include_specs,
                include_media=params.include_media,
            )

        missing = [robot_id for robot_id, row in rows.items() if row is None]
        if missing:
            raise EntityNotFoundError(
                f"Robot not found: {', '.join(missing)}",
                entity_ids=missing,
            )

        row_a = rows[params.robot_a_id]
        row_b = rows[params.robot_b_id]
        comparison = compare_robots(Robot.model_validate(row_a), Robot.model_validate(row_b))

        return {
            "robot1": row_a,
            "robot2": row_b,
            "comparison": comparison.model_dump(mode="json"),
        }

    def track_interaction(
        self,
        params: TrackInteractionParams,
        context: Optional[RequestContext] = None,
    ) -> dict:
        """Record one interaction event and return its id."""
        context = context or RequestContext()
        event = InteractionEvent(
            robot_a_id=params.robot_a_id,
            robot_b_id=params.robot_b_id,
            interaction_type=params.interaction_type,
            comparison_context=params.comparison_context,
            session_id=params.session_id or context.session_id,
            user_id=context.user_id,
        )
        event_id = self.recorder.record(event)
        return {
            "analyticsId": event_id,
            "interactionType": event.interaction_type.value,
            "comparisonType": event.comparison_context.value,
        }

    def get_popular_comparisons(self, params: PopularComparisonsParams) -> dict:
        since = since_for_range(params.time_range)
        popular = self.recorder.aggregate_popular(params.limit, since=since)
        return {
            "comparisons": [p.model_dump(mode="json") for p in popular],
            "count": len(popular),
            "timeRange": params.time_range,
        }

    def get_comparison_stats(self, params: ComparisonStatsParams) -> dict:
        stats = self.recorder.aggregate_for_entity(params.robot_id)
        return stats.model_dump(mode="json")

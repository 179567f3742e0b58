"""
Comparison interaction recording and aggregation.

Events are appended through the entity store. Aggregates are computed from
the stored events: popular pairs treat (A, B) and (B, A) as the same pair.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional

from config import settings
from models.interaction import (
    InteractionEvent,
    InteractionType,
    OpponentCount,
    PopularComparison,
    RobotComparisonStats,
)
from store.base import EntityStore

logger = logging.getLogger(__name__)


def since_for_range(time_range: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Start of the window for a popular-comparisons time range.

    Args:
        time_range: "day", "week", "month" or "all"
        now: Reference time (defaults to current UTC time)

    Returns:
        Window start, or None for "all"
    """
    if time_range == "all":
        return None
    days = settings.TIME_RANGE_DAYS[time_range]
    return (now or datetime.now(timezone.utc)) - timedelta(days=days)


def rank_pairs(events: list[InteractionEvent], limit: int) -> list[PopularComparison]:
    """
    Group events by canonical pair and rank them.

    Ranked by interaction count descending, ties broken by most recent
    interaction, then by pair ids so the order is stable.
    """
    counts: Counter = Counter()
    last_seen: dict[tuple[str, str], datetime] = {}

    for event in events:
        pair = event.canonical_pair()
        counts[pair] += 1
        if pair not in last_seen or event.created_at > last_seen[pair]:
            last_seen[pair] = event.created_at

    ranked = sorted(counts, key=lambda pair: (-counts[pair], -last_seen[pair].timestamp(), pair))

    return [
        PopularComparison(
            robot_a_id=pair[0],
            robot_b_id=pair[1],
            count=counts[pair],
            last_seen=last_seen[pair],
        )
        for pair in ranked[:limit]
    ]


def summarize_robot(
    robot_id: str,
    events: list[InteractionEvent],
    top_opponents: int = 5,
) -> RobotComparisonStats:
    """Aggregate one robot's events by interaction type, context and role."""
    stats = RobotComparisonStats(robot_id=robot_id)
    opponents: Counter = Counter()

    for event in events:
        if robot_id not in (event.robot_a_id, event.robot_b_id):
            continue

        stats.total_interactions += 1
        if event.robot_a_id == robot_id:
            stats.as_robot_a += 1
            opponent = event.robot_b_id
        else:
            stats.as_robot_b += 1
            opponent = event.robot_a_id

        # Self-comparisons have no opponent
        if opponent != robot_id:
            opponents[opponent] += 1

        stats.by_interaction_type[event.interaction_type.value] += 1
        stats.by_context[event.comparison_context.value] += 1
        if event.interaction_type == InteractionType.SELECT:
            stats.selections += 1

        if stats.last_interaction_at is None or event.created_at > stats.last_interaction_at:
            stats.last_interaction_at = event.created_at

    stats.top_opponents = [
        OpponentCount(robot_id=opponent, count=count)
        for opponent, count in sorted(opponents.items(), key=lambda item: (-item[1], item[0]))[:top_opponents]
    ]
    return stats


class InteractionRecorder:
    """Persistence and aggregation boundary for comparison interactions."""

    def __init__(self, store: EntityStore):
        self.store = store

    def record(self, event: InteractionEvent) -> str:
        """
        Append one interaction event.

        Returns:
            The event id assigned by the store

        Raises:
            EntityNotFoundError: If either robot does not exist
            DependencyFailureError: If the store call fails
        """
        event_id = self.store.insert_event(event)
        logger.info(
            "Recorded %s interaction %s (%s vs %s, %s)",
            event.interaction_type.value, event_id,
            event.robot_a_id, event.robot_b_id, event.comparison_context.value,
        )
        return event_id

    def aggregate_popular(self, limit: int, since: Optional[datetime] = None) -> list[PopularComparison]:
        """Most frequently compared pairs at or after ``since``."""
        events = self.store.fetch_events(since=since)
        return rank_pairs(events, limit)

    def aggregate_for_entity(self, robot_id: str) -> RobotComparisonStats:
        """Interaction counts for one robot across all of its comparisons."""
        events = self.store.fetch_events(robot_id=robot_id)
        return summarize_robot(robot_id, events, top_opponents=settings.TOP_OPPONENTS_LIMIT)

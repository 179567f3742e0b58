"""
Comparison interaction and analytics data models.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class InteractionType(str, Enum):
    """What the user did with a comparison."""
    VIEW = "view"
    SELECT = "select"
    SWITCH = "switch"
    CLICK_COMPARE_MORE = "click_compare_more"


class ComparisonContext(str, Enum):
    """Where in the app the comparison was shown."""
    HOME_PAGE = "home_page"
    FULL_COMPARISON = "full_comparison"
    RANDOM = "random"


class InteractionEvent(BaseModel):
    """A single recorded comparison interaction (append-only)."""
    id: Optional[str] = None
    robot_a_id: str
    robot_b_id: str
    interaction_type: InteractionType
    comparison_context: ComparisonContext = ComparisonContext.HOME_PAGE
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def canonical_pair(self) -> tuple[str, str]:
        """Robot ids in sorted order, so (A, B) and (B, A) group together."""
        return tuple(sorted((self.robot_a_id, self.robot_b_id)))

    def to_row(self) -> dict:
        """Column mapping for the comparison_analytics table."""
        row = {
            "robot_1_id": self.robot_a_id,
            "robot_2_id": self.robot_b_id,
            "interaction_type": self.interaction_type.value,
            "comparison_type": self.comparison_context.value,
            "session_id": self.session_id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
        }
        if self.id is not None:
            row["id"] = self.id
        return row

    @classmethod
    def from_row(cls, row: dict) -> "InteractionEvent":
        """Build an event from a comparison_analytics row."""
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            robot_a_id=str(row["robot_1_id"]),
            robot_b_id=str(row["robot_2_id"]),
            interaction_type=row["interaction_type"],
            comparison_context=row.get("comparison_type") or ComparisonContext.HOME_PAGE,
            session_id=row.get("session_id"),
            user_id=row.get("user_id"),
            created_at=row["created_at"],
        )


class PopularComparison(BaseModel):
    """An unordered robot pair and how often it was interacted with."""
    robot_a_id: str
    robot_b_id: str
    count: int
    last_seen: datetime


class OpponentCount(BaseModel):
    """How often a robot was compared against one specific counterpart."""
    robot_id: str
    count: int


class RobotComparisonStats(BaseModel):
    """Aggregate interaction counts for a single robot."""
    robot_id: str
    total_interactions: int = 0
    as_robot_a: int = 0
    as_robot_b: int = 0
    selections: int = 0
    by_interaction_type: dict[str, int] = Field(
        default_factory=lambda: {t.value: 0 for t in InteractionType}
    )
    by_context: dict[str, int] = Field(
        default_factory=lambda: {c.value: 0 for c in ComparisonContext}
    )
    top_opponents: list[OpponentCount] = Field(default_factory=list)
    last_interaction_at: Optional[datetime] = None

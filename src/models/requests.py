"""
Request envelope and per-operation parameter models.

Each comparison action has exactly one parameter model. The dispatcher picks
the model from PARAMETER_MODELS by action and validates the free-form
``parameters`` object against it before any handler runs.
"""
from enum import Enum
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import settings
from models.interaction import ComparisonContext, InteractionType
from security.validators import validate_robot_id, validate_session_id


class Operation(str, Enum):
    """Closed set of comparison actions."""
    GET_RANDOM_ROBOTS = "getRandomRobots"
    GET_COMPARISON_DATA = "getComparisonData"
    TRACK_INTERACTION = "trackInteraction"
    GET_POPULAR_COMPARISONS = "getPopularComparisons"
    GET_COMPARISON_STATS = "getComparisonStats"

    @classmethod
    def names(cls) -> list[str]:
        return [op.value for op in cls]


class _Params(BaseModel):
    """Base for parameter models: camelCase on the wire, snake_case in code."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RandomRobotsParams(_Params):
    count: int = Field(default=settings.DEFAULT_RANDOM_COUNT, ge=1, le=settings.MAX_RANDOM_COUNT)
    exclude_ids: list[str] = Field(default_factory=list, alias="excludeIds")
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    allow_fewer: bool = Field(default=False, alias="allowFewer")

    @field_validator("exclude_ids")
    @classmethod
    def validate_exclude_ids(cls, v):
        return [validate_robot_id(robot_id) for robot_id in v]

    @field_validator("manufacturer")
    @classmethod
    def validate_manufacturer(cls, v):
        return validate_robot_id(v) if v is not None else None


class ComparisonDataParams(_Params):
    robot_a_id: str = Field(..., alias="robot1Id")
    robot_b_id: str = Field(..., alias="robot2Id")
    include_specs: bool = Field(default=True, alias="includeSpecs")
    include_media: bool = Field(default=False, alias="includeMedia")

    @field_validator("robot_a_id", "robot_b_id")
    @classmethod
    def validate_ids(cls, v):
        return validate_robot_id(v)


class TrackInteractionParams(_Params):
    robot_a_id: str = Field(..., alias="robot1Id")
    robot_b_id: str = Field(..., alias="robot2Id")
    interaction_type: InteractionType = Field(..., alias="interactionType")
    comparison_context: ComparisonContext = Field(
        default=ComparisonContext.HOME_PAGE, alias="comparisonType"
    )
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    @field_validator("robot_a_id", "robot_b_id")
    @classmethod
    def validate_ids(cls, v):
        return validate_robot_id(v)

    @field_validator("session_id")
    @classmethod
    def validate_session(cls, v):
        return validate_session_id(v) if v is not None else None


class PopularComparisonsParams(_Params):
    limit: int = Field(default=settings.DEFAULT_POPULAR_LIMIT, ge=1, le=settings.MAX_POPULAR_LIMIT)
    time_range: Literal["day", "week", "month", "all"] = Field(default="all", alias="timeRange")


class ComparisonStatsParams(_Params):
    robot_id: str = Field(..., alias="robotId")

    @field_validator("robot_id")
    @classmethod
    def validate_id(cls, v):
        return validate_robot_id(v)


PARAMETER_MODELS: dict[Operation, type[_Params]] = {
    Operation.GET_RANDOM_ROBOTS: RandomRobotsParams,
    Operation.GET_COMPARISON_DATA: ComparisonDataParams,
    Operation.TRACK_INTERACTION: TrackInteractionParams,
    Operation.GET_POPULAR_COMPARISONS: PopularComparisonsParams,
    Operation.GET_COMPARISON_STATS: ComparisonStatsParams,
}

# Fields whose values come from a closed enumeration of interaction values
ENUM_FIELDS = {"interactionType", "interaction_type", "comparisonType", "comparison_context"}


class RequestContext(BaseModel):
    """Caller identity forwarded by the auth layer, used for audit only."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: Optional[str] = Field(default=None, alias="userId")
    user_role: Optional[str] = Field(default=None, alias="userRole")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    @field_validator("session_id")
    @classmethod
    def validate_session(cls, v):
        return validate_session_id(v) if v is not None else None


class ToolResponse(BaseModel):
    """Uniform response envelope."""
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    tool: Optional[str] = None
    action: Optional[str] = None

    def to_dict(self) -> dict:
        """Envelope as sent on the wire; failures never carry data."""
        body: dict[str, Any] = {"success": self.success}
        if self.success:
            body["data"] = self.data
        else:
            body["error"] = self.error
            if self.error_code:
                body["error_code"] = self.error_code
        if self.tool is not None:
            body["tool"] = self.tool
        if self.action is not None:
            body["action"] = self.action
        return body

"""
Data models for robot comparison results.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field


class ComparisonMetric(BaseModel):
    """One attribute compared across robot A and robot B."""
    key: str
    label: str
    unit: Optional[str] = None
    value_a: Optional[int | float] = None
    value_b: Optional[int | float] = None
    difference: Optional[int | float] = None
    winner: Optional[Literal["a", "b"]] = None
    higher_is_better: bool

    @property
    def is_comparable(self) -> bool:
        """Both sides carry a value."""
        return self.value_a is not None and self.value_b is not None


class ComparisonResult(BaseModel):
    """Result of comparing two robots attribute by attribute."""
    metrics: list[ComparisonMetric] = Field(default_factory=list)
    overall_winner: Literal["a", "b", "tie"] = "tie"
    a_wins: int = 0
    b_wins: int = 0
    total_comparable: int = 0

    def get_metric(self, key: str) -> Optional[ComparisonMetric]:
        """Look up a metric by attribute key."""
        for metric in self.metrics:
            if metric.key == key:
                return metric
        return None

"""
Robot comparison logic.

Compares two robots attribute by attribute, deciding a winner per attribute
and an overall winner by counting attribute wins.
"""
from dataclasses import dataclass
from typing import Optional

from models.comparison import ComparisonMetric, ComparisonResult
from models.robot import Robot


@dataclass(frozen=True)
class ComparableAttribute:
    """A robot attribute eligible for pairwise comparison."""
    key: str
    label: str
    unit: Optional[str]
    higher_is_better: bool


# Fixed order; every ComparisonResult lists metrics in exactly this order.
COMPARABLE_ATTRIBUTES: tuple[ComparableAttribute, ...] = (
    ComparableAttribute("height_cm", "Height", "cm", higher_is_better=False),
    ComparableAttribute("weight_kg", "Weight", "kg", higher_is_better=False),
    ComparableAttribute("estimated_price_usd", "Price", "USD", higher_is_better=False),
    ComparableAttribute("rating_average", "Rating", None, higher_is_better=True),
    ComparableAttribute("walking_speed_kmh", "Walking Speed", "km/h", higher_is_better=True),
    ComparableAttribute("max_payload_kg", "Max Payload", "kg", higher_is_better=True),
    ComparableAttribute("battery_life_hours", "Battery Life", "hours", higher_is_better=True),
    ComparableAttribute("release_year", "Release Year", None, higher_is_better=True),
)


def compare_attribute(
    attribute: ComparableAttribute,
    value_a: Optional[int | float],
    value_b: Optional[int | float],
) -> ComparisonMetric:
    """
    Compare one attribute across two robots.

    Args:
        attribute: Attribute definition (carries the higher_is_better policy)
        value_a: Robot A's value, or None if absent
        value_b: Robot B's value, or None if absent

    Returns:
        ComparisonMetric with difference and winner. Both are None when either
        value is absent; winner is None when the values are equal.
    """
    difference = None
    winner = None

    if value_a is not None and value_b is not None:
        difference = abs(value_a - value_b)
        if value_a != value_b:
            a_is_higher = value_a > value_b
            winner = "a" if a_is_higher == attribute.higher_is_better else "b"

    return ComparisonMetric(
        key=attribute.key,
        label=attribute.label,
        unit=attribute.unit,
        value_a=value_a,
        value_b=value_b,
        difference=difference,
        winner=winner,
        higher_is_better=attribute.higher_is_better,
    )


def compare_robots(robot_a: Robot, robot_b: Robot) -> ComparisonResult:
    """
    Compare two robots across all comparable attributes.

    Pure and deterministic: the same two robots always give the same result.
    Values are expected to be coerced already (see models.robot.Robot).

    Args:
        robot_a: Left-hand robot ("a")
        robot_b: Right-hand robot ("b")

    Returns:
        ComparisonResult with the full ordered metric list, per-side win
        counts and the overall winner ("tie" when wins are equal, including
        when nothing was comparable)
    """
    metrics = [
        compare_attribute(
            attribute,
            getattr(robot_a, attribute.key),
            getattr(robot_b, attribute.key),
        )
        for attribute in COMPARABLE_ATTRIBUTES
    ]

    comparable = [m for m in metrics if m.is_comparable]
    a_wins = sum(1 for m in comparable if m.winner == "a")
    b_wins = sum(1 for m in comparable if m.winner == "b")

    if a_wins > b_wins:
        overall_winner = "a"
    elif b_wins > a_wins:
        overall_winner = "b"
    else:
        overall_winner = "tie"

    return ComparisonResult(
        metrics=metrics,
        overall_winner=overall_winner,
        a_wins=a_wins,
        b_wins=b_wins,
        total_comparable=len(comparable),
    )

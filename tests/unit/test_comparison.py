"""
Unit tests for the robot comparison calculator (src/engine/comparison.py)
and comparison data models (src/models/comparison.py).

Tests cover:
- Per-attribute difference and winner rules
- Lower-is-better vs higher-is-better policies
- Absent values (never treated as zero)
- Overall winner and win counts
- Determinism and fixed metric order
"""
import pytest

from engine.comparison import COMPARABLE_ATTRIBUTES, compare_attribute, compare_robots
from models.comparison import ComparisonMetric, ComparisonResult
from models.robot import Robot
from tests.fixtures.sample_data import make_full_robot, make_robot


def robot(robot_id, **attrs) -> Robot:
    return Robot.model_validate(make_robot(robot_id, **attrs))


ATTRIBUTE_KEYS = [a.key for a in COMPARABLE_ATTRIBUTES]


@pytest.mark.unit
class TestCompareAttribute:
    """Test a single attribute comparison."""

    @pytest.mark.parametrize("attribute", COMPARABLE_ATTRIBUTES, ids=ATTRIBUTE_KEYS)
    def test_difference_is_absolute(self, attribute):
        forward = compare_attribute(attribute, 10, 25)
        backward = compare_attribute(attribute, 25, 10)
        assert forward.difference == 15
        assert backward.difference == 15

    def test_lower_is_better_picks_smaller(self):
        height = COMPARABLE_ATTRIBUTES[0]
        assert height.higher_is_better is False
        assert compare_attribute(height, 150, 170).winner == "a"
        assert compare_attribute(height, 170, 150).winner == "b"

    def test_higher_is_better_picks_larger(self):
        rating = next(a for a in COMPARABLE_ATTRIBUTES if a.key == "rating_average")
        assert compare_attribute(rating, 4.8, 4.1).winner == "a"
        assert compare_attribute(rating, 4.1, 4.8).winner == "b"

    def test_equal_values_have_zero_difference_and_no_winner(self):
        metric = compare_attribute(COMPARABLE_ATTRIBUTES[1], 80, 80)
        assert metric.difference == 0
        assert metric.winner is None

    @pytest.mark.parametrize("value_a,value_b", [(None, 5), (5, None), (None, None)])
    def test_missing_value_gives_null_difference_and_winner(self, value_a, value_b):
        metric = compare_attribute(COMPARABLE_ATTRIBUTES[3], value_a, value_b)
        assert metric.difference is None
        assert metric.winner is None
        assert metric.is_comparable is False

    def test_zero_is_a_value(self):
        """Zero must not be confused with absence."""
        payload = next(a for a in COMPARABLE_ATTRIBUTES if a.key == "max_payload_kg")
        metric = compare_attribute(payload, 0, 5)
        assert metric.is_comparable is True
        assert metric.difference == 5
        assert metric.winner == "b"


@pytest.mark.unit
class TestCompareRobots:
    """Test full robot comparisons."""

    def test_worked_example(self):
        """A={150cm, 80kg, no price} vs B={170cm, 80kg, $50000}."""
        a = robot("a", height_cm=150, weight_kg=80, estimated_price_usd=None)
        b = robot("b", height_cm=170, weight_kg=80, estimated_price_usd=50000)

        result = compare_robots(a, b)

        height = result.get_metric("height_cm")
        assert height.difference == 20
        assert height.winner == "a"

        weight = result.get_metric("weight_kg")
        assert weight.difference == 0
        assert weight.winner is None

        price = result.get_metric("estimated_price_usd")
        assert price.value_a is None
        assert price.value_b == 50000
        assert price.difference is None
        assert price.winner is None

        assert result.total_comparable == 2
        assert result.a_wins == 1
        assert result.b_wins == 0
        assert result.overall_winner == "a"

    def test_nothing_comparable_is_tie(self):
        result = compare_robots(robot("a"), robot("b", height_cm=150))
        assert result.total_comparable == 0
        assert result.a_wins == 0
        assert result.b_wins == 0
        assert result.overall_winner == "tie"

    def test_all_metrics_present_even_when_empty(self):
        result = compare_robots(robot("a"), robot("b"))
        assert [m.key for m in result.metrics] == ATTRIBUTE_KEYS
        assert all(m.winner is None and m.difference is None for m in result.metrics)

    def test_equal_wins_is_tie(self):
        # a wins height (lower), b wins rating (higher)
        a = robot("a", height_cm=150, rating_average=3.0)
        b = robot("b", height_cm=170, rating_average=4.0)
        result = compare_robots(a, b)
        assert result.a_wins == 1
        assert result.b_wins == 1
        assert result.total_comparable == 2
        assert result.overall_winner == "tie"

    def test_b_wins_overall(self):
        a = robot("a", walking_speed_kmh=3, battery_life_hours=2, weight_kg=60)
        b = robot("b", walking_speed_kmh=6, battery_life_hours=4, weight_kg=50)
        result = compare_robots(a, b)
        assert result.b_wins == 3
        assert result.overall_winner == "b"

    def test_release_year_newer_wins(self):
        a = robot("a", release_date="2021-01-10")
        b = robot("b", release_date="2024-06-01")
        metric = compare_robots(a, b).get_metric("release_year")
        assert metric.value_a == 2021
        assert metric.value_b == 2024
        assert metric.difference == 3
        assert metric.winner == "b"

    def test_string_encoded_numbers_compare_numerically(self):
        """Values arriving as strings are coerced at the model boundary."""
        a = Robot.model_validate(make_robot("a", height_cm="150", estimated_price_usd="1000.50"))
        b = Robot.model_validate(make_robot("b", height_cm=90, estimated_price_usd="999.5"))
        result = compare_robots(a, b)
        assert result.get_metric("height_cm").difference == 60
        assert result.get_metric("height_cm").winner == "b"
        assert result.get_metric("estimated_price_usd").difference == pytest.approx(1.0)

    def test_malformed_number_treated_as_absent(self):
        a = Robot.model_validate(make_robot("a", height_cm="very tall"))
        b = Robot.model_validate(make_robot("b", height_cm=150))
        metric = compare_robots(a, b).get_metric("height_cm")
        assert metric.value_a is None
        assert metric.winner is None

    def test_same_snapshot_gives_identical_result(self):
        a = Robot.model_validate(make_full_robot("a"))
        b = Robot.model_validate(make_full_robot("b", height_cm=120, rating_average=3.9))
        first = compare_robots(a, b)
        second = compare_robots(a, b)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_wins_only_counted_among_comparable(self):
        a = robot("a", height_cm=150, rating_average=4.0)
        b = robot("b", height_cm=170)
        result = compare_robots(a, b)
        assert result.total_comparable == 1
        assert result.a_wins + result.b_wins <= result.total_comparable


@pytest.mark.unit
class TestComparisonModels:
    """Test the comparison result models."""

    def test_metric_is_comparable(self):
        metric = ComparisonMetric(key="k", label="K", value_a=1, value_b=2, higher_is_better=True)
        assert metric.is_comparable is True

    def test_get_metric_unknown_key(self):
        assert ComparisonResult().get_metric("nope") is None

    def test_result_serializes_nulls(self):
        result = compare_robots(robot("a"), robot("b"))
        dumped = result.model_dump(mode="json")
        assert dumped["overall_winner"] == "tie"
        assert dumped["metrics"][0]["winner"] is None
        assert dumped["metrics"][0]["difference"] is None

    def test_integer_values_serialize_as_integers(self):
        a = robot("a", height_cm=150, release_date="2021-01-10", rating_average=4.5)
        b = robot("b", height_cm=170, release_date="2024-06-01", rating_average=4.0)
        dumped = {m["key"]: m for m in compare_robots(a, b).model_dump(mode="json")["metrics"]}
        assert dumped["height_cm"]["value_a"] == 150
        assert isinstance(dumped["height_cm"]["value_a"], int)
        assert isinstance(dumped["height_cm"]["difference"], int)
        assert isinstance(dumped["release_year"]["value_b"], int)
        assert dumped["rating_average"]["difference"] == pytest.approx(0.5)

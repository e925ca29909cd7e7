import math

import pytest

from credibility_score.core.errors import (
    EmptyCalculationError,
    InvalidArithmeticError,
    InvalidTokenError,
    MissingInputError,
    ScoreEvaluationError,
    UnknownElementTypeError,
)
from credibility_score.core.evaluator import (
    calculate_element,
    calculate_score,
    evaluate,
    score_impact,
    simulate_score,
)
from credibility_score.core.models import (
    Constant,
    IntervalRange,
    LookupInterval,
    LookupNumber,
    ScoreImpact,
    new_calculation,
)
from credibility_score.core.parser import parse_score_calculation, parse_score_config


def const(value: float) -> Constant:
    return Constant(name=str(value), value=value)


class TestLookupInterval:
    @pytest.fixture
    def interval(self):
        return LookupInterval(
            name="Age",
            ranges=(
                IntervalRange(end=5, score=10),
                IntervalRange(start=5, end=90, score=20),
                IntervalRange(start=90, score=30),
            ),
        )

    @pytest.mark.parametrize(
        "value, expected",
        [(-100, 10), (4.999, 10), (5, 20), (89.999, 20), (90, 30), (10_000, 30)],
    )
    def test_boundaries(self, interval, value, expected):
        assert calculate_element(interval, {"Age": value}) == expected

    def test_first_matching_range_wins(self):
        interval = LookupInterval(
            name="Age",
            ranges=(IntervalRange(start=0, end=10, score=1), IntervalRange(start=5, end=20, score=2)),
        )
        assert calculate_element(interval, {"Age": 7}) == 1

    def test_out_of_range_score(self):
        interval = LookupInterval(
            name="Age",
            ranges=(IntervalRange(end=5, score=1), IntervalRange(start=90, score=3)),
            out_of_range_score=-1,
        )
        assert calculate_element(interval, {"Age": 50}) == -1

    def test_missing_input(self, interval):
        with pytest.raises(MissingInputError) as exc_info:
            calculate_element(interval, {"Other": 1})
        assert exc_info.value.name == "Age"


class TestLookupNumber:
    @pytest.mark.parametrize("value, expected", [(-500, -400), (0, 0), (123.5, 123.5), (500, 400)])
    def test_clamps_into_range(self, invitation_credibility, value, expected):
        assert calculate_element(invitation_credibility, {invitation_credibility.name: value}) == expected

    def test_passthrough_without_bounds(self):
        lookup = LookupNumber(name="Raw", range={"min": 0})
        assert calculate_element(lookup, {"Raw": -50}) == -50

    def test_nan_input_is_not_clamped(self, invitation_credibility):
        result = calculate_element(invitation_credibility, {invitation_credibility.name: math.nan})
        assert math.isnan(result)


class TestCalculation:
    @pytest.mark.parametrize(
        "operation, values, expected",
        [
            ("+", [1, 2, 3], 6),
            ("-", [10, 3, 2], 5),
            ("*", [2, 3, 4], 24),
            ("/", [100, 5, 2], 10),
            ("^", [2, 3, 2], 64),
        ],
    )
    def test_folds_children_left_to_right(self, operation, values, expected):
        node = new_calculation(operation, tuple(const(v) for v in values))
        assert calculate_element(node, {}) == pytest.approx(expected)

    @pytest.mark.parametrize("operation", ["+", "-", "*", "/", "^"])
    def test_single_child_is_returned_unchanged(self, operation):
        assert calculate_element(new_calculation(operation, (const(7),)), {}) == 7

    def test_empty_calculation(self):
        with pytest.raises(EmptyCalculationError):
            calculate_element(new_calculation("*"), {})

    def test_division_by_zero(self):
        with pytest.raises(InvalidArithmeticError):
            calculate_element(new_calculation("/", (const(1), const(0))), {})

    def test_fractional_power_of_negative(self):
        with pytest.raises(ScoreEvaluationError):
            calculate_element(new_calculation("^", (const(-8), const(0.5))), {})

    def test_unknown_element_type(self):
        with pytest.raises(UnknownElementTypeError):
            calculate_element(object(), {})


class TestEvaluateParsedFormulas:
    def test_product_scenario(self):
        catalog = [
            LookupInterval(name="A", ranges=(IntervalRange(score=0.5),)),
            LookupInterval(name="B", ranges=(IntervalRange(score=0.2),)),
        ]
        root = parse_score_calculation("1000 * [A] * [B]", catalog)
        assert evaluate(root, {"A": 1, "B": 1}) == pytest.approx(100)

    def test_sum_scenario(self):
        catalog = [LookupNumber(name="A", range={"min": -1000, "max": 1000})]
        root = parse_score_calculation("1000 + [A]", catalog)
        assert evaluate(root, {"A": 50}) == 1050

    def test_minus_is_only_a_sign(self):
        with pytest.raises(InvalidTokenError):
            parse_score_calculation("10 - 3", [])
        assert evaluate(parse_score_calculation("10 + -3", []), {}) == 7

    def test_right_nested_division(self):
        # 100 / (10 / 2), not (100 / 10) / 2
        assert evaluate(parse_score_calculation("100 / 10 / 2", []), {}) == 20

    def test_parentheses_override_nesting(self):
        assert evaluate(parse_score_calculation("(100 / 10) + (2 ^ 3)", []), {}) == 18

    def test_full_config(self, raw_config):
        config = parse_score_config(raw_config)
        inputs = {
            "Ethereum Address Age": 100,
            "Twitter Account Age": 45,
            "Ethos Invitation Source Credibility": 600,
        }
        # 1000 * 1 * 0.5 + min(600, 400) * 0.5
        assert evaluate(config.root, inputs) == pytest.approx(700)

    def test_repeated_evaluation_is_stable(self, raw_config):
        config = parse_score_config(raw_config)
        low = {"Ethereum Address Age": 1, "Twitter Account Age": 1, "Ethos Invitation Source Credibility": 0}
        high = {"Ethereum Address Age": 365, "Twitter Account Age": 365, "Ethos Invitation Source Credibility": 400}
        first = [evaluate(config.root, low), evaluate(config.root, high)]
        assert [evaluate(config.root, low), evaluate(config.root, high)] == first
        assert first == [pytest.approx(10), pytest.approx(1200)]


class TestCalculateScore:
    def test_without_breakdown(self, raw_config):
        config = parse_score_config(raw_config)
        inputs = {"Ethereum Address Age": 3, "Twitter Account Age": 3, "Ethos Invitation Source Credibility": -20}
        result = calculate_score(config, inputs)
        assert result.score == pytest.approx(1000 * 0.1 * 0.1 - 10)
        assert result.elements == {}

    def test_breakdown_pairs_raw_and_weighted(self, raw_config):
        config = parse_score_config(raw_config)
        inputs = {"Ethereum Address Age": 30, "Twitter Account Age": 100, "Ethos Invitation Source Credibility": -900}
        result = calculate_score(config, inputs, breakdown=True)

        assert list(result.elements) == list(inputs)
        assert result.elements["Ethereum Address Age"].raw == 30
        assert result.elements["Ethereum Address Age"].weighted == 0.5
        assert result.elements["Twitter Account Age"].weighted == 1
        assert result.elements["Ethos Invitation Source Credibility"].weighted == -400

    def test_missing_input_fails(self, raw_config):
        config = parse_score_config(raw_config)
        with pytest.raises(MissingInputError):
            calculate_score(config, {"Ethereum Address Age": 30})


class TestSimulateScore:
    def test_compares_against_unmodified_inputs(self, raw_config):
        config = parse_score_config(raw_config)
        inputs = {"Ethereum Address Age": 100, "Twitter Account Age": 100, "Ethos Invitation Source Credibility": 0}

        simulation = simulate_score(config, inputs, {"Ethos Invitation Source Credibility": 200})

        assert simulation.previous_score == pytest.approx(1000)
        assert simulation.score == pytest.approx(1100)
        assert simulation.impact == ScoreImpact.POSITIVE
        assert simulation.adjustment == pytest.approx(100)
        assert simulation.elements["Ethos Invitation Source Credibility"].raw == 200

    def test_explicit_previous_score(self, raw_config):
        config = parse_score_config(raw_config)
        inputs = {"Ethereum Address Age": 1, "Twitter Account Age": 1, "Ethos Invitation Source Credibility": 0}

        simulation = simulate_score(config, inputs, {}, previous_score=50)

        assert simulation.score == pytest.approx(10)
        assert simulation.impact == ScoreImpact.NEGATIVE
        assert simulation.adjustment == pytest.approx(40)


class TestScoreImpact:
    def test_directions(self):
        assert score_impact(100, 150) == (ScoreImpact.POSITIVE, 50)
        assert score_impact(150, 100) == (ScoreImpact.NEGATIVE, 50)
        assert score_impact(100, 100) == (ScoreImpact.NEUTRAL, 0)

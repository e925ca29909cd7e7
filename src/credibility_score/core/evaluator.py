"""Calculation tree evaluation.

Evaluation is a pure recursive walk: nothing in the tree is modified, so one
compiled ``ScoreConfig`` can score any number of input mappings in parallel.
"""

from __future__ import annotations

import logging
import math
import operator
from collections.abc import Callable, Mapping
from functools import reduce
from typing import Optional

from .errors import (
    EmptyCalculationError,
    InvalidArithmeticError,
    MissingInputError,
    UnknownElementTypeError,
)
from .models import (
    Calculation,
    Constant,
    ElementResult,
    LookupInterval,
    LookupNumber,
    Operation,
    ScoreConfig,
    ScoreElement,
    ScoreImpact,
    ScoreResult,
    ScoreSimulation,
)

logger = logging.getLogger(__name__)

ElementInputs = Mapping[str, float]

_OPS: dict[Operation, Callable[[float, float], float]] = {
    Operation.ADD: operator.add,
    Operation.SUBTRACT: operator.sub,
    Operation.MULTIPLY: operator.mul,
    Operation.DIVIDE: operator.truediv,
    Operation.POWER: math.pow,
}


def calculate_element(element: ScoreElement, inputs: ElementInputs) -> float:
    """Recursively evaluate an element (and, for calculations, its children)."""
    if isinstance(element, Constant):
        return element.value
    if isinstance(element, LookupInterval):
        return _apply_interval(element, inputs)
    if isinstance(element, LookupNumber):
        return _apply_lookup_number(element, inputs)
    if isinstance(element, Calculation):
        return _apply_calculation(element, inputs)
    raise UnknownElementTypeError(getattr(element, "type", None))


def evaluate(root: Calculation, inputs: ElementInputs) -> float:
    """Evaluate a calculation tree against named inputs."""
    return calculate_element(root, inputs)


def _input_value(name: str, inputs: ElementInputs) -> float:
    if name not in inputs:
        raise MissingInputError(name)
    return float(inputs[name])


def _apply_interval(interval: LookupInterval, inputs: ElementInputs) -> float:
    value = _input_value(interval.name, inputs)
    for r in interval.ranges:
        if r.contains(value):
            return r.score
    return interval.out_of_range_score


def _apply_lookup_number(lookup: LookupNumber, inputs: ElementInputs) -> float:
    value = _input_value(lookup.name, inputs)
    low, high = lookup.range.min, lookup.range.max
    # TODO: reject Range definitions without both bounds at parse time once no
    # stored configuration relies on passthrough
    if low is None or high is None:
        return value
    if value < low:
        return low
    if value > high:
        return high
    return value


def _apply_calculation(calculation: Calculation, inputs: ElementInputs) -> float:
    if not calculation.children:
        raise EmptyCalculationError(calculation.operation.value)

    results = [calculate_element(child, inputs) for child in calculation.children]
    fn = _OPS[calculation.operation]

    def step(left: float, right: float) -> float:
        try:
            return fn(left, right)
        except ZeroDivisionError as exc:
            raise InvalidArithmeticError(calculation.operation.value, left, right, "division by zero") from exc
        except (ValueError, OverflowError) as exc:
            raise InvalidArithmeticError(calculation.operation.value, left, right, str(exc)) from exc

    return reduce(step, results)


# ─── Whole-score helpers ─────────────────────────────────────────────────────


def element_breakdown(config: ScoreConfig, inputs: ElementInputs) -> dict[str, ElementResult]:
    """Evaluate every catalog element that has an input, keyed by element name."""
    results: dict[str, ElementResult] = {}
    for element in config.catalog:
        if element.name not in inputs:
            logger.debug("No input for %s, omitted from breakdown", element.name)
            continue
        results[element.name] = ElementResult(
            element=element,
            raw=float(inputs[element.name]),
            weighted=calculate_element(element, inputs),
        )
    return results


def calculate_score(config: ScoreConfig, inputs: ElementInputs, breakdown: bool = False) -> ScoreResult:
    """Score one set of inputs, optionally with each element's contribution."""
    score = evaluate(config.root, inputs)
    elements = element_breakdown(config, inputs) if breakdown else {}
    return ScoreResult(score=score, elements=elements)


def simulate_score(
    config: ScoreConfig,
    inputs: ElementInputs,
    overrides: ElementInputs,
    previous_score: Optional[float] = None,
) -> ScoreSimulation:
    """Re-score with ``overrides`` applied over ``inputs``.

    The result is compared against ``previous_score``, or against the score of
    the unmodified inputs when none is given.
    """
    if previous_score is None:
        previous_score = evaluate(config.root, inputs)

    simulated = {**inputs, **overrides}
    score = evaluate(config.root, simulated)
    impact, adjustment = score_impact(previous_score, score)

    return ScoreSimulation(
        score=score,
        previous_score=previous_score,
        impact=impact,
        adjustment=adjustment,
        elements=element_breakdown(config, simulated),
    )


def score_impact(previous: float, current: float) -> tuple[ScoreImpact, float]:
    """Direction and size of the change from ``previous`` to ``current``."""
    diff = current - previous
    if diff > 0:
        return ScoreImpact.POSITIVE, diff
    if diff < 0:
        return ScoreImpact.NEGATIVE, -diff
    return ScoreImpact.NEUTRAL, 0.0

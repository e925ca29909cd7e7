"""Credibility factors and score levels — display-side views of a score."""

from __future__ import annotations

from .errors import UnknownElementTypeError
from .evaluator import ElementInputs, calculate_element
from .models import (
    CredibilityFactor,
    LookupInterval,
    LookupNumber,
    NumberRange,
    ScoreConfig,
    ScoreElement,
    ScoreLevel,
)

SCORE_RANGES: dict[ScoreLevel, NumberRange] = {
    ScoreLevel.UNTRUSTED: NumberRange(min=0, max=799),
    ScoreLevel.QUESTIONABLE: NumberRange(min=800, max=1199),
    ScoreLevel.NEUTRAL: NumberRange(min=1200, max=1599),
    ScoreLevel.REPUTABLE: NumberRange(min=1600, max=1999),
    ScoreLevel.EXEMPLARY: NumberRange(min=2000, max=2800),
}


def element_range(element: ScoreElement) -> NumberRange:
    """The span of values an element can contribute.

    For interval lookups this is the lowest and highest range score; for
    number lookups it is the configured clamp.
    """
    if isinstance(element, LookupInterval):
        scores = [r.score for r in element.ranges]
        if not scores:
            return NumberRange()
        return NumberRange(min=min(scores), max=max(scores))
    if isinstance(element, LookupNumber):
        return element.range
    raise UnknownElementTypeError(element.type)


def convert_element_to_credibility_factor(element: ScoreElement, value: float) -> CredibilityFactor:
    return CredibilityFactor(
        name=element.name,
        range=element_range(element),
        value=value,
        weighted=calculate_element(element, {element.name: value}),
    )


def credibility_factors(config: ScoreConfig, inputs: ElementInputs) -> list[CredibilityFactor]:
    """One factor per catalog element with an input, in catalog order."""
    return [
        convert_element_to_credibility_factor(element, float(inputs[element.name]))
        for element in config.catalog
        if element.name in inputs
    ]


def convert_score_to_level(score: float) -> ScoreLevel:
    """Highest level whose lower bound the score reaches."""
    level = ScoreLevel.UNTRUSTED
    for candidate, bounds in SCORE_RANGES.items():
        if score >= bounds.min:
            level = candidate
    return level

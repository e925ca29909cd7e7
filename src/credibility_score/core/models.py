"""Pydantic data models — the calculation tree and the score results built on it.

Every element kind is a frozen model tagged by a ``type`` literal, so a parsed
tree can be evaluated repeatedly (and concurrently) without any node changing.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Operation(str, Enum):
    """Arithmetic operators allowed in a formula."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


VALID_OPERATIONS = frozenset(op.value for op in Operation)


class ScoreLevel(str, Enum):
    """Named bands a final score falls into."""

    UNTRUSTED = "untrusted"
    QUESTIONABLE = "questionable"
    NEUTRAL = "neutral"
    REPUTABLE = "reputable"
    EXEMPLARY = "exemplary"


class ScoreImpact(str, Enum):
    """Direction a simulated change moves a score."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class IntervalRange(_Frozen):
    """One step of an interval lookup: ``start <= input < end`` maps to ``score``.

    A missing ``start`` covers negative infinity and a missing ``end`` covers
    positive infinity.
    """

    start: Optional[float] = None
    end: Optional[float] = None
    score: float

    def contains(self, value: float) -> bool:
        return (self.start is None or value >= self.start) and (self.end is None or value < self.end)


class NumberRange(_Frozen):
    """Inclusive ``[min, max]`` bounds. Either bound may be absent."""

    min: Optional[float] = None
    max: Optional[float] = None


class Constant(_Frozen):
    """A literal number from the formula."""

    type: Literal["Constant"] = "Constant"
    name: str
    value: float


class LookupInterval(_Frozen):
    """Step function over the named input."""

    type: Literal["LookupInterval"] = "LookupInterval"
    name: str
    ranges: tuple[IntervalRange, ...] = ()
    out_of_range_score: float = 0.0


class LookupNumber(_Frozen):
    """Passes the named input through, clamped into ``range`` when both bounds exist."""

    type: Literal["LookupNumber"] = "LookupNumber"
    name: str
    range: NumberRange = Field(default_factory=NumberRange)


class Calculation(_Frozen):
    """Internal tree node: folds its children's results with ``operation``."""

    type: Literal["Calculation"] = "Calculation"
    name: str
    operation: Operation
    children: tuple[ScoreElement, ...] = ()


ScoreElement = Annotated[
    Union[Constant, LookupInterval, LookupNumber, Calculation],
    Field(discriminator="type"),
]

Calculation.model_rebuild()


def new_calculation(operation: Union[str, Operation], children: tuple = ()) -> Calculation:
    op = Operation(operation)
    return Calculation(name=op.value, operation=op, children=tuple(children))


class ScoreConfig(_Frozen):
    """A compiled score configuration: the formula tree plus its element catalog."""

    root: Calculation
    catalog: tuple[ScoreElement, ...] = ()

    @model_validator(mode="after")
    def _unique_catalog_names(self) -> ScoreConfig:
        seen: set[str] = set()
        for element in self.catalog:
            if element.name in seen:
                raise ValueError(f"Duplicate element name in catalog: {element.name}")
            seen.add(element.name)
        return self

    def get_element(self, name: str) -> Optional[ScoreElement]:
        return next((e for e in self.catalog if e.name == name), None)


class RawScoreConfig(BaseModel):
    """Score configuration as it arrives from JSON, before parsing.

    ``elements`` maps a factor name to a single-key definition, either
    ``{"Interval": ["< 5: 0.1", ...]}`` or ``{"Range": [min, max]}``.
    """

    expression: list[str] = Field(min_length=1, description="Formula fragments, implicitly summed")
    elements: dict[str, Any] = Field(
        default_factory=dict, description="Element definitions; each is validated by the catalog parser"
    )


class ElementResult(BaseModel):
    """A single catalog element evaluated against one set of inputs."""

    element: ScoreElement
    raw: float = Field(description="Input value looked up for the element")
    weighted: float = Field(description="Element's contribution after lookup")


class ScoreResult(BaseModel):
    """Score for one set of inputs, with an optional per-element breakdown."""

    score: float
    elements: dict[str, ElementResult] = Field(default_factory=dict)


class CredibilityFactor(BaseModel):
    """Display record pairing an element's raw value with its weighted score."""

    name: str
    range: NumberRange
    value: float
    weighted: float


class ScoreSimulation(BaseModel):
    """Outcome of re-scoring with some inputs overridden."""

    score: float
    previous_score: float
    impact: ScoreImpact
    adjustment: float = Field(description="Absolute difference between the two scores")
    elements: dict[str, ElementResult] = Field(default_factory=dict)

"""Score configuration parsing — formulas into calculation trees, element
definitions into a typed catalog.

Example formula::

    (1000 * [Ethereum Address Age] * [Twitter Account Age]) + [Ethos Invitation Source Credibility] * 0.5

becomes::

    +
    ├── +
    │   └── *
    │       ├── 1000
    │       └── *
    │           ├── [Ethereum Address Age]
    │           └── [Twitter Account Age]
    └── +
        └── *
            ├── [Ethos Invitation Source Credibility]
            └── 0.5

Operators are not ranked by precedence. Within one unparenthesized run each
operator after the first nests inside the previous one and takes everything to
its right, so ``a / b / c`` is ``a / (b / c)``. Existing configurations depend
on this, so it must not be "fixed" to left associativity. Parentheses are the
only way to control grouping.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional

from .errors import (
    FormulaSyntaxError,
    InvalidIntervalConfig,
    InvalidRangeConfig,
    InvalidTokenError,
    UnknownElementError,
    UnsupportedElementTypeError,
    UnsupportedOperatorError,
)
from .models import (
    VALID_OPERATIONS,
    Calculation,
    Constant,
    IntervalRange,
    LookupInterval,
    LookupNumber,
    NumberRange,
    Operation,
    RawScoreConfig,
    ScoreConfig,
    ScoreElement,
    new_calculation,
)
from .tokenizer import ParenGroups, group_parens

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

# "< 5: 0.1" -> ("<", "5", "0.1")
_RULE_RE = re.compile(r"^\s*(\S+)\s+([^\s:]+)\s*:\s*(\S+)\s*$")

UPPER_BOUND_OPERATOR = "<"
LOWER_BOUND_OPERATOR = "/>"


def _parse_number(text: str) -> Optional[float]:
    if not _NUMBER_RE.match(text):
        return None
    return float(text)


# ─── Formulas ────────────────────────────────────────────────────────────────


def parse_score_calculation(formula: str, catalog: Sequence[ScoreElement]) -> Calculation:
    """Parse a formula into a calculation tree, resolving ``[names]`` against ``catalog``."""
    return walk_tree(group_parens(formula), catalog)


def strings_to_elements(tokens: Iterable[str], catalog: Sequence[ScoreElement]) -> list[ScoreElement]:
    """Classify tokens as catalog lookups, operator placeholders or constants.

    Raises:
        UnknownElementError: a ``[name]`` has no catalog entry.
        InvalidTokenError: a token is none of the above.
    """
    by_name = {e.name: e for e in catalog}
    elements: list[ScoreElement] = []

    for token in tokens:
        if len(token) >= 2 and token.startswith("[") and token.endswith("]"):
            name = token[1:-1]
            if name not in by_name:
                raise UnknownElementError(name)
            elements.append(by_name[name])
        elif token in VALID_OPERATIONS:
            elements.append(new_calculation(token))
        else:
            value = _parse_number(token)
            if value is None:
                raise InvalidTokenError(token)
            elements.append(Constant(name=token, value=value))

    return elements


def elements_to_calculation_tree(elements: Sequence[ScoreElement]) -> Calculation:
    """Fold a flat operand/operator sequence into a nested calculation.

    Operands seen before an operator become its first children. The first
    operator is the root; every later operator is appended to the previous
    one and becomes the new top. Operands left at the end go to the last
    operator. With no operator at all the operands are wrapped in ``+``.

    ``a OP1 b OP2 c`` therefore becomes ``OP1(a, OP2(b, c))``.
    """
    operators: list[tuple[Calculation, list[ScoreElement]]] = []
    pending: list[ScoreElement] = []

    for element in elements:
        if isinstance(element, Calculation):
            operators.append((element, pending))
            pending = []
        else:
            pending.append(element)

    if not operators:
        return new_calculation("+", tuple(pending))

    # build from the innermost (last) operator outwards
    node: Optional[Calculation] = None
    for placeholder, operands in reversed(operators):
        tail = pending if node is None else [node]
        node = placeholder.model_copy(
            update={"children": (*placeholder.children, *operands, *tail)}
        )

    return node


def walk_tree(groups: ParenGroups, catalog: Sequence[ScoreElement]) -> Calculation:
    """Build one ``+`` node whose children are the parsed groups, in formula order.

    Token runs go through ``strings_to_elements`` and
    ``elements_to_calculation_tree``; parenthesized groups recurse. Every group
    is summed by the enclosing ``+``, so the only operator allowed to join a
    group to its neighbours is ``+``. The bare ``+`` run in ``(a) + (b)``
    parses to a childless node and is dropped.

    Raises:
        FormulaSyntaxError: a run starts or ends with an operator other than
            ``+``, as in ``(a) * (b)`` or ``2 * (a)``.
    """
    children: list[Calculation] = []

    for text, value in groups:
        if not value:
            continue
        if isinstance(value[0], str):
            _check_run_edges(text, value)
            node = elements_to_calculation_tree(strings_to_elements(value, catalog))
        else:
            node = walk_tree(value[0], catalog)

        if not node.children:
            logger.debug("Dropping operator-only fragment %r", text)
            continue
        children.append(node)

    return new_calculation("+", tuple(children))


def _check_run_edges(text: str, tokens: Sequence[str]) -> None:
    # An operator with nothing on one side would silently lose that operand.
    first, last = tokens[0], tokens[-1]
    if first in VALID_OPERATIONS and first != Operation.ADD.value:
        raise FormulaSyntaxError(text, text.index(first), f"operator '{first}' has no left operand")
    if last in VALID_OPERATIONS and last != Operation.ADD.value:
        raise FormulaSyntaxError(text, text.rindex(last), f"operator '{last}' has no right operand")


# ─── Element catalog ─────────────────────────────────────────────────────────


def parse_element_definitions(elements: Mapping[str, Any]) -> list[ScoreElement]:
    """Parse ``{name: {"Interval": [...]}}`` / ``{name: {"Range": [min, max]}}`` definitions.

    Raises:
        UnsupportedElementTypeError: the definition is neither Interval nor Range.
        InvalidRangeConfig / InvalidIntervalConfig: the definition is malformed.
        UnsupportedOperatorError: an interval rule uses an operator other than ``<`` or ``/>``.
    """
    catalog: list[ScoreElement] = []

    for name, definition in elements.items():
        if not isinstance(definition, Mapping) or not definition:
            raise UnsupportedElementTypeError(name, None)
        element_type, element_config = next(iter(definition.items()))

        if element_type == "Interval":
            catalog.append(parse_interval_definition(name, _validate_interval_config(name, element_config)))
        elif element_type == "Range":
            low, high = _validate_range_config(name, element_config)
            catalog.append(LookupNumber(name=name, range=NumberRange(min=low, max=high)))
        else:
            raise UnsupportedElementTypeError(name, element_type)

    logger.debug("Parsed %d element definitions", len(catalog))
    return catalog


def parse_interval_definition(name: str, rules: Sequence[str]) -> LookupInterval:
    """Turn rules like ``"< 5: 0.1"`` and ``"/> 90: 1"`` into a resolved interval lookup.

    ``< V`` closes a range at ``V`` and ``/> V`` opens one at ``V``; the
    missing bounds are filled in by ``resolve_overlaps``.
    """
    ranges: list[IntervalRange] = []

    for rule in rules:
        match = _RULE_RE.match(rule)
        if not match:
            raise InvalidIntervalConfig(name, rule)
        operator, bound_text, score_text = match.groups()

        if operator not in (UPPER_BOUND_OPERATOR, LOWER_BOUND_OPERATOR):
            raise UnsupportedOperatorError(operator)

        bound = _parse_number(bound_text)
        score = _parse_number(score_text)
        if bound is None or score is None:
            raise InvalidIntervalConfig(name, rule)

        if operator == UPPER_BOUND_OPERATOR:
            ranges.append(IntervalRange(end=bound, score=score))
        else:
            ranges.append(IntervalRange(start=bound, score=score))

    return LookupInterval(name=name, ranges=tuple(resolve_overlaps(ranges)))


def resolve_overlaps(ranges: Sequence[IntervalRange]) -> list[IntervalRange]:
    """Fill in open bounds so ranges sharing an open side become contiguous.

    Among ranges declared without a ``start``, each gets the nearest smaller
    ``end`` of the others as its start; among ranges declared without an
    ``end``, each gets the nearest larger ``start`` as its end. So
    ``< 5``, ``< 90``, ``/> 90`` resolves to ``(-inf, 5)``, ``[5, 90)``,
    ``[90, inf)``. Ranges from different sides are not reconciled, so
    ``< 5``, ``/> 90`` leaves ``[5, 90)`` uncovered.

    Returns new ranges in declaration order; the input is not modified.

    Configurations written for the older in-place resolver can score
    differently when three or more ranges share an open side and a wider one
    is declared before a narrower one. ``< 90``, ``< 1460``, ``< 365`` used to
    leave ``< 1460`` starting at 90, so with first-match lookup a value of 200
    landed in it; it now starts at 365 and 200 lands in ``< 365``.
    """
    upper_bounds = [r.end for r in ranges if r.start is None and r.end is not None]
    lower_bounds = [r.start for r in ranges if r.end is None and r.start is not None]
    resolved: list[IntervalRange] = []

    for r in ranges:
        if r.start is None and r.end is not None:
            below = [end for end in upper_bounds if end < r.end]
            if below:
                r = r.model_copy(update={"start": max(below)})
        elif r.end is None and r.start is not None:
            above = [start for start in lower_bounds if start > r.start]
            if above:
                r = r.model_copy(update={"end": min(above)})
        resolved.append(r)

    return resolved


def _validate_range_config(name: str, config: Any) -> tuple[float, float]:
    if (
        isinstance(config, (list, tuple))
        and len(config) == 2
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in config)
    ):
        return float(config[0]), float(config[1])
    raise InvalidRangeConfig(name, config)


def _validate_interval_config(name: str, config: Any) -> list[str]:
    if isinstance(config, (list, tuple)) and all(isinstance(item, str) for item in config):
        return list(config)
    raise InvalidIntervalConfig(name)


# ─── Whole configuration ─────────────────────────────────────────────────────


def parse_score_config(raw: RawScoreConfig | Mapping[str, Any]) -> ScoreConfig:
    """Parse a raw configuration: expressions are joined with ``+`` and parsed
    against the element catalog built from ``elements``."""
    if not isinstance(raw, RawScoreConfig):
        raw = RawScoreConfig.model_validate(raw)

    catalog = parse_element_definitions(raw.elements)
    root = parse_score_calculation(" + ".join(raw.expression), catalog)

    logger.debug("Parsed score config: %d fragments, %d elements", len(raw.expression), len(catalog))
    return ScoreConfig(root=root, catalog=tuple(catalog))

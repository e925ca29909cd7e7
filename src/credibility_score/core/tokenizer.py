"""Formula tokenizer and parenthesis grouping.

A formula such as ``(1000 * [Ethereum Address Age]) + [Review Impact] * 0.5``
is first split into parenthesis groups, and each unparenthesized run inside a
group is tokenized into operators, ``[bracketed names]`` and numeric literals.
"""

from __future__ import annotations

import re
from typing import Union

from .errors import FormulaSyntaxError

# A token is either a single split character or a run of anything else, where
# bracketed names are consumed whole so operators inside them do not split.
# `-` is not a split character: "5 - 3" stays one (invalid) token.
_TOKEN_RE = re.compile(r"((?:\[[^\]]*\]|[^\[+*/^()])+|[+*/^()]|\[)")

# (text, tokens) for an unparenthesized run, or (text, [groups]) for a
# parenthesized run whose interior was grouped recursively.
ParenGroup = tuple[str, Union[list[str], list["ParenGroups"]]]
ParenGroups = list[ParenGroup]


def tokenize_formula(formula: str) -> list[str]:
    """Split a formula into trimmed, non-empty tokens."""
    return [t.strip() for t in _TOKEN_RE.findall(formula) if t.strip()]


def group_parens(formula: str) -> ParenGroups:
    """Group a formula by top-level parentheses, recursing into each group.

    Entries keep formula order. Each parenthesized run (parens included) maps
    to a one-element list holding the grouping of its interior; text between
    groups maps to its tokens.

    Raises:
        FormulaSyntaxError: parentheses are unbalanced.
    """
    groups: ParenGroups = []
    depth = 0
    in_name = False
    start = 0
    current = ""

    for i, c in enumerate(formula):
        if in_name:
            in_name = c != "]"
            current += c
            continue
        if c == "[":
            in_name = True
        elif c == "(":
            if depth == 0:
                if current:
                    groups.append((current, tokenize_formula(current)))
                current = ""
                start = i
            depth += 1
        elif c == ")":
            if depth == 0:
                raise FormulaSyntaxError(formula, i, "unexpected ')'")
            depth -= 1

        current += c

        if c == ")" and depth == 0:
            groups.append((current, [group_parens(current[1:-1])]))
            current = ""

    if depth:
        raise FormulaSyntaxError(formula, start, "unclosed '('")

    if current:
        groups.append((current, tokenize_formula(current)))

    return groups

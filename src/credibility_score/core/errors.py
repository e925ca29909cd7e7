"""Exception taxonomy for score configuration parsing and evaluation.

Every failure is synchronous and aborts the whole parse or evaluate call.
``ScoreConfigError`` subclasses mean the formula or catalog is invalid;
``ScoreEvaluationError`` subclasses mean a tree could not be evaluated
against the given inputs.
"""

from __future__ import annotations

from typing import Any, Optional


class ScoreError(Exception):
    """Base class for every score engine failure."""


class ScoreConfigError(ScoreError):
    """The score configuration (formula or element catalog) is invalid."""


class ScoreEvaluationError(ScoreError):
    """A calculation tree could not be evaluated."""


# ─── Parse-time errors ───────────────────────────────────────────────────────


class FormulaSyntaxError(ScoreConfigError):
    def __init__(self, formula: str, position: int, reason: str):
        self.formula = formula
        self.position = position
        self.reason = reason
        super().__init__(f"Invalid formula at position {position}: {reason}")


class InvalidTokenError(ScoreConfigError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Invalid element: {token}")


class UnknownElementError(ScoreConfigError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Custom element not found: [{name}]")


class InvalidRangeConfig(ScoreConfigError):
    def __init__(self, name: str, config: Any = None):
        self.name = name
        self.config = config
        super().__init__(f"Invalid Range configuration for element: {name}")


class InvalidIntervalConfig(ScoreConfigError):
    def __init__(self, name: str, rule: Optional[str] = None):
        self.name = name
        self.rule = rule
        detail = f" (rule {rule!r})" if rule is not None else ""
        super().__init__(f"Invalid Interval configuration for element: {name}{detail}")


class UnsupportedOperatorError(ScoreConfigError):
    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Unsupported operator: {operator}")


class UnsupportedElementTypeError(ScoreConfigError):
    def __init__(self, name: str, element_type: Optional[str]):
        self.name = name
        self.element_type = element_type
        super().__init__(f"Unsupported element type for {name}: {element_type}")


# ─── Evaluation-time errors ──────────────────────────────────────────────────


class EmptyCalculationError(ScoreEvaluationError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Calculation '{operation}' has no elements to evaluate")


class UnknownElementTypeError(ScoreEvaluationError):
    def __init__(self, element_type: Optional[str]):
        self.element_type = element_type
        super().__init__(f"Unknown element type: {element_type}")


class MissingInputError(ScoreEvaluationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No input value provided for element: {name}")


class InvalidArithmeticError(ScoreEvaluationError):
    def __init__(self, operation: str, left: float, right: float, reason: str):
        self.operation = operation
        self.left = left
        self.right = right
        super().__init__(f"Cannot evaluate {left} {operation} {right}: {reason}")

"""Credibility Score engine.

Turns a human-authored scoring formula over named credibility factors into a
calculation tree, and evaluates that tree against observed factor values.
"""

__version__ = "0.1.0"

from .core.evaluator import calculate_element, calculate_score, evaluate, simulate_score
from .core.factors import convert_element_to_credibility_factor, convert_score_to_level, credibility_factors
from .core.models import RawScoreConfig, ScoreConfig, ScoreResult
from .core.parser import parse_score_calculation, parse_score_config

__all__ = [
    "RawScoreConfig",
    "ScoreConfig",
    "ScoreResult",
    "calculate_element",
    "calculate_score",
    "convert_element_to_credibility_factor",
    "convert_score_to_level",
    "credibility_factors",
    "evaluate",
    "parse_score_calculation",
    "parse_score_config",
    "simulate_score",
]

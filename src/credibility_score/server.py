"""Credibility Score MCP Server.

FastMCP server exposing the score engine as read-only tools.
Run: credibility-score-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .config import get_log_level, get_score_config
from .core.errors import ScoreError
from .core.evaluator import calculate_score, evaluate, simulate_score
from .core.factors import SCORE_RANGES, convert_score_to_level, credibility_factors, element_range
from .core.parser import parse_score_calculation

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging and load the score configuration before serving."""
    logging.basicConfig(level=get_log_level(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    config = get_score_config()
    logger.info("Score engine ready (%d elements)", len(config.catalog))
    yield


mcp = FastMCP(
    "Credibility Score",
    instructions="Compute credibility scores from a configurable formula over named credibility factors. Inspect the formula, its elements, and simulate how changing a factor moves the score.",
    lifespan=lifespan,
)


# ─── Tool 1: Calculate ───────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def score_calculate(inputs: dict[str, float]) -> dict:
    """Calculate a credibility score from raw factor values.

    Args:
        inputs: Raw value per element name, e.g. {"Ethereum Address Age": 400}.
    """
    config = get_score_config()
    try:
        result = calculate_score(config, inputs, breakdown=True)
        factors = credibility_factors(config, inputs)
    except ScoreError as exc:
        raise ValueError(str(exc)) from exc

    level = convert_score_to_level(result.score)
    return {
        "score": result.score,
        "level": level.value,
        "elements": {name: r.model_dump(mode="json") for name, r in result.elements.items()},
        "credibility_factors": [f.model_dump(mode="json") for f in factors],
        "summary": f"Score {result.score:.0f} ({level.value})",
    }


# ─── Tool 2: Simulate ────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def score_simulate(
    inputs: dict[str, float],
    overrides: dict[str, float],
    previous_score: Optional[float] = None,
) -> dict:
    """Simulate how overriding some factor values changes a score.

    Args:
        inputs: Current raw value per element name.
        overrides: Values to substitute, e.g. {"Review Impact": 250}.
        previous_score: Score to compare against. Defaults to the score of the unmodified inputs.
    """
    try:
        simulation = simulate_score(get_score_config(), inputs, overrides, previous_score)
    except ScoreError as exc:
        raise ValueError(str(exc)) from exc

    return {
        **simulation.model_dump(mode="json"),
        "summary": f"Score moves from {simulation.previous_score:.0f} to {simulation.score:.0f} ({simulation.impact.value})",
    }


# ─── Tool 3: Formula ─────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def score_formula(expression: str, inputs: Optional[dict[str, float]] = None) -> dict:
    """Parse a formula against the loaded elements and optionally evaluate it.

    Args:
        expression: Formula such as "1000 * [Ethereum Address Age] * [Twitter Account Age]".
        inputs: Raw value per element name. When given, the formula is evaluated.
    """
    config = get_score_config()
    try:
        root = parse_score_calculation(expression, config.catalog)
        value = evaluate(root, inputs) if inputs is not None else None
    except ScoreError as exc:
        raise ValueError(str(exc)) from exc

    return {
        "expression": expression,
        "tree": root.model_dump(mode="json"),
        "value": value,
    }


# ─── Tool 4: Elements ────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def score_elements() -> dict:
    """List the credibility elements available to the score formula."""
    config = get_score_config()
    elements = [
        {**e.model_dump(mode="json"), "display_range": element_range(e).model_dump(mode="json")}
        for e in config.catalog
    ]
    return {
        "elements": elements,
        "count": len(elements),
        "summary": ", ".join(e.name for e in config.catalog) or "No elements configured",
    }


# ─── Tool 5: Levels ──────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def score_levels() -> dict:
    """Score bands and the names they map to."""
    return {
        "levels": [{"level": level.value, **bounds.model_dump()} for level, bounds in SCORE_RANGES.items()],
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()

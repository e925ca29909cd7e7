"""Built-in default score configuration.

Used when no configuration file is supplied. Ages are in days; impacts are
pre-normalized by the caller into the ranges below.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from .errors import UnknownElementError
from .models import RawScoreConfig, ScoreConfig, ScoreElement
from .parser import parse_score_config

DEFAULT_STARTING_SCORE = 1200

# Days a user stays bonded with their inviter after accepting an invitation
BONDING_PERIOD_DAYS = 90


class ScoreElementName(str, Enum):
    ETHEREUM_ADDRESS_AGE = "Ethereum Address Age"
    TWITTER_ACCOUNT_AGE = "Twitter Account Age"
    ETHOS_INVITATION_SOURCE_CREDIBILITY = "Ethos Invitation Source Credibility"
    REVIEW_IMPACT = "Review Impact"
    VOUCHED_ETHEREUM_IMPACT = "Vouched Ethereum Impact"
    NUMBER_OF_VOUCHERS_IMPACT = "Number of Vouchers Impact"


DEFAULT_RAW_SCORE_CONFIG = RawScoreConfig(
    expression=[
        str(DEFAULT_STARTING_SCORE),
        "[Ethereum Address Age] + [Twitter Account Age]",
        "[Ethos Invitation Source Credibility]",
        "[Review Impact] + [Vouched Ethereum Impact] + [Number of Vouchers Impact]",
    ],
    elements={
        ScoreElementName.ETHEREUM_ADDRESS_AGE.value: {
            "Interval": ["< 90: 0", "< 365: 50", "< 1460: 100", "/> 1460: 150"],
        },
        ScoreElementName.TWITTER_ACCOUNT_AGE.value: {
            "Interval": ["< 90: 0", "< 365: 25", "< 1460: 75", "/> 1460: 100"],
        },
        ScoreElementName.ETHOS_INVITATION_SOURCE_CREDIBILITY.value: {"Range": [-400, 400]},
        ScoreElementName.REVIEW_IMPACT.value: {"Range": [-600, 600]},
        ScoreElementName.VOUCHED_ETHEREUM_IMPACT.value: {"Range": [0, 400]},
        ScoreElementName.NUMBER_OF_VOUCHERS_IMPACT.value: {"Range": [0, 200]},
    },
)


@lru_cache(maxsize=1)
def get_default_score_config() -> ScoreConfig:
    return parse_score_config(DEFAULT_RAW_SCORE_CONFIG)


def get_score_element(name: str) -> ScoreElement:
    """Look up an element of the default configuration by name."""
    element = get_default_score_config().get_element(name)
    if element is None:
        raise UnknownElementError(name)
    return element

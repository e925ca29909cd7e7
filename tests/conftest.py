import pytest

from credibility_score.config import reset_score_config
from credibility_score.core.models import IntervalRange, LookupInterval, LookupNumber


@pytest.fixture
def address_age() -> LookupInterval:
    return LookupInterval(
        name="Ethereum Address Age",
        ranges=(
            IntervalRange(end=5, score=0.1),
            IntervalRange(start=5, end=90, score=0.5),
            IntervalRange(start=90, score=1),
        ),
    )


@pytest.fixture
def twitter_age() -> LookupInterval:
    return LookupInterval(
        name="Twitter Account Age",
        ranges=(
            IntervalRange(end=30, score=0.1),
            IntervalRange(start=30, end=90, score=0.5),
            IntervalRange(start=90, score=1),
        ),
    )


@pytest.fixture
def invitation_credibility() -> LookupNumber:
    return LookupNumber(name="Ethos Invitation Source Credibility", range={"min": -400, "max": 400})


@pytest.fixture
def catalog(address_age, twitter_age, invitation_credibility):
    return [address_age, twitter_age, invitation_credibility]


@pytest.fixture
def raw_config() -> dict:
    return {
        "expression": [
            "(1000 * [Ethereum Address Age] * [Twitter Account Age]) + [Ethos Invitation Source Credibility] * 0.5",
        ],
        "elements": {
            "Ethereum Address Age": {"Interval": ["< 5: 0.1", "< 90: 0.5", "/> 90: 1"]},
            "Twitter Account Age": {"Interval": ["< 30: 0.1", "< 90: 0.5", "/> 90: 1"]},
            "Ethos Invitation Source Credibility": {"Range": [-400, 400]},
        },
    }


@pytest.fixture(autouse=True)
def _fresh_score_config(monkeypatch):
    monkeypatch.delenv("SCORE_CONFIG_PATH", raising=False)
    reset_score_config()
    yield
    reset_score_config()

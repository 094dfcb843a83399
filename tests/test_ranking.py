import pytest

from talentrank.models import PLACEHOLDER_SCORE, LearningProfile
from talentrank.ranking import RankingEngine
from conftest import make_profile, make_record

HOUR = 3600


@pytest.fixture
def engine(geo):
    return RankingEngine(geo=geo)


def _react_record(**kw):
    defaults = dict(
        title="React Developer - Lima, Peru",
        location="Lima, Peru",
        source="Computrabajo",
        tags=["react", "node"],
    )
    defaults.update(kw)
    return make_record(**defaults)


def test_keyword_and_geo_score(engine, now):
    profile = make_profile(["react", "node"])
    breakdown = engine.score_record(_react_record(), profile, now=now)
    assert breakdown.keywords == 24
    assert breakdown.geo == 14
    assert breakdown.recency == 0
    assert breakdown.total == 38
    assert breakdown.matched_keywords == ["react", "node"]


def test_more_keyword_hits_never_lower_the_score(engine, now):
    profile = make_profile(["react", "node", "typescript"])
    base = engine.score_record(_react_record(), profile, now=now).total
    richer = engine.score_record(_react_record(tags=["react", "node", "typescript"]), profile, now=now).total
    assert richer > base


def test_recency_buckets(engine, now):
    assert engine.recency_bonus(now - 2 * HOUR, now) == 10
    assert engine.recency_bonus(now - 48 * HOUR, now) == 6
    assert engine.recency_bonus(now - 100 * HOUR, now) == 3
    assert engine.recency_bonus(now - 200 * HOUR, now) == 0
    assert engine.recency_bonus(0, now) == 0


def test_provider_trust(engine, now):
    profile = make_profile(["react"])
    adzuna = engine.score_record(_react_record(source="Adzuna"), profile, now=now)
    board = engine.score_record(_react_record(), profile, now=now)
    assert adzuna.total - board.total == 4


def test_experience_fit(engine, now):
    intern = make_profile(["sistemas"], level="intern")
    senior = make_profile(["sistemas"], level="senior")
    practicante = make_record(title="Practicante de sistemas", location="Lima")
    lead = make_record(title="Senior ingeniero de sistemas", location="Lima")

    assert engine.score_record(practicante, intern, now=now).experience == 8
    assert engine.score_record(lead, intern, now=now).experience == -10
    assert engine.score_record(lead, senior, now=now).experience == 6
    assert engine.score_record(practicante, senior, now=now).experience == -8
    assert engine.score_record(lead, make_profile(["sistemas"]), now=now).experience == 0


def test_learned_boosts_are_capped(engine, now):
    profile = make_profile(["react", "node"])
    learning = LearningProfile(
        keyword_weights={"react": 10.0, "node": 10.0},
        source_weights={"computrabajo": 50.0},
    )
    breakdown = engine.score_record(_react_record(), profile, learning, now=now)
    assert breakdown.feedback == 12 + 8
    assert breakdown.total == 58


def test_placeholders_follow_genuine_records(engine, now):
    profile = make_profile(["python"])
    weak = make_record(title="Cocinero", location="Madrid", url="https://a/1")
    link = make_record(title='Buscar "python"', url="https://b/1", placeholder=True)
    strong = _react_record(url="https://a/2", tags=["python"])
    ranked = engine.rank([link, weak, strong], profile, now=now)
    assert ranked == [strong, weak, link]
    assert link.score == PLACEHOLDER_SCORE
    assert weak.score == 0


def test_ties_break_on_recency(engine, now):
    profile = make_profile(["python"])
    old = make_record(title="Python dev", url="https://a/old", ts=now - 300 * HOUR)
    new = make_record(title="Python dev", url="https://a/new", ts=now - 250 * HOUR)
    assert engine.rank([old, new], profile, now=now) == [new, old]


def test_rank_limit(engine, now):
    records = [make_record(url=f"https://a/{i}") for i in range(5)]
    assert len(engine.rank(records, make_profile(["x"]), limit=3, now=now)) == 3

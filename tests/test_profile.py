import pytest

from talentrank.profile import build_query_profile, infer_experience, seniority_terms_for
from talentrank.skills import DEFAULT_SEEDS


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Estudiante de sistemas", "intern"),
        ("2 años de experiencia en soporte", "junior"),
        ("4 years building APIs", "mid"),
        ("8 años liderando equipos", "senior"),
        ("Practicante, estudiante de 7 años", "intern"),
    ],
)
def test_infer_experience_levels(text, expected):
    _, level = infer_experience(text)
    assert level == expected


def test_infer_experience_takes_largest_year_count():
    years, _ = infer_experience("1 año en ventas y 5 años en desarrollo")
    assert years == 5


def test_profile_starts_with_role_then_skills():
    profile = build_query_profile(
        "Trabajo con React y Node hace 4 años", desired_role="Frontend Developer", country="peru"
    )
    assert profile.keywords[0] == "frontend developer"
    assert "react" in profile.keywords
    assert "node" in profile.keywords
    assert profile.level == "mid"
    assert profile.seniority_terms == seniority_terms_for("mid")


def test_profile_of_empty_text_uses_default_seeds():
    profile = build_query_profile("")
    assert profile.keywords == DEFAULT_SEEDS
    assert profile.level == "intern"
    assert profile.prefers_entry_level is True


def test_profile_without_known_skills_uses_plain_words():
    profile = build_query_profile("Contabilidad tributaria y auditoria financiera")
    assert "contabilidad" in profile.keywords
    assert "auditoria" in profile.keywords


def test_extra_keywords_are_merged():
    profile = build_query_profile("python", extra_keywords=["Airflow"])
    assert profile.keywords[:2] == ["python", "airflow"]

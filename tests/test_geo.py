from talentrank.geo import contains_token
from conftest import make_record


def test_country_lookup_by_alias_and_iso(geo):
    assert geo.country("Perú").name == "Peru"
    assert geo.country("pe").name == "Peru"
    assert geo.country("EE.UU") is None
    assert geo.country("Estados Unidos").name == "United States"


def test_empty_country_resolves_to_default(geo):
    assert geo.display_name("") == "Peru"
    assert geo.display_name("Atlantis") == "Atlantis"


def test_country_tokens_exclude_iso_codes(geo):
    tokens = geo.country_tokens("united states")
    assert "usa" in tokens
    assert "us" not in tokens


def test_whole_word_country_match(geo):
    assert not geo.has_country_token("Trabajo por una buena causa", "united states")
    assert geo.has_country_token("Remote, USA", "united states")
    assert contains_token("lima, peru", "peru")
    assert not contains_token("peruano", "peru")


def test_boards_for_country_and_defaults(geo):
    peru = [b.name for b in geo.boards_for("Peru")]
    assert peru[:4] == ["Computrabajo", "Indeed", "Bumeran", "Portal del Empleo"]
    assert "LinkedIn" in peru

    mexico = geo.boards_for("Mexico")
    assert [b.domain for b in mexico] == ["indeed.com", "linkedin.com/jobs"]


def test_search_link_is_url_encoded(geo):
    linkedin = next(b for b in geo.boards if b.name == "LinkedIn")
    link = linkedin.search_link("c# developer", "Lima, Peru")
    assert link == "https://www.linkedin.com/jobs/search/?keywords=c%23+developer&location=Lima%2C+Peru"


def test_detect_location(geo):
    assert geo.detect_location("Vacante en Arequipa, tiempo completo", "Peru") == "Arequipa, Peru"
    assert geo.detect_location("Tiempo completo", "Peru", native=True) == "Peru"
    assert geo.detect_location("Tiempo completo", "Peru") == "Peru (no especificado)"


def test_is_local(geo):
    assert geo.is_local(make_record(location="Trujillo"), "Peru")
    assert geo.is_local(make_record(location="Remoto - Perú"), "Peru")
    assert not geo.is_local(make_record(location="Buenos Aires, Argentina"), "Peru")
    assert geo.is_local(make_record(location="Sullana"), "Peru", city="Sullana")

import pytest
import requests

from talentrank.errors import ProviderTransientFailure
from talentrank.models import SearchQuery
from talentrank.sources import AdzunaSource, JSearchSource, SerpApiSource, WebSearchSource, get_sources
from talentrank.sources.base import UNKNOWN_COMPANY
from talentrank.sources.fields import FieldMap, pick_list, pick_number, pick_str
from talentrank.sources.web_search import extract_company, resolve_link
from conftest import FakeResponse, FakeSession

ADZUNA_ENV = {"ADZUNA_APP_ID": "id", "ADZUNA_APP_KEY": "key"}

RESULT_HTML = """
<html><body>
<div class="result">
  <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fpe.computrabajo.com%2Foferta%2F1&amp;rut=abc">Analista de Datos - Acme SAC</a>
  <div class="result__snippet">Lima. Publicado hace 3 días. SQL y Power BI.</div>
</div>
<div class="result">
  <a class="result__a" href="https://example.com/blog/empleos">Blog de empleos</a>
</div>
<div class="result"><div class="result__snippet">sin enlace</div></div>
</body></html>
"""


def _query(**kw):
    defaults = dict(keywords=["python", "django"], seeds=["python", "django"], location="Peru", country="Peru")
    defaults.update(kw)
    return SearchQuery(**defaults)


def _env(values):
    return lambda key: values.get(key, "")


def test_field_helpers_walk_dotted_keys():
    row = {"company": {"display_name": " Acme  SAC "}, "salary": "1200.5", "tags": ["a", None, "b"]}
    assert pick_str(row, ("company.name", "company.display_name")) == "Acme SAC"
    assert pick_str(row, ("tags",)) == "a, b"
    assert pick_number(row, ("salary",)) == 1200.5
    assert pick_number({"salary": float("nan")}, ("salary",)) is None
    assert pick_list({"data": {"jobs": [1, 2]}}, ("results", "data.jobs")) == [1, 2]
    assert pick_str("not a mapping", FieldMap().title) == ""


def test_adzuna_maps_rows(geo):
    payload = {
        "results": [
            {
                "title": "Python Developer",
                "company": {"display_name": "Acme"},
                "location": {"display_name": "Lima, Peru"},
                "redirect_url": "https://www.adzuna.com/details/1",
                "description": "Django and AWS",
                "created": "2025-03-07T10:00:00Z",
                "category": {"label": "IT Jobs"},
                "salary_min": 3000,
            },
            {"title": "No link", "redirect_url": ""},
        ]
    }
    session = FakeSession({"api.adzuna.com": FakeResponse(payload=payload)})
    records, status = AdzunaSource(_env(ADZUNA_ENV), geo, session=session).run(_query())

    assert status.success and status.count == 1
    (rec,) = records
    assert rec.organization == "Acme"
    assert rec.location == "Lima, Peru"
    assert rec.source == "Adzuna"
    assert rec.salary_min == 3000
    assert rec.published.label == "2025-03-07"
    assert rec.tags[0] == "it jobs"
    assert "django" in rec.tags

    url, params = session.calls[0]
    assert url.endswith("/us/search/1")
    assert params["what"] == "python django"


def test_rate_limit_becomes_failed_status(geo):
    session = FakeSession({"api.adzuna.com": FakeResponse(status_code=429, payload={})})
    records, status = AdzunaSource(_env(ADZUNA_ENV), geo, session=session).run(_query())
    assert records == []
    assert status.enabled and not status.success
    assert "429" in status.error
    assert len(session.calls) == 1


def test_connection_errors_are_retried_then_reported(geo):
    session = FakeSession({"api.adzuna.com": requests.ConnectionError("boom")})
    records, status = AdzunaSource(_env(ADZUNA_ENV), geo, session=session).run(_query())
    assert records == []
    assert status.error.startswith("request failed")
    assert len(session.calls) == 2


def test_unconfigured_source_is_skipped(geo):
    session = FakeSession()
    records, status = AdzunaSource(_env({}), geo, session=session).run(_query())
    assert records == []
    assert not status.enabled
    assert "ADZUNA_APP_ID" in status.error
    assert session.calls == []


def test_jsearch_query_text_and_mapping():
    payload = {
        "data": [
            {
                "job_title": "Backend Engineer",
                "employer_name": "Globex",
                "job_city": "Lima",
                "job_apply_link": "https://globex.example/jobs/9",
                "job_posted_at_timestamp": 1_700_000_000,
                "job_min_salary": 2500,
            }
        ]
    }
    session = FakeSession({"jsearch.p.rapidapi.com": FakeResponse(payload=payload)})
    query = _query(desired_role="Backend Engineer", city="Lima")
    records, status = JSearchSource(_env({"JSEARCH_API_KEY": "k"}), session=session).run(query)

    assert status.success
    assert records[0].published.ts == 1_700_000_000
    assert records[0].salary_min == 2500
    assert session.calls[0][1]["query"] == "Backend Engineer in Lima, Peru"


def test_serpapi_uses_apply_options():
    payload = {
        "jobs_results": [
            {
                "title": "Data Engineer",
                "company_name": "Initech",
                "location": "Lima, Peru",
                "apply_options": [{"link": "https://initech.example/apply"}],
                "detected_extensions": {"posted_at": "hace 2 días"},
            }
        ]
    }
    session = FakeSession({"serpapi.com": FakeResponse(payload=payload)})
    records, _ = SerpApiSource(_env({"SERPAPI_KEY": "k"}), session=session).run(_query())
    assert records[0].url == "https://initech.example/apply"
    assert records[0].published.label == "2 d"


def test_malformed_json_is_a_failed_status(geo):
    session = FakeSession({"serpapi.com": FakeResponse(text="<html>oops</html>")})
    _, status = SerpApiSource(_env({"SERPAPI_KEY": "k"}), session=session).run(_query())
    assert not status.success
    assert status.error == "malformed JSON payload"


def test_resolve_link_and_company():
    assert resolve_link("//duckduckgo.com/l/?uddg=https%3A%2F%2Fa.com%2Fx&rut=1") == "https://a.com/x"
    assert resolve_link("https://a.com/y") == "https://a.com/y"
    assert resolve_link("/relative") == ""
    assert extract_company("Analista - Acme", "") == "Acme"
    assert extract_company("Analista", "sin empresa") == UNKNOWN_COMPANY


def test_web_search_parses_board_links_only(geo):
    source = WebSearchSource(geo, session=FakeSession())
    board = geo.boards_for("Peru")[0]
    records = source.parse_results(RESULT_HTML, board, _query())

    (rec,) = records
    assert rec.url == "https://pe.computrabajo.com/oferta/1"
    assert rec.source == "Computrabajo"
    assert rec.organization == "Acme SAC"
    assert rec.location == "Lima, Peru"
    assert rec.published.label == "3 d"


def test_web_search_builds_one_query_per_board_and_seed(geo):
    source = WebSearchSource(geo, session=FakeSession())
    queries = source.build_queries(_query(seeds=["python", "django", "sql", "aws"]))
    assert len(queries) == len(geo.boards_for("Peru")) * 3
    assert queries[0][0] == "site:pe.computrabajo.com empleo Peru python"


def test_web_search_end_to_end(geo):
    session = FakeSession({"duckduckgo.com": FakeResponse(text=RESULT_HTML)})
    records, status = WebSearchSource(geo, session=session).run(_query(seeds=["python"]))
    assert status.success
    assert [r.source for r in records] == ["Computrabajo"]


def test_web_search_fails_only_when_every_query_fails(geo):
    session = FakeSession({"duckduckgo.com": requests.Timeout("slow")})
    source = WebSearchSource(geo, session=session)
    with pytest.raises(ProviderTransientFailure):
        source.search(_query(seeds=["python"]))
    _, status = source.run(_query(seeds=["python"]))
    assert status.enabled and not status.success


def test_get_sources_registers_everything(geo):
    sources = get_sources(_env({}), geo, session=FakeSession(), web_search_enabled=False)
    assert [s.name for s in sources] == ["WebSearch", "Adzuna", "JSearch", "SerpApi"]
    assert not any(s.is_configured() for s in sources)


def test_bad_date_only_loses_that_rows_date():
    good = {"job_title": "Backend Engineer", "job_apply_link": "https://globex.example/jobs/1",
            "job_posted_at_timestamp": 1_700_000_000}
    huge = {"job_title": "Data Engineer", "job_apply_link": "https://globex.example/jobs/2",
            "job_posted_at_timestamp": 1e20}
    nan = {"job_title": "QA Engineer", "job_apply_link": "https://globex.example/jobs/3",
           "job_posted_at_timestamp": float("nan")}
    session = FakeSession({"jsearch.p.rapidapi.com": FakeResponse(payload={"data": [good, huge, nan]})})
    records, status = JSearchSource(_env({"JSEARCH_API_KEY": "k"}), session=session).run(_query())

    assert status.success and status.count == 3
    assert records[0].published.ts == 1_700_000_000
    assert not records[1].published.known
    assert not records[2].published.known

import json
import threading

import pytest

from talentrank.memory import KEYWORD_CAP, SOURCE_CAP, FeedbackWeightStore, bucket_key, source_bonus
from conftest import make_record


@pytest.fixture
def store(tmp_path):
    return FeedbackWeightStore(tmp_path / "search-memory.json")


def _results(n=20, with_python=5, source="Adzuna"):
    out = []
    for i in range(n):
        title = "Python developer" if i < with_python else "Data analyst"
        out.append(make_record(title=title, url=f"https://a/{i}", source=source))
    return out


def test_bucket_key_defaults():
    assert bucket_key("Perú", "Junior") == "peru|junior"
    assert bucket_key("", None) == "global|unknown"


def test_source_bonus_decays_to_floor():
    assert source_bonus(0) == pytest.approx(1.2)
    assert source_bonus(10) == pytest.approx(0.7)
    assert source_bonus(100) == pytest.approx(0.2)


def test_keyword_weight_converges_to_cap(store):
    results = _results()
    for _ in range(100):
        store.learn_from_results("Peru", "junior", ["python"], results)
    profile = store.get_profile("Peru", "junior")
    assert profile.keyword_weights["python"] == KEYWORD_CAP
    assert profile.source_weights["adzuna"] == SOURCE_CAP
    assert store.bucket("Peru", "junior").updates == 100


def test_single_update_increments(store):
    bucket = store.learn_from_results("Peru", "junior", ["Python", "sql"], _results(n=4, with_python=2))
    assert bucket.keyword_weights == pytest.approx({"python": 0.4})
    assert bucket.source_weights["adzuna"] == pytest.approx(1.2 + 1.15 + 1.1 + 1.05)


def test_nothing_to_learn_is_a_noop(store, tmp_path):
    assert store.learn_from_results("Peru", "junior", [], _results()) is None
    assert store.learn_from_results("Peru", "junior", ["python"], []) is None
    placeholders = [make_record(url=f"https://p/{i}", placeholder=True) for i in range(3)]
    assert store.learn_from_results("Peru", "junior", ["python"], placeholders) is None
    assert not (tmp_path / "search-memory.json").exists()


def test_unknown_bucket_has_empty_profile(store):
    assert store.get_profile("Chile", "senior").empty


def test_buckets_are_independent(store):
    store.learn_from_results("Peru", "junior", ["python"], _results())
    assert store.get_profile("Peru", "senior").empty
    assert not store.get_profile("peru", "JUNIOR").empty


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "search-memory.json"
    path.write_text("{not json", encoding="utf-8")
    store = FeedbackWeightStore(path)
    assert store.get_profile("Peru", "junior").empty
    store.learn_from_results("Peru", "junior", ["python"], _results())
    assert "peru|junior" in json.loads(path.read_text(encoding="utf-8"))["buckets"]


def test_concurrent_updates_are_not_lost(store):
    results = _results(n=1, with_python=1)
    threads = [
        threading.Thread(target=store.learn_from_results, args=("Peru", "junior", ["python"], results))
        for _ in range(10)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.bucket("Peru", "junior").updates == 10


def test_malformed_bucket_entries_are_skipped(tmp_path):
    path = tmp_path / "search-memory.json"
    path.write_text(
        json.dumps({
            "buckets": {
                "peru|junior": {
                    "keyword_weights": {"python": None, "sql": "lots", "django": 2.5, "aws": True},
                    "source_weights": ["adzuna"],
                    "updates": "many",
                },
            }
        }),
        encoding="utf-8",
    )
    store = FeedbackWeightStore(path)
    profile = store.get_profile("Peru", "junior")
    assert profile.keyword_weights == {"django": 2.5}
    assert profile.source_weights == {}

    bucket = store.learn_from_results("Peru", "junior", ["python"], _results())
    assert bucket.keyword_weights["python"] == pytest.approx(1.0)
    assert bucket.updates == 1

import os
import time

from lunchwidget.cache import SnapshotCache

TWO_HOURS_MS = 2 * 60 * 60 * 1000


def _age_file(path, seconds):
    past = time.time() - seconds
    os.utime(path, (past, past))


def test_set_creates_folder_and_get_returns_fresh_value(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set("snap", '{"income": "1.00"}')
    assert (tmp_path / "LunchMoneyWidget" / "snap").exists()
    assert cache.get("snap", TWO_HOURS_MS) == '{"income": "1.00"}'


def test_get_misses_when_older_than_threshold(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set("snap", "old")
    _age_file(cache.path_for("snap"), 3 * 60 * 60)
    assert cache.get("snap", TWO_HOURS_MS) is None
    assert cache.force_get("snap") == "old"


def test_get_hits_inside_threshold(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set("snap", "recent")
    _age_file(cache.path_for("snap"), 60 * 60)
    assert cache.get("snap", TWO_HOURS_MS) == "recent"


def test_missing_key(tmp_path):
    cache = SnapshotCache(tmp_path)
    assert cache.get("nope", TWO_HOURS_MS) is None
    assert cache.force_get("nope") is None


def test_unreadable_entry_is_a_miss(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.path_for("snap").mkdir(parents=True)
    assert cache.get("snap", TWO_HOURS_MS) is None
    assert cache.force_get("snap") is None


def test_set_overwrites(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set("snap", "one")
    cache.set("snap", "two")
    assert cache.force_get("snap") == "two"


def test_describe(tmp_path):
    cache = SnapshotCache(tmp_path)
    assert cache.describe("snap", TWO_HOURS_MS)["exists"] is False
    cache.set("snap", "x")
    info = cache.describe("snap", TWO_HOURS_MS)
    assert info["exists"] is True
    assert info["fresh"] is True
    assert info["size"] == 1

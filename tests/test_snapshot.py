import json
import os
import time

import pytest

from lunchwidget.cache import SnapshotCache
from lunchwidget.snapshot import get_all_data
from lunchwidget.widget_config import CACHE_KEY, WidgetConfig

INCOME_EXPENSE = {
    "income": "1000.00",
    "spent": "600.00",
    "savings": "40.00%",
    "total": "400.00",
    "lastTransactions": [],
}


class FakeClient:
    def __init__(self, pending=2, plaid=None, income_expense=INCOME_EXPENSE, assets=None):
        self.results = {
            "pending": pending,
            "plaid": plaid if plaid is not None else {"accountsInError": 0, "plaidOldestUpdate": "3 hours"},
            "income_expense": income_expense,
            "assets": assets if assets is not None else {"manualOldestUpdate": "2 days - House"},
        }
        self.calls = []

    async def get_pending_transactions(self):
        self.calls.append("pending")
        return self.results["pending"]

    async def get_plaid_accounts_info(self):
        self.calls.append("plaid")
        return self.results["plaid"]

    async def get_income_and_expense_data(self):
        self.calls.append("income_expense")
        return self.results["income_expense"]

    async def get_assets_info(self):
        self.calls.append("assets")
        return self.results["assets"]


def _make_stale(cache):
    past = time.time() - 5 * 60 * 60
    os.utime(cache.path_for(CACHE_KEY), (past, past))


@pytest.mark.asyncio
async def test_fresh_cache_skips_network(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set(CACHE_KEY, json.dumps({"income": "5.00"}))
    client = FakeClient()
    data = await get_all_data(WidgetConfig(), cache, client)
    assert data == {"income": "5.00"}
    assert client.calls == []


@pytest.mark.asyncio
async def test_miss_fetches_all_four_merges_and_writes(tmp_path):
    cache = SnapshotCache(tmp_path)
    client = FakeClient()
    data = await get_all_data(WidgetConfig(), cache, client)
    assert sorted(client.calls) == ["assets", "income_expense", "pending", "plaid"]
    assert data["pendingTransactions"] == 2
    assert data["accountsInError"] == 0
    assert data["manualOldestUpdate"] == "2 days - House"
    assert data["total"] == "400.00"
    assert json.loads(cache.force_get(CACHE_KEY)) == data


@pytest.mark.asyncio
async def test_stale_cache_is_refreshed(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set(CACHE_KEY, json.dumps({"income": "old"}))
    _make_stale(cache)
    client = FakeClient()
    data = await get_all_data(WidgetConfig(), cache, client)
    assert data["income"] == "1000.00"
    assert len(client.calls) == 4


@pytest.mark.asyncio
async def test_aggregation_failure_falls_back_to_last_snapshot(tmp_path):
    cache = SnapshotCache(tmp_path)
    previous = {"income": "10.00", "spent": "1.00", "accountsInError": 0}
    cache.set(CACHE_KEY, json.dumps(previous))
    _make_stale(cache)
    client = FakeClient(income_expense=None)
    data = await get_all_data(WidgetConfig(), cache, client)
    assert data == previous
    # nothing partial was written back
    assert json.loads(cache.force_get(CACHE_KEY)) == previous


@pytest.mark.asyncio
async def test_aggregation_failure_without_cache_gives_none(tmp_path):
    cache = SnapshotCache(tmp_path)
    data = await get_all_data(WidgetConfig(), cache, FakeClient(income_expense=None))
    assert data is None


@pytest.mark.asyncio
async def test_zero_pending_is_not_a_failure(tmp_path):
    cache = SnapshotCache(tmp_path)
    data = await get_all_data(WidgetConfig(), cache, FakeClient(pending=0))
    assert data["pendingTransactions"] == 0


@pytest.mark.asyncio
async def test_failed_pending_read_leaves_field_out(tmp_path):
    cache = SnapshotCache(tmp_path)
    data = await get_all_data(WidgetConfig(), cache, FakeClient(pending=None))
    assert "pendingTransactions" not in data
    assert data["income"] == "1000.00"


@pytest.mark.asyncio
async def test_force_refresh_ignores_fresh_cache(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set(CACHE_KEY, json.dumps({"income": "5.00"}))
    client = FakeClient()
    data = await get_all_data(WidgetConfig(), cache, client, force_refresh=True)
    assert data["income"] == "1000.00"


@pytest.mark.asyncio
async def test_corrupt_cache_counts_as_miss(tmp_path):
    cache = SnapshotCache(tmp_path)
    cache.set(CACHE_KEY, "{not json")
    data = await get_all_data(WidgetConfig(), cache, FakeClient())
    assert data["income"] == "1000.00"

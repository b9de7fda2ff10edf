# lunchwidget/snapshot.py
import json
import asyncio
import logging
from typing import Any, Dict, Optional

from lunchwidget.aggregator import merge_snapshot
from lunchwidget.cache import SnapshotCache
from lunchwidget.lm_client import LunchMoneyClient
from lunchwidget.widget_config import CACHE_KEY, WidgetConfig


def _decode(blob: Optional[str]) -> Optional[Dict[str, Any]]:
    if not blob:
        return None
    try:
        data = json.loads(blob)
    except ValueError as e:
        logging.error(f"Cached snapshot is not valid JSON: {e}")
        return None
    return data if isinstance(data, dict) else None


async def get_all_data(
    config: WidgetConfig,
    cache: SnapshotCache,
    client: LunchMoneyClient,
    force_refresh: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Fresh cache -> use it. Otherwise fan out the four reads; if the
    income/expense read fails, return the last cached snapshot whatever
    its age (None when there never was one).
    """
    if not force_refresh:
        cached = _decode(cache.get(CACHE_KEY, config.cache_ttl_ms))
        if cached is not None:
            logging.info("get data from cache")
            return cached

    logging.info("get data from api server")
    pending, plaid, income_expense, assets = await asyncio.gather(
        client.get_pending_transactions(),
        client.get_plaid_accounts_info(),
        client.get_income_and_expense_data(),
        client.get_assets_info(),
    )

    if income_expense is None:
        logging.warning("income/expense unavailable; force get data from cache")
        return _decode(cache.force_get(CACHE_KEY))

    data = merge_snapshot(
        {"pendingTransactions": pending} if pending is not None else None,
        plaid,
        income_expense,
        assets,
    )
    cache.set(CACHE_KEY, json.dumps(data))
    return data


async def _load_snapshot(api_key: str, config: WidgetConfig, force_refresh: bool) -> Optional[Dict[str, Any]]:
    cache = SnapshotCache(config.cloud_dir)
    async with LunchMoneyClient(api_key, config) as client:
        return await get_all_data(config, cache, client, force_refresh=force_refresh)


def load_snapshot(api_key: str, config: WidgetConfig, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
    """Synchronous entry point for the CLI and the web app."""
    return asyncio.run(_load_snapshot(api_key, config, force_refresh))

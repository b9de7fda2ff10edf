# lunchwidget/lm_client.py
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import httpx

from lunchwidget import aggregator as agg
from lunchwidget.widget_config import PENDING_LIMIT, WidgetConfig

# Anything a single read can trip over; the caller only sees None.
FETCH_ERRORS = (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError)


def auth_headers(api_key: str) -> Dict[str, str]:
    """Bearer header; a key pasted with its 'Bearer ' prefix is used verbatim."""
    token = api_key if "Bearer" in api_key else f"Bearer {api_key}"
    return {
        "Authorization": token,
        "Content-Type": "application/json",
    }


class LunchMoneyClient:
    """Read-only Lunch Money calls sharing one httpx.AsyncClient."""

    def __init__(self, api_key: str, config: WidgetConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            headers=auth_headers(api_key),
            timeout=config.http_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LunchMoneyClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def send_request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = await self._http.get(path, params=params or None)
        response.raise_for_status()
        return response.json()

    # ---- the four snapshot reads (each returns None on failure) ----

    async def get_pending_transactions(self) -> Optional[int]:
        try:
            res = await self.send_request("/v1/transactions", {"limit": PENDING_LIMIT, "status": "uncleared"})
            return len(res["transactions"])
        except FETCH_ERRORS as e:
            logging.error(f"pending transactions fetch failed: {e!r}")
            return None

    async def get_plaid_accounts_info(self, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        try:
            res = await self.send_request("/v1/plaid_accounts")
            return agg.plaid_sync_health(res["plaid_accounts"], now or datetime.now(timezone.utc))
        except FETCH_ERRORS as e:
            logging.error(f"plaid accounts fetch failed: {e!r}")
            return None

    async def get_income_and_expense_data(self, today: Optional[date] = None) -> Optional[Dict[str, Any]]:
        params = agg.pay_cycle_dates(today or date.today()) if self.config.pay_cycle_mode else None
        try:
            res = await self.send_request("/v1/transactions", params)
            # API lists oldest first; the scan wants newest first
            transactions = list(reversed(res.get("transactions") or []))
            marker = self.config.pay_cycle_marker if self.config.pay_cycle_mode else None
            return agg.summarize_transactions(transactions, pay_cycle_marker=marker)
        except FETCH_ERRORS as e:
            logging.error(f"income/expense fetch failed: {e!r}")
            return None

    async def get_assets_info(self, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        try:
            res = await self.send_request("/v1/assets")
            return agg.manual_oldest_update(res["assets"], now or datetime.now(timezone.utc))
        except FETCH_ERRORS as e:
            logging.error(f"assets fetch failed: {e!r}")
            return None

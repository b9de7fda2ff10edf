# lunchwidget/aggregator.py
# Pure reshaping of Lunch Money API payloads into snapshot fields.
import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dateutil import parser as date_parser

from lunchwidget.widget_config import MAX_LAST_TRANSACTIONS, SYNC_OK_STATUSES


class SnapshotMergeError(ValueError):
    pass


# === Number helpers ===
def _to_float(v) -> float:
    try:
        return float(v or 0.0)
    except (TypeError, ValueError):
        try:
            return float(str(v).replace(",", ""))
        except (TypeError, ValueError):
            return 0.0


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def fixed2(x: float) -> str:
    return f"{x:.2f}"


def savings_rate(income: float, spent: float) -> str:
    """Share of income left over, e.g. '40.00%'; '0' when there is no income."""
    if income <= 0:
        return "0"
    return fixed2((income - spent) / income * 100) + "%"


# === Income / expense scan ===
def _is_displayable(tx: Mapping[str, Any]) -> bool:
    return not tx.get("is_group") and not tx.get("hasChildren")


def _skip_for_totals(tx: Mapping[str, Any]) -> bool:
    return bool(tx.get("exclude_from_totals") or tx.get("hasChildren") or tx.get("group_id") is not None)


def summarize_transactions(
    transactions: Iterable[Mapping[str, Any]],
    pay_cycle_marker: Optional[str] = None,
    max_last: int = MAX_LAST_TRANSACTIONS,
) -> Dict[str, Any]:
    """
    Scan transactions newest-first and return income/spent/savings/total
    plus the most recent displayable transactions.

    Income rows arrive with `to_base` negated by the API, so income is
    accumulated as -to_base while expenses use to_base as-is.
    With a pay-cycle marker the scan stops after the paycheck whose notes
    equal the marker (that paycheck is still counted).
    """
    income = 0.0
    spent = 0.0
    last_transactions: List[Mapping[str, Any]] = []

    for tx in transactions:
        if _is_displayable(tx) and len(last_transactions) < max_last:
            last_transactions.append(tx)

        if _skip_for_totals(tx):
            continue

        amount = _to_float(tx.get("to_base"))
        if tx.get("is_income"):
            income += -amount
        else:
            spent += amount

        if pay_cycle_marker is not None and tx.get("is_income") and tx.get("notes") == pay_cycle_marker:
            break

    return {
        "income": fixed2(income),
        "spent": fixed2(spent),
        "savings": savings_rate(income, spent),
        "total": fixed2(income - spent),
        "lastTransactions": last_transactions,
    }


# === Date helpers ===
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def readable_age(then: datetime, now: Optional[datetime] = None) -> str:
    """'5 hours' up to a day, then '3 days' (both rounded half-up)."""
    now = now or _now_utc()
    hours = _round_half_up((now - then).total_seconds() / 3600.0)
    if hours > 24:
        return f"{_round_half_up(hours / 24)} days"
    return f"{hours} hours"


def pay_cycle_dates(today: date) -> Dict[str, str]:
    """Server-side window for pay-cycle mode: 1st of this month through today."""
    return {
        "start_date": today.replace(day=1).strftime("%Y-%m-%d"),
        "end_date": today.strftime("%Y-%m-%d"),
    }


# === Sync health ===
def plaid_sync_health(accounts: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or _now_utc()
    oldest = now
    in_error = 0
    for acc in accounts:
        if acc.get("status") not in SYNC_OK_STATUSES:
            in_error += 1
        last = parse_timestamp(acc.get("balance_last_update"))
        if last and last < oldest:
            oldest = last

    return {
        "accountsInError": in_error,
        "plaidOldestUpdate": readable_age(oldest, now),
    }


def manual_oldest_update(assets: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or _now_utc()
    oldest = now
    account = ""
    for acc in assets:
        as_of = parse_timestamp(acc.get("balance_as_of"))
        if as_of and as_of < oldest:
            oldest = as_of
            account = acc.get("display_name") or acc.get("name") or ""

    return {"manualOldestUpdate": f"{readable_age(oldest, now)} - {account}"}


# === Snapshot assembly ===
def merge_snapshot(*parts: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Combine partial results into one snapshot. Failed parts (None) add
    nothing; two parts providing the same key is an error.
    """
    merged: Dict[str, Any] = {}
    for part in parts:
        if part is None:
            continue
        clash = sorted(set(merged) & set(part))
        if clash:
            raise SnapshotMergeError(f"Snapshot fields provided twice: {', '.join(clash)}")
        merged.update(part)
    return merged

# lunchwidget/debug_config.py
from flask import Blueprint, jsonify

from lunchwidget.cache import SnapshotCache
from lunchwidget.key_store import KeyStore
from lunchwidget.widget_config import CACHE_KEY, load_config

debug_bp = Blueprint("debug", __name__)


@debug_bp.route("/__debug/cache", methods=["GET"])
def debug_cache():
    """
    Where the snapshot cache lives, how old it is and whether the next
    render would use it. Also reports which storage holds the API key.
    """
    cfg = load_config()
    cache = SnapshotCache(cfg.cloud_dir)
    info = cache.describe(CACHE_KEY, cfg.cache_ttl_ms)
    info["ttl_ms"] = cfg.cache_ttl_ms
    info["api_key_storage"] = KeyStore.from_config(cfg).locate()
    return jsonify(info)


@debug_bp.route("/__debug/config", methods=["GET"])
def debug_config():
    cfg = load_config()
    return jsonify({
        "base_url": cfg.base_url,
        "cache_ttl_ms": cfg.cache_ttl_ms,
        "pay_cycle_mode": cfg.pay_cycle_mode,
        "pay_cycle_marker": cfg.pay_cycle_marker,
        "cloud_dir": str(cfg.cloud_dir),
        "local_dir": str(cfg.local_dir),
    })

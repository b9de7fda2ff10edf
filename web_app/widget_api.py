# web_app/widget_api.py
from __future__ import annotations
from flask import Blueprint, request, jsonify, current_app

from lunchwidget.key_store import KeyStore, MissingApiKeyError, get_api_key
from lunchwidget.layouts import render_widget
from lunchwidget.snapshot import load_snapshot
from lunchwidget.widget_config import WIDGET_SIZES, load_config

bp = Blueprint("widget_api", __name__, url_prefix="/api/widget")


def _truthy(raw) -> bool:
    return str(raw or "0").lower() in ("1", "true", "yes")


def _snapshot_for_request():
    """(config, snapshot) for this request; raises MissingApiKeyError."""
    cfg = load_config(request.args.get("pay_cycle"))
    api_key = get_api_key(KeyStore.from_config(cfg), noninteractive=True)
    data = load_snapshot(api_key, cfg, force_refresh=_truthy(request.args.get("refresh")))
    return cfg, data


@bp.get("/snapshot")
def get_snapshot():
    try:
        _cfg, data = _snapshot_for_request()
    except MissingApiKeyError as e:
        current_app.logger.error("snapshot: %s", e)
        return jsonify({"ok": False, "error": str(e)}), 503
    return jsonify({"ok": data is not None, "snapshot": data})


@bp.get("/<size>")
def get_widget(size: str):
    if size not in WIDGET_SIZES:
        return jsonify({"error": f"Unknown widget size '{size}'", "sizes": list(WIDGET_SIZES)}), 404
    try:
        cfg, data = _snapshot_for_request()
    except MissingApiKeyError as e:
        current_app.logger.error("widget %s: %s", size, e)
        return jsonify({"ok": False, "error": str(e)}), 503
    if data is None:
        current_app.logger.warning("widget %s: no snapshot available, rendering no-data state", size)
    return jsonify(render_widget(size, data, cfg).to_dict())

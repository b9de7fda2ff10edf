# lunchwidget/widget_cli.py
import os
import sys
import json
import argparse
import logging
from pathlib import Path

from lunchwidget.key_store import KeyStore, MissingApiKeyError, get_api_key
from lunchwidget.layouts import render_text, render_widget
from lunchwidget.snapshot import load_snapshot
from lunchwidget.widget_config import WIDGET_SIZES, load_config


def _setup_logging() -> None:
    logs_dir = Path(os.environ.get("WIDGET_LOG_DIR") or "logs")
    logs_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=logs_dir / "widget.log",
        level=logging.INFO,
        format="%(asctime)s %(levelname)s: %(message)s",
    )


def _die(msg: str, code: int = 1) -> int:
    print(f"❌ {msg}", file=sys.stderr)
    logging.error(msg)
    return code


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render the Lunch Money widget")
    parser.add_argument("--size", default="medium", help=f"Widget family ({', '.join(WIDGET_SIZES)})")
    parser.add_argument("--pay-cycle", dest="pay_cycle", help="Paycheck note marking the start of the pay cycle")
    parser.add_argument("--json", action="store_true", help="Print the render tree as JSON")
    parser.add_argument("--refresh", action="store_true", help="Ignore a fresh cache and call the API")
    parser.add_argument("--noninteractive", action="store_true", help="Never prompt for the API key")
    args = parser.parse_args(argv)

    _setup_logging()
    config = load_config(args.pay_cycle)
    logging.info(f"Rendering {args.size} widget (pay cycle: {config.pay_cycle_mode})")

    try:
        api_key = get_api_key(KeyStore.from_config(config), noninteractive=args.noninteractive or None)
    except MissingApiKeyError as e:
        return _die(str(e))

    data = load_snapshot(api_key, config, force_refresh=args.refresh)
    tree = render_widget(args.size, data, config)

    if args.json:
        print(json.dumps(tree.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_text(tree))
    return 0


if __name__ == "__main__":
    sys.exit(main())

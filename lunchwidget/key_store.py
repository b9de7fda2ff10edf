# lunchwidget/key_store.py
import os
import sys
import logging
from getpass import getpass
from pathlib import Path
from typing import Callable, Optional, Tuple

from lunchwidget.widget_config import API_FILE, BASE_FILE, ICLOUD, LOCAL, WidgetConfig


class MissingApiKeyError(RuntimeError):
    pass


class KeyStore:
    """The single Lunch Money API key, kept under either the cloud or the local root."""

    def __init__(self, cloud_dir: Path, local_dir: Path):
        self.roots = {ICLOUD: Path(cloud_dir), LOCAL: Path(local_dir)}

    @classmethod
    def from_config(cls, config: WidgetConfig) -> "KeyStore":
        return cls(config.cloud_dir, config.local_dir)

    def key_path(self, storage: str) -> Path:
        return self.roots[storage] / BASE_FILE / API_FILE

    def locate(self) -> Optional[str]:
        """Which storage holds the key (cloud checked first), or None."""
        for storage in (ICLOUD, LOCAL):
            if self.key_path(storage).exists():
                return storage
        return None

    def read(self, storage: str) -> str:
        return self.key_path(storage).read_text(encoding="utf-8").strip()

    def save(self, api_key: str, storage: str = ICLOUD) -> Path:
        p = self.key_path(storage)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(api_key, encoding="utf-8")
        try:
            os.chmod(p, 0o600)
        except OSError:
            pass
        logging.info(f"Saved API key to {storage} storage")
        return p


def _prompt_for_key() -> Tuple[str, str]:
    print("Lunch Money API Key")
    print("Please enter your Lunch Money API key, found at https://my.lunchmoney.app/developers.")
    api_key = getpass("API key: ").strip()
    choice = input("Where do you want to save this information? [D]evice / [i]Cloud: ").strip().lower()
    storage = ICLOUD if choice.startswith("i") else LOCAL
    return api_key, storage


def get_api_key(
    store: KeyStore,
    noninteractive: Optional[bool] = None,
    prompt: Callable[[], Tuple[str, str]] = _prompt_for_key,
) -> str:
    """
    Resolution order:
      1) env LM_ACCESS_TOKEN
      2) <cloud root>/LunchMoneyWidget/apiKey
      3) <local root>/LunchMoneyWidget/apiKey
      4) interactive prompt (only if allowed); the answer is saved where the user chose
    """
    if noninteractive is None:
        noninteractive = (os.environ.get("NONINTERACTIVE", "0") == "1") or (not sys.stdin.isatty())

    tok = os.environ.get("LM_ACCESS_TOKEN")
    if tok and tok.strip():
        return tok.strip()

    storage = store.locate()
    if storage:
        try:
            tok = store.read(storage)
            if tok:
                return tok
        except OSError as e:
            logging.warning(f"Could not read API key from {storage}: {e}")

    if noninteractive:
        raise MissingApiKeyError(
            "Missing Lunch Money API key. Use LM_ACCESS_TOKEN env or "
            f"put it in {store.key_path(ICLOUD)} or {store.key_path(LOCAL)}."
        )

    api_key, storage = prompt()
    if not api_key:
        raise MissingApiKeyError("No API key provided.")
    store.save(api_key, storage)
    return api_key

# lunchwidget/cache.py
import time
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from lunchwidget.widget_config import BASE_FILE


class SnapshotCache:
    """
    One text file per key under <root>/LunchMoneyWidget/.
    The file's mtime is the only freshness record.
    """

    def __init__(self, root: Path):
        self.folder = Path(root) / BASE_FILE

    def path_for(self, key: str) -> Path:
        return self.folder / key

    def get(self, key: str, max_age_ms: int) -> Optional[str]:
        p = self.path_for(key)
        try:
            age_ms = (time.time() - p.stat().st_mtime) * 1000.0
        except OSError:
            return None
        if age_ms > max_age_ms:
            logging.info(f"Cache expired for {key} (age {age_ms / 1000.0:.0f}s)")
            return None
        try:
            return p.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logging.error(f"Cache read failed for {p}: {e}")
            return None

    def force_get(self, key: str) -> Optional[str]:
        p = self.path_for(key)
        try:
            return p.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logging.error(f"Cache read failed for {p}: {e}")
            return None

    def set(self, key: str, content: str) -> None:
        p = self.path_for(key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            tmp = p.with_suffix(".tmp")
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(p)
        except OSError as e:
            logging.error(f"Cache write failed for {p}: {e}")

    def describe(self, key: str, max_age_ms: int) -> Dict[str, Any]:
        p = self.path_for(key)
        exists = p.exists()
        info: Dict[str, Any] = {"path": str(p), "exists": exists, "size": 0, "mtime": None, "age_s": None, "fresh": False}
        if exists:
            st = p.stat()
            age_s = time.time() - st.st_mtime
            info.update({
                "size": st.st_size,
                "mtime": datetime.fromtimestamp(st.st_mtime).isoformat(),
                "age_s": round(age_s, 1),
                "fresh": age_s * 1000.0 <= max_age_ms,
            })
        return info

from __future__ import annotations

import datetime as dt
import hashlib
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import SearchConfiguration, settings_from_mapping

HOME_ENV_VAR = "USAGEHUNTER_HOME"
LAST_SEARCH_NAME = "last_search.json"
STATE_VERSION = 1


@dataclass(frozen=True)
class LastSearch:
    term: str
    paths: List[str]
    config: SearchConfiguration
    categories: List[str] = field(default_factory=list)
    sort: str = "file"
    language: Optional[str] = None
    saved_at: str = ""

    @property
    def key(self) -> str:
        payload = {
            "term": self.term,
            "paths": self.paths,
            "config": self.config.to_dict(),
            "categories": self.categories,
        }
        digest = hashlib.blake2b(digest_size=8)
        digest.update(json.dumps(payload, sort_keys=True).encode("utf-8"))
        return digest.hexdigest()

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": STATE_VERSION,
            "term": self.term,
            "paths": self.paths,
            "config": self.config.to_dict(),
            "categories": self.categories,
            "sort": self.sort,
            "language": self.language,
            "saved_at": self.saved_at,
        }


def state_home() -> Path:
    value = os.environ.get(HOME_ENV_VAR, "").strip()
    if value:
        return Path(value).expanduser()
    return Path.home() / ".usagehunter"


def save_last_search(search: LastSearch, home: Optional[Path] = None) -> Path:
    root = home or state_home()
    root.mkdir(parents=True, exist_ok=True)
    path = root / LAST_SEARCH_NAME
    payload = search.to_dict()
    payload["saved_at"] = dt.datetime.now().isoformat(timespec="seconds")
    _atomic_json_write(path, payload)
    return path


def load_last_search(home: Optional[Path] = None) -> Optional[LastSearch]:
    path = (home or state_home()) / LAST_SEARCH_NAME
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict) or not data.get("term"):
        return None
    try:
        config = SearchConfiguration(**settings_from_mapping(data.get("config") or {}))
    except ValueError:
        return None
    return LastSearch(
        term=str(data["term"]),
        paths=[str(p) for p in data.get("paths") or []],
        config=config,
        categories=[str(c) for c in data.get("categories") or []],
        sort=str(data.get("sort") or "file"),
        language=data.get("language"),
        saved_at=str(data.get("saved_at") or ""),
    )


def clear_last_search(home: Optional[Path] = None) -> bool:
    path = (home or state_home()) / LAST_SEARCH_NAME
    if not path.exists():
        return False
    path.unlink()
    return True


def _atomic_json_write(path: Path, payload: Dict[str, object]) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
    tmp_path.replace(path)

"""
Resume cache - An explicit on-disk memo threaded through batch runs.

A long scrape can be resumed by loading the cache written by the
previous run and passing it to the pipeline. The cache is an ordinary
value: it is created by the caller, handed to the functions that use
it, and saved by the caller. No module keeps one.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from ..utils.logger import get_logger

logger = get_logger(__name__)


class ResumeCache:
    """
    String-keyed JSON cache with change tracking.

    Entries are stored together with a fingerprint of the input that
    produced them; a lookup with a different fingerprint is a miss.
    """

    def __init__(self, entries: Optional[Dict[str, Dict[str, Any]]] = None,
                 source: Optional[Path] = None):
        self._entries: Dict[str, Dict[str, Any]] = dict(entries or {})
        self.source = source
        self.dirty = False
        self.hits = 0
        self.misses = 0

    @classmethod
    def load(cls, path: Path | str) -> 'ResumeCache':
        """
        Load a cache file, or start empty if it does not exist yet.

        Raises:
            ValueError: If the file exists but is not a JSON object
        """
        path = Path(path)
        if not path.exists():
            logger.info(f"No cache at {path}, starting empty")
            return cls(source=path)

        text = path.read_text(encoding='utf-8')
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as e:
            raise ValueError(f"Cache file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Cache file {path} must contain a JSON object")

        modified = datetime.fromtimestamp(path.stat().st_mtime)
        logger.info(f"Loaded {len(data)} cached entries from {path} (last modified {modified:%Y-%m-%d %H:%M})")
        return cls(entries=data, source=path)

    def get(self, key: str, fingerprint: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None or entry.get("fingerprint") != fingerprint:
            self.misses += 1
            return None
        self.hits += 1
        return entry.get("value")

    def put(self, key: str, fingerprint: str, value: Any) -> None:
        entry = {"fingerprint": fingerprint, "value": value}
        if self._entries.get(key) != entry:
            self._entries[key] = entry
            self.dirty = True

    def save(self, path: Optional[Path | str] = None) -> Path:
        """
        Write the cache to disk.

        Args:
            path: Destination (defaults to the file it was loaded from)

        Returns:
            The path written
        """
        target = Path(path) if path else self.source
        if target is None:
            raise ValueError("No path given and cache was not loaded from a file")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(self._entries, indent=4, sort_keys=True), encoding='utf-8')
        self.dirty = False
        logger.info(f"Wrote {len(self._entries)} cache entries to {target}")
        return target

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

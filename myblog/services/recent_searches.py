"""
Most-recent search terms kept in safe storage.
"""
import json
from typing import List

from ..logging_config import client_logger
from .safe_storage import SafeStorage

RECENT_SEARCHES_KEY = "recentSearches"
MAX_RECENT_SEARCHES = 5


class RecentSearches:
    def __init__(self, storage: SafeStorage, limit: int = MAX_RECENT_SEARCHES):
        self.storage = storage
        self.limit = limit

    def load(self) -> List[str]:
        raw = self.storage.get_item(RECENT_SEARCHES_KEY)
        if not raw:
            return []
        try:
            terms = json.loads(raw)
        except ValueError:
            client_logger.warning("discarding unreadable recent searches")
            return []
        if not isinstance(terms, list):
            return []
        return [term for term in terms if isinstance(term, str)][: self.limit]

    def _save(self, terms: List[str]) -> List[str]:
        self.storage.set_item(RECENT_SEARCHES_KEY, json.dumps(terms, ensure_ascii=False))
        return terms

    def add(self, query: str) -> List[str]:
        """Move ``query`` to the front, dropping duplicates and the oldest extras."""
        term = query.strip()
        terms = self.load()
        if not term:
            return terms
        updated = [term] + [t for t in terms if t != term]
        return self._save(updated[: self.limit])

    def remove(self, query: str) -> List[str]:
        return self._save([t for t in self.load() if t != query])

    def clear(self) -> None:
        self.storage.remove_item(RECENT_SEARCHES_KEY)

import json
import logging
from typing import Callable, List, Optional

from .keys import KeySpace

logger = logging.getLogger(__name__)


class IndexStore:
    """Ordered list of a collection's entry keys, persisted as a JSON array.

    Read-modify-write on the index record is not atomic; a single writer per
    backend is assumed.
    """

    def __init__(self, storage, keyspace: KeySpace):
        self.storage = storage
        self.keyspace = keyspace

    def _save(self, indices: List[str]):
        self.storage.set(self.keyspace.index_key, json.dumps(indices))

    def list(self) -> List[str]:
        raw = self.storage.get(self.keyspace.index_key)
        return json.loads(raw) if raw else []

    def append(self, key: str):
        indices = self.list()
        indices.append(key)
        self._save(indices)

    def remove(self, key: str) -> bool:
        indices = self.list()
        if key not in indices:
            logger.error('The key "%s" doesn\'t exist in %s', key, self.keyspace.index_key)
            return False
        indices.remove(key)
        self._save(indices)
        return True

    @staticmethod
    def find_by_id(indices: List[str], doc_id: str) -> Optional[str]:
        """First key in index order whose id part equals ``doc_id``."""
        doc_id = str(doc_id)
        for key in indices:
            if KeySpace.id_of(key) == doc_id:
                return key
        return None


class IndexCache:
    """In-memory snapshot of an index: either absent or loaded."""

    def __init__(self):
        self._indices: Optional[List[str]] = None

    @property
    def loaded(self) -> bool:
        return self._indices is not None

    def get(self, loader: Callable[[], List[str]]) -> List[str]:
        if self._indices is None:
            self._indices = loader()
        return self._indices

    def invalidate(self):
        self._indices = None

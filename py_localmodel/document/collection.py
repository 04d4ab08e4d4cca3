import json
import uuid
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from ..debug import LocalDebug
from .index import IndexCache, IndexStore
from .keys import KeySpace
from .query import active_clauses, matches
from .schema import Schema
from .wrapper import Document

logger = logging.getLogger(__name__)


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class Collection:
    """A named group of entries sharing a schema.

    The collection is the only writer of its index. Every read goes through a
    lazily loaded index snapshot that ``create`` and ``remove`` invalidate.
    """

    def __init__(self, name: str, schema: Union[Schema, dict], core=None, storage=None,
                 debug: Optional[LocalDebug] = None):
        self.name = name
        self.schema = schema if isinstance(schema, Schema) else Schema(schema)
        self.core = core
        self.storage = storage
        self.debug = debug or LocalDebug()
        self.keyspace = KeySpace(name)
        self.index_store = IndexStore(storage, self.keyspace)
        self._index = IndexCache()

    @property
    def keys(self) -> List[str]:
        return self.schema.names + ["_id"]

    def indices(self) -> List[str]:
        return self._index.get(self.index_store.list)

    def invalidate(self):
        self._index.invalidate()

    def _to_stored(self, record: dict) -> str:
        return json.dumps(record, default=_json_default)

    def _from_stored(self, raw: str) -> dict:
        return json.loads(raw)

    def _load(self, key: str) -> Optional[dict]:
        raw = self.storage.get(key)
        if raw is None:
            logger.warning("Index of %s lists %s but no entry is stored", self.name, key)
            return None
        return self._from_stored(raw)

    def add_field(self, properties: dict):
        self.schema.add_fields(properties)

    def create(self, data: Optional[dict] = None) -> Document:
        data = data or {}
        entry = {"_id": str(uuid.uuid4())}
        for key in self.schema.names:
            value = self.schema.coerce(key, self.schema.default_for(key, data.get(key)))
            if value is not None:
                entry[key] = value

        key = self.keyspace.entry_key(entry["_id"])
        self.storage.set(key, self._to_stored(entry))
        self.index_store.append(key)

        self.invalidate()
        return Document(self, entry)

    def all(self) -> List[Document]:
        results = []
        for key in self.indices():
            entry = self._load(key)
            if entry is not None:
                results.append(Document(self, entry))
        return results

    def find_by_id(self, doc_id: str) -> Optional[Document]:
        key = IndexStore.find_by_id(self.indices(), doc_id)
        if key is None:
            return None
        entry = self._load(key)
        return Document(self, entry) if entry is not None else None

    def find(self, query: Optional[dict] = None, is_count: bool = False) -> Union[List[Document], int]:
        """
        Find entries matching every non-empty clause of ``query``.

        :param query: field -> scalar, compiled regex or range dict
            (``$gte``, ``$gt``, ``$lte``, ``$lt``)
        :param is_count: return the number of matches instead of Documents
        """
        indices = self.indices()
        clauses = active_clauses(query)
        if not clauses:
            return len(indices) if is_count else self.all()

        results: List[Document] = []
        total = 0
        for key in indices:
            entry = self._load(key)
            if entry is None or not matches(entry, clauses, self.schema.convert):
                continue
            total += 1
            if not is_count:
                results.append(Document(self, entry))

        self.debug.log("%d results found in %s", total, self.name)
        return total if is_count else results

    def find_one(self, query: Optional[dict] = None) -> Optional[Document]:
        docs = self.find(query)
        return docs[0] if docs else None

    def count(self, query: Optional[dict] = None) -> int:
        return self.find(query, is_count=True)

    def remove(self, query: Optional[dict] = None) -> int:
        entries = self.find(query)
        # each removal stands alone, nothing is rolled back
        for entry in entries:
            entry.remove()
        return len(entries)

    def update(self, query: Optional[dict], values: Dict) -> int:
        entries = self.find(query)
        for entry in entries:
            for key in self.schema.names:
                if key in values:
                    entry.set(key, values[key])
            entry.save()
        return len(entries)

    def __repr__(self):
        return f"<Collection {self.name} fields={self.schema.names}>"

import logging
from functools import cmp_to_key
from typing import Any, Callable, Dict, Optional

from .query import merge

logger = logging.getLogger(__name__)


class Document:
    """Materialized view of one stored entry.

    ``original`` holds the last persisted values, ``data`` the working ones.
    Fields named in ``populated`` hold resolved Document(s) in ``data`` while
    ``original`` keeps the foreign key that was resolved.
    """

    def __init__(self, collection, entry: Dict[str, Any]):
        object.__setattr__(self, "collection", collection)
        object.__setattr__(self, "data", {})
        object.__setattr__(self, "original", {})
        object.__setattr__(self, "populated", set())

        doc_id = entry.get("_id")
        if doc_id:
            self.original["_id"] = doc_id
            self.data["_id"] = doc_id
        for key in collection.schema.names:
            value = collection.schema.convert(key, entry.get(key))
            if value is not None:
                self.original[key] = value
                self.data[key] = value
        object.__setattr__(self, "index_key", collection.keyspace.entry_key(doc_id))

    @property
    def id(self) -> Optional[str]:
        return self.data.get("_id")

    def __getitem__(self, key):
        return self.data[key]

    def __setitem__(self, key, value):
        self.set(key, value)

    def __contains__(self, key) -> bool:
        return key in self.data

    def __getattr__(self, item):
        try:
            return self.__dict__["data"][item]
        except KeyError:
            raise AttributeError(item) from None

    def __setattr__(self, key, value):
        if key in self.collection.schema:
            self.set(key, value)
        else:
            object.__setattr__(self, key, value)

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key: str, value):
        if key == "_id":
            raise KeyError("'_id' cannot be reassigned")
        self.data[key] = self.collection.schema.coerce(key, value)
        self.populated.discard(key)

    def to_record(self) -> Dict[str, Any]:
        """The flat record ``save`` would persist."""
        record = {}
        for key in self.collection.schema.names:
            source = self.original if key in self.populated else self.data
            if source.get(key) is not None:
                record[key] = source[key]
        record["_id"] = self.data["_id"]
        return record

    def save(self):
        record = self.to_record()
        self.collection.storage.set(self.index_key, self.collection._to_stored(record))
        for key in self.collection.schema.names:
            if key in self.populated:
                continue
            if key in record:
                self.original[key] = record[key]
            else:
                self.original.pop(key, None)

    def remove(self):
        self.collection.index_store.remove(self.index_key)
        self.collection.storage.remove(self.index_key)
        self.collection.invalidate()

    def populate(self, names: str, sort: Optional[Callable[[Any, Any], int]] = None,
                 limit: Optional[int] = None, match: Optional[dict] = None) -> Dict[str, Any]:
        """Replace reference fields with the Document(s) they point to.

        :param names: space-separated field names declared with a ``ref``
        :param sort: comparator ``(a, b) -> int`` applied to the matches
        :param limit: keep at most this many matches
        :param match: extra query clauses merged into the reference lookup
        """
        schema = self.collection.schema
        for name in names.split():
            if name not in schema or not schema[name].ref:
                logger.error("The name %s does not have a ref", name)
                continue

            model = self.collection.core.model(schema[name].ref)
            if model is None:
                continue

            value = self.original.get(name) if name in self.populated else self.data.get(name)
            if value is None:
                continue

            # default uses the _id as the foreign key
            query = {schema[name].foreign_key or "_id": value}
            if match:
                query = merge(match, query)

            related = model.find(query)
            if not related:
                continue

            if sort is not None:
                related.sort(key=cmp_to_key(sort))
            if limit and len(related) > limit:
                related = related[:limit]

            self.data[name] = related[0] if len(related) == 1 else related
            self.populated.add(name)

        return self.data

    def __eq__(self, other):
        if not isinstance(other, Document):
            return NotImplemented
        return self.index_key == other.index_key and self.data == other.data

    __hash__ = None

    def __repr__(self):
        return f"<Document _id={self.id}, {self.data}>"

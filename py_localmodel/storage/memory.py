from typing import Dict, List, Optional

STORAGE_METHODS = ("get", "set", "remove")


def has_storage_capability(storage) -> bool:
    """True if ``storage`` exposes callable ``get``, ``set`` and ``remove``."""
    if storage is None:
        return False
    return all(callable(getattr(storage, m, None)) for m in STORAGE_METHODS)


class MemoryStorage:
    """In-process string key-value store, the local-storage analogue."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str):
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be str, got {type(value).__name__}")
        self._items[key] = value

    def remove(self, key: str):
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)

    def clear(self):
        self._items.clear()

    def __contains__(self, key) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self):
        return f"<MemoryStorage keys={len(self._items)}>"

import logging
from typing import Dict, Optional

from ..debug import LocalDebug
from ..storage.lsm import LSMStorage
from ..storage.memory import MemoryStorage, has_storage_capability
from .collection import Collection

logger = logging.getLogger(__name__)


class DocumentStore:
    """Registry of collections sharing one key-value backend.

    :param data_dir: open a durable :class:`LSMStorage` in this directory
    :param storage: any object with ``get``/``set``/``remove`` (used when no
        ``data_dir`` is given; defaults to a fresh :class:`MemoryStorage`)
    :param debug: emit debug lines through the ``py_localmodel`` logger
    """

    def __init__(self, data_dir: Optional[str] = None, storage=None, debug: bool = False):
        if data_dir is not None:
            storage = LSMStorage(data_dir)
        elif storage is None:
            storage = MemoryStorage()

        if not has_storage_capability(storage):
            logger.warning("Storage is not supported: %r lacks get/set/remove", storage)

        self.storage = storage
        self.debug = LocalDebug(enabled=debug)
        self.collections: Dict[str, Collection] = {}

    def add_model(self, name: str, schema) -> Collection:
        model = Collection(name, schema, core=self, storage=self.storage, debug=self.debug)
        self.collections[name] = model
        return model

    def collection(self, name: str, schema=None) -> Collection:
        if name not in self.collections:
            self.add_model(name, schema or {})
        return self.collections[name]

    def model(self, name: str) -> Optional[Collection]:
        if name not in self.collections:
            logger.error('The model with name "%s" does not exist.', name)
            return None
        return self.collections[name]

    def compact(self):
        if hasattr(self.storage, "compact"):
            self.storage.compact()

    def close(self):
        if hasattr(self.storage, "close"):
            self.storage.close()

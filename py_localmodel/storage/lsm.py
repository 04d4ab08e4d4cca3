import os
import logging

from pathlib import Path
from typing import Dict, Optional, List

from .wal import WAL
from .sstable import SSTable, _MISSING

logger = logging.getLogger(__name__)


class LSMStorage:
    """Durable string key-value backend: WAL + memtable + sorted SSTables.

    Exposes the same ``get``/``set``/``remove`` capability as
    :class:`~py_localmodel.storage.memory.MemoryStorage`.
    """

    def __init__(self, data_dir: str, memtable_limit: int = 2000):
        self.dir = Path(data_dir)
        self.dir.mkdir(parents=True, exist_ok=True)
        self.wal = WAL(self.dir / 'wal.log')
        # recover memtable from WAL
        self.memtable: Dict[str, Optional[str]] = self.wal.replay()
        self.memtable_limit = memtable_limit
        self.sstables: List[SSTable] = []
        for fp in sorted(self.dir.glob('sst_*.jsonl')):
            self.sstables.append(SSTable(fp))
        self._seq = self._seq_of(self.sstables[-1].data_path) if self.sstables else 0

    @staticmethod
    def _seq_of(path: Path) -> int:
        return int(path.stem.split('_')[1])

    def _next_path(self) -> Path:
        self._seq += 1
        return self.dir / f'sst_{self._seq:08d}.jsonl'

    def set(self, key: str, value: str):
        self.wal.append_set(key, value)
        self.memtable[key] = value
        if len(self.memtable) >= self.memtable_limit:
            self.flush()

    def remove(self, key: str):
        self.wal.append_remove(key)
        self.memtable[key] = None
        if len(self.memtable) >= self.memtable_limit:
            self.flush()

    def get(self, key: str) -> Optional[str]:
        if key in self.memtable:
            return self.memtable[key]
        # search newest to oldest SSTable; a tombstone stops the search
        for sst in reversed(self.sstables):
            v = sst.lookup(key)
            if v is not _MISSING:
                return v
        return None

    def keys(self) -> List[str]:
        live: Dict[str, Optional[str]] = {}
        for sst in self.sstables:
            for k, v in sst.items():
                live[k] = v
        live.update(self.memtable)
        return sorted(k for k, v in live.items() if v is not None)

    def flush(self):
        if not self.memtable:
            return
        sst = SSTable.write(self._next_path(), self.memtable.items())
        self.sstables.append(sst)
        logger.debug("Flushed %d keys to %s", len(self.memtable), sst.data_path)
        # reset WAL and clear memtable
        self.wal.reset()
        self.memtable.clear()

    def compact(self):
        """Merge all SSTables newest->oldest, discard tombstones and duplicates."""
        if not self.sstables:
            return
        merged: Dict[str, Optional[str]] = {}
        # newest wins
        for sst in reversed(self.sstables):
            for k, v in sst.items():
                if k not in merged:
                    merged[k] = v
        # drop tombstones
        merged = {k: v for k, v in merged.items() if v is not None}
        new_sst = SSTable.write(self._next_path(), merged.items())
        for sst in self.sstables:
            try:
                os.remove(sst.data_path)
            except FileNotFoundError:
                pass
            try:
                os.remove(sst.index_path)
            except FileNotFoundError:
                pass
        self.sstables = [new_sst]
        logger.debug("Compacted into %s (%d live keys)", new_sst.data_path, len(merged))

    def close(self):
        self.flush()
        self.wal.close()

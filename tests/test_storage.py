import logging

import pytest

from py_localmodel.document.store import DocumentStore
from py_localmodel.storage.lsm import LSMStorage
from py_localmodel.storage.memory import MemoryStorage, has_storage_capability


def test_memory_storage_basics():
    s = MemoryStorage()
    assert s.get("a") is None
    s.set("a", "1")
    assert s.get("a") == "1"
    assert "a" in s and len(s) == 1
    s.remove("a")
    s.remove("a")
    assert s.get("a") is None
    with pytest.raises(TypeError):
        s.set("b", 1)


def test_capability_check():
    assert has_storage_capability(MemoryStorage())
    assert not has_storage_capability(None)
    assert not has_storage_capability(object())


def test_store_warns_on_missing_capability(caplog):
    with caplog.at_level(logging.WARNING):
        DocumentStore(storage=object())
    assert "Storage is not supported" in caplog.text


def test_lsm_get_set_remove(tmp_path):
    s = LSMStorage(str(tmp_path))
    s.set("a", "1")
    s.set("b", "2")
    s.remove("a")
    assert s.get("a") is None
    assert s.get("b") == "2"
    assert s.keys() == ["b"]
    s.close()


def test_lsm_recovers_from_wal(tmp_path):
    s = LSMStorage(str(tmp_path))
    s.set("a", "1")
    s.wal.close()
    s = LSMStorage(str(tmp_path))
    assert s.get("a") == "1"
    s.close()


def test_lsm_flush_and_tombstones(tmp_path):
    s = LSMStorage(str(tmp_path), memtable_limit=3)
    for i in range(40):
        s.set(f"k{i:02d}", str(i))
    s.remove("k05")
    s.flush()
    assert len(s.sstables) > 1
    assert s.get("k05") is None
    assert s.get("k39") == "39"
    assert s.get("k00") == "0"
    assert s.get("zz") is None
    s.close()

    reopened = LSMStorage(str(tmp_path))
    assert reopened.get("k05") is None
    assert reopened.get("k17") == "17"
    assert len(reopened.keys()) == 39
    reopened.close()


def test_lsm_compact(tmp_path):
    s = LSMStorage(str(tmp_path), memtable_limit=2)
    for i in range(10):
        s.set(f"k{i}", str(i))
    s.set("k1", "updated")
    s.remove("k2")
    s.flush()
    s.compact()
    assert len(s.sstables) == 1
    assert s.get("k1") == "updated"
    assert s.get("k2") is None
    assert len(list(tmp_path.glob("sst_*.jsonl"))) == 1
    s.close()


def test_document_store_on_disk(tmp_path):
    store = DocumentStore(str(tmp_path))
    users = store.add_model("users", {"name": str, "age": int})
    ann = users.create({"name": "Ann", "age": 30})
    users.create({"name": "Bo", "age": 17})
    users.remove({"name": "Bo"})
    store.close()

    store = DocumentStore(str(tmp_path))
    users = store.add_model("users", {"name": str, "age": int})
    assert [d.name for d in users.all()] == ["Ann"]
    assert users.find_by_id(ann.id).age == 30
    store.compact()
    assert users.count({"age": {"$gt": 18}}) == 1
    store.close()

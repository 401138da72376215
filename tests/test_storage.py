from rendezreg._storage import MemoryStorage, StorageProtocol


def test_memory_storage_satisfies_protocol() -> None:
    assert isinstance(MemoryStorage(), StorageProtocol)


def test_memory_storage_basic_operations() -> None:
    s: MemoryStorage[str, int] = MemoryStorage()
    s.set("a", 1)
    s.set("b", 2)
    assert "a" in s
    assert len(s) == 2
    assert s.get("a") == 1
    assert s.get("missing") is None
    assert s.get("missing", 0) == 0
    assert sorted(s.keys()) == ["a", "b"]

    assert s.pop("a") == 1
    assert s.pop("a", -1) == -1
    s.delete("missing")
    s.delete("b")
    assert len(s) == 0


def test_memory_storage_to_dict_is_a_copy() -> None:
    s: MemoryStorage[str, int] = MemoryStorage()
    s.set("a", 1)
    d = s.to_dict()
    d["b"] = 2
    assert "b" not in s

    s.clear()
    assert s.to_dict() == {}

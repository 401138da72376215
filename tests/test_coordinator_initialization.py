import logging
from threading import RLock
from typing import Any, List

import pytest

import rendezreg
from rendezreg import Coordinator, OverwritePolicy
from rendezreg._storage import MemoryStorage, StorageProtocol


def test_minimal_init() -> None:
    c = Coordinator()
    snap = c.snapshot()
    assert snap.is_empty()
    assert snap.to_dict() == {"active": {}, "values": {}, "pooled": {}}
    assert c.overwrite_policy is OverwritePolicy.ALLOW
    assert repr(c) == "Coordinator(active=[], values=[], pooled=[])"


def test_init_with_lock() -> None:
    lock = RLock()
    c = Coordinator(lock=lock)
    assert c._lock is lock


def test_init_with_log_level() -> None:
    c = Coordinator(log_level=logging.DEBUG)
    assert c.logger.getEffectiveLevel() == logging.DEBUG
    Coordinator(log_level=logging.WARNING)
    assert c.logger.getEffectiveLevel() == logging.WARNING


def test_init_with_custom_logger() -> None:
    sink = logging.getLogger("tests.rendezreg.sink")
    c = Coordinator(logger=sink, log_level=logging.INFO)
    assert c.logger is sink
    assert sink.level == logging.INFO


def test_init_with_overwrite_policy() -> None:
    assert Coordinator(overwrite_policy=0).overwrite_policy is OverwritePolicy.FORBID
    assert Coordinator(overwrite_policy=2).overwrite_policy is OverwritePolicy.WARN


def test_init_with_storage_factory() -> None:
    made: List[StorageProtocol[Any, Any]] = []

    def factory() -> StorageProtocol[Any, Any]:
        store: MemoryStorage[Any, Any] = MemoryStorage()
        made.append(store)
        return store

    c = Coordinator(storage=factory)
    assert len(made) == 3
    assert len({id(s) for s in made}) == 3

    c.dispatch("t", 1)
    assert sum(len(s) for s in made) == 1


def test_init_with_invalid_overwrite_policy() -> None:
    with pytest.raises(ValueError):
        Coordinator(overwrite_policy=-1)


def test_init_with_invalid_log_level() -> None:
    with pytest.raises(ValueError):
        Coordinator(log_level=-1)


def test_init_with_invalid_lock() -> None:
    with pytest.raises(TypeError):
        Coordinator(lock="not_a_lock")  # type: ignore


def test_instance_returns_isolated_coordinators() -> None:
    a = rendezreg.instance()
    b = Coordinator.instance(overwrite_policy=OverwritePolicy.WARN)
    assert a is not b
    assert a is not rendezreg.coordinator
    assert b.overwrite_policy is OverwritePolicy.WARN

    a.dispatch("shared", 1)
    assert a.has_value("shared")
    assert not b.has_value("shared")
    assert not rendezreg.coordinator.has_value("shared")


def test_module_functions_use_default_coordinator() -> None:
    try:
        rendezreg.dispatch("module-level", "v")
        assert rendezreg.coordinator.has_value("module-level")
        assert rendezreg.inspect().values == {"module-level": "v"}
    finally:
        rendezreg.purge()
    assert rendezreg.coordinator.snapshot().is_empty()


def test_version_is_a_string() -> None:
    assert isinstance(rendezreg.__version__, str)
    assert rendezreg.__version__


def test_init_without_log_level_keeps_logger_level() -> None:
    sink = logging.getLogger("tests.rendezreg.untouched")
    sink.setLevel(logging.ERROR)
    c = Coordinator(logger=sink)
    Coordinator.instance(logger=sink)
    assert c.logger.level == logging.ERROR

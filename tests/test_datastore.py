import threading
import time
from unittest.mock import patch

import pytest

from cache_ttl.datastore import DataStore, CacheItem
from cache_ttl.exceptions import KeyNotFoundError, TtlTypeError, TtlValueError
from cache_ttl.metadata import TtlData
from cache_ttl.plugin import TtlPlugin, ttl_plugin


#-------------FIXTURES----------------
@pytest.fixture
def db(clock):
    return DataStore().use(TtlPlugin(clock=clock))

#-------------PLAIN HOST----------------
def test_host_without_plugins():
    db = DataStore()
    db.set_item("k", "v", {"ttl": 1})
    assert db.get_item("k") == CacheItem("k", "v", {"ttl": 1})
    assert db.has_item("k")
    assert not hasattr(db.extensions, "touch")

def test_set_extra_missing_key():
    with pytest.raises(KeyNotFoundError):
        DataStore().set_extra("nope", {})

def test_remove_and_flush(db):
    db.set_item("a", 1)
    db.set_item("b", 2)
    assert db.remove_item("a") is True
    assert db.remove_item("a") is False
    assert db.list_keys() == ["b"]
    assert db.flush() == "OK"
    assert db.list_keys() == []

#-------------WRITE WITH TTL----------------
def test_set_without_ttl_never_expires(db, clock):
    db.set_item("k", "v")
    db.set_item("j", "w", {"tag": "x"})
    clock.tick(10 ** 6)
    assert db.get_item("k").value == "v"
    assert db.get_extra("j") == {"tag": "x"}

def test_set_with_ttl_stores_ttl_data(db, t0):
    db.set_item("k", "v", {"ttl": 60, "tag": "x"})
    assert db.get_extra("k") == {"tag": "x", "ttlData": TtlData(60, t0, t0 + 60)}

@pytest.mark.parametrize("ttl,error", [(0, TtlValueError), (-5, TtlValueError), ("5", TtlTypeError)])
def test_invalid_ttl_stores_nothing(db, ttl, error):
    with pytest.raises(error):
        db.set_item("k", "v", {"ttl": ttl})
    assert db.list_keys() == []
    assert db.get_extra("k") is None

#-------------LAZY EXPIRATION----------------
def test_hit_before_expiry(db, clock):
    db.set_item("k", "v", {"ttl": 60})
    clock.tick(60)
    assert db.has_item("k")
    assert db.get_item("k").value == "v"
    assert db.list_keys() == ["k"]

def test_expired_key_stays_stored_until_accessed(db, clock):
    db.set_item("k", "v", {"ttl": 60})
    clock.tick(61)
    assert db.list_keys() == ["k"]
    assert db.get_item("k") is None
    assert db.list_keys() == []

def test_expiry_end_to_end(db, clock):
    db.set_item("k", "v", {"ttl": 60})
    clock.tick(61)
    with patch.object(db, "remove_item", wraps=db.remove_item) as remove:
        assert db.has_item("k") is False
        assert db.get_item("k") is None
    remove.assert_called_once_with("k")

def test_expiry_with_system_clock(monkeypatch):
    db = DataStore().use(ttl_plugin())
    db.set_item("k", "v", {"ttl": 1})
    assert db.has_item("k")

    # fast-forward clock by 2 seconds
    real_time = time.time
    monkeypatch.setattr(time, "time", lambda: real_time() + 2)

    assert not db.has_item("k")

#-------------TOUCH----------------
def test_touch_extension_renews(db, clock, t0):
    db.set_item("k", "v", {"ttl": 60, "tag": "x"})
    clock.tick(30)
    renewed = db.extensions.touch("k")
    assert renewed == TtlData(60, t0, t0 + 90)
    assert db.get_extra("k") == {"tag": "x", "ttlData": renewed}
    assert db.get_item("k").value == "v"

    clock.tick(59)  # t0 + 89, past the original deadline
    assert db.has_item("k")

def test_touch_without_ttl(db):
    db.set_item("k", "v", {"tag": "x"})
    assert db.extensions.touch("k") is False
    assert db.extensions.touch("missing") is False
    assert db.get_extra("k") == {"tag": "x"}

def test_touch_holds_lock_against_concurrent_removal(db, clock, t0):
    db.set_item("k", "v", {"ttl": 60})
    real_get_extra = db.get_extra
    remover = threading.Thread(target=db.remove_item, args=("k",))

    def get_extra_then_race(key):
        extra = real_get_extra(key)
        remover.start()
        remover.join(timeout=0.2)  # blocked while touch holds the store lock
        return extra

    clock.tick(30)
    with patch.object(db, "get_extra", side_effect=get_extra_then_race):
        renewed = db.extensions.touch("k")

    assert renewed == TtlData(60, t0, t0 + 90)
    remover.join()
    assert db.list_keys() == []

#-------------PERSISTED AUXILIARY DATA----------------
def test_wire_form_round_trip(db, clock, t0):
    db.set_item("k", "v", {"ttl": 60})
    persisted = {"ttlData": db.get_extra("k")["ttlData"].to_dict()}
    db.set_extra("k", persisted)

    assert db.extensions.touch("k") == TtlData(60, t0, t0 + 60)
    clock.tick(61)
    assert db.get_item("k") is None

"""Tests for key/value stores, IdentityStore and NumberCache."""

import json

from disclosure.domain import RevealedNumbers, UserIdentity
from disclosure.infrastructure import (
    IDENTITY_KEY,
    IdentityStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    NumberCache,
)

AMA = UserIdentity(name="Ama Mensah", phone="0244123456", country_iso="gh")
NUMBERS = RevealedNumbers(display_number="0302123456", whatsapp_number="+233244123456")


# --- IdentityStore ---


def test_identity_roundtrip_uppercases_country():
    store = IdentityStore(InMemoryKeyValueStore())
    store.save(AMA)
    loaded = store.load()
    assert loaded == UserIdentity(name="Ama Mensah", phone="0244123456", country_iso="GH")


def test_identity_absent_returns_none():
    assert IdentityStore(InMemoryKeyValueStore()).load() is None


def test_identity_clear_removes_it():
    store = IdentityStore(InMemoryKeyValueStore())
    store.save(AMA)
    store.clear()
    assert store.load() is None


def test_identity_save_overwrites():
    store = IdentityStore(InMemoryKeyValueStore())
    store.save(AMA)
    store.save(UserIdentity(name="Kofi Boateng", phone="+14155552671"))
    assert store.load().name == "Kofi Boateng"
    assert store.load().country_iso is None


def test_corrupt_identity_payloads_read_as_absent():
    for payload in (
        "{not json",
        "[]",
        json.dumps({"name": "Ama"}),
        json.dumps({"name": 3, "phone": "0244123456"}),
        json.dumps({"name": "  ", "phone": "0244123456"}),
    ):
        kv = InMemoryKeyValueStore({IDENTITY_KEY: payload})
        assert IdentityStore(kv).load() is None, payload


def test_identity_with_bad_country_keeps_name_and_phone():
    kv = InMemoryKeyValueStore(
        {IDENTITY_KEY: json.dumps({"name": "Ama", "phone": "0244123456", "countryIso": 233})}
    )
    assert IdentityStore(kv).load() == UserIdentity(name="Ama", phone="0244123456")


def test_identity_without_storage_is_noop():
    store = IdentityStore(None)
    store.save(AMA)
    store.clear()
    assert store.load() is None


# --- NumberCache ---


def test_numbers_roundtrip_uses_upstream_field_names():
    kv = InMemoryKeyValueStore()
    cache = NumberCache(kv)
    cache.set("listing:1001", NUMBERS)

    assert cache.get("listing:1001") == NUMBERS
    raw = json.loads(kv.get("contact_numbers:listing:1001"))
    assert raw == {"stph2": "0302123456", "stph3": "+233244123456"}


def test_numbers_are_partitioned_by_context_key():
    cache = NumberCache(InMemoryKeyValueStore())
    cache.set("listing:1001", NUMBERS)
    assert cache.get("listing:1002") is None
    assert cache.get("project:1001") is None


def test_numbers_overwritten_by_later_set():
    cache = NumberCache(InMemoryKeyValueStore())
    cache.set("listing:1001", NUMBERS)
    cache.set("listing:1001", RevealedNumbers("0300000000", "+233200000000"))
    assert cache.get("listing:1001").display_number == "0300000000"


def test_incomplete_cached_numbers_read_as_absent():
    kv = InMemoryKeyValueStore(
        {
            "contact_numbers:listing:1": json.dumps({"stph2": "0302123456"}),
            "contact_numbers:listing:2": json.dumps({"stph2": "", "stph3": "1"}),
            "contact_numbers:listing:3": "garbage",
        }
    )
    cache = NumberCache(kv)
    assert cache.get("listing:1") is None
    assert cache.get("listing:2") is None
    assert cache.get("listing:3") is None


def test_number_cache_without_storage_is_noop():
    cache = NumberCache(None)
    cache.set("listing:1", NUMBERS)
    assert cache.get("listing:1") is None


# --- JsonFileKeyValueStore ---


def test_json_file_store_survives_new_instance(tmp_path):
    path = tmp_path / "sessions" / "abc.json"
    IdentityStore(JsonFileKeyValueStore(path)).save(AMA)
    NumberCache(JsonFileKeyValueStore(path)).set("listing:1001", NUMBERS)

    reopened = JsonFileKeyValueStore(path)
    assert IdentityStore(reopened).load().name == "Ama Mensah"
    assert NumberCache(reopened).get("listing:1001") == NUMBERS


def test_json_file_store_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    store = JsonFileKeyValueStore(path)

    assert store.get("anything") is None
    store.set("k", "v")
    assert store.get("k") == "v"


def test_json_file_store_delete(tmp_path):
    store = JsonFileKeyValueStore(tmp_path / "store.json")
    store.set("k", "v")
    store.delete("k")
    store.delete("missing")
    assert store.get("k") is None

"""Tests for the key store contract and in-memory stores."""

from unittest.mock import MagicMock

import pytest

from vault_operator.exceptions import (
    KeyExistsError,
    KeyNotFoundError,
    KeyStoreBackendError,
    KeyStoreError,
)
from vault_operator.keystore import (
    AtomicKeyStore,
    AtomicMemoryKeyStore,
    KeyStore,
    MemoryKeyStore,
    key_exists,
    set_if_absent,
)


# ============================================================================
# Protocol
# ============================================================================


class TestKeyStoreProtocol:
    """Tests for the KeyStore protocol definition."""

    def test_memory_store_is_key_store(self):
        """MemoryKeyStore satisfies the KeyStore protocol."""
        assert isinstance(MemoryKeyStore(), KeyStore)

    def test_plain_memory_store_is_not_atomic(self):
        """A store without create() is not atomic."""
        assert not isinstance(MemoryKeyStore(), AtomicKeyStore)

    def test_atomic_memory_store_is_atomic(self):
        """AtomicMemoryKeyStore satisfies AtomicKeyStore."""
        assert isinstance(AtomicMemoryKeyStore(), AtomicKeyStore)

    def test_protocol_has_required_methods(self):
        """The protocol declares get, set and test."""
        for method in ("get", "set", "test"):
            assert hasattr(KeyStore, method)


# ============================================================================
# In-memory store
# ============================================================================


class TestMemoryKeyStore:
    """Tests for MemoryKeyStore."""

    def test_get_missing_raises_not_found(self):
        """A missing key raises KeyNotFoundError."""
        store = MemoryKeyStore()

        with pytest.raises(KeyNotFoundError) as exc_info:
            store.get("unseal-key-0")

        assert exc_info.value.details["key"] == "unseal-key-0"

    def test_set_then_get(self):
        """A stored value reads back unchanged."""
        store = MemoryKeyStore()
        store.set("root-token", b"hvs.abc")

        assert store.get("root-token") == b"hvs.abc"
        assert "root-token" in store
        assert len(store) == 1

    def test_set_refuses_overwrite(self):
        """Writing an existing key fails and keeps the old value."""
        store = MemoryKeyStore()
        store.set("root-token", b"first")

        with pytest.raises(KeyExistsError):
            store.set("root-token", b"second")

        assert store.get("root-token") == b"first"

    def test_test_round_trip_leaves_no_key(self):
        """test() leaves nothing behind."""
        store = MemoryKeyStore()
        store.test("test-key")

        assert "test-key" not in store
        assert len(store) == 0

    def test_calls_are_recorded(self):
        """Every operation is recorded in order."""
        store = MemoryKeyStore()
        store.set("a", b"1")
        store.get("a")

        assert store.calls == [("set", "a"), ("get", "a")]
        assert store.writes == ["a"]

    def test_clear(self):
        """clear() drops entries and recorded calls."""
        store = MemoryKeyStore()
        store.set("a", b"1")
        store.clear()

        assert len(store) == 0
        assert store.calls == []


# ============================================================================
# Helpers
# ============================================================================


class TestKeyExists:
    """Tests for key_exists."""

    def test_present_and_absent(self):
        """key_exists reports presence."""
        store = MemoryKeyStore()
        store.set("a", b"1")

        assert key_exists(store, "a") is True
        assert key_exists(store, "b") is False

    def test_backend_failure_is_not_treated_as_absent(self):
        """Backend errors propagate instead of reading as absent."""
        store = MagicMock()
        store.get.side_effect = KeyStoreError("bucket unreachable")

        with pytest.raises(KeyStoreBackendError):
            key_exists(store, "a")


class TestSetIfAbsent:
    """Create-only writes."""

    def test_first_write_succeeds_second_fails(self):
        """A second create-only write raises KeyExistsError."""
        store = MemoryKeyStore()

        set_if_absent(store, "unseal-key-0", b"first")
        with pytest.raises(KeyExistsError):
            set_if_absent(store, "unseal-key-0", b"second")

        assert store.get("unseal-key-0") == b"first"

    def test_non_atomic_store_checks_before_writing(self):
        """Non-atomic stores are read before the write."""
        store = MemoryKeyStore()
        set_if_absent(store, "k", b"v")

        assert store.calls == [("get", "k"), ("set", "k")]

    def test_existing_key_never_reaches_set(self):
        """An existing key stops the write before set()."""
        store = MemoryKeyStore()
        store.set("k", b"v")
        store.calls.clear()

        with pytest.raises(KeyExistsError):
            set_if_absent(store, "k", b"other")

        assert store.writes == []

    def test_atomic_store_uses_create(self):
        """Atomic stores go through create()."""
        store = AtomicMemoryKeyStore()
        set_if_absent(store, "k", b"v")

        assert store.calls == [("create", "k")]
        with pytest.raises(KeyExistsError):
            set_if_absent(store, "k", b"other")
        assert store.get("k") == b"v"

    def test_check_then_act_race_window(self):
        """Without an atomic create, a concurrent writer between get and set wins."""

        class RacingStore(MemoryKeyStore):
            def set(self, name, value):
                # Another writer lands first, after our existence check
                if name not in self._store:
                    self._store[name] = b"other-writer"
                super().set(name, value)

        store = RacingStore()
        with pytest.raises(KeyExistsError):
            set_if_absent(store, "unseal-key-0", b"ours")

        assert store.get("unseal-key-0") == b"other-writer"

    def test_backend_error_on_set_is_wrapped(self):
        """Backend write failures raise KeyStoreBackendError."""
        store = MagicMock(spec=["get", "set", "test"])
        store.get.side_effect = KeyNotFoundError("missing")
        store.set.side_effect = KeyStoreError("write refused")

        with pytest.raises(KeyStoreBackendError) as exc_info:
            set_if_absent(store, "k", b"v")

        assert exc_info.value.details["key"] == "k"

"""In-memory key store.

Simple dict-based storage that doesn't persist anywhere.
Used by the test suite and for local dry runs against a dev server.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from vault_operator.exceptions import (
    KeyExistsError,
    KeyNotFoundError,
    KeyStoreBackendError,
)


class MemoryKeyStore:
    """In-memory key store backend.

    Values are stored as bytes in a dictionary. ``set`` refuses to
    overwrite an existing key, matching stores that only allow
    create-once writes. Every call is recorded in ``calls`` so tests can
    assert on the exact access pattern.

    Example:
        store = MemoryKeyStore()
        store.set("unseal-key-0", b"share")
        share = store.get("unseal-key-0")
    """

    def __init__(self) -> None:
        self._store: Dict[str, bytes] = {}
        self.calls: List[Tuple[str, str]] = []

    def get(self, name: str) -> bytes:
        self.calls.append(("get", name))
        try:
            return self._store[name]
        except KeyError:
            raise KeyNotFoundError(
                f"key '{name}' not found", details={"key": name}
            ) from None

    def set(self, name: str, value: bytes) -> None:
        self.calls.append(("set", name))
        if name in self._store:
            raise KeyExistsError(
                f"key '{name}' already exists", details={"key": name}
            )
        self._store[name] = bytes(value)

    def test(self, name: str) -> None:
        self.calls.append(("test", name))
        sample = b"vault-operator-test"
        self._store[name] = sample
        try:
            if self._store.get(name) != sample:
                raise KeyStoreBackendError(
                    f"test key '{name}' did not round-trip", details={"key": name}
                )
        finally:
            self._store.pop(name, None)

    def delete(self, name: str) -> None:
        """Remove a key if present."""
        self._store.pop(name, None)

    def names(self) -> List[str]:
        """Return stored key names in insertion order."""
        return list(self._store)

    @property
    def writes(self) -> List[str]:
        """Names passed to ``set``, in call order."""
        return [name for op, name in self.calls if op == "set"]

    def clear(self) -> None:
        """Clear all keys and the call log.

        Useful for test cleanup.
        """
        self._store.clear()
        self.calls.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._store

    def __len__(self) -> int:
        """Return number of stored keys."""
        return len(self._store)


class AtomicMemoryKeyStore(MemoryKeyStore):
    """MemoryKeyStore exposing an atomic create-if-absent primitive."""

    def create(self, name: str, value: bytes) -> None:
        self.calls.append(("create", name))
        if name in self._store:
            raise KeyExistsError(
                f"key '{name}' already exists", details={"key": name}
            )
        self._store[name] = bytes(value)

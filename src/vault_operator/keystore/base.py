"""Key store contract.

Defines the interface the bootstrap engine consumes to persist unseal key
shares and the root token outside Vault (e.g. a cloud KMS-encrypted bucket).
Uses Python's Protocol for structural subtyping.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vault_operator.exceptions import (
    KeyExistsError,
    KeyNotFoundError,
    KeyStoreBackendError,
    KeyStoreError,
)


@runtime_checkable
class KeyStore(Protocol):
    """Protocol for key share storage backends.

    Implementations must raise KeyNotFoundError for a missing key and
    KeyStoreBackendError (or another KeyStoreError) for anything else, so
    callers can tell "absent" apart from "unreachable".

    Example:
        class BucketKeyStore:
            def get(self, name: str) -> bytes:
                ...
            def set(self, name: str, value: bytes) -> None:
                ...
            def test(self, name: str) -> None:
                ...

        store: KeyStore = BucketKeyStore()
    """

    def get(self, name: str) -> bytes:
        """Retrieve a value by name.

        Args:
            name: Key name (e.g., "unseal-key-0")

        Returns:
            The stored bytes

        Raises:
            KeyNotFoundError: If no value is stored under this name
            KeyStoreBackendError: On any other failure
        """
        ...

    def set(self, name: str, value: bytes) -> None:
        """Store a value.

        Args:
            name: Key name
            value: Opaque bytes to store

        Raises:
            KeyExistsError: If the backend refuses to overwrite
            KeyStoreBackendError: On any other failure
        """
        ...

    def test(self, name: str) -> None:
        """Round-trip a disposable value to verify the backend works.

        Args:
            name: Name of the disposable test key

        Raises:
            KeyStoreBackendError: If the round trip fails
        """
        ...


@runtime_checkable
class AtomicKeyStore(KeyStore, Protocol):
    """Key store that offers an atomic create-if-absent primitive."""

    def create(self, name: str, value: bytes) -> None:
        """Store a value only if the name is unused.

        Raises:
            KeyExistsError: If a value is already stored under this name
        """
        ...


def key_exists(store: KeyStore, name: str) -> bool:
    """Check whether a key is present.

    Returns:
        True if a value is stored, False if the store reports not-found

    Raises:
        KeyStoreBackendError: If the store fails with anything but not-found
    """
    try:
        store.get(name)
    except KeyNotFoundError:
        return False
    except KeyStoreError as e:
        raise KeyStoreBackendError(
            f"error checking key '{name}': {e.message}",
            details={"key": name, "error": str(e)},
        ) from e
    return True


def set_if_absent(store: KeyStore, name: str, value: bytes) -> None:
    """Write a key only if it does not exist yet.

    Uses the store's atomic ``create`` when available. Otherwise performs a
    get-then-set, which is not atomic: two writers racing on the same name
    can both observe not-found and the later ``set`` decides the outcome.

    Raises:
        KeyExistsError: If the key is already present
        KeyStoreBackendError: If the existence check or the write fails
    """
    if isinstance(store, AtomicKeyStore):
        store.create(name, value)
        return

    if key_exists(store, name):
        raise KeyExistsError(
            f"error setting key '{name}': it already exists",
            details={"key": name},
        )
    try:
        store.set(name, value)
    except KeyExistsError:
        raise
    except KeyStoreError as e:
        raise KeyStoreBackendError(
            f"error setting key '{name}': {e.message}",
            details={"key": name, "error": str(e)},
        ) from e

"""Key store contract for vault-operator.

- KeyStore / AtomicKeyStore - Protocols consumed by the bootstrap engine
- set_if_absent / key_exists - create-only helpers built on the contract
- MemoryKeyStore / AtomicMemoryKeyStore - In-memory stores for tests

Concrete cloud backends live outside this package; anything implementing
``get``/``set``/``test`` with the documented errors can be plugged in.
"""

from .base import AtomicKeyStore, KeyStore, key_exists, set_if_absent
from .memory import AtomicMemoryKeyStore, MemoryKeyStore

__all__ = [
    "KeyStore",
    "AtomicKeyStore",
    "key_exists",
    "set_if_absent",
    "MemoryKeyStore",
    "AtomicMemoryKeyStore",
]

"""Key store names used by the bootstrap engine.

These names are stable across restarts and releases; changing them would
orphan the shares of every already-initialized server.
"""

from typing import List

ROOT_TOKEN_KEY = "root-token"
TEST_KEY = "test-key"
UNSEAL_KEY_PREFIX = "unseal-key-"


def unseal_key_name(index: int) -> str:
    """Return the key store name of the unseal share at ``index``.

    Raises:
        ValueError: If index is negative
    """
    if index < 0:
        raise ValueError(f"unseal key index must be >= 0, got: {index}")
    return f"{UNSEAL_KEY_PREFIX}{index}"


def init_key_names(secret_shares: int) -> List[str]:
    """All names an initialization writes: the root token plus every share."""
    return [ROOT_TOKEN_KEY] + [unseal_key_name(i) for i in range(secret_shares)]

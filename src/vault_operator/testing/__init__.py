"""Test helpers for vault-operator.

- FakeVaultServer / FakeVaultClient: in-memory Vault admin API
- pytest_fixtures: ready-made fixtures (register with pytest_plugins)

Usage:
    from vault_operator.testing import FakeVaultServer

    server = FakeVaultServer()
    operator = VaultOperator(config, MemoryKeyStore(), server.client())
"""

from .fake_vault import FakeVaultClient, FakeVaultServer

__all__ = [
    "FakeVaultServer",
    "FakeVaultClient",
]

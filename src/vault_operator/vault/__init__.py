"""
Vault bootstrap and reconciliation.
===================================
"""

from vault_operator.vault.bootstrap import VaultBootstrap
from vault_operator.vault.config import ThresholdConfig
from vault_operator.vault.configurer import (
    ReconcileReport,
    VaultConfigurer,
    is_immutable_config_error,
)
from vault_operator.vault.naming import (
    ROOT_TOKEN_KEY,
    TEST_KEY,
    init_key_names,
    unseal_key_name,
)
from vault_operator.vault.operator import VaultOperator

__all__ = [
    "VaultBootstrap",
    "VaultConfigurer",
    "VaultOperator",
    "ThresholdConfig",
    "ReconcileReport",
    "is_immutable_config_error",
    "ROOT_TOKEN_KEY",
    "TEST_KEY",
    "init_key_names",
    "unseal_key_name",
]

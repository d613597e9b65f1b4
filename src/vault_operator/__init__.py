"""vault-operator - Bootstrap and configure HashiCorp Vault.

This package provides:
- vault: init / threshold unseal / scoped root session / reconciliation
- keystore: the key store contract for unseal shares and the root token
- admin: hvac-based client for Vault's administrative API
- models: desired-state models and YAML/JSON loader
- logger: structured logging with session tracking and JSON support
- exceptions: structured exception hierarchy
"""

__version__ = "1.0.0"

from vault_operator.admin import AdminClientConfig, VaultAdminClient
from vault_operator.exceptions import (
    AuthConfigError,
    ConfigValidationError,
    ConfigureError,
    InitError,
    InitPrecheckError,
    KeyExistsError,
    KeyNotFoundError,
    KeyRetrievalError,
    KeyStoreBackendError,
    KeyStoreError,
    PolicyConfigError,
    SecretEngineConfigError,
    TransportError,
    UnsealError,
    VaultOperatorError,
    WaitTimeoutError,
)
from vault_operator.keystore import KeyStore, MemoryKeyStore, set_if_absent
from vault_operator.logger import Logger, create_logger, get_logger
from vault_operator.models import ExternalConfig, load_external_config
from vault_operator.vault import (
    ReconcileReport,
    ThresholdConfig,
    VaultBootstrap,
    VaultConfigurer,
    VaultOperator,
)

__all__ = [
    "__version__",
    # Engines
    "VaultOperator",
    "VaultBootstrap",
    "VaultConfigurer",
    "ThresholdConfig",
    "ReconcileReport",
    # Admin API
    "AdminClientConfig",
    "VaultAdminClient",
    # Key store
    "KeyStore",
    "MemoryKeyStore",
    "set_if_absent",
    # Desired state
    "ExternalConfig",
    "load_external_config",
    # Logger
    "Logger",
    "create_logger",
    "get_logger",
    # Exceptions
    "VaultOperatorError",
    "ConfigValidationError",
    "TransportError",
    "KeyStoreError",
    "KeyNotFoundError",
    "KeyExistsError",
    "KeyStoreBackendError",
    "KeyRetrievalError",
    "InitError",
    "InitPrecheckError",
    "UnsealError",
    "WaitTimeoutError",
    "ConfigureError",
    "AuthConfigError",
    "PolicyConfigError",
    "SecretEngineConfigError",
]

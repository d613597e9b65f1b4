"""Exceptions for vault-operator.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Usage:
    from vault_operator.exceptions import (
        VaultOperatorError,
        KeyNotFoundError,
        InitPrecheckError,
        UnsealError,
    )
"""

from vault_operator.exceptions.base import (
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

__all__ = [
    "VaultOperatorError",
    # Configuration
    "ConfigValidationError",
    # Transport
    "TransportError",
    # Key store
    "KeyStoreError",
    "KeyNotFoundError",
    "KeyExistsError",
    "KeyStoreBackendError",
    # Bootstrap
    "KeyRetrievalError",
    "InitError",
    "InitPrecheckError",
    "UnsealError",
    "WaitTimeoutError",
    # Reconciliation
    "ConfigureError",
    "AuthConfigError",
    "PolicyConfigError",
    "SecretEngineConfigError",
]

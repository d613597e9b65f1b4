"""Base exception classes for vault-operator.

All vault-operator exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for diagnosis (key name, mount path, spec identity)
"""

from typing import Any, Dict, Optional


class VaultOperatorError(Exception):
    """Base exception for all vault-operator errors.

    Attributes:
        code: Machine-readable error code (e.g., "UNSEAL_FAILED")
        message: Human-readable error message
        details: Optional additional context for diagnosis
    """

    default_code = "VAULT_OPERATOR_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize error with structured information.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (defaults to the class code)
            details: Optional additional context
        """
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error string."""
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary with code, message, and details keys.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigValidationError(VaultOperatorError):
    """Configuration is invalid or incomplete.

    Raised before any server or key store contact is made.
    """

    default_code = "CONFIG_INVALID"


class TransportError(VaultOperatorError):
    """The Vault server could not be reached or rejected a request."""

    default_code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        errors: Optional[list] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.errors = list(errors or [])
        self.status_code = status_code


class KeyStoreError(VaultOperatorError):
    """Base for key store failures."""

    default_code = "KEYSTORE_ERROR"


class KeyNotFoundError(KeyStoreError):
    """The requested key does not exist in the key store.

    Distinguishable from every other key store failure; the engines branch on it.
    """

    default_code = "KEY_NOT_FOUND"


class KeyExistsError(KeyStoreError):
    """A create-only write found the key already present."""

    default_code = "KEY_EXISTS"


class KeyStoreBackendError(KeyStoreError):
    """Any key store failure other than not-found / already-exists."""

    default_code = "KEYSTORE_BACKEND"


class KeyRetrievalError(VaultOperatorError):
    """An unseal key could not be read from the key store."""

    default_code = "KEY_RETRIEVAL_FAILED"


class InitError(VaultOperatorError):
    """Vault initialization failed."""

    default_code = "INIT_FAILED"


class InitPrecheckError(InitError):
    """A target key already exists (or could not be checked) before init.

    Requires manual intervention; init never overwrites a previous
    initialization's shares.
    """

    default_code = "INIT_PRECHECK_FAILED"


class UnsealError(VaultOperatorError):
    """Unsealing failed (progress reset or server unreachable)."""

    default_code = "UNSEAL_FAILED"


class WaitTimeoutError(VaultOperatorError):
    """Waiting for the server to become unsealed timed out or was cancelled."""

    default_code = "WAIT_TIMEOUT"


class ConfigureError(VaultOperatorError):
    """Base for reconciliation failures."""

    default_code = "CONFIGURE_FAILED"


class AuthConfigError(ConfigureError):
    """An auth method could not be enabled or configured."""

    default_code = "AUTH_CONFIG_FAILED"


class PolicyConfigError(ConfigureError):
    """A policy could not be written."""

    default_code = "POLICY_CONFIG_FAILED"


class SecretEngineConfigError(ConfigureError):
    """A secret engine could not be mounted, tuned or configured."""

    default_code = "SECRET_ENGINE_CONFIG_FAILED"

"""Connection settings for the Vault administrative API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from vault_operator.exceptions import ConfigValidationError


@dataclass
class AdminClientConfig:
    """Configuration for connecting to the Vault server being bootstrapped.

    No token is configured here: the bootstrap engine works unauthenticated
    (init/unseal) and the reconciliation engine obtains a short-lived handle
    carrying the root token from the key store.

    Example:
        config = AdminClientConfig(url="https://vault.example.com:8200")

        # From environment variables
        config = AdminClientConfig.from_env("VAULT_OPERATOR")

    Attributes:
        url: Vault server URL (e.g., "https://vault.example.com:8200")
        timeout: Request timeout in seconds (default: 30)
        namespace: Vault namespace (for Vault Enterprise)
        verify_ssl: Whether to verify SSL certificates, or a CA bundle path
    """

    url: str
    timeout: int = 30
    namespace: Optional[str] = None
    verify_ssl: bool | str = True

    def __post_init__(self) -> None:
        self.url = self.url.rstrip("/")

    @classmethod
    def from_env(
        cls,
        prefix: str = "VAULT_OPERATOR",
        env: Optional[Mapping[str, str]] = None,
    ) -> "AdminClientConfig":
        """Create AdminClientConfig from environment variables.

        Environment variables:
            {PREFIX}_VAULT_URL: Vault server URL (falls back to VAULT_ADDR)
            {PREFIX}_VAULT_TIMEOUT: Request timeout (default: 30)
            {PREFIX}_VAULT_NAMESPACE: Vault namespace (optional)
            {PREFIX}_VAULT_VERIFY_SSL: "true"/"false" or a CA bundle path
                (falls back to VAULT_CACERT, default: "true")

        Args:
            prefix: Environment variable prefix
            env: Mapping to read from (default: os.environ)

        Raises:
            ConfigValidationError: If the URL is missing or the timeout is not a number
        """
        env = os.environ if env is None else env
        prefix = prefix.upper().replace("-", "_")

        url = env.get(f"{prefix}_VAULT_URL") or env.get("VAULT_ADDR")
        if not url:
            raise ConfigValidationError(
                f"Missing required environment variable: {prefix}_VAULT_URL",
                details={"variable": f"{prefix}_VAULT_URL"},
            )

        timeout_str = env.get(f"{prefix}_VAULT_TIMEOUT", "30")
        try:
            timeout = int(timeout_str)
        except ValueError:
            raise ConfigValidationError(
                f"{prefix}_VAULT_TIMEOUT must be an integer, got: {timeout_str}",
                details={"variable": f"{prefix}_VAULT_TIMEOUT"},
            ) from None

        verify_str = env.get(f"{prefix}_VAULT_VERIFY_SSL") or env.get("VAULT_CACERT", "true")
        verify_ssl: bool | str
        if verify_str.lower() in ("true", "1", "yes"):
            verify_ssl = True
        elif verify_str.lower() in ("false", "0", "no"):
            verify_ssl = False
        else:
            verify_ssl = verify_str

        return cls(
            url=url,
            timeout=timeout,
            namespace=env.get(f"{prefix}_VAULT_NAMESPACE"),
            verify_ssl=verify_ssl,
        )

    def validate(self) -> None:
        """Validate configuration is complete and usable.

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        if not self.url:
            raise ConfigValidationError("Vault URL is required")

        if not self.url.startswith(("http://", "https://")):
            raise ConfigValidationError(
                f"Vault URL must start with http:// or https://, got: {self.url}",
                details={"url": self.url},
            )

        if self.timeout <= 0:
            raise ConfigValidationError(
                f"Timeout must be positive, got: {self.timeout}",
                details={"timeout": self.timeout},
            )

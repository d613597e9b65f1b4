"""Threshold configuration for Vault initialization."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from vault_operator.exceptions import ConfigValidationError

DEFAULT_POLL_INTERVAL = 2.0


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass
class ThresholdConfig:
    """How Vault is initialized and where its root token ends up.

    Attributes:
        secret_shares: Number of unseal key shares to generate
        secret_threshold: Shares required to unseal (must be <= secret_shares)
        init_root_token: If set, the generated root token is replaced by an
            orphan root token with this fixed ID and then revoked
        store_root_token: Persist the effective root token in the key store
        unseal_wait_timeout: Seconds to wait for an unseal before installing
            ``init_root_token`` (None waits forever)
        unseal_poll_interval: Seconds between seal status polls while waiting
    """

    secret_shares: int = 5
    secret_threshold: int = 3
    init_root_token: Optional[str] = None
    store_root_token: bool = True
    unseal_wait_timeout: Optional[float] = None
    unseal_poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        """Validate thresholds. Runs before any server or key store contact."""
        if self.secret_shares < 1:
            raise ConfigValidationError(
                f"secret shares must be at least 1, got: {self.secret_shares}",
                details={"secret_shares": self.secret_shares},
            )
        if self.secret_threshold < 1:
            raise ConfigValidationError(
                f"secret threshold must be at least 1, got: {self.secret_threshold}",
                details={"secret_threshold": self.secret_threshold},
            )
        if self.secret_threshold > self.secret_shares:
            raise ConfigValidationError(
                "the secret threshold can't be bigger than the shares",
                details={
                    "secret_shares": self.secret_shares,
                    "secret_threshold": self.secret_threshold,
                },
            )
        if self.unseal_poll_interval <= 0:
            raise ConfigValidationError(
                f"unseal poll interval must be positive, got: {self.unseal_poll_interval}",
                details={"unseal_poll_interval": self.unseal_poll_interval},
            )
        # An empty fixed root token means "keep the generated one"
        if not self.init_root_token:
            self.init_root_token = None

    @classmethod
    def from_env(
        cls,
        prefix: str = "VAULT_OPERATOR",
        env: Optional[Mapping[str, str]] = None,
    ) -> "ThresholdConfig":
        """Load threshold settings from environment variables.

        Environment variables:
            {prefix}_SECRET_SHARES: Number of shares (default: 5)
            {prefix}_SECRET_THRESHOLD: Unseal threshold (default: 3)
            {prefix}_INIT_ROOT_TOKEN: Fixed root token ID (optional)
            {prefix}_STORE_ROOT_TOKEN: "true"/"false" (default: true)
            {prefix}_UNSEAL_WAIT_TIMEOUT: Seconds (optional, unbounded if unset)
            {prefix}_UNSEAL_POLL_INTERVAL: Seconds (default: 2)

        Raises:
            ConfigValidationError: On unparsable numbers or invalid thresholds
        """
        env = os.environ if env is None else env

        def number(name: str, default: str, kind: type):
            raw = env.get(f"{prefix}_{name}", default)
            try:
                return kind(raw)
            except ValueError:
                raise ConfigValidationError(
                    f"{prefix}_{name} must be a number, got: {raw}",
                    details={"variable": f"{prefix}_{name}"},
                ) from None

        timeout_raw = env.get(f"{prefix}_UNSEAL_WAIT_TIMEOUT")

        return cls(
            secret_shares=number("SECRET_SHARES", "5", int),
            secret_threshold=number("SECRET_THRESHOLD", "3", int),
            init_root_token=env.get(f"{prefix}_INIT_ROOT_TOKEN") or None,
            store_root_token=_parse_bool(env.get(f"{prefix}_STORE_ROOT_TOKEN", "true")),
            unseal_wait_timeout=number("UNSEAL_WAIT_TIMEOUT", timeout_raw, float) if timeout_raw else None,
            unseal_poll_interval=number("UNSEAL_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL), float),
        )

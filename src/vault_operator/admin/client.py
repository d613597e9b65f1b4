"""Vault administrative API client.

Thin wrapper around the hvac client covering the system endpoints the
operator needs:
- seal status, init status, init, unseal
- auth method and secret engine mounts, mount tuning
- policies, orphan token creation, self revocation
- generic writes for backend configuration

Every hvac or connection failure is re-raised as TransportError carrying
the server's error list, so callers never depend on hvac exception types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

import hvac
import requests
from hvac.exceptions import VaultError as HvacVaultError

from vault_operator.exceptions import TransportError
from vault_operator.logger import Logger, create_logger

from .config import AdminClientConfig

T = TypeVar("T")


@dataclass
class SealStatus:
    """Seal state reported by the server. Transient, never persisted."""

    sealed: bool
    progress: int = 0
    threshold: int = 0
    shares: int = 0
    initialized: bool = True

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "SealStatus":
        return cls(
            sealed=bool(data.get("sealed", True)),
            progress=int(data.get("progress", 0) or 0),
            threshold=int(data.get("t", 0) or 0),
            shares=int(data.get("n", 0) or 0),
            initialized=bool(data.get("initialized", True)),
        )


@dataclass
class InitResult:
    """Output of a successful server initialization."""

    keys: List[str]
    root_token: str

    def __repr__(self) -> str:
        return f"InitResult(keys=<{len(self.keys)} shares>, root_token=<redacted>)"


def _mount_table(response: Any) -> Dict[str, Dict[str, Any]]:
    """Extract the ``{"path/": {...}}`` mount table from a list response."""
    if not isinstance(response, dict):
        return {}
    data = response.get("data")
    if isinstance(data, dict):
        return data
    # Older servers return the table at the top level next to request metadata
    return {k: v for k, v in response.items() if k.endswith("/") and isinstance(v, dict)}


class VaultAdminClient:
    """Wrapper around hvac for Vault system/administrative operations.

    The client itself is unauthenticated unless a token is passed. Use
    ``with_token`` to obtain a separate handle that carries a credential
    for the duration of a scoped operation.

    Example:
        config = AdminClientConfig(url="https://vault.example.com:8200")
        client = VaultAdminClient(config)

        if not client.is_initialized():
            result = client.initialize(secret_shares=5, secret_threshold=3)

        status = client.submit_unseal_key(share)

        root = client.with_token(root_token)
        try:
            root.put_policy("allow_secrets", rules)
        finally:
            root.clear_token()
    """

    def __init__(
        self,
        config: AdminClientConfig,
        logger: Optional[Logger] = None,
        token: Optional[str] = None,
    ) -> None:
        """Initialize the admin client.

        Args:
            config: AdminClientConfig with connection settings
            logger: Optional logger instance
            token: Optional token for this handle; the environment is never consulted

        Raises:
            ConfigValidationError: If config is invalid
        """
        config.validate()
        self.config = config
        self.logger = logger or create_logger(name="vault-admin-client")
        self._client: hvac.Client = hvac.Client(
            url=config.url,
            # hvac falls back to VAULT_TOKEN or ~/.vault-token when token is None
            token=token or "",
            namespace=config.namespace,
            verify=config.verify_ssl,
            timeout=config.timeout,
        )

        self.logger.debug("VaultAdminClient initialized", url=config.url)

    def _call(self, operation: str, func: Callable[[], T], **context: Any) -> T:
        """Run an hvac call, mapping failures to TransportError."""
        try:
            return func()
        except HvacVaultError as e:
            errors = list(getattr(e, "errors", None) or [])
            self.logger.debug("Vault request failed", operation=operation, error=str(e), **context)
            raise TransportError(
                f"{operation} failed: {e}",
                details={"operation": operation, "error": str(e), **context},
                errors=errors,
                status_code=getattr(e, "status_code", None),
            ) from e
        except requests.exceptions.RequestException as e:
            self.logger.debug("Vault unreachable", operation=operation, error=str(e), **context)
            raise TransportError(
                f"{operation} failed: vault not reachable: {e}",
                details={"operation": operation, "error": str(e), **context},
            ) from e

    # ------------------------------------------------------------------
    # Credential handling
    # ------------------------------------------------------------------

    def with_token(self, token: str) -> "VaultAdminClient":
        """Return a new client handle authenticated with ``token``.

        The receiving client is left untouched.
        """
        return VaultAdminClient(self.config, logger=self.logger, token=token)

    def clear_token(self) -> None:
        """Drop the credential held by this handle."""
        self._client.token = None

    @property
    def has_token(self) -> bool:
        return bool(self._client.token)

    # ------------------------------------------------------------------
    # Seal / init
    # ------------------------------------------------------------------

    def read_seal_status(self) -> SealStatus:
        response = self._call("seal status", self._client.sys.read_seal_status)
        return SealStatus.from_response(response)

    def is_initialized(self) -> bool:
        return bool(self._call("init status", self._client.sys.is_initialized))

    def initialize(self, secret_shares: int, secret_threshold: int) -> InitResult:
        """Initialize the server, returning the key shares and root token."""
        response = self._call(
            "init",
            lambda: self._client.sys.initialize(
                secret_shares=secret_shares,
                secret_threshold=secret_threshold,
            ),
        )
        return InitResult(keys=list(response["keys"]), root_token=response["root_token"])

    def submit_unseal_key(self, key: str) -> SealStatus:
        response = self._call("unseal", lambda: self._client.sys.submit_unseal_key(key=key))
        return SealStatus.from_response(response)

    # ------------------------------------------------------------------
    # Auth methods
    # ------------------------------------------------------------------

    def list_auth_methods(self) -> Dict[str, Dict[str, Any]]:
        """Return enabled auth methods keyed by mount path with trailing slash."""
        return _mount_table(self._call("list auth", self._client.sys.list_auth_methods))

    def enable_auth_method(
        self,
        method_type: str,
        path: str,
        description: Optional[str] = None,
    ) -> None:
        self._call(
            "enable auth",
            lambda: self._client.sys.enable_auth_method(
                method_type=method_type,
                path=path,
                description=description,
            ),
            path=path,
        )

    # ------------------------------------------------------------------
    # Secret engines
    # ------------------------------------------------------------------

    def list_mounts(self) -> Dict[str, Dict[str, Any]]:
        """Return mounted secret engines keyed by mount path with trailing slash."""
        return _mount_table(self._call("list mounts", self._client.sys.list_mounted_secrets_engines))

    def mount(
        self,
        backend_type: str,
        path: str,
        description: Optional[str] = None,
        plugin_name: Optional[str] = None,
        options: Optional[Dict[str, str]] = None,
    ) -> None:
        self._call(
            "mount",
            lambda: self._client.sys.enable_secrets_engine(
                backend_type=backend_type,
                path=path,
                description=description,
                plugin_name=plugin_name or None,
                options=options or None,
            ),
            path=path,
        )

    def tune_mount(self, path: str, options: Optional[Dict[str, str]] = None) -> None:
        self._call(
            "tune mount",
            lambda: self._client.sys.tune_mount_configuration(
                path=path,
                options=options or None,
            ),
            path=path,
        )

    # ------------------------------------------------------------------
    # Policies, tokens, generic writes
    # ------------------------------------------------------------------

    def put_policy(self, name: str, rules: str) -> None:
        self._call(
            "put policy",
            lambda: self._client.sys.create_or_update_policy(name=name, policy=rules),
            policy=name,
        )

    def write(self, path: str, data: Dict[str, Any]) -> Any:
        """Write ``data`` to an arbitrary API path (backend configuration)."""
        return self._call(
            "write",
            lambda: self._client.write_data(path, data=data),
            path=path,
        )

    def create_orphan_token(
        self,
        token_id: str,
        policies: List[str],
        display_name: str,
    ) -> None:
        self._call(
            "create orphan token",
            lambda: self._client.auth.token.create_orphan(
                id=token_id,
                policies=policies,
                display_name=display_name,
            ),
        )

    def revoke_self(self) -> None:
        """Revoke the token held by this handle."""
        self._call("revoke self", self._client.auth.token.revoke_self)

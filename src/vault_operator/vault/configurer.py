"""Declarative reconciliation of auth methods, policies and secret engines.

Reconciliation is idempotent by construction rather than diff based:
mounts are created only when missing, everything else is written with
overwrite semantics. Running it twice against an unchanged server issues
no duplicate enable/mount calls.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from vault_operator.admin import VaultAdminClient
from vault_operator.exceptions import (
    AuthConfigError,
    PolicyConfigError,
    SecretEngineConfigError,
    TransportError,
)
from vault_operator.logger import Logger, create_logger
from vault_operator.models import (
    AuthMethodSpec,
    AwsAuth,
    ExternalConfig,
    GenericAuth,
    GithubAuth,
    KubernetesAuth,
    LdapAuth,
    PolicySpec,
    SecretEngineSpec,
)

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")

# Message Vault returns when a nested config entry can't be rewritten in place
IMMUTABLE_CONFIG_SIGNATURE = "delete them before reconfiguring"


def is_immutable_config_error(error: TransportError) -> bool:
    """Check whether a write failed because the entry is immutable once created.

    The server's structured error list is checked first; the formatted
    message is only a fallback for clients that don't surface it.
    """
    if error.errors:
        return any(IMMUTABLE_CONFIG_SIGNATURE in str(item) for item in error.errors)
    return IMMUTABLE_CONFIG_SIGNATURE in error.message


@dataclass
class ReconcileReport:
    """What a single reconciliation pass did."""

    enabled_auth: List[str] = field(default_factory=list)
    existing_auth: List[str] = field(default_factory=list)
    policies: List[str] = field(default_factory=list)
    mounted: List[str] = field(default_factory=list)
    tuned: List[str] = field(default_factory=list)
    written: List[str] = field(default_factory=list)
    skipped_immutable: List[str] = field(default_factory=list)


class VaultConfigurer:
    """Apply an ExternalConfig to a Vault server.

    The client passed to ``configure`` must carry a root-equivalent token;
    the operator obtains one through ``VaultBootstrap.root_session``.

    Example:
        configurer = VaultConfigurer()
        with bootstrap.root_session() as client:
            report = configurer.configure(client, external_config)
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        service_account_dir: Union[str, Path] = SERVICE_ACCOUNT_DIR,
    ):
        self.logger = logger or create_logger(name="vault-configurer")
        self.service_account_dir = Path(service_account_dir)

    def configure(self, client: VaultAdminClient, config: ExternalConfig) -> ReconcileReport:
        """Reconcile auth methods, then policies, then secret engines.

        Raises:
            AuthConfigError: If an auth method can't be enabled or configured
            PolicyConfigError: If a policy can't be written
            SecretEngineConfigError: If a secret engine can't be mounted,
                tuned or configured (immutable nested entries are skipped)
        """
        report = ReconcileReport()
        self.configure_auth_methods(client, config.auth, report)
        self.configure_policies(client, config.policies, report)
        self.configure_secret_engines(client, config.secrets, report)
        self.logger.info(
            "vault configured",
            auth_enabled=len(report.enabled_auth),
            policies=len(report.policies),
            mounted=len(report.mounted),
            tuned=len(report.tuned),
            written=len(report.written),
            skipped=len(report.skipped_immutable),
        )
        return report

    # ------------------------------------------------------------------
    # Auth methods
    # ------------------------------------------------------------------

    def configure_auth_methods(
        self,
        client: VaultAdminClient,
        auth_methods: List[AuthMethodSpec],
        report: ReconcileReport,
    ) -> None:
        if not auth_methods:
            return

        try:
            existing = client.list_auth_methods()
        except TransportError as e:
            raise AuthConfigError(
                f"error listing auth backends vault: {e.message}",
                details={"error": str(e)},
            ) from e

        for method in auth_methods:
            path = method.mount_path
            context = {"type": method.type, "path": path}

            mounted = existing.get(f"{path}/")
            if mounted is not None and mounted.get("type") == method.type:
                self.logger.debug("auth backend is already mounted in vault", **context)
                report.existing_auth.append(path)
            else:
                self.logger.debug("enabling auth backend in vault", **context)
                try:
                    client.enable_auth_method(method.type, path, description=method.description)
                except TransportError as e:
                    raise AuthConfigError(
                        f"error enabling {method.type} auth method for vault: {e.message}",
                        details={**context, "error": str(e)},
                    ) from e
                report.enabled_auth.append(path)
                existing[f"{path}/"] = {"type": method.type}

            try:
                self._configure_auth_method(client, method, path, report)
            except (TransportError, OSError) as e:
                raise AuthConfigError(
                    f"error configuring {method.type} auth for vault: {e}",
                    details={**context, "error": str(e)},
                ) from e

    def _write(self, client: VaultAdminClient, path: str, data: Dict[str, Any], report: ReconcileReport) -> None:
        client.write(path, data)
        report.written.append(path)

    def _configure_auth_method(
        self,
        client: VaultAdminClient,
        method: AuthMethodSpec,
        path: str,
        report: ReconcileReport,
    ) -> None:
        base = f"auth/{path}"

        if isinstance(method, KubernetesAuth):
            self._write(client, f"{base}/config", self.kubernetes_auth_config(), report)
            for role in method.roles:
                self._write(client, f"{base}/role/{role['name']}", role, report)

        elif isinstance(method, GithubAuth):
            # https://www.vaultproject.io/api/auth/github/index.html
            self._write(client, f"{base}/config", method.config, report)
            for mapping_type, mapping in method.mappings.items():
                for user_or_team, policy in mapping.items():
                    self._write(
                        client,
                        f"{base}/map/{mapping_type}/{user_or_team}",
                        {"value": policy},
                        report,
                    )

        elif isinstance(method, AwsAuth):
            # https://www.vaultproject.io/api/auth/aws/index.html
            self._write(client, f"{base}/config/client", method.config, report)
            for role in method.roles:
                self._write(client, f"{base}/role/{role['name']}", role, report)

        elif isinstance(method, LdapAuth):
            # https://www.vaultproject.io/api/auth/ldap/index.html
            self._write(client, f"{base}/config", method.config, report)
            for mapping_type, mappings in (("groups", method.groups), ("users", method.users)):
                for user_or_group, mapping in mappings.items():
                    self._write(client, f"{base}/{mapping_type}/{user_or_group}", mapping, report)

        elif isinstance(method, GenericAuth) and method.config:
            self._write(client, f"{base}/config", method.config, report)

    def kubernetes_auth_config(self) -> Dict[str, str]:
        """Build the kubernetes auth config from the in-cluster service account.

        Raises:
            OSError: If the service account CA or token can't be read
        """
        ca_cert = (self.service_account_dir / "ca.crt").read_text()
        reviewer_jwt = (self.service_account_dir / "token").read_text()
        return {
            "kubernetes_host": f"https://{os.environ.get('KUBERNETES_SERVICE_HOST', '')}",
            "kubernetes_ca_cert": ca_cert,
            "token_reviewer_jwt": reviewer_jwt,
        }

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def configure_policies(
        self,
        client: VaultAdminClient,
        policies: List[PolicySpec],
        report: ReconcileReport,
    ) -> None:
        for policy in policies:
            try:
                client.put_policy(policy.name, policy.rules)
            except TransportError as e:
                raise PolicyConfigError(
                    f"error putting {policy.name} policy into vault: {e.message}",
                    details={"policy": policy.name, "error": str(e)},
                ) from e
            self.logger.debug("policy written", policy=policy.name)
            report.policies.append(policy.name)

    # ------------------------------------------------------------------
    # Secret engines
    # ------------------------------------------------------------------

    def configure_secret_engines(
        self,
        client: VaultAdminClient,
        secret_engines: List[SecretEngineSpec],
        report: ReconcileReport,
    ) -> None:
        for engine in secret_engines:
            path = engine.mount_path
            context = {"type": engine.type, "path": path}

            try:
                mounts = client.list_mounts()
            except TransportError as e:
                raise SecretEngineConfigError(
                    f"error reading mounts from vault: {e.message}",
                    details={**context, "error": str(e)},
                ) from e

            if f"{path}/" not in mounts:
                self.logger.info("mounting secret engine", **context)
                try:
                    client.mount(
                        engine.type,
                        path,
                        description=engine.description,
                        plugin_name=engine.plugin_name,
                        options=engine.options,
                    )
                except TransportError as e:
                    raise SecretEngineConfigError(
                        f"error mounting {path} into vault: {e.message}",
                        details={**context, "error": str(e)},
                    ) from e
                report.mounted.append(path)
            else:
                # Type, path and plugin can't change once mounted; only options are tuned
                try:
                    client.tune_mount(path, options=engine.options)
                except TransportError as e:
                    raise SecretEngineConfigError(
                        f"error tuning {path} in vault: {e.message}",
                        details={**context, "error": str(e)},
                    ) from e
                report.tuned.append(path)

            self._configure_secret_engine(client, engine, path, report)

    def _configure_secret_engine(
        self,
        client: VaultAdminClient,
        engine: SecretEngineSpec,
        path: str,
        report: ReconcileReport,
    ) -> None:
        for category, entries in engine.configuration.items():
            for entry in entries:
                config_path = f"{path}/{category}/{entry['name']}"
                try:
                    self._write(client, config_path, entry, report)
                except TransportError as e:
                    if is_immutable_config_error(e):
                        self.logger.debug(
                            "can't reconfigure, please delete it manually",
                            path=config_path,
                        )
                        report.skipped_immutable.append(config_path)
                        continue
                    raise SecretEngineConfigError(
                        f"error putting {config_path} config into vault: {e.message}",
                        details={
                            "type": engine.type,
                            "path": config_path,
                            "error": str(e),
                        },
                    ) from e

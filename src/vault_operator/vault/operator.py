"""
Vault Operator
==============
Entry point composing bootstrap (init/unseal) and reconciliation.

Usage:
    from vault_operator import VaultOperator, load_external_config

    operator = VaultOperator.from_env(keystore=my_keystore)
    operator.init()
    operator.unseal()
    operator.configure(load_external_config("vault-config.yml"))
"""

from pathlib import Path
from typing import Optional, Union

from vault_operator.admin import AdminClientConfig, VaultAdminClient
from vault_operator.config import EnvLoader
from vault_operator.keystore import KeyStore
from vault_operator.logger import Logger, create_logger
from vault_operator.models import ExternalConfig

from .bootstrap import VaultBootstrap
from .config import ThresholdConfig
from .configurer import ReconcileReport, VaultConfigurer


class VaultOperator:
    """Initialize, unseal and configure a single Vault server.

    Holds no state between calls: shares, the root token and the
    initialized flag live in the key store or on the server.
    """

    def __init__(
        self,
        config: ThresholdConfig,
        keystore: KeyStore,
        client: VaultAdminClient,
        logger: Optional[Logger] = None,
        configurer: Optional[VaultConfigurer] = None,
    ):
        self.logger = logger or create_logger(name="vault-operator")
        self.bootstrap = VaultBootstrap(config, keystore, client, logger=self.logger)
        self.configurer = configurer or VaultConfigurer(logger=self.logger)

    @classmethod
    def from_env(
        cls,
        keystore: KeyStore,
        prefix: str = "VAULT_OPERATOR",
        env_file: Optional[Union[str, Path]] = None,
        logger: Optional[Logger] = None,
    ) -> "VaultOperator":
        """Build an operator from environment variables (and an optional .env).

        See ThresholdConfig.from_env and AdminClientConfig.from_env for the
        variables read.

        Raises:
            ConfigValidationError: If the configuration is invalid
        """
        env = EnvLoader(env_file).load()
        config = ThresholdConfig.from_env(prefix=prefix, env=env)
        client = VaultAdminClient(AdminClientConfig.from_env(prefix=prefix, env=env), logger=logger)
        return cls(config, keystore, client, logger=logger)

    def sealed(self) -> bool:
        return self.bootstrap.sealed()

    def init(self) -> None:
        self.bootstrap.init()

    def unseal(self) -> None:
        self.bootstrap.unseal()

    def configure(self, external_config: ExternalConfig) -> ReconcileReport:
        """Reconcile the server against ``external_config`` as root.

        The root token is read from the key store and cleared again on
        every exit path.
        """
        with self.bootstrap.root_session() as client:
            return self.configurer.configure(client, external_config)

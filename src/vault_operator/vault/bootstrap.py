"""
Vault Bootstrap Operations
==========================
First-time initialization, threshold unsealing and scoped root-token access.

Unseal key shares and the root token live only in the key store; this
module holds them in memory for the duration of a single call.

Usage:
    from vault_operator.vault.bootstrap import VaultBootstrap

    bootstrap = VaultBootstrap(config, keystore, client)

    # No-op if the server is already initialized
    bootstrap.init()

    # Submits unseal-key-0, unseal-key-1, ... until the server unseals
    bootstrap.unseal()

    with bootstrap.root_session() as root_client:
        root_client.put_policy("allow_secrets", rules)
"""

import gc
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from vault_operator.admin import InitResult, VaultAdminClient
from vault_operator.exceptions import (
    ConfigureError,
    InitError,
    InitPrecheckError,
    KeyExistsError,
    KeyNotFoundError,
    KeyRetrievalError,
    KeyStoreError,
    TransportError,
    UnsealError,
    WaitTimeoutError,
)
from vault_operator.keystore import KeyStore, set_if_absent
from vault_operator.logger import Logger, create_logger

from .config import ThresholdConfig
from .naming import ROOT_TOKEN_KEY, TEST_KEY, init_key_names, unseal_key_name

# Policy and display name of the orphan token created from init_root_token
ROOT_POLICY = "root"
ROOT_TOKEN_DISPLAY_NAME = "root-token"


class VaultBootstrap:
    """Initialize and unseal a Vault server using an external key store."""

    def __init__(
        self,
        config: ThresholdConfig,
        keystore: KeyStore,
        client: VaultAdminClient,
        logger: Optional[Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize VaultBootstrap.

        Args:
            config: Validated threshold configuration
            keystore: Where shares and the root token are persisted
            client: Unauthenticated admin API client
            logger: Optional logger instance
            sleep: Sleep function used between seal status polls
            clock: Monotonic clock used for the unseal wait timeout
        """
        self.config = config
        self.keystore = keystore
        self.client = client
        self.logger = logger or create_logger(name="vault-bootstrap")
        self._sleep = sleep
        self._clock = clock

    def sealed(self) -> bool:
        """Check if Vault is sealed.

        Raises:
            TransportError: If the seal status cannot be read
        """
        return self.client.read_seal_status().sealed

    # ------------------------------------------------------------------
    # Unseal
    # ------------------------------------------------------------------

    def unseal(self) -> None:
        """Unseal Vault with shares read from the key store.

        Shares are submitted in index order until the server reports
        unsealed. Remaining shares are never read.

        Raises:
            KeyRetrievalError: If a share can't be read or decoded
            UnsealError: If the server resets its progress to 0 (invalid or
                duplicate share) or cannot be reached
        """
        try:
            index = 0
            while True:
                key_name = unseal_key_name(index)

                self.logger.debug("retrieving key from key store", key=key_name)
                try:
                    share = self.keystore.get(key_name).decode("utf-8")
                except KeyStoreError as e:
                    raise KeyRetrievalError(
                        f"unable to get key '{key_name}': {e.message}",
                        details={"key": key_name, "error": str(e)},
                    ) from e
                except UnicodeDecodeError as e:
                    raise KeyRetrievalError(
                        f"key '{key_name}' is not valid UTF-8",
                        details={"key": key_name},
                    ) from e

                self.logger.debug("sending unseal request to vault", key=key_name)
                try:
                    status = self.client.submit_unseal_key(share)
                except TransportError as e:
                    raise UnsealError(
                        f"failed to send unseal request to vault: {e.message}",
                        details={"key": key_name, "error": str(e)},
                    ) from e
                finally:
                    del share

                self.logger.debug(
                    "got unseal response",
                    sealed=status.sealed,
                    progress=status.progress,
                    threshold=status.threshold,
                )

                if not status.sealed:
                    self.logger.info("vault unsealed", shares_submitted=index + 1)
                    return

                if status.progress == 0:
                    raise UnsealError(
                        "failed to unseal vault: progress reset to 0",
                        details={"key": key_name},
                    )

                index += 1
        finally:
            gc.collect()

    def wait_until_unsealed(
        self,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """Block until Vault reports unsealed.

        Args:
            timeout: Seconds to wait; None waits forever
            interval: Seconds between polls (default: config.unseal_poll_interval)
            cancel: Event that aborts the wait when set

        Raises:
            WaitTimeoutError: If the timeout expires or cancel is set
        """
        interval = interval if interval is not None else self.config.unseal_poll_interval
        deadline = self._clock() + timeout if timeout is not None else None

        while True:
            try:
                if not self.sealed():
                    return
                self.logger.info("vault still sealed, waiting for unsealing")
            except TransportError as e:
                self.logger.info("vault not reachable", error=e.message)

            if deadline is not None and self._clock() + interval > deadline:
                raise WaitTimeoutError(
                    f"vault still sealed after {timeout} seconds",
                    details={"timeout": timeout},
                )
            if cancel is not None:
                if cancel.wait(interval):
                    raise WaitTimeoutError("waiting for unseal was cancelled")
            else:
                self._sleep(interval)

    # ------------------------------------------------------------------
    # Init
    # ------------------------------------------------------------------

    def _precheck(self) -> None:
        """Fail if any key an init would write is already in the key store."""
        for key_name in init_key_names(self.config.secret_shares):
            try:
                self.keystore.get(key_name)
            except KeyNotFoundError:
                continue
            except KeyStoreError as e:
                raise InitPrecheckError(
                    f"error before init: checking key '{key_name}' failed: {e.message}",
                    details={"key": key_name, "error": str(e)},
                ) from e
            raise InitPrecheckError(
                f"error before init: keystore value for '{key_name}' already exists",
                details={"key": key_name},
            )

    def _store(self, key_name: str, value: str, what: str) -> None:
        try:
            set_if_absent(self.keystore, key_name, value.encode("utf-8"))
        except KeyExistsError as e:
            raise InitError(
                f"error storing {what} '{key_name}': it already exists",
                details={"key": key_name, "error": str(e)},
            ) from e
        except KeyStoreError as e:
            raise InitError(
                f"error storing {what} '{key_name}': {e.message}",
                details={"key": key_name, "error": str(e)},
            ) from e

    def _install_fixed_root_token(self, result: InitResult, fixed_token: str) -> str:
        """Replace the generated root token with ``fixed_token``."""

        self.logger.info("setting up init root token, waiting for vault to be unsealed")
        self.wait_until_unsealed(timeout=self.config.unseal_wait_timeout)

        temporary = self.client.with_token(result.root_token)
        try:
            try:
                temporary.create_orphan_token(
                    token_id=fixed_token,
                    policies=[ROOT_POLICY],
                    display_name=ROOT_TOKEN_DISPLAY_NAME,
                )
            except TransportError as e:
                raise InitError(
                    f"unable to setup requested root token: {e.message}",
                    details={"error": str(e)},
                ) from e

            try:
                temporary.revoke_self()
            except TransportError as e:
                raise InitError(
                    f"unable to revoke temporary root token: {e.message}",
                    details={"error": str(e)},
                ) from e
        finally:
            temporary.clear_token()

        self.logger.info("temporary root token revoked, fixed root token installed")
        return fixed_token

    def init(self) -> None:
        """Initialize Vault if it is not initialized already.

        Raises:
            InitError: If the key store test fails, the server rejects the
                init, or a share/root token cannot be stored
            InitPrecheckError: If a target key already exists in the key store
            WaitTimeoutError: If waiting for unseal (fixed root token) times out
        """
        try:
            initialized = self.client.is_initialized()
        except TransportError as e:
            raise InitError(
                f"error testing if vault is initialized: {e.message}",
                details={"error": str(e)},
            ) from e

        if initialized:
            self.logger.info("vault is already initialized")
            return

        self.logger.info("initializing vault")

        try:
            self.keystore.test(TEST_KEY)
        except KeyStoreError as e:
            raise InitError(
                f"error testing keystore before init: {e.message}",
                details={"key": TEST_KEY, "error": str(e)},
            ) from e

        self._precheck()

        try:
            result = self.client.initialize(
                secret_shares=self.config.secret_shares,
                secret_threshold=self.config.secret_threshold,
            )
        except TransportError as e:
            raise InitError(
                f"error initializing vault: {e.message}",
                details={"error": str(e)},
            ) from e

        for index, share in enumerate(result.keys):
            key_name = unseal_key_name(index)
            self._store(key_name, share, "unseal key")
            self.logger.info("unseal key stored in key store", key=key_name)

        root_token = result.root_token
        if self.config.init_root_token:
            root_token = self._install_fixed_root_token(result, self.config.init_root_token)

        if self.config.store_root_token:
            self._store(ROOT_TOKEN_KEY, root_token, "root token")
            self.logger.info("root token stored in key store", key=ROOT_TOKEN_KEY)
        elif not self.config.init_root_token:
            self.logger.warning(
                "won't store root token in key store, this token grants full "
                "privileges to vault, so keep this secret",
                root_token=root_token,
            )

        del result, root_token
        gc.collect()

    # ------------------------------------------------------------------
    # Root token session
    # ------------------------------------------------------------------

    @contextmanager
    def root_session(self) -> Iterator[VaultAdminClient]:
        """Yield an admin client handle authenticated with the stored root token.

        The handle's token is cleared on every exit path; the shared client
        never carries the root token.

        Raises:
            ConfigureError: If the root token cannot be read from the key store
                or is not valid UTF-8
        """
        self.logger.debug("retrieving root token from key store", key=ROOT_TOKEN_KEY)
        try:
            root_token = self.keystore.get(ROOT_TOKEN_KEY).decode("utf-8")
        except KeyStoreError as e:
            raise ConfigureError(
                f"unable to get key '{ROOT_TOKEN_KEY}': {e.message}",
                details={"key": ROOT_TOKEN_KEY, "error": str(e)},
            ) from e
        except UnicodeDecodeError as e:
            raise ConfigureError(
                f"key '{ROOT_TOKEN_KEY}' is not valid UTF-8",
                details={"key": ROOT_TOKEN_KEY},
            ) from e

        session = self.client.with_token(root_token)
        try:
            yield session
        finally:
            session.clear_token()
            del root_token
            gc.collect()

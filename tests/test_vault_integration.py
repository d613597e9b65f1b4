"""Integration tests against a real Vault server.

These tests require a running Vault (dev mode is enough) and are skipped
if unavailable. Run with: pytest -m vault_integration

A dev server is already initialized and unsealed, so only the scoped root
session and reconciliation are exercised here:
    vault server -dev -dev-root-token-id=vault-operator-dev-root
"""

import os
from uuid import uuid4

import pytest

from vault_operator import (
    AdminClientConfig,
    MemoryKeyStore,
    ThresholdConfig,
    VaultAdminClient,
    VaultOperator,
)
from vault_operator.exceptions import TransportError
from vault_operator.models import parse_external_config

pytestmark = pytest.mark.vault_integration


# ============================================================================
# Helpers
# ============================================================================


def _vault_url() -> str:
    return os.environ.get("VAULT_OPERATOR_TEST_VAULT_URL", "http://127.0.0.1:8200")


def _vault_token() -> str:
    return os.environ.get("VAULT_OPERATOR_TEST_VAULT_TOKEN", "vault-operator-dev-root")


def vault_available() -> bool:
    """Check if Vault is reachable and unsealed.

    Called at test execution time, not module import time, so a server
    started by the test runner is detected.
    """
    try:
        client = VaultAdminClient(AdminClientConfig(url=_vault_url(), timeout=2))
        return not client.read_seal_status().sealed
    except TransportError:
        return False


@pytest.fixture
def admin_client(capture_logger) -> VaultAdminClient:
    if not vault_available():
        pytest.skip("Vault not available")
    return VaultAdminClient(AdminClientConfig(url=_vault_url()), logger=capture_logger)


@pytest.fixture
def operator(admin_client, capture_logger) -> VaultOperator:
    keystore = MemoryKeyStore()
    keystore.set("root-token", _vault_token().encode("utf-8"))
    return VaultOperator(ThresholdConfig(), keystore, admin_client, logger=capture_logger)


@pytest.fixture
def unique_suffix() -> str:
    """Unique suffix for mount paths and policy names (test isolation)."""
    return uuid4().hex[:8]


# ============================================================================
# Operator against a dev server
# ============================================================================


class TestAgainstVault:
    """Operator calls against a live dev server."""

    def test_init_on_initialized_server_is_noop(self, operator, log_stream):
        """init on a dev server only logs."""
        operator.init()

        assert "vault is already initialized" in log_stream.getvalue()

    def test_configure_is_idempotent(self, operator, admin_client, unique_suffix):
        """A second pass only finds and tunes what the first created."""
        config = parse_external_config(
            {
                "policies": [
                    {
                        "name": f"test-{unique_suffix}",
                        "rules": f'path "kv-{unique_suffix}/*" {{ capabilities = ["read"] }}',
                    }
                ],
                "auth": [{"type": "approle", "path": f"approle-{unique_suffix}"}],
                "secrets": [
                    {"type": "kv", "path": f"kv-{unique_suffix}", "options": {"version": 2}}
                ],
            }
        )

        first = operator.configure(config)
        second = operator.configure(config)

        assert first.enabled_auth == [f"approle-{unique_suffix}"]
        assert first.mounted == [f"kv-{unique_suffix}"]
        assert second.enabled_auth == []
        assert second.existing_auth == [f"approle-{unique_suffix}"]
        assert second.mounted == []
        assert second.tuned == [f"kv-{unique_suffix}"]
        assert admin_client.has_token is False

    def test_root_session_lists_mounts(self, operator):
        """The root session can list mounts and is cleared afterwards."""
        with operator.bootstrap.root_session() as root:
            mounts = root.list_mounts()

        assert "sys/" in mounts
        assert root.has_token is False

"""Shared fixtures for the vault-operator test suite."""

pytest_plugins = ["vault_operator.testing.pytest_fixtures"]

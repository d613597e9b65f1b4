"""Configuration helpers for vault-operator.

Example:
    from vault_operator.config import EnvLoader

    env = EnvLoader(".env").load()
"""

from vault_operator.config.env_loader import EnvLoader

__all__ = ["EnvLoader"]

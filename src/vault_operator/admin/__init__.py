"""Vault administrative API client (hvac based)."""

from .client import InitResult, SealStatus, VaultAdminClient
from .config import AdminClientConfig

__all__ = [
    "AdminClientConfig",
    "VaultAdminClient",
    "SealStatus",
    "InitResult",
]

"""Utility modules for tronsigner."""

from tronsigner.utils.locks import AccountLockRegistry, LockTimeoutError

__all__ = ["AccountLockRegistry", "LockTimeoutError"]

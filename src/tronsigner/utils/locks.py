"""Concurrency control for source accounts.

Two transactions built against the same sender race on its reference
block and balance. Build, sign and broadcast for one sender are therefore
serialized behind a per-account lock; different senders never contend.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger(__name__)


class LockTimeoutError(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""

    pass


def _release_if_granted(lock: asyncio.Lock):
    def callback(waiter: asyncio.Future) -> None:
        if not waiter.cancelled() and waiter.exception() is None:
            lock.release()
    return callback


def _abandon(lock: asyncio.Lock, waiter: asyncio.Future) -> None:
    """Give up on a pending acquire; a grant that lands anyway is released."""
    if waiter.done():
        _release_if_granted(lock)(waiter)
    else:
        waiter.cancel()
        waiter.add_done_callback(_release_if_granted(lock))


async def _acquire(lock: asyncio.Lock, timeout: float) -> bool:
    """Acquire a lock within timeout seconds. Returns False on timeout.

    The acquire runs as its own task, so a timeout or cancellation that
    races with the grant can never leave the lock held.
    """
    waiter = asyncio.ensure_future(lock.acquire())
    try:
        await asyncio.wait({waiter}, timeout=timeout)
    except asyncio.CancelledError:
        _abandon(lock, waiter)
        raise

    if waiter.done():
        return True
    _abandon(lock, waiter)
    return False


class AccountLockRegistry:
    """Per-account asyncio locks.

    Locks are created on first use and dropped once no task holds or waits
    on them, so the registry does not grow with the number of senders seen.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def _checkout(self, account: str) -> asyncio.Lock:
        lock = self._locks.get(account)
        if lock is None:
            lock = self._locks[account] = asyncio.Lock()
        self._users[account] = self._users.get(account, 0) + 1
        return lock

    def _checkin(self, account: str) -> None:
        remaining = self._users.get(account, 1) - 1
        if remaining <= 0:
            self._users.pop(account, None)
            self._locks.pop(account, None)
        else:
            self._users[account] = remaining

    def get_lock(self, account: str) -> Optional[asyncio.Lock]:
        """Return the live lock for an account, if any task is using it."""
        return self._locks.get(account)

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(
        self,
        account: str,
        timeout: Optional[float] = 30.0,
        operation: str = "sign",
    ):
        """Hold the account's lock for the duration of the block.

        Args:
            account: Source account identifier
            timeout: Maximum time to wait for lock (None = wait forever)
            operation: Description for logging

        Raises:
            LockTimeoutError: If the lock is not acquired in time

        Example:
            async with registry.hold(from_address, operation="native"):
                # build, sign, broadcast
                pass
        """
        lock = self._checkout(account)
        acquired = False
        try:
            if timeout:
                acquired = await _acquire(lock, timeout)
            else:
                acquired = await lock.acquire()

            if not acquired:
                logger.warning(f"Lock timeout for account {account} after {timeout}s: {operation}")
                raise LockTimeoutError(
                    f"Could not acquire lock for account {account} within {timeout}s"
                )

            logger.debug(f"Lock acquired for account {account}: {operation}")
            yield

        finally:
            if acquired:
                lock.release()
                logger.debug(f"Lock released for account {account}: {operation}")
            self._checkin(account)

    def clear(self) -> None:
        """Drop all locks (useful for testing)."""
        self._locks.clear()
        self._users.clear()

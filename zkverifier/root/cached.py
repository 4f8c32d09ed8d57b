"""
Cached Root Verifier
====================

[ROOT] Compares the proof root with the current root stored on the contract.
The stored root is cached for `expiration` seconds, then re-fetched on the
next verification. Only the fetch is time-bounded, comparison is local.

[STALENESS] The cache trades freshness for call volume. Within the window:
- a root that has just become current on-chain is rejected
- a root that was replaced on-chain is still accepted until expiry
Pick the expiration accordingly.

[CONCURRENCY] The (root, fetched_at) pair is guarded by a per-instance lock,
covering the whole read-refresh-write sequence. Concurrent callers wait for
one refresh instead of issuing their own. Independent roots (passport vs
poll) must use independent instances.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from ..errors import RootMismatchError
from .base import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT,
    RemoteRootVerifier,
    RootVerifierKind,
    ensure_root_bytes,
    parse_root,
)

logger = logging.getLogger(__name__)

# Cache lifetime of the fetched root (seconds)
DEFAULT_EXPIRATION: float = 10.0


class CachedRootVerifier(RemoteRootVerifier):
    """
    Verifies a root against the cached contract root.

    [USAGE]
        verifier = CachedRootVerifier(ledger, timeout=5.0, expiration=30.0)
        verifier.verify_root(root)  # fetches once, then serves from cache
    """

    kind = RootVerifierKind.CACHED

    def __init__(
        self,
        ledger: Any,
        timeout: float = DEFAULT_TIMEOUT,
        expiration: float = DEFAULT_EXPIRATION,
        clock: Callable[[], float] = time.monotonic,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """
        Args:
            ledger: Ledger client with get_root()
            timeout: Deadline of the root fetch in seconds
            expiration: Cache lifetime in seconds,
                non-positive values fall back to DEFAULT_EXPIRATION
            clock: Monotonic time source, injectable for tests
        """
        super().__init__(ledger, timeout=timeout, max_workers=max_workers)
        self.expiration = expiration if expiration and expiration > 0 else DEFAULT_EXPIRATION
        self._clock = clock
        self._lock = threading.Lock()
        self._root: Optional[bytes] = None
        self._fetched_at: float = 0.0

    def verify_root(self, root: str) -> None:
        provided = parse_root(root)
        stored = self.current_root()

        if stored != provided:
            raise RootMismatchError(stored, provided)

    def current_root(self) -> bytes:
        """
        Cached contract root, refreshed when expired.

        Raises:
            RootVerificationError: refresh failed, the expired entry is not served
        """
        with self._lock:
            now = self._clock()
            if self._root is not None and now - self._fetched_at < self.expiration:
                return self._root

            fetched = self._call("get root from contract", self.ledger.get_root)
            self._root = ensure_root_bytes(fetched)
            self._fetched_at = now
            logger.info(f"[ROOT] Cached contract root {self._root.hex()} for {self.expiration}s")
            return self._root

    @property
    def expires_at(self) -> Optional[float]:
        """Clock value at which the cached root expires, None when empty."""
        with self._lock:
            if self._root is None:
                return None
            return self._fetched_at + self.expiration

"""
Root Verifier Base
==================

[ROOT] A root verifier checks a root from proof public signals against an
authoritative on-chain source. The root arrives as a decimal string and is
converted to a 32-byte big-endian value.

Outcomes:
- return None: root is valid (or verification is disabled)
- InvalidRootError: root was checked and is not valid
- RootVerificationError: root could not be checked

[DEADLINE] Every remote call runs on the verifier's own worker pool and is
bounded by the configured timeout. A verifier never blocks calls made
through another verifier instance.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Any, Callable, ClassVar, Optional, TypeVar

from ..encoding import decimal_to_32_bytes
from ..errors import InvalidRootError, RootVerificationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Remote call timeout (seconds)
DEFAULT_TIMEOUT: float = 5.0

# Max parallel remote calls per verifier
DEFAULT_MAX_WORKERS: int = 4


class RootVerifierKind(str, Enum):
    """Closed set of root verifier implementations."""
    DISABLED = "disabled"
    CONTRACT = "contract"
    CACHED = "cached"
    EVENTS = "events"


class RootStatus(Enum):
    VALID = "valid"
    INVALID_ROOT = "invalid_root"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


class RootVerifier(ABC):
    """Abstraction to verify a root value against some state."""

    kind: ClassVar[RootVerifierKind]

    @abstractmethod
    def verify_root(self, root: str) -> None:
        """
        Args:
            root: Decimal big integer from proof public signals

        Raises:
            InvalidRootError: root is not valid
            RootVerificationError: root could not be checked
        """

    def is_disabled(self) -> bool:
        """Distinguish "not checked" from "checked and valid"."""
        return self.kind is RootVerifierKind.DISABLED

    def status(self, root: str) -> RootStatus:
        """verify_root() outcome as a value instead of an exception."""
        try:
            self.verify_root(root)
        except InvalidRootError:
            return RootStatus.INVALID_ROOT
        except RootVerificationError:
            return RootStatus.INFRASTRUCTURE_ERROR
        return RootStatus.VALID

    def close(self) -> None:
        """Release resources held by the verifier."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def parse_root(root: str) -> bytes:
    """
    Decimal root to 32 bytes.

    Raises:
        InvalidRootError: root is not a decimal that fits 32 bytes
    """
    value = decimal_to_32_bytes(root)
    if value is None:
        raise InvalidRootError(f"invalid root passed: {root!r}")
    return value


class RemoteRootVerifier(RootVerifier):
    """Root verifier that talks to a ledger with time-bounded calls."""

    def __init__(
        self,
        ledger: Any,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """
        Args:
            ledger: Ledger client, see zkverifier.ledger.RootLedger
            timeout: Deadline of a single remote call in seconds,
                non-positive values fall back to DEFAULT_TIMEOUT
            max_workers: Parallel remote calls allowed for this verifier
        """
        self.ledger = ledger
        self.timeout = timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=f"root-{self.kind.value}",
        )

    def _call(self, description: str, fn: Callable[..., T], *args: Any) -> T:
        """
        Run a remote call under the deadline.

        Raises:
            RootVerificationError: call failed or exceeded the deadline
        """
        future = self._executor.submit(fn, *args)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(f"[ROOT] {description}: timed out after {self.timeout}s")
            raise RootVerificationError(
                f"{description}: timed out after {self.timeout}s"
            ) from None
        except Exception as e:
            logger.warning(f"[ROOT] {description}: {e}")
            raise RootVerificationError(f"{description}: {e}") from e

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout={self.timeout})"


def ensure_root_bytes(value: Optional[Any]) -> bytes:
    """
    Normalize a bytes32 contract response.

    Raises:
        RootVerificationError: response is not 32 bytes
    """
    if not isinstance(value, (bytes, bytearray)) or len(value) != 32:
        raise RootVerificationError(f"unexpected root returned by contract: {value!r}")
    return bytes(value)

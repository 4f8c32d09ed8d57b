"""
ZKVerifier Test Configuration
=============================

[QA] Central pytest configuration with fixtures for all test types:
- Unit tests: Isolated, no network, fast
- Integration tests: Threads and deadlines against a fake ledger

[FIXTURES]
- fake_ledger: In-memory root registry with call counters
- fake_clock: Manually advanced monotonic clock
- signals_factory: Valid public signals for a proof type
- zk_proof_factory: ZKProof around those signals
- checker: Groth16 stub that accepts everything

Usage:
    pytest tests/unit/          # Fast unit tests
    pytest tests/integration/   # Integration tests
    pytest -m "not slow"        # Skip pairing computations
"""

import inspect
import logging
import shutil
import sys
import tempfile
import threading
import time
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional, Set
from unittest.mock import MagicMock

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (threads, fake ledger)")
    config.addinivalue_line("markers", "slow: Slow tests (skip with -m 'not slow')")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their path."""
    for item in items:
        if "/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)

        # Mark async tests
        if inspect.iscoroutinefunction(getattr(item, "obj", None)):
            item.add_marker(pytest.mark.asyncio)


# ============================================================================
# Logging Configuration
# ============================================================================

@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # Silence noisy loggers during tests
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="zkverifier_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


# ============================================================================
# Time Fixtures
# ============================================================================

# Fixed "now" for verifier tests
NOW = datetime(2024, 6, 15, 12, 30, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="function")
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def now() -> datetime:
    return NOW


# ============================================================================
# Mock Ledger Fixtures
# ============================================================================

def root_bytes(value: int) -> bytes:
    """Root as the contract stores it."""
    return value.to_bytes(32, "big")


class FakeLedger:
    """
    In-memory root registry.

    [FEATURES]
    - isRootValid() over a set of valid roots
    - getRoot() returning the current root
    - RootUpdated events per root
    - Optional delay and failure injection
    """

    def __init__(self, current_root: int = 0):
        self.current_root = root_bytes(current_root)
        self.valid_roots: Set[bytes] = set()
        self.events: Dict[bytes, List[Dict[str, Any]]] = {}
        self.delay: float = 0.0
        self.error: Optional[Exception] = None
        self.calls: Dict[str, int] = {"is_root_valid": 0, "get_root": 0, "find_root_updated_events": 0}
        self._lock = threading.Lock()

    def _enter(self, name: str) -> None:
        with self._lock:
            self.calls[name] += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error

    def is_root_valid(self, root: bytes) -> bool:
        self._enter("is_root_valid")
        return root in self.valid_roots

    def get_root(self) -> bytes:
        self._enter("get_root")
        return self.current_root

    def find_root_updated_events(self, root: bytes):
        self._enter("find_root_updated_events")
        return iter(self.events.get(root, []))

    def add_valid_root(self, value: int) -> None:
        self.valid_roots.add(root_bytes(value))

    def add_event(self, value: int, block: int = 1) -> None:
        self.events.setdefault(root_bytes(value), []).append({"blockNumber": block})

    def set_root(self, value: int) -> None:
        self.current_root = root_bytes(value)


@pytest.fixture(scope="function")
def fake_ledger() -> FakeLedger:
    return FakeLedger(current_root=42)


# ============================================================================
# Proof Fixtures
# ============================================================================

ROOT = "42"
EVENT_ID = "304358862882731539112827930982999386691702727710421481944329166126417129570"
SELECTOR = "236065"


@pytest.fixture(scope="function")
def signals_factory() -> Callable[..., List[str]]:
    """
    Factory for public signals that pass default checks at NOW.

    Overrides are keyed by SignalID value, e.g. citizenship=encode_text("USA").
    """
    from zkverifier.encoding import encode_date, encode_text
    from zkverifier.signals import ProofType, SignalID, indexes, signals_count

    def _create(proof_type: ProofType = ProofType.GLOBAL_PASSPORT, **overrides: str) -> List[str]:
        values = {
            SignalID.NULLIFIER: "12345678901234567890",
            SignalID.ID_STATE_ROOT: ROOT,
            SignalID.NULLIFIERS_TREE_ROOT: ROOT,
            SignalID.CITIZENSHIP: encode_text("UKR"),
            SignalID.EVENT_ID: EVENT_ID,
            SignalID.EVENT_DATA: "0",
            SignalID.SELECTOR: SELECTOR,
            SignalID.BIRTH_DATE: "0",
            SignalID.BIRTH_DATE_UPPER_BOUND: "0",
            SignalID.EXPIRATION_DATE: encode_date(date(2030, 1, 1)),
            SignalID.EXPIRATION_DATE_LOWER_BOUND: encode_date(NOW.date()),
            SignalID.IDENTITY_COUNTER_UPPER_BOUND: "1",
            SignalID.TIMESTAMP_UPPER_BOUND: str(int(NOW.timestamp())),
            SignalID.CURRENT_DATE: encode_date(NOW.date()),
            SignalID.PERSONAL_NUMBER_HASH: "987654321",
            SignalID.DOCUMENT_TYPE: encode_text("P"),
            SignalID.PARTICIPATION_EVENT_ID: "555",
        }
        for name, value in overrides.items():
            values[SignalID(name)] = value

        signals = ["0"] * signals_count(proof_type)
        for signal, index in indexes(proof_type).items():
            signals[index] = values[signal]
        return signals

    return _create


@pytest.fixture(scope="function")
def zk_proof_factory(signals_factory):
    """Factory for ZKProof with dummy points around valid signals."""
    from zkverifier.proof import ProofData, ZKProof
    from zkverifier.signals import ProofType

    def _create(proof_type: ProofType = ProofType.GLOBAL_PASSPORT, **overrides: str) -> ZKProof:
        return ZKProof(
            proof=ProofData(
                pi_a=["1", "2", "1"],
                pi_b=[["1", "2"], ["3", "4"], ["1", "0"]],
                pi_c=["1", "2", "1"],
            ),
            pub_signals=signals_factory(proof_type, **overrides),
        )

    return _create


@pytest.fixture(scope="function")
def checker() -> MagicMock:
    """Groth16 stub, records calls and accepts every proof."""
    return MagicMock(return_value=None)


@pytest.fixture(scope="function")
def verifier_factory(checker):
    """Verifier with dummy key, stub checker and NOW clock."""
    from zkverifier.verifier import Verifier

    def _create(*options, **kwargs):
        kwargs.setdefault("checker", checker)
        kwargs.setdefault("clock", lambda: NOW)
        return Verifier(b'{"protocol": "groth16"}', *options, **kwargs)

    return _create

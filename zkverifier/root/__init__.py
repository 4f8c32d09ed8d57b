"""
Root Verifiers
==============

[ROOT] Closed set of root verifier implementations:
- DisabledRootVerifier: always valid
- ContractRootVerifier: isRootValid point query per call
- CachedRootVerifier: current contract root cached for a TTL
- EventsRootVerifier: RootUpdated event log scan
"""

from .base import (
    DEFAULT_TIMEOUT,
    RootStatus,
    RootVerifier,
    RootVerifierKind,
    parse_root,
)
from .cached import DEFAULT_EXPIRATION, CachedRootVerifier
from .config import RootVerifierConfig
from .contract import ContractRootVerifier
from .disabled import DisabledRootVerifier
from .events import EventsRootVerifier

__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_EXPIRATION",
    "RootStatus",
    "RootVerifier",
    "RootVerifierKind",
    "RootVerifierConfig",
    "parse_root",
    "DisabledRootVerifier",
    "ContractRootVerifier",
    "CachedRootVerifier",
    "EventsRootVerifier",
]

"""
Public Signals Layout
=====================

[SCHEMA] Every proof type has a fixed circuit layout: a flat array of public
signals where each semantic field lives at a known index. Indexes need not be
contiguous, unused slots are simply absent from the type's map.

[USAGE]
    getter = SignalGetter(ProofType.GLOBAL_PASSPORT, proof.pub_signals)
    citizenship = getter.get(SignalID.CITIZENSHIP)   # "" when absent
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

from .errors import UnknownProofTypeError


class ProofType(str, Enum):
    """Proof family that defines public signals, their indexes and rules."""
    GLOBAL_PASSPORT = "global_passport"
    GEORGIAN_PASSPORT = "georgian_passport"
    POLL_PARTICIPATION = "poll_participation"

    @classmethod
    def parse(cls, value: object) -> "ProofType":
        """Resolve enum member from itself or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownProofTypeError(value) from None

    @property
    def is_passport(self) -> bool:
        return self in (ProofType.GLOBAL_PASSPORT, ProofType.GEORGIAN_PASSPORT)


class SignalID(Enum):
    """
    Public signal identifier (not index!) used to look up the index in the
    proof type's layout.
    """
    NULLIFIER = "nullifier"
    BIRTH_DATE = "birth_date"
    EXPIRATION_DATE = "expiration_date"
    CITIZENSHIP = "citizenship"
    EVENT_ID = "event_id"
    EVENT_DATA = "event_data"
    ID_STATE_ROOT = "id_state_root"
    SELECTOR = "selector"
    TIMESTAMP_UPPER_BOUND = "timestamp_upper_bound"
    IDENTITY_COUNTER_UPPER_BOUND = "identity_counter_upper_bound"
    BIRTH_DATE_UPPER_BOUND = "birth_date_upper_bound"
    EXPIRATION_DATE_LOWER_BOUND = "expiration_date_lower_bound"
    PERSONAL_NUMBER_HASH = "personal_number_hash"
    DOCUMENT_TYPE = "document_type"
    CURRENT_DATE = "current_date"
    PARTICIPATION_EVENT_ID = "participation_event_id"
    NULLIFIERS_TREE_ROOT = "nullifiers_tree_root"

    @property
    def field(self) -> str:
        """Field path used in validation errors."""
        return f"pub_signals/{self.value}"


# ============================================================================
# Layouts
# ============================================================================

_GLOBAL_PASSPORT: Dict[SignalID, int] = {
    SignalID.NULLIFIER: 0,
    SignalID.BIRTH_DATE: 1,
    SignalID.EXPIRATION_DATE: 2,
    SignalID.CITIZENSHIP: 6,
    SignalID.EVENT_ID: 9,
    SignalID.EVENT_DATA: 10,
    SignalID.ID_STATE_ROOT: 11,
    SignalID.SELECTOR: 12,
    SignalID.TIMESTAMP_UPPER_BOUND: 14,
    SignalID.IDENTITY_COUNTER_UPPER_BOUND: 16,
    SignalID.BIRTH_DATE_UPPER_BOUND: 18,
    SignalID.EXPIRATION_DATE_LOWER_BOUND: 19,
}

_GEORGIAN_PASSPORT: Dict[SignalID, int] = {
    SignalID.NULLIFIER: 0,
    SignalID.BIRTH_DATE: 1,
    SignalID.EXPIRATION_DATE: 2,
    SignalID.CITIZENSHIP: 5,
    SignalID.PERSONAL_NUMBER_HASH: 8,
    SignalID.DOCUMENT_TYPE: 9,
    SignalID.EVENT_ID: 10,
    SignalID.EVENT_DATA: 11,
    SignalID.ID_STATE_ROOT: 12,
    SignalID.SELECTOR: 13,
    SignalID.CURRENT_DATE: 14,
    SignalID.TIMESTAMP_UPPER_BOUND: 16,
    SignalID.IDENTITY_COUNTER_UPPER_BOUND: 18,
    SignalID.BIRTH_DATE_UPPER_BOUND: 20,
    SignalID.EXPIRATION_DATE_LOWER_BOUND: 21,
}

_POLL_PARTICIPATION: Dict[SignalID, int] = {
    SignalID.NULLIFIER: 0,
    SignalID.NULLIFIERS_TREE_ROOT: 1,
    SignalID.PARTICIPATION_EVENT_ID: 2,
    SignalID.EVENT_ID: 3,
}

_LAYOUTS: Dict[ProofType, Dict[SignalID, int]] = {
    ProofType.GLOBAL_PASSPORT: _GLOBAL_PASSPORT,
    ProofType.GEORGIAN_PASSPORT: _GEORGIAN_PASSPORT,
    ProofType.POLL_PARTICIPATION: _POLL_PARTICIPATION,
}

# Includes reserved slots the verifier does not read
_SIGNALS_COUNT: Dict[ProofType, int] = {
    ProofType.GLOBAL_PASSPORT: 22,
    ProofType.GEORGIAN_PASSPORT: 24,
    ProofType.POLL_PARTICIPATION: 4,
}


def indexes(proof_type: ProofType) -> Dict[SignalID, int]:
    """
    Public signals indexes for the proof type.

    Raises:
        UnknownProofTypeError: proof type is not supported
    """
    try:
        return _LAYOUTS[proof_type]
    except (KeyError, TypeError):
        raise UnknownProofTypeError(proof_type) from None


def signals_count(proof_type: ProofType) -> int:
    """Expected length of the public signals array."""
    try:
        return _SIGNALS_COUNT[proof_type]
    except (KeyError, TypeError):
        raise UnknownProofTypeError(proof_type) from None


def lookup(proof_type: ProofType, signal: SignalID) -> Optional[int]:
    """Index of the signal, None when the layout has no such field."""
    return indexes(proof_type).get(signal)


@dataclass(frozen=True)
class SignalGetter:
    """
    Extracts public signals from a proof by identifier.

    Initialize once per proof and reuse. The proof type is resolved on
    construction, so an unsupported type fails here, not on first access.
    """
    proof_type: ProofType
    signals: Sequence[str]

    def __post_init__(self):
        indexes(self.proof_type)

    def get(self, signal: SignalID) -> str:
        """Public signal by identifier, empty string on missing id or index."""
        i = lookup(self.proof_type, signal)
        if i is None or i >= len(self.signals):
            return ""
        return self.signals[i]

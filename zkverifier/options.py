"""
Verify Options
==============

[OPTIONS] VerifyOptions stores every field that may be validated before proof
verification. Each field has an "unset" value (-1, "", empty tuple, None)
that skips its rule.

Options are built by applying option functions to a base value. Option
functions are pure: they return a new VerifyOptions and never mutate.

[LAYERS]
    verifier = Verifier(key, with_age_above(18))          # defaults + options
    verifier.verify_proof(proof, with_event_id("123"))    # stored + overrides

Call-time options are layered on top of the stored ones, unset call-time
fields fall back to the construction-time values.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple, Union

from .errors import ConfigurationError
from .root import DisabledRootVerifier, RootVerifier
from .rules import (
    RARIMO_ADDRESS_PREFIX,
    UNSET_INT,
    AddressEventData,
    BytesEventData,
    EventDataRule,
)
from .signals import ProofType


@dataclass(frozen=True)
class VerifyOptions:
    """Immutable verification policy."""

    proof_type: ProofType = ProofType.GLOBAL_PASSPORT
    # minimal age in years; the cutoff instant is computed at verification time
    age: int = UNSET_INT
    # ISO 3166 Alpha-3 codes, e.g. "USA", "UKR"
    citizenships: Tuple[str, ...] = ()
    # big integer in decimal format
    event_id: str = ""
    event_data_rule: Optional[EventDataRule] = None
    document_type: str = ""
    proof_selector_value: str = ""
    max_identities_count: int = UNSET_INT
    max_identity_creation_timestamp: Optional[datetime] = None
    participation_event_id: str = ""
    verification_key_file: str = ""
    passport_root_verifier: RootVerifier = field(default_factory=DisabledRootVerifier)
    poll_root_verifier: RootVerifier = field(default_factory=DisabledRootVerifier)
    # test-only: proofs are bound to the day they were generated
    skip_expiration_check: bool = False


VerifyOption = Callable[[VerifyOptions], VerifyOptions]


def merge_options(
    apply_defaults: bool,
    base: VerifyOptions,
    *options: VerifyOption,
) -> VerifyOptions:
    """
    Collect options into one VerifyOptions value.

    Args:
        apply_defaults: Reset every field to its unset value and install
            disabled root verifiers before applying options
        base: Starting value, returned unchanged when no options are given
        options: Applied in order, later ones override earlier ones

    Returns:
        New VerifyOptions, base is never mutated
    """
    opts = _defaults(base) if apply_defaults else base
    for option in options:
        opts = option(opts)
    return opts


def _defaults(base: VerifyOptions) -> VerifyOptions:
    return replace(
        base,
        age=UNSET_INT,
        citizenships=(),
        event_id="",
        event_data_rule=None,
        document_type="",
        proof_selector_value="",
        max_identities_count=UNSET_INT,
        max_identity_creation_timestamp=None,
        participation_event_id="",
        verification_key_file="",
        passport_root_verifier=DisabledRootVerifier(),
        poll_root_verifier=DisabledRootVerifier(),
        skip_expiration_check=False,
    )


# ============================================================================
# Option functions
# ============================================================================

def with_proof_type(proof_type: Union[ProofType, str]) -> VerifyOption:
    """
    Select the proof type, which defines signals layout and rules.

    Raises:
        UnknownProofTypeError: type is not supported
    """
    resolved = ProofType.parse(proof_type)
    return lambda opts: replace(opts, proof_type=resolved)


def with_age_above(age: int) -> VerifyOption:
    """
    Minimal age in years (e.g. 18, 21). The birth date upper bound in the
    proof must be exactly `age` years before today.
    """
    if age < 0:
        raise ConfigurationError(f"age must be non-negative, got {age}")
    return lambda opts: replace(opts, age=age)


def with_citizenships(*citizenships: str) -> VerifyOption:
    """Accepted citizenships as ISO 3166 Alpha-3 codes ("USA", "UKR", "TUR")."""
    accepted = tuple(citizenships)
    return lambda opts: replace(opts, citizenships=accepted)


def with_event_id(identifier: str) -> VerifyOption:
    """Event identifier as a decimal big integer string."""
    return lambda opts: replace(opts, event_id=identifier)


def with_event_data(data: bytes) -> VerifyOption:
    """Exact bytes expected in the event data signal."""
    rule = BytesEventData(bytes(data)) if data else None
    return lambda opts: replace(opts, event_data_rule=rule)


def with_rarimo_address(address: str, prefix: str = RARIMO_ADDRESS_PREFIX) -> VerifyOption:
    """
    Bech32 address the proof must be bound to via event data.

    Raises:
        ConfigurationError: address is not valid bech32 with the prefix
    """
    rule = AddressEventData.parse(address, prefix)
    return lambda opts: replace(opts, event_data_rule=rule)


def with_document_type(document_type: str) -> VerifyOption:
    """Accepted issuing document type, e.g. "P" or "ID"."""
    return lambda opts: replace(opts, document_type=document_type)


def with_proof_selector_value(selector: str) -> VerifyOption:
    """Selector bitmask the proof must be generated with, decimal string."""
    return lambda opts: replace(opts, proof_selector_value=selector)


def with_identities_counter(max_count: int) -> VerifyOption:
    """
    Maximum number of identities created for the same document. Works in OR
    with with_identities_creation_timestamp_limit.
    """
    return lambda opts: replace(opts, max_identities_count=max_count)


def with_identities_creation_timestamp_limit(limit: Union[int, datetime]) -> VerifyOption:
    """
    Latest allowed identity creation time, unix seconds or aware datetime.
    Works in OR with with_identities_counter.
    """
    if isinstance(limit, datetime):
        moment = limit if limit.tzinfo else limit.replace(tzinfo=timezone.utc)
    else:
        try:
            moment = datetime.fromtimestamp(limit, tz=timezone.utc)
        except (TypeError, OverflowError, OSError, ValueError) as e:
            raise ConfigurationError(f"invalid identity creation timestamp limit {limit!r}: {e}") from e
    return lambda opts: replace(opts, max_identity_creation_timestamp=moment)


def with_participation_event_id(identifier: str) -> VerifyOption:
    """Poll participation event identifier, decimal string."""
    return lambda opts: replace(opts, participation_event_id=identifier)


def with_verification_key_file(path: str) -> VerifyOption:
    """Read verification key from file on verifier construction."""
    return lambda opts: replace(opts, verification_key_file=str(path))


def with_passport_root_verifier(verifier: RootVerifier) -> VerifyOption:
    """Root verifier for the identity state root of passport proofs."""
    return lambda opts: replace(opts, passport_root_verifier=verifier)


def with_poll_root_verifier(verifier: RootVerifier) -> VerifyOption:
    """Root verifier for the nullifiers tree root of poll proofs."""
    return lambda opts: replace(opts, poll_root_verifier=verifier)


def with_skip_expiration_check() -> VerifyOption:
    """Skip document expiration checks. Intended for tests only."""
    return lambda opts: replace(opts, skip_expiration_check=True)

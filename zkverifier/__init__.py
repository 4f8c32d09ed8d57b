"""
ZKVerifier Kit
==============

[VERIFY] Validation of identity ZK proofs: public signals policy, on-chain
root checks and Groth16 verification.

[USAGE]
    from zkverifier import Verifier, ZKProof, with_age_above, with_citizenships

    verifier = Verifier(vk_bytes, with_age_above(18), with_citizenships("UKR"))
    verifier.verify_proof(ZKProof.from_json(raw))
"""

from .errors import (
    ConfigurationError,
    Groth16Error,
    InvalidRootError,
    ProofInvalidError,
    RootMismatchError,
    RootVerificationError,
    RuleError,
    StructuralError,
    UnknownProofTypeError,
    ValidationErrors,
    VerificationKeyRequiredError,
    ZKVerifierError,
)
from .options import (
    VerifyOption,
    VerifyOptions,
    merge_options,
    with_age_above,
    with_citizenships,
    with_document_type,
    with_event_data,
    with_event_id,
    with_identities_counter,
    with_identities_creation_timestamp_limit,
    with_participation_event_id,
    with_passport_root_verifier,
    with_poll_root_verifier,
    with_proof_selector_value,
    with_proof_type,
    with_rarimo_address,
    with_skip_expiration_check,
    with_verification_key_file,
)
from .proof import ProofData, ZKProof
from .root import (
    CachedRootVerifier,
    ContractRootVerifier,
    DisabledRootVerifier,
    EventsRootVerifier,
    RootStatus,
    RootVerifier,
    RootVerifierConfig,
    RootVerifierKind,
)
from .signals import ProofType, SignalGetter, SignalID, signals_count
from .verifier import Verifier, new_verifier

__version__ = "0.1.0"

__all__ = [
    # Verifier
    "Verifier",
    "new_verifier",
    "ZKProof",
    "ProofData",
    # Signals
    "ProofType",
    "SignalID",
    "SignalGetter",
    "signals_count",
    # Options
    "VerifyOption",
    "VerifyOptions",
    "merge_options",
    "with_age_above",
    "with_citizenships",
    "with_document_type",
    "with_event_data",
    "with_event_id",
    "with_identities_counter",
    "with_identities_creation_timestamp_limit",
    "with_participation_event_id",
    "with_passport_root_verifier",
    "with_poll_root_verifier",
    "with_proof_selector_value",
    "with_proof_type",
    "with_rarimo_address",
    "with_skip_expiration_check",
    "with_verification_key_file",
    # Root verifiers
    "RootVerifier",
    "RootVerifierKind",
    "RootVerifierConfig",
    "RootStatus",
    "DisabledRootVerifier",
    "ContractRootVerifier",
    "CachedRootVerifier",
    "EventsRootVerifier",
    # Errors
    "ZKVerifierError",
    "ConfigurationError",
    "UnknownProofTypeError",
    "VerificationKeyRequiredError",
    "RuleError",
    "ValidationErrors",
    "StructuralError",
    "InvalidRootError",
    "RootMismatchError",
    "RootVerificationError",
    "Groth16Error",
    "ProofInvalidError",
]

"""
Verifier Errors
===============

[ERRORS] Error taxonomy of the verification kit:

- ConfigurationError: bad setup, raised at construction (never at verify time)
- ValidationErrors: public signals do not satisfy the configured policy,
  all failing fields are collected into one value
- StructuralError: malformed proof / wrong signal count, aborts immediately
- InvalidRootError: root was checked and it is not valid (validation failure)
- RootVerificationError: root could not be checked (RPC, timeout, contract)
- ProofInvalidError: Groth16 verification of the proof itself failed

Use isinstance / except clauses to tell "your proof is invalid" from
"we could not check it".
"""

from typing import Dict, Mapping, Optional


class ZKVerifierError(Exception):
    """Base class for all verifier errors."""


# ============================================================================
# Configuration
# ============================================================================

class ConfigurationError(ZKVerifierError):
    """Verifier or root verifier was configured incorrectly."""


class UnknownProofTypeError(ConfigurationError):
    """Proof type is not supported by this package."""

    def __init__(self, proof_type: object):
        super().__init__(f"unknown proof type: {proof_type!r}")
        self.proof_type = proof_type


class VerificationKeyRequiredError(ConfigurationError):
    """Neither raw verification key nor key file was provided."""

    def __init__(self):
        super().__init__("verification key is required")


# ============================================================================
# Validation
# ============================================================================

class RuleError(ValueError):
    """Single rule failure for one public signal."""


class ValidationErrors(ZKVerifierError):
    """
    Field-level validation failures.

    Keys are field paths like "pub_signals/citizenship", values are the
    underlying exceptions. The message lists every field sorted by path.
    """

    def __init__(self, errors: Mapping[str, Exception]):
        self.errors: Dict[str, Exception] = dict(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [f"{field}: {err}" for field, err in sorted(self.errors.items())]
        return "; ".join(parts) + "." if parts else ""

    def __contains__(self, field: str) -> bool:
        return field in self.errors

    def __getitem__(self, field: str) -> Exception:
        return self.errors[field]

    def __len__(self) -> int:
        return len(self.errors)

    @staticmethod
    def filtered(errors: Mapping[str, Optional[Exception]]) -> Dict[str, Exception]:
        """Drop entries without error."""
        return {k: v for k, v in errors.items() if v is not None}


class StructuralError(ValidationErrors):
    """Proof object is empty or public signals have a wrong shape."""


# ============================================================================
# Root verification
# ============================================================================

class InvalidRootError(ZKVerifierError):
    """
    Root verification completed without internal errors, but the root
    itself is invalid.
    """

    def __init__(self, message: str = "invalid identity root"):
        super().__init__(message)


class RootMismatchError(InvalidRootError):
    """Root differs from the one stored on the contract."""

    def __init__(self, stored: bytes, provided: bytes):
        super().__init__(f"root mismatch: stored {stored.hex()}, provided {provided.hex()}")
        self.stored = stored
        self.provided = provided


class RootVerificationError(ZKVerifierError):
    """Root could not be verified: RPC failure, timeout or bad contract response."""


# ============================================================================
# Cryptographic check
# ============================================================================

class Groth16Error(ValueError):
    """Raised by the Groth16 adapter when a proof does not verify."""


class ProofInvalidError(ZKVerifierError):
    """Groth16 verification of the proof failed."""

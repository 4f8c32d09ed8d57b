"""
Disabled Root Verifier
======================

[ROOT] Used when no external trust root is configured: every root passes,
including unparsable ones. Check is_disabled() when "not checked" must be
handled differently from "checked and valid".
"""

from .base import RootVerifier, RootVerifierKind


class DisabledRootVerifier(RootVerifier):
    """Returns None on verification."""

    kind = RootVerifierKind.DISABLED

    def verify_root(self, root: str) -> None:
        return None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DisabledRootVerifier)

    def __hash__(self) -> int:
        return hash(DisabledRootVerifier)

    def __repr__(self) -> str:
        return "DisabledRootVerifier()"

"""
Contract Root Verifier
======================

[ROOT] Direct point query: one time-bounded isRootValid call on the state
tree contract per verification. Used for passport identity state roots.
"""

import logging

from ..errors import InvalidRootError
from .base import RemoteRootVerifier, RootVerifierKind, parse_root

logger = logging.getLogger(__name__)


class ContractRootVerifier(RemoteRootVerifier):
    """
    Calls isRootValid on the contract.

    [USAGE]
        ledger = RootRegistryClient(rpc_url, contract)
        verifier = ContractRootVerifier(ledger, timeout=5.0)
        verifier.verify_root("1669384151400940102771751757609...")
    """

    kind = RootVerifierKind.CONTRACT

    def verify_root(self, root: str) -> None:
        provided = parse_root(root)

        valid = self._call("call isRootValid", self.ledger.is_root_valid, provided)
        if not valid:
            logger.debug(f"[ROOT] Root {provided.hex()} is not valid on contract")
            raise InvalidRootError()

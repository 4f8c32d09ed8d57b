"""
Events Root Verifier
====================

[ROOT] Scans the append-only RootUpdated log for an entry carrying the root.
At least one entry means the root existed on-chain. Used for poll
participation proofs, where any historical root of the proposal tree is
accepted.
"""

import logging
from typing import Any, Optional

from ..errors import InvalidRootError
from .base import RemoteRootVerifier, RootVerifierKind, parse_root

logger = logging.getLogger(__name__)


class EventsRootVerifier(RemoteRootVerifier):
    """Filters RootUpdated events by root value."""

    kind = RootVerifierKind.EVENTS

    def verify_root(self, root: str) -> None:
        provided = parse_root(root)

        event = self._call("filter RootUpdated events", self._first_event, provided)
        if event is None:
            logger.debug(f"[ROOT] No RootUpdated event for {provided.hex()}")
            raise InvalidRootError()

    def _first_event(self, root: bytes) -> Optional[Any]:
        # consumed in the worker, so the deadline covers the scan
        return next(iter(self.ledger.find_root_updated_events(root)), None)

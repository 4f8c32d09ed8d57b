"""
Root Verifier Configuration
===========================

[CONFIG] Builds a root verifier from a config mapping or environment:

    passport_root_verifier:
      rpc: https://rpc.evm.mainnet.rarimo.com
      contract: 0x...
      request_timeout: 5
      cache_expiration: 10      # cached kind only

    passport_root_verifier:
      disabled: true            # other keys are ignored

Each call to build() returns a new, owned verifier. Keep one instance per
root source and pass it to the options explicitly.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from ..errors import ConfigurationError
from .base import DEFAULT_TIMEOUT, RootVerifier, RootVerifierKind
from .cached import DEFAULT_EXPIRATION, CachedRootVerifier
from .contract import ContractRootVerifier
from .disabled import DisabledRootVerifier
from .events import EventsRootVerifier

logger = logging.getLogger(__name__)

_TRUE = ("1", "true", "yes", "on")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE


def _parse_seconds(name: str, value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        seconds = float(str(value).strip().rstrip("s"))
    except ValueError:
        raise ConfigurationError(f"{name}: invalid duration {value!r}") from None
    return seconds if seconds > 0 else default


@dataclass(frozen=True)
class RootVerifierConfig:
    """Settings of one root verifier."""

    kind: RootVerifierKind = RootVerifierKind.CONTRACT
    rpc_url: str = ""
    contract: str = ""
    # RPC request timeout (seconds)
    request_timeout: float = DEFAULT_TIMEOUT
    # cached kind only
    cache_expiration: float = DEFAULT_EXPIRATION
    # events kind only
    from_block: int = 0
    root_method: str = "getRoot"
    disabled: bool = False

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        kind: Union[RootVerifierKind, str] = RootVerifierKind.CONTRACT,
    ) -> "RootVerifierConfig":
        """
        Raises:
            ConfigurationError: unsupported kind, missing rpc or bad values
        """
        kind = _parse_kind(data.get("kind", kind))

        if kind is RootVerifierKind.DISABLED or _parse_bool(data.get("disabled", False)):
            return cls(kind=RootVerifierKind.DISABLED, disabled=True)

        rpc = data.get("rpc") or data.get("rpc_url")
        if not rpc:
            raise ConfigurationError("rpc is required")

        try:
            from_block = int(data.get("from_block", 0) or 0)
        except (TypeError, ValueError):
            raise ConfigurationError(f"from_block: invalid block {data.get('from_block')!r}") from None

        return cls(
            kind=kind,
            rpc_url=str(rpc),
            contract=str(data.get("contract", "")),
            request_timeout=_parse_seconds("request_timeout", data.get("request_timeout"), DEFAULT_TIMEOUT),
            cache_expiration=_parse_seconds("cache_expiration", data.get("cache_expiration"), DEFAULT_EXPIRATION),
            from_block=from_block,
            root_method=str(data.get("root_method") or "getRoot"),
        )

    @classmethod
    def from_env(
        cls,
        prefix: str,
        kind: Union[RootVerifierKind, str] = RootVerifierKind.CONTRACT,
    ) -> "RootVerifierConfig":
        """
        Read <PREFIX>_DISABLED, <PREFIX>_RPC_URL, <PREFIX>_CONTRACT,
        <PREFIX>_REQUEST_TIMEOUT, <PREFIX>_CACHE_EXPIRATION,
        <PREFIX>_FROM_BLOCK, <PREFIX>_ROOT_METHOD.
        """
        prefix = prefix.upper()
        keys = ("disabled", "rpc_url", "contract", "request_timeout",
                "cache_expiration", "from_block", "root_method")
        data = {}
        for key in keys:
            value = os.getenv(f"{prefix}_{key.upper()}")
            if value is not None:
                data[key] = value
        return cls.from_mapping(data, kind)

    def build(self, ledger: Optional[Any] = None) -> RootVerifier:
        """
        Create the verifier.

        Args:
            ledger: Ledger client override (default: web3 RootRegistryClient)

        Raises:
            ConfigurationError: invalid contract address or rpc
        """
        if self.disabled or self.kind is RootVerifierKind.DISABLED:
            logger.info("[ROOT] Root verification disabled")
            return DisabledRootVerifier()

        if ledger is None:
            from ..ledger import RootRegistryClient

            ledger = RootRegistryClient(
                rpc_url=self.rpc_url,
                contract_address=self.contract,
                timeout=self.request_timeout,
                root_method=self.root_method,
                from_block=self.from_block,
            )

        logger.info(f"[ROOT] Building {self.kind.value} root verifier for {self.contract}")

        if self.kind is RootVerifierKind.CONTRACT:
            return ContractRootVerifier(ledger, timeout=self.request_timeout)
        if self.kind is RootVerifierKind.CACHED:
            return CachedRootVerifier(
                ledger,
                timeout=self.request_timeout,
                expiration=self.cache_expiration,
            )
        return EventsRootVerifier(ledger, timeout=self.request_timeout)


def _parse_kind(value: Union[RootVerifierKind, str]) -> RootVerifierKind:
    try:
        return RootVerifierKind(value)
    except ValueError:
        raise ConfigurationError(f"unsupported verifier type: {value!r}") from None

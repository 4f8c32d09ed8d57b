"""
Root Registry Client
====================

[BLOCKCHAIN] Read-only access to the contracts that hold authoritative roots:

- isRootValid(bytes32) - state tree contract point query (PoseidonSMT)
- getRoot() / icaoMasterTreeMerkleRoot() - current root view
- RootUpdated(bytes32 indexed root) - append-only log of tree roots

[USAGE]
    client = RootRegistryClient(
        rpc_url="https://rpc.evm.mainnet.rarimo.com",
        contract_address="0x...",
        timeout=5.0,
    )
    client.is_root_valid(root32)
    client.get_root()
    list(client.find_root_updated_events(root32))

HTTP requests carry the timeout; root verifiers additionally bound the
whole call with their own deadline.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Protocol

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Lazy import
Web3 = None


def _ensure_web3():
    global Web3
    if Web3 is None:
        from web3 import Web3 as _Web3
        Web3 = _Web3
    return Web3


# ============================================================================
# Contract ABI
# ============================================================================

ROOT_REGISTRY_ABI = [
    {"inputs": [{"name": "root", "type": "bytes32"}], "name": "isRootValid", "outputs": [{"type": "bool"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "getRoot", "outputs": [{"type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "icaoMasterTreeMerkleRoot", "outputs": [{"type": "bytes32"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "ROOT_VALIDITY", "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},

    # Events
    {"anonymous": False, "inputs": [{"indexed": True, "name": "root", "type": "bytes32"}], "name": "RootUpdated", "type": "event"},
]

ROOT_UPDATED_SIGNATURE = "RootUpdated(bytes32)"

# No-argument bytes32 views returning the current root
ROOT_VIEWS = ("getRoot", "icaoMasterTreeMerkleRoot")

# View used by the cached verifier to read the current root
DEFAULT_ROOT_METHOD = "getRoot"


class RootLedger(Protocol):
    """Ledger operations consumed by root verifiers."""

    def is_root_valid(self, root: bytes) -> bool:
        ...

    def get_root(self) -> bytes:
        ...

    def find_root_updated_events(self, root: bytes) -> Iterator[Any]:
        ...


# ============================================================================
# Web3 client
# ============================================================================

class RootRegistryClient:
    """
    Web3 binding of the root registry contract.

    Thread-safe for concurrent read calls: every call is a standalone
    JSON-RPC request over the shared HTTP provider.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        timeout: float = 5.0,
        root_method: str = DEFAULT_ROOT_METHOD,
        from_block: int = 0,
    ):
        """
        Args:
            rpc_url: EVM JSON-RPC endpoint
            contract_address: Hex address of the contract
            timeout: HTTP request timeout in seconds
            root_method: View that returns the current root
            from_block: First block of RootUpdated scans

        Raises:
            ConfigurationError: invalid contract address or unknown root view
        """
        Web3 = _ensure_web3()

        if not rpc_url:
            raise ConfigurationError("rpc url is required")
        if not contract_address or not Web3.is_address(contract_address):
            raise ConfigurationError(f"invalid hex address: {contract_address!r}")
        if root_method not in ROOT_VIEWS:
            raise ConfigurationError(f"unknown root view: {root_method!r}")

        self.rpc_url = rpc_url
        self.address = Web3.to_checksum_address(contract_address)
        self.root_method = root_method
        self.from_block = from_block

        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self.contract = self.w3.eth.contract(address=self.address, abi=ROOT_REGISTRY_ABI)
        self._root_updated_topic = Web3.to_hex(Web3.keccak(text=ROOT_UPDATED_SIGNATURE))

        logger.info(f"[LEDGER] Bound root registry {self.address} at {rpc_url}")

    def is_root_valid(self, root: bytes) -> bool:
        """Point query: is the root currently valid."""
        return bool(self.contract.functions.isRootValid(root).call())

    def get_root(self) -> bytes:
        """Current root stored on the contract."""
        return bytes(getattr(self.contract.functions, self.root_method)().call())

    def find_root_updated_events(
        self,
        root: bytes,
        from_block: Optional[int] = None,
    ) -> Iterator[Dict[str, Any]]:
        """
        RootUpdated logs carrying the root.

        Args:
            root: 32-byte root, matched against the indexed topic
            from_block: First block to scan (default: client from_block)
        """
        Web3 = _ensure_web3()
        params = {
            "address": self.address,
            "fromBlock": self.from_block if from_block is None else from_block,
            "toBlock": "latest",
            "topics": [self._root_updated_topic, Web3.to_hex(root)],
        }
        logs: List[Dict[str, Any]] = list(self.w3.eth.get_logs(params))
        logger.debug(f"[LEDGER] {len(logs)} RootUpdated logs for {root.hex()}")
        return iter(logs)

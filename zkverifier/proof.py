"""
ZK Proof Model
==============

[MODEL] Groth16 proof in the rapidsnark / snarkjs JSON layout:

    {
        "proof": {
            "pi_a": ["x", "y", "1"],
            "pi_b": [["x0", "x1"], ["y0", "y1"], ["1", "0"]],
            "pi_c": ["x", "y", "1"],
            "protocol": "groth16"
        },
        "pub_signals": ["123", "456", ...]
    }

snarkjs writes "publicSignals" instead of "pub_signals", both are accepted.
The proof points are opaque here, only the Groth16 adapter interprets them.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class ProofData:
    """Groth16 proof points, coordinates are decimal strings."""
    pi_a: List[str] = field(default_factory=list)
    pi_b: List[List[str]] = field(default_factory=list)
    pi_c: List[str] = field(default_factory=list)
    protocol: str = "groth16"

    def is_empty(self) -> bool:
        return not (self.pi_a and self.pi_b and self.pi_c)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pi_a": list(self.pi_a),
            "pi_b": [list(p) for p in self.pi_b],
            "pi_c": list(self.pi_c),
            "protocol": self.protocol,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofData":
        return cls(
            pi_a=[str(v) for v in data.get("pi_a") or []],
            pi_b=[[str(v) for v in p] for p in data.get("pi_b") or []],
            pi_c=[str(v) for v in data.get("pi_c") or []],
            protocol=data.get("protocol", "groth16"),
        )


@dataclass(frozen=True)
class ZKProof:
    """Proof with its public signals. Read-only for the verifier."""
    proof: Optional[ProofData]
    pub_signals: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proof": self.proof.to_dict() if self.proof else None,
            "pub_signals": list(self.pub_signals),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZKProof":
        raw_proof = data.get("proof")
        signals = data.get("pub_signals")
        if signals is None:
            signals = data.get("publicSignals") or []

        return cls(
            proof=ProofData.from_dict(raw_proof) if raw_proof else None,
            pub_signals=[str(s) for s in signals],
        )

    @classmethod
    def from_json(cls, source: Union[str, bytes, Path]) -> "ZKProof":
        """Load from JSON text, bytes or a file path."""
        if isinstance(source, Path):
            source = source.read_text(encoding="utf-8")
        return cls.from_dict(json.loads(source))

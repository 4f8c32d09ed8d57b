"""
Groth16 BN254 Adapter
=====================

[CRYPTO] Default cryptographic check used by the verifier, compatible with
snarkjs / rapidsnark JSON verification keys:

    {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": 2,
        "vk_alpha_1": ["x", "y", "1"],
        "vk_beta_2":  [["x0", "x1"], ["y0", "y1"], ["1", "0"]],
        "vk_gamma_2": [...],
        "vk_delta_2": [...],
        "IC": [["x", "y", "1"], ...]      # 1 + nPublic points
    }

Verification equation, checked as a product in GT:

    e(A, B) * e(-alpha1, beta2) * e(-VK_x, gamma2) * e(-C, delta2) == 1

where VK_x = IC[0] + sum(signal_i * IC[i + 1]).

Curve arithmetic and pairing come from py_ecc. Any callable with the
signature of verify_groth16() can replace this adapter in the Verifier.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, Tuple, Union

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    FQ12,
    add,
    b,
    b2,
    curve_order,
    is_on_curve,
    multiply,
    neg,
    pairing,
)

from .errors import Groth16Error
from .proof import ZKProof

logger = logging.getLogger(__name__)

G1Point = Any
G2Point = Any

# Raw snarkjs JSON, its decoded mapping or a VerifyingKey parsed earlier
VerificationKeySource = Union[bytes, str, Mapping[str, Any], "VerifyingKey"]

# Signature of the pluggable cryptographic check
Groth16Checker = Callable[[ZKProof, VerificationKeySource], None]


def _to_int(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    s = str(value).strip().lower()
    if s.startswith("0x"):
        return int(s, 16)
    return int(s)


def _g1(coords: Sequence[Union[int, str]]) -> G1Point:
    x, y = _to_int(coords[0]), _to_int(coords[1])
    # snarkjs encodes infinity as [0, 0]
    if x == 0 and y == 0:
        return (FQ(1), FQ(1), FQ(0))
    point = (FQ(x), FQ(y), FQ(1))
    if not is_on_curve(point, b):
        raise Groth16Error("G1 point is not on curve")
    return point


def _g2(coords: Sequence[Sequence[Union[int, str]]]) -> G2Point:
    x0, x1 = _to_int(coords[0][0]), _to_int(coords[0][1])
    y0, y1 = _to_int(coords[1][0]), _to_int(coords[1][1])
    if x0 == x1 == y0 == y1 == 0:
        return (FQ2([1, 0]), FQ2([1, 0]), FQ2([0, 0]))
    point = (FQ2([x0, x1]), FQ2([y0, y1]), FQ2([1, 0]))
    if not is_on_curve(point, b2):
        raise Groth16Error("G2 point is not on curve")
    return point


@dataclass(frozen=True)
class VerifyingKey:
    alpha1: G1Point
    beta2: G2Point
    gamma2: G2Point
    delta2: G2Point
    ic: Tuple[G1Point, ...]


def load_verification_key(source: VerificationKeySource) -> VerifyingKey:
    """
    Parse a snarkjs verification key.

    Raises:
        Groth16Error: malformed JSON or points
    """
    if isinstance(source, VerifyingKey):
        return source
    try:
        data = source if isinstance(source, Mapping) else json.loads(source)
        return VerifyingKey(
            alpha1=_g1(data["vk_alpha_1"]),
            beta2=_g2(data["vk_beta_2"]),
            gamma2=_g2(data["vk_gamma_2"]),
            delta2=_g2(data["vk_delta_2"]),
            ic=tuple(_g1(p) for p in data["IC"]),
        )
    except Groth16Error:
        raise
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise Groth16Error(f"invalid verification key: {e}") from e


def _vk_x(ic: Sequence[G1Point], inputs: Sequence[int]) -> G1Point:
    acc = ic[0]
    for point, scalar in zip(ic[1:], inputs):
        if scalar:
            acc = add(acc, multiply(point, scalar))
    return acc


def verify_groth16(proof: ZKProof, verification_key: VerificationKeySource) -> None:
    """
    Verify the proof against the key and its public signals.

    Raises:
        Groth16Error: proof does not verify or inputs are malformed
    """
    vk = load_verification_key(verification_key)

    if proof.proof is None or proof.proof.is_empty():
        raise Groth16Error("proof is empty")

    try:
        a = _g1(proof.proof.pi_a)
        b_point = _g2(proof.proof.pi_b)
        c = _g1(proof.proof.pi_c)
        inputs = [_to_int(s) for s in proof.pub_signals]
    except (ValueError, IndexError, TypeError) as e:
        raise Groth16Error(f"invalid proof: {e}") from e

    if len(vk.ic) != len(inputs) + 1:
        raise Groth16Error(f"invalid public signals count: got {len(inputs)}, key expects {len(vk.ic) - 1}")
    for i, value in enumerate(inputs):
        if not 0 <= value < curve_order:
            raise Groth16Error(f"public signal {i} is not in the scalar field")

    pairs = (
        (a, b_point),
        (neg(vk.alpha1), vk.beta2),
        (neg(_vk_x(vk.ic, inputs)), vk.gamma2),
        (neg(c), vk.delta2),
    )

    product = FQ12.one()
    for p, q in pairs:
        product = product * pairing(q, p)

    if product != FQ12.one():
        logger.debug("[GROTH16] Pairing product check failed")
        raise Groth16Error("pairing check failed")

"""
Groth16 Adapter Unit Tests
==========================

[CRYPTO] The adapter is checked against a synthetic proof built from known
trapdoor scalars, which satisfies the verification equation:

    a*b = alpha*beta + x*gamma + c*delta   (mod r)

with x = ic0 + sum(s_i * ic_i).
"""

import json

import pytest

SIGNALS = [5, 7]


def _coord(v) -> str:
    return str(v.n if hasattr(v, "n") else int(v))


def _g1_json(point):
    from py_ecc.optimized_bn128 import normalize

    x, y = normalize(point)
    return [_coord(x), _coord(y), "1"]


def _g2_json(point):
    from py_ecc.optimized_bn128 import normalize

    x, y = normalize(point)
    return [
        [_coord(x.coeffs[0]), _coord(x.coeffs[1])],
        [_coord(y.coeffs[0]), _coord(y.coeffs[1])],
        ["1", "0"],
    ]


@pytest.fixture(scope="module")
def synthetic():
    """(verification key dict, proof dict) for SIGNALS."""
    from py_ecc.optimized_bn128 import G1, G2, curve_order, multiply

    a, b, alpha, beta, gamma, delta = 11, 13, 17, 19, 23, 29
    ic = [3, 31, 37]

    x = (ic[0] + sum(s * k for s, k in zip(SIGNALS, ic[1:]))) % curve_order
    c = (a * b - alpha * beta - x * gamma) * pow(delta, -1, curve_order) % curve_order

    vk = {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": len(SIGNALS),
        "vk_alpha_1": _g1_json(multiply(G1, alpha)),
        "vk_beta_2": _g2_json(multiply(G2, beta)),
        "vk_gamma_2": _g2_json(multiply(G2, gamma)),
        "vk_delta_2": _g2_json(multiply(G2, delta)),
        "IC": [_g1_json(multiply(G1, k)) for k in ic],
    }
    proof = {
        "proof": {
            "pi_a": _g1_json(multiply(G1, a)),
            "pi_b": _g2_json(multiply(G2, b)),
            "pi_c": _g1_json(multiply(G1, c)),
            "protocol": "groth16",
        },
        "publicSignals": [str(s) for s in SIGNALS],
    }
    return vk, proof


# ============================================================================
# Pairing check
# ============================================================================

@pytest.mark.slow
class TestPairing:

    def test_valid_proof(self, synthetic):
        from zkverifier.groth16 import verify_groth16
        from zkverifier.proof import ZKProof

        vk, proof = synthetic

        verify_groth16(ZKProof.from_dict(proof), json.dumps(vk).encode())

    def test_tampered_signal(self, synthetic):
        from zkverifier.errors import Groth16Error
        from zkverifier.groth16 import verify_groth16
        from zkverifier.proof import ZKProof

        vk, proof = synthetic
        tampered = dict(proof, publicSignals=["5", "8"])

        with pytest.raises(Groth16Error, match="pairing check failed"):
            verify_groth16(ZKProof.from_dict(tampered), vk)


# ============================================================================
# Input validation
# ============================================================================

class TestInputs:

    def test_load_key(self, synthetic):
        from zkverifier.groth16 import load_verification_key

        vk, _ = synthetic
        key = load_verification_key(json.dumps(vk))

        assert len(key.ic) == len(SIGNALS) + 1
        assert load_verification_key(key) is key

    @pytest.mark.parametrize("raw", [b"not json", b"{}", b'{"vk_alpha_1": ["1"]}'])
    def test_malformed_key(self, raw):
        from zkverifier.errors import Groth16Error
        from zkverifier.groth16 import load_verification_key

        with pytest.raises(Groth16Error, match="invalid verification key"):
            load_verification_key(raw)

    def test_point_not_on_curve(self, synthetic):
        from zkverifier.errors import Groth16Error
        from zkverifier.groth16 import load_verification_key

        vk, _ = synthetic
        broken = dict(vk, vk_alpha_1=["1", "3", "1"])

        with pytest.raises(Groth16Error, match="not on curve"):
            load_verification_key(broken)

    def test_signals_count_mismatch(self, synthetic):
        from zkverifier.errors import Groth16Error
        from zkverifier.groth16 import verify_groth16
        from zkverifier.proof import ZKProof

        vk, proof = synthetic

        with pytest.raises(Groth16Error, match="public signals count"):
            verify_groth16(ZKProof.from_dict(dict(proof, publicSignals=["5"])), vk)

    def test_signal_outside_field(self, synthetic):
        from py_ecc.optimized_bn128 import curve_order

        from zkverifier.errors import Groth16Error
        from zkverifier.groth16 import verify_groth16
        from zkverifier.proof import ZKProof

        vk, proof = synthetic
        outside = dict(proof, publicSignals=["5", str(curve_order)])

        with pytest.raises(Groth16Error, match="scalar field"):
            verify_groth16(ZKProof.from_dict(outside), vk)

    def test_empty_proof(self, synthetic):
        from zkverifier.errors import Groth16Error
        from zkverifier.groth16 import verify_groth16
        from zkverifier.proof import ZKProof

        vk, _ = synthetic

        with pytest.raises(Groth16Error, match="proof is empty"):
            verify_groth16(ZKProof(proof=None, pub_signals=["5", "7"]), vk)

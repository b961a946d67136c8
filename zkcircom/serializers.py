"""
snarkjs JSON helpers
====================

Converts proofs, public signals and verifying keys to and from the JSON
shapes snarkjs reads and writes (``proof.json``, ``public.json``,
``verification_key.json``). Numbers are decimal strings and points are
projective:

    G1  [x, y, "1"]                       infinity ["0", "1", "0"]
    G2  [[x.c0, x.c1], [y.c0, y.c1], ["1", "0"]]
"""

from py_ecc import bn128

from zkcircom.errors import EncodingError
from zkcircom.field import FIELD_MODULUS, FQ, FR, is_on_g1, is_on_g2
from zkcircom.groth16.proving import Proof
from zkcircom.zkey import VerifyingKey

PROTOCOL = "groth16"
CURVE = "bn128"


# ─── FR ───

def serialize_fr(val):
    return str(int(val))


def deserialize_fr(s):
    return FR(int(s))


# ─── G1 point ───

def _coord(value):
    if not 0 <= value < FIELD_MODULUS:
        raise EncodingError(f"coordinate {value} is outside the base field")
    return value


def serialize_g1(point):
    if point is None:
        return ["0", "1", "0"]
    return [str(int(point[0])), str(int(point[1])), "1"]


def deserialize_g1(data):
    try:
        x, y, z = (int(v) for v in data)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"invalid G1 point {data!r}") from e
    if z == 0:
        return None
    if z != 1:
        raise EncodingError(f"G1 point is not normalized: z={z}")
    point = (FQ(_coord(x)), FQ(_coord(y)))
    if not is_on_g1(point):
        raise EncodingError(f"G1 point ({x}, {y}) is not on the curve")
    return point


# ─── G2 point ───

def serialize_g2(point):
    if point is None:
        return [["0", "0"], ["1", "0"], ["0", "0"]]
    return [
        [str(int(point[0].coeffs[0])), str(int(point[0].coeffs[1]))],
        [str(int(point[1].coeffs[0])), str(int(point[1].coeffs[1]))],
        ["1", "0"],
    ]


def deserialize_g2(data):
    try:
        (x0, x1), (y0, y1), (z0, z1) = ((int(a), int(b)) for a, b in data)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"invalid G2 point {data!r}") from e
    if z0 == 0 and z1 == 0:
        return None
    if (z0, z1) != (1, 0):
        raise EncodingError(f"G2 point is not normalized: z=({z0}, {z1})")
    point = (
        bn128.FQ2([_coord(x0), _coord(x1)]),
        bn128.FQ2([_coord(y0), _coord(y1)]),
    )
    if not is_on_g2(point):
        raise EncodingError(f"G2 point x=({x0}, {x1}) is not on the curve")
    return point


# ─── Proof ───

def proof_to_json(proof):
    return {
        "pi_a": serialize_g1(proof.a),
        "pi_b": serialize_g2(proof.b),
        "pi_c": serialize_g1(proof.c),
        "protocol": PROTOCOL,
        "curve": CURVE,
    }


def proof_from_json(data):
    try:
        return Proof(
            a=deserialize_g1(data["pi_a"]),
            b=deserialize_g2(data["pi_b"]),
            c=deserialize_g1(data["pi_c"]),
        )
    except KeyError as e:
        raise EncodingError(f"proof is missing {e.args[0]!r}") from e


# ─── Public signals ───

def public_to_json(values):
    return [serialize_fr(v) for v in values]


def public_from_json(data):
    return [deserialize_fr(v) for v in data]


# ─── Verifying key ───

def verifying_key_to_json(vk):
    return {
        "protocol": PROTOCOL,
        "curve": CURVE,
        "nPublic": vk.n_public,
        "vk_alpha_1": serialize_g1(vk.alpha_g1),
        "vk_beta_2": serialize_g2(vk.beta_g2),
        "vk_gamma_2": serialize_g2(vk.gamma_g2),
        "vk_delta_2": serialize_g2(vk.delta_g2),
        "IC": [serialize_g1(p) for p in vk.gamma_abc_g1],
    }


def verifying_key_from_json(data):
    try:
        if data.get("protocol", PROTOCOL) != PROTOCOL:
            raise EncodingError(f"unsupported protocol {data['protocol']!r}")
        vk = VerifyingKey(
            alpha_g1=deserialize_g1(data["vk_alpha_1"]),
            beta_g2=deserialize_g2(data["vk_beta_2"]),
            gamma_g2=deserialize_g2(data["vk_gamma_2"]),
            delta_g2=deserialize_g2(data["vk_delta_2"]),
            gamma_abc_g1=tuple(deserialize_g1(p) for p in data["IC"]),
        )
    except KeyError as e:
        raise EncodingError(f"verifying key is missing {e.args[0]!r}") from e
    if "nPublic" in data and int(data["nPublic"]) != vk.n_public:
        raise EncodingError(f"nPublic {data['nPublic']} does not match {len(vk.gamma_abc_g1)} IC points")
    return vk

"""BN254 scalar field GF(p) and the 250-bit masking used by the note scheme.

Uses galois for field arithmetic. FF is the field type; plain Python ints are
the storage/interchange representation (FieldElement), always canonical.

The scalar field is the one circom and snarkjs work in. Commitments are
additionally masked to 250 bits so they fit a Starknet felt252.
"""

import galois

# --- Field Construction ---

BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# 5 generates the multiplicative group; passing it skips factoring p - 1.
FF = galois.GF(BN254_PRIME, primitive_element=5, verify=False)
"""Base field GF(p) - BN254 scalar field."""

# Starknet felt252 modulus, used only when encoding entrypoint calldata.
STARK_PRIME = 2**251 + 17 * 2**192 + 1

MASK_BITS = 250
MASK_250 = (1 << MASK_BITS) - 1

FieldElement = int


# --- Canonicalization ---

def to_field(value: int) -> FieldElement:
    """Reduce any integer into [0, p) and return it as a plain int."""
    return int(FF(int(value) % BN254_PRIME))


def signed_to_field(value: int) -> FieldElement:
    """Map a signed integer into the field: -v becomes p - v.

    Matches how circom interprets negative decimal inputs.
    """
    value = int(value)
    if value >= 0:
        return to_field(value)
    return int(-FF(-value % BN254_PRIME))


def mask(value: int, bits: int = MASK_BITS) -> int:
    """Keep the low `bits` bits of an unbounded non-negative integer.

    The result is always strictly below 2**bits, including for inputs wider
    than the field.
    """
    if value < 0:
        raise ValueError(f"mask expects a non-negative integer, got {value}")
    return int(value) & ((1 << bits) - 1)


# --- Text Encoding ---

def parse_int(value: int | str) -> int:
    """Parse a signed integer from an int, a decimal string or a 0x-hex string."""
    if isinstance(value, int):
        return int(value)
    text = value.strip()
    if not text:
        raise ValueError("empty integer string")
    if text.lower().startswith(("0x", "-0x")):
        return int(text, 16)
    return int(text, 10)


def parse_felt(value: int | str) -> FieldElement:
    """Parse a field element; negative values map to p - |v|."""
    return signed_to_field(parse_int(value))


def felt_hex(value: int) -> str:
    """Render a field element as 0x-prefixed lowercase hex."""
    return f"0x{to_field(value):x}"


def to_stark_felt(value: int) -> int:
    """Encode a signed integer as a Starknet felt252 (-v becomes P - v).

    Values at or above the Starknet prime are reduced modulo it, which loses
    information: BN254 scalars above 2**251 do not survive the encoding.
    """
    return int(value) % STARK_PRIME

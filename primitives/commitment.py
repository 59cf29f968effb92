"""Note and position commitments.

    commitment          = mask(H(mask(H(secret, nullifier)), amount))
    position_commitment = mask(H(secret, tick_lower + tick_upper))

H is the two-input field hash and mask keeps the low 250 bits. Both
intermediate values are masked so every value the circuits range-check, and
every value stored on-chain as a felt252, stays below 2**250.
"""

import secrets
from dataclasses import dataclass

from primitives.field import MASK_BITS, FieldElement, mask, signed_to_field, to_field
from primitives.hasher import Hasher

# Random secrets stay comfortably below the 250-bit mask.
SECRET_BITS = 248


@dataclass(frozen=True)
class Note:
    """A spendable note. Only its commitment is ever stored in the tree."""
    secret: int
    nullifier: int
    amount: int

    def commitment(self, hasher: Hasher) -> FieldElement:
        return derive_note_commitment(hasher, self.secret, self.nullifier, self.amount)


def derive_note_commitment(hasher: Hasher, secret: int, nullifier: int, amount: int) -> FieldElement:
    """Compute the leaf commitment of a note.

    Args:
        hasher: Two-input field hash
        secret: Holder secret
        nullifier: Value revealed when the note is spent
        amount: Note value

    Returns:
        Commitment, strictly below 2**250
    """
    h1 = hasher.hash2(to_field(secret), to_field(nullifier))
    m1 = mask(h1, MASK_BITS)
    h2 = hasher.hash2(m1, to_field(amount))
    return mask(h2, MASK_BITS)


def derive_position_commitment(hasher: Hasher, secret: int, tick_lower: int, tick_upper: int) -> FieldElement:
    """Compute the identity of an LP position.

    The tick sum may be negative; it enters the hash as p - |sum|, the same
    element circom builds from a negative decimal input.
    """
    tick_sum = signed_to_field(int(tick_lower) + int(tick_upper))
    return mask(hasher.hash2(to_field(secret), tick_sum), MASK_BITS)


def generate_note(amount: int) -> Note:
    """Create a note with fresh random secret and nullifier."""
    return Note(
        secret=secrets.randbits(SECRET_BITS),
        nullifier=secrets.randbits(SECRET_BITS),
        amount=int(amount),
    )

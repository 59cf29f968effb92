"""Primitives - Field helper, hash collaborator, commitments and the Merkle accumulator."""

from primitives.commitment import (
    Note,
    derive_note_commitment,
    derive_position_commitment,
    generate_note,
)
from primitives.errors import (
    ArtifactInvalid,
    ArtifactNotFound,
    BackendError,
    HasherError,
    IndexOutOfRange,
    InvalidDepth,
    MissingField,
    ProvingFailed,
    ProvingTimeout,
    UnknownCircuit,
    ZylithError,
)
from primitives.field import (
    BN254_PRIME,
    FF,
    MASK_250,
    MASK_BITS,
    STARK_PRIME,
    FieldElement,
    felt_hex,
    mask,
    parse_felt,
    parse_int,
    signed_to_field,
    to_field,
    to_stark_felt,
)
from primitives.hasher import Hasher, PoseidonHasher
from primitives.merkle_tree import (
    TREE_DEPTH,
    MerkleProof,
    MerkleRoot,
    MerkleTree,
    build,
    compute_root,
    empty_root,
    prove_inclusion,
    verify_inclusion,
    zero_hashes,
)

__all__ = [
    # Field
    "FF",
    "BN254_PRIME",
    "STARK_PRIME",
    "MASK_BITS",
    "MASK_250",
    "FieldElement",
    "mask",
    "to_field",
    "signed_to_field",
    "parse_int",
    "parse_felt",
    "felt_hex",
    "to_stark_felt",
    # Hash
    "Hasher",
    "PoseidonHasher",
    # Commitments
    "Note",
    "derive_note_commitment",
    "derive_position_commitment",
    "generate_note",
    # Merkle Tree
    "TREE_DEPTH",
    "MerkleTree",
    "MerkleProof",
    "MerkleRoot",
    "build",
    "prove_inclusion",
    "empty_root",
    "zero_hashes",
    "compute_root",
    "verify_inclusion",
    # Errors
    "ZylithError",
    "UnknownCircuit",
    "ArtifactNotFound",
    "ArtifactInvalid",
    "InvalidDepth",
    "IndexOutOfRange",
    "MissingField",
    "HasherError",
    "BackendError",
    "ProvingFailed",
    "ProvingTimeout",
]

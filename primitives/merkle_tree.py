"""Fixed-depth binary Merkle accumulator over note commitments.

Conventions shared with the circuits and the on-chain contract:

- level 0 holds 2**depth leaves, right-padded with zeros
- parent = H(left, right)
- a proof lists siblings from leaf to root; path_indices[i] is the side of
  the *current* node at level i (0 = left child, 1 = right child)

Storage is a level-indexed arena: one flat buffer plus a level-offset table.
Only the populated prefix of each level is stored. Any node past it roots an
all-zero subtree, so its value is zero_hashes[level], the same value the fully
padded tree holds there. This keeps depth 25 tractable while producing the
exact roots and paths of the padded construction.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from primitives.errors import IndexOutOfRange, InvalidDepth
from primitives.field import FieldElement, parse_felt, parse_int, to_field
from primitives.hasher import Hasher

# --- Constants ---

TREE_DEPTH = 25

MerkleRoot = FieldElement


# --- Data Classes ---

@dataclass
class MerkleProof:
    """Inclusion proof for one leaf.

    Attributes:
        path_elements: Sibling values from the leaf level up to just below the root
        path_indices: 0 if the node on the path is a left child at that level, 1 if right
    """
    path_elements: list[FieldElement] = field(default_factory=list)
    path_indices: list[int] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.path_elements)

    @property
    def leaf_index(self) -> int:
        """Leaf position encoded by the index bits (bit i = level i)."""
        return sum(bit << i for i, bit in enumerate(self.path_indices))

    def to_signals(self) -> dict[str, list[str]]:
        """Circuit signal form: decimal strings under pathElements / pathIndices."""
        return {
            "pathElements": [str(e) for e in self.path_elements],
            "pathIndices": [str(i) for i in self.path_indices],
        }

    @classmethod
    def from_signals(cls, path_elements: Sequence, path_indices: Sequence) -> "MerkleProof":
        return cls(
            path_elements=[parse_felt(e) for e in path_elements],
            path_indices=[parse_int(i) for i in path_indices],
        )


# --- Zero Subtrees ---

def zero_hashes(depth: int, hasher: Hasher) -> list[FieldElement]:
    """Roots of all-zero subtrees: z[0] = 0, z[l + 1] = H(z[l], z[l])."""
    if depth < 0:
        raise InvalidDepth(depth)
    zeros = [0]
    for _ in range(depth):
        zeros.append(hasher.hash2(zeros[-1], zeros[-1]))
    return zeros


def empty_root(depth: int, hasher: Hasher) -> FieldElement:
    """Root of a tree with no notes, the contract's initial root."""
    return zero_hashes(depth, hasher)[depth]


# --- Merkle Tree ---

class MerkleTree:
    """Batch-built binary Merkle tree of fixed depth.

    Usage:
        tree = MerkleTree(depth=25, hasher=hasher)
        tree.merkelize([c0, c1, c2])
        root = tree.get_root()
        proof = tree.get_proof(1)

    A tree must not be read while merkelize() is running; once built it is
    not modified again, so snapshots can be shared freely.
    """

    def __init__(self, depth: int = TREE_DEPTH, hasher: Optional[Hasher] = None) -> None:
        if depth < 0:
            raise InvalidDepth(depth)
        if hasher is None:
            raise ValueError("MerkleTree requires a hasher")

        self.depth = depth
        self.hasher = hasher
        self.zeros: list[FieldElement] = zero_hashes(depth, hasher)

        # counts[l] populated nodes at level l; offsets[l] start of level l in nodes
        self.counts: list[int] = [0] * (depth + 1)
        self.offsets: list[int] = [0] * (depth + 1)
        self.nodes: np.ndarray = np.empty(0, dtype=object)

    @property
    def capacity(self) -> int:
        return 1 << self.depth

    @property
    def leaf_count(self) -> int:
        return self.counts[0]

    # --- Core Operations ---

    def merkelize(self, leaves: Sequence[int]) -> MerkleRoot:
        """Build the tree from an ordered list of leaf commitments.

        Args:
            leaves: Leaf values; reduced into the field and zero-padded to 2**depth

        Returns:
            The tree root

        Raises:
            InvalidDepth: If there are more than 2**depth leaves
        """
        n_leaves = len(leaves)
        if n_leaves > self.capacity:
            raise InvalidDepth(self.depth, n_leaves)

        counts = [n_leaves]
        for _ in range(self.depth):
            counts.append((counts[-1] + 1) // 2)
        offsets = [0] * (self.depth + 1)
        for level in range(1, self.depth + 1):
            offsets[level] = offsets[level - 1] + counts[level - 1]

        self.counts = counts
        self.offsets = offsets
        self.nodes = np.empty(offsets[-1] + counts[-1], dtype=object)
        self.nodes[:n_leaves] = np.array([to_field(leaf) for leaf in leaves], dtype=object)

        for level in range(self.depth):
            pending = counts[level]
            if pending == 0:
                break
            start = offsets[level]
            pairs = []
            for i in range(0, pending, 2):
                left = self.nodes[start + i]
                right = self.nodes[start + i + 1] if i + 1 < pending else self.zeros[level]
                pairs.append((left, right))
            parents = self.hasher.hash_pairs(pairs)
            parent_start = offsets[level + 1]
            self.nodes[parent_start:parent_start + len(parents)] = np.array(parents, dtype=object)

        return self.get_root()

    def get_root(self) -> MerkleRoot:
        """Return the Merkle root (the empty root if there are no leaves)."""
        return self.node(self.depth, 0)

    def node(self, level: int, index: int) -> FieldElement:
        """Value at (level, index) of the zero-padded tree."""
        if level < 0 or level > self.depth:
            raise InvalidDepth(level)
        width = 1 << (self.depth - level)
        if index < 0 or index >= width:
            raise IndexOutOfRange(index, self.depth - level)
        if index < self.counts[level]:
            return self.nodes[self.offsets[level] + index]
        return self.zeros[level]

    def level(self, level: int) -> list[FieldElement]:
        """Materialize one full level (2**(depth - level) entries).

        Only practical for small depths or upper levels.
        """
        if level < 0 or level > self.depth:
            raise InvalidDepth(level)
        width = 1 << (self.depth - level)
        start = self.offsets[level]
        stored = [int(v) for v in self.nodes[start:start + self.counts[level]]]
        return stored + [self.zeros[level]] * (width - len(stored))

    def get_proof(self, leaf_index: int) -> MerkleProof:
        """Generate the inclusion proof for a leaf slot.

        Any slot in [0, 2**depth) has a proof, including empty ones.

        Raises:
            IndexOutOfRange: If leaf_index is outside the tree
        """
        if leaf_index < 0 or leaf_index >= self.capacity:
            raise IndexOutOfRange(leaf_index, self.depth)

        proof = MerkleProof()
        idx = leaf_index
        for level in range(self.depth):
            proof.path_elements.append(self.node(level, idx ^ 1))
            proof.path_indices.append(idx % 2)
            idx //= 2
        return proof

    def find_leaf_index(self, commitment: int) -> Optional[int]:
        """Position of the first populated leaf equal to commitment, if any."""
        leaves = self.nodes[:self.counts[0]]
        matches = np.flatnonzero(leaves == to_field(commitment))
        if len(matches) == 0:
            return None
        return int(matches[0])

    def verify_proof(self, leaf: int, proof: MerkleProof) -> bool:
        """Check a proof against this tree's root."""
        return verify_inclusion(self.hasher, leaf, proof, self.get_root())


# --- Functional Interface ---

def build(leaves: Sequence[int], depth: int, hasher: Hasher) -> tuple[MerkleRoot, MerkleTree]:
    """Build a tree and return (root, tree)."""
    tree = MerkleTree(depth, hasher)
    root = tree.merkelize(leaves)
    return root, tree


def prove_inclusion(tree: MerkleTree, leaf_index: int, depth: int) -> MerkleProof:
    """Inclusion proof for leaf_index; depth must match the tree it came from."""
    if depth != tree.depth:
        raise InvalidDepth(depth)
    return tree.get_proof(leaf_index)


def compute_root(hasher: Hasher, leaf: int, proof: MerkleProof) -> FieldElement:
    """Replay the hash chain from a leaf up through its path."""
    if len(proof.path_elements) != len(proof.path_indices):
        raise ValueError(
            f"Length mismatch: {len(proof.path_elements)} elements but {len(proof.path_indices)} indices"
        )
    current = to_field(leaf)
    for sibling, bit in zip(proof.path_elements, proof.path_indices):
        if bit == 0:
            current = hasher.hash2(current, sibling)
        elif bit == 1:
            current = hasher.hash2(sibling, current)
        else:
            raise ValueError(f"Invalid path index {bit}. Must be 0 or 1.")
    return current


def verify_inclusion(hasher: Hasher, leaf: int, proof: MerkleProof, root: int) -> bool:
    """True if replaying the path from leaf reproduces root exactly."""
    return compute_root(hasher, leaf, proof) == to_field(root)

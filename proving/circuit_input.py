"""Circuit inputs: one typed record per circuit kind.

Each record knows the named signals its circuit declares and renders them as
the decimal strings snarkjs reads from input.json. Signed values (ticks,
deltas) are written as signed decimals; circom maps them into the field.

No range or AMM-consistency checks happen here. A swap whose prices, ticks
and deltas disagree is rejected by the circuit, and surfaces as ProvingFailed.
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Mapping, Optional, Union

from primitives.commitment import Note, derive_position_commitment
from primitives.errors import MissingField
from primitives.field import parse_int
from primitives.hasher import Hasher
from primitives.merkle_tree import MerkleProof, MerkleTree
from proving.config import CircuitKind

PATH_SIGNALS = ("pathElements", "pathIndices")

Signals = dict[str, Union[str, list[str]]]


# --- Input Records ---

@dataclass(frozen=True)
class CircuitInput:
    """Base for the per-circuit records.

    SIGNALS lists the circuit's input names in the order they are written;
    pathElements and pathIndices come from the merkle_proof attribute, every
    other name is the attribute of the same name.
    """
    KIND: ClassVar[CircuitKind]
    SIGNALS: ClassVar[tuple[str, ...]]

    def to_signals(self) -> Signals:
        path = self.merkle_proof.to_signals()
        signals: Signals = {}
        for name in self.SIGNALS:
            if name in PATH_SIGNALS:
                signals[name] = path[name]
            else:
                signals[name] = str(int(getattr(self, name)))
        return signals

    @classmethod
    def from_signals(cls, signals: Mapping[str, Any]) -> "CircuitInput":
        """Rebuild a record from a signal mapping (e.g. a loaded input.json).

        Raises:
            MissingField: If any required signal is absent
        """
        missing = [name for name in cls.SIGNALS if name not in signals]
        if missing:
            raise MissingField(cls.KIND.value, missing)
        kwargs: dict[str, Any] = {
            "merkle_proof": MerkleProof.from_signals(signals["pathElements"], signals["pathIndices"]),
        }
        for f in fields(cls):
            if f.name != "merkle_proof":
                kwargs[f.name] = parse_int(signals[f.name])
        return cls(**kwargs)


@dataclass(frozen=True)
class MembershipInput(CircuitInput):
    """Proves a note commitment is a leaf under root."""
    KIND: ClassVar[CircuitKind] = CircuitKind.MEMBERSHIP
    SIGNALS: ClassVar[tuple[str, ...]] = (
        "root", "commitment", "secret", "nullifier", "amount", "pathElements", "pathIndices",
    )

    root: int
    commitment: int
    secret: int
    nullifier: int
    amount: int
    merkle_proof: MerkleProof


@dataclass(frozen=True)
class WithdrawInput(CircuitInput):
    """Spends a note to a public recipient, revealing its nullifier."""
    KIND: ClassVar[CircuitKind] = CircuitKind.WITHDRAW
    SIGNALS: ClassVar[tuple[str, ...]] = (
        "nullifier", "root", "recipient", "amount", "secret", "pathElements", "pathIndices",
    )

    nullifier: int
    root: int
    recipient: int
    amount: int
    secret: int
    merkle_proof: MerkleProof


@dataclass(frozen=True)
class LpInput(CircuitInput):
    """Moves part of a note into an LP position and re-commits the change."""
    KIND: ClassVar[CircuitKind] = CircuitKind.LP
    SIGNALS: ClassVar[tuple[str, ...]] = (
        "nullifier", "root", "tick_lower", "tick_upper", "liquidity", "new_commitment",
        "position_commitment", "secret_in", "amount_in", "secret_out", "nullifier_out",
        "amount_out", "pathElements", "pathIndices",
    )

    nullifier: int
    root: int
    tick_lower: int
    tick_upper: int
    liquidity: int
    new_commitment: int
    position_commitment: int
    secret_in: int
    amount_in: int
    secret_out: int
    nullifier_out: int
    amount_out: int
    merkle_proof: MerkleProof


@dataclass(frozen=True)
class SwapInput(CircuitInput):
    """Swaps against the pool and re-commits the output note.

    new_tick and the deltas are signed; sqrt prices are Q128 fixed point.
    """
    KIND: ClassVar[CircuitKind] = CircuitKind.SWAP
    SIGNALS: ClassVar[tuple[str, ...]] = (
        "nullifier", "root", "new_commitment", "amount_specified", "zero_for_one",
        "amount0_delta", "amount1_delta", "new_sqrt_price_x128", "new_tick", "secret_in",
        "amount_in", "secret_out", "nullifier_out", "amount_out", "pathElements",
        "pathIndices", "sqrt_price_old", "liquidity",
    )

    nullifier: int
    root: int
    new_commitment: int
    amount_specified: int
    zero_for_one: int
    amount0_delta: int
    amount1_delta: int
    new_sqrt_price_x128: int
    new_tick: int
    secret_in: int
    amount_in: int
    secret_out: int
    nullifier_out: int
    amount_out: int
    merkle_proof: MerkleProof
    sqrt_price_old: int
    liquidity: int


INPUT_TYPES: dict[CircuitKind, type[CircuitInput]] = {
    CircuitKind.MEMBERSHIP: MembershipInput,
    CircuitKind.WITHDRAW: WithdrawInput,
    CircuitKind.LP: LpInput,
    CircuitKind.SWAP: SwapInput,
}


def input_from_signals(kind: CircuitKind | str, signals: Mapping[str, Any]) -> CircuitInput:
    """Typed input for a dynamically loaded signal mapping.

    Raises:
        UnknownCircuit: If kind is not recognized
        MissingField: If a required signal is absent
    """
    return INPUT_TYPES[CircuitKind.parse(kind)].from_signals(signals)


def to_signals(kind: CircuitKind | str, circuit_input: CircuitInput | Mapping[str, Any]) -> Signals:
    """Signal mapping for either a typed record or a raw mapping of the given kind."""
    if isinstance(circuit_input, CircuitInput):
        if circuit_input.KIND != CircuitKind.parse(kind):
            raise ValueError(f"{circuit_input.KIND.value} input passed for circuit '{CircuitKind.parse(kind).value}'")
        return circuit_input.to_signals()
    return input_from_signals(kind, circuit_input).to_signals()


# --- Domain Assembly ---

@dataclass(frozen=True)
class SwapParams:
    """Pool-side values of a swap, as the swap circuit expects them."""
    amount_specified: int
    zero_for_one: int
    amount0_delta: int
    amount1_delta: int
    sqrt_price_old: int
    new_sqrt_price_x128: int
    new_tick: int
    liquidity: int


def _locate(hasher: Hasher, tree: MerkleTree, note: Note, leaf_index: Optional[int]) -> tuple[int, int]:
    commitment = note.commitment(hasher)
    if leaf_index is None:
        leaf_index = tree.find_leaf_index(commitment)
        if leaf_index is None:
            raise ValueError(f"Commitment {commitment} is not a leaf of the tree")
    return commitment, leaf_index


def assemble_membership(hasher: Hasher, note: Note, tree: MerkleTree, leaf_index: Optional[int] = None) -> MembershipInput:
    """Membership input for a note stored in tree (found by commitment if no index is given)."""
    commitment, leaf_index = _locate(hasher, tree, note, leaf_index)
    return MembershipInput(
        root=tree.get_root(),
        commitment=commitment,
        secret=note.secret,
        nullifier=note.nullifier,
        amount=note.amount,
        merkle_proof=tree.get_proof(leaf_index),
    )


def assemble_withdraw(
    hasher: Hasher, note: Note, recipient: int, tree: MerkleTree, leaf_index: Optional[int] = None
) -> WithdrawInput:
    _, leaf_index = _locate(hasher, tree, note, leaf_index)
    return WithdrawInput(
        nullifier=note.nullifier,
        root=tree.get_root(),
        recipient=recipient,
        amount=note.amount,
        secret=note.secret,
        merkle_proof=tree.get_proof(leaf_index),
    )


def assemble_lp(
    hasher: Hasher,
    note_in: Note,
    note_out: Note,
    tick_lower: int,
    tick_upper: int,
    liquidity: int,
    tree: MerkleTree,
    leaf_index: Optional[int] = None,
) -> LpInput:
    """LP input: spends note_in, opens a position keyed by note_in's secret, commits note_out."""
    _, leaf_index = _locate(hasher, tree, note_in, leaf_index)
    return LpInput(
        nullifier=note_in.nullifier,
        root=tree.get_root(),
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        liquidity=liquidity,
        new_commitment=note_out.commitment(hasher),
        position_commitment=derive_position_commitment(hasher, note_in.secret, tick_lower, tick_upper),
        secret_in=note_in.secret,
        amount_in=note_in.amount,
        secret_out=note_out.secret,
        nullifier_out=note_out.nullifier,
        amount_out=note_out.amount,
        merkle_proof=tree.get_proof(leaf_index),
    )


def assemble_swap(
    hasher: Hasher,
    note_in: Note,
    note_out: Note,
    params: SwapParams,
    tree: MerkleTree,
    leaf_index: Optional[int] = None,
) -> SwapInput:
    _, leaf_index = _locate(hasher, tree, note_in, leaf_index)
    return SwapInput(
        nullifier=note_in.nullifier,
        root=tree.get_root(),
        new_commitment=note_out.commitment(hasher),
        amount_specified=params.amount_specified,
        zero_for_one=params.zero_for_one,
        amount0_delta=params.amount0_delta,
        amount1_delta=params.amount1_delta,
        new_sqrt_price_x128=params.new_sqrt_price_x128,
        new_tick=params.new_tick,
        secret_in=note_in.secret,
        amount_in=note_in.amount,
        secret_out=note_out.secret,
        nullifier_out=note_out.nullifier,
        amount_out=note_out.amount,
        merkle_proof=tree.get_proof(leaf_index),
        sqrt_price_old=params.sqrt_price_old,
        liquidity=params.liquidity,
    )

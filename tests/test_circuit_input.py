"""Unit tests for circuit input records and assembly."""

import pytest

from primitives.commitment import Note, derive_position_commitment
from primitives.errors import MissingField, UnknownCircuit
from primitives.merkle_tree import build, verify_inclusion
from proving.circuit_input import (
    LpInput,
    MembershipInput,
    SwapInput,
    SwapParams,
    WithdrawInput,
    assemble_lp,
    assemble_membership,
    assemble_swap,
    assemble_withdraw,
    input_from_signals,
    to_signals,
)
from proving.config import CircuitKind

NOTE_IN = Note(secret=123, nullifier=456, amount=1_000_000)
NOTE_OUT = Note(secret=789, nullifier=101112, amount=500_000)
DEPTH = 4

SWAP_PARAMS = SwapParams(
    amount_specified=100_000,
    zero_for_one=1,
    amount0_delta=100_000,
    amount1_delta=99_000,
    sqrt_price_old=1 << 128,
    new_sqrt_price_x128=340000000000000000000000000000000000000,
    new_tick=-1,
    liquidity=1_000_000,
)


@pytest.fixture
def tree(hasher):
    _, tree = build([111, NOTE_IN.commitment(hasher), 333], DEPTH, hasher)
    return tree


class TestMembership:
    """Tests for membership input assembly."""

    def test_fields(self, hasher, tree) -> None:
        inp = assemble_membership(hasher, NOTE_IN, tree)
        assert inp.root == tree.get_root()
        assert inp.commitment == NOTE_IN.commitment(hasher)
        assert (inp.secret, inp.nullifier, inp.amount) == (123, 456, 1_000_000)
        assert inp.merkle_proof.leaf_index == 1
        assert verify_inclusion(hasher, inp.commitment, inp.merkle_proof, inp.root)

    def test_signal_order(self, hasher, tree) -> None:
        signals = assemble_membership(hasher, NOTE_IN, tree).to_signals()
        assert list(signals) == [
            "root", "commitment", "secret", "nullifier", "amount", "pathElements", "pathIndices",
        ]
        assert signals["secret"] == "123"
        assert len(signals["pathElements"]) == DEPTH
        assert signals["pathIndices"] == ["1", "0", "0", "0"]

    def test_explicit_index(self, hasher, tree) -> None:
        inp = assemble_membership(hasher, NOTE_IN, tree, leaf_index=1)
        assert inp.merkle_proof.leaf_index == 1

    def test_note_not_in_tree(self, hasher, tree) -> None:
        with pytest.raises(ValueError):
            assemble_membership(hasher, Note(1, 2, 3), tree)


class TestWithdraw:
    """Tests for withdraw input assembly."""

    def test_fields(self, hasher, tree) -> None:
        inp = assemble_withdraw(hasher, NOTE_IN, 0x1234567890ABCDEF, tree)
        assert inp.nullifier == 456
        assert inp.recipient == 0x1234567890ABCDEF
        assert inp.root == tree.get_root()

    def test_signals(self, hasher, tree) -> None:
        signals = assemble_withdraw(hasher, NOTE_IN, 0x1234567890ABCDEF, tree).to_signals()
        assert list(signals)[:5] == ["nullifier", "root", "recipient", "amount", "secret"]
        assert signals["recipient"] == str(0x1234567890ABCDEF)


class TestLp:
    """Tests for LP input assembly."""

    def test_fields(self, hasher, tree) -> None:
        inp = assemble_lp(hasher, NOTE_IN, NOTE_OUT, -600, 600, 500_000, tree)
        assert inp.new_commitment == NOTE_OUT.commitment(hasher)
        assert inp.position_commitment == derive_position_commitment(hasher, 123, -600, 600)
        assert (inp.secret_in, inp.amount_in) == (123, 1_000_000)
        assert (inp.secret_out, inp.nullifier_out, inp.amount_out) == (789, 101112, 500_000)

    def test_signed_ticks_as_decimals(self, hasher, tree) -> None:
        signals = assemble_lp(hasher, NOTE_IN, NOTE_OUT, -600, 600, 500_000, tree).to_signals()
        assert signals["tick_lower"] == "-600"
        assert signals["tick_upper"] == "600"
        assert len(signals) == 14


class TestSwap:
    """Tests for swap input assembly."""

    def test_fields(self, hasher, tree) -> None:
        inp = assemble_swap(hasher, NOTE_IN, NOTE_OUT, SWAP_PARAMS, tree)
        assert inp.new_tick == -1
        assert inp.sqrt_price_old == 1 << 128
        assert inp.new_commitment == NOTE_OUT.commitment(hasher)

    def test_signal_order(self, hasher, tree) -> None:
        signals = assemble_swap(hasher, NOTE_IN, NOTE_OUT, SWAP_PARAMS, tree).to_signals()
        assert list(signals) == list(SwapInput.SIGNALS)
        assert list(signals)[-2:] == ["sqrt_price_old", "liquidity"]
        assert signals["new_tick"] == "-1"
        assert signals["sqrt_price_old"] == "340282366920938463463374607431768211456"

    def test_inconsistent_pool_values_not_rejected(self, hasher, tree) -> None:
        """Pool math is the circuit's job; assembly accepts any values."""
        params = SwapParams(1, 0, -5, 5, 1, 2, 887272, 0)
        inp = assemble_swap(hasher, NOTE_IN, NOTE_OUT, params, tree)
        assert inp.to_signals()["amount0_delta"] == "-5"


class TestSignalMapping:
    """Tests for dynamically loaded signal mappings."""

    def test_round_trip(self, hasher, tree) -> None:
        inp = assemble_lp(hasher, NOTE_IN, NOTE_OUT, -600, 600, 500_000, tree)
        rebuilt = input_from_signals("lp", inp.to_signals())
        assert isinstance(rebuilt, LpInput)
        assert rebuilt == inp

    def test_hex_values_accepted(self, hasher, tree) -> None:
        signals = assemble_withdraw(hasher, NOTE_IN, 1, tree).to_signals()
        signals["recipient"] = "0x1234567890abcdef"
        inp = input_from_signals(CircuitKind.WITHDRAW, signals)
        assert isinstance(inp, WithdrawInput)
        assert inp.recipient == 0x1234567890ABCDEF

    def test_missing_fields_named(self, hasher, tree) -> None:
        signals = assemble_membership(hasher, NOTE_IN, tree).to_signals()
        del signals["secret"]
        del signals["pathIndices"]
        with pytest.raises(MissingField) as exc_info:
            input_from_signals("membership", signals)
        assert exc_info.value.names == ["secret", "pathIndices"]
        assert exc_info.value.kind == "membership"

    def test_unknown_kind(self) -> None:
        with pytest.raises(UnknownCircuit):
            input_from_signals("transfer", {})

    def test_to_signals_accepts_mapping(self, hasher, tree) -> None:
        inp = assemble_membership(hasher, NOTE_IN, tree)
        assert to_signals("membership", dict(inp.to_signals())) == inp.to_signals()

    def test_to_signals_kind_mismatch(self, hasher, tree) -> None:
        inp = assemble_membership(hasher, NOTE_IN, tree)
        with pytest.raises(ValueError):
            to_signals("withdraw", inp)

    def test_kinds(self) -> None:
        assert MembershipInput.KIND is CircuitKind.MEMBERSHIP
        assert WithdrawInput.KIND is CircuitKind.WITHDRAW
        assert LpInput.KIND is CircuitKind.LP
        assert SwapInput.KIND is CircuitKind.SWAP

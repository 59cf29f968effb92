"""Tests for calldata flattening and fixture export."""

import dataclasses
import json
from datetime import datetime, timezone

import pytest

from primitives.field import STARK_PRIME
from proving.export import (
    FIXTURES_CAIRO,
    FIXTURES_JSON,
    build_liquidity_calldata,
    build_swap_calldata,
    build_withdraw_calldata,
    felt_array,
    render_fixture_constants,
    render_source_constants,
    to_chain_calldata,
    to_fixture,
    u256_split,
    write_fixture_files,
    write_proof_file,
)
from proving.proof import proof_from_json, proof_to_json, result_from_json
from tests.conftest import make_result

GENERATED_AT = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class _StubInput:
    """Circuit input stand-in; fixtures only need its signals."""

    def to_signals(self):
        return {"root": "1"}


class TestChainCalldata:
    """Tests for the verifier calldata order."""

    def test_order(self) -> None:
        result = make_result([100, 200, 300], seed=10)
        calldata = to_chain_calldata(result.proof, result.public_signals)
        assert calldata == [11, 12, 13, 14, 15, 16, 17, 18, 100, 200, 300]

    @pytest.mark.parametrize("n_public", [0, 1, 5])
    def test_length(self, n_public) -> None:
        result = make_result(list(range(n_public)))
        assert len(to_chain_calldata(result.proof, result.public_signals)) == 8 + n_public

    def test_projective_coordinate_dropped(self) -> None:
        """The z coordinates of pi_a, pi_b and pi_c never reach the calldata."""
        result = make_result([], seed=10)
        calldata = to_chain_calldata(result.proof, [])
        assert 0 not in calldata and 1 not in calldata


class TestConstants:
    """Tests for felt252 constant rendering."""

    def test_fixture_constants(self) -> None:
        fixture = to_fixture("membership", _StubInput(), make_result([42, 43], seed=0))
        text = render_fixture_constants(fixture)
        assert "const MEMBERSHIP_PI_A_X: felt252 = 1;" in text
        assert "const MEMBERSHIP_PI_B_Y2: felt252 = 6;" in text
        assert "const MEMBERSHIP_PI_C_Y: felt252 = 8;" in text
        assert "const MEMBERSHIP_PUBLIC_0: felt252 = 42;" in text
        assert "const MEMBERSHIP_PUBLIC_1: felt252 = 43;" in text

    def test_fixture_is_frozen(self) -> None:
        """A fixture is a snapshot; its fields cannot be reassigned."""
        fixture = to_fixture("lp", _StubInput(), make_result([1]), verified=True)
        with pytest.raises(dataclasses.FrozenInstanceError):
            fixture.verified = False
        assert fixture.verified is True

    def test_source_is_deterministic(self) -> None:
        fixtures = [
            to_fixture("membership", _StubInput(), make_result([1])),
            to_fixture("lp", _StubInput(), make_result([2])),
        ]
        a = render_source_constants(fixtures, GENERATED_AT)
        b = render_source_constants(fixtures, GENERATED_AT)
        assert a == b
        assert "// Generated at: 2025-01-02T03:04:05+00:00" in a
        assert a.index("MEMBERSHIP FIXTURE") < a.index("LP FIXTURE")

    def test_names_do_not_collide(self) -> None:
        fixtures = [
            to_fixture("membership", _StubInput(), make_result([1])),
            to_fixture("withdraw", _StubInput(), make_result([1])),
        ]
        text = render_source_constants(fixtures, GENERATED_AT)
        names = [line.split(":")[0] for line in text.splitlines() if line.startswith("const ")]
        assert len(names) == len(set(names))


class TestFixtureFiles:
    """Tests for writing fixture and proof files."""

    def test_write_fixture_files(self, tmp_path) -> None:
        fixture = to_fixture("withdraw", _StubInput(), make_result([5, 6]), verified=True)
        json_path, cairo_path = write_fixture_files([fixture], tmp_path / "fixtures", GENERATED_AT)
        assert json_path.name == FIXTURES_JSON
        assert cairo_path.name == FIXTURES_CAIRO

        with open(json_path) as f:
            data = json.load(f)
        assert data[0]["name"] == "withdraw"
        assert data[0]["input"] == {"root": "1"}
        assert data[0]["publicSignals"] == ["5", "6"]
        assert data[0]["verified"] is True
        assert len(data[0]["calldata"]) == 10
        assert result_from_json(data[0]) == fixture.result
        assert "WITHDRAW_PUBLIC_1" in cairo_path.read_text()

    def test_write_proof_file(self, tmp_path) -> None:
        result = make_result([9])
        path = write_proof_file("lp", result, tmp_path, GENERATED_AT)
        assert path.name == f"lp_proof_{int(GENERATED_AT.timestamp() * 1000)}.json"
        with open(path) as f:
            record = json.load(f)
        assert record["circuit"] == "lp"
        assert record["calldata"][-1] == "9"
        assert record["timestamp"] == GENERATED_AT.isoformat()


class TestProofJson:
    """Tests for snarkjs proof JSON handling."""

    def test_round_trip(self) -> None:
        proof = make_result([]).proof
        assert proof_from_json(proof_to_json(proof)) == proof

    def test_missing_component(self) -> None:
        data = proof_to_json(make_result([]).proof)
        del data["pi_c"]
        with pytest.raises(ValueError):
            proof_from_json(data)

    def test_short_component(self) -> None:
        data = proof_to_json(make_result([]).proof)
        data["pi_a"] = ["1"]
        with pytest.raises(ValueError):
            proof_from_json(data)


class TestStarknetCalldata:
    """Tests for contract entrypoint calldata."""

    def test_felt_array(self) -> None:
        assert felt_array(["1", "0x10", 3]) == [3, 1, 16, 3]
        assert felt_array([]) == [0]

    def test_felt_array_reduces_wide_scalars(self) -> None:
        wide = STARK_PRIME + 9
        assert felt_array([str(wide), STARK_PRIME - 1]) == [2, 9, STARK_PRIME - 1]

    def test_u256_split(self) -> None:
        assert u256_split(1 << 128) == (0, 1)
        assert u256_split((1 << 128) + 5) == (5, 1)
        with pytest.raises(ValueError):
            u256_split(-1)
        with pytest.raises(ValueError):
            u256_split(1 << 256)

    def test_withdraw(self) -> None:
        calldata = build_withdraw_calldata(["1", "2"], ["3"], "0xabc", "0x1234567890abcdef", 1_000_000)
        assert calldata == [2, 1, 2, 1, 3, 0xABC, 0x1234567890ABCDEF, 1_000_000]

    def test_swap(self) -> None:
        calldata = build_swap_calldata(["1"], ["2"], True, 100_000, 1 << 128, "77")
        assert calldata == [1, 1, 1, 2, 1, 100_000, 0, 1, 77]

    def test_liquidity_negative_tick(self) -> None:
        calldata = build_liquidity_calldata([], [], -600, 600, 500_000, 5)
        assert calldata == [0, 0, STARK_PRIME - 600, 600, 500_000, 5]

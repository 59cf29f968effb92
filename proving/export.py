"""Calldata and fixture export.

The flattened proof order is a contract with the on-chain verifier:

    pi_a[0], pi_a[1],
    pi_b[0][0], pi_b[0][1], pi_b[1][0], pi_b[1][1],
    pi_c[0], pi_c[1],
    public_signals...

Fixtures snapshot already computed proofs for downstream test suites, as a
JSON file and as Cairo felt252 constants.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from primitives.field import parse_int, to_stark_felt
from proving.circuit_input import CircuitInput
from proving.proof import Groth16Proof, ProofResult, result_to_json

# Constant names for the eight proof scalars, in calldata order.
PROOF_CONSTANT_NAMES = ("PI_A_X", "PI_A_Y", "PI_B_X1", "PI_B_X2", "PI_B_Y1", "PI_B_Y2", "PI_C_X", "PI_C_Y")

FIXTURES_JSON = "test_fixtures.json"
FIXTURES_CAIRO = "test_fixtures.cairo"


# --- Verifier Calldata ---

def to_chain_calldata(proof: Groth16Proof, public_signals: Sequence[int]) -> list[int]:
    """Flatten a proof and its public signals: 8 + len(public_signals) scalars."""
    return [
        proof.pi_a[0],
        proof.pi_a[1],
        proof.pi_b[0][0],
        proof.pi_b[0][1],
        proof.pi_b[1][0],
        proof.pi_b[1][1],
        proof.pi_c[0],
        proof.pi_c[1],
        *public_signals,
    ]


# --- Fixtures ---

@dataclass(frozen=True)
class Fixture:
    """Immutable snapshot of one proved circuit input."""
    name: str
    circuit_input: CircuitInput
    result: ProofResult
    calldata: list[int] = field(default_factory=list)
    verified: Optional[bool] = None

    def to_json(self) -> dict[str, Any]:
        j: dict[str, Any] = {
            "name": self.name,
            "input": self.circuit_input.to_signals(),
            **result_to_json(self.result),
            "calldata": [str(v) for v in self.calldata],
        }
        if self.verified is not None:
            j["verified"] = self.verified
        j["cairoFormat"] = render_fixture_constants(self)
        return j


def to_fixture(name: str, circuit_input: CircuitInput, result: ProofResult, verified: Optional[bool] = None) -> Fixture:
    """Assemble a fixture from an existing proof; no proving happens here."""
    return Fixture(
        name=name,
        circuit_input=circuit_input,
        result=result,
        calldata=to_chain_calldata(result.proof, result.public_signals),
        verified=verified,
    )


def render_fixture_constants(fixture: Fixture) -> str:
    """felt252 constants for one fixture, named <NAME>_PI_A_X ... <NAME>_PUBLIC_<i>."""
    prefix = fixture.name.upper()
    calldata = to_chain_calldata(fixture.result.proof, fixture.result.public_signals)
    lines = ["// Proof components (pi_a, pi_b, pi_c)"]
    for name, value in zip(PROOF_CONSTANT_NAMES, calldata[:8]):
        lines.append(f"const {prefix}_{name}: felt252 = {value};")
    lines.append("")
    lines.append("// Public signals")
    for i, value in enumerate(calldata[8:]):
        lines.append(f"const {prefix}_PUBLIC_{i}: felt252 = {value};")
    return "\n".join(lines)


def render_source_constants(fixtures: Sequence[Fixture], generated_at: Optional[datetime] = None) -> str:
    """Cairo source with every fixture's constants.

    Output depends only on the fixtures and generated_at (defaults to now, UTC).
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    lines = [
        "// Auto-generated test fixtures for E2E proof verification",
        "// Generated by: gen_fixtures.py",
        f"// Generated at: {generated_at.isoformat()}",
        "",
    ]
    for fixture in fixtures:
        lines.append(f"// ==================== {fixture.name.upper()} FIXTURE ====================")
        lines.append(render_fixture_constants(fixture))
        lines.append("")
    return "\n".join(lines)


def fixtures_to_json(fixtures: Sequence[Fixture]) -> list[dict[str, Any]]:
    return [f.to_json() for f in fixtures]


def write_fixture_files(
    fixtures: Sequence[Fixture], out_dir: str | Path, generated_at: Optional[datetime] = None
) -> tuple[Path, Path]:
    """Write test_fixtures.json and test_fixtures.cairo into out_dir."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / FIXTURES_JSON
    cairo_path = out_dir / FIXTURES_CAIRO
    with open(json_path, "w") as f:
        json.dump(fixtures_to_json(fixtures), f, indent=2)
    with open(cairo_path, "w") as f:
        f.write(render_source_constants(fixtures, generated_at))
    return json_path, cairo_path


# --- Single Proof Records ---

def proof_record(kind: str, result: ProofResult, timestamp: Optional[datetime] = None) -> dict[str, Any]:
    """JSON record for one generated proof, including its flattened calldata."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    return {
        "circuit": kind,
        **result_to_json(result),
        "calldata": [str(v) for v in to_chain_calldata(result.proof, result.public_signals)],
        "timestamp": timestamp.isoformat(),
    }


def write_proof_file(kind: str, result: ProofResult, out_dir: str | Path, timestamp: Optional[datetime] = None) -> Path:
    """Write <kind>_proof_<millis>.json into out_dir and return its path."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{kind}_proof_{int(timestamp.timestamp() * 1000)}.json"
    with open(path, "w") as f:
        json.dump(proof_record(kind, result, timestamp), f, indent=2)
    return path


# --- Starknet Entrypoint Calldata ---

def felt_array(values: Sequence[int | str]) -> list[int]:
    """Cairo Array<felt252> encoding: length followed by the elements.

    Elements are reduced modulo the Starknet prime; proof scalars at or above
    it wrap silently.
    """
    return [len(values), *(to_stark_felt(parse_int(v)) for v in values)]


def u256_split(value: int) -> tuple[int, int]:
    """Cairo u256 as (low, high) 128-bit limbs."""
    if value < 0 or value >= 1 << 256:
        raise ValueError(f"u256 out of range: {value}")
    return value & ((1 << 128) - 1), value >> 128


def build_withdraw_calldata(
    proof: Sequence[int | str], public_inputs: Sequence[int | str], token: int | str, recipient: int | str, amount: int
) -> list[int]:
    """private_withdraw(proof, public_inputs, token, recipient, amount: u128)."""
    return [
        *felt_array(proof),
        *felt_array(public_inputs),
        to_stark_felt(parse_int(token)),
        to_stark_felt(parse_int(recipient)),
        int(amount),
    ]


def build_swap_calldata(
    proof: Sequence[int | str],
    public_inputs: Sequence[int | str],
    zero_for_one: bool,
    amount_specified: int,
    sqrt_price_limit_x128: int,
    new_commitment: int | str,
) -> list[int]:
    """private_swap(proof, public_inputs, zero_for_one, amount_specified: u128,
    sqrt_price_limit_x128: u256, new_commitment)."""
    low, high = u256_split(sqrt_price_limit_x128)
    return [
        *felt_array(proof),
        *felt_array(public_inputs),
        1 if zero_for_one else 0,
        int(amount_specified),
        low,
        high,
        to_stark_felt(parse_int(new_commitment)),
    ]


def build_liquidity_calldata(
    proof: Sequence[int | str],
    public_inputs: Sequence[int | str],
    tick_lower: int,
    tick_upper: int,
    liquidity: int,
    new_commitment: int | str,
) -> list[int]:
    """private_mint_liquidity / private_burn_liquidity (same layout).

    Ticks are i32 and encoded as felts, so -v becomes P - v.
    """
    return [
        *felt_array(proof),
        *felt_array(public_inputs),
        to_stark_felt(tick_lower),
        to_stark_felt(tick_upper),
        int(liquidity),
        to_stark_felt(parse_int(new_commitment)),
    ]

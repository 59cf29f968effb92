"""Groth16 proof data structures and snarkjs JSON serialization."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from primitives.field import FieldElement

# --- Type Aliases ---
G1Point = list[int]        # [x, y, z] projective, z == 1 for snarkjs output
G2Point = list[list[int]]  # [[x1, x2], [y1, y2], [z1, z2]]


# --- Proof Data Structures ---

@dataclass
class Groth16Proof:
    """Groth16 proof as emitted by snarkjs.

    Points keep the projective coordinate snarkjs writes, so a proof loaded
    from proof.json can be handed back to snarkjs unchanged.
    """
    pi_a: G1Point = field(default_factory=list)
    pi_b: G2Point = field(default_factory=list)
    pi_c: G1Point = field(default_factory=list)
    protocol: str = "groth16"
    curve: str = "bn128"


@dataclass
class ProofResult:
    """Proof plus the public signals it exposes, in circuit order."""
    proof: Groth16Proof = field(default_factory=Groth16Proof)
    public_signals: list[FieldElement] = field(default_factory=list)


# --- JSON Serialization ---

def proof_to_json(proof: Groth16Proof) -> dict[str, Any]:
    """snarkjs proof.json layout: decimal strings."""
    return {
        "pi_a": [str(v) for v in proof.pi_a],
        "pi_b": [[str(v) for v in pair] for pair in proof.pi_b],
        "pi_c": [str(v) for v in proof.pi_c],
        "protocol": proof.protocol,
        "curve": proof.curve,
    }


def proof_from_json(data: dict[str, Any]) -> Groth16Proof:
    """Parse a snarkjs proof.json object.

    Raises:
        ValueError: If a required component is missing or too short
    """
    for key, min_len in (("pi_a", 2), ("pi_b", 2), ("pi_c", 2)):
        if key not in data:
            raise ValueError(f"Proof JSON missing '{key}'")
        if len(data[key]) < min_len:
            raise ValueError(f"Proof component '{key}' has {len(data[key])} entries, expected >= {min_len}")
    if any(len(pair) < 2 for pair in data["pi_b"][:2]):
        raise ValueError("Proof component 'pi_b' rows must have 2 coordinates")
    return Groth16Proof(
        pi_a=[int(v) for v in data["pi_a"]],
        pi_b=[[int(v) for v in pair] for pair in data["pi_b"]],
        pi_c=[int(v) for v in data["pi_c"]],
        protocol=data.get("protocol", "groth16"),
        curve=data.get("curve", "bn128"),
    )


def signals_to_json(public_signals: list[int]) -> list[str]:
    return [str(s) for s in public_signals]


def signals_from_json(data: list[Any]) -> list[FieldElement]:
    return [int(s) for s in data]


def result_to_json(result: ProofResult) -> dict[str, Any]:
    return {
        "proof": proof_to_json(result.proof),
        "publicSignals": signals_to_json(result.public_signals),
    }


def result_from_json(data: dict[str, Any]) -> ProofResult:
    return ProofResult(
        proof=proof_from_json(data["proof"]),
        public_signals=signals_from_json(data["publicSignals"]),
    )


def load_proof_files(proof_path: str | Path, public_path: str | Path) -> ProofResult:
    """Load the proof.json / public.json pair snarkjs writes."""
    with open(proof_path) as f:
        proof = proof_from_json(json.load(f))
    with open(public_path) as f:
        public_signals = signals_from_json(json.load(f))
    return ProofResult(proof=proof, public_signals=public_signals)

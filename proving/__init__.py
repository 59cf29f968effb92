"""Proving - Circuit inputs, Groth16 orchestration, calldata and fixture export."""

from proving.backend import ProvingBackend, SnarkjsBackend
from proving.circuit_input import (
    CircuitInput,
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
from proving.config import ArtifactRegistry, CircuitArtifacts, CircuitKind, ProverConfig
from proving.export import (
    Fixture,
    build_liquidity_calldata,
    build_swap_calldata,
    build_withdraw_calldata,
    render_source_constants,
    to_chain_calldata,
    to_fixture,
    write_fixture_files,
    write_proof_file,
)
from proving.fixtures import FixtureBatch, build_reference_inputs, generate_fixtures
from proving.orchestrator import ProofOrchestrator, ProofRequest, ProofState
from proving.proof import Groth16Proof, ProofResult, load_proof_files

__all__ = [
    # Configuration
    "ArtifactRegistry",
    "CircuitArtifacts",
    "CircuitKind",
    "ProverConfig",
    # Circuit inputs
    "CircuitInput",
    "LpInput",
    "MembershipInput",
    "SwapInput",
    "SwapParams",
    "WithdrawInput",
    "assemble_lp",
    "assemble_membership",
    "assemble_swap",
    "assemble_withdraw",
    "input_from_signals",
    "to_signals",
    # Proofs
    "Groth16Proof",
    "ProofResult",
    "load_proof_files",
    # Orchestration
    "ProofOrchestrator",
    "ProofRequest",
    "ProofState",
    "ProvingBackend",
    "SnarkjsBackend",
    # Export
    "Fixture",
    "build_liquidity_calldata",
    "build_swap_calldata",
    "build_withdraw_calldata",
    "render_source_constants",
    "to_chain_calldata",
    "to_fixture",
    "write_fixture_files",
    "write_proof_file",
    # Fixture batch
    "FixtureBatch",
    "build_reference_inputs",
    "generate_fixtures",
]

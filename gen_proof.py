#!/usr/bin/env python3
"""
Generate and locally verify one Groth16 proof from an input JSON file.

Artifacts are resolved from the build directory (ZYLITH_BUILD_DIR, default
./out) and the proof record is written to the output directory.

Usage:
    python gen_proof.py membership input.json
    python gen_proof.py swap swap_input.json --output proofs --timeout 600
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from primitives.errors import ZylithError
from proving.config import CircuitKind, ProverConfig
from proving.export import write_proof_file
from proving.orchestrator import ProofOrchestrator


def main():
    parser = argparse.ArgumentParser(
        description='Generate and verify a Groth16 proof for one circuit input'
    )
    parser.add_argument(
        'circuit',
        type=str,
        help=f"Circuit to prove ({', '.join(k.value for k in CircuitKind)})"
    )
    parser.add_argument(
        'input_file',
        type=Path,
        help='Path to the circuit input JSON (named signals)'
    )
    parser.add_argument(
        '--build-dir',
        type=Path,
        default=None,
        help='Directory with compiled circuits and keys (overrides ZYLITH_BUILD_DIR)'
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=Path('proofs'),
        help='Directory for the proof record'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Seconds to wait for the prover (overrides ZYLITH_PROVE_TIMEOUT)'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if not args.input_file.exists():
        print(f"Error: Input file not found: {args.input_file}", file=sys.stderr)
        sys.exit(1)

    config = ProverConfig.from_env()
    if args.build_dir is not None:
        config.build_dir = args.build_dir
    if args.timeout is not None:
        config.timeout = args.timeout

    with open(args.input_file) as f:
        circuit_input = json.load(f)

    with ProofOrchestrator.from_config(config) as orchestrator:
        try:
            kind = CircuitKind.parse(args.circuit)
            result = orchestrator.prove(kind, circuit_input, timeout=config.timeout)
            print("\n=== Proof Generated ===")
            print(f"Public Signals: {[str(s) for s in result.public_signals]}")

            valid = orchestrator.verify(kind, result.proof, result.public_signals)
            print(f"Local Verification: {'PASSED' if valid else 'FAILED'}")
        except ZylithError as e:
            print(f"Error generating proof: {e}", file=sys.stderr)
            sys.exit(1)

    out_path = write_proof_file(kind.value, result, args.output)
    print(f"\nProof saved to: {out_path}")


if __name__ == '__main__':
    main()

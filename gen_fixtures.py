#!/usr/bin/env python3
"""
Generate the reference proof fixtures for verifier contract tests.

Builds the membership, withdraw, lp and swap reference inputs over one
single-leaf tree, proves and verifies each, and writes test_fixtures.json and
test_fixtures.cairo. A circuit that fails is reported and skipped.

Requires node with circomlibjs importable from --node-cwd (for Poseidon) and
snarkjs on PATH (or ZYLITH_SNARKJS).

Usage:
    python gen_fixtures.py --output fixtures --node-cwd circuits
"""

import argparse
import logging
import sys
from pathlib import Path

from primitives.field import felt_hex
from primitives.hasher import PoseidonHasher
from proving.config import ProverConfig
from proving.export import write_fixture_files
from proving.fixtures import build_reference_inputs, generate_fixtures
from proving.orchestrator import ProofOrchestrator


def main():
    parser = argparse.ArgumentParser(
        description='Generate Groth16 test fixtures for every circuit'
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=Path('fixtures'),
        help='Directory for test_fixtures.json and test_fixtures.cairo'
    )
    parser.add_argument(
        '--build-dir',
        type=Path,
        default=None,
        help='Directory with compiled circuits and keys (overrides ZYLITH_BUILD_DIR)'
    )
    parser.add_argument(
        '--depth',
        type=int,
        default=None,
        help='Merkle tree depth (overrides ZYLITH_TREE_DEPTH)'
    )
    parser.add_argument(
        '--node-cwd',
        type=Path,
        default=None,
        help='Directory whose node_modules contains circomlibjs (overrides ZYLITH_NODE_CWD)'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    config = ProverConfig.from_env()
    if args.build_dir is not None:
        config.build_dir = args.build_dir
    if args.depth is not None:
        config.tree_depth = args.depth
    if args.node_cwd is not None:
        config.node_cwd = args.node_cwd

    print("=== Zylith Test Fixture Generator ===")
    print(f"Tree depth: {config.tree_depth}")

    with PoseidonHasher(node=config.node, cwd=config.node_cwd) as hasher:
        inputs = build_reference_inputs(hasher, config.tree_depth)
    print(f"Reference root: {felt_hex(inputs['membership'].root)}")

    with ProofOrchestrator.from_config(config) as orchestrator:
        batch = generate_fixtures(orchestrator, inputs, timeout=config.timeout)

    if not batch.fixtures:
        print("Error: no fixture could be generated", file=sys.stderr)
        for name, reason in batch.failures.items():
            print(f"  {name}: {reason}", file=sys.stderr)
        sys.exit(1)

    json_path, cairo_path = write_fixture_files(batch.fixtures, args.output)

    print(f"\nFixtures saved to: {json_path}")
    print(f"Cairo fixtures saved to: {cairo_path}")

    # Summary
    print("\nSummary:")
    for fixture in batch.fixtures:
        status = "verified" if fixture.verified else "NOT verified"
        print(f"  {fixture.name}: {len(fixture.result.public_signals)} public signals, {status}")
    for name, reason in batch.failures.items():
        print(f"  {name}: failed ({reason})")


if __name__ == '__main__':
    main()

"""Prover configuration and per-circuit artifact resolution.

Each circuit kind owns three read-only artifacts produced by the circuit
build pipeline, laid out in one build directory:

    <build_dir>/<name>_js/<name>.wasm    compiled witness generator
    <build_dir>/<name>_final.zkey        Groth16 proving key
    <build_dir>/<name>_vk.json           verification key

A missing artifact is a hard error; there is no fallback.
"""

import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from primitives.errors import ArtifactInvalid, ArtifactNotFound, UnknownCircuit
from primitives.merkle_tree import TREE_DEPTH


class CircuitKind(str, Enum):
    """Circuits this pipeline can prove."""
    MEMBERSHIP = "membership"
    WITHDRAW = "withdraw"
    SWAP = "swap"
    LP = "lp"

    @classmethod
    def parse(cls, kind: "CircuitKind | str") -> "CircuitKind":
        """Resolve a kind from its name, raising UnknownCircuit if unrecognized."""
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            raise UnknownCircuit(kind, [k.value for k in cls]) from None


@dataclass(frozen=True)
class CircuitArtifacts:
    """Filesystem locations of one circuit's proving materials."""
    kind: CircuitKind
    wasm: Path
    zkey: Path
    vkey: Path

    def require_proving(self) -> None:
        """Raise ArtifactNotFound unless the wasm and zkey both exist."""
        if not self.wasm.is_file():
            raise ArtifactNotFound(self.kind.value, "WASM file", self.wasm)
        if not self.zkey.is_file():
            raise ArtifactNotFound(self.kind.value, "zkey file", self.zkey)

    def load_verification_key(self) -> dict[str, Any]:
        if not self.vkey.is_file():
            raise ArtifactNotFound(self.kind.value, "Verification key", self.vkey)
        with open(self.vkey) as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ArtifactInvalid(self.kind.value, "Verification key", self.vkey, str(e)) from e


class ArtifactRegistry:
    """Maps circuit kinds to their artifacts under a build directory."""

    def __init__(self, build_dir: str | Path, overrides: Optional[dict[CircuitKind, CircuitArtifacts]] = None) -> None:
        self.build_dir = Path(build_dir)
        self._overrides = dict(overrides or {})

    def resolve(self, kind: CircuitKind | str) -> CircuitArtifacts:
        kind = CircuitKind.parse(kind)
        if kind in self._overrides:
            return self._overrides[kind]
        name = kind.value
        return CircuitArtifacts(
            kind=kind,
            wasm=self.build_dir / f"{name}_js" / f"{name}.wasm",
            zkey=self.build_dir / f"{name}_final.zkey",
            vkey=self.build_dir / f"{name}_vk.json",
        )

    def register(self, artifacts: CircuitArtifacts) -> None:
        """Point one kind at artifacts outside the naming convention."""
        self._overrides[artifacts.kind] = artifacts


@dataclass
class ProverConfig:
    """Runtime settings for hashing, proving and fixture generation.

    Attributes:
        build_dir: Directory holding the compiled circuits and keys
        snarkjs: snarkjs executable
        node: node executable (Poseidon worker)
        node_cwd: Directory whose node_modules provides circomlibjs
        tree_depth: Merkle tree depth, fixed by the deployed contract
        timeout: Seconds a caller waits for one proof; None waits forever
        max_workers: Parallel proving requests
    """
    build_dir: Path = Path("out")
    snarkjs: str = "snarkjs"
    node: str = "node"
    node_cwd: Optional[Path] = None
    tree_depth: int = TREE_DEPTH
    timeout: Optional[float] = None
    max_workers: int = 2

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "ProverConfig":
        """Read ZYLITH_* environment variables over the defaults."""
        env = os.environ if environ is None else environ
        config = cls()
        if "ZYLITH_BUILD_DIR" in env:
            config.build_dir = Path(env["ZYLITH_BUILD_DIR"])
        if "ZYLITH_SNARKJS" in env:
            config.snarkjs = env["ZYLITH_SNARKJS"]
        if "ZYLITH_NODE" in env:
            config.node = env["ZYLITH_NODE"]
        if "ZYLITH_NODE_CWD" in env:
            config.node_cwd = Path(env["ZYLITH_NODE_CWD"])
        if "ZYLITH_TREE_DEPTH" in env:
            config.tree_depth = int(env["ZYLITH_TREE_DEPTH"])
        if "ZYLITH_PROVE_TIMEOUT" in env:
            config.timeout = float(env["ZYLITH_PROVE_TIMEOUT"])
        if "ZYLITH_MAX_WORKERS" in env:
            config.max_workers = int(env["ZYLITH_MAX_WORKERS"])
        return config

    def registry(self) -> ArtifactRegistry:
        return ArtifactRegistry(self.build_dir)

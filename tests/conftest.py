"""
Pytest configuration and shared fixtures.

Poseidon and snarkjs are external processes, so most tests run against two
deterministic stand-ins: a SHA-256 field hasher and a scripted backend.
"""

import hashlib
import json
import sys
from pathlib import Path

import pytest

# Add the project root to the path so absolute imports work
# (tests/ is inside the project root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from primitives.errors import ProvingFailed
from primitives.field import BN254_PRIME
from primitives.hasher import Hasher
from proving.backend import ProvingBackend
from proving.config import ArtifactRegistry, CircuitKind
from proving.proof import Groth16Proof, ProofResult


class Sha256Hasher(Hasher):
    """H(a, b) = sha256(a || b) mod p, with a and b as 32-byte big-endian."""

    def __init__(self) -> None:
        self.calls = 0

    def hash2(self, a: int, b: int) -> int:
        self.calls += 1
        digest = hashlib.sha256(int(a).to_bytes(32, "big") + int(b).to_bytes(32, "big")).digest()
        return int.from_bytes(digest, "big") % BN254_PRIME


def make_result(public_signals: list[int], seed: int = 1) -> ProofResult:
    """A syntactically valid proof with distinct coordinates."""
    proof = Groth16Proof(
        pi_a=[seed + 1, seed + 2, 1],
        pi_b=[[seed + 3, seed + 4], [seed + 5, seed + 6], [1, 0]],
        pi_c=[seed + 7, seed + 8, 1],
    )
    return ProofResult(proof=proof, public_signals=list(public_signals))


class FakeBackend(ProvingBackend):
    """Scripted prover/verifier.

    Proving returns make_result() over the first signal's value unless the
    kind is listed in fail, in which case it raises ProvingFailed. verify
    answers from valid (default True).
    """

    def __init__(self, fail: tuple[str, ...] = (), valid: bool = True) -> None:
        self.fail = set(fail)
        self.valid = valid
        self.prove_calls: list[tuple[str, dict]] = []
        self.verify_calls: list[tuple[str, dict, list[int]]] = []

    def full_prove(self, kind, signals, artifacts):
        self.prove_calls.append((kind, signals))
        if kind in self.fail:
            raise ProvingFailed(kind, "Assert Failed. Error in template")
        first = next(v for v in signals.values() if isinstance(v, str))
        return make_result([int(first), len(signals)])

    def verify(self, kind, verification_key, public_signals, proof):
        self.verify_calls.append((kind, verification_key, list(public_signals)))
        return self.valid


def write_artifacts(build_dir: Path, kinds=tuple(CircuitKind)) -> None:
    """Lay out placeholder wasm/zkey/vk files under the naming convention."""
    for kind in kinds:
        name = CircuitKind.parse(kind).value
        (build_dir / f"{name}_js").mkdir(parents=True, exist_ok=True)
        (build_dir / f"{name}_js" / f"{name}.wasm").write_bytes(b"\0asm")
        (build_dir / f"{name}_final.zkey").write_bytes(b"zkey")
        with open(build_dir / f"{name}_vk.json", "w") as f:
            json.dump({"protocol": "groth16", "curve": "bn128", "circuit": name}, f)


@pytest.fixture
def hasher() -> Sha256Hasher:
    return Sha256Hasher()


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    out = tmp_path / "out"
    write_artifacts(out)
    return out


@pytest.fixture
def registry(build_dir: Path) -> ArtifactRegistry:
    return ArtifactRegistry(build_dir)

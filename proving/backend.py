"""Proving backends.

The Groth16 prover and verifier are external. A backend exposes

    full_prove(kind, signals, artifacts) -> ProofResult
    verify(kind, verification_key, public_signals, proof) -> bool

SnarkjsBackend shells out to the snarkjs CLI. Each call runs in its own
temporary directory, so independent requests can run in parallel.
"""

import json
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Optional

from primitives.errors import BackendError, ProvingFailed
from proving.config import CircuitArtifacts
from proving.proof import Groth16Proof, ProofResult, load_proof_files, proof_to_json, signals_to_json

logger = logging.getLogger(__name__)


class ProvingBackend:
    """Interface of the external Groth16 prover/verifier."""

    def full_prove(self, kind: str, signals: dict[str, Any], artifacts: CircuitArtifacts) -> ProofResult:
        raise NotImplementedError("Subclass must implement full_prove")

    def verify(
        self, kind: str, verification_key: dict[str, Any], public_signals: list[int], proof: Groth16Proof
    ) -> bool:
        raise NotImplementedError("Subclass must implement verify")


class SnarkjsBackend(ProvingBackend):
    """snarkjs CLI backend.

    Args:
        snarkjs: snarkjs executable (or a wrapper script)
        timeout: Hard limit on one snarkjs process, in seconds; None for no limit
    """

    def __init__(self, snarkjs: str = "snarkjs", timeout: Optional[float] = None) -> None:
        self.snarkjs = snarkjs
        self.timeout = timeout

    def full_prove(self, kind: str, signals: dict[str, Any], artifacts: CircuitArtifacts) -> ProofResult:
        with tempfile.TemporaryDirectory(prefix=f"{kind}_prove_") as temp_dir:
            temp_path = Path(temp_dir)
            input_file = temp_path / "input.json"
            proof_file = temp_path / "proof.json"
            public_file = temp_path / "public.json"
            with open(input_file, "w") as f:
                json.dump(signals, f)

            try:
                result = self._run(
                    kind,
                    ["groth16", "fullprove", str(input_file), str(artifacts.wasm), str(artifacts.zkey),
                     str(proof_file), str(public_file)],
                )
            except ProvingFailed:
                raise
            except BackendError as e:
                raise ProvingFailed(kind, str(e)) from e
            if result.returncode != 0:
                raise ProvingFailed(kind, _detail(result))
            if not proof_file.is_file() or not public_file.is_file():
                raise ProvingFailed(kind, f"snarkjs produced no proof output: {_detail(result)}")
            return load_proof_files(proof_file, public_file)

    def verify(
        self, kind: str, verification_key: dict[str, Any], public_signals: list[int], proof: Groth16Proof
    ) -> bool:
        with tempfile.TemporaryDirectory(prefix=f"{kind}_verify_") as temp_dir:
            temp_path = Path(temp_dir)
            vkey_file = temp_path / "verification_key.json"
            public_file = temp_path / "public.json"
            proof_file = temp_path / "proof.json"
            with open(vkey_file, "w") as f:
                json.dump(verification_key, f)
            with open(public_file, "w") as f:
                json.dump(signals_to_json(public_signals), f)
            with open(proof_file, "w") as f:
                json.dump(proof_to_json(proof), f)

            result = self._run(kind, ["groth16", "verify", str(vkey_file), str(public_file), str(proof_file)])
            output = result.stdout + result.stderr
            if result.returncode == 0 and "OK" in output:
                return True
            if "Invalid proof" in output:
                return False
            raise BackendError(f"snarkjs verify for '{kind}' failed: {_detail(result)}")

    def _run(self, kind: str, args: list[str]) -> subprocess.CompletedProcess:
        cmd = [self.snarkjs, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, check=False)
        except subprocess.TimeoutExpired as e:
            raise ProvingFailed(kind, f"snarkjs timed out after {self.timeout}s") from e
        except OSError as e:
            raise BackendError(f"Failed to run {self.snarkjs}: {e}") from e


def _detail(result: subprocess.CompletedProcess) -> str:
    """Most useful part of snarkjs output for an error message."""
    text = (result.stderr or "").strip() or (result.stdout or "").strip()
    return text or f"exit code {result.returncode}"

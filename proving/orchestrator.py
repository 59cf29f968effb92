"""Proof orchestration: resolve artifacts, prove, verify.

A request moves through

    ASSEMBLING -> PROVING -> VERIFYING -> ACCEPTED | REJECTED

and PROVING may end in FAILED when the backend errors. Nothing is retried:
proving is expensive and the caller owns the retry policy.

Proving is a long blocking call into an external process. submit() hands it
to a worker thread and returns a Future; a timeout only abandons the wait.
The backend process is not interrupted and may still finish its work.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from primitives.errors import BackendError, ProvingFailed, ProvingTimeout, ZylithError
from proving.backend import ProvingBackend, SnarkjsBackend
from proving.circuit_input import CircuitInput, Signals, to_signals
from proving.config import ArtifactRegistry, CircuitKind, ProverConfig
from proving.proof import Groth16Proof, ProofResult

logger = logging.getLogger(__name__)


class ProofState(str, Enum):
    ASSEMBLING = "assembling"
    PROVING = "proving"
    VERIFYING = "verifying"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class ProofRequest:
    """One proof attempt and where it is in its lifecycle."""
    kind: CircuitKind
    circuit_input: CircuitInput | Mapping[str, Any]
    state: ProofState = ProofState.ASSEMBLING
    signals: Optional[Signals] = None
    result: Optional[ProofResult] = None
    failure: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.state in (ProofState.ACCEPTED, ProofState.REJECTED, ProofState.FAILED)

    @property
    def verified(self) -> bool:
        return self.state == ProofState.ACCEPTED


class ProofOrchestrator:
    """Drives the external prover and verifier for every circuit kind.

    Usage:
        with ProofOrchestrator(registry, SnarkjsBackend()) as orchestrator:
            result = orchestrator.prove("membership", membership_input)
            ok = orchestrator.verify("membership", result.proof, result.public_signals)
    """

    def __init__(self, registry: ArtifactRegistry, backend: ProvingBackend, max_workers: int = 2) -> None:
        self.registry = registry
        self.backend = backend
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_config(cls, config: ProverConfig) -> "ProofOrchestrator":
        return cls(config.registry(), SnarkjsBackend(config.snarkjs), config.max_workers)

    def __enter__(self) -> "ProofOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Stop accepting work. Abandoned proofs are not waited for."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    # --- Proving ---

    def prove(
        self,
        kind: CircuitKind | str,
        circuit_input: CircuitInput | Mapping[str, Any],
        timeout: Optional[float] = None,
    ) -> ProofResult:
        """Generate a proof for one circuit input.

        Args:
            kind: Circuit to prove
            circuit_input: Typed input record, or a raw signal mapping
            timeout: Seconds to wait before abandoning the request; None waits

        Raises:
            UnknownCircuit: kind is not registered
            ArtifactNotFound: wasm or zkey missing
            MissingField: a required signal is absent
            ProvingFailed: the backend rejected the input or crashed
            ProvingTimeout: timeout elapsed (the backend keeps running)
        """
        if timeout is None:
            return self._prove(kind, circuit_input)
        future = self.submit(kind, circuit_input)
        try:
            return future.result(timeout=timeout)
        except FutureTimeout:
            future.cancel()
            raise ProvingTimeout(CircuitKind.parse(kind).value, timeout) from None

    def submit(self, kind: CircuitKind | str, circuit_input: CircuitInput | Mapping[str, Any]) -> "Future[ProofResult]":
        """Start proving on a worker thread and return its Future."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="prover")
        return self._executor.submit(self._prove, kind, circuit_input)

    def _prove(self, kind: CircuitKind | str, circuit_input: CircuitInput | Mapping[str, Any]) -> ProofResult:
        kind = CircuitKind.parse(kind)
        artifacts = self.registry.resolve(kind)
        artifacts.require_proving()
        signals = to_signals(kind, circuit_input)
        return self._full_prove(kind, signals)

    def _full_prove(self, kind: CircuitKind, signals: Signals) -> ProofResult:
        artifacts = self.registry.resolve(kind)
        logger.info("Generating %s proof", kind.value)
        logger.debug("  WASM: %s", artifacts.wasm)
        logger.debug("  zkey: %s", artifacts.zkey)
        try:
            result = self.backend.full_prove(kind.value, signals, artifacts)
        except ProvingFailed:
            raise
        except BackendError as e:
            raise ProvingFailed(kind.value, str(e)) from e
        except ZylithError:
            raise
        except Exception as e:
            raise ProvingFailed(kind.value, str(e)) from e
        logger.info("Generated %s proof with %d public signals", kind.value, len(result.public_signals))
        return result

    # --- Verification ---

    def verify(self, kind: CircuitKind | str, proof: Groth16Proof, public_signals: list[int]) -> bool:
        """Check a proof with the circuit's verification key.

        Returns the backend's answer unchanged; False is an expected outcome.

        Raises:
            UnknownCircuit: kind is not registered
            ArtifactNotFound: verification key missing
            ArtifactInvalid: verification key is not valid JSON
        """
        kind = CircuitKind.parse(kind)
        verification_key = self.registry.resolve(kind).load_verification_key()
        valid = self.backend.verify(kind.value, verification_key, public_signals, proof)
        logger.info("Local verification of %s proof: %s", kind.value, "PASSED" if valid else "FAILED")
        return valid

    # --- Full Lifecycle ---

    def run(self, request: ProofRequest) -> ProofRequest:
        """Take a request through assemble, prove and verify, recording its state.

        Structural errors propagate with the request left in its current
        state. Backend errors move it to FAILED before propagating.
        """
        kind = CircuitKind.parse(request.kind)
        request.kind = kind

        request.state = ProofState.ASSEMBLING
        artifacts = self.registry.resolve(kind)
        artifacts.require_proving()
        request.signals = to_signals(kind, request.circuit_input)

        request.state = ProofState.PROVING
        try:
            request.result = self._full_prove(kind, request.signals)
        except BackendError as e:
            request.state = ProofState.FAILED
            request.failure = str(e)
            raise

        request.state = ProofState.VERIFYING
        valid = self.verify(kind, request.result.proof, request.result.public_signals)
        request.state = ProofState.ACCEPTED if valid else ProofState.REJECTED
        return request

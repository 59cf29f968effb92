"""Two-input hash over the BN254 scalar field.

The hash is an external collaborator: everything in this project only needs
`hash2(a, b) -> FieldElement`. Production code uses circom-compatible
Poseidon from the circomlibjs npm package so that commitments and Merkle
roots match the circuits and the on-chain verifier bit for bit.

circomlibjs has no Python binding, so PoseidonHasher keeps a single node
worker alive and talks to it over pipes, one JSON request per line.
"""

import json
import logging
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import IO, Iterable, Optional, Sequence

from primitives.errors import HasherError
from primitives.field import FieldElement, to_field

logger = logging.getLogger(__name__)

# --- Worker Script ---

_WORKER_JS = r"""
const { buildPoseidon } = require("circomlibjs");
const readline = require("readline");

(async () => {
    const poseidon = await buildPoseidon();
    const F = poseidon.F;
    const rl = readline.createInterface({ input: process.stdin });
    process.stdout.write("ready\n");
    for await (const line of rl) {
        if (!line.trim()) continue;
        try {
            const [a, b] = JSON.parse(line);
            const h = poseidon([BigInt(a), BigInt(b)]);
            process.stdout.write(F.toObject(h).toString() + "\n");
        } catch (e) {
            process.stdout.write("error " + JSON.stringify(String(e && e.message || e)) + "\n");
        }
    }
})().catch((e) => {
    process.stdout.write("error " + JSON.stringify(String(e && e.message || e)) + "\n");
    process.exit(1);
});
"""

# Requests written before reading replies; bounded so pipes never fill up.
PIPELINE_CHUNK = 256


# --- Interface ---

class Hasher:
    """Two-to-one field hash used for commitments and Merkle nodes."""

    def init(self) -> None:
        """Prepare the hasher. Idempotent; has no effect on outputs."""

    def hash2(self, a: int, b: int) -> FieldElement:
        raise NotImplementedError("Subclass must implement hash2")

    def hash_pairs(self, pairs: Sequence[tuple[int, int]]) -> list[FieldElement]:
        """Hash many (left, right) pairs, in order."""
        return [self.hash2(a, b) for a, b in pairs]


# --- circomlibjs Poseidon ---

class PoseidonHasher(Hasher):
    """Circom Poseidon(2) via a long-lived node worker.

    Args:
        node: node executable
        cwd: directory whose node_modules contains circomlibjs
            (the circuits checkout, typically)

    Usage:
        with PoseidonHasher(cwd="circuits") as hasher:
            h = hasher.hash2(1, 2)
    """

    def __init__(self, node: str = "node", cwd: Optional[str | Path] = None) -> None:
        self.node = node
        self.cwd = Path(cwd) if cwd is not None else None
        self._proc: Optional[subprocess.Popen] = None
        self._stderr: Optional[IO[str]] = None
        self._lock = threading.Lock()

    def __enter__(self) -> "PoseidonHasher":
        self.init()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def init(self) -> None:
        with self._lock:
            if self._proc is not None and self._proc.poll() is None:
                return
            self._discard_stderr()
            # stderr goes to a file: nothing reads it while the worker is healthy
            self._stderr = tempfile.TemporaryFile(mode="w+")
            logger.debug("Starting Poseidon worker (node=%s, cwd=%s)", self.node, self.cwd)
            try:
                self._proc = subprocess.Popen(
                    [self.node, "-e", _WORKER_JS],
                    cwd=self.cwd,
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=self._stderr,
                    text=True,
                    bufsize=1,
                )
            except OSError as e:
                self._discard_stderr()
                raise HasherError(f"Failed to start node worker '{self.node}': {e}") from e
            banner = self._proc.stdout.readline().strip()
            if banner != "ready":
                self._proc.kill()
                self._proc.wait()
                detail = banner or self._stderr_text()
                self._proc = None
                self._discard_stderr()
                raise HasherError(f"Poseidon worker failed to start: {detail}")

    def close(self) -> None:
        with self._lock:
            if self._proc is None:
                return
            if self._proc.stdin:
                self._proc.stdin.close()
            try:
                self._proc.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._proc.kill()
                self._proc.wait()
            self._proc = None
            self._discard_stderr()

    def hash2(self, a: int, b: int) -> FieldElement:
        return self.hash_pairs([(a, b)])[0]

    def hash_pairs(self, pairs: Sequence[tuple[int, int]]) -> list[FieldElement]:
        self.init()
        out: list[FieldElement] = []
        with self._lock:
            for start in range(0, len(pairs), PIPELINE_CHUNK):
                chunk = pairs[start:start + PIPELINE_CHUNK]
                out.extend(self._round_trip(chunk))
        return out

    def _round_trip(self, chunk: Iterable[tuple[int, int]]) -> list[FieldElement]:
        proc = self._proc
        chunk = list(chunk)
        try:
            proc.stdin.write("".join(json.dumps([str(a), str(b)]) + "\n" for a, b in chunk))
            proc.stdin.flush()
        except (BrokenPipeError, OSError) as e:
            raise HasherError(f"Poseidon worker is not accepting input: {e}") from e

        results = []
        for _ in chunk:
            line = proc.stdout.readline()
            if not line:
                proc.kill()
                proc.wait()
                raise HasherError(f"Poseidon worker exited: {self._stderr_text()}")
            line = line.strip()
            if line.startswith("error"):
                raise HasherError(f"Poseidon worker error: {line[len('error'):].strip()}")
            results.append(to_field(int(line)))
        return results

    def _stderr_text(self) -> str:
        if self._stderr is None:
            return ""
        self._stderr.seek(0)
        return self._stderr.read().strip()

    def _discard_stderr(self) -> None:
        if self._stderr is not None:
            self._stderr.close()
            self._stderr = None

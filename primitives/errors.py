"""Error kinds for the commitment, accumulator and proving pipeline.

Structural errors are caller bugs and subclass the builtin a plain Python
caller would expect (KeyError, ValueError, ...). A proof that fails to verify
is not an error: verification returns False.
"""


class ZylithError(Exception):
    """Base class for every error raised by this project."""


# --- Structural Errors ---

class UnknownCircuit(ZylithError, KeyError):
    """Circuit kind is not one of the registered kinds."""

    def __init__(self, kind: object, known: list[str] | None = None) -> None:
        self.kind = kind
        self.known = known or []
        message = f"Unknown circuit: {kind!r}"
        if self.known:
            message += f". Valid options: {', '.join(self.known)}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class ArtifactNotFound(ZylithError, FileNotFoundError):
    """A compiled circuit, proving key or verification key is missing."""

    def __init__(self, kind: str, artifact: str, path: object) -> None:
        self.kind = kind
        self.artifact = artifact
        self.path = path
        super().__init__(f"{artifact} for circuit '{kind}' not found: {path}")

    def __str__(self) -> str:
        return self.args[0]


class ArtifactInvalid(ZylithError, ValueError):
    """An artifact exists but its contents cannot be read."""

    def __init__(self, kind: str, artifact: str, path: object, detail: str) -> None:
        self.kind = kind
        self.artifact = artifact
        self.path = path
        self.detail = detail
        super().__init__(f"{artifact} for circuit '{kind}' is unreadable ({path}): {detail}")


class InvalidDepth(ZylithError, ValueError):
    """Tree depth is negative or too small for the number of leaves."""

    def __init__(self, depth: int, n_leaves: int | None = None) -> None:
        self.depth = depth
        self.n_leaves = n_leaves
        if n_leaves is None:
            message = f"Invalid tree depth {depth}"
        else:
            message = f"{n_leaves} leaves do not fit a tree of depth {depth} (capacity {1 << max(depth, 0)})"
        super().__init__(message)


class IndexOutOfRange(ZylithError, IndexError):
    """Leaf index outside [0, 2**depth)."""

    def __init__(self, index: int, depth: int) -> None:
        self.index = index
        self.depth = depth
        super().__init__(f"Leaf index {index} out of range [0, {1 << depth}) for depth {depth}")


class MissingField(ZylithError, KeyError):
    """A required named signal is absent from a circuit input."""

    def __init__(self, kind: str, names: list[str]) -> None:
        self.kind = kind
        self.names = list(names)
        super().__init__(f"{kind} input is missing required field(s): {', '.join(self.names)}")

    def __str__(self) -> str:
        return self.args[0]


# --- Collaborator Errors ---

class HasherError(ZylithError, RuntimeError):
    """The hash collaborator could not produce a digest."""


class BackendError(ZylithError, RuntimeError):
    """The proving backend failed to run."""


class ProvingFailed(BackendError):
    """The prover rejected the input (e.g. unsatisfied constraints)."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"Proving '{kind}' failed: {detail}")


class ProvingTimeout(BackendError):
    """The caller stopped waiting for a proof; the backend may still be running."""

    def __init__(self, kind: str, timeout: float) -> None:
        self.kind = kind
        self.timeout = timeout
        super().__init__(f"Proving '{kind}' did not finish within {timeout}s")

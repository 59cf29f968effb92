"""Reference fixture batch for downstream verifier tests.

Every fixture spends the same note, stored alone at leaf 0 of a fresh tree.
Fixtures are generated independently: one circuit failing (the swap circuit
rejects inconsistent pool math, for example) is recorded and the rest of the
batch still completes.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from primitives.commitment import Note
from primitives.errors import ZylithError
from primitives.hasher import Hasher
from primitives.merkle_tree import TREE_DEPTH, build
from proving.circuit_input import (
    CircuitInput,
    SwapParams,
    assemble_lp,
    assemble_membership,
    assemble_swap,
    assemble_withdraw,
)
from proving.export import Fixture, to_fixture
from proving.orchestrator import ProofOrchestrator

logger = logging.getLogger(__name__)

# --- Reference Values ---

SECRET_IN = 123
NULLIFIER_IN = 456
AMOUNT_IN = 1_000_000
SECRET_OUT = 789
NULLIFIER_OUT = 101112
RECIPIENT = 0x1234567890ABCDEF

LP_TICK_LOWER = -600
LP_TICK_UPPER = 600
LP_LIQUIDITY = 500_000

SWAP_PARAMS = SwapParams(
    amount_specified=100_000,
    zero_for_one=1,
    amount0_delta=100_000,
    amount1_delta=99_000,
    sqrt_price_old=1 << 128,
    new_sqrt_price_x128=340000000000000000000000000000000000000,
    new_tick=-1,
    liquidity=1_000_000,
)

FIXTURE_ORDER = ("membership", "withdraw", "lp", "swap")


@dataclass
class FixtureBatch:
    """Outcome of one batch run: produced fixtures plus failure reasons by name."""
    fixtures: list[Fixture] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fixtures]


def build_reference_inputs(hasher: Hasher, depth: int = TREE_DEPTH) -> dict[str, CircuitInput]:
    """Inputs for every circuit, keyed by fixture name, in FIXTURE_ORDER."""
    note_in = Note(SECRET_IN, NULLIFIER_IN, AMOUNT_IN)
    _, tree = build([note_in.commitment(hasher)], depth, hasher)

    lp_change = Note(SECRET_OUT, NULLIFIER_OUT, AMOUNT_IN - LP_LIQUIDITY)
    swap_out = Note(
        SECRET_OUT,
        NULLIFIER_OUT,
        AMOUNT_IN - SWAP_PARAMS.amount_specified + SWAP_PARAMS.amount1_delta,
    )

    return {
        "membership": assemble_membership(hasher, note_in, tree, 0),
        "withdraw": assemble_withdraw(hasher, note_in, RECIPIENT, tree, 0),
        "lp": assemble_lp(hasher, note_in, lp_change, LP_TICK_LOWER, LP_TICK_UPPER, LP_LIQUIDITY, tree, 0),
        "swap": assemble_swap(hasher, note_in, swap_out, SWAP_PARAMS, tree, 0),
    }


def generate_fixture(orchestrator: ProofOrchestrator, name: str, circuit_input: CircuitInput,
                     timeout: Optional[float] = None) -> Fixture:
    """Prove and verify one input; errors propagate to the caller."""
    kind = circuit_input.KIND
    result = orchestrator.prove(kind, circuit_input, timeout=timeout)
    verified = orchestrator.verify(kind, result.proof, result.public_signals)
    if not verified:
        logger.warning("%s proof did not verify", name)
    return to_fixture(name, circuit_input, result, verified)


def generate_fixtures(orchestrator: ProofOrchestrator, inputs: dict[str, CircuitInput],
                      timeout: Optional[float] = None) -> FixtureBatch:
    """Generate a fixture per input, isolating failures.

    Args:
        orchestrator: Prover/verifier driver
        inputs: Circuit inputs keyed by fixture name (dict order is kept)
        timeout: Per-fixture wait limit in seconds

    Returns:
        FixtureBatch with every fixture that was produced and, for the rest,
        the reason it was not
    """
    batch = FixtureBatch()
    for name, circuit_input in inputs.items():
        logger.info("Generating %s fixture", name)
        try:
            batch.fixtures.append(generate_fixture(orchestrator, name, circuit_input, timeout))
        except ZylithError as e:
            logger.warning("%s fixture failed: %s", name, e)
            batch.failures[name] = str(e)
        except Exception as e:
            logger.exception("%s fixture failed unexpectedly", name)
            batch.failures[name] = f"{type(e).__name__}: {e}"
    return batch

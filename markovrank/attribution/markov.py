"""Stationary distribution of a sparse Markov chain by power iteration."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

import numpy as np

from ..errors import ComputationCancelled
from .chain import SparseMarkovChain

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StationaryDistribution:
    pi: np.ndarray
    converged: bool
    iterations: int
    delta: float


def uniform_distribution(n: int) -> np.ndarray:
    if n < 0:
        raise ValueError(f"Distribution size must be >= 0, got {n}")
    if n == 0:
        return np.zeros(0, dtype=np.float64)
    return np.full(n, 1.0 / n, dtype=np.float64)


@dataclass(frozen=True)
class _FlatChain:
    """All rows of a chain laid end to end as (dst, src, weight) triples."""

    size: int
    dst: np.ndarray
    src: np.ndarray
    weight: np.ndarray

    @classmethod
    def from_chain(cls, chain: SparseMarkovChain) -> "_FlatChain":
        size = len(chain)
        lengths = [len(row.neighbor) for row in chain]
        if size == 0 or sum(lengths) == 0:
            empty_index = np.zeros(0, dtype=np.intp)
            return cls(size, empty_index, empty_index, np.zeros(0, dtype=np.float64))
        return cls(
            size=size,
            dst=np.repeat(np.arange(size, dtype=np.intp), lengths),
            src=np.concatenate([row.neighbor for row in chain]).astype(np.intp),
            weight=np.concatenate([row.weight for row in chain]).astype(np.float64),
        )

    def act(self, pi: np.ndarray) -> np.ndarray:
        return np.bincount(
            self.dst, weights=pi[self.src] * self.weight, minlength=self.size
        ).astype(np.float64)


def sparse_markov_chain_action(
    chain: SparseMarkovChain, pi: np.ndarray
) -> np.ndarray:
    """One step of the walk: `pi'[i] = sum(pi[j] * w for j, w in chain[i])`."""
    if len(pi) != len(chain):
        raise ValueError(
            f"Distribution has {len(pi)} entries for {len(chain)} states"
        )
    return _FlatChain.from_chain(chain).act(np.asarray(pi, dtype=np.float64))


async def find_stationary_distribution(
    chain: SparseMarkovChain,
    *,
    convergence_threshold: float,
    max_iterations: int,
    yield_after_ms: float,
    verbose: bool = False,
    should_cancel: Callable[[], bool] | None = None,
) -> StationaryDistribution:
    """Iterate from the uniform distribution until it stops moving.

    Stops once the L1 distance between consecutive iterates is below
    `convergence_threshold`, or after `max_iterations` steps, in which
    case the last iterate is returned with `converged=False`.

    Whenever `yield_after_ms` has elapsed since the last suspension the
    loop gives control back to the event loop with `asyncio.sleep(0)`.
    The iterate and iteration count are kept across the suspension.
    `should_cancel` is consulted at each suspension.
    """
    level = logging.INFO if verbose else logging.DEBUG
    flat = _FlatChain.from_chain(chain)
    pi = uniform_distribution(flat.size)

    if flat.size == 0:
        return StationaryDistribution(pi=pi, converged=True, iterations=0, delta=0.0)

    budget = yield_after_ms / 1000.0
    last_yield = time.monotonic()
    delta = float("inf")
    iteration = 0

    while iteration < max_iterations:
        iteration += 1
        next_pi = flat.act(pi)
        delta = float(np.abs(next_pi - pi).sum())
        pi = next_pi
        log.log(level, "[%d] delta = %g", iteration, delta)

        if delta < convergence_threshold:
            log.log(level, "Converged after %d iterations", iteration)
            return StationaryDistribution(
                pi=pi, converged=True, iterations=iteration, delta=delta
            )

        if time.monotonic() - last_yield >= budget:
            await asyncio.sleep(0)
            if should_cancel is not None and should_cancel():
                raise ComputationCancelled(
                    f"Stationary distribution cancelled after {iteration} iterations"
                )
            last_yield = time.monotonic()

    log.log(
        level,
        "Max iterations (%d) reached without convergence, delta = %g",
        max_iterations,
        delta,
    )
    return StationaryDistribution(
        pi=pi, converged=False, iterations=iteration, delta=delta
    )

"""Rescale a node distribution into user-facing scores."""

import math
import numbers

from ..errors import DegenerateNormalization, InvalidConfiguration
from ..graph.address import EMPTY, NodeAddress, has_prefix
from .config import ScorePolicy

NodeScore = dict[NodeAddress, float]


def score_by_constant_total(
    pi: dict[NodeAddress, float],
    total_score: float,
    prefix: NodeAddress = EMPTY,
    policy: ScorePolicy = ScorePolicy.SCALE_ALL,
) -> NodeScore:
    """Scale `pi` so the nodes matching `prefix` sum to `total_score`.

    Every node shares the same scale factor. With
    `ScorePolicy.ZERO_OUTSIDE_PREFIX`, nodes outside the prefix score 0.
    """
    if (
        not isinstance(total_score, numbers.Real)
        or not math.isfinite(total_score)
        or total_score <= 0
    ):
        raise InvalidConfiguration(
            f"total_score must be finite and > 0, got {total_score!r}"
        )

    total_probability = sum(
        probability for node, probability in pi.items() if has_prefix(node, prefix)
    )
    if total_probability <= 0:
        raise DegenerateNormalization(
            f"No probability mass under prefix {prefix!r}; cannot reach total score"
        )

    unit_score = total_score / total_probability
    if policy is ScorePolicy.SCALE_ALL:
        return {node: probability * unit_score for node, probability in pi.items()}
    if policy is ScorePolicy.ZERO_OUTSIDE_PREFIX:
        return {
            node: probability * unit_score if has_prefix(node, prefix) else 0.0
            for node, probability in pi.items()
        }
    raise TypeError(f"Unknown score policy: {policy!r}")


def score_by_maximum_probability(
    pi: dict[NodeAddress, float], max_score: float
) -> NodeScore:
    """Scale `pi` so the most probable node scores `max_score`."""
    if (
        not isinstance(max_score, numbers.Real)
        or not math.isfinite(max_score)
        or max_score <= 0
    ):
        raise InvalidConfiguration(
            f"max_score must be finite and > 0, got {max_score!r}"
        )
    max_probability = max(pi.values(), default=0.0)
    if max_probability <= 0:
        raise DegenerateNormalization("Distribution has no probability mass")
    unit_score = max_score / max_probability
    return {node: probability * unit_score for node, probability in pi.items()}

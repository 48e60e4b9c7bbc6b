"""Options for a PageRank run."""

import math
import numbers
from dataclasses import dataclass, fields
from enum import Enum

from ..errors import InvalidConfiguration
from ..graph.address import EMPTY, NodeAddress


class ScorePolicy(Enum):
    """How nodes outside the normalization prefix are scored."""

    SCALE_ALL = "scale_all"  # same scale factor as matching nodes
    ZERO_OUTSIDE_PREFIX = "zero_outside_prefix"


@dataclass(frozen=True)
class PagerankOptions:
    """Constants controlling chain construction, solving and scoring."""

    self_loop_weight: float = 1e-3
    convergence_threshold: float = 1e-7
    max_iterations: int = 255
    verbose: bool = False

    # Scores are normalized so that nodes matching the prefix sum to this.
    total_score: float = 1000.0
    total_score_node_prefix: NodeAddress = EMPTY
    score_policy: ScorePolicy = ScorePolicy.SCALE_ALL

    yield_after_ms: float = 30.0

    def validate(self) -> "PagerankOptions":
        """Raise InvalidConfiguration on the first out-of-range option."""
        _require_real(self, "self_loop_weight", minimum=0.0, inclusive=False)
        _require_real(self, "convergence_threshold", minimum=0.0)
        _require_real(self, "total_score", minimum=0.0, inclusive=False)
        _require_real(self, "yield_after_ms", minimum=0.0)

        if not isinstance(self.max_iterations, numbers.Integral) or isinstance(
            self.max_iterations, bool
        ):
            raise InvalidConfiguration(
                f"max_iterations must be an integer, got {self.max_iterations!r}"
            )
        if self.max_iterations < 0:
            raise InvalidConfiguration(
                f"max_iterations must be >= 0, got {self.max_iterations}"
            )

        prefix = self.total_score_node_prefix
        if not isinstance(prefix, tuple) or not all(
            isinstance(part, str) for part in prefix
        ):
            raise InvalidConfiguration(
                f"total_score_node_prefix must be a tuple of strings, got {prefix!r}"
            )
        if not isinstance(self.score_policy, ScorePolicy):
            raise InvalidConfiguration(f"Unknown score policy: {self.score_policy!r}")
        return self

    @classmethod
    def from_mapping(cls, values: dict) -> "PagerankOptions":
        """Build options from a plain mapping, ignoring unset (None) values."""
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidConfiguration(f"Unknown options: {', '.join(unknown)}")
        kwargs = {key: value for key, value in values.items() if value is not None}
        if isinstance(kwargs.get("score_policy"), str):
            try:
                kwargs["score_policy"] = ScorePolicy(kwargs["score_policy"])
            except ValueError as exc:
                raise InvalidConfiguration(str(exc)) from exc
        return cls(**kwargs)


def _require_real(
    options: PagerankOptions,
    name: str,
    *,
    minimum: float,
    inclusive: bool = True,
) -> None:
    value = getattr(options, name)
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value!r}")
    if value < minimum or (not inclusive and value == minimum):
        bound = ">=" if inclusive else ">"
        raise InvalidConfiguration(f"{name} must be {bound} {minimum}, got {value!r}")


DEFAULT_PAGERANK_OPTIONS = PagerankOptions()

"""
K-Means Configuration

Tunable parameters for the Lloyd iteration and the centroid seeding mode.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


# Number of small-delta iterations that ends a run.
STABLE_ITERATIONS = 3


class InitMode(Enum):
    """How `KMeans.init` seeds the centroids."""
    RANDOM = "random"
    MANUAL = "manual"
    UNIFORM = "uniform"


@dataclass
class KMeansConfig:
    """
    Configuration for the k-means engine.

    Attributes:
        init_mode: Centroid seeding mode ('random', 'manual' or 'uniform')
        max_iterations: Hard cap on the number of assign/update iterations
        end_error: Relative cost change below which an iteration counts as stable
        consecutive_stability: Reset the stability counter on an unstable iteration
    """
    init_mode: Union[InitMode, str] = InitMode.RANDOM
    """Seeding mode; strings are converted to `InitMode`"""

    max_iterations: int = 100
    """Maximum number of iterations (default: 100)"""

    end_error: float = 0.001
    """Relative convergence threshold against the previous cost"""

    consecutive_stability: bool = False
    """Count only consecutive stable iterations (default counts them all)"""

    def __post_init__(self):
        """Validate configuration."""
        mode = self.init_mode
        if isinstance(mode, str):
            mode = mode.lower()
        try:
            self.init_mode = InitMode(mode)
        except ValueError:
            choices = ", ".join(repr(m.value) for m in InitMode)
            raise ValueError(
                f"init_mode must be one of {choices}, got {self.init_mode!r}"
            ) from None

        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.end_error < 0:
            raise ValueError(f"end_error must be non-negative, got {self.end_error}")

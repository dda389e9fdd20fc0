"""Configuration for a clustering run."""

import numbers
from dataclasses import dataclass, asdict
from typing import Optional


DISTANCE_METHODS = ("edlib", "dp")


class ConfigurationError(ValueError):
    """Raised when clustering parameters are missing or out of range."""


@dataclass
class ClusterConfig:
    """Parameters of a clustering run.

    Attributes:
        threshold: Maximum edit distance from the seed to join a cluster (required)
        abundance_filter: Entries with reads <= this value are excluded (default: 0)
        max_clusters: Stop after this many clusters are emitted (default: unbounded)
        quiet: Suppress progress reporting
        distance_method: Edit distance backend, 'edlib' or 'dp' (default: 'edlib')
        threads: Worker threads for the distance scan (default: 1)
    """
    threshold: Optional[int] = None
    abundance_filter: float = 0.0
    max_clusters: Optional[int] = None
    quiet: bool = False
    distance_method: str = 'edlib'
    threads: int = 1

    @classmethod
    def from_args(cls, args) -> 'ClusterConfig':
        """Create config from command-line arguments."""
        return cls(
            threshold=getattr(args, 'distance', None),
            abundance_filter=getattr(args, 'filter', 0.0),
            max_clusters=getattr(args, 'max_clusters', None),
            quiet=getattr(args, 'quiet', False),
            distance_method=getattr(args, 'distance_method', 'edlib'),
            threads=getattr(args, 'threads', 1),
        )

    def validate(self) -> 'ClusterConfig':
        """Check all parameters, raising ConfigurationError on the first problem."""
        validate_threshold(self.threshold)
        validate_max_clusters(self.max_clusters)
        if self.abundance_filter is None or self.abundance_filter < 0:
            raise ConfigurationError(f"Abundance filter must be non-negative, got {self.abundance_filter}")
        if self.distance_method not in DISTANCE_METHODS:
            raise ConfigurationError(f"Unknown distance method: {self.distance_method}")
        if self.threads < 1:
            raise ConfigurationError(f"Thread count must be at least 1, got {self.threads}")
        return self

    def to_dict(self) -> dict:
        return asdict(self)


def validate_threshold(threshold) -> None:
    if threshold is None:
        raise ConfigurationError("Edit distance threshold is required")
    if isinstance(threshold, bool) or not isinstance(threshold, numbers.Integral) or threshold < 0:
        raise ConfigurationError(f"Edit distance threshold must be a non-negative integer, got {threshold!r}")


def validate_max_clusters(max_clusters) -> None:
    if max_clusters is None:
        return
    if isinstance(max_clusters, bool) or not isinstance(max_clusters, numbers.Integral) or max_clusters < 1:
        raise ConfigurationError(f"Maximum cluster count must be a positive integer, got {max_clusters!r}")

"""Shared data structures for aptacluster."""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional


class Entry(NamedTuple):
    """One ranked sequence from the upstream count stage.

    The identifier is the only field used to label output. rank and
    duplicate_index are parsed from it for inspection and never drive clustering.
    """
    identifier: str  # Original header text, e.g. "3(2)-120-4521.33"
    rank: int
    reads: int
    rpm: float
    sequence: str
    duplicate_index: Optional[int] = None  # The "(n)" suffix of tied ranks


class ClusterMember(NamedTuple):
    """An Entry placed in a cluster."""
    entry: Entry
    rank_within_cluster: int  # 1-based, seed = 1
    distance: int  # Edit distance from the seed


@dataclass
class Cluster:
    """Result of one engine step.

    The first member is always the seed (rank 1, distance 0). Totals are
    accumulated as members are added.
    """
    cluster_index: int
    members: List[ClusterMember] = field(default_factory=list)
    total_reads: int = 0
    total_rpm: float = 0.0

    @classmethod
    def from_seed(cls, cluster_index: int, seed: Entry) -> 'Cluster':
        cluster = cls(cluster_index=cluster_index)
        cluster.add(seed, 0)
        return cluster

    def add(self, entry: Entry, distance: int) -> ClusterMember:
        member = ClusterMember(entry, len(self.members) + 1, distance)
        self.members.append(member)
        self.total_reads += entry.reads
        self.total_rpm += entry.rpm
        return member

    @property
    def seed(self) -> Entry:
        return self.members[0].entry

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass
class RunSummary:
    """Counts collected over one clustering run."""
    records_parsed: int = 0
    records_skipped: int = 0  # Malformed records
    entries_filtered: int = 0  # Failed the abundance filter
    entries_eligible: int = 0
    clusters_emitted: int = 0
    entries_clustered: int = 0
    entries_unclustered: int = 0  # Dropped by the cluster cap
    total_reads: int = 0
    total_rpm: float = 0.0
    elapsed_seconds: float = 0.0

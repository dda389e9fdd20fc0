"""Greedy seed-based clustering engine.

The engine holds the remaining pool of unclustered entries (in descending
abundance order) and a cluster counter. Each step takes the head of the pool
as seed, scans the rest of the pool against it and emits one cluster. Entries
within the threshold join the cluster; the others form the next pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from aptacluster.config import validate_max_clusters, validate_threshold
from aptacluster.distance import DistanceFunction, get_distance_function
from aptacluster.types import Cluster, Entry

# Below this many candidates a threaded scan is not worth the overhead
MIN_PARALLEL_CANDIDATES = 64


class EngineState(Enum):
    ACTIVE = "active"
    DONE = "done"


class GreedyClusterEngine:
    def __init__(self, entries: Sequence[Entry],
                 threshold: Optional[int],
                 max_clusters: Optional[int] = None,
                 distance: Optional[DistanceFunction] = None,
                 threads: int = 1):
        validate_threshold(threshold)
        validate_max_clusters(max_clusters)

        self.threshold = threshold
        self.max_clusters = max_clusters
        self.threads = max(1, threads)
        self.distance = distance or get_distance_function("edlib", max_distance=threshold)

        self._pool: List[Entry] = list(entries)
        self._counter = 1

    @property
    def state(self) -> EngineState:
        if not self._pool:
            return EngineState.DONE
        if self.max_clusters is not None and self._counter > self.max_clusters:
            return EngineState.DONE
        return EngineState.ACTIVE

    @property
    def remaining(self) -> Tuple[Entry, ...]:
        """Entries not yet assigned to a cluster."""
        return tuple(self._pool)

    @property
    def clusters_emitted(self) -> int:
        return self._counter - 1

    def step(self) -> Optional[Cluster]:
        """Emit the next cluster, or None once the engine is done."""
        if self.state is EngineState.DONE:
            return None

        seed, candidates = self._pool[0], self._pool[1:]
        cluster = Cluster.from_seed(self._counter, seed)

        kept = []
        for candidate, d in zip(candidates, self._scan(seed, candidates)):
            if d <= self.threshold:
                cluster.add(candidate, d)
            else:
                kept.append(candidate)

        self._counter += 1
        self._pool = kept

        logging.debug(f"Cluster {cluster.cluster_index}: seed {seed.identifier}, "
                      f"{cluster.size} members, {len(kept)} entries remaining")
        return cluster

    def __iter__(self) -> Iterator[Cluster]:
        while True:
            cluster = self.step()
            if cluster is None:
                return
            yield cluster

    def _scan(self, seed: Entry, candidates: List[Entry]) -> List[int]:
        """Distances from the seed to each candidate, in candidate order."""
        if self.threads == 1 or len(candidates) < MIN_PARALLEL_CANDIDATES:
            return [self.distance(seed.sequence, c.sequence) for c in candidates]

        chunk_size = -(-len(candidates) // self.threads)
        chunks = [candidates[i:i + chunk_size] for i in range(0, len(candidates), chunk_size)]

        def scan_chunk(chunk):
            return [self.distance(seed.sequence, c.sequence) for c in chunk]

        # map() returns results in submission order, so the merge is deterministic
        with ThreadPoolExecutor(max_workers=self.threads) as executor:
            results = list(executor.map(scan_chunk, chunks))

        return [d for chunk_distances in results for d in chunk_distances]

"""Per-cluster progress reporting on stderr."""

import sys

from tqdm import tqdm

from aptacluster.types import Cluster


def format_cluster_summary(cluster: Cluster) -> str:
    return (f"Cluster {cluster.cluster_index}: {cluster.size} sequences, "
            f"{cluster.total_reads} reads, {cluster.total_rpm:.2f} RPM")


class ProgressReporter:
    """Prints a summary line per cluster and tracks clustered entries with a progress bar.

    Observational only: a quiet reporter does nothing.
    """

    def __init__(self, total_entries: int, quiet: bool = False, file=None):
        self.quiet = quiet
        self.file = file if file is not None else sys.stderr
        self.clusters_reported = 0
        self._pbar = None
        if not quiet:
            self._pbar = tqdm(total=total_entries, desc="Clustering sequences",
                              unit="seq", file=self.file, leave=False)

    def report(self, cluster: Cluster) -> None:
        self.clusters_reported += 1
        if self.quiet:
            return
        tqdm.write(format_cluster_summary(cluster), file=self.file)
        self._pbar.update(cluster.size)

    def close(self) -> None:
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None

    def __enter__(self) -> 'ProgressReporter':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

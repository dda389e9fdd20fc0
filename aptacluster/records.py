"""
Reading ranked-abundance FASTA records and writing clustered records.

Input headers come from the upstream count stage:

    ><rank>[(<dup-index>)]-<reads>-<rpm>

Clustered output appends the cluster index, rank within the cluster and the
edit distance from the seed:

    ><rank>[(<dup-index>)]-<reads>-<rpm>-<cluster>-<rank_in_cluster>-<distance>
"""

import logging
import re
from typing import Iterator, List, NamedTuple, Optional, TextIO, Tuple

from Bio import SeqIO

from aptacluster.types import Cluster, ClusterMember, Entry

IDENTIFIER_PATTERN = re.compile(
    r'^(?P<rank>\d+)(?:\((?P<dup>\d+)\))?-(?P<reads>\d+)-(?P<rpm>\d+(?:\.\d*)?|\.\d+)$'
)
SEQUENCE_PATTERN = re.compile(r'^[A-Za-z]+$')


class ParseResult(NamedTuple):
    """Entries that passed parsing and filtering, in input order."""
    entries: List[Entry]
    records_parsed: int
    records_skipped: int
    entries_filtered: int


def parse_identifier(identifier: str) -> Optional[Tuple[int, Optional[int], int, float]]:
    """
    Parse a ranked-abundance header.

    Returns:
        Tuple of (rank, duplicate_index, reads, rpm), or None if the header
        does not match the expected grammar
    """
    match = IDENTIFIER_PATTERN.match(identifier.lstrip('>').strip())
    if not match:
        return None

    dup = match.group('dup')
    return (int(match.group('rank')),
            int(dup) if dup is not None else None,
            int(match.group('reads')),
            float(match.group('rpm')))


def parse_record(identifier: str, sequence: str) -> Optional[Entry]:
    """Build an Entry from a header and sequence, or None if either is malformed."""
    fields = parse_identifier(identifier)
    if fields is None:
        return None

    sequence = sequence.strip()
    if not SEQUENCE_PATTERN.match(sequence):
        return None

    rank, dup, reads, rpm = fields
    return Entry(identifier=identifier.lstrip('>').strip(),
                 rank=rank,
                 reads=reads,
                 rpm=rpm,
                 sequence=sequence,
                 duplicate_index=dup)


def iter_records(handle: TextIO) -> Iterator[Tuple[str, Optional[Entry]]]:
    """Yield (header, entry) for every FASTA record; entry is None for malformed records.

    Lines before the first header (blank lines, upstream preamble) are ignored.
    """
    for record in SeqIO.parse(handle, "fasta-pearson"):
        yield record.description, parse_record(record.description, str(record.seq))


def read_entries(handle: TextIO, abundance_filter: float = 0.0) -> ParseResult:
    """
    Read upstream records, keeping well-formed entries with reads > abundance_filter.

    Malformed records are skipped without error. The comparison against the
    filter is strict, so the default of 0 keeps every entry with at least one read.
    Input order is preserved.
    """
    entries = []
    parsed = skipped = filtered = 0

    for header, entry in iter_records(handle):
        parsed += 1
        if entry is None:
            skipped += 1
            logging.debug(f"Skipping malformed record: {header!r}")
            continue
        if entry.reads > abundance_filter:
            entries.append(entry)
        else:
            filtered += 1

    return ParseResult(entries, parsed, skipped, filtered)


def format_member(cluster_index: int, member: ClusterMember) -> str:
    """Render one cluster member as a two-line FASTA record."""
    return (f">{member.entry.identifier}-{cluster_index}-"
            f"{member.rank_within_cluster}-{member.distance}\n"
            f"{member.entry.sequence}\n")


class ClusterWriter:
    """Streams clusters to an output handle as they are produced."""

    def __init__(self, handle: TextIO):
        self.handle = handle
        self.clusters_written = 0
        self.records_written = 0

    def write_cluster(self, cluster: Cluster) -> int:
        """Write every member of the cluster in member order; returns records written."""
        for member in cluster.members:
            self.handle.write(format_member(cluster.cluster_index, member))
        self.clusters_written += 1
        self.records_written += cluster.size
        return cluster.size

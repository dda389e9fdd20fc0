#!/usr/bin/env python3

import argparse
import json
import logging
import sys
import time
from datetime import datetime
from typing import Optional, TextIO

from aptacluster import __version__
from aptacluster.config import ClusterConfig, ConfigurationError, DISTANCE_METHODS
from aptacluster.distance import get_distance_function
from aptacluster.engine import GreedyClusterEngine
from aptacluster.progress import ProgressReporter
from aptacluster.records import ClusterWriter, read_entries
from aptacluster.types import RunSummary


def run_clustering(input_handle: TextIO, output_handle: TextIO,
                   config: ClusterConfig,
                   reporter: Optional[ProgressReporter] = None) -> RunSummary:
    """Cluster the records in input_handle and stream clustered records to output_handle.

    Pipeline:
        1. Parse records and apply the abundance filter
        2. Greedy clustering, one cluster per engine step
        3. Each cluster is written and reported as soon as it is finalized

    Args:
        input_handle: Upstream ranked-abundance FASTA
        output_handle: Destination for clustered records
        config: Validated clustering parameters
        reporter: Progress reporter (default: one built from config.quiet)

    Returns:
        RunSummary with parse and clustering counts
    """
    config.validate()
    start_time = time.time()
    summary = RunSummary()

    parsed = read_entries(input_handle, config.abundance_filter)
    summary.records_parsed = parsed.records_parsed
    summary.records_skipped = parsed.records_skipped
    summary.entries_filtered = parsed.entries_filtered
    summary.entries_eligible = len(parsed.entries)

    logging.info(f"Loaded {parsed.records_parsed} records: {len(parsed.entries)} eligible, "
                 f"{parsed.entries_filtered} at or below abundance filter ({config.abundance_filter})")
    if parsed.records_skipped:
        logging.info(f"Skipped {parsed.records_skipped} malformed records")
    if not parsed.entries:
        logging.warning("No sequences passed parsing and filtering. Nothing to cluster.")

    engine = GreedyClusterEngine(
        parsed.entries,
        threshold=config.threshold,
        max_clusters=config.max_clusters,
        distance=get_distance_function(config.distance_method, max_distance=config.threshold),
        threads=config.threads,
    )
    writer = ClusterWriter(output_handle)

    owns_reporter = reporter is None
    if owns_reporter:
        reporter = ProgressReporter(len(parsed.entries), quiet=config.quiet)

    try:
        for cluster in engine:
            writer.write_cluster(cluster)
            reporter.report(cluster)
            summary.clusters_emitted += 1
            summary.entries_clustered += cluster.size
            summary.total_reads += cluster.total_reads
            summary.total_rpm += cluster.total_rpm
    finally:
        if owns_reporter:
            reporter.close()

    summary.entries_unclustered = len(engine.remaining)
    summary.elapsed_seconds = time.time() - start_time

    if summary.entries_unclustered:
        logging.info(f"Reached maximum of {config.max_clusters} clusters; "
                     f"{summary.entries_unclustered} sequences left unclustered")
    logging.info(f"Final: {summary.clusters_emitted} clusters covering {summary.entries_clustered} "
                 f"sequences ({summary.total_reads} reads) in {summary.elapsed_seconds:.2f}s")
    return summary


def write_summary(summary: RunSummary, config: ClusterConfig, path: str,
                  input_file: Optional[str] = None, output_file: Optional[str] = None) -> None:
    """Write run parameters and counts to a JSON file."""
    metadata = {
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "parameters": config.to_dict(),
        "input_file": input_file,
        "output_file": output_file,
        "summary": {
            "records_parsed": summary.records_parsed,
            "records_skipped": summary.records_skipped,
            "entries_filtered": summary.entries_filtered,
            "entries_eligible": summary.entries_eligible,
            "clusters_emitted": summary.clusters_emitted,
            "entries_clustered": summary.entries_clustered,
            "entries_unclustered": summary.entries_unclustered,
            "total_reads": summary.total_reads,
            "total_rpm": round(summary.total_rpm, 4),
            "elapsed_seconds": round(summary.elapsed_seconds, 3),
        },
    }

    with open(path, 'w') as f:
        json.dump(metadata, f, indent=2)

    logging.debug(f"Wrote run summary to {path}")


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Greedy edit-distance clustering of ranked, abundance-annotated sequences"
    )
    parser.add_argument("-i", "--input", required=True,
                        help="Input FASTA of ranked records (><rank>-<reads>-<rpm>)")
    parser.add_argument("-o", "--output", required=True,
                        help="Output FASTA for clustered records")
    parser.add_argument("-d", "--distance", type=int, required=True,
                        help="Maximum edit distance from the seed to join a cluster")
    parser.add_argument("-f", "--filter", type=float, default=0.0,
                        help="Exclude sequences with reads at or below this value (default: 0)")
    parser.add_argument("-c", "--max-clusters", type=int, default=None,
                        help="Stop after this many clusters (default: unbounded)")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Suppress per-cluster progress output")
    parser.add_argument("--distance-method", choices=DISTANCE_METHODS, default="edlib",
                        help="Edit distance implementation (default: edlib)")
    parser.add_argument("--threads", type=int, default=1, metavar="N",
                        help="Threads for distance computation against each seed (default: 1)")
    parser.add_argument("--summary-json", metavar="PATH",
                        help="Write run parameters and counts to this JSON file")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--version", action="version",
                        version=f"Aptacluster {__version__}",
                        help="Show program's version number and exit")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)

    log_format = '%(asctime)s - %(levelname)s - %(message)s'
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=log_format
    )

    try:
        config = ClusterConfig.from_args(args).validate()
    except ConfigurationError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.info(f"Clustering with edit distance <= {config.threshold}, "
                 f"filter > {config.abundance_filter}, "
                 f"max clusters {config.max_clusters if config.max_clusters else 'unbounded'}")

    try:
        input_handle = open(args.input)
    except OSError as e:
        logging.error(f"Cannot open input file '{args.input}': {e}")
        sys.exit(1)

    with input_handle:
        try:
            output_handle = open(args.output, 'w')
        except OSError as e:
            logging.error(f"Cannot open output file '{args.output}': {e}")
            sys.exit(1)

        logging.info(f"Reading sequences from {args.input}")
        with output_handle:
            summary = run_clustering(input_handle, output_handle, config)

    logging.info(f"Wrote clustered sequences to {args.output}")

    if args.summary_json:
        write_summary(summary, config, args.summary_json,
                      input_file=args.input, output_file=args.output)


if __name__ == "__main__":
    main()

"""
Aptacluster: greedy edit-distance clustering of ranked, abundance-annotated sequences.

A Python tool for collapsing sequencing noise and point mutations around dominant
seed sequences in high-throughput selection experiments (aptamer/SELEX pools).
"""

__version__ = "0.1.0"

from .core import main as aptacluster_main, run_clustering
from .engine import GreedyClusterEngine

__all__ = ["aptacluster_main", "run_clustering", "GreedyClusterEngine", "__version__"]

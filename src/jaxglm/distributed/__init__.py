"""Partitioned datasets and tree aggregation."""

from jaxglm.distributed.aggregate import PartialSums, add_partials, tree_aggregate
from jaxglm.distributed.backend import LocalBackend, ReductionBackend
from jaxglm.distributed.dataset import DistributedDataset

__all__ = [
    "DistributedDataset",
    "LocalBackend",
    "ReductionBackend",
    "PartialSums",
    "add_partials",
    "tree_aggregate",
]

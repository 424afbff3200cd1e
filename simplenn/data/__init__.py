"""Dataset registry and built-in datasets."""

# Ensure built-in datasets register themselves when the package is imported.
from . import clusters as _clusters  # noqa: F401
from . import csv_examples as _csv_examples  # noqa: F401
from .clusters import examples_from_arrays, make_two_clusters
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetSpec",
    "available_datasets",
    "examples_from_arrays",
    "get_dataset",
    "make_two_clusters",
    "register_dataset",
]

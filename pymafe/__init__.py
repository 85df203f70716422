"""PyMAFE: Python Meta-Analysis with Fixed Effects."""

from importlib.metadata import PackageNotFoundError, version

from .core import Dataset, meta_analysis
from .effectsize import TwoSampleEffectSizeConverter, compute_measure
from .exceptions import InvalidInputError

__all__ = [
    "Dataset",
    "meta_analysis",
    "TwoSampleEffectSizeConverter",
    "compute_measure",
    "InvalidInputError",
]

try:
    __version__ = version("pymafe")
except PackageNotFoundError:
    __version__ = "unknown"

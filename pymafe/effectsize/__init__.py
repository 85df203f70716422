"""Tools for computing two-sample effect-size measures."""
from .base import TwoSampleEffectSizeConverter, compute_measure

__all__ = [
    "TwoSampleEffectSizeConverter",
    "compute_measure",
]

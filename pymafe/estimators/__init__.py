"""Estimators for fixed-effect meta-analyses."""
from .estimators import BaseEstimator, WeightedLeastSquares

__all__ = [
    "BaseEstimator",
    "WeightedLeastSquares",
]

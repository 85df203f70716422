"""Datasets for PyMAFE tests and examples."""
from .case_study import case_study

__all__ = ["case_study"]

"""Fixtures for tests."""
import numpy as np
import pytest

from pymafe import Dataset
from pymafe.datasets import case_study
from pymafe.io import effect_size_table


@pytest.fixture(scope="package")
def variables():
    """Build basic numpy variables."""
    y = np.array([[-1, 0.5, 0.5, 0.5, 1, 1, 2, 10]]).T
    v = np.array([[1, 1, 2.4, 0.5, 1, 1, 1.2, 1.5]]).T
    return (y, v)


@pytest.fixture(scope="package")
def dataset(variables):
    """Build a Dataset compiled from the variables fixture."""
    return Dataset(*variables)


@pytest.fixture(scope="package")
def dataset_2d(variables):
    """Build a Dataset with three parallel sets of estimates."""
    y, v = variables
    y = np.repeat(y, 3, axis=1)
    y[:, 1] = np.random.randint(-10, 10, size=len(y))
    v = np.repeat(v, 3, axis=1)
    v[:, 1] = np.random.randint(2, 10, size=len(v))
    return Dataset(y, v)


@pytest.fixture(scope="package")
def two_samp_data():
    """Build two-sample summary statistics."""
    return {
        "m1": np.array([4, 2]),
        "sd1": np.sqrt(np.array([1, 9])),
        "n1": np.array([12, 15]),
        "m2": np.array([5, 2.5]),
        "sd2": np.sqrt(np.array([4, 16])),
        "n2": np.array([12, 16]),
    }


@pytest.fixture(scope="package")
def base_studies():
    """Load the six-study case-study table."""
    df, _ = case_study()
    return df


@pytest.fixture(scope="package")
def expanded_studies():
    """Load the seven-study case-study table."""
    df, _ = case_study(expanded=True)
    return df


@pytest.fixture(scope="package")
def base_effect_sizes(base_studies):
    """Compute Hedges' g for the six-study table."""
    return effect_size_table(base_studies)


@pytest.fixture(scope="package")
def expanded_effect_sizes(expanded_studies):
    """Compute Hedges' g for the seven-study table."""
    return effect_size_table(expanded_studies)

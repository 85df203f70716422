"""Tests for pymafe.estimators.estimators."""
import numpy as np
import pytest

from pymafe import Dataset, InvalidInputError
from pymafe.estimators import WeightedLeastSquares


def test_weighted_least_squares_estimator(dataset):
    """Test WeightedLeastSquares estimator."""
    est = WeightedLeastSquares().fit_dataset(dataset)
    results = est.summary()
    beta = results.fe_params
    fe_stats = results.get_fe_stats()

    # Check output shapes
    assert beta.shape == (1, 1)
    for key in ("est", "se", "ci_l", "ci_u", "z", "p"):
        assert fe_stats[key].shape == (1, 1)

    # Check output values
    assert np.allclose(beta.ravel(), [1.3947], atol=1e-4)
    assert np.allclose(fe_stats["se"].ravel(), [0.3554], atol=1e-4)


def test_2d_weighted_least_squares(dataset_2d):
    """Test WeightedLeastSquares estimator on 2D Dataset."""
    results = WeightedLeastSquares().fit_dataset(dataset_2d).summary()
    beta = results.fe_params
    fe_stats = results.get_fe_stats()

    assert beta.shape == (1, 3)
    assert fe_stats["se"].shape == (1, 3)
    assert results.get_heterogeneity_stats()["Q"].shape == (3,)

    # First and third sets are identical
    assert np.allclose(beta[0, [0, 2]], 1.3947, atol=1e-4)


def test_fit_arrays(variables):
    """fit() accepts 1-d arrays and resets the dataset."""
    y, v = variables
    est = WeightedLeastSquares().fit(y=y[:, 0], v=v[:, 0])
    assert est.params_["fe_params"].shape == (1, 1)
    assert est.dataset_ is None
    results = est.summary()
    assert results.labels[0] == "Study 1"

    # positional arguments work too
    est = WeightedLeastSquares().fit(y[:, 0], v[:, 0])
    assert np.allclose(est.params_["fe_params"], 1.3947, atol=1e-4)


def test_fit_rejects_bad_inputs():
    """Empty, non-positive or non-finite inputs raise InvalidInputError."""
    est = WeightedLeastSquares()
    with pytest.raises(InvalidInputError):
        est.fit([], [])
    with pytest.raises(InvalidInputError):
        est.fit([0.2, 0.3], [0.1, 0.0])
    with pytest.raises(InvalidInputError):
        est.fit([0.2, 0.3], [0.1, -0.1])
    with pytest.raises(InvalidInputError):
        est.fit([0.2, np.inf], [0.1, 0.1])
    with pytest.raises(InvalidInputError):
        est.fit([0.2, 0.3], [0.1, 0.1, 0.1])
    with pytest.raises(InvalidInputError):
        est.fit([0.2, 0.3], None)


def test_estimator_summary(dataset):
    """Test Estimator's summary method."""
    est = WeightedLeastSquares()
    # Fails if we haven't fitted yet
    with pytest.raises(ValueError):
        est.summary()

    est.fit_dataset(dataset)
    assert est.dataset_ is dataset
    assert est.summary().alpha == 0.05
    assert est.summary(alpha=0.1).alpha == 0.1


def test_single_study():
    """A single study is its own summary."""
    results = WeightedLeastSquares().fit_dataset(Dataset([0.42], [0.04])).summary()
    assert np.isclose(results.fe_params.item(), 0.42)
    assert np.isclose(results.fe_se.item(), 0.2)


def test_permutation_invariance(variables):
    """Pooling does not depend on study order, up to rounding."""
    y, v = variables
    order = np.random.permutation(len(y))
    first = WeightedLeastSquares().fit(y, v).params_
    second = WeightedLeastSquares().fit(y[order], v[order]).params_
    assert np.allclose(first["fe_params"], second["fe_params"], rtol=0, atol=1e-12)
    assert np.allclose(first["inv_cov"], second["inv_cov"], rtol=0, atol=1e-12)


def test_adding_a_study_moves_summary_toward_it(variables):
    """The summary shifts toward a new study in proportion to its weight."""
    y, v = variables
    old = WeightedLeastSquares().fit(y, v).params_["fe_params"].item()
    w_total = (1 / v).sum()

    for y_new, v_new in [(5.0, 0.5), (-3.0, 2.0), (1.0, 0.1)]:
        new = WeightedLeastSquares().fit(np.append(y, y_new), np.append(v, v_new))
        new = new.params_["fe_params"].item()
        w_new = 1 / v_new
        expected = old + w_new / (w_total + w_new) * (y_new - old)
        assert np.isclose(new, expected)
        assert np.sign(new - old) == np.sign(y_new - old)

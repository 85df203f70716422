"""Fixed-effect meta-analysis estimator classes."""

import logging
from abc import ABCMeta, abstractmethod
from inspect import getfullargspec

import numpy as np
import wrapt

from ..exceptions import InvalidInputError
from ..results import MetaAnalysisResults
from ..stats import ensure_2d, weighted_mean
from ..utils import _check_finite, _check_inputs_shape, _check_positive

logger = logging.getLogger(__name__)


@wrapt.decorator
def _validate_effect_sizes(wrapped, instance, args, kwargs):
    # Decorator for fit() methods of Estimator classes. Coerces y/v to 2-d
    # arrays and rejects empty or degenerate inputs before any arithmetic, so
    # estimators never produce NaN or infinite summaries.
    spec = getfullargspec(wrapped)
    call_args = dict(zip(spec.args[1:], args))
    call_args.update(kwargs)

    y = call_args.get("y")
    if y is None:
        raise InvalidInputError("No study-level estimates (y) were provided.")
    y = ensure_2d(np.asarray(y, dtype=float))
    if y.shape[0] == 0:
        raise InvalidInputError("Cannot pool an empty collection of effect sizes.")
    _check_finite(y, "y")
    call_args["y"] = y

    if call_args.get("v") is not None:
        v = ensure_2d(np.asarray(call_args["v"], dtype=float))
        _check_inputs_shape(y, v, "y", "v", row=True, column=True)
        _check_finite(v, "v")
        _check_positive(v, "v")
        call_args["v"] = v

    return wrapped(**call_args)


class BaseEstimator(metaclass=ABCMeta):
    """Base class for estimators."""

    # A class-level mapping from Dataset attributes to fit() arguments. Used by
    # fit_dataset() for estimators that take non-standard arguments. Keys are
    # fit() argument names and values are Dataset attribute names.
    _dataset_attr_map = {}

    @abstractmethod
    def fit(self, *args, **kwargs):
        """Fit the estimator to data."""

    def fit_dataset(self, dataset, *args, **kwargs):
        """Apply the current estimator to the passed Dataset container.

        A convenience interface that wraps fit() and automatically aligns the
        variables held in a Dataset with the required arguments.

        Parameters
        ----------
        dataset : :obj:`~pymafe.core.Dataset`
            A Dataset instance holding the data.
        *args
            Optional positional arguments to pass onto the :meth:`~fit` method.
        **kwargs
            Optional keyword arguments to pass onto the :meth:`~fit` method.
        """
        all_kwargs = {}
        spec = getfullargspec(self.fit)
        n_kw = len(spec.defaults) if spec.defaults else 0
        n_args = len(spec.args) - n_kw - 1

        for i, name in enumerate(spec.args[1:]):
            # Check for remapped name
            attr_name = self._dataset_attr_map.get(name, name)
            if i >= n_args:
                all_kwargs[name] = getattr(dataset, attr_name, spec.defaults[i - n_args])
            else:
                all_kwargs[name] = getattr(dataset, attr_name)

        all_kwargs.update(kwargs)
        self.fit(*args, **all_kwargs)
        self.dataset_ = dataset

        return self

    def summary(self, alpha=0.05):
        """Generate a MetaAnalysisResults object for the fitted estimator.

        Parameters
        ----------
        alpha : :obj:`float`, optional
            Desired alpha level (CIs will have 1 - alpha coverage). Default = 0.05.

        Returns
        -------
        :obj:`~pymafe.results.MetaAnalysisResults`
        """
        if not hasattr(self, "params_"):
            name = self.__class__.__name__
            raise ValueError(
                f"This {name} instance hasn't been fitted yet. Please "
                "call fit() before summary()."
            )
        p = self.params_
        return MetaAnalysisResults(
            self, self.dataset_, p["y"], p["v"], p["fe_params"], p["inv_cov"], alpha=alpha
        )


class WeightedLeastSquares(BaseEstimator):
    """Inverse-variance weighted fixed-effect meta-analysis.

    Provides the weighted least-squares estimate of the common effect under the
    assumption that all studies estimate one true effect and differ only by
    sampling error (tau^2 = 0).

    References
    ----------
    Brockwell, S. E., & Gordon, I. R. (2001). A comparison of statistical
    methods for meta-analysis. Statistics in Medicine, 20(6), 825-840.
    https://doi.org/10.1002/sim.650

    Notes
    -----
    This estimator accepts 2-D inputs for y and v--i.e., it can produce
    estimates simultaneously for multiple independent sets of y/v values
    (use the 2nd dimension for the parallel iterates).
    """

    @_validate_effect_sizes
    def fit(self, y, v):
        """Fit the estimator to data.

        Parameters
        ----------
        y : :obj:`numpy.ndarray` of shape (K,) or (K, S)
            Study-level estimates.
        v : :obj:`numpy.ndarray` of shape (K,) or (K, S)
            Study-level sampling variances. All values must be > 0.

        Returns
        -------
        :obj:`~pymafe.estimators.WeightedLeastSquares`
        """
        if v is None:
            raise InvalidInputError("Sampling variances (v) are required for weighting.")

        beta, inv_cov = weighted_mean(y, v, return_cov=True)
        logger.debug("Fitted fixed-effect model to %d studies x %d set(s).", *y.shape)

        self.params_ = {"fe_params": beta, "inv_cov": inv_cov, "y": y, "v": v}
        self.dataset_ = None
        return self

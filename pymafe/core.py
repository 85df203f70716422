"""Core classes and functions."""

import logging

import numpy as np
import pandas as pd

from .estimators import WeightedLeastSquares
from .exceptions import InvalidInputError
from .stats import ensure_2d
from .utils import _check_finite, _check_inputs_shape, _check_positive, _listify

logger = logging.getLogger(__name__)


class Dataset:
    """Container for input data and arguments to estimators.

    Parameters
    ----------
    y : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level estimates with length K, or the name of the column in data
        containing the y values.
        Default = None.
    v : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level sampling variances with length K, or the name of the column
        in data containing v values.
        Default = None.
    n : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level (total) sample sizes, or the name of the corresponding column
        in ``data``.
        Default = None.
    data : None or :obj:`pandas.DataFrame`, optional
        A pandas DataFrame containing y, v, n and/or label values.
        By default, columns are expected to have the same names as arguments
        (e.g., the y values will be expected in the 'y' column).
        This can be modified by passing strings giving column names to any of the ``y``,
        ``v``, ``n``, or ``labels`` arguments.
        Default = None.
    labels : None or :obj:`list` of :obj:`str` or :obj:`str`, optional
        Study labels used in tables and plots, or the name of the column in data
        containing them. If None, the 'study' column of ``data`` is used when present,
        and generic labels ("Study 1", "Study 2", ...) otherwise.
        Default = None.

    Notes
    -----
    Studies are kept in the order given. Both y and v may be 2d (K x S), in which case
    the S columns are treated as independent parallel datasets sharing the same studies.
    """

    def __init__(self, y=None, v=None, n=None, data=None, labels=None):
        if y is None and data is None:
            raise ValueError(
                "If no y values are provided, a pandas DataFrame "
                "containing a 'y' column must be passed to the "
                "data argument."
            )

        # Extract columns from DataFrame
        if data is not None:
            y = data.loc[:, y or "y"].values

            if (v is not None) or ("v" in data.columns):
                v = data.loc[:, v or "v"].values

            if (n is not None) or ("n" in data.columns):
                n = data.loc[:, n or "n"].values

            if isinstance(labels, str):
                labels = data.loc[:, labels].astype(str).tolist()
            elif labels is None and "study" in data.columns:
                labels = data.loc[:, "study"].astype(str).tolist()

        if v is None:
            raise ValueError("Sampling variances (v) are required for a fixed-effect analysis.")

        self.y = ensure_2d(np.asarray(y, dtype=float))
        self.v = ensure_2d(np.asarray(v, dtype=float))
        self.n = ensure_2d(n)

        if self.y.shape[0] == 0:
            raise InvalidInputError("Cannot build a Dataset from zero studies.")

        _check_inputs_shape(self.y, self.v, "y", "v", row=True, column=True)
        _check_inputs_shape(self.y, self.n, "y", "n", row=True)
        _check_finite(self.y, "y")
        _check_finite(self.v, "v")
        _check_positive(self.v, "v")

        self.labels = self._get_labels(labels)

    def _get_labels(self, labels):
        k = self.y.shape[0]
        if labels is None:
            return [f"Study {i + 1}" for i in range(k)]

        labels = [str(lab) for lab in _listify(labels)]
        if len(labels) != k:
            raise InvalidInputError(
                f"Number of labels ({len(labels)}) does not match number of studies ({k})."
            )
        return labels

    @property
    def k(self):
        """Number of studies."""
        return self.y.shape[0]

    def to_df(self):
        """Convert the dataset to a pandas DataFrame.

        Returns
        -------
        :obj:`pandas.DataFrame`
            A DataFrame containing the labels and the y, v and n values.
        """
        if self.y.shape[1] == 1:
            df = pd.DataFrame({"study": self.labels, "y": self.y[:, 0], "v": self.v[:, 0]})

            if self.n is not None:
                df["n"] = self.n[:, 0]

        else:
            all_dfs = []
            for i_set in range(self.y.shape[1]):
                df = pd.DataFrame(
                    {
                        "set": np.full(self.y.shape[0], i_set),
                        "study": self.labels,
                        "y": self.y[:, i_set],
                        "v": self.v[:, i_set],
                    }
                )

                if self.n is not None:
                    # n may be shared across sets
                    df["n"] = self.n[:, min(i_set, self.n.shape[1] - 1)]

                all_dfs.append(df)

            df = pd.concat(all_dfs, axis=0)

        return df


def meta_analysis(y=None, v=None, n=None, data=None, labels=None, method="FE", alpha=0.05):
    """Fit a fixed-effect meta-analysis to provided data.

    Parameters
    ----------
    y : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level estimates with length K, or the name of the column in data
        containing the y values.
        Default = None.
    v : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level variances with length K, or the name of the column in data
        containing v values.
        Default = None.
    n : None or :obj:`numpy.ndarray` of shape (K,) or :obj:`str`, optional
        1d array of study-level sample sizes (length K), or the name of the corresponding column
        in ``data``.
        Default = None.
    data : None or :obj:`pandas.DataFrame` or :obj:`~pymafe.core.Dataset`, optional
        If a Dataset instance is passed, the y, v, n and labels arguments are ignored,
        and data is passed directly to the estimator.
        If a pandas DataFrame, y, v, n and/or label values are taken from the DF columns.
    labels : None or :obj:`list` of :obj:`str` or :obj:`str`, optional
        Study labels, or the name of the column in ``data`` containing them.
        Default = None.
    method : {"FE", "WLS"}, optional
        Name of estimation method. Both names refer to inverse-variance weighted least
        squares, i.e., the fixed-effect model. Default = 'FE'.
    alpha : :obj:`float`, optional
        Desired alpha level (CIs will have 1 - alpha coverage). Default = 0.05.

    Returns
    -------
    :obj:`~pymafe.results.MetaAnalysisResults`
        The pooled results. A new, independent object is returned on every call.
    """
    if data is None or not isinstance(data, Dataset):
        data = Dataset(y, v, n, data, labels)

    est_cls = {
        "fe": WeightedLeastSquares,
        "wls": WeightedLeastSquares,
    }.get(method.lower())
    if est_cls is None:
        raise ValueError(f"Unknown method '{method}'. Valid values are 'FE' and 'WLS'.")

    logger.info("Pooling %d studies with a fixed-effect model.", data.k)
    est = est_cls()
    est.fit_dataset(data)
    return est.summary(alpha=alpha)

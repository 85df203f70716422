"""Miscellaneous statistical functions."""

import numpy as np
import scipy.stats as ss


def weighted_mean(y, v, return_cov=False):
    """Compute the 2-D inverse-variance weighted mean.

    This is the weighted least-squares solution for an intercept-only model,
    i.e., the fixed-effect summary estimate.

    Parameters
    ----------
    y : :obj:`numpy.ndarray`
        2-d array of estimates (studies x parallel datasets)
    v : :obj:`numpy.ndarray`
        2-d array of sampling variances
    return_cov : :obj:`bool`, optional
        Whether or not to return the variance of the estimate.
        Default = False.

    Returns
    -------
    params[, cov]
        If return_cov is True, returns both the estimates (shape 1 x parallel datasets) and
        their variances (shape 1 x 1 x parallel datasets); if False, only the estimates.

    Notes
    -----
    Sums are taken along the study axis in input order, so repeated calls on the same
    inputs are bit-for-bit reproducible.
    """
    w = 1.0 / v
    w_sum = w.sum(0)
    beta = ((w * y).sum(0) / w_sum)[None, :]

    if not return_cov:
        return beta

    cov = (1.0 / w_sum)[None, None, :]
    return beta, cov


def ensure_2d(arr):
    """Ensure the passed array has 2 dimensions."""
    if arr is None:
        return arr

    arr = np.array(arr)

    if arr.ndim == 0:
        arr = arr[None, None]
    elif arr.ndim == 1:
        arr = arr[:, None]

    return arr


def q_stat(y, v, beta=None):
    """Calculate Cochran's Q-statistic for a fixed-effect model.

    Parameters
    ----------
    y : :obj:`numpy.ndarray`
        2d array of study-level estimates (studies x parallel datasets)
    v : :obj:`numpy.ndarray`
        2d array of study-level variances
    beta : None or :obj:`numpy.ndarray`, optional
        Fixed-effect summary estimate (1 x parallel datasets). If None, it is computed
        from y and v. Default = None.

    Returns
    -------
    :obj:`numpy.ndarray`
        1d array giving the value of Cochran's Q-statistic for each parallel dataset.
    """
    if beta is None:
        beta = weighted_mean(y, v)
    w = 1.0 / v
    return (w * (y - beta) ** 2).sum(0)


def hedges_correction(df):
    """Compute the approximate small-sample bias correction factor J.

    Parameters
    ----------
    df : :obj:`numpy.ndarray` or :obj:`float`
        Degrees of freedom of the pooled standard deviation (n1 + n2 - 2).

    Returns
    -------
    :obj:`numpy.ndarray` or :obj:`float`
        ``1 - 3 / (4 * df - 1)``. Approaches 1 as df grows.
    """
    return 1.0 - 3.0 / (4.0 * np.asarray(df, dtype=float) - 1.0)


def pooled_sd(sd1, sd2, n1, n2):
    """Compute the pooled within-group standard deviation of two samples."""
    n1, n2 = np.asarray(n1, dtype=float), np.asarray(n2, dtype=float)
    sd1, sd2 = np.asarray(sd1, dtype=float), np.asarray(sd2, dtype=float)
    return np.sqrt(((n1 - 1) * sd1**2 + (n2 - 1) * sd2**2) / (n1 + n2 - 2))


def var_to_ci(y, v, alpha=0.05):
    """Convert sampling variance to a normal-theory CI.

    Parameters
    ----------
    y : :obj:`numpy.ndarray` or :obj:`float`
        Estimates.
    v : :obj:`numpy.ndarray` or :obj:`float`
        Sampling variances of the estimates.
    alpha : :obj:`float`, optional
        The CI has 1 - alpha coverage. Default = 0.05 (i.e., +/- 1.96 SE).

    Returns
    -------
    lower, upper
    """
    term = ss.norm.ppf(1 - alpha / 2) * np.sqrt(v)
    return y - term, y + term

"""Tools for representing and manipulating meta-analysis results."""

import warnings

import numpy as np
import pandas as pd
import scipy.stats as ss

from .stats import q_stat, var_to_ci


def _frozen(arr):
    arr = np.array(arr, dtype=float)
    arr.setflags(write=False)
    return arr


class MetaAnalysisResults:
    """Container for results generated by fixed-effect estimators.

    Results are immutable snapshots: every array attribute is read-only, and
    re-running an analysis on a changed set of studies produces a new object.

    Parameters
    ----------
    estimator : :obj:`~pymafe.estimators.BaseEstimator`
        The estimator used to produce the results.
    dataset : :obj:`~pymafe.core.Dataset` or None
        The Dataset used to produce the results, if any. Used for study labels.
    y : :obj:`numpy.ndarray` of shape (K, S)
        Study-level estimates the model was fitted to.
    v : :obj:`numpy.ndarray` of shape (K, S)
        Study-level sampling variances the model was fitted to.
    fe_params : :obj:`numpy.ndarray` of shape (1, S)
        Fixed-effect summary estimates.
    fe_cov : :obj:`numpy.ndarray` of shape (1, 1, S)
        Sampling variance of the summary estimates.
    alpha : :obj:`float`, optional
        Alpha level for confidence intervals and the reported homogeneity
        annotation. Default = 0.05.
    """

    def __init__(self, estimator, dataset, y, v, fe_params, fe_cov, alpha=0.05):
        self.estimator = estimator
        self.dataset = dataset
        self.y = _frozen(y)
        self.v = _frozen(v)
        self.fe_params = _frozen(fe_params)
        self.fe_cov = _frozen(fe_cov)
        self.alpha = alpha

    @property
    def k(self):
        """Number of studies."""
        return self.y.shape[0]

    @property
    def labels(self):
        """Study labels, in input order."""
        if self.dataset is not None:
            return list(self.dataset.labels)
        return [f"Study {i + 1}" for i in range(self.k)]

    @property
    def fe_se(self):
        """Standard error of the fixed-effect summary, shape (1, S)."""
        return np.sqrt(self.fe_cov[0])

    @property
    def weights(self):
        """Inverse-variance weights, shape (K, S). Their sum equals 1 / SE^2."""
        return 1.0 / self.v

    def get_fe_stats(self):
        """Get fixed-effect statistics.

        Returns
        -------
        :obj:`dict`
            Keys are 'est', 'se', 'ci_l', 'ci_u', 'z' and 'p'; each value is an array of
            shape (1, S).
        """
        beta, se = self.fe_params, self.fe_se
        z_se = ss.norm.ppf(1 - self.alpha / 2)
        z = beta / se

        return {
            "est": beta,
            "se": se,
            "ci_l": beta - z_se * se,
            "ci_u": beta + z_se * se,
            "z": z,
            "p": 2 * ss.norm.sf(np.abs(z)),
        }

    def get_heterogeneity_stats(self):
        """Compute the homogeneity test and related statistics.

        Returns
        -------
        :obj:`dict`
            - ``"Q"``: Cochran's Q, shape (S,).
            - ``"df"``: degrees of freedom, k - 1.
            - ``"p(Q)"``: p-value of Q against a chi-square distribution with k - 1 df.
            - ``"I^2"``: percentage of variability beyond sampling error.
            - ``"H"``: square root of Q / df.
            - ``"homogeneous"``: boolean array; True where p(Q) > alpha. This is a
              reporting annotation and does not alter the fitted model.
            - ``"degenerate"``: True when k == 1, in which case Q, p(Q), I^2, H and
              homogeneous are None.
        """
        df = self.k - 1
        if df == 0:
            warnings.warn(
                "Only one study was provided; the homogeneity test has 0 degrees "
                "of freedom and is not defined."
            )
            return {
                "Q": None,
                "df": 0,
                "p(Q)": None,
                "I^2": None,
                "H": None,
                "homogeneous": None,
                "degenerate": True,
            }

        q = q_stat(self.y, self.v, self.fe_params)
        p = ss.chi2.sf(q, df)
        with np.errstate(divide="ignore", invalid="ignore"):
            i2 = np.where(q > 0, np.maximum(0.0, (q - df) / q) * 100, 0.0)
        h = np.sqrt(q / df)

        return {
            "Q": q,
            "df": df,
            "p(Q)": p,
            "I^2": i2,
            "H": h,
            "homogeneous": p > self.alpha,
            "degenerate": False,
        }

    def get_study_stats(self, set_index=0):
        """Tabulate per-study estimates, CIs and weights.

        Parameters
        ----------
        set_index : :obj:`int`, optional
            Which parallel dataset to tabulate. Default = 0.

        Returns
        -------
        :obj:`pandas.DataFrame`
            One row per study, in input order, with columns 'study', 'estimate', 'variance',
            'se', 'ci_l', 'ci_u', 'weight' and 'weight (%)'.
        """
        y, v = self.y[:, set_index], self.v[:, set_index]
        w = self.weights[:, set_index]
        ci_l, ci_u = var_to_ci(y, v, self.alpha)
        return pd.DataFrame(
            {
                "study": self.labels,
                "estimate": y,
                "variance": v,
                "se": np.sqrt(v),
                "ci_l": ci_l,
                "ci_u": ci_u,
                "weight": w,
                "weight (%)": 100 * w / w.sum(),
            }
        )

    def to_df(self):
        """Return a DataFrame summarizing the pooled estimate(s).

        Returns
        -------
        :obj:`pandas.DataFrame`
            One row per parallel dataset, with columns 'name', 'estimate', 'se', 'z-score',
            'p-value', the lower and upper CI bounds, 'Q', 'df', 'p(Q)' and 'k'.
        """
        fe_stats = self.get_fe_stats()
        n_sets = self.fe_params.shape[1]

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            het = self.get_heterogeneity_stats()

        missing = np.full(n_sets, np.nan)
        ci_l = "ci_{:.6g}".format(self.alpha / 2)
        ci_u = "ci_{:.6g}".format(1 - self.alpha / 2)
        df = pd.DataFrame(
            {
                "name": ["intercept"] * n_sets,
                "estimate": fe_stats["est"][0],
                "se": fe_stats["se"][0],
                "z-score": fe_stats["z"][0],
                "p-value": fe_stats["p"][0],
                ci_l: fe_stats["ci_l"][0],
                ci_u: fe_stats["ci_u"][0],
                "Q": missing if het["degenerate"] else het["Q"],
                "df": het["df"],
                "p(Q)": missing if het["degenerate"] else het["p(Q)"],
                "k": self.k,
            }
        )
        return df

    def plot_forest(self, **kwargs):
        """Draw a forest plot. See :func:`pymafe.plotting.plot_forest`."""
        from .plotting import plot_forest

        return plot_forest(self, **kwargs)

    def plot_funnel(self, **kwargs):
        """Draw a funnel plot. See :func:`pymafe.plotting.plot_funnel`."""
        from .plotting import plot_funnel

        return plot_funnel(self, **kwargs)

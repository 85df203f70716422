"""Tools for effect size computation/conversion."""

import logging
from functools import partial

import numpy as np

from ..core import Dataset
from ..exceptions import InvalidInputError
from ..stats import hedges_correction, pooled_sd
from ..utils import _check_finite, _check_integer, _check_positive

logger = logging.getLogger(__name__)

TWO_SAMPLE_VARS = ("m1", "m2", "sd1", "sd2", "n1", "n2")


def _sd_pooled(sd1, sd2, n1, n2, **kwargs):
    return pooled_sd(sd1, sd2, n1, n2)


def _j(n1, n2, **kwargs):
    return hedges_correction(n1 + n2 - 2)


def _d(m1, m2, sd_pooled, **kwargs):
    return (m1 - m2) / sd_pooled


def _smd(d, j, **kwargs):
    return j * d


def _v_d(d, n1, n2, **kwargs):
    return (n1 + n2) / (n1 * n2) + d**2 / (2 * (n1 + n2))


def _v_smd(smd, n1, n2, **kwargs):
    return (n1 + n2) / (n1 * n2) + smd**2 / (2 * (n1 + n2))


def _rmd(m1, m2, **kwargs):
    return m1 - m2


def _v_rmd(sd1, sd2, n1, n2, **kwargs):
    return sd1**2 / n1 + sd2**2 / n2


# Each derived statistic maps to (function, names of the quantities it depends on).
# get() resolves dependencies recursively and caches every intermediate value.
_EXPRESSIONS = {
    "sd_pooled": (_sd_pooled, ("sd1", "sd2", "n1", "n2")),
    "j": (_j, ("n1", "n2")),
    "d": (_d, ("m1", "m2", "sd_pooled")),
    "smd": (_smd, ("d", "j")),
    "v_d": (_v_d, ("d", "n1", "n2")),
    "v_smd": (_v_smd, ("smd", "n1", "n2")),
    "rmd": (_rmd, ("m1", "m2")),
    "v_rmd": (_v_rmd, ("sd1", "sd2", "n1", "n2")),
}


class TwoSampleEffectSizeConverter:
    """Effect size converter for two-sample comparisons.

    Parameters
    ----------
    data : :obj:`pandas.DataFrame`, optional
        Optional pandas DataFrame to extract variables from.
        Column names must match the controlled names listed below for
        kwargs. If additional kwargs are provided, they will take
        precedence over the values in the data frame.
    m1 : array-like
        Means for group 1 (treatment)
    m2 : array-like
        Means for group 2 (control)
    sd1 : array-like
        Standard deviations for group 1
    sd2 : array-like
        Standard deviations for group 2
    n1 : array-like
        Sample sizes for group 1
    n2 : array-like
        Sample sizes for group 2

    Notes
    -----
    All input variables are assumed to reflect study- or analysis-level
    summaries, and are *not* individual data points. The lengths of all array
    inputs must match; scalars are broadcast. All variables must be passed in
    as pairs (e.g., if m1 is provided, m2 must also be provided).

    It is assumed that the two groups are independent samples. Sample sizes
    must be whole numbers of at least 2 per group and standard deviations
    strictly positive; otherwise :obj:`~pymafe.exceptions.InvalidInputError`
    is raised.

    Any computed statistic can be retrieved with ``get(stat)`` or the
    equivalent ``get_<stat>()`` shortcut, e.g. ``get_smd()`` or ``get_v_smd()``.
    """

    def __init__(self, data=None, m1=None, m2=None, sd1=None, sd2=None, n1=None, n2=None):
        kwargs = dict(m1=m1, m2=m2, sd1=sd1, sd2=sd2, n1=n1, n2=n2)
        kwargs = {k: v for k, v in kwargs.items() if v is not None}

        if data is not None:
            kwargs = self._collect_variables(data, kwargs)

        # Scalars are fine, but lists and tuples become arrays
        for k, v in kwargs.items():
            kwargs[k] = np.asarray(v, dtype=float)

        kwargs = self._validate(kwargs)

        self.known_vars = {}
        self.update_data(**kwargs)

    @staticmethod
    def _collect_variables(data, kwargs):
        # consolidate variables from pandas DF and keyword arguments, giving
        # precedence to the latter.
        kwargs = kwargs.copy()
        df_cols = {col: data.loc[:, col].values for col in data.columns if col in TWO_SAMPLE_VARS}
        df_cols.update(kwargs)
        return df_cols

    def _validate(self, kwargs):
        # Validate that all inputs were passed in pairs
        var_names = set([v.strip("12") for v in kwargs.keys()])
        for var in var_names:
            if not (f"{var}1" in kwargs and f"{var}2" in kwargs):
                raise ValueError(
                    "Input variable '{}' must be provided in pairs; please "
                    "provide both {}1 and {}2 variables.".format(var, var, var)
                )

        # Scalars broadcast; arrays must all share one shape
        shapes = {name: val.shape for name, val in kwargs.items() if val.ndim > 0}
        if len(set(shapes.values())) > 1:
            raise InvalidInputError(
                f"All array inputs must have the same length; got shapes {shapes}."
            )

        for name, val in kwargs.items():
            _check_finite(val, name)

        for sd in ("sd1", "sd2"):
            if sd in kwargs:
                _check_positive(kwargs[sd], sd)

        for n in ("n1", "n2"):
            if n in kwargs:
                _check_integer(kwargs[n], n)
                _check_positive(kwargs[n], n, minimum=2, inclusive=True)

        return kwargs

    def __getattr__(self, key):
        if key.startswith("get_"):
            stat = key.replace("get_", "")
            return partial(self.get, stat=stat)
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{key}'")

    def update_data(self, incremental=False, **kwargs):
        """Update instance data.

        Parameters
        ----------
        incremental : :obj:`bool`, optional
            If True, updates data incrementally (i.e., existing data will be
            preserved unless they're overwritten by incoming keys). If False, all
            existing data is dropped first. Default = False.
        **kwargs
            Data values or arrays; keys are the names of the quantities.
            All inputs to __init__ are valid.
        """
        if not incremental:
            self.known_vars = {}
        self.known_vars.update(kwargs)

    def get(self, stat, error=True):
        """Compute and return values for the specified statistic, if possible.

        Parameters
        ----------
        stat : :obj:`str`
            The name of the quantity to retrieve.
        error : :obj:`bool`, optional
            Specifies behavior in the event that the requested quantity cannot be
            computed. If True (default), raises an exception. If False, returns None.

        Returns
        -------
        :obj:`float` or :obj:`numpy.ndarray`
            The requested values, if successfully computed.

        Notes
        -----
        All values computed via get() are internally cached. Do not try to
        update the instance's known values directly; any change to input data
        requires either initialization of a new instance, or a call to
        update_data().
        """
        stat = stat.lower()

        if stat in self.known_vars:
            return self.known_vars[stat]

        if stat not in _EXPRESSIONS:
            if not error:
                return None
            known = list(self.known_vars.keys())
            raise ValueError(
                f"Unable to solve for statistic '{stat}' given the known quantities ({known})."
            )

        func, deps = _EXPRESSIONS[stat]
        inputs = {}
        for dep in deps:
            val = self.get(dep, error=error)
            if val is None:
                return None
            inputs[dep] = val

        result = func(**inputs)
        self.known_vars[stat] = result
        return result

    def to_dataset(self, measure="SMD", **kwargs):
        """Get a Dataset with y and v mapped to the specified measure.

        Parameters
        ----------
        measure : {"SMD", "D", "RMD"}, optional
            The measure to map to the Dataset's y and v attributes (where y is the
            desired measure, and v is its variance). Valid values include:

                - 'SMD': Standardized mean difference with small-sample bias
                  correction (Hedges' g).
                - 'D': Cohen's d. No bias correction is applied (use 'SMD' instead).
                - 'RMD': Raw mean difference.
        **kwargs
            Optional keyword arguments to pass onto the Dataset initializer
            (e.g., labels).

        Returns
        -------
        :obj:`~pymafe.core.Dataset`
        """
        measure = measure.lower()
        y = self.get(measure)
        v = self.get(f"v_{measure}")
        n = None
        if "n1" in self.known_vars:
            n = self.known_vars["n1"] + self.known_vars["n2"]
        return Dataset(y=y, v=v, n=n, **kwargs)


def compute_measure(
    measure,
    data=None,
    m1=None,
    m2=None,
    sd1=None,
    sd2=None,
    n1=None,
    n2=None,
    return_type="tuple",
    **dataset_kwargs,
):
    """Auto-detect and apply the right converter class.

    Parameters
    ----------
    measure : {"SMD", "D", "RMD"}
        The desired output effect size measure.
    data : None or :obj:`pandas.DataFrame`, optional
        A pandas DataFrame to extract variables from. Column names must match
        the names of other args ('m1', 'sd2', etc.). If both a DataFrame and
        keyword arguments are provided, the two will be merged, with variables
        passed as separate arguments taking precedence over DataFrame columns
        in the event of a clash.
    m1, m2, sd1, sd2, n1, n2 : array-like, optional
        Means, standard deviations and sample sizes for groups 1 and 2.
    return_type : {"tuple", "dict", "dataset", "converter"}, optional
        Controls what gets returned.

            - 'tuple': A 2-tuple, where the first element is a 1-d array
              containing the computed estimates (i.e., y), and the second
              element is a 1-d array containing the associated sampling variances.
            - 'dict': A dictionary with keys 'y' and 'v' that map to the arrays
              described for 'tuple'.
            - 'dataset': A Dataset instance, with y and v attributes set
              to the corresponding arrays. Additional keyword arguments are
              passed onto the Dataset init via dataset_kwargs.
            - 'converter': The TwoSampleEffectSizeConverter internally initialized
              to handle the desired computation.
    **dataset_kwargs
        Optional keyword arguments passed on to the Dataset initializer.
        Ignored unless return_type == 'dataset'.

    Returns
    -------
    :obj:`tuple` or :obj:`dict` or :obj:`~pymafe.core.Dataset` or \
        :obj:`~pymafe.effectsize.TwoSampleEffectSizeConverter`
        Depending on ``return_type``.
    """
    valid_measures = {"SMD", "D", "RMD"}
    if measure.upper() not in valid_measures:
        raise ValueError(f"Invalid measure '{measure}'; must be one of {valid_measures}.")

    conv = TwoSampleEffectSizeConverter(data, m1=m1, m2=m2, sd1=sd1, sd2=sd2, n1=n1, n2=n2)
    y = conv.get(measure)
    v = conv.get(f"v_{measure}")
    logger.debug("Computed %s for %d studies.", measure.upper(), np.size(y))

    return_type = return_type.lower()
    if return_type == "tuple":
        return (y, v)
    elif return_type == "dict":
        return {"y": y, "v": v}
    elif return_type == "dataset":
        return conv.to_dataset(measure, **dataset_kwargs)
    elif return_type == "converter":
        return conv
    else:
        raise ValueError(
            f"Invalid return_type value '{return_type}'. Must be one of "
            "'tuple', 'dict', 'dataset', or 'converter'."
        )

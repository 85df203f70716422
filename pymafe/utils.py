"""Miscellaneous utility functions."""

import os.path as op

import numpy as np

from .exceptions import InvalidInputError


def get_resource_path():
    """Return the path to general resources, terminated with separator.

    Resources are kept outside package folder in "datasets".
    Based on function by Yaroslav Halchenko used in Neurosynth Python package.
    """
    return op.abspath(op.join(op.dirname(__file__), "resources") + op.sep)


def _listify(obj):
    """Wrap all non-list or tuple objects in a list.

    This provides a simple way to accept flexible arguments.
    """
    return obj if isinstance(obj, (list, tuple, type(None), np.ndarray)) else [obj]


def _check_inputs_shape(param1, param2, param1_name, param2_name, row=False, column=False):
    """Check whether 'param1' and 'param2' have the same shape.

    Parameters
    ----------
    param1 : array
    param2 : array
    param1_name : str
    param2_name : str
    row : bool, default to False.
    column : bool, default to False.
    """
    if (param1 is not None) and (param2 is not None):
        if row and not column:
            shape1 = param1.shape[0]
            shape2 = param2.shape[0]
            message = "rows"
        elif column and not row:
            shape1 = param1.shape[1]
            shape2 = param2.shape[1]
            message = "columns"
        elif row and column:
            shape1 = param1.shape
            shape2 = param2.shape
            message = "rows and columns"
        else:
            raise ValueError("At least one of the two parameters (row or column) should be True.")

        if shape1 != shape2:
            raise InvalidInputError(
                f"{param1_name} and {param2_name} should have the same number of {message}. "
                f"You provided {param1_name} with shape {param1.shape} and {param2_name} "
                f"with shape {param2.shape}."
            )


def _check_finite(arr, name):
    """Raise if ``arr`` contains NaN or infinite values."""
    bad = ~np.isfinite(np.atleast_1d(np.asarray(arr, dtype=float)))
    if np.any(bad):
        rows = np.unique(np.nonzero(bad)[0]).tolist()
        raise InvalidInputError(f"{name} contains missing or non-finite values at rows {rows}.")


def _check_positive(arr, name, minimum=0, inclusive=False):
    """Raise if any value of ``arr`` is not above ``minimum``.

    If ``inclusive`` is True, values equal to ``minimum`` are accepted.
    """
    arr = np.atleast_1d(np.asarray(arr, dtype=float))
    bad = arr < minimum if inclusive else arr <= minimum
    if np.any(bad):
        rows = np.unique(np.nonzero(bad)[0]).tolist()
        op_str = ">=" if inclusive else ">"
        raise InvalidInputError(
            f"All values of {name} must be {op_str} {minimum}; rows {rows} are not."
        )


def _check_integer(arr, name):
    """Raise if any value of ``arr`` is not a whole number."""
    arr = np.atleast_1d(np.asarray(arr, dtype=float))
    bad = np.mod(arr, 1) != 0
    if np.any(bad):
        rows = np.unique(np.nonzero(bad)[0]).tolist()
        raise InvalidInputError(
            f"All values of {name} must be whole numbers; rows {rows} are not."
        )

"""Reading study tables and building effect-size tables."""

import csv
import logging

import pandas as pd

from .effectsize import compute_measure
from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)

STUDY_COLUMNS = ["author", "year", "n_tx", "n_cont", "m_tx", "m_cont", "sd_tx", "sd_cont"]
NUMERIC_COLUMNS = STUDY_COLUMNS[2:]

# Mapping from study-table columns to converter arguments
COLUMN_MAP = {
    "n_tx": "n1",
    "n_cont": "n2",
    "m_tx": "m1",
    "m_cont": "m2",
    "sd_tx": "sd1",
    "sd_cont": "sd2",
}


def validate_studies(df):
    """Check that a study table has every required column, fully populated and numeric.

    Parameters
    ----------
    df : :obj:`pandas.DataFrame`
        Table with one row per study.

    Returns
    -------
    :obj:`pandas.DataFrame`
        A copy of ``df`` with numeric columns cast to float.

    Raises
    ------
    :obj:`~pymafe.exceptions.InvalidInputError`
        If a column is missing, a cell is empty, or a numeric cell cannot be parsed.
    """
    missing = [col for col in STUDY_COLUMNS if col not in df.columns]
    if missing:
        raise InvalidInputError(f"Study table is missing required column(s): {missing}.")

    if df.shape[0] == 0:
        raise InvalidInputError("Study table contains no studies.")

    df = df.copy()
    for col in STUDY_COLUMNS:
        empty = df[col].isna()
        if empty.any():
            rows = df.index[empty].tolist()
            raise InvalidInputError(f"Column '{col}' has missing values in rows {rows}.")

    for col in NUMERIC_COLUMNS:
        converted = pd.to_numeric(df[col], errors="coerce")
        bad = converted.isna()
        if bad.any():
            rows = df.index[bad].tolist()
            values = df.loc[bad, col].tolist()
            raise InvalidInputError(
                f"Column '{col}' has non-numeric values {values} in rows {rows}."
            )
        df[col] = converted.astype(float)

    df["author"] = df["author"].astype(str).str.strip()
    return df


def read_studies(filename, sep=None):
    """Load a delimited table of study-level summary statistics.

    Parameters
    ----------
    filename : :obj:`str` or :obj:`pathlib.Path`
        Path to the table. It must contain the columns
        ``author, year, n_tx, n_cont, m_tx, m_cont, sd_tx, sd_cont``.
    sep : :obj:`str` or None, optional
        Field delimiter. If None, the delimiter is sniffed from the file
        (comma, tab and semicolon all work). Default = None.

    Returns
    -------
    :obj:`pandas.DataFrame`
        The validated study table, in file order.
    """
    logger.info("Reading study table from %s", filename)
    try:
        df = pd.read_csv(
            filename, sep=sep, engine="python", skipinitialspace=True, encoding="utf-8-sig"
        )
    except (
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
        csv.Error,
        UnicodeDecodeError,
    ) as err:
        raise InvalidInputError(f"Could not parse study table {filename}: {err}") from err
    df.columns = [str(col).strip() for col in df.columns]
    df = validate_studies(df)
    logger.debug("Loaded %d studies from %s", df.shape[0], filename)
    return df


def effect_size_table(studies, measure="SMD"):
    """Append effect sizes and sampling variances to a study table.

    Parameters
    ----------
    studies : :obj:`pandas.DataFrame`
        A study table, as returned by :func:`read_studies`.
    measure : {"SMD", "D", "RMD"}, optional
        Effect size measure. Default = "SMD" (Hedges' g).

    Returns
    -------
    :obj:`pandas.DataFrame`
        The study table plus a ``study`` label column ("Author (Year)") and the ``yi`` and
        ``vi`` columns, in the original row order.
    """
    studies = validate_studies(studies)
    args = {COLUMN_MAP[col]: studies[col].values for col in COLUMN_MAP}
    yi, vi = compute_measure(measure, **args)

    table = studies.drop(columns="study", errors="ignore")
    year = table["year"].astype(str)
    table.insert(0, "study", table["author"] + " (" + year + ")")
    table["yi"] = yi
    table["vi"] = vi
    return table.reset_index(drop=True)

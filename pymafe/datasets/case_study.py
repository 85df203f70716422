"""Bundled case-study dataset."""

import json
import os.path as op

from pymafe.io import read_studies
from pymafe.utils import get_resource_path


def case_study(expanded=False):
    """Load the fictitious peer-mentoring case study.

    Six published studies compare a structured peer-mentoring program for youth in
    foster care with services as usual on a standardized self-efficacy scale.
    The expanded version appends a seventh row, the researcher's own evaluation,
    so the effect of adding a new study to an existing synthesis can be shown.

    Parameters
    ----------
    expanded : :obj:`bool`, optional
        If True, load the seven-study table. Default = False.

    Returns
    -------
    df : :obj:`~pandas.DataFrame`
        A dataframe with the following columns:

        - ``"author"``: first author of the study
        - ``"year"``: publication year
        - ``"n_tx"``: sample size of the treatment group
        - ``"n_cont"``: sample size of the control group
        - ``"m_tx"``: mean self-efficacy score in the treatment group
        - ``"m_cont"``: mean self-efficacy score in the control group
        - ``"sd_tx"``: standard deviation in the treatment group
        - ``"sd_cont"``: standard deviation in the control group

    metadata : :obj:`dict`
        A dictionary with metadata about the columns in the dataset.
    """
    dataset_dir = op.join(get_resource_path(), "datasets")
    name = "case_study_expanded" if expanded else "case_study"
    csv_file = op.join(dataset_dir, f"{name}.csv")
    json_file = op.join(dataset_dir, "case_study.json")
    df = read_studies(csv_file, sep=",")
    with open(json_file, "r") as fo:
        metadata = json.load(fo)

    return df, metadata

"""
.. _io1:

==================
Creating a dataset
==================

In PyMAFE, operations are performed on :class:`~pymafe.core.Dataset` objects.
Datasets are very lightweight objects that store the study-level estimates (y),
variances (v), sample sizes (n) and study labels used for meta-analyses.
"""
###############################################################################
# Start with the necessary imports
# --------------------------------
from pprint import pprint

from pymafe import core, datasets
from pymafe.effectsize import compute_measure
from pymafe.io import effect_size_table

###############################################################################
# Datasets can be created from arrays
# -----------------------------------
# The simplest way to create a dataset is to pass in arguments as numpy arrays.
#
# ``y`` refers to the study-level estimates, ``v`` to the variances,
# and ``n`` to the sample sizes.
y = [0.2, 0.4, 0.6]
v = [0.05, 0.04, 0.06]

dataset = core.Dataset(y=y, v=v, labels=["A (2001)", "B (2004)", "C (2010)"])

pprint(vars(dataset))

###############################################################################
# Datasets have the :meth:`~pymafe.core.Dataset.to_df` method.
dataset.to_df()

###############################################################################
# Studies usually report group summaries, not effect sizes
# ---------------------------------------------------------
# The bundled case study compares a peer-mentoring program for youth in foster
# care with services as usual on a self-efficacy scale.
studies, meta = datasets.case_study()
pprint(meta["description"])
studies

###############################################################################
# :func:`~pymafe.io.effect_size_table` adds Hedges' g (``yi``) and its sampling
# variance (``vi``) to each row, along with a ``study`` label.
table = effect_size_table(studies)
table[["study", "yi", "vi"]]

###############################################################################
# The same conversion is available for plain arrays
# -------------------------------------------------
# :func:`~pymafe.effectsize.compute_measure` can also return a Dataset directly.
dataset = compute_measure(
    "SMD",
    m1=studies["m_tx"],
    m2=studies["m_cont"],
    sd1=studies["sd_tx"],
    sd2=studies["sd_cont"],
    n1=studies["n_tx"],
    n2=studies["n_cont"],
    return_type="dataset",
    labels=table["study"].tolist(),
)
dataset.to_df()

# emacs: -*- mode: python-mode; py-indent-offset: 4; tab-width: 4; indent-tabs-mode: nil -*-
# ex: set sts=4 ts=4 sw=4 et:
"""
.. _meta_basics:

=====================================
The Basics of Running a Meta-Analysis
=====================================

Here we walk through the basic steps of running a fixed-effect meta-analysis
with PyMAFE, and then show how the summary changes when a new study is added.
"""
###############################################################################
# Start with the necessary imports
# -----------------------------------------------------------------------------
from pprint import pprint

from pymafe import core, datasets, estimators
from pymafe.io import effect_size_table

###############################################################################
# Load the data
# -----------------------------------------------------------------------------
# We use the bundled peer-mentoring case study and convert each study's group
# summaries to Hedges' g.
studies, _ = datasets.case_study()
table = effect_size_table(studies)
dset = core.Dataset(data=table, y="yi", v="vi", labels="study")
dset.to_df()

###############################################################################
# Now we fit a model
# -----------------------------------------------------------------------------
# You must first initialize the estimator, after which you can use
# :meth:`~pymafe.estimators.estimators.BaseEstimator.fit` to fit the model to
# numpy arrays, or
# :meth:`~pymafe.estimators.estimators.BaseEstimator.fit_dataset` to fit it to
# a :class:`~pymafe.core.Dataset`.
#
# The :meth:`~pymafe.estimators.estimators.BaseEstimator.summary` function
# will return a :class:`~pymafe.results.MetaAnalysisResults` object,
# which contains the results of the analysis.
est = estimators.WeightedLeastSquares().fit_dataset(dset)
results = est.summary()
results.to_df()

###############################################################################
# Study-level contributions
# -----------------------------------------------------------------------------
# :meth:`~pymafe.results.MetaAnalysisResults.get_study_stats` lists each
# study's confidence interval and its share of the total weight.
results.get_study_stats()

###############################################################################
# Heterogeneity
# -----------------------------------------------------------------------------
# The :meth:`~pymafe.results.MetaAnalysisResults.get_heterogeneity_stats`
# method computes Cochran's Q, its p-value, I^2 and H.
pprint(results.get_heterogeneity_stats())

###############################################################################
# Forest and funnel plots
# -----------------------------------------------------------------------------
results.plot_forest(title="Peer mentoring and self-efficacy", xlabel="Hedges' g")

###############################################################################
results.plot_funnel(xlabel="Hedges' g")

###############################################################################
# Adding a new study
# -----------------------------------------------------------------------------
# :func:`~pymafe.core.meta_analysis` fits the model in one call. Pooling the
# expanded table returns a new results object; the earlier one is unchanged.
expanded, _ = datasets.case_study(expanded=True)
expanded_results = core.meta_analysis(data=effect_size_table(expanded), y="yi", v="vi")
print(results.to_df()[["estimate", "se", "p(Q)"]])
print(expanded_results.to_df()[["estimate", "se", "p(Q)"]])

###############################################################################
expanded_results.plot_forest(title="With the new study", xlabel="Hedges' g")

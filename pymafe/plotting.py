"""Forest and funnel plots for fixed-effect meta-analysis results."""

import matplotlib.pyplot as plt
import numpy as np
import scipy.stats as ss
import seaborn as sns
from matplotlib.patches import Polygon


def _check_single_set(results):
    if results.fe_params.shape[1] != 1:
        raise ValueError(
            "Plotting is only supported for results with a single dataset; "
            f"these results contain {results.fe_params.shape[1]} parallel datasets."
        )


def _get_ax(ax, figsize):
    if ax is None:
        with sns.axes_style("whitegrid"):
            _, ax = plt.subplots(figsize=figsize)
    return ax


def plot_forest(results, ax=None, title=None, xlabel="Effect size", color="black"):
    """Draw a forest plot of per-study estimates and the fixed-effect summary.

    Each study is drawn as a square whose area is proportional to its weight,
    with a horizontal line spanning its confidence interval. The summary effect
    is drawn as a diamond spanning the pooled confidence interval.

    Parameters
    ----------
    results : :obj:`~pymafe.results.MetaAnalysisResults`
        Fitted results with a single dataset.
    ax : :obj:`matplotlib.axes.Axes`, optional
        Axes to draw on. If None, a new figure is created.
    title : :obj:`str`, optional
        Plot title.
    xlabel : :obj:`str`, optional
        Label of the effect-size axis. Default = "Effect size".
    color : :obj:`str`, optional
        Color of the study markers and summary diamond. Default = "black".

    Returns
    -------
    :obj:`matplotlib.axes.Axes`
    """
    _check_single_set(results)
    studies = results.get_study_stats()
    fe = results.get_fe_stats()
    k = results.k

    ax = _get_ax(ax, figsize=(7, 0.45 * (k + 3) + 1))

    # Studies run top to bottom in input order; the summary sits below them
    rows = np.arange(k, 0, -1) + 1
    sizes = 300 * studies["weight"].values / studies["weight"].max()
    ax.hlines(rows, studies["ci_l"], studies["ci_u"], color=color, linewidth=1)
    ax.scatter(studies["estimate"], rows, s=sizes, marker="s", color=color, zorder=3)

    est, lo, hi = fe["est"].item(), fe["ci_l"].item(), fe["ci_u"].item()
    diamond = Polygon(
        [[lo, 0], [est, 0.3], [hi, 0], [est, -0.3]],
        closed=True,
        facecolor=color,
        edgecolor=color,
    )
    ax.add_patch(diamond)
    ax.axvline(0, color="gray", linestyle="--", linewidth=1)
    ax.axhline(0.75, color="gray", linewidth=0.5)

    ax.set_yticks(list(rows) + [0])
    ax.set_yticklabels(list(studies["study"]) + ["FE Model"])
    ax.set_ylim(-1, k + 2)
    x_min = min(studies["ci_l"].min(), lo, 0)
    x_max = max(studies["ci_u"].max(), hi, 0)
    pad = 0.05 * (x_max - x_min)
    ax.set_xlim(x_min - pad, x_max + pad)
    ax.set_xlabel(xlabel)
    if title is not None:
        ax.set_title(title)

    return ax


def plot_funnel(results, ax=None, yaxis="se", title=None, xlabel="Effect size", color="black"):
    """Draw a funnel plot of effect sizes against their standard errors or precision.

    Parameters
    ----------
    results : :obj:`~pymafe.results.MetaAnalysisResults`
        Fitted results with a single dataset.
    ax : :obj:`matplotlib.axes.Axes`, optional
        Axes to draw on. If None, a new figure is created.
    yaxis : {"se", "precision"}, optional
        Quantity on the vertical axis. With "se" the axis is inverted so that the
        most precise studies sit at the top. Default = "se".
    title : :obj:`str`, optional
        Plot title.
    xlabel : :obj:`str`, optional
        Label of the effect-size axis. Default = "Effect size".
    color : :obj:`str`, optional
        Color of the study markers. Default = "black".

    Returns
    -------
    :obj:`matplotlib.axes.Axes`

    Notes
    -----
    The pseudo confidence region is the summary estimate plus or minus
    z(1 - alpha/2) standard errors, drawn for the range of observed standard errors.
    """
    _check_single_set(results)
    yaxis = yaxis.lower()
    if yaxis not in ("se", "precision"):
        raise ValueError(f"Invalid yaxis '{yaxis}'. Must be 'se' or 'precision'.")

    studies = results.get_study_stats()
    est = results.fe_params.item()
    z_crit = ss.norm.ppf(1 - results.alpha / 2)

    ax = _get_ax(ax, figsize=(6, 5))

    se = studies["se"].values
    se_grid = np.linspace(0, se.max() * 1.1, 100)
    if yaxis == "se":
        y_points, y_grid = se, se_grid
        ylabel = "Standard error"
    else:
        se_grid = se_grid[1:]
        y_points, y_grid = 1 / se, 1 / se_grid
        ylabel = "Precision (1 / SE)"

    ax.fill_betweenx(
        y_grid, est - z_crit * se_grid, est + z_crit * se_grid, color="lightgray", alpha=0.5
    )
    ax.plot(est - z_crit * se_grid, y_grid, color="gray", linestyle="--", linewidth=1)
    ax.plot(est + z_crit * se_grid, y_grid, color="gray", linestyle="--", linewidth=1)
    ax.axvline(est, color="gray", linewidth=1)
    ax.scatter(studies["estimate"], y_points, color=color, zorder=3)

    if yaxis == "se":
        ax.set_ylim(se_grid.max(), 0)
    else:
        ax.set_ylim(0, y_points.max() * 1.1)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    if title is not None:
        ax.set_title(title)

    return ax

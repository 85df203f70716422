"""Command-line interface for running fixed-effect meta-analyses on study tables."""

import argparse
import json
import logging
import os.path as op
import sys
import warnings
from pathlib import Path

import matplotlib
import matplotlib.pyplot as plt

from . import __version__
from .core import meta_analysis
from .exceptions import InvalidInputError
from .io import effect_size_table, read_studies

logger = logging.getLogger(__name__)


def _get_parser():
    """Parse command line inputs for pymafe.

    Returns
    -------
    parser.parse_args() : argparse.Namespace
    """
    parser = argparse.ArgumentParser(
        prog="pymafe",
        description=(
            "Compute two-group effect sizes from one or more study tables and pool them "
            "with an inverse-variance fixed-effect model. Each table is analyzed "
            "independently."
        ),
    )
    parser.add_argument(
        "studies",
        nargs="+",
        type=Path,
        help=(
            "Delimited study table(s) with columns author, year, n_tx, n_cont, "
            "m_tx, m_cont, sd_tx, sd_cont."
        ),
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        dest="output_dir",
        type=Path,
        default=Path("."),
        help="Directory in which to write tables and figures. Default is current directory.",
    )
    parser.add_argument(
        "--alpha",
        type=float,
        default=0.05,
        help="Alpha level; confidence intervals have 1 - alpha coverage. Default is 0.05.",
    )
    parser.add_argument(
        "--measure",
        choices=["SMD", "D", "RMD"],
        default="SMD",
        help="Effect size measure. Default is SMD (Hedges' g).",
    )
    parser.add_argument(
        "--format",
        dest="fig_format",
        choices=["png", "pdf", "svg"],
        default="png",
        help="File format of the forest and funnel plots. Default is png.",
    )
    parser.add_argument(
        "--funnel-yaxis",
        dest="funnel_yaxis",
        choices=["se", "precision"],
        default="se",
        help="Vertical axis of the funnel plot. Default is se.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debugging messages.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def format_report(name, results):
    """Describe a fitted fixed-effect model in one paragraph."""
    fe = results.get_fe_stats()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        het = results.get_heterogeneity_stats()

    coverage = int(round((1 - results.alpha) * 100))
    text = (
        f"{name}: k = {results.k}, fixed-effect estimate = {fe['est'].item():.2f} "
        f"(SE = {fe['se'].item():.3f}, {coverage}% CI [{fe['ci_l'].item():.2f}, "
        f"{fe['ci_u'].item():.2f}], z = {fe['z'].item():.2f}, p = {fe['p'].item():.4g})."
    )
    if het["degenerate"]:
        text += " Only one study was analyzed, so no homogeneity test is available."
    else:
        text += f" Q({het['df']}) = {het['Q'].item():.2f}, p = {het['p(Q)'].item():.2f}"
        if het["homogeneous"].item():
            text += "; no evidence against homogeneity."
        else:
            text += "; the studies appear heterogeneous."
    return text


def run_analysis(
    studies_file, output_dir, alpha=0.05, measure="SMD", fig_format="png", funnel_yaxis="se"
):
    """Analyze one study table and write its outputs.

    Parameters
    ----------
    studies_file : :obj:`pathlib.Path`
        Delimited study table.
    output_dir : :obj:`pathlib.Path`
        Output directory; created if needed.
    alpha : :obj:`float`, optional
        Default = 0.05.
    measure : {"SMD", "D", "RMD"}, optional
        Default = "SMD".
    fig_format : {"png", "pdf", "svg"}, optional
        Default = "png".
    funnel_yaxis : {"se", "precision"}, optional
        Default = "se".

    Returns
    -------
    results : :obj:`~pymafe.results.MetaAnalysisResults`
    outputs : :obj:`dict`
        Mapping of output type to the path written.
    """
    studies_file = Path(studies_file)
    output_dir = Path(output_dir)

    # Compute everything before touching the output directory
    studies = read_studies(studies_file)
    es_table = effect_size_table(studies, measure=measure)
    results = meta_analysis(data=es_table, y="yi", v="vi", labels="study", alpha=alpha)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        het = results.get_heterogeneity_stats()

    output_dir.mkdir(parents=True, exist_ok=True)
    stem = studies_file.stem
    outputs = {
        "effect_sizes": output_dir / f"{stem}_effect_sizes.tsv",
        "summary": output_dir / f"{stem}_summary.tsv",
        "heterogeneity": output_dir / f"{stem}_heterogeneity.json",
        "forest": output_dir / f"{stem}_forest.{fig_format}",
        "funnel": output_dir / f"{stem}_funnel.{fig_format}",
    }

    es_table.to_csv(outputs["effect_sizes"], sep="\t", index=False)
    results.to_df().to_csv(outputs["summary"], sep="\t", index=False)

    het_json = {
        "k": results.k,
        "df": het["df"],
        "degenerate": het["degenerate"],
        "Q": None if het["degenerate"] else float(het["Q"].item()),
        "p(Q)": None if het["degenerate"] else float(het["p(Q)"].item()),
        "I^2": None if het["degenerate"] else float(het["I^2"].item()),
        "H": None if het["degenerate"] else float(het["H"].item()),
        "homogeneous": None if het["degenerate"] else bool(het["homogeneous"].item()),
        "alpha": alpha,
    }
    with open(outputs["heterogeneity"], "w") as fo:
        json.dump(het_json, fo, indent=2)

    coverage = int(round((1 - alpha) * 100))
    ax = results.plot_forest(title=stem, xlabel=f"{measure} ({coverage}% CI)")
    ax.figure.tight_layout()
    ax.figure.savefig(outputs["forest"])
    plt.close(ax.figure)

    ax = results.plot_funnel(yaxis=funnel_yaxis, title=stem, xlabel=measure)
    ax.figure.tight_layout()
    ax.figure.savefig(outputs["funnel"])
    plt.close(ax.figure)

    for key, path in outputs.items():
        logger.info("Wrote %s to %s", key, op.abspath(path))

    return results, outputs


def pymafe_workflow(
    studies,
    output_dir=Path("."),
    alpha=0.05,
    measure="SMD",
    fig_format="png",
    funnel_yaxis="se",
):
    """Run the analysis for each study table in turn and print a report for each."""
    for studies_file in studies:
        results, _ = run_analysis(
            studies_file,
            output_dir,
            alpha=alpha,
            measure=measure,
            fig_format=fig_format,
            funnel_yaxis=funnel_yaxis,
        )
        print(format_report(Path(studies_file).stem, results))


def _main(argv=None):
    """Entry point for pymafe CLI."""
    options = vars(_get_parser().parse_args(argv))
    # Figures are only written to files
    matplotlib.use("Agg")
    verbose = options.pop("verbose")
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    try:
        pymafe_workflow(**options)
    except (InvalidInputError, OSError) as err:
        logger.error(str(err))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(_main())

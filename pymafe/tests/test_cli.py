"""Tests for pymafe.cli."""
import importlib
import json
import os.path as op

import matplotlib
import pandas as pd

from pymafe import cli, meta_analysis
from pymafe.utils import get_resource_path

BASE_FILE = op.join(get_resource_path(), "datasets", "case_study.csv")
EXPANDED_FILE = op.join(get_resource_path(), "datasets", "case_study_expanded.csv")


def test_cli_workflow(tmp_path, capsys):
    """Run the CLI on both case-study tables."""
    out_dir = tmp_path / "out"
    assert cli._main([BASE_FILE, EXPANDED_FILE, "-o", str(out_dir)]) == 0

    for stem in ("case_study", "case_study_expanded"):
        for suffix in (
            "_effect_sizes.tsv",
            "_summary.tsv",
            "_heterogeneity.json",
            "_forest.png",
            "_funnel.png",
        ):
            assert (out_dir / f"{stem}{suffix}").is_file()

    es = pd.read_csv(out_dir / "case_study_effect_sizes.tsv", sep="\t")
    assert es.shape[0] == 6
    assert round(es.loc[0, "yi"], 2) == 0.28

    summary = pd.read_csv(out_dir / "case_study_expanded_summary.tsv", sep="\t")
    assert summary.shape == (1, 11)
    assert round(summary.loc[0, "estimate"], 2) == 0.52

    with open(out_dir / "case_study_heterogeneity.json") as fo:
        het = json.load(fo)
    assert het["df"] == 5
    assert het["homogeneous"] is True
    assert round(het["p(Q)"], 2) == 0.76

    printed = capsys.readouterr().out
    assert "fixed-effect estimate = 0.49" in printed
    assert "fixed-effect estimate = 0.52" in printed


def test_cli_options(tmp_path):
    """Figure format, alpha and funnel axis are configurable."""
    out_dir = tmp_path / "out"
    args = [BASE_FILE, "-o", str(out_dir), "--format", "svg", "--alpha", "0.1"]
    args += ["--funnel-yaxis", "precision", "--measure", "D"]
    assert cli._main(args) == 0
    assert (out_dir / "case_study_forest.svg").is_file()
    summary = pd.read_csv(out_dir / "case_study_summary.tsv", sep="\t")
    assert "ci_0.05" in summary.columns


def test_cli_bad_input(tmp_path):
    """Invalid tables produce an error code and no outputs."""
    bad_file = tmp_path / "bad.csv"
    bad_file.write_text("author,year,n_tx,n_cont,m_tx,m_cont,sd_tx,sd_cont\nA,2001,20,1,5,4,1,1\n")
    out_dir = tmp_path / "out"
    assert cli._main([str(bad_file), "-o", str(out_dir)]) == 1
    assert not out_dir.exists()

    assert cli._main([str(tmp_path / "missing.csv"), "-o", str(out_dir)]) == 1
    assert not out_dir.exists()


def test_cli_unreadable_files(tmp_path):
    """Empty and non-UTF-8 files produce an error code instead of a traceback."""
    out_dir = tmp_path / "out"

    empty_file = tmp_path / "empty.csv"
    empty_file.write_text("")
    assert cli._main([str(empty_file), "-o", str(out_dir)]) == 1

    binary_file = tmp_path / "binary.csv"
    binary_file.write_bytes(b"\xff\xfe\x00a\x00u\x00t\x00h")
    assert cli._main([str(binary_file), "-o", str(out_dir)]) == 1

    assert not out_dir.exists()


def test_backend_set_only_when_run(tmp_path, monkeypatch):
    """Importing the CLI leaves the matplotlib backend alone; running it selects Agg."""
    calls = []
    monkeypatch.setattr(matplotlib, "use", lambda backend, *args, **kwargs: calls.append(backend))

    importlib.reload(cli)
    assert calls == []

    assert cli._main([BASE_FILE, "-o", str(tmp_path)]) == 0
    assert calls == ["Agg"]


def test_format_report(base_effect_sizes):
    """Test the printed interpretation."""
    results = meta_analysis(data=base_effect_sizes, y="yi", v="vi")
    text = cli.format_report("base", results)
    assert text.startswith("base: k = 6")
    assert "95% CI [0.32, 0.67]" in text
    assert "no evidence against homogeneity" in text

    text = cli.format_report("single", meta_analysis([0.3], [0.09]))
    assert "no homogeneity test" in text

    results = meta_analysis([-1, 0.5, 0.5, 0.5, 1, 1, 2, 10], [1, 1, 2.4, 0.5, 1, 1, 1.2, 1.5])
    assert "appear heterogeneous" in cli.format_report("het", results)

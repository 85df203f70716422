"""Tests for pymafe.io."""
import numpy as np
import pytest

from pymafe import InvalidInputError
from pymafe.io import STUDY_COLUMNS, effect_size_table, read_studies

HEADER = "author,year,n_tx,n_cont,m_tx,m_cont,sd_tx,sd_cont\n"


def test_read_studies(tmp_path):
    """Test reading a comma-delimited table."""
    path = tmp_path / "studies.csv"
    path.write_text(HEADER + "Ames,2001,20,22,5.1,4.2,1.1,1.3\nBell,2005,31,30,6.0,5.5,2.0,2.2\n")
    df = read_studies(path)
    assert list(df.columns) == STUDY_COLUMNS
    assert df.shape == (2, 8)
    assert df["n_tx"].dtype == float
    assert df["author"].tolist() == ["Ames", "Bell"]


def test_read_studies_sniffs_delimiter(tmp_path):
    """Tab- and semicolon-delimited files are read without specifying sep."""
    row = ["Ames", "2001", "20", "22", "5.1", "4.2", "1.1", "1.3"]
    for delim in ("\t", ";"):
        path = tmp_path / "studies.txt"
        path.write_text(delim.join(STUDY_COLUMNS) + "\n" + delim.join(row) + "\n")
        df = read_studies(path)
        assert df.shape == (1, 8)
        assert df.loc[0, "sd_cont"] == 1.3


def test_read_studies_missing_column(tmp_path):
    """A missing required column fails fast."""
    path = tmp_path / "studies.csv"
    path.write_text("author,year,n_tx,n_cont,m_tx,m_cont,sd_tx\nAmes,2001,20,22,5.1,4.2,1.1\n")
    with pytest.raises(InvalidInputError, match="sd_cont"):
        read_studies(path)


def test_read_studies_missing_value(tmp_path):
    """A blank cell fails fast."""
    path = tmp_path / "studies.csv"
    path.write_text(HEADER + "Ames,2001,20,22,5.1,,1.1,1.3\nBell,2005,31,30,6.0,5.5,2.0,2.2\n")
    with pytest.raises(InvalidInputError, match="m_cont"):
        read_studies(path)


def test_read_studies_non_numeric(tmp_path):
    """A non-numeric cell fails fast."""
    path = tmp_path / "studies.csv"
    path.write_text(HEADER + "Ames,2001,twenty,22,5.1,4.2,1.1,1.3\n")
    with pytest.raises(InvalidInputError, match="n_tx"):
        read_studies(path)


def test_read_studies_empty(tmp_path):
    """A header without rows is rejected."""
    path = tmp_path / "studies.csv"
    path.write_text(HEADER)
    with pytest.raises(InvalidInputError):
        read_studies(path, sep=",")


def test_read_studies_empty_file(tmp_path):
    """A zero-byte file is rejected whether or not the delimiter is given."""
    path = tmp_path / "studies.csv"
    path.write_text("")
    with pytest.raises(InvalidInputError, match="Could not parse"):
        read_studies(path)
    with pytest.raises(InvalidInputError, match="Could not parse"):
        read_studies(path, sep=",")


def test_read_studies_undecodable(tmp_path):
    """Files that are not UTF-8 text are rejected."""
    path = tmp_path / "studies.csv"
    path.write_bytes(b"\xff\xfe" + HEADER.encode("utf-16-le"))
    with pytest.raises(InvalidInputError, match="Could not parse"):
        read_studies(path)


def test_read_studies_byte_order_mark(tmp_path):
    """A leading UTF-8 byte-order mark, as written by spreadsheet exports, is ignored."""
    path = tmp_path / "studies.csv"
    path.write_text("\ufeff" + HEADER + "Ames,2001,20,22,5.1,4.2,1.1,1.3\n", encoding="utf-8")
    df = read_studies(path)
    assert list(df.columns) == STUDY_COLUMNS
    assert df.loc[0, "author"] == "Ames"


def test_effect_size_table(base_studies):
    """Test pymafe.io.effect_size_table on the case study."""
    table = effect_size_table(base_studies)
    assert table.shape[0] == 6
    assert {"study", "author", "year", "m_tx", "m_cont", "yi", "vi"} <= set(table.columns)
    assert table["study"].tolist()[:2] == ["Franks (2011)", "Jeffers (2013)"]
    assert np.allclose(
        table["yi"],
        [0.27706, 0.64018, 0.43201, 0.55289, 0.32888, 0.65479],
        atol=1e-4,
    )
    assert np.allclose(
        table["vi"],
        [0.05048, 0.05844, 0.04015, 0.04667, 0.06648, 0.03572],
        atol=1e-4,
    )
    assert round(table.loc[0, "yi"], 2) == 0.28
    assert round(table.loc[1, "yi"], 2) == 0.64


def test_effect_size_table_measures(base_studies):
    """Other measures are available."""
    rmd = effect_size_table(base_studies, measure="RMD")
    assert np.allclose(rmd["yi"], base_studies["m_tx"] - base_studies["m_cont"])

    d = effect_size_table(base_studies, measure="D")
    g = effect_size_table(base_studies)
    assert (d["yi"].abs() > g["yi"].abs()).all()


def test_effect_size_table_degenerate(base_studies):
    """Degenerate rows raise InvalidInputError."""
    bad = base_studies.copy()
    bad.loc[2, "sd_tx"] = 0
    with pytest.raises(InvalidInputError):
        effect_size_table(bad)

    bad = base_studies.copy()
    bad.loc[0, "n_cont"] = 1
    with pytest.raises(InvalidInputError):
        effect_size_table(bad)

    bad = base_studies.copy()
    bad.loc[3, "n_tx"] = 44.5
    with pytest.raises(InvalidInputError, match="whole numbers"):
        effect_size_table(bad)

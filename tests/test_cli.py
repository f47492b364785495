"""Tests for the atacpile command line."""

import pandas as pd
import pytest
from typer.testing import CliRunner

from atacpile.cli.main import app

runner = CliRunner()


@pytest.fixture
def samples(tmp_path):
    wt = tmp_path / "wt.bed"
    wt.write_text("chr1\t2\t5\nchr1\t3\t8\nchr2\t0\t10\n")
    ko = tmp_path / "ko.bed"
    ko.write_text("chr1\t0\t2\nchr1\t8\t12\n")
    groups = tmp_path / "groups.tsv"
    groups.write_text("wt\twild_type\nko\tknockout\n")
    return wt, ko, groups


def test_pileup_writes_group_profiles(samples, tmp_path):
    wt, ko, groups = samples
    output = tmp_path / "out.tsv"
    result = runner.invoke(
        app,
        [
            "pileup", str(wt), str(ko),
            "--locus", "chr1:1-10",
            "--groups", str(groups),
            "--norm", "none",
            "--output", str(output),
        ],
    )
    assert result.exit_code == 0, result.output
    table = pd.read_csv(output, sep="\t")
    wild_type = table[table["group"] == "wild_type"]
    assert wild_type["val"].tolist() == [0, 0, 1, 2, 2, 1, 1, 1, 0, 0]
    assert set(table["group"]) == {"wild_type", "knockout"}


def test_pileup_with_cuts_and_windows(samples, tmp_path):
    wt, ko, _ = samples
    output = tmp_path / "out.tsv"
    result = runner.invoke(
        app,
        [
            "pileup", str(wt), str(ko),
            "--locus", "chr1:1-10",
            "--convert", "cuts",
            "--window-size", "5",
            "--norm", "max",
            "--output", str(output),
        ],
    )
    assert result.exit_code == 0, result.output
    table = pd.read_csv(output, sep="\t")
    assert table["pos"].tolist() == [0, 5, 10]
    assert table["val"].max() == 1.0


def test_pileup_rejects_bad_locus(samples, tmp_path):
    wt, _, _ = samples
    result = runner.invoke(app, ["pileup", str(wt), "--locus", "chr1:10"])
    assert result.exit_code == 1


def test_pileup_missing_file(tmp_path):
    result = runner.invoke(app, ["pileup", str(tmp_path / "nope.bed"), "--locus", "chr1:1-10"])
    assert result.exit_code == 1


def test_convert_writes_bed(samples, tmp_path):
    wt, _, _ = samples
    result = runner.invoke(app, ["convert", str(wt), "--to", "footprints"])
    assert result.exit_code == 0, result.output
    lines = (tmp_path / "wt.footprints.bed").read_text().splitlines()
    assert len(lines) == 6
    # All chr1 starts clamp to 1; the shortest is the 3' footprint of fragment 3-5
    assert lines[0].split("\t")[:3] == ["chr1", "0", "15"]


def test_convert_rejects_unknown_mode(samples):
    wt, _, _ = samples
    result = runner.invoke(app, ["convert", str(wt), "--to", "reads"])
    assert result.exit_code != 0

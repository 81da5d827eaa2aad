import os
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lanc import cli
from lanc import iox
from lanc import run

TRACK = (
    'track name="IND1" description="Ind: IND1 Pop:ASW Admixture" visibility=2\n'
    "chr1\t100\t200\t11\t100\t.\n"
    "chr1\t201\t300\t12\t99\t.\n"
    "chr2\t100\t300\t33\t200\t.\n"
    'track name="IND2" description="Ind: IND2 Pop:MXL Admixture" visibility=2\n'
    "chr1\t50\t180\t23\t130\t.\n"
    "chr1\t181\t400\t33\t219\t.\n"
)

REPORT = (
    "pop\tchr\tqueryAnc\tqueryEurAlleles\tqueryAfrAlleles\tqueryNamAlleles\tstart\tend\tancOverlap\tancTypes\n"
    "IND1\tASW\tchr1\tEE\t2\t0\t0\t150\t250\t51,50\tEE,EA\n"
    "IND2\tMXL\tchr1\tNN\t0\t0\t2\t150\t250\t31,70\tAN,NN\n"
)


@pytest.fixture
def track_path(tmp_path):
    path = tmp_path / "lanc.bed"
    path.write_text(TRACK)
    return path


@pytest.fixture(autouse=True)
def _reset_configuration(monkeypatch):
    monkeypatch.setenv("LANC_LEGACY_CONTAINMENT", "0")
    monkeypatch.setattr(run, "LEGACY_CONTAINMENT", False)
    monkeypatch.setattr(run, "DEFAULT_LEGACY_CONTAINMENT", False)
    monkeypatch.setattr(run, "LOG_LEVEL", "WARNING")


def test_report_on_stdout_and_midpoint_on_stderr(track_path, capsys):
    cli.main([str(track_path), "chr1:150", "1:250"])

    captured = capsys.readouterr()
    assert captured.out == REPORT
    assert "chr1:200" in captured.err


def test_report_written_to_out_path(track_path, tmp_path, capsys):
    out = tmp_path / "report.tsv"

    cli.main([str(track_path), "chr1:150", "chr1:250", "--out", str(out)])

    assert out.read_text() == REPORT
    assert capsys.readouterr().out == ""
    assert list(iox.read_report(out).index) == ["IND1", "IND2"]


def test_repeated_runs_are_byte_identical(track_path, capsys):
    cli.main([str(track_path), "chr1:150", "chr1:250"])
    first = capsys.readouterr().out
    cli.main([str(track_path), "chr1:150", "chr1:250"])
    second = capsys.readouterr().out

    assert first == second == REPORT


def test_malformed_query_is_diagnosed_but_report_still_written(track_path, capsys):
    cli.main([str(track_path), "chr1-150", "chr1:250"])

    captured = capsys.readouterr()
    assert "MalformedQueryCoordinate" in captured.err
    assert "ChromosomeMismatch" in captured.err
    lines = captured.out.splitlines()
    assert len(lines) == 3
    assert lines[1] == "IND1\tASW\t" + "\t".join(["NA"] * 9)


def test_unreadable_track_exits(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(tmp_path / "missing.bed"), "chr1:150", "chr1:250"])

    assert "[ERROR]" in str(excinfo.value)


def test_legacy_containment_flag(tmp_path, capsys):
    path = tmp_path / "lanc.bed"
    path.write_text(
        'track name="IND1" description="Ind: IND1 Pop:ASW Admixture" visibility=2\n'
        "chr1\t200\t300\t12\t100\t.\n"
    )

    cli.main([str(path), "chr1:100", "chr1:500"])
    fixed = capsys.readouterr().out.splitlines()[1]
    cli.main([str(path), "chr1:100", "chr1:500", "--legacy-containment"])
    legacy = capsys.readouterr().out.splitlines()[1]

    assert fixed.endswith("\t101\tEA")
    assert legacy.endswith("\tNA\tNA")


def test_apply_cli_configuration_falls_back_to_environment_default(monkeypatch):
    monkeypatch.setattr(run, "DEFAULT_LEGACY_CONTAINMENT", True)

    cli.apply_cli_configuration(cli.parse_args(["t.bed", "chr1:1", "chr1:2", "--log-level", "debug"]))

    assert run.LEGACY_CONTAINMENT is True
    assert run.LOG_LEVEL == "DEBUG"


def test_track_that_is_not_gzip_exits_cleanly(tmp_path):
    path = tmp_path / "lanc.bed.gz"
    path.write_text("not gzip\n")

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path), "chr1:150", "chr1:250"])

    assert "[ERROR]" in str(excinfo.value)
    assert "Could not read ancestry track" in str(excinfo.value)


def test_track_with_undecodable_bytes_exits_cleanly(tmp_path):
    path = tmp_path / "lanc.bed"
    path.write_bytes(b"chr1\t100\t200\t11\t100\t\xff\xfe\n")

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path), "chr1:150", "chr1:250"])

    assert "[ERROR]" in str(excinfo.value)


def test_without_flag_environment_variable_is_cleared():
    cli.apply_cli_configuration(cli.parse_args(["t.bed", "chr1:1", "chr1:2"]))

    assert run.LEGACY_CONTAINMENT is False
    assert "LANC_LEGACY_CONTAINMENT" not in os.environ


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("true", True), ("YES", True), (" on ", True), ("0", False), ("false", False), ("no", False)],
)
def test_env_flag_accepts_words(monkeypatch, raw, expected):
    monkeypatch.setenv("LANC_TEST_FLAG", raw)

    assert run.env_flag("LANC_TEST_FLAG") is expected


def test_env_flag_defaults_when_unset_or_blank(monkeypatch):
    monkeypatch.delenv("LANC_TEST_FLAG", raising=False)
    assert run.env_flag("LANC_TEST_FLAG", default=True) is True

    monkeypatch.setenv("LANC_TEST_FLAG", "  ")
    assert run.env_flag("LANC_TEST_FLAG") is False

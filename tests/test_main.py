import argparse
import json

import pytest
from PIL import Image

from spritemaster.main import load_offsets, main, parse_color, parse_tolerance
from spritemaster.models.options import FrameOffset


def test_cli_writes_processed_sheet(sheet_path, tmp_path, capsys):
    out = tmp_path / "fixed.png"
    code = main([str(sheet_path), "-o", str(out), "--height", "48", "--mode", "color", "--bg", "#ffffff"])
    assert code == 0
    assert Image.open(out).size == (240, 192)
    assert "fixed.png" in capsys.readouterr().out


def test_cli_reads_offsets_and_reports_budget_overrun(sheet_path, tmp_path, capsys):
    offsets = tmp_path / "offsets.json"
    offsets.write_text(json.dumps({"Hit": [{"x": 4, "y": -4}]}), encoding="utf-8")
    out = tmp_path / "fixed.png"
    code = main([
        str(sheet_path), "-o", str(out), "--width", "32", "--height", "40",
        "--offsets", str(offsets), "--budget", "1", "--max-attempts", "1",
    ])
    assert code == 0
    assert Image.open(out).size == (144, 144)
    assert "warning" in capsys.readouterr().err


def test_cli_missing_source_fails(tmp_path):
    assert main([str(tmp_path / "nope.png"), "-o", str(tmp_path / "out.png")]) == 1


def test_cli_invalid_target_size_fails(sheet_path, tmp_path):
    assert main([str(sheet_path), "-o", str(tmp_path / "out.png"), "--width", "0", "--height", "0"]) == 1


def test_parse_color():
    assert parse_color("#0A0B0C") == (10, 11, 12)
    assert parse_color("1, 2, 3") == (1, 2, 3)
    for bad in ("#12345", "1,2", "300,0,0", "#GGGGGG"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_color(bad)


def test_load_offsets_accepts_objects_and_pairs(tmp_path):
    path = tmp_path / "offsets.json"
    path.write_text(json.dumps({"Walk": [{"x": 1}, [2, -3]]}), encoding="utf-8")
    assert load_offsets(path) == {"Walk": [FrameOffset(1, 0), FrameOffset(2, -3)]}
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_offsets(path)


@pytest.mark.parametrize("payload", [{"Walk": 5}, {"Walk": [3]}, {"Walk": [[1, 2, 3]]}, {"Walk": [{"x": None}]}])
def test_malformed_offsets_are_value_errors(tmp_path, payload):
    path = tmp_path / "offsets.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValueError):
        load_offsets(path)


def test_cli_malformed_offsets_exit_with_error(sheet_path, tmp_path):
    offsets = tmp_path / "offsets.json"
    offsets.write_text(json.dumps({"Walk": 5}), encoding="utf-8")
    code = main([str(sheet_path), "-o", str(tmp_path / "out.png"), "--offsets", str(offsets)])
    assert code == 1


@pytest.mark.parametrize("value", ["150", "-1", "ten"])
def test_cli_rejects_tolerance_out_of_range(sheet_path, tmp_path, value):
    with pytest.raises(SystemExit) as info:
        main([str(sheet_path), "-o", str(tmp_path / "out.png"), "--tolerance", value])
    assert info.value.code == 2
    assert not (tmp_path / "out.png").exists()


def test_parse_tolerance_bounds():
    assert parse_tolerance("0") == 0
    assert parse_tolerance("100") == 100
    for bad in ("-1", "101", "abc"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_tolerance(bad)

# flake8: noqa
import json

from typer.testing import CliRunner

from cbcparser.cli import app

from .test_parsers import EDAN, EDAN_MULTI, HUMAN, human_export, human_row

runner = CliRunner()

RANGES_JSON = '{"wbc": {"lower": 4, "upper": 10}, "hgb": {"lower": 11, "upper": 16}}'


def _files(tmp_path, data: bytes, name="export.csv"):
    export = tmp_path / name
    export.write_bytes(data)
    ranges = tmp_path / "ranges.json"
    ranges.write_text(RANGES_JSON, encoding="utf-8")
    return str(export), str(ranges)


def test_edan_multi_compact(tmp_path):
    export, ranges = _files(tmp_path, EDAN_MULTI)
    result = runner.invoke(app, ["edan-multi", export, ranges, "--compact"])
    assert result.exit_code == 0
    assert result.stdout.startswith('[{"sid":"1001"')
    data = json.loads(result.stdout)
    assert [r["sid"] for r in data] == ["1001", "1002", "1003"]
    assert data[0]["hgb"]["flag"] == "L"


def test_edan_single_indent(tmp_path):
    export, ranges = _files(tmp_path, EDAN)
    result = runner.invoke(app, ["edan-single", export, ranges, "--indent"])
    assert result.exit_code == 0
    assert result.stdout.startswith('{\n   "sid": "1001"')


def test_human_single(tmp_path):
    export, ranges = _files(tmp_path, HUMAN, "export.txt")
    result = runner.invoke(app, ["human-single", export, ranges])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["sample_id"] == "1234"
    assert data["wbc"]["flag"] == "H"
    assert data["wbc"]["normal_range"] == {"lower": 4.0, "upper": 10.0}


def test_human_single_blank_fails(tmp_path):
    export, ranges = _files(tmp_path, human_export(human_row(sample_id="0")), "export.txt")
    result = runner.invoke(app, ["human-single", export, ranges])
    assert result.exit_code == 1


def test_human_multi_skips_blank(tmp_path):
    data = human_export(human_row(sample_id="0"), human_row(sample_id="77"))
    export, ranges = _files(tmp_path, data, "export.txt")
    result = runner.invoke(app, ["human-multi", export, ranges, "--compact"])
    assert result.exit_code == 0
    assert [r["sample_id"] for r in json.loads(result.stdout)] == ["77"]


def test_missing_input_file(tmp_path):
    _, ranges = _files(tmp_path, EDAN)
    result = runner.invoke(app, ["edan-single", str(tmp_path / "missing.csv"), ranges])
    assert result.exit_code == 1


def test_bad_normal_ranges(tmp_path):
    export, ranges = _files(tmp_path, EDAN)
    (tmp_path / "ranges.json").write_text("{oops", encoding="utf-8")
    result = runner.invoke(app, ["edan-single", export, ranges])
    assert result.exit_code == 1


def test_wrong_device(tmp_path):
    export, ranges = _files(tmp_path, EDAN)
    result = runner.invoke(app, ["human-single", export, ranges])
    assert result.exit_code == 1


def test_parse_autodetect_to_file(tmp_path):
    export, ranges = _files(tmp_path, HUMAN, "export.txt")
    out = tmp_path / "out.json"
    result = runner.invoke(
        app, ["parse", export, "--ranges", ranges, "--multi", "--format", "json", "--output", str(out)]
    )
    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data[0]["sample_id"] == "1234"


def test_parse_without_ranges(tmp_path):
    export, _ = _files(tmp_path, EDAN)
    result = runner.invoke(app, ["parse", export, "--device", "edan", "--format", "json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["wbc"]["normal_range"] == {"lower": 0.0, "upper": 0.0}
    assert data["wbc"]["flag"] == ""


def test_parse_unknown_device(tmp_path):
    export, _ = _files(tmp_path, EDAN)
    result = runner.invoke(app, ["parse", export, "--device", "sysmex"])
    assert result.exit_code == 1


def test_parse_with_settings_file(tmp_path):
    export, ranges = _files(tmp_path, EDAN_MULTI)
    settings = tmp_path / "settings.yaml"
    settings.write_text(
        f"paths:\n  normal_ranges: {ranges}\noutput:\n  format: json\n  multi: true\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["parse", export, "--settings", str(settings)])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert len(data) == 3
    assert data[0]["wbc"]["normal_range"] == {"lower": 4.0, "upper": 10.0}


def test_bad_log_level(tmp_path, monkeypatch):
    export, ranges = _files(tmp_path, EDAN)
    monkeypatch.setenv("LOG_LEVEL", "NOT_A_LEVEL")
    result = runner.invoke(app, ["edan-single", export, ranges])
    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)


def test_unwritable_logs_root(tmp_path):
    export, ranges = _files(tmp_path, EDAN)
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    settings = tmp_path / "settings.yaml"
    settings.write_text(f"paths:\n  logs_root: {blocker}\n", encoding="utf-8")
    result = runner.invoke(app, ["parse", export, "--settings", str(settings)])
    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)

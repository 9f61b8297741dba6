import json

import pytest

from subburn.cli import CLIHandler


@pytest.fixture(autouse=True)
def run_in_tmp(tmp_path, monkeypatch):
    # log files land in ./logs
    monkeypatch.chdir(tmp_path)


def run_cli(argv):
    with pytest.raises(SystemExit) as excinfo:
        CLIHandler().run(argv)
    return excinfo.value.code


def test_export_command(tmp_path):
    source = tmp_path / "subs.vtt"
    source.write_text("WEBVTT\n\n1\n00:00:01.000 --> 00:00:02.000\nHi\n\n", encoding="utf-8")
    assert run_cli(["export", "-s", str(source), "-f", "ass", "-o", str(tmp_path / "out")]) == 0
    content = (tmp_path / "out" / "subtitles.ass").read_text(encoding="utf-8")
    assert content.endswith("Dialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,Hi\n")


def test_export_missing_source_exits_with_error(tmp_path):
    assert run_cli(["export", "-s", str(tmp_path / "nope.vtt"), "-f", "srt", "-o", str(tmp_path)]) == 1


def test_segment_command(tmp_path):
    payload = {"text": "Hello world.", "segments": [{"start": 0, "end": 2, "text": " Hello world."}]}
    transcript = tmp_path / "transcript.json"
    transcript.write_text(json.dumps(payload), encoding="utf-8")
    output = tmp_path / "subs.vtt"
    assert run_cli(["segment", "-j", str(transcript), "-o", str(output)]) == 0
    assert output.read_text(encoding="utf-8") == "WEBVTT\n\n1\n00:00:00.000 --> 00:00:02.000\nHello world.\n\n"


def test_segment_command_bad_json(tmp_path):
    transcript = tmp_path / "transcript.json"
    transcript.write_text("{not json", encoding="utf-8")
    assert run_cli(["segment", "-j", str(transcript), "-o", str(tmp_path / "subs.vtt")]) == 1


@pytest.mark.parametrize("payload", [[1, 2], "text", 3])
def test_segment_command_rejects_non_object_json(tmp_path, payload):
    transcript = tmp_path / "transcript.json"
    transcript.write_text(json.dumps(payload), encoding="utf-8")
    output = tmp_path / "subs.vtt"
    assert run_cli(["segment", "-j", str(transcript), "-o", str(output)]) == 1
    assert not output.exists()


def test_segment_command_skips_non_finite_timing(tmp_path):
    transcript = tmp_path / "transcript.json"
    transcript.write_text(
        '{"segments": [{"start": NaN, "end": 1, "text": "bad"}, 7, {"start": 1, "end": 2, "text": "ok"}]}',
        encoding="utf-8",
    )
    output = tmp_path / "subs.vtt"
    assert run_cli(["segment", "-j", str(transcript), "-o", str(output)]) == 0
    assert output.read_text(encoding="utf-8") == "WEBVTT\n\n1\n00:00:01.000 --> 00:00:02.000\nok\n\n"


def test_generate_missing_input(tmp_path):
    assert run_cli(["generate", "-i", str(tmp_path / "missing.mp3")]) == 1


def test_missing_config_file(tmp_path):
    assert run_cli(["-c", str(tmp_path / "nope.yaml"), "export", "-s", "x", "-f", "srt", "-o", "y"]) == 1

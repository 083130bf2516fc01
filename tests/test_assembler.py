#!/usr/bin/env python3

"""
Pytest coverage for manifest writing, concatenation and probing.
"""

# Standard Library
import datetime
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)
TESTS_DIR = os.path.dirname(__file__)
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)

# local repo modules
from fake_tools import FakeRunner
from wurqlib.core import utils
from wurqlib.core.assembler import Assembler
from wurqlib.core.assembler import manifest_line
from wurqlib.core.assembler import manifest_text
from wurqlib.core.assembler import output_filename
from wurqlib.core.errors import AssemblyError
from wurqlib.core.events import EventStream
from wurqlib.media import ffmpeg_probe

#============================================

def _assembler() -> tuple:
	events = EventStream(echo=False)
	messages = []
	events.subscribe(messages.append)
	return Assembler("ffmpeg", "ffprobe", events=events), messages

#============================================

def _segments(tmp_path, count: int) -> list:
	files = []
	for index in range(count):
		path = tmp_path / f"work_{index:03d}.mp4"
		path.write_bytes(b"segment")
		files.append(str(path))
	return files

#============================================

def test_manifest_line_quotes_apostrophes() -> None:
	assert manifest_line("/tmp/run/work_000.mp4") == "file '/tmp/run/work_000.mp4'"
	assert manifest_line("/tmp/o'neil/a.mp4") == "file '/tmp/o'\\''neil/a.mp4'"

#============================================

def test_manifest_is_deterministic(tmp_path) -> None:
	files = _segments(tmp_path, 3)
	text = manifest_text(files)
	assert text == manifest_text(list(files))
	assert text.endswith("\n")
	assert text.splitlines() == [f"file '{path}'" for path in files]

#============================================

def test_write_manifest(tmp_path) -> None:
	assembler, _messages = _assembler()
	files = _segments(tmp_path, 2)
	manifest = assembler.write_manifest(files, str(tmp_path / "file_list.txt"))
	with open(manifest, 'r', encoding='utf-8') as handle:
		assert handle.read() == manifest_text(files)
	with pytest.raises(AssemblyError):
		assembler.write_manifest([], str(tmp_path / "empty.txt"))

#============================================

def test_output_filename() -> None:
	now = datetime.datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=datetime.timezone.utc)
	stamp = utils.make_timestamp(now)
	assert stamp == "2024-05-06T07-08-09-123Z"
	assert output_filename(stamp) == "workout_video_2024-05-06T07-08-09-123Z.mp4"

#============================================

def test_validate_entries_sums_durations(tmp_path, monkeypatch) -> None:
	runner = FakeRunner(duration=20.0)
	monkeypatch.setattr(utils, "runCmd", runner)
	assembler, messages = _assembler()
	total = assembler.validate_entries(_segments(tmp_path, 3))
	assert total == pytest.approx(60.0)
	texts = [event['message'] for event in messages]
	assert "Segment 1: work_000.mp4 - EXISTS" in texts
	assert "  Duration: 20.00s" in texts

#============================================

def test_validate_entries_missing_file(tmp_path, monkeypatch) -> None:
	monkeypatch.setattr(utils, "runCmd", FakeRunner())
	assembler, messages = _assembler()
	files = _segments(tmp_path, 2) + [str(tmp_path / "gone.mp4")]
	with pytest.raises(AssemblyError):
		assembler.validate_entries(files)
	errors = [event['message'] for event in messages if event.get('level') == 'error']
	assert errors == ["Segment 3: gone.mp4 - MISSING"]

#============================================

def test_concatenate(tmp_path, monkeypatch) -> None:
	runner = FakeRunner()
	monkeypatch.setattr(utils, "runCmd", runner)
	assembler, _messages = _assembler()
	out_dir = tmp_path / "out" / "nested"
	out_file = assembler.concatenate(str(tmp_path / "file_list.txt"), str(out_dir),
		timestamp="stamp")
	assert out_file == str(out_dir / "workout_video_stamp.mp4")
	assert os.path.isfile(out_file)
	cmd = runner.concat_commands()[0]
	assert cmd[cmd.index('-c') + 1] == 'copy'
	assert cmd[-1] == out_file

#============================================

def test_concatenate_failure(tmp_path, monkeypatch) -> None:
	runner = FakeRunner()
	runner.fail_when = lambda args: 'concat' in args
	monkeypatch.setattr(utils, "runCmd", runner)
	assembler, _messages = _assembler()
	with pytest.raises(AssemblyError) as excinfo:
		assembler.concatenate(str(tmp_path / "file_list.txt"), str(tmp_path))
	assert "invalid data" in excinfo.value.diagnostics

#============================================

def test_probe_failure_is_not_fatal(tmp_path, monkeypatch) -> None:
	runner = FakeRunner()
	runner.missing_tools.add('ffprobe')
	monkeypatch.setattr(utils, "runCmd", runner)
	assembler, messages = _assembler()
	assert assembler.probe(str(tmp_path / "out.mp4")) is None
	warnings = [event['message'] for event in messages if event.get('level') == 'warn']
	assert "Could not determine video duration" in warnings

#============================================

def test_parse_duration() -> None:
	assert ffmpeg_probe.parse_duration('{"format": {"duration": "12.5"}}') == 12.5
	assert ffmpeg_probe.parse_duration('{"format": {}}') is None
	assert ffmpeg_probe.parse_duration('not json') is None
	assert ffmpeg_probe.parse_duration('[]') is None
	assert ffmpeg_probe.parse_duration('{"format": {"duration": "N/A"}}') is None

#!/usr/bin/env python3

import os
from wurqlib.core import utils
from wurqlib.core.errors import AssemblyError
from wurqlib.core.errors import ConfigurationError
from wurqlib.media import ffmpeg_probe
from wurqlib.media import ffmpeg_render

#============================================

def manifest_line(path: str) -> str:
	# concat demuxer quoting: close quote, escaped quote, reopen
	quoted = os.path.abspath(path).replace("'", "'\\''")
	return f"file '{quoted}'"

#============================================

def manifest_text(segment_files: list) -> str:
	return "\n".join(manifest_line(path) for path in segment_files) + "\n"

#============================================

def output_filename(timestamp: str = None) -> str:
	if timestamp is None:
		timestamp = utils.make_timestamp()
	return f"workout_video_{timestamp}.mp4"

#============================================

class Assembler():
	def __init__(self, ffmpeg: str, ffprobe: str, events=None):
		self.ffmpeg = ffmpeg
		self.ffprobe = ffprobe
		self.events = events

	#============================
	def write_manifest(self, segment_files: list, manifest_file: str) -> str:
		if len(segment_files) == 0:
			raise AssemblyError("no segments to concatenate")
		with open(manifest_file, 'w', encoding='utf-8') as handle:
			handle.write(manifest_text(segment_files))
		return manifest_file

	#============================
	def validate_entries(self, segment_files: list) -> float:
		"""
		Report every entry with its probed duration; missing files abort.
		"""
		self._info(f"Total segments to concatenate: {len(segment_files)}")
		missing = []
		total = 0.0
		for index, segment in enumerate(segment_files, start=1):
			name = os.path.basename(segment)
			if not os.path.isfile(segment):
				self._error(f"Segment {index}: {name} - MISSING")
				missing.append(segment)
				continue
			self._info(f"Segment {index}: {name} - EXISTS")
			duration = self._probe_duration(segment)
			if duration is None:
				self._warn(f"  Could not get duration for {name}")
				continue
			total += duration
			self._info(f"  Duration: {duration:.2f}s")
		if len(missing) > 0:
			raise AssemblyError(f"{len(missing)} segment files missing before concatenation")
		return total

	#============================
	def concatenate(self, manifest_file: str, output_dir: str,
		timestamp: str = None) -> str:
		os.makedirs(output_dir, exist_ok=True)
		out_file = os.path.join(output_dir, output_filename(timestamp))
		self._info(f"Output will be saved to: {output_dir}")
		result = utils.runCmd(ffmpeg_render.concat_command(self.ffmpeg,
			manifest_file, out_file))
		if result['returncode'] != 0:
			raise AssemblyError(f"concatenation failed with code {result['returncode']}",
				output_file=out_file, diagnostics=utils.tail_text(result['stderr']))
		if not utils.is_nonempty_file(out_file):
			raise AssemblyError(f"failed to create workout video: {out_file}",
				output_file=out_file)
		self._info(f"Workout video created successfully: {out_file}")
		return out_file

	#============================
	def probe(self, out_file: str):
		duration = self._probe_duration(out_file)
		if duration is None:
			self._warn("Could not determine video duration")
			return None
		self._info(f"Video duration: {duration:.2f} seconds")
		return duration

	#============================
	def _probe_duration(self, mediafile: str):
		try:
			return ffmpeg_probe.probe_duration(self.ffprobe, mediafile)
		except ConfigurationError as exc:
			# probing is diagnostic only
			self._warn(str(exc))
			return None

	#============================
	def _info(self, message: str) -> None:
		if self.events is not None:
			self.events.info(message)

	#============================
	def _warn(self, message: str) -> None:
		if self.events is not None:
			self.events.warn(message)

	#============================
	def _error(self, message: str) -> None:
		if self.events is not None:
			self.events.error(message)

#!/usr/bin/env python3

import os
from wurqlib.core import utils
from wurqlib.core.errors import RenderError
from wurqlib.core.planner import describe_segment
from wurqlib.media import ffmpeg_render

#============================================

OUTPUT_PREFIXES = {
	'work': "work",
	'rest': "rest",
	'station_change': "station_rest",
	'celebration': "celebration",
}

#============================================

class SegmentRenderer():
	def __init__(self, ffmpeg: str, profile: dict, builder, workspace: str,
		events=None):
		self.ffmpeg = ffmpeg
		self.profile = profile
		self.builder = builder
		self.workspace = workspace
		self.events = events

	#============================
	def output_path(self, segment: dict, index: int) -> str:
		prefix = OUTPUT_PREFIXES[segment['type']]
		return os.path.join(self.workspace, f"{prefix}_{index:03d}.mp4")

	#============================
	def render(self, segment: dict, index: int) -> dict:
		"""
		Render one segment; returns {'ok', 'path', 'error'}.

		Source and tool failures come back as a RenderError in the result.
		A missing ffmpeg binary or font raises ConfigurationError.
		"""
		out_file = self.output_path(segment, index)
		self._info(f"Creating segment {index}: {describe_segment(segment)}")
		try:
			spec = self._build_spec(segment)
			self._run(spec, out_file)
		except RenderError as exc:
			self._error(str(exc))
			if exc.diagnostics:
				self._error(exc.diagnostics)
			return {'ok': False, 'path': out_file, 'error': exc}
		self._info(f"Segment created: {out_file}")
		return {'ok': True, 'path': out_file, 'error': None}

	#============================
	def render_celebration(self, segment: dict, index: int) -> dict:
		result = self.render(segment, index)
		if result['ok']:
			size_mb = os.path.getsize(result['path']) / 1024.0 / 1024.0
			self._info(f"Transcoded file size: {size_mb:.2f} MB")
		return result

	#============================
	def _build_spec(self, segment: dict) -> dict:
		kind = segment['type']
		if kind == 'work':
			self._require_source(segment['exercise'], "video file")
			return self.builder.build_work(segment)
		if kind == 'rest':
			return self.builder.build_countdown(segment['caption'], segment['duration'])
		if kind == 'station_change':
			self._require_source(segment['exercise'], "next exercise video")
			return self.builder.build_station_change(segment)
		if kind == 'celebration':
			self._require_source(segment['clip'], "celebration video")
			spec = self.builder.build_celebration(segment)
			if not spec['captioned']:
				self._warn("font not found, transcoding celebration without captions")
			return spec
		raise RenderError(f"unsupported segment type: {kind}")

	#============================
	def _require_source(self, source_file: str, label: str) -> None:
		if not os.path.isfile(source_file):
			raise RenderError(f"{label} not found: {source_file}")

	#============================
	def _run(self, spec: dict, out_file: str) -> None:
		cmd = ffmpeg_render.segment_command(self.ffmpeg, spec, self.profile, out_file)
		result = utils.runCmd(cmd)
		if result['returncode'] != 0:
			raise RenderError(
				f"ffmpeg failed with code {result['returncode']}: {os.path.basename(out_file)}",
				output_file=out_file, diagnostics=utils.tail_text(result['stderr']))
		if not utils.is_nonempty_file(out_file):
			raise RenderError(f"segment file not created: {out_file}",
				output_file=out_file)

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

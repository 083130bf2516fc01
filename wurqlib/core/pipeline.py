#!/usr/bin/env python3

import os
import shutil
import tempfile
import threading
from wurqlib.core import utils
from wurqlib.core.assembler import Assembler
from wurqlib.core.assets import MediaAssets
from wurqlib.core.catalog import list_celebration_clips
from wurqlib.core.errors import AssemblyError
from wurqlib.core.errors import CancelledError
from wurqlib.core.errors import ConfigurationError
from wurqlib.core.errors import ValidationError
from wurqlib.core.errors import WorkspaceError
from wurqlib.core.planner import SegmentPlanner
from wurqlib.core.planner import count_segments
from wurqlib.core.planner import estimated_seconds
from wurqlib.core.renderer import SegmentRenderer
from wurqlib.core.selector import ExerciseSelector
from wurqlib.core.selector import compute_capacity
from wurqlib.media import ffmpeg_render
from wurqlib.media.overlays import FilterGraphBuilder

#============================================

# closed ranges, durations in seconds and total in minutes
VALIDATION_RANGES = {
	'work_duration': (10, 300, "work duration", "seconds"),
	'rest_duration': (5, 120, "rest duration", "seconds"),
	'sets_per_station': (1, 10, "sets per station", ""),
	'station_rest': (5, 60, "station rest time", "seconds"),
	'total_minutes': (5, 180, "total workout duration", "minutes"),
}

STATES = (
	'idle',
	'validating_inputs',
	'selecting_exercises',
	'rendering_segments',
	'rendering_celebration',
	'building_manifest',
	'concatenating',
	'probing',
	'cleaning_up',
	'done',
	'failed',
)

# progress milestones
RENDER_START = 25
RENDER_END = 85

#============================================

def validate_request(request, output_dir: str = None, require_output: bool = True) -> None:
	for field, (low, high, label, unit) in VALIDATION_RANGES.items():
		value = getattr(request, field)
		if isinstance(value, bool) or not isinstance(value, int):
			raise ValidationError(f"invalid {label}: must be a whole number")
		if value < low or value > high:
			unit_text = f" {unit}" if unit else ""
			raise ValidationError(
				f"invalid {label}: enter a number between {low} and {high}{unit_text}")
	if len(request.categories) == 0:
		raise ValidationError("select at least one category")
	if len(request.equipment) == 0:
		raise ValidationError("select at least one equipment type")
	if require_output and not output_dir:
		raise ValidationError("output directory is required")

#============================================

class PipelineOrchestrator():
	def __init__(self, config, catalog, events, rng=None):
		self.config = config
		self.catalog = catalog
		self.events = events
		self.rng = rng
		self.state = 'idle'
		self.state_history = ['idle']
		self.workspace = None
		self.cancel_event = threading.Event()

	#============================
	def cancel(self) -> None:
		self.cancel_event.set()
		utils.kill_active_command()

	#============================
	def run(self, request, output_dir: str) -> str:
		try:
			return self._run(request, output_dir)
		except Exception as exc:
			self._set_state('failed')
			self.events.error(str(exc))
			raise
		finally:
			self._cleanup()

	#============================
	def _run(self, request, output_dir: str) -> str:
		self._set_state('validating_inputs')
		self.check_tool()
		self.events.progress(5, "Checking FFmpeg installation...")
		validate_request(request, output_dir)
		self._log_parameters(request)
		self.events.progress(10, "Validating parameters...")

		self._set_state('selecting_exercises')
		self.events.progress(15, "Selecting exercises...")
		capacity = compute_capacity(request)
		videos = self.catalog.videos_by_equipment(request.categories, request.equipment)
		selector = ExerciseSelector(rng=self.rng, events=self.events)
		exercises = selector.select(capacity, request.equipment, videos)
		self.events.info(f"Selected {len(exercises)} exercises for "
			f"{request.total_minutes} minute workout.")
		planner = SegmentPlanner(request.work_duration, request.rest_duration,
			request.sets_per_station, request.station_rest)
		self.events.info("Looking for celebration videos...")
		clips = list_celebration_clips(self.config.celebrate_dir(), self.events)
		if len(clips) == 0:
			self.events.info("No celebration videos found, skipping celebration")
		else:
			self.events.info(f"Found {len(clips)} celebration videos")
		workout_plan = planner.plan(exercises, clips)
		counts = count_segments(workout_plan)
		self.events.info(f"Planned {counts['work']} work, {counts['rest']} rest, "
			f"{counts['station_change']} station change and "
			f"{counts['celebration']} celebration segments")
		seconds = estimated_seconds(workout_plan)
		self.events.info(f"Estimated total workout time: {seconds} seconds "
			f"({seconds // 60} minutes)")

		self.events.progress(20, "Creating temporary directory...")
		self._create_workspace()
		assets = MediaAssets.from_config(self.config)
		if not assets.has_cue():
			self.events.warn(f"cue audio not found, segments will be silent: {assets.cue_file}")
		profile = self.config.profile
		builder = FilterGraphBuilder(assets, profile['width'], profile['height'],
			profile['fps'])
		renderer = SegmentRenderer(self.config.ffmpeg, profile, builder,
			self.workspace, events=self.events)

		self._set_state('rendering_segments')
		self.events.progress(RENDER_START, "Starting video segment generation...")
		segment_files = self._render_plan(renderer, workout_plan)
		self._check_cancelled()

		self._set_state('building_manifest')
		self.events.progress(RENDER_END, "Creating file list for concatenation...")
		assembler = Assembler(self.config.ffmpeg, self.config.ffprobe, events=self.events)
		manifest_file = os.path.join(self.workspace, "file_list.txt")
		assembler.write_manifest(segment_files, manifest_file)
		assembler.validate_entries(segment_files)
		self._check_cancelled()

		self._set_state('concatenating')
		self.events.progress(90, "Concatenating video segments...")
		try:
			out_file = assembler.concatenate(manifest_file, output_dir)
		except AssemblyError:
			# a killed ffmpeg reports as a failed concat
			self._check_cancelled()
			raise
		self._check_cancelled()

		self._set_state('probing')
		self.events.progress(95, "Getting video duration...")
		assembler.probe(out_file)
		self._check_cancelled()

		self._set_state('cleaning_up')
		self.events.progress(98, "Cleaning up temporary files...")
		self._cleanup()
		self._set_state('done')
		self.events.progress(100, "Workout video generation complete!")
		self.events.info(f"Output file: {out_file}")
		return out_file

	#============================
	def check_tool(self) -> str:
		result = utils.runCmd(ffmpeg_render.version_command(self.config.ffmpeg))
		if result['returncode'] != 0:
			raise ConfigurationError(f"ffmpeg is not usable: {self.config.ffmpeg}")
		lines = result['stdout'].strip().splitlines()
		version = lines[0] if len(lines) > 0 else "unknown version"
		self.events.info(f"FFMPEG is available: {version}")
		return version

	#============================
	def _render_plan(self, renderer, workout_plan: list) -> list:
		segment_files = []
		total = len(workout_plan)
		for index, segment in enumerate(workout_plan):
			self._check_cancelled()
			if segment['type'] == 'work' and segment['set'] == 1:
				name = os.path.basename(segment['exercise'])
				self.events.info(f"Processing exercise {segment['station'] + 1}/"
					f"{segment['total_stations']}: {name}")
			percent = RENDER_START + (index * (RENDER_END - RENDER_START)) // total
			self.events.progress(percent, f"Rendering segment {index + 1}/{total}")
			if segment['type'] == 'celebration':
				self._set_state('rendering_celebration')
				result = renderer.render_celebration(segment, index)
			else:
				result = renderer.render(segment, index)
			if result['ok']:
				segment_files.append(result['path'])
				continue
			self._check_cancelled()
			if segment['type'] != 'celebration':
				raise result['error']
			# a failed celebration clip is dropped, the workout still ships
			name = os.path.basename(segment['clip'])
			self.events.warn(f"Failed to transcode celebration video {name}")
		return segment_files

	#============================
	def _create_workspace(self) -> None:
		parent = self.config.temp_dir
		try:
			if parent is not None:
				os.makedirs(parent, exist_ok=True)
			self.workspace = tempfile.mkdtemp(prefix="wurqit-run-", dir=parent)
		except OSError as exc:
			raise WorkspaceError(f"could not create temporary directory: {exc}") from exc
		self.events.info(f"Creating temporary directory: {self.workspace}")

	#============================
	def _cleanup(self) -> None:
		if self.workspace is None:
			return
		workspace = self.workspace
		self.workspace = None
		if self.config.keep_temp:
			self.events.info(f"Keeping temporary files: {workspace}")
			return
		self.events.info("Cleaning up temporary files...")
		try:
			shutil.rmtree(workspace)
		except OSError as exc:
			self.events.warn(f"could not remove temporary directory {workspace}: {exc}")

	#============================
	def _check_cancelled(self) -> None:
		if self.cancel_event.is_set():
			raise CancelledError("generation cancelled")

	#============================
	def _set_state(self, state: str) -> None:
		if state not in STATES:
			raise ValueError(f"unknown pipeline state: {state}")
		if state == self.state:
			return
		self.state = state
		self.state_history.append(state)

	#============================
	def _log_parameters(self, request) -> None:
		self.events.info("Parameters set:")
		self.events.info(f"  Work duration: {request.work_duration}s")
		self.events.info(f"  Rest duration: {request.rest_duration}s")
		self.events.info(f"  Sets per station: {request.sets_per_station}")
		self.events.info(f"  Station rest time: {request.station_rest}s")
		self.events.info(f"  Total workout duration: {request.total_minutes} minutes")
		self.events.info(f"  Categories: {', '.join(request.categories)}")
		self.events.info(f"  Equipment: {', '.join(request.equipment)}")

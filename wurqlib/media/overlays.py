#!/usr/bin/env python3

import os
from wurqlib.core.errors import ConfigurationError
from wurqlib.media import filtergraph

#============================================

# progress grid geometry in pixels
GRID_TOP = 50
CELL_WIDTH = 20
CELL_HEIGHT = 40
CELL_MARGIN = 2
STATION_MARGIN = 20
GRID_PADDING = 10
GRID_BACKDROP = "black@0.5"

GRID_COLORS = {
	'completed': "lime",
	'current': "yellow",
	'pending': "gray",
}

CAPTION_BACKGROUNDS = {
	"REST": "darkred",
	"NEXT EXERCISE": "darkblue",
}
WORK_BACKGROUND = "darkgreen"
DEFAULT_BACKGROUND = "black"
TEXT_BOX = "black@0.7"

AUDIO_RATE = 48000
CELEBRATION_CAPTIONS = ("CONGRATULATIONS!", "YOU COMPLETED THE WORKOUT!")

#============================================

def format_exercise_name(filename: str) -> str:
	"""
	leg-press.mp4 -> "Leg press"; only the first character is uppercased.
	"""
	basename = os.path.splitext(os.path.basename(filename))[0]
	name = basename.replace("-", " ")
	if name == "":
		return name
	return name[0].upper() + name[1:]

#============================================

def background_for_caption(caption: str) -> str:
	return CAPTION_BACKGROUNDS.get(caption, DEFAULT_BACKGROUND)

#============================================

def countdown_expression(duration: int) -> str:
	# floor of the remaining seconds, zero padded to two digits
	return f"%{{eif:floor({duration}-t):d:2}}"

#============================================

def cell_state(station: int, set_index: int, current_station: int,
	current_set: int) -> str:
	if (station, set_index) < (current_station, current_set):
		return 'completed'
	if (station, set_index) == (current_station, current_set):
		return 'current'
	return 'pending'

#============================================

def grid_width(total_stations: int, sets_per_station: int) -> int:
	return (total_stations * sets_per_station * CELL_WIDTH
		+ (total_stations - 1) * STATION_MARGIN
		+ total_stations * (sets_per_station - 1) * CELL_MARGIN)

#============================================

def grid_cells(total_stations: int, sets_per_station: int,
	canvas_width: int = 1920) -> list:
	"""
	Return (station, set, x) for every cell, left to right.
	"""
	start_x = (canvas_width - grid_width(total_stations, sets_per_station)) // 2
	cells = []
	x = start_x
	for station in range(total_stations):
		for set_index in range(1, sets_per_station + 1):
			cells.append((station, set_index, x))
			x += CELL_WIDTH + CELL_MARGIN
		x += STATION_MARGIN - CELL_MARGIN
	return cells

#============================================

def progress_grid(current_station: int, current_set: int, total_stations: int,
	sets_per_station: int, canvas_width: int = 1920) -> list:
	width = grid_width(total_stations, sets_per_station)
	start_x = (canvas_width - width) // 2
	filters = [filtergraph.drawbox(start_x - GRID_PADDING, GRID_TOP - GRID_PADDING,
		width + 2 * GRID_PADDING, CELL_HEIGHT + 2 * GRID_PADDING, GRID_BACKDROP)]
	for station, set_index, x in grid_cells(total_stations, sets_per_station,
		canvas_width):
		state = cell_state(station, set_index, current_station, current_set)
		filters.append(filtergraph.drawbox(x, GRID_TOP, CELL_WIDTH, CELL_HEIGHT,
			GRID_COLORS[state]))
	return filters

#============================================

class FilterGraphBuilder():
	"""
	Builds the inputs and filter graph for each segment type.

	Each build_* method returns a dict with 'inputs' (lists of ffmpeg input
	arguments), 'graph' (FilterGraph), 'video' and 'audio' output labels.
	"""
	def __init__(self, assets, width: int = 1920, height: int = 1080,
		fps: int = 25):
		self.assets = assets
		self.width = width
		self.height = height
		self.fps = fps

	#============================
	def require_font(self) -> str:
		if not self.assets.has_font():
			raise ConfigurationError(f"font not found: {self.assets.font_file}")
		return self.assets.font_file

	#============================
	def build_work(self, segment: dict) -> dict:
		font = self.require_font()
		duration = segment['duration']
		name = format_exercise_name(segment['exercise'])
		name_size = self.assets.fit_font_size(name, 60, self.width - 200)
		graph = filtergraph.FilterGraph()
		graph.add(filtergraph.FilterChain(['0:v'], [
			filtergraph.scale(self.width, self.height),
			filtergraph.pad(self.width, self.height, color=WORK_BACKGROUND),
		], 'scaled'))
		chain = graph.add(filtergraph.FilterChain(['1:v', 'scaled'],
			[filtergraph.overlay()], 'v'))
		chain.add(
			filtergraph.drawtext(name, font, name_size, "(w-text_w)/2", "h-200",
				boxcolor=TEXT_BOX),
			filtergraph.drawtext(countdown_expression(duration), font, 72,
				"(w-text_w)/2", "h-100", boxcolor=TEXT_BOX, expand=True),
		)
		chain.add(*progress_grid(segment['station'], segment['set'],
			segment['total_stations'], segment['sets_per_station'], self.width))
		inputs = [
			['-stream_loop', '-1', '-t', str(duration), '-i', segment['exercise']],
			self._color_input(WORK_BACKGROUND, duration),
		]
		return self._finish(graph, inputs, duration)

	#============================
	def build_countdown(self, caption: str, duration: int) -> dict:
		font = self.require_font()
		graph = filtergraph.FilterGraph()
		graph.add(filtergraph.FilterChain(['0:v'], [
			filtergraph.drawtext(caption, font, 72, "(w-text_w)/2", "(h-text_h)/2"),
			filtergraph.drawtext(countdown_expression(duration), font, 120,
				"(w-text_w)/2", "(h-text_h)/2+100", expand=True),
		], 'v'))
		inputs = [self._color_input(background_for_caption(caption), duration)]
		return self._finish(graph, inputs, duration)

	#============================
	def build_station_change(self, segment: dict) -> dict:
		font = self.require_font()
		duration = segment['duration']
		caption = "NEXT EXERCISE"
		name = format_exercise_name(segment['exercise'])
		name_size = self.assets.fit_font_size(name, 48, self.width - 200)
		background = background_for_caption(caption)
		graph = filtergraph.FilterGraph()
		graph.add(filtergraph.FilterChain(['0:v'], [
			filtergraph.scale(600, 600),
			filtergraph.pad(600, 600, color=background),
		], 'preview'))
		graph.add(filtergraph.FilterChain(['1:v', 'preview'], [
			filtergraph.overlay(),
			filtergraph.drawtext(caption, font, 72, "(w-text_w)/2", "50"),
			filtergraph.drawtext(name, font, name_size, "(w-text_w)/2", "150"),
			filtergraph.drawtext(countdown_expression(duration), font, 120,
				"(w-text_w)/2", "h-text_h-40", expand=True),
		], 'v'))
		inputs = [
			['-stream_loop', '-1', '-t', str(duration), '-i', segment['exercise']],
			self._color_input(background, duration),
		]
		return self._finish(graph, inputs, duration)

	#============================
	def build_celebration(self, segment: dict) -> dict:
		chain = filtergraph.FilterChain(['0:v'], [
			filtergraph.scale(self.width, self.height),
			filtergraph.pad(self.width, self.height, color=DEFAULT_BACKGROUND),
			filtergraph.fps(self.fps),
		], 'v')
		captioned = self.assets.has_font()
		if captioned:
			font = self.assets.font_file
			chain.add(
				filtergraph.drawtext(CELEBRATION_CAPTIONS[0], font, 72,
					"(w-text_w)/2", "50", boxcolor=TEXT_BOX),
				filtergraph.drawtext(CELEBRATION_CAPTIONS[1], font, 60,
					"(w-text_w)/2", "150", boxcolor=TEXT_BOX),
			)
		graph = filtergraph.FilterGraph()
		graph.add(chain)
		spec = self._finish(graph, [['-i', segment['clip']]], None, use_cue=False)
		spec['captioned'] = captioned
		return spec

	#============================
	def _color_input(self, color: str, duration: int) -> list:
		source = f"color=c={color}:s={self.width}x{self.height}:r={self.fps}:d={duration}"
		return ['-f', 'lavfi', '-i', source]

	#============================
	def _finish(self, graph, inputs: list, duration, use_cue: bool = True) -> dict:
		audio_index = len(inputs)
		audio_filters = []
		has_cue = use_cue and self.assets.has_cue()
		if has_cue:
			inputs.append(['-i', self.assets.cue_file])
			audio_filters += [filtergraph.adelay(0), filtergraph.apad()]
		else:
			# silent track keeps every segment's stream layout identical
			inputs.append(['-f', 'lavfi', '-i',
				f"anullsrc=r={AUDIO_RATE}:cl=stereo"])
		audio_filters.append(filtergraph.aformat(AUDIO_RATE, 'stereo'))
		graph.add(filtergraph.FilterChain([f"{audio_index}:a"], audio_filters, 'aud'))
		return {
			'inputs': inputs,
			'graph': graph,
			'video': 'v',
			'audio': 'aud',
			'duration': duration,
			'has_cue': has_cue,
		}

#!/usr/bin/env python3

import collections
import os

#============================================

SEGMENT_TYPES = ('work', 'rest', 'station_change', 'celebration')

#============================================

class SegmentPlanner():
	def __init__(self, work_duration: int, rest_duration: int,
		sets_per_station: int, station_rest: int):
		self.work_duration = work_duration
		self.rest_duration = rest_duration
		self.sets_per_station = sets_per_station
		self.station_rest = station_rest

	#============================
	def plan(self, exercises: list, celebration_clips: list = None) -> list:
		total_stations = len(exercises)
		last_station = total_stations - 1
		sets = self.sets_per_station
		segments = []
		for station, exercise in enumerate(exercises):
			for set_index in range(1, sets + 1):
				segments.append(self._work(exercise, station, set_index, total_stations))
				# the station change replaces the rest after a station's last set
				if set_index < sets:
					segments.append({
						'type': 'rest',
						'caption': "REST",
						'duration': self.rest_duration,
					})
			if station < last_station:
				segments.append({
					'type': 'station_change',
					'exercise': exercises[station + 1],
					'duration': self.station_rest,
				})
		for clip in celebration_clips or []:
			segments.append({'type': 'celebration', 'clip': clip})
		return segments

	#============================
	def _work(self, exercise: str, station: int, set_index: int,
		total_stations: int) -> dict:
		return {
			'type': 'work',
			'exercise': exercise,
			'station': station,
			'set': set_index,
			'duration': self.work_duration,
			'total_stations': total_stations,
			'sets_per_station': self.sets_per_station,
		}

#============================================

def count_segments(segments: list) -> dict:
	counts = collections.Counter(segment['type'] for segment in segments)
	return {segment_type: counts.get(segment_type, 0) for segment_type in SEGMENT_TYPES}

#============================================

def estimated_seconds(segments: list) -> int:
	return sum(segment.get('duration', 0) for segment in segments
		if segment['type'] != 'celebration')

#============================================

def describe_segment(segment: dict) -> str:
	kind = segment['type']
	if kind == 'work':
		name = os.path.basename(segment['exercise'])
		return f"work {name} (station {segment['station'] + 1}, set {segment['set']})"
	if kind == 'rest':
		return f"rest {segment['duration']}s"
	if kind == 'station_change':
		name = os.path.basename(segment['exercise'])
		return f"station change -> {name} ({segment['duration']}s)"
	return f"celebration {os.path.basename(segment['clip'])}"

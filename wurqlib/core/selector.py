#!/usr/bin/env python3

import random
from wurqlib.core.errors import SelectionError
from wurqlib.core.errors import ValidationError

#============================================

def unique_names(names) -> tuple:
	"""
	Drop repeated names, keeping first-seen order.
	"""
	unique = []
	for name in names:
		if name not in unique:
			unique.append(name)
	return tuple(unique)

#============================================

class SelectionRequest():
	"""
	Timing parameters plus the chosen categories and equipment for one run.

	Durations are whole seconds except total_minutes.
	"""
	FIELDS = ('work_duration', 'rest_duration', 'sets_per_station',
		'station_rest', 'total_minutes')

	def __init__(self, work_duration: int, rest_duration: int,
		sets_per_station: int, station_rest: int, total_minutes: int,
		categories: list, equipment: list):
		self.work_duration = work_duration
		self.rest_duration = rest_duration
		self.sets_per_station = sets_per_station
		self.station_rest = station_rest
		self.total_minutes = total_minutes
		self.categories = unique_names(categories)
		self.equipment = unique_names(equipment)

	#============================
	@classmethod
	def from_dict(cls, data: dict):
		if not isinstance(data, dict):
			raise ValidationError("workout request must be a mapping")
		values = {}
		for field in cls.FIELDS:
			raw = data.get(field)
			if raw is None:
				raise ValidationError(f"workout.{field} is required")
			try:
				values[field] = int(raw)
			except (TypeError, ValueError) as exc:
				raise ValidationError(f"workout.{field} must be an integer") from exc
		categories = data.get('categories', [])
		equipment = data.get('equipment', [])
		if isinstance(categories, str):
			categories = [categories]
		if isinstance(equipment, str):
			equipment = [equipment]
		return cls(categories=categories, equipment=equipment, **values)

	#============================
	def to_dict(self) -> dict:
		data = {field: getattr(self, field) for field in self.FIELDS}
		data['categories'] = list(self.categories)
		data['equipment'] = list(self.equipment)
		return data

	#============================
	def time_per_exercise(self) -> int:
		return (self.work_duration * self.sets_per_station
			+ self.rest_duration * (self.sets_per_station - 1)
			+ self.station_rest)

	#============================
	def total_seconds(self) -> int:
		return self.total_minutes * 60

#============================================

def compute_capacity(request: SelectionRequest) -> int:
	per_exercise = request.time_per_exercise()
	if per_exercise <= 0:
		raise SelectionError("time per exercise must be positive")
	capacity = request.total_seconds() // per_exercise
	if capacity < 1:
		raise SelectionError(
			f"workout parameters result in no exercises fitting in "
			f"{request.total_minutes} minutes; reduce work duration, rest "
			f"duration, or sets per station"
		)
	return capacity

#============================================

def distribute_quota(capacity: int, equipment_count: int) -> list:
	"""
	Split capacity across groups; the first remainder groups get one extra.
	"""
	if equipment_count < 1:
		raise SelectionError("at least one equipment type is required")
	base = capacity // equipment_count
	remainder = capacity % equipment_count
	return [base + 1 if index < remainder else base
		for index in range(equipment_count)]

#============================================

class ExerciseSelector():
	def __init__(self, rng: random.Random = None, events=None):
		if rng is None:
			rng = random.Random()
		self.rng = rng
		self.events = events

	#============================
	def select(self, capacity: int, equipment: list, videos_by_equipment: dict) -> list:
		# a repeated name would get a second quota from the same pool
		equipment = list(unique_names(equipment))
		quotas = distribute_quota(capacity, len(equipment))
		base = capacity // len(equipment)
		remainder = capacity % len(equipment)
		self._info(f"Distributing {capacity} exercises across "
			f"{len(equipment)} equipment types")
		self._info(f"Base exercises per equipment: {base}")
		if remainder > 0:
			self._info(f"Extra exercises to distribute: {remainder}")
		selected = []
		for equip, quota in zip(equipment, quotas):
			available = list(videos_by_equipment.get(equip, []))
			if len(available) == 0:
				self._warn(f"No videos found for equipment: {equip}")
				continue
			self.rng.shuffle(available)
			picks = available[:quota]
			if len(picks) < quota:
				self._warn(f"Only {len(picks)} of {quota} exercises available for '{equip}'")
			self._info(f"Selected {len(picks)} exercises from '{equip}'")
			selected.extend(picks)
		# mix equipment types across the whole workout
		self.rng.shuffle(selected)
		if len(selected) == 0:
			raise SelectionError("no exercise videos found or selected")
		return selected

	#============================
	def _info(self, message: str) -> None:
		if self.events is not None:
			self.events.info(message)

	#============================
	def _warn(self, message: str) -> None:
		if self.events is not None:
			self.events.warn(message)

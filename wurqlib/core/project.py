#!/usr/bin/env python3

import threading
from wurqlib.core.cache import BoundedCache
from wurqlib.core.cache import MemoryPressurePolicy
from wurqlib.core.catalog import CatalogIndex
from wurqlib.core.catalog import list_celebration_clips
from wurqlib.core.config import load_config
from wurqlib.core.errors import ConfigurationError
from wurqlib.core.events import EventStream
from wurqlib.core.events import callback_adapter
from wurqlib.core.pipeline import PipelineOrchestrator
from wurqlib.core.pipeline import validate_request
from wurqlib.core.planner import SegmentPlanner
from wurqlib.core.selector import ExerciseSelector
from wurqlib.core.selector import compute_capacity

#============================================

class WurqitProject():
	def __init__(self, config_file: str = None, media_root: str = None,
		config=None, rng=None, eviction_policy=None, events: EventStream = None):
		if config is None:
			config = load_config(config_file, media_root=media_root)
		self.config = config
		self.rng = rng
		self.events = events if events is not None else EventStream()
		if eviction_policy is None:
			eviction_policy = MemoryPressurePolicy(config.cache['memory_limit_mb'])
		cache = BoundedCache(config.cache['max_entries'], eviction_policy)
		self.catalog = CatalogIndex(config.videos_dir(), cache=cache,
			events=self.events)
		self._run_lock = threading.Lock()
		self._pipeline = None

	#============================
	def list_categories(self) -> list:
		return self.catalog.list_categories()

	#============================
	def list_equipment(self, categories: list) -> list:
		return self.catalog.list_equipment(categories)

	#============================
	def plan(self, request) -> dict:
		"""
		Select exercises and expand the segment plan without rendering.
		"""
		validate_request(request, require_output=False)
		capacity = compute_capacity(request)
		videos = self.catalog.videos_by_equipment(request.categories, request.equipment)
		selector = ExerciseSelector(rng=self.rng, events=self.events)
		exercises = selector.select(capacity, request.equipment, videos)
		clips = list_celebration_clips(self.config.celebrate_dir(), self.events)
		planner = SegmentPlanner(request.work_duration, request.rest_duration,
			request.sets_per_station, request.station_rest)
		return {
			'capacity': capacity,
			'exercises': exercises,
			'segments': planner.plan(exercises, clips),
		}

	#============================
	def generate(self, request, output_dir: str, on_progress=None,
		on_log=None) -> str:
		if not self._run_lock.acquire(blocking=False):
			raise ConfigurationError("a generation run is already active")
		subscriber = self.events.subscribe(callback_adapter(on_progress, on_log))
		try:
			self.events.reset()
			self._pipeline = PipelineOrchestrator(self.config, self.catalog,
				self.events, rng=self.rng)
			return self._pipeline.run(request, output_dir)
		finally:
			self.events.unsubscribe(subscriber)
			self._pipeline = None
			self._run_lock.release()

	#============================
	def cancel(self) -> bool:
		pipeline = self._pipeline
		if pipeline is None:
			return False
		pipeline.cancel()
		return True

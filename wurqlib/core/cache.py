#!/usr/bin/env python3

import collections
import psutil

#============================================

def normalize_key(*groups) -> tuple:
	"""
	Build an order-insensitive cache key from groups of names.
	"""
	return tuple(tuple(sorted(set(group))) for group in groups)

#============================================

class MemoryPressurePolicy():
	def __init__(self, limit_mb: float = 500.0):
		self.limit_mb = limit_mb
		self.process = psutil.Process()

	#============================
	def current_mb(self) -> float:
		return self.process.memory_info().rss / (1024.0 * 1024.0)

	#============================
	def __call__(self) -> bool:
		return self.current_mb() > self.limit_mb

#============================================

class BoundedCache():
	"""
	Least-recently-used map, dropped wholesale when the eviction policy fires.
	"""
	def __init__(self, max_entries: int = 64, eviction_policy=None):
		if max_entries < 1:
			raise ValueError("max_entries must be at least 1")
		self.max_entries = max_entries
		self.eviction_policy = eviction_policy
		self.entries = collections.OrderedDict()
		self.evictions = 0

	#============================
	def __len__(self) -> int:
		return len(self.entries)

	#============================
	def __contains__(self, key) -> bool:
		return key in self.entries

	#============================
	def get(self, key, default=None):
		if key not in self.entries:
			return default
		self.entries.move_to_end(key)
		return self.entries[key]

	#============================
	def put(self, key, value) -> None:
		self.entries[key] = value
		self.entries.move_to_end(key)
		while len(self.entries) > self.max_entries:
			self.entries.popitem(last=False)

	#============================
	def clear(self) -> None:
		self.entries.clear()

	#============================
	def check_pressure(self) -> bool:
		if self.eviction_policy is None:
			return False
		if not self.eviction_policy():
			return False
		self.clear()
		self.evictions += 1
		return True

	#============================
	def get_or_build(self, key, builder):
		if key in self.entries:
			return self.get(key)
		self.check_pressure()
		value = builder()
		self.put(key, value)
		return value

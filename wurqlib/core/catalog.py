#!/usr/bin/env python3

import os
from wurqlib.core.cache import BoundedCache
from wurqlib.core.cache import normalize_key
from wurqlib.core.errors import CatalogError

#============================================

VIDEO_EXTENSION = ".mp4"

#============================================

def is_video_file(filename: str) -> bool:
	return filename.lower().endswith(VIDEO_EXTENSION)

#============================================

class CatalogIndex():
	"""
	Read-only view of videos/<category>/<equipment>/<file>.mp4 with caching.
	"""
	def __init__(self, videos_dir: str, cache: BoundedCache = None, events=None):
		self.videos_dir = videos_dir
		if cache is None:
			cache = BoundedCache()
		self.cache = cache
		self.events = events

	#============================
	def list_categories(self) -> list:
		key = ('categories',)
		categories = self.cache.get_or_build(key, self._scan_categories)
		return list(categories)

	#============================
	def list_equipment(self, categories: list) -> list:
		key = ('equipment',) + normalize_key(categories)
		equipment = self.cache.get_or_build(key,
			lambda: self._scan_equipment(categories))
		return list(equipment)

	#============================
	def videos_by_equipment(self, categories: list, equipment: list) -> dict:
		key = ('videos',) + normalize_key(categories, equipment)
		videos = self.cache.get_or_build(key,
			lambda: self._scan_videos(categories, equipment))
		return {equip: list(files) for equip, files in videos.items()}

	#============================
	def invalidate(self) -> None:
		self.cache.clear()

	#============================
	def _require_root(self) -> None:
		if not os.path.isdir(self.videos_dir):
			raise CatalogError(f"videos directory not found: {self.videos_dir}")

	#============================
	def _scan_categories(self) -> tuple:
		self._require_root()
		try:
			items = sorted(os.listdir(self.videos_dir))
		except OSError as exc:
			raise CatalogError(f"could not read videos directory: {exc}") from exc
		categories = []
		for item in items:
			if os.path.isdir(os.path.join(self.videos_dir, item)):
				categories.append(item)
		return tuple(categories)

	#============================
	def _scan_equipment(self, categories: list) -> tuple:
		self._require_root()
		equipment = set()
		for category in categories:
			category_dir = os.path.join(self.videos_dir, category)
			if not os.path.isdir(category_dir):
				continue
			for item in self._read_dir(category_dir):
				if os.path.isdir(os.path.join(category_dir, item)):
					equipment.add(item)
		return tuple(sorted(equipment))

	#============================
	def _scan_videos(self, categories: list, equipment: list) -> dict:
		self._require_root()
		videos = {}
		for equip in equipment:
			files = []
			for category in sorted(set(categories)):
				equip_dir = os.path.join(self.videos_dir, category, equip)
				if not os.path.isdir(equip_dir):
					continue
				for item in self._read_dir(equip_dir):
					if is_video_file(item):
						files.append(os.path.join(equip_dir, item))
			videos[equip] = tuple(files)
		return videos

	#============================
	def _read_dir(self, dirpath: str) -> list:
		try:
			return sorted(os.listdir(dirpath))
		except OSError as exc:
			self._warn(f"could not read directory {dirpath}: {exc}")
			return []

	#============================
	def _warn(self, message: str) -> None:
		if self.events is not None:
			self.events.warn(message)

#============================================

def list_celebration_clips(celebrate_dir: str, events=None) -> list:
	if not os.path.isdir(celebrate_dir):
		return []
	try:
		items = sorted(os.listdir(celebrate_dir))
	except OSError as exc:
		if events is not None:
			events.warn(f"could not read celebration directory: {exc}")
		return []
	clips = []
	for item in items:
		if is_video_file(item):
			clips.append(os.path.join(celebrate_dir, item))
	return clips

#!/usr/bin/env python3

"""
Pytest coverage for the media catalog and its bounded cache.
"""

# Standard Library
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
from fake_tools import make_media
from wurqlib.core.cache import BoundedCache
from wurqlib.core.cache import MemoryPressurePolicy
from wurqlib.core.cache import normalize_key
from wurqlib.core.catalog import CatalogIndex
from wurqlib.core.catalog import is_video_file
from wurqlib.core.catalog import list_celebration_clips
from wurqlib.core.errors import CatalogError
from wurqlib.core.events import EventStream

#============================================

LAYOUT = {
	'strength': {
		'dumbbell': ['curl.mp4', 'press.MP4', 'notes.txt'],
		'kettlebell': ['swing.mp4'],
	},
	'cardio': {
		'bodyweight': ['burpee.mp4'],
		'dumbbell': ['thruster.mp4'],
	},
}

#============================================

def _catalog(tmp_path, cache: BoundedCache = None) -> CatalogIndex:
	root = make_media(str(tmp_path / "media"), LAYOUT)
	return CatalogIndex(os.path.join(root, "videos"), cache=cache)

#============================================

def test_is_video_file() -> None:
	assert is_video_file("a.mp4")
	assert is_video_file("B.MP4")
	assert not is_video_file("c.mov")
	assert not is_video_file("mp4")

#============================================

def test_list_categories_sorted(tmp_path) -> None:
	catalog = _catalog(tmp_path)
	# stray files at the top level are not categories
	(tmp_path / "media" / "videos" / "README.txt").write_text("x")
	assert catalog.list_categories() == ['cardio', 'strength']

#============================================

def test_list_equipment_union(tmp_path) -> None:
	catalog = _catalog(tmp_path)
	assert catalog.list_equipment(['strength']) == ['dumbbell', 'kettlebell']
	assert catalog.list_equipment(['strength', 'cardio']) == [
		'bodyweight', 'dumbbell', 'kettlebell']
	assert catalog.list_equipment(['missing']) == []

#============================================

def test_videos_by_equipment(tmp_path) -> None:
	catalog = _catalog(tmp_path)
	videos = catalog.videos_by_equipment(['strength', 'cardio'], ['dumbbell', 'rower'])
	names = [os.path.basename(path) for path in videos['dumbbell']]
	assert names == ['thruster.mp4', 'curl.mp4', 'press.MP4']
	assert videos['rower'] == []
	assert all(os.path.isabs(path) for path in videos['dumbbell'])

#============================================

def test_missing_root_raises(tmp_path) -> None:
	catalog = CatalogIndex(str(tmp_path / "nope"))
	with pytest.raises(CatalogError):
		catalog.list_categories()
	with pytest.raises(CatalogError):
		catalog.videos_by_equipment(['a'], ['b'])

#============================================

def test_results_are_cached(tmp_path) -> None:
	catalog = _catalog(tmp_path)
	first = catalog.list_equipment(['strength', 'cardio'])
	os.makedirs(tmp_path / "media" / "videos" / "strength" / "band")
	# same request in another order hits the cache
	assert catalog.list_equipment(['cardio', 'strength']) == first
	catalog.invalidate()
	assert 'band' in catalog.list_equipment(['strength'])

#============================================

def test_cached_lists_are_copies(tmp_path) -> None:
	catalog = _catalog(tmp_path)
	videos = catalog.videos_by_equipment(['strength'], ['dumbbell'])
	videos['dumbbell'].clear()
	again = catalog.videos_by_equipment(['strength'], ['dumbbell'])
	assert len(again['dumbbell']) == 2

#============================================

def test_eviction_policy_clears_cache(tmp_path) -> None:
	pressure = {'high': False}
	cache = BoundedCache(8, eviction_policy=lambda: pressure['high'])
	catalog = _catalog(tmp_path, cache=cache)
	catalog.list_categories()
	catalog.list_equipment(['strength'])
	assert len(cache) == 2
	pressure['high'] = True
	catalog.list_equipment(['cardio'])
	assert cache.evictions == 1
	assert len(cache) == 1

#============================================

def test_list_celebration_clips(tmp_path) -> None:
	root = make_media(str(tmp_path / "media"), LAYOUT,
		celebrate=['b.mp4', 'a.MP4', 'skip.gif'])
	clips = list_celebration_clips(os.path.join(root, "celebrate"))
	assert [os.path.basename(path) for path in clips] == ['a.MP4', 'b.mp4']
	assert list_celebration_clips(str(tmp_path / "none")) == []

#============================================

def test_normalize_key() -> None:
	assert normalize_key(['b', 'a', 'a'], ['x']) == (('a', 'b'), ('x',))
	assert normalize_key(['a', 'b']) == normalize_key(['b', 'a'])

#============================================

def test_bounded_cache_lru() -> None:
	cache = BoundedCache(2)
	cache.put('a', 1)
	cache.put('b', 2)
	assert cache.get('a') == 1
	cache.put('c', 3)
	assert 'b' not in cache
	assert 'a' in cache
	assert cache.get('missing', 'default') == 'default'

#============================================

def test_bounded_cache_builder_called_once() -> None:
	calls = []
	cache = BoundedCache(4)

	def _build():
		calls.append(1)
		return 'value'

	assert cache.get_or_build('k', _build) == 'value'
	assert cache.get_or_build('k', _build) == 'value'
	assert len(calls) == 1

#============================================

def test_bounded_cache_rejects_zero_size() -> None:
	with pytest.raises(ValueError):
		BoundedCache(0)

#============================================

def test_memory_pressure_policy() -> None:
	assert MemoryPressurePolicy(limit_mb=10 ** 9)() is False
	assert MemoryPressurePolicy(limit_mb=0.001)() is True

#============================================

def test_unreadable_directory_is_skipped(tmp_path, monkeypatch) -> None:
	"""
	A directory that cannot be listed warns and the rest of the lookup survives.
	"""
	root = make_media(str(tmp_path / "media"), LAYOUT)
	events = EventStream(echo=False)
	received = []
	events.subscribe(received.append)
	catalog = CatalogIndex(os.path.join(root, "videos"), events=events)
	blocked = os.path.join(root, "videos", "strength", "dumbbell")
	real_listdir = os.listdir

	def _listdir(path):
		if os.path.abspath(path) == blocked:
			raise PermissionError(13, "Permission denied", path)
		return real_listdir(path)

	monkeypatch.setattr(os, "listdir", _listdir)
	videos = catalog.videos_by_equipment(['strength', 'cardio'],
		['dumbbell', 'kettlebell'])
	assert [os.path.basename(path) for path in videos['dumbbell']] == ['thruster.mp4']
	assert [os.path.basename(path) for path in videos['kettlebell']] == ['swing.mp4']
	warnings = [event['message'] for event in received if event.get('level') == 'warn']
	assert len(warnings) == 1
	assert blocked in warnings[0]

#============================================

def test_unreadable_celebration_directory(tmp_path, monkeypatch) -> None:
	root = make_media(str(tmp_path / "media"), LAYOUT, celebrate=['party.mp4'])
	celebrate_dir = os.path.join(root, "celebrate")
	events = EventStream(echo=False)
	received = []
	events.subscribe(received.append)

	def _listdir(path):
		raise PermissionError(13, "Permission denied", path)

	monkeypatch.setattr(os, "listdir", _listdir)
	assert list_celebration_clips(celebrate_dir, events) == []
	assert [event['level'] for event in received] == ['warn']

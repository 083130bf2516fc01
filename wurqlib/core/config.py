#!/usr/bin/env python3

import os
import shutil
import yaml
from wurqlib.core.errors import ValidationError

#============================================

DEFAULT_CONFIG_FILE = "wurqit.yaml"

#============================================

class WurqitConfig():
	def __init__(self):
		self.config_file = None
		self.media_root = os.path.abspath("media")
		self.ffmpeg = None
		self.ffprobe = None
		self.profile = {}
		self.assets = {}
		self.cache = {}
		self.keep_temp = False
		self.temp_dir = None
		self.workout = {}

	#============================
	def videos_dir(self) -> str:
		return os.path.join(self.media_root, "videos")

	#============================
	def celebrate_dir(self) -> str:
		return os.path.join(self.media_root, "celebrate")

	#============================
	def font_file(self) -> str:
		return os.path.join(self.media_root, "images", self.assets['font'])

	#============================
	def cue_file(self) -> str:
		return os.path.join(self.media_root, "audio", self.assets['cue'])

#============================================

class ConfigLoader():
	def __init__(self, config_file: str = None, media_root: str = None):
		self.config_file = config_file
		self.media_root = media_root

	#============================
	def load(self) -> WurqitConfig:
		config = WurqitConfig()
		data = {}
		config_file = self.config_file
		if config_file is None and os.path.isfile(DEFAULT_CONFIG_FILE):
			config_file = DEFAULT_CONFIG_FILE
		if config_file is not None:
			data = self._load_yaml(config_file)
			config.config_file = os.path.abspath(config_file)
		media_root = self.media_root or data.get('media_root')
		if media_root is not None:
			config.media_root = os.path.abspath(os.path.expanduser(str(media_root)))
		config.ffmpeg = self._resolve_tool(data.get('ffmpeg'), 'ffmpeg')
		config.ffprobe = self._resolve_tool(data.get('ffprobe'), 'ffprobe')
		config.profile = self._parse_profile(data.get('profile', {}))
		config.assets = self._parse_assets(data.get('assets', {}))
		config.cache = self._parse_cache(data.get('cache', {}))
		config.keep_temp = bool(data.get('keep_temp', False))
		temp_dir = data.get('temp_dir')
		if temp_dir is not None:
			config.temp_dir = os.path.abspath(os.path.expanduser(str(temp_dir)))
		workout = data.get('workout', {})
		if not isinstance(workout, dict):
			raise ValidationError("workout must be a mapping")
		config.workout = workout
		return config

	#============================
	def _load_yaml(self, config_file: str) -> dict:
		if not os.path.isfile(config_file):
			raise ValidationError(f"config file not found: {config_file}")
		file_size = os.path.getsize(config_file)
		if file_size > 10 ** 6:
			raise ValidationError("config file is larger than 1MB")
		with open(config_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if data is None:
			return {}
		if not isinstance(data, dict):
			raise ValidationError("config must be a mapping at the top level")
		return data

	#============================
	def _resolve_tool(self, value, name: str) -> str:
		if value is not None:
			return os.path.expanduser(str(value))
		found = shutil.which(name)
		if found is not None:
			return found
		# let the first invocation fail with a ConfigurationError
		return name

	#============================
	def _parse_profile(self, profile: dict) -> dict:
		if not isinstance(profile, dict):
			raise ValidationError("profile must be a mapping")
		resolution = profile.get('resolution', [1920, 1080])
		if not isinstance(resolution, (list, tuple)) or len(resolution) != 2:
			raise ValidationError("profile.resolution must be [width, height]")
		fps = profile.get('fps', 25)
		if not isinstance(fps, int) or fps <= 0:
			raise ValidationError("profile.fps must be a positive integer")
		crf = profile.get('crf', 23)
		if not isinstance(crf, int) or crf < 0 or crf > 51:
			raise ValidationError("profile.crf must be between 0 and 51")
		return {
			'width': int(resolution[0]),
			'height': int(resolution[1]),
			'fps': fps,
			'video_codec': str(profile.get('video_codec', 'libx264')),
			'audio_codec': str(profile.get('audio_codec', 'aac')),
			'preset': str(profile.get('preset', 'fast')),
			'crf': crf,
			'pixel_format': str(profile.get('pixel_format', 'yuv420p')),
		}

	#============================
	def _parse_assets(self, assets: dict) -> dict:
		if not isinstance(assets, dict):
			raise ValidationError("assets must be a mapping")
		return {
			'font': str(assets.get('font', 'Oswald.ttf')),
			'cue': str(assets.get('cue', 'BEEP.mp3')),
		}

	#============================
	def _parse_cache(self, cache: dict) -> dict:
		if not isinstance(cache, dict):
			raise ValidationError("cache must be a mapping")
		max_entries = cache.get('max_entries', 64)
		if not isinstance(max_entries, int) or max_entries < 1:
			raise ValidationError("cache.max_entries must be a positive integer")
		memory_limit_mb = cache.get('memory_limit_mb', 500)
		if not isinstance(memory_limit_mb, (int, float)) or memory_limit_mb <= 0:
			raise ValidationError("cache.memory_limit_mb must be positive")
		return {
			'max_entries': max_entries,
			'memory_limit_mb': float(memory_limit_mb),
		}

#============================================

def load_config(config_file: str = None, media_root: str = None) -> WurqitConfig:
	loader = ConfigLoader(config_file, media_root=media_root)
	return loader.load()

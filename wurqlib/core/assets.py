#!/usr/bin/env python3

import os
import PIL.ImageFont

#============================================

class MediaAssets():
	"""
	Bundled font and cue audio; either may be missing on disk.
	"""
	def __init__(self, font_file: str = None, cue_file: str = None):
		self.font_file = font_file
		self.cue_file = cue_file
		self._fonts = {}

	#============================
	@classmethod
	def from_config(cls, config):
		return cls(font_file=config.font_file(), cue_file=config.cue_file())

	#============================
	def has_font(self) -> bool:
		return self.font_file is not None and os.path.isfile(self.font_file)

	#============================
	def has_cue(self) -> bool:
		return self.cue_file is not None and os.path.isfile(self.cue_file)

	#============================
	def load_font(self, size: int):
		if size in self._fonts:
			return self._fonts[size]
		font = None
		if self.has_font():
			try:
				font = PIL.ImageFont.truetype(self.font_file, size)
			except OSError:
				# not a parseable font; callers fall back to the requested size
				font = None
		self._fonts[size] = font
		return font

	#============================
	def measure_text(self, text: str, size: int):
		font = self.load_font(size)
		if font is None:
			return None
		bbox = font.getbbox(text)
		return (bbox[2] - bbox[0], bbox[3] - bbox[1])

	#============================
	def fit_font_size(self, text: str, size: int, max_width: int,
		min_size: int = 24) -> int:
		"""
		Shrink size in steps of 4 until text fits max_width pixels.
		"""
		current = size
		while current > min_size:
			measured = self.measure_text(text, current)
			if measured is None or measured[0] <= max_width:
				return current
			current -= 4
		return max(current, min_size)

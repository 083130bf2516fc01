"""
Font discovery helpers for tests that burn captions with a real font.
"""

# Standard Library
import os

#============================================

FONT_DIRS = (
	"/usr/share/fonts",
	"/usr/local/share/fonts",
	"/Library/Fonts",
	"/System/Library/Fonts",
)

# condensed display faces first, closest to the bundled Oswald
PREFERRED_NAMES = (
	"Oswald-Regular.ttf",
	"DejaVuSansCondensed-Bold.ttf",
	"DejaVuSans-Bold.ttf",
	"LiberationSansNarrow-Bold.ttf",
	"Arial.ttf",
)

#============================================

def _font_files(base: str, max_depth: int = 3) -> list:
	found = []
	for root, dirs, files in os.walk(base):
		rel = os.path.relpath(root, base)
		depth = 0 if rel == "." else rel.count(os.sep) + 1
		if depth >= max_depth:
			dirs[:] = []
		dirs[:] = sorted(dirs)
		for name in sorted(files):
			if name.lower().endswith(".ttf"):
				found.append(os.path.join(root, name))
	return found

#============================================

def find_system_ttf() -> str:
	"""
	Return a TrueType font usable by ffmpeg drawtext, or None.
	"""
	fonts = []
	for base in FONT_DIRS:
		if os.path.isdir(base):
			fonts += _font_files(base)
	by_name = {os.path.basename(path): path for path in reversed(fonts)}
	for name in PREFERRED_NAMES:
		if name in by_name:
			return by_name[name]
	if len(fonts) == 0:
		return None
	return fonts[0]

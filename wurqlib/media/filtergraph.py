#!/usr/bin/env python3

"""
Small typed builder for ffmpeg -filter_complex descriptions.

Option values are escaped twice: once for the filter option parser
(backslash, quote, colon) and once for the graph parser (backslash,
quote, brackets, comma, semicolon). Values are never wrapped in quotes.
"""

#============================================

OPTION_SPECIALS = ("\\", "'", ":")
GRAPH_SPECIALS = ("\\", "'", "[", "]", ",", ";")

#============================================

def _escape(text: str, specials: tuple) -> str:
	escaped = []
	for char in text:
		if char in specials:
			escaped.append("\\")
		escaped.append(char)
	return "".join(escaped)

#============================================

def escape_value(value) -> str:
	text = str(value)
	text = _escape(text, OPTION_SPECIALS)
	return _escape(text, GRAPH_SPECIALS)

#============================================

def normalize_path(path: str) -> str:
	# forward slashes keep windows paths readable after escaping
	return path.replace("\\", "/")

#============================================

class Filter():
	def __init__(self, name: str, options: list = None, positional: list = None):
		self.name = name
		self.options = list(options or [])
		self.positional = list(positional or [])

	#============================
	def render(self) -> str:
		parts = [escape_value(value) for value in self.positional]
		parts += [f"{key}={escape_value(value)}" for key, value in self.options]
		if len(parts) == 0:
			return self.name
		return f"{self.name}=" + ":".join(parts)

	#============================
	def __repr__(self) -> str:
		return f"Filter({self.render()!r})"

#============================================

class FilterChain():
	def __init__(self, inputs: list = None, filters: list = None, output: str = None):
		self.inputs = list(inputs or [])
		self.filters = list(filters or [])
		self.output = output

	#============================
	def add(self, *filters):
		self.filters.extend(filters)
		return self

	#============================
	def render(self) -> str:
		if len(self.filters) == 0:
			raise ValueError("filter chain needs at least one filter")
		text = "".join(f"[{label}]" for label in self.inputs)
		text += ",".join(item.render() for item in self.filters)
		if self.output is not None:
			text += f"[{self.output}]"
		return text

#============================================

class FilterGraph():
	def __init__(self):
		self.chains = []

	#============================
	def add(self, chain: FilterChain) -> FilterChain:
		self.chains.append(chain)
		return chain

	#============================
	def render(self) -> str:
		return ";".join(chain.render() for chain in self.chains)

#============================================

def scale(width: int, height: int, fit: str = 'decrease') -> Filter:
	options = [('w', width), ('h', height)]
	if fit is not None:
		options.append(('force_original_aspect_ratio', fit))
	return Filter('scale', options)

#============================================

def pad(width: int, height: int, x: str = "(ow-iw)/2", y: str = "(oh-ih)/2",
	color: str = None) -> Filter:
	options = [('w', width), ('h', height), ('x', x), ('y', y)]
	if color is not None:
		options.append(('color', color))
	return Filter('pad', options)

#============================================

def overlay(x: str = "(W-w)/2", y: str = "(H-h)/2", shortest: bool = True) -> Filter:
	options = [('x', x), ('y', y)]
	if shortest:
		options.append(('shortest', 1))
	return Filter('overlay', options)

#============================================

def fps(rate: int) -> Filter:
	return Filter('fps', [('fps', rate)])

#============================================

def drawbox(x: int, y: int, width: int, height: int, color: str,
	thickness: str = 'fill') -> Filter:
	return Filter('drawbox', [('x', x), ('y', y), ('w', width), ('h', height),
		('color', color), ('t', thickness)])

#============================================

def drawtext(text: str, fontfile: str, fontsize: int, x: str, y: str,
	fontcolor: str = 'white', boxcolor: str = None, boxborderw: int = 5,
	expand: bool = False) -> Filter:
	"""
	Text overlay; expand=True enables %{...} expansion for countdowns.
	"""
	options = [
		('fontfile', normalize_path(fontfile)),
		('text', text),
		('expansion', 'normal' if expand else 'none'),
		('fontcolor', fontcolor),
		('fontsize', fontsize),
		('x', x),
		('y', y),
	]
	if boxcolor is not None:
		options += [('box', 1), ('boxcolor', boxcolor), ('boxborderw', boxborderw)]
	return Filter('drawtext', options)

#============================================

def adelay(milliseconds: int = 0) -> Filter:
	return Filter('adelay', [('delays', f"{milliseconds}|{milliseconds}")])

#============================================

def apad() -> Filter:
	return Filter('apad')

#============================================

def aformat(sample_rate: int = 48000, layout: str = 'stereo') -> Filter:
	return Filter('aformat', [('sample_rates', sample_rate),
		('channel_layouts', layout)])

"""
Fake ffmpeg/ffprobe runner and media layout helpers for tests.
"""

# Standard Library
import json
import os

#============================================

class FakeRunner():
	"""
	Stand-in for utils.runCmd that records argv and writes output files.
	"""
	def __init__(self, duration: float = 1.0):
		self.commands = []
		self.duration = duration
		self.fail_when = None
		self.skip_output_when = None
		self.missing_tools = set()
		self.on_command = None

	#============================
	def __call__(self, args: list) -> dict:
		args = [str(arg) for arg in args]
		self.commands.append(args)
		if self.on_command is not None:
			self.on_command(args)
		tool = os.path.basename(args[0])
		if tool in self.missing_tools:
			from wurqlib.core.errors import ConfigurationError
			raise ConfigurationError(f"external tool not found: {args[0]}")
		if self.fail_when is not None and self.fail_when(args):
			return _result(1, "", "Error opening input: invalid data\n")
		if '-version' in args:
			return _result(0, "ffmpeg version 6.1 Copyright (c)\n", "")
		if tool.startswith('ffprobe'):
			payload = json.dumps({'format': {'duration': f"{self.duration:.6f}"}})
			return _result(0, payload, "")
		if self.skip_output_when is None or not self.skip_output_when(args):
			with open(args[-1], 'wb') as handle:
				handle.write(b"fake video data")
		return _result(0, "", "")

	#============================
	def segment_commands(self) -> list:
		return [cmd for cmd in self.commands
			if '-filter_complex' in cmd]

	#============================
	def concat_commands(self) -> list:
		return [cmd for cmd in self.commands if 'concat' in cmd]

#============================================

def _result(returncode: int, stdout: str, stderr: str) -> dict:
	return {'returncode': returncode, 'stdout': stdout, 'stderr': stderr,
		'seconds': 0.0}

#============================================

def make_media(root: str, layout: dict, font: bool = True, cue: bool = True,
	celebrate: list = None) -> str:
	"""
	Create media/videos/<category>/<equipment>/<file> plus assets.
	"""
	videos_dir = os.path.join(root, "videos")
	os.makedirs(videos_dir, exist_ok=True)
	for category, equipment in layout.items():
		for equip, files in equipment.items():
			equip_dir = os.path.join(videos_dir, category, equip)
			os.makedirs(equip_dir, exist_ok=True)
			for name in files:
				with open(os.path.join(equip_dir, name), 'wb') as handle:
					handle.write(b"clip")
	os.makedirs(os.path.join(root, "images"), exist_ok=True)
	os.makedirs(os.path.join(root, "audio"), exist_ok=True)
	if font:
		with open(os.path.join(root, "images", "Oswald.ttf"), 'wb') as handle:
			handle.write(b"not a real font")
	if cue:
		with open(os.path.join(root, "audio", "BEEP.mp3"), 'wb') as handle:
			handle.write(b"beep")
	if celebrate:
		celebrate_dir = os.path.join(root, "celebrate")
		os.makedirs(celebrate_dir, exist_ok=True)
		for name in celebrate:
			with open(os.path.join(celebrate_dir, name), 'wb') as handle:
				handle.write(b"party")
	return root

#!/usr/bin/env python3

import json
from wurqlib.core import utils

#============================================

def duration_command(ffprobe: str, mediafile: str) -> list:
	return [ffprobe, '-v', 'error', '-show_entries', 'format=duration',
		'-of', 'json', mediafile]

#============================================

def parse_duration(payload: str):
	try:
		data = json.loads(payload)
	except ValueError:
		return None
	if not isinstance(data, dict):
		return None
	duration = data.get('format', {}).get('duration')
	if duration is None:
		return None
	try:
		return float(duration)
	except ValueError:
		return None

#============================================

def probe_duration(ffprobe: str, mediafile: str):
	"""
	Container duration in seconds, or None when ffprobe cannot tell.
	"""
	result = utils.runCmd(duration_command(ffprobe, mediafile))
	if result['returncode'] != 0:
		return None
	return parse_duration(result['stdout'])

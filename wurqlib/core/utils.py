#!/usr/bin/env python3

import datetime
import os
import shlex
import subprocess
import threading
import time
from wurqlib.core.errors import ConfigurationError

#============================================

_STATE = {
	'quiet': False,
	'reporter': None,
	'command_index': 0,
	'active_process': None,
}
_STATE_LOCK = threading.Lock()

#============================================

def set_quiet_mode(quiet: bool) -> None:
	_STATE['quiet'] = bool(quiet)

#============================================

def is_quiet_mode() -> bool:
	return _STATE['quiet']

#============================================

def set_command_reporter(reporter) -> None:
	_STATE['reporter'] = reporter
	_STATE['command_index'] = 0

#============================================

def clear_command_reporter() -> None:
	_STATE['reporter'] = None
	_STATE['command_index'] = 0

#============================================

def _report(event: dict) -> None:
	reporter = _STATE['reporter']
	if reporter is None:
		return
	reporter(event)

#============================================

def runCmd(args: list) -> dict:
	"""
	Run an external tool with an argument vector and capture its output.

	Returns a dict with returncode, stdout, stderr and seconds. A missing
	binary raises ConfigurationError; a non-zero exit is left to the caller.
	"""
	showcmd = shlex.join([str(arg) for arg in args])
	if not is_quiet_mode():
		print(f"CMD: '{showcmd}'")
	_STATE['command_index'] += 1
	index = _STATE['command_index']
	_report({'event': 'start', 'command': showcmd, 'index': index})
	t0 = time.time()
	try:
		proc = subprocess.Popen([str(arg) for arg in args],
			stderr=subprocess.PIPE, stdout=subprocess.PIPE)
	except FileNotFoundError as exc:
		raise ConfigurationError(f"external tool not found: {args[0]}") from exc
	except PermissionError as exc:
		raise ConfigurationError(f"external tool not executable: {args[0]}") from exc
	with _STATE_LOCK:
		_STATE['active_process'] = proc
	try:
		stdout, stderr = proc.communicate()
	finally:
		with _STATE_LOCK:
			_STATE['active_process'] = None
	seconds = time.time() - t0
	result = {
		'returncode': proc.returncode,
		'stdout': stdout.decode('utf-8', errors='replace'),
		'stderr': stderr.decode('utf-8', errors='replace'),
		'seconds': seconds,
	}
	_report({'event': 'end', 'command': showcmd, 'index': index,
		'returncode': proc.returncode, 'seconds': seconds})
	return result

#============================================

def kill_active_command() -> bool:
	with _STATE_LOCK:
		proc = _STATE['active_process']
	if proc is None:
		return False
	if proc.poll() is None:
		proc.kill()
	return True

#============================================

def tail_text(text: str, max_lines: int = 20) -> str:
	if text is None:
		return ""
	lines = text.strip().splitlines()
	return "\n".join(lines[-max_lines:])

#============================================

def is_nonempty_file(filepath: str) -> bool:
	return os.path.isfile(filepath) and os.path.getsize(filepath) > 0

#============================================

def make_timestamp(now: datetime.datetime = None) -> str:
	# ISO-8601 with filesystem-unsafe separators replaced
	if now is None:
		now = datetime.datetime.now(datetime.timezone.utc)
	stamp = now.isoformat(timespec='milliseconds')
	stamp = stamp.replace('+00:00', 'Z')
	return stamp.replace(':', '-').replace('.', '-')

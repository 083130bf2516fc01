#!/usr/bin/env python3

import sys
import threading
from wurqlib.core import utils

#============================================

LOG_LEVELS = ('info', 'warn', 'error')
LOG_PREFIXES = {
	'info': "[INFO]",
	'warn': "[WARNING]",
	'error': "[ERROR]",
}

#============================================

class EventStream():
	"""
	Fan-out channel for progress and log events.

	Subscribers are plain callables receiving event dicts:
	{'event': 'progress', 'percent': int, 'message': str} or
	{'event': 'log', 'level': 'info'|'warn'|'error', 'message': str}.
	"""
	def __init__(self, echo: bool = True):
		self.echo = echo
		self.subscribers = []
		self.last_percent = 0
		self.lock = threading.Lock()

	#============================
	def subscribe(self, callback):
		with self.lock:
			self.subscribers.append(callback)
		return callback

	#============================
	def unsubscribe(self, callback) -> None:
		with self.lock:
			if callback in self.subscribers:
				self.subscribers.remove(callback)

	#============================
	def reset(self) -> None:
		self.last_percent = 0

	#============================
	def progress(self, percent: int, message: str) -> None:
		percent = max(0, min(100, int(percent)))
		# never move backwards
		percent = max(percent, self.last_percent)
		self.last_percent = percent
		self._publish({'event': 'progress', 'percent': percent, 'message': message})

	#============================
	def info(self, message: str) -> None:
		self.log('info', message)

	#============================
	def warn(self, message: str) -> None:
		self.log('warn', message)

	#============================
	def error(self, message: str) -> None:
		self.log('error', message)

	#============================
	def log(self, level: str, message: str) -> None:
		if level not in LOG_LEVELS:
			raise ValueError(f"unknown log level: {level}")
		if self.echo and not utils.is_quiet_mode():
			print(f"{LOG_PREFIXES[level]} {message}")
		self._publish({'event': 'log', 'level': level, 'message': message})

	#============================
	def _publish(self, event: dict) -> None:
		with self.lock:
			subscribers = list(self.subscribers)
		for callback in subscribers:
			try:
				callback(event)
			except Exception as exc:
				sys.stderr.write(f"event subscriber failed: {exc}\n")

#============================================

def callback_adapter(on_progress=None, on_log=None):
	"""
	Wrap (percent, message) and (level, message) callbacks as one subscriber.
	"""
	def _dispatch(event: dict) -> None:
		if event['event'] == 'progress' and on_progress is not None:
			on_progress(event['percent'], event['message'])
		elif event['event'] == 'log' and on_log is not None:
			on_log(event['level'], event['message'])
	return _dispatch

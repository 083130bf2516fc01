#!/usr/bin/env python3

"""
Textual TUI wrapper for workout video generation.
"""

# Standard Library
import argparse
import os
import sys
import threading
import time
import traceback

script_dir = os.path.dirname(os.path.abspath(__file__))
if script_dir not in sys.path:
	sys.path.insert(0, script_dir)

# PIP3 modules
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import ProgressBar, RichLog, Static
from rich.text import Text

# local repo modules
from wurqlib.core import utils
from wurqlib.core.errors import WurqitError
from wurqlib.core.project import WurqitProject
from wurqlib.core.selector import SelectionRequest

#============================================

NORD_COLORS = {
	'background': "#2E3440",
	'foreground': "#D8DEE9",
	'dim': "#4C566A",
	'header': "#88C0D0",
	'command': "#ECEFF4",
	'numbers': "#B48EAD",
	'paths': "#A3BE8C",
	'warn': "#EBCB8B",
	'error': "#BF616A",
}

LEVEL_STYLES = {
	'info': NORD_COLORS['foreground'],
	'warn': NORD_COLORS['warn'],
	'error': f"bold {NORD_COLORS['error']}",
}

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="wurqit TUI wrapper")
	parser.add_argument('-c', '--config', dest='config_file',
		help='yaml settings file with a workout: block')
	parser.add_argument('-m', '--media-root', dest='media_root',
		help='media directory holding videos/, audio/, images/, celebrate/')
	parser.add_argument('-o', '--output-dir', dest='output_dir', default=os.getcwd(),
		help='directory for the finished video')
	parser.add_argument('-k', '--keep-temp', dest='keep_temp', action='store_true',
		help='keep temporary render files')
	args = parser.parse_args()
	return args

#============================================

class WurqitTuiApp(App):
	BINDINGS = [
		("q", "quit", "Quit"),
		("c", "cancel", "Cancel"),
	]

	CSS = """
	#top_row {
		height: 9;
	}

	#metrics {
		width: 50%;
		border: solid gray;
	}

	#request_info {
		width: 50%;
		border: solid gray;
	}

	#log {
		height: 1fr;
		border: solid gray;
	}
	"""

	def __init__(self, project: WurqitProject, request: SelectionRequest,
		output_dir: str):
		super().__init__()
		self.project = project
		self.request = request
		self.output_dir = output_dir
		self.percent = 0
		self.message = ""
		self.command_count = 0
		self.start_time = None
		self.finish_time = None
		self.error_text = None
		self.output_file = None
		self.finished = False
		self.metrics_widget = None
		self.log_widget = None
		self.progress_widget = None

	#============================
	def compose(self) -> ComposeResult:
		yield Static("WURQIT TUI", id="header")
		with Vertical():
			with Horizontal(id="top_row"):
				yield Static("", id="metrics")
				yield Static("", id="request_info")
			yield ProgressBar(total=100, show_eta=False, id="progress")
			yield RichLog(id="log", wrap=True, highlight=False)

	#============================
	def on_mount(self) -> None:
		self.metrics_widget = self.query_one("#metrics", Static)
		self.progress_widget = self.query_one("#progress", ProgressBar)
		self.log_widget = self.query_one(RichLog)
		self.query_one("#request_info", Static).update(self._request_text())
		self.start_time = time.time()
		thread = threading.Thread(target=self._run_generate, daemon=True)
		thread.start()
		self.set_interval(0.5, self._update_metrics)

	#============================
	def action_cancel(self) -> None:
		if self.project.cancel():
			self.log_widget.write(Text("cancel requested", style=NORD_COLORS['warn']))

	#============================
	def _run_generate(self) -> None:
		utils.set_quiet_mode(True)
		utils.set_command_reporter(self._report_command)
		subscriber = self.project.events.subscribe(self._report_event)
		try:
			self.output_file = self.project.generate(self.request, self.output_dir)
		except Exception as exc:
			self.call_from_thread(self._set_error, str(exc), traceback.format_exc())
		finally:
			self.project.events.unsubscribe(subscriber)
			utils.clear_command_reporter()
			utils.set_quiet_mode(False)
			self.call_from_thread(self._finish)

	#============================
	def _report_event(self, event: dict) -> None:
		self.call_from_thread(self._handle_event, event)

	#============================
	def _report_command(self, event: dict) -> None:
		if event.get('event') == 'start':
			self.command_count = event.get('index', self.command_count + 1)

	#============================
	def _handle_event(self, event: dict) -> None:
		if event['event'] == 'progress':
			self.percent = event['percent']
			self.message = event['message']
			self.progress_widget.update(progress=self.percent)
			return
		style = LEVEL_STYLES.get(event['level'], NORD_COLORS['foreground'])
		self.log_widget.write(Text(event['message'], style=style))

	#============================
	def _set_error(self, text: str, trace_text: str = None) -> None:
		self.error_text = text
		if trace_text and self.log_widget is not None:
			self.log_widget.write(Text(trace_text, style=NORD_COLORS['dim']))

	#============================
	def _finish(self) -> None:
		self.finished = True
		if self.start_time is not None:
			self.finish_time = time.time() - self.start_time
		if self.error_text is None:
			self.log_widget.write(Text(f"complete: {self.output_file}",
				style=f"bold {NORD_COLORS['paths']}"))
		else:
			self.log_widget.write(Text(f"failed: {self.error_text}",
				style=f"bold {NORD_COLORS['error']}"))
		self._update_metrics()

	#============================
	def _status(self) -> str:
		if self.error_text is not None:
			return "failed"
		if self.finished:
			return "done"
		return "running"

	#============================
	def _update_metrics(self) -> None:
		if self.metrics_widget is None:
			return
		if self.start_time is None:
			elapsed = 0.0
		elif self.finish_time is not None:
			elapsed = self.finish_time
		else:
			elapsed = time.time() - self.start_time
		metrics = Text()
		metrics.append("Status: ", style=NORD_COLORS['dim'])
		metrics.append(self._status(), style=NORD_COLORS['foreground'])
		metrics.append("\n")
		metrics.append("Elapsed: ", style=NORD_COLORS['dim'])
		metrics.append(self._format_duration(elapsed), style=NORD_COLORS['numbers'])
		metrics.append("\n")
		metrics.append("Progress: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.percent}%", style=NORD_COLORS['numbers'])
		metrics.append(" | Commands: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.command_count}", style=NORD_COLORS['numbers'])
		metrics.append("\n")
		metrics.append("Current: ", style=NORD_COLORS['dim'])
		metrics.append(self.message, style=NORD_COLORS['foreground'])
		self.metrics_widget.update(metrics)

	#============================
	def _request_text(self) -> Text:
		request = self.request
		info = Text()
		rows = (
			("Work", f"{request.work_duration}s x {request.sets_per_station} sets"),
			("Rest", f"{request.rest_duration}s, station {request.station_rest}s"),
			("Total", f"{request.total_minutes} min"),
			("Categories", ", ".join(request.categories)),
			("Equipment", ", ".join(request.equipment)),
			("Output", self.output_dir),
		)
		for label, value in rows:
			info.append(f"{label}: ", style=NORD_COLORS['dim'])
			info.append(f"{value}\n", style=NORD_COLORS['paths'])
		return info

	#============================
	def _format_duration(self, seconds: float) -> str:
		if seconds < 60:
			return f"{seconds:.1f}s"
		minutes = int(seconds // 60)
		remaining = seconds - (minutes * 60)
		seconds_text = f"{remaining:04.1f}"
		if minutes < 60:
			return f"{minutes}m {seconds_text}s"
		hours = int(minutes // 60)
		minutes = minutes - (hours * 60)
		return f"{hours}h {minutes:02d}m {seconds_text}s"

#============================================

def main():
	args = parse_args()
	try:
		project = WurqitProject(args.config_file, media_root=args.media_root)
		request = SelectionRequest.from_dict(project.config.workout)
	except WurqitError as exc:
		sys.stderr.write(f"error: {exc}\n")
		return 1
	if args.keep_temp:
		project.config.keep_temp = True
	app = WurqitTuiApp(project, request, args.output_dir)
	app.run()
	return 0 if app.error_text is None else 1

#============================================

if __name__ == '__main__':
	sys.exit(main())

#!/usr/bin/env python3

import argparse
import os
import sys
import yaml
from tqdm import tqdm
from wurqlib.core import utils
from wurqlib.core.errors import WurqitError
from wurqlib.core.project import WurqitProject
from wurqlib.core.selector import SelectionRequest

#============================================

def parse_args(argv=None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Interval workout video generator")
	parser.add_argument('-c', '--config', dest='config_file',
		help='yaml settings file (default: wurqit.yaml if present)')
	parser.add_argument('-m', '--media-root', dest='media_root',
		help='media directory holding videos/, audio/, images/, celebrate/')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='only show the progress bar and errors')
	subparsers = parser.add_subparsers(dest='command', required=True)

	subparsers.add_parser('categories', help='list video categories')

	equipment = subparsers.add_parser('equipment', help='list equipment for categories')
	equipment.add_argument('categories', nargs='+', help='category names')

	for name, text in (('plan', 'print the selection and segment plan'),
		('generate', 'render the workout video')):
		sub = subparsers.add_parser(name, help=text)
		sub.add_argument('-w', '--work', dest='work_duration', type=int,
			help='work duration in seconds (10-300)')
		sub.add_argument('-r', '--rest', dest='rest_duration', type=int,
			help='rest between sets in seconds (5-120)')
		sub.add_argument('-s', '--sets', dest='sets_per_station', type=int,
			help='sets per station (1-10)')
		sub.add_argument('-S', '--station-rest', dest='station_rest', type=int,
			help='station change time in seconds (5-60)')
		sub.add_argument('-t', '--total', dest='total_minutes', type=int,
			help='total workout duration in minutes (5-180)')
		sub.add_argument('-C', '--category', dest='categories', action='append',
			help='category to include, repeatable')
		sub.add_argument('-e', '--equipment', dest='equipment', action='append',
			help='equipment type to include, repeatable')
		if name == 'generate':
			sub.add_argument('-o', '--output-dir', dest='output_dir',
				default=os.getcwd(), help='directory for the finished video')
			sub.add_argument('-k', '--keep-temp', dest='keep_temp', action='store_true',
				help='keep temporary render files')
	args = parser.parse_args(argv)
	return args

#============================================

def build_request(args, project: WurqitProject) -> SelectionRequest:
	data = dict(project.config.workout)
	for field in SelectionRequest.FIELDS + ('categories', 'equipment'):
		value = getattr(args, field, None)
		if value is not None:
			data[field] = value
	return SelectionRequest.from_dict(data)

#============================================

def run_generate(project: WurqitProject, request: SelectionRequest,
	output_dir: str) -> str:
	bar = tqdm(total=100, unit='%', bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt}')

	def _on_progress(percent: int, message: str) -> None:
		bar.set_description(message)
		bar.update(percent - bar.n)

	try:
		return project.generate(request, output_dir, on_progress=_on_progress)
	finally:
		bar.close()

#============================================

def main(argv=None):
	args = parse_args(argv)
	utils.set_quiet_mode(args.quiet)
	try:
		project = WurqitProject(args.config_file, media_root=args.media_root)
		if args.command == 'categories':
			for category in project.list_categories():
				print(category)
			return 0
		if args.command == 'equipment':
			for equip in project.list_equipment(args.categories):
				print(equip)
			return 0
		request = build_request(args, project)
		if args.command == 'plan':
			plan = project.plan(request)
			print(yaml.safe_dump(plan, sort_keys=False))
			return 0
		if args.keep_temp:
			project.config.keep_temp = True
		output_file = run_generate(project, request, args.output_dir)
		print(output_file)
		return 0
	except WurqitError as exc:
		sys.stderr.write(f"error: {exc}\n")
		return 1


if __name__ == '__main__':
	sys.exit(main())

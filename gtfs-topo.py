#!/usr/bin/env python3

import itertools as it, operator as op, functools as ft
import sys

import gtfs_topo as topo


def print_view(view, file=sys.stdout):
	p = ft.partial(topo.u.p, file=file)
	p('Rows ({}):'.format(len(view.rows)))
	for row in view.rows:
		times = ' '.join( '{:>5}'.format(topo.u.time_format(st.time) if st else '')
			for st in (view.stop_time(trip_id, row.key) for trip_id in view.columns) )
		p('  {:<30.30} {:<9} {}'.format(row.station.name, row.cls.value, times))
	p('Columns ({}): {}'.format(len(view.columns), ' '.join(view.columns)))


def main(args=None):
	conf = topo.gtfs.GTFSConf()
	conf_engine = topo.engine.EngineConf(log_progress_for={'check', 'profiles'})

	import argparse
	parser = argparse.ArgumentParser(
		description='Infer trip directions, route topology and timetable'
			' row/column ordering from unpacked GTFS feed data.')
	parser.add_argument('gtfs_dir', help='Path to unpacked GTFS data directory.')

	group = parser.add_argument_group('Feed options')
	group.add_argument('-r', '--route', action='append', metavar='route_id',
		help='Only load trips for specified route id(s). Can be used multiple times.')
	group.add_argument('--no-shapes', action='store_true',
		help='Do not load shapes.txt, which can be large.')
	group.add_argument('--force-directions', action='store_true',
		help='Re-infer direction_id for all trips, discarding values from the feed.')

	group = parser.add_argument_group('Misc/debug options')
	group.add_argument('--engine-conf', metavar='yaml-data',
		help='Override values for EngineConf as a YAML mapping.'
			' Example: {columns: {vote_threshold: 3}, workers: 4}')
	group.add_argument('--debug', action='store_true', help='Verbose operation mode.')

	cmds = parser.add_subparsers(title='Commands', dest='call')

	cmd = cmds.add_parser('directions',
		help='Print direction inference stats and feed diagnostics.')

	cmd = cmds.add_parser('profile',
		help='Print core/branch/tail classification of stations for route/direction.')
	cmd.add_argument('route_id', help='Route ID to build profile for.')
	cmd.add_argument('direction', type=int, choices=[0, 1], help='Direction ID - 0 or 1.')
	cmd.add_argument('--dot', metavar='path',
		help='Dump station graph (in graphviz dot format) to a specified file.')
	cmd.add_argument('--dot-opts', metavar='yaml-data',
		help='Options for graphviz graph/nodes/edges, as a YAML mapping.'
			' Example: {graph: {rankdir: TB}}')

	cmd = cmds.add_parser('rows', help='Print canonical row list for route/direction.')
	cmd.add_argument('route_id', help='Route ID to build row list for.')
	cmd.add_argument('direction', type=int, choices=[0, 1], help='Direction ID - 0 or 1.')

	cmd = cmds.add_parser('columns',
		help='Print visible rows and ordered trips for route/direction on specific date.')
	cmd.add_argument('route_id', help='Route ID to order trips for.')
	cmd.add_argument('direction', type=int, choices=[0, 1], help='Direction ID - 0 or 1.')
	cmd.add_argument('date', nargs='?',
		help='Service date as YYYYMMDD or YYYY-MM-DD. All trips are used, if omitted.')
	cmd.add_argument('-a', '--all-trips', action='store_true',
		help='Also show depot trips and tail rows (not serving passengers).')

	cmd = cmds.add_parser('shape',
		help='Print simplified shape (lat/lon points) for route/direction reference trip.')
	cmd.add_argument('route_id', help='Route ID.')
	cmd.add_argument('direction', type=int, choices=[0, 1], help='Direction ID - 0 or 1.')
	cmd.add_argument('-t', '--tolerance', type=float, metavar='degrees',
		help='Douglas-Peucker simplification tolerance,'
			' <= 0 to disable. Default: {}'.format(conf_engine.shape_tolerance))

	opts = parser.parse_args(sys.argv[1:] if args is None else args)

	topo.u.logging.basicConfig(
		format='%(asctime)s :: %(name)s %(levelname)s :: %(message)s',
		datefmt='%Y-%m-%d %H:%M:%S',
		level=topo.u.logging.DEBUG if opts.debug else topo.u.logging.WARNING )

	if opts.route: conf.route_ids = opts.route
	if opts.no_shapes: conf.load_shapes = False
	if opts.engine_conf:
		import yaml
		try: topo.u.conf_update(conf_engine, yaml.safe_load(opts.engine_conf) or dict())
		except ValueError as err: parser.error(str(err))

	feed = topo.calc_timer(topo.gtfs.parse_feed, opts.gtfs_dir, conf)
	engine = topo.calc_timer( topo.engine.TimetableEngine, feed,
		conf=conf_engine, timer_func=topo.calc_timer, force_directions=opts.force_directions )
	p = topo.u.p

	if opts.call == 'directions':
		stats = engine.direction_stats
		p('Trips: {:,}'.format(len(feed.trips)))
		for k, v in stats.as_dict().items(): p('  {}: {:,}'.format(k, v))
		p('Diagnostics: {:,}'.format(len(engine.diagnostics)))
		for diag in engine.diagnostics:
			p('  [{}] {}: {}'.format(diag.route_id, diag.kind.value, diag.message))

	elif opts.call == 'profile':
		profile = engine.route_profile(opts.route_id, opts.direction)
		p('Profile: {!r}'.format(profile))
		p('Core: {}'.format(' '.join(profile.core)))
		for cls in topo.t.internal.StationClass:
			if cls is topo.t.internal.StationClass.core: continue
			p('{}: {}'.format(cls.value.title(), ' '.join(profile.stations_by_class(cls))))
		if opts.dot:
			dot_opts = dict()
			if opts.dot_opts:
				import yaml
				dot_opts = yaml.safe_load(opts.dot_opts)
			with topo.u.safe_replacement(opts.dot) as dst:
				topo.vis.dot_for_route_profile(profile, dst, dot_opts=dot_opts)

	elif opts.call == 'rows':
		for n, row in enumerate(engine.canonical_rows(opts.route_id, opts.direction), 1):
			p('{:>3} {:<12} {:<9} {}'.format(n, row.key, row.cls.value, row.station.name))

	elif opts.call == 'columns':
		view = engine.select( route_key=opts.route_id, direction=opts.direction,
			date=opts.date, show_all_trips=opts.all_trips )
		print_view(view)

	elif opts.call == 'shape':
		for lat, lon in engine.route_shape(opts.route_id, opts.direction, opts.tolerance):
			p('{:.6f} {:.6f}'.format(lat, lon))

	else: parser.error('Action not implemented: {}'.format(opts.call))

if __name__ == '__main__': sys.exit(main())

import itertools as it, operator as op, functools as ft
from collections import namedtuple
from pathlib import Path
import os, csv

from . import utils as u, types as t


log = u.get_logger('topo.gtfs')


@u.attr_struct(vals_to_attrs=True)
class GTFSConf:

	# Only load trips/stop-times for these route ids, if set
	route_ids = None

	# Files that are required, all others are loaded if present
	required_files = 'stops', 'trips', 'stop_times'

	load_shapes = True


weekday_columns = [ 'monday', 'tuesday',
	'wednesday', 'thursday', 'friday', 'saturday', 'sunday' ]


def iter_gtfs_tuples(gtfs_dir, filename, empty_if_missing=False, yield_fields=False):
	log.debug('Processing gtfs file: {}', filename)
	if filename.endswith('.txt'): filename = filename[:-4]
	tuple_t = ''.join(' '.join(filename.rstrip('s').split('_')).title().split())
	p = Path(gtfs_dir) / '{}.txt'.format(filename)
	if empty_if_missing and not os.access(str(p), os.R_OK):
		if yield_fields: yield list()
		return
	with p.open(encoding='utf-8-sig') as src:
		src_csv = csv.reader(src)
		fields = list(v.strip() for v in next(src_csv))
		tuple_t = namedtuple(tuple_t, fields, rename=True)
		if yield_fields: yield fields
		for line in src_csv:
			try: yield tuple_t(*line)
			except TypeError:
				log.debug('Skipping bogus CSV line (file: {}): {!r}', p, line)

def _opt(s, k, conv=None, default=None):
	v = getattr(s, k, None)
	if v is None or not v.strip(): return default
	v = v.strip()
	if conv:
		try: v = conv(v)
		except ValueError:
			log.debug('Failed to parse {!r} value: {!r}, using default ({!r})', k, v, default)
			return default
	return v


def parse_calendar(gtfs_dir):
	calendar = t.public.Calendar()
	for s in iter_gtfs_tuples(gtfs_dir, 'calendar', empty_if_missing=True):
		weekdays = list(bool(_opt(s, k, int, 0)) for k in weekday_columns)
		calendar.add_entry(s.service_id, s.start_date, s.end_date, weekdays)
	for s in iter_gtfs_tuples(gtfs_dir, 'calendar_dates', empty_if_missing=True):
		calendar.add_exception(s.service_id, s.date, s.exception_type.strip())
	return calendar

def parse_shapes(gtfs_dir):
	shape_pts = dict()
	for s in iter_gtfs_tuples(gtfs_dir, 'shapes', empty_if_missing=True):
		pt = tuple( _opt(s, k, conv) for k, conv in
			[('shape_pt_sequence', int), ('shape_pt_lat', float), ('shape_pt_lon', float)] )
		if None in pt:
			log.debug('Skipping shape point with missing values: {!r}', s)
			continue
		shape_pts.setdefault(s.shape_id, list()).append(pt)
	return dict( (shape_id, list((lat, lon) for n, lat, lon in sorted(pts)))
		for shape_id, pts in shape_pts.items() )


def parse_feed(gtfs_dir, conf=None):
	'''Load Feed from unpacked GTFS data directory.
		Raises OSError if any of the required files is missing.'''
	conf, gtfs_dir = conf or GTFSConf(), Path(gtfs_dir)
	for name in conf.required_files:
		p = gtfs_dir / '{}.txt'.format(name)
		if not p.is_file(): raise OSError('Missing required GTFS file: {}'.format(p))
	route_filter = set(conf.route_ids) if conf.route_ids else None

	routes = list( t.public.Route( s.route_id,
			_opt(s, 'route_short_name'), _opt(s, 'route_long_name') )
		for s in iter_gtfs_tuples(gtfs_dir, 'routes', empty_if_missing=True)
		if not route_filter or s.route_id in route_filter )

	stops = list( t.public.Stop( s.stop_id, _opt(s, 'stop_name'),
			_opt(s, 'stop_lat', float), _opt(s, 'stop_lon', float), _opt(s, 'parent_station') )
		for s in iter_gtfs_tuples(gtfs_dir, 'stops') )

	trips = list()
	for s in iter_gtfs_tuples(gtfs_dir, 'trips'):
		if route_filter and s.route_id not in route_filter: continue
		trips.append(t.public.Trip( s.trip_id, s.route_id,
			_opt(s, 'direction_id', int), _opt(s, 'shape_id'),
			_opt(s, 'service_id'), _opt(s, 'trip_headsign') ))
	trip_ids = set(map(op.attrgetter('id'), trips))

	stop_times = list()
	for s in iter_gtfs_tuples(gtfs_dir, 'stop_times'):
		if s.trip_id not in trip_ids: continue
		seq = _opt(s, 'stop_sequence', int)
		if seq is None:
			log.debug('Skipping stop-time without valid stop_sequence: {!r}', s)
			continue
		stop_times.append(t.public.StopTime( s.trip_id, s.stop_id, seq,
			u.time_parse(_opt(s, 'arrival_time')), u.time_parse(_opt(s, 'departure_time')),
			_opt(s, 'pickup_type', int, 0), _opt(s, 'drop_off_type', int, 0) ))

	feed = t.public.Feed.build( routes, trips, stops, stop_times,
		calendar=parse_calendar(gtfs_dir),
		shapes=parse_shapes(gtfs_dir) if conf.load_shapes else None )
	log.debug(
		'Parsed feed: routes={:,} trips={:,} (mean-stops={:,.1f}) stops={:,} services={:,} shapes={:,}',
		len(feed.routes), len(feed.trips), feed.stat_mean_stops(),
		len(feed.stops), len(feed.calendar), len(feed.shapes) )
	return feed

import itertools as it, operator as op, functools as ft
from concurrent import futures

from . import utils as u, types as t, geo, patterns as pt
from . import direction as dr, topology as tp, rows as rw, columns as cl, cache


@u.attr_struct
class EngineConf:
	direction = u.attr_init(dr.DirectionConf)
	topology = u.attr_init(tp.TopologyConf)
	columns = u.attr_init(cl.ColumnConf)
	shape_tolerance = u.attr_init(geo.simplify_tolerance_default)
	workers = u.attr_init(None) # >1 - process routes in a thread pool where possible
	log_progress_for = u.attr_init(None) # or a set/list of prefixes
	log_progress_steps = u.attr_init(30)


def timer(self_or_func, func=None, *args, **kws):
	'Calculation call wrapper for timer/progress logging.'
	if not func: return lambda s,*a,**k: s.timer_wrapper(self_or_func, s, *a, **k)
	return self_or_func.timer_wrapper(func, *args, **kws)


class TimetableEngine:
	'''Derived route structure for one loaded Feed.
		Direction labels are inferred once on init, profiles, row lists and
			column orders are built lazily and cached per selection.'''

	direction_stats = None

	def __init__(self, feed, conf=None, timer_func=None, force_directions=False):
		self.feed, self.conf, self.log = feed, conf or EngineConf(), u.get_logger('topo')
		self.timer_wrapper = timer_func if timer_func else lambda f,*a,**k: f(*a,**k)
		self.diagnostics = t.public.Diagnostics()
		self.sequences = pt.StopSequences(feed.stop_times, self.diagnostics)
		self.cache, self.selection = cache.SelectionCache(), t.internal.Selection()
		self.check_feed()
		self.infer_directions(force=force_directions)

	@u.coroutine
	def progress_iter(self, prefix, n_max, steps=None, n=0):
		'Progress logging helper coroutine for long calculations.'
		prefix_set = self.conf.log_progress_for
		if not prefix_set or prefix not in prefix_set:
			while True: yield # dry-run
		if not steps: steps = self.conf.log_progress_steps
		steps = min(n_max, steps)
		step_n = steps and n_max / steps
		msg_tpl = '[{{}}] Step {{:>{0}.0f}} / {{:{0}d}}{{}}'.format(len(str(steps)))
		while True:
			dn_msg = yield
			if isinstance(dn_msg, tuple): dn, msg = dn_msg
			elif isinstance(dn_msg, int): dn, msg = dn_msg, None
			else: dn, msg = 1, dn_msg
			n += dn
			if n == dn or n % step_n < 1:
				if msg:
					if not isinstance(msg, str): msg = msg[0].format(*msg[1:])
					msg = ': {}'.format(msg)
				self.log.debug(msg_tpl, prefix, n / step_n, steps, msg or '')


	@timer
	def check_feed(self):
		'Report routes without trips and stop-times for unknown stops as diagnostics.'
		feed = self.feed
		for route_id in feed.routes:
			if not feed.trips_for_route(route_id):
				self.diagnostics.add(route_id, 'no-trips', 'Route has no trips')
		progress = self.progress_iter('check', len(feed.trips))
		for trip in feed.trips.values():
			progress.send(['diagnostics={:,}', len(self.diagnostics)])
			unknown = sorted(set( st.stop_id for st in
				feed.stop_times.get(trip.id, ()) if st.stop_id not in feed.stops ))
			if unknown:
				self.diagnostics.add( trip.route_id, 'unknown-stop',
					'Trip {!r} references unknown stop(s): {}', trip.id, ' '.join(unknown) )

	@timer
	def infer_directions(self, force=False):
		'''Label trip directions, only done once per feed load.
			Re-running without force=True returns stats from the first run,
				with force=True all trips are relabeled and all cached results dropped.'''
		if self.direction_stats is not None and not force: return self.direction_stats
		trips, self.direction_stats = dr.infer_directions(
			self.feed.trips.values(), self.feed.stop_times, self.feed.stops,
			conf=self.conf.direction, force=force,
			sequences=self.sequences, workers=self.conf.workers )
		self.cache.invalidate()
		return self.direction_stats


	def route_key(self, route_key):
		'Hashable cache key for route_key, lists become tuples and sets sorted tuples.'
		if isinstance(route_key, (set, frozenset)): return tuple(sorted(route_key))
		if isinstance(route_key, list): return tuple(route_key)
		return route_key

	def route_ids(self, route_key):
		'Route ids for route_key - either a route id or a tuple/list/set of them (logical group).'
		if isinstance(route_key, (tuple, list, set, frozenset)): return list(route_key)
		return [route_key]

	def trips_for_key(self, route_key):
		return list(it.chain.from_iterable(
			self.feed.trips_for_route(route_id) for route_id in self.route_ids(route_key) ))

	def _build_profile(self, route_key, direction):
		trips = self.trips_for_key(route_key)
		if not trips:
			for route_id in self.route_ids(route_key):
				if route_id in self.feed.routes: continue
				self.diagnostics.add(route_id, 'no-trips', 'Unknown route id, no trips for it')
		return tp.build_route_profile( route_key, direction, trips,
			self.feed.stop_times, self.feed.stops, self.conf.topology, self.sequences )

	def route_profile(self, route_key, direction):
		route_key = self.route_key(route_key)
		key = t.internal.ProfileKey(route_key, direction)
		return self.cache.run('profile', key, self._build_profile, route_key, direction)

	@timer
	def route_profiles(self, directions=(0, 1)):
		'''Build and cache profiles for all routes and directions.
			Routes are processed independently, in a thread pool if conf.workers > 1.'''
		keys = list( t.internal.ProfileKey(route_id, d)
			for route_id in self.feed.routes for d in directions )
		keys = list(key for key in keys if ('profile', key) not in self.cache)
		if self.conf.workers and self.conf.workers > 1 and len(keys) > 1:
			with futures.ThreadPoolExecutor(self.conf.workers) as ex:
				results = list(ex.map(lambda key: self._build_profile(*key), keys))
		else:
			results, progress = list(), self.progress_iter('profiles', len(keys))
			for key in keys:
				progress.send(['route={} direction={}', *key])
				results.append(self._build_profile(*key))
		for key, profile in zip(keys, results): self.cache.entries['profile'][key] = profile
		return list(self.route_profile(*key) for key in ( t.internal.ProfileKey(route_id, d)
			for route_id in self.feed.routes for d in directions ))

	def canonical_rows(self, route_key, direction):
		route_key = self.route_key(route_key)
		key = t.internal.ProfileKey(route_key, direction)
		return self.cache.run( 'rows', key,
			lambda: rw.build_canonical_rows(self.route_profile(route_key, direction)) )

	def _build_view(self, key):
		profile = self.route_profile(key.route_key, key.direction)
		row_list = self.canonical_rows(key.route_key, key.direction)
		core = set(profile.core)

		trips = list( trip for trip in self.trips_for_key(key.route_key)
			if trip.id in profile.trip_visits and self.feed.trip_active(trip, key.date) )
		mappings = profile.row_mappings(trip.id for trip in trips)
		if not key.show_all_trips:
			trips = list(trip for trip in trips if core.intersection(mappings[trip.id]))

		served = set(it.chain.from_iterable(mappings[trip.id] for trip in trips))
		rows = list( row for row in row_list.visible(served)
			if key.show_all_trips or row.passenger )
		rows_passenger = list(row.key for row in rows if row.passenger)

		trip_ids = cl.reference_order(list(trip.id for trip in trips), mappings, rows_passenger)
		columns = cl.order_columns( trip_ids, mappings,
			rows_passenger, self.conf.columns, core_rows=profile.core )
		return t.internal.TimetableView(
			key, rows, columns, dict((trip_id, mappings[trip_id]) for trip_id in columns) )

	def view(self, route_key, direction, date=None, show_all_trips=False):
		'''Visible rows and ordered columns (trips) for route/direction on a date.
			date=None uses all trips regardless of calendar.
			Without show_all_trips, tail rows and trips serving no core stations are hidden.'''
		key = t.internal.ColumnKey( self.route_key(route_key),
			direction, u.date_str(date), bool(show_all_trips) )
		return self.cache.run('columns', key, self._build_view, key)

	def select(self, **changes):
		'''Update current selection (route_key, direction, date, show_all_trips),
			dropping cached results that depend on changed fields, and return its TimetableView.'''
		for k in changes:
			if not hasattr(self.selection, k): raise ValueError('Unknown selection field: {!r}'.format(k))
		if 'date' in changes: changes['date'] = u.date_str(changes['date'])
		if 'route_key' in changes: changes['route_key'] = self.route_key(changes['route_key'])
		changed = list(k for k, v in changes.items() if getattr(self.selection, k) != v)
		if changed:
			self.cache.selection_changed(*changed)
			for k in changed: setattr(self.selection, k, changes[k])
		if self.selection.route_key is None: raise ValueError('No route_key selected')
		return self.view(*self.selection.column_key)


	def route_shape(self, route_key, direction, tolerance=None):
		'''Simplified (lat, lon) polyline for the reference trip of route profile.
			Uses trip shape if it's available, or stop coordinates otherwise.'''
		if tolerance is None: tolerance = self.conf.shape_tolerance
		profile = self.route_profile(route_key, direction)
		trip = self.feed.trips.get(profile.reference_trip)
		if not trip: return list()
		points = self.feed.shapes.get(trip.shape_id)
		if not points:
			stops = (self.feed.stops.get(stop_id) for stop_id in self.sequences.for_trip(trip))
			points = list((stop.lat, stop.lon) for stop in stops if stop and stop.has_coords)
		return geo.simplify_polyline(points, tolerance)

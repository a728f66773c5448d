### Derived route structure: stations, profiles, row lists, timetable views

import itertools as it, operator as op, functools as ft
from collections import namedtuple
import enum

from .. import utils as u


class StationClass(enum.Enum):
	core = 'core'
	passenger = 'passenger' # branch serving riders
	tail = 'tail' # depot approach/exit, no passenger service


@u.attr_struct(repr=False)
class Station:
	'''Merge-group of Stops sharing parent_station, or a single Stop.
		"key" is unique per visit, i.e. second visit to same station
			on a looping trip gets separate "S#2" key and its own row.'''
	key = u.attr_init()
	id = u.attr_init()
	name = u.attr_init()
	stop_ids = u.attr_init(set)
	visit = u.attr_init(1)
	lat = u.attr_init(None)
	lon = u.attr_init(None)

	def __repr__(self):
		return '<Station {} [{}]>'.format(self.name, self.key)


@u.attr_struct(repr=False)
class RouteProfile:
	route_key = u.attr_init()
	direction = u.attr_init()
	trip_count = u.attr_init(0)
	stations = u.attr_init(dict) # {key: Station}
	core = u.attr_init(list) # ordered core station keys
	classes = u.attr_init(dict) # {key: StationClass}
	edges = u.attr_init(dict) # {(key_a, key_b): frequency}
	boundary = u.attr_init(dict) # {non-core key: max edge-frequency to any core station}
	trip_visits = u.attr_init(dict) # {trip_id: [(key, StopTime), ...]}
	reference_trip = u.attr_init(None)

	def stations_by_class(self, cls):
		cls = StationClass(cls)
		return sorted(k for k, v in self.classes.items() if v is cls)

	def row_mappings(self, trip_ids=None):
		'Return {trip_id: {station_key: StopTime}} for specified or all trips.'
		if trip_ids is None: trip_ids = self.trip_visits.keys()
		return dict( (trip_id, dict(self.trip_visits.get(trip_id, list())))
			for trip_id in trip_ids )

	def __repr__(self):
		return '<RouteProfile {}/{} trips={} core={} stations={}>'.format(
			self.route_key, self.direction, self.trip_count, len(self.core), len(self.stations) )


@u.attr_struct
class Row:
	# segment: -1 - before first core station, n - after core[n]
	keys = 'key station cls segment'

	@property
	def passenger(self): return self.cls is not StationClass.tail

class CanonicalRowList:
	'''Date-independent row order for one route+direction.
		Never reordered after it is built, only filtered for visibility.'''

	def __init__(self, route_key, direction, rows):
		self.route_key, self.direction = route_key, direction
		self.rows = tuple(rows)
		self.idx_key = dict((row.key, n) for n, row in enumerate(self.rows))

	@property
	def keys(self): return list(map(op.attrgetter('key'), self.rows))

	def index(self, key): return self.idx_key[key]

	def visible(self, keys):
		keys = set(keys)
		return list(row for row in self.rows if row.key in keys)

	def __getitem__(self, key): return self.rows[self.idx_key[key]]
	def __contains__(self, key): return key in self.idx_key
	def __len__(self): return len(self.rows)
	def __iter__(self): return iter(self.rows)
	def __repr__(self):
		return '<CanonicalRowList {}/{} [{}]>'.format(
			self.route_key, self.direction, ' '.join(self.keys) )


### Selection cache keys and results

ProfileKey = namedtuple('ProfileKey', 'route_key direction')
ColumnKey = namedtuple('ColumnKey', 'route_key direction date show_all_trips')

@u.attr_struct
class Selection:
	route_key = u.attr_init(None)
	direction = u.attr_init(0)
	date = u.attr_init(None)
	show_all_trips = u.attr_init(False)

	@property
	def column_key(self):
		return ColumnKey(self.route_key, self.direction, self.date, self.show_all_trips)

@u.attr_struct(repr=False)
class TimetableView:
	key = u.attr_init()
	rows = u.attr_init() # visible Row objects, in canonical order
	columns = u.attr_init() # trip ids in display order
	cells = u.attr_init() # {trip_id: {row_key: StopTime}}

	def stop_time(self, trip_id, row_key):
		return self.cells.get(trip_id, dict()).get(row_key)

	def __repr__(self):
		return '<TimetableView {} rows={} columns={}>'.format(
			'/'.join(map(str, self.key)), len(self.rows), len(self.columns) )

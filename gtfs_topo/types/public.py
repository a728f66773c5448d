import itertools as it, operator as op, functools as ft
from collections import namedtuple, defaultdict, Counter
import enum, datetime

from .. import utils as u


### Feed input data, as produced by an external loader

@u.attr_struct(repr=False)
class Stop:
	id = u.attr_init()
	name = u.attr_init(None)
	lat = u.attr_init(None)
	lon = u.attr_init(None)
	parent_station = u.attr_init(None)

	@property
	def has_coords(self): return self.lat is not None and self.lon is not None

	def __repr__(self):
		if not self.name or self.id == self.name: return '<Stop {}>'.format(self.id)
		return '<Stop {} [{}]>'.format(self.name, self.id)

@u.attr_struct
class StopTime:
	trip_id = u.attr_init()
	stop_id = u.attr_init()
	seq = u.attr_init()
	arr = u.attr_init(None) # minutes since service-day midnight, can be >24h
	dep = u.attr_init(None)
	pickup_type = u.attr_init(0)
	drop_off_type = u.attr_init(0)

	@property
	def time(self):
		'Departure time, or arrival if departure is missing.'
		return self.dep if self.dep is not None else self.arr

@u.attr_struct(repr=False)
class Trip:
	id = u.attr_init()
	route_id = u.attr_init()
	direction_id = u.attr_init(None) # 0/1, set by direction inference if missing
	shape_id = u.attr_init(None)
	service_id = u.attr_init(None)
	headsign = u.attr_init(None)

	def __repr__(self):
		return 'Trip(id={0.id}, route={0.route_id}, dir={0.direction_id})'.format(self)

@u.attr_struct
class Route:
	id = u.attr_init()
	short_name = u.attr_init(None)
	long_name = u.attr_init(None)

	@property
	def name(self): return self.short_name or self.long_name or self.id


class CalendarException(enum.Enum): added, removed = '1', '2'

ServiceCalendarEntry = namedtuple('SCE', 'date_start date_end weekdays')

class Calendar:
	'''Service calendar - weekly patterns (calendar.txt)
		with per-date exceptions (calendar_dates.txt) on top of them.'''

	def __init__(self):
		self.entries, self.exceptions = dict(), defaultdict(dict)

	def add_entry(self, service_id, date_start, date_end, weekdays):
		self.entries[service_id] = ServiceCalendarEntry(
			u.date_str(date_start), u.date_str(date_end), list(map(bool, weekdays)) )

	def add_exception(self, service_id, date, exc):
		if not isinstance(exc, CalendarException): exc = CalendarException(str(exc))
		self.exceptions[service_id][u.date_str(date)] = exc

	def active(self, service_id, date):
		if service_id is None or date is None or not self: return True
		date = u.date_str(date)
		exc = self.exceptions.get(service_id, dict()).get(date)
		if exc is CalendarException.added: return True
		if exc is CalendarException.removed: return False
		sce = self.entries.get(service_id)
		if not sce or not (sce.date_start <= date <= sce.date_end): return False
		weekday = datetime.datetime.strptime(date, '%Y%m%d').weekday()
		return sce.weekdays[weekday]

	def __bool__(self): return bool(self.entries or self.exceptions)
	def __len__(self): return len(set(self.entries).union(self.exceptions))


### Diagnostics - non-fatal input-contract violations, accumulated per route

class DiagnosticKind(enum.Enum):
	duplicate_sequence = 'duplicate-sequence'
	no_trips = 'no-trips'
	unknown_stop = 'unknown-stop'

Diagnostic = namedtuple('Diagnostic', 'route_id kind message')

class Diagnostics:

	log = u.get_logger('topo.diag')

	def __init__(self): self.set_idx = dict() # {route_id: [diagnostic, ...]}

	def add(self, route_id, kind, msg, *args, **kws):
		if not isinstance(kind, DiagnosticKind): kind = DiagnosticKind(kind)
		if args or kws: msg = msg.format(*args, **kws)
		self.log.debug('[{}] {}: {}', route_id, kind.value, msg)
		self.set_idx.setdefault(route_id, list()).append(Diagnostic(route_id, kind, msg))

	def for_route(self, route_id): return list(self.set_idx.get(route_id, list()))
	def kinds(self, route_id=None):
		diags = self if route_id is None else self.for_route(route_id)
		return Counter(diag.kind for diag in diags)

	def __len__(self): return sum(map(len, self.set_idx.values()))
	def __iter__(self): return it.chain.from_iterable(self.set_idx.values())


### Feed - normalized tables with per-trip/per-route indexes

class Feed:

	def __init__(self):
		self.routes, self.trips, self.stops = dict(), dict(), dict()
		self.stop_times = defaultdict(list) # {trip_id: [stop_time, ...]} sorted by seq
		self.shapes = dict() # {shape_id: [(lat, lon), ...]}
		self.calendar = Calendar()
		self._route_trips = None

	@classmethod
	def build( cls, routes=None, trips=None,
			stops=None, stop_times=None, calendar=None, shapes=None ):
		'Build Feed from iterables of records (Route, Trip, Stop, StopTime).'
		self = cls()
		for route in routes or list(): self.routes[route.id] = route
		for stop in stops or list(): self.stops[stop.id] = stop
		for trip in trips or list(): self.add_trip(trip)
		for st in stop_times or list(): self.stop_times[st.trip_id].append(st)
		if calendar is not None: self.calendar = calendar
		if shapes: self.shapes.update(shapes)
		return self.finalize()

	def add_trip(self, trip):
		self.trips[trip.id] = trip
		if trip.route_id not in self.routes: self.routes[trip.route_id] = Route(trip.route_id)
		self._route_trips = None

	def finalize(self):
		for stop_times in self.stop_times.values(): stop_times.sort(key=op.attrgetter('seq'))
		self._route_trips = None
		return self

	def trips_for_route(self, route_id):
		if self._route_trips is None:
			self._route_trips = defaultdict(list)
			for trip in self.trips.values(): self._route_trips[trip.route_id].append(trip)
		return self._route_trips.get(route_id, list())

	def trip_active(self, trip, date):
		return self.calendar.active(trip.service_id, date)

	def stat_mean_stops(self):
		if not self.trips: return 0
		return sum(len(self.stop_times.get(trip_id, ())) for trip_id in self.trips) / len(self.trips)


### Direction inference results

class DirectionMethod(enum.Enum):
	exact = 'exact'
	subsequence = 'subsequence'
	circular = 'circular'
	bearing = 'bearing'
	fallback = 'fallback'
	preset = 'preset'

@u.attr_struct
class DirectionStats:
	methods = u.attr_init(dict) # {trip_id: DirectionMethod}
	diagnostics = u.attr_init(Diagnostics)

	def add(self, trip_id, method): self.methods[trip_id] = DirectionMethod(method)

	def count(self, method):
		method = DirectionMethod(method)
		return sum(1 for m in self.methods.values() if m is method)

	def as_dict(self):
		return dict((m.value, self.count(m)) for m in DirectionMethod)

	def __getattr__(self, k):
		try: method = DirectionMethod(k)
		except ValueError: raise AttributeError(k) from None
		return self.count(method)

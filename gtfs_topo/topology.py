### Route topology: stations, edge frequencies, core/branch/tail classification

import itertools as it, operator as op, functools as ft
from collections import Counter, defaultdict

from . import utils as u, types as t, patterns as pt


log = u.get_logger('topo.topology')


@u.attr_struct(vals_to_attrs=True)
class TopologyConf:
	core_threshold = 0.10 # edge-frequency (fraction of trips) to make station core
	no_service_types = (1,) # pickup_type/drop_off_type values for "no pickup/drop-off"


def merge_stations(stop_seqs, stops_by_id):
	'''Return {stop_id: station_id} mapping for stops in sequences.
		Stops are grouped under parent_station only if that group
			is visited at most once per trip across all trips, otherwise
			loop topology would be lost, and such stops are kept separate.'''
	group_max = dict()
	for seq in stop_seqs:
		counts = Counter(filter(None, (
			getattr(stops_by_id.get(stop_id), 'parent_station', None) for stop_id in seq )))
		for parent, n in counts.items(): group_max[parent] = max(group_max.get(parent, 0), n)
	station_map = dict()
	for stop_id in set(it.chain.from_iterable(stop_seqs)):
		parent = getattr(stops_by_id.get(stop_id), 'parent_station', None)
		station_map[stop_id] = parent if parent and group_max.get(parent, 0) <= 1 else stop_id
	return station_map

def station_visit_keys(station_ids):
	'Per-visit keys for station sequence of one trip: [A, B, A] -> [A, B, A#2].'
	visits, keys = Counter(), list()
	for station_id in station_ids:
		visits[station_id] += 1
		n = visits[station_id]
		keys.append(station_id if n == 1 else '{}#{}'.format(station_id, n))
	return keys

def _station(key, station_id, stop_id, stops_by_id):
	parent, stop = stops_by_id.get(station_id), stops_by_id.get(stop_id)
	name_src = parent if station_id != stop_id and parent else stop
	name = (name_src and name_src.name) or station_id
	lat, lon = ((name_src.lat, name_src.lon) if name_src else (None, None))
	visit = int(key.rsplit('#', 1)[1]) if key != station_id else 1
	return t.internal.Station(key, station_id, name, set(), visit, lat, lon)


def edge_frequencies(trip_keys):
	'''Return {(key_a, key_b): frequency} for consecutive station pairs,
		where frequency is the fraction of trips with that edge, counted once per trip.'''
	trip_count = sum(1 for keys in trip_keys.values() if keys)
	if not trip_count: return dict()
	counts = Counter()
	for keys in trip_keys.values(): counts.update(set(zip(keys, keys[1:])))
	return dict((edge, n / trip_count) for edge, n in counts.items())

def core_stations(edges, threshold):
	core = set()
	for (a, b), freq in edges.items():
		if freq >= threshold: core.update([a, b])
	return core

def core_order(core, trip_keys):
	'''Ordered core station keys.
		Order comes from trip with the most common station pattern (first-seen on ties),
			core stations missing there are inserted from less common trips,
			next to their nearest already-placed neighbor on that trip.'''
	patterns = pt.pattern_counts(tuple(keys) for keys in trip_keys.values())
	trip_ids = sorted( (trip_id for trip_id, keys in trip_keys.items() if keys),
		key=lambda trip_id: -patterns[tuple(trip_keys[trip_id])] )
	order, placed = list(), set()
	for trip_id in trip_ids:
		anchor, pending = None, list()
		for key in trip_keys[trip_id]:
			if key not in core: continue
			if key not in placed:
				pending.append(key)
				continue
			if pending:
				n = order.index(key) if anchor is None else order.index(anchor) + 1
				order[n:n] = pending
				placed.update(pending)
				pending.clear()
			anchor = key
		if pending:
			n = len(order) if anchor is None else order.index(anchor) + 1
			order[n:n] = pending
			placed.update(pending)
		if len(placed) == len(core): break
	return order, (trip_ids[0] if trip_ids else None)

def boundary_scores(edges, core, stations):
	'Max frequency of edges connecting each non-core station to any core station.'
	scores = dict((key, 0.0) for key in stations if key not in core)
	for (a, b), freq in edges.items():
		for k1, k2 in [(a, b), (b, a)]:
			if k1 in scores and k2 in core: scores[k1] = max(scores[k1], freq)
	return scores


def propagate_tails(classes, trip_keys, candidates=None):
	'''Mark candidates co-occurring on any trip with a tail station as tail,
		until nothing changes - least fixed point over the co-occurrence relation.
		Uses worklist instead of recursion. Updates classes in-place,
			returns set of newly-marked station keys.'''
	ss = t.internal.StationClass
	if candidates is None:
		candidates = set(k for k, cls in classes.items() if cls is None)
	candidates = set(candidates)
	key_trips = defaultdict(list)
	for trip_id, keys in trip_keys.items():
		for key in keys: key_trips[key].append(trip_id)

	marked, worklist = set(), list(k for k, cls in classes.items() if cls is ss.tail)
	while worklist:
		key = worklist.pop()
		for trip_id in key_trips[key]:
			for key_co in trip_keys[trip_id]:
				if key_co not in candidates: continue
				candidates.discard(key_co)
				classes[key_co] = ss.tail
				marked.add(key_co)
				worklist.append(key_co)
	return marked

def classify_stations(core, trip_keys, trip_visits, conf):
	'''Return {key: StationClass} for all stations on trips.
		Checks for non-core stations, first match wins:
			A - strictly between first/last core station on some trip -> passenger,
			B - any visit has no-pickup or no-drop-off flag -> tail,
			C - co-occurs on a trip with a tail station -> tail (propagated),
		and anything else is passenger.'''
	ss, classes = t.internal.StationClass, dict()
	for keys in trip_keys.values():
		for key in keys: classes[key] = ss.core if key in core else None

	for keys in trip_keys.values(): # test A
		core_pos = list(n for n, key in enumerate(keys) if key in core)
		if not core_pos: continue
		for key in keys[core_pos[0]+1:core_pos[-1]]:
			if classes[key] is None: classes[key] = ss.passenger

	no_service = set(conf.no_service_types)
	for visits in trip_visits.values(): # test B
		for key, st in visits:
			if classes[key] is not None: continue
			if st.pickup_type in no_service or st.drop_off_type in no_service:
				classes[key] = ss.tail

	propagate_tails(classes, trip_keys) # test C
	for key, cls in classes.items():
		if cls is None: classes[key] = ss.passenger
	return classes


def build_route_profile( route_key, direction,
		trips, stop_times_by_trip, stops_by_id, conf=None, sequences=None ):
	'''Build RouteProfile for trips with specified direction_id.
		Trips for other directions are ignored, ones without stop-times are skipped.'''
	conf = conf or TopologyConf()
	if sequences is None: sequences = pt.StopSequences(stop_times_by_trip)
	profile = t.internal.RouteProfile(route_key, direction)

	trip_sts = dict()
	for trip in trips:
		if trip.direction_id != direction: continue
		if not sequences.for_trip(trip): continue
		trip_sts[trip.id] = sorted(stop_times_by_trip[trip.id], key=op.attrgetter('seq'))
	if not trip_sts:
		log.debug('[{}/{}] No trips with stop-times for profile', route_key, direction)
		return profile

	station_map = merge_stations(
		list(list(st.stop_id for st in sts) for sts in trip_sts.values()), stops_by_id )
	trip_keys, stations = dict(), profile.stations
	for trip_id, sts in trip_sts.items():
		station_ids = list(station_map[st.stop_id] for st in sts)
		keys = trip_keys[trip_id] = station_visit_keys(station_ids)
		profile.trip_visits[trip_id] = list(zip(keys, sts))
		for key, station_id, st in zip(keys, station_ids, sts):
			if key not in stations:
				stations[key] = _station(key, station_id, st.stop_id, stops_by_id)
			stations[key].stop_ids.add(st.stop_id)

	profile.trip_count = len(trip_sts)
	profile.edges = edge_frequencies(trip_keys)
	core = core_stations(profile.edges, conf.core_threshold)
	profile.core, profile.reference_trip = core_order(core, trip_keys)
	profile.boundary = boundary_scores(profile.edges, core, stations)
	profile.classes = classify_stations(core, trip_keys, profile.trip_visits, conf)

	counts = Counter(profile.classes.values())
	log.debug( '[{}/{}] Profile: trips={} stations={} core={} passenger={} tail={}',
		route_key, direction, profile.trip_count, len(stations),
		*(counts[cls] for cls in t.internal.StationClass) )
	return profile

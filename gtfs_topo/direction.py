### Direction inference: binary direction label for each trip, per route

import itertools as it, operator as op, functools as ft
from collections import Counter, namedtuple
from concurrent import futures

from . import utils as u, types as t, geo, patterns as pt


log = u.get_logger('topo.direction')


@u.attr_struct(vals_to_attrs=True)
class DirectionConf:
	score_digits = 6 # scores equal after rounding to that many digits are a tie
	circular_split = 180.0 # bearings [0, split) - direction 0 (clockwise), rest - 1


RouteDirections = namedtuple('RouteDirections', 'route_id labels') # labels: [(trip, dir, method)]

def _trip_bearing(seq, stops_by_id, n1=0, n2=-1):
	if len(seq) < 2: return u.nan
	return geo.stop_bearing(stops_by_id.get(seq[n1]), stops_by_id.get(seq[n2]))

def _label_circular(trip, seq, stops_by_id, conf):
	# Bearing from first to second stop splits loops into cw/ccw halves
	bearing = _trip_bearing(seq, stops_by_id, 0, 1)
	if u.is_nan(bearing): return 0, t.public.DirectionMethod.fallback
	return int(bearing >= conf.circular_split), t.public.DirectionMethod.circular

def _reference_label(trips, seqs, seq_fwd, seq_rev):
	'Direction for the forward reference, agreeing with any preset labels on reference trips.'
	votes = Counter()
	for trip in trips:
		if trip.direction_id is None: continue
		seq = seqs.get(trip.id)
		if seq == seq_fwd: votes[trip.direction_id] += 1
		elif seq == seq_rev: votes[1 - trip.direction_id] += 1
	return 1 if votes[1] > votes[0] else 0

def infer_route_directions(route_id, trips, seqs, stops_by_id, conf=None, force=False):
	'''Infer direction labels for trips of one route.
		seqs is a {trip_id: stop_id_sequence} mapping for these trips.
		Returns RouteDirections without modifying any of the trips,
			with "preset" method for ones that already have direction set (unless force=True).'''
	conf, ms = conf or DirectionConf(), t.public.DirectionMethod
	labels, trips_todo = list(), list()
	for trip in trips:
		if trip.direction_id is not None and not force:
			labels.append((trip, trip.direction_id, ms.preset))
		elif not seqs.get(trip.id): labels.append((trip, 0, ms.fallback))
		else: trips_todo.append(trip)
	if not trips_todo: return RouteDirections(route_id, labels)

	route_seqs = list(filter(None, (seqs.get(trip.id) for trip in trips)))
	if all(map(pt.is_circular, route_seqs)):
		for trip in trips_todo:
			labels.append((trip,) + _label_circular(trip, seqs[trip.id], stops_by_id, conf))
		return RouteDirections(route_id, labels)

	(seq_fwd, seq_fwd_count), = pt.pattern_counts(route_seqs).most_common(1)
	seq_rev = tuple(reversed(seq_fwd))
	dir_fwd = _reference_label(trips, seqs, seq_fwd, seq_rev) if not force else 0
	dir_rev = 1 - dir_fwd
	bearing_fwd, bearing_rev = (_trip_bearing(seq, stops_by_id) for seq in [seq_fwd, seq_rev])
	log.debug( '[{}] Reference pattern (trips={}, stops={}): {} ... {}',
		route_id, seq_fwd_count, len(seq_fwd), seq_fwd[0], seq_fwd[-1] )

	for trip in trips_todo:
		seq = seqs[trip.id]
		if seq == seq_fwd:
			labels.append((trip, dir_fwd, ms.exact))
			continue
		if seq == seq_rev:
			labels.append((trip, dir_rev, ms.exact))
			continue

		score_fwd, score_rev = (
			round(pt.sequence_score(seq, seq_ref), conf.score_digits)
			for seq_ref in [seq_fwd, seq_rev] )
		if score_fwd != score_rev:
			labels.append((trip, dir_fwd if score_fwd > score_rev else dir_rev, ms.subsequence))
			continue

		bearing = _trip_bearing(seq, stops_by_id)
		delta_fwd, delta_rev = (geo.bearing_delta(bearing, b) for b in [bearing_fwd, bearing_rev])
		if u.is_nan(delta_fwd) or u.is_nan(delta_rev):
			labels.append((trip, 0, ms.fallback))
			continue
		labels.append((trip, dir_rev if delta_rev < delta_fwd else dir_fwd, ms.bearing))

	return RouteDirections(route_id, labels)


def infer_directions( trips, stop_times_by_trip,
		stops_by_id, conf=None, force=False, sequences=None, workers=None ):
	'''Assign direction_id to all trips that don't have it (or all of them, if force=True).
		Trips are grouped and processed independently per route_id,
			which can be done in a thread pool with workers > 1.
		Returns (trips, DirectionStats), where trips are the same (modified) objects.'''
	conf = conf or DirectionConf()
	if sequences is None: sequences = pt.StopSequences(stop_times_by_trip)
	stats = t.public.DirectionStats(diagnostics=sequences.diagnostics)

	trips, route_trips = list(trips), dict()
	for trip in trips: route_trips.setdefault(trip.route_id, list()).append(trip)
	tasks = list( (route_id, rt, dict((trip.id, sequences.for_trip(trip)) for trip in rt))
		for route_id, rt in route_trips.items() )

	infer_func = ft.partial(infer_route_directions,
		stops_by_id=stops_by_id, conf=conf, force=force)
	if workers and workers > 1 and len(tasks) > 1:
		with futures.ThreadPoolExecutor(workers) as ex:
			results = list(ex.map(lambda task: infer_func(*task), tasks))
	else: results = list(infer_func(*task) for task in tasks)

	for result in results:
		for trip, direction, method in result.labels:
			trip.direction_id = direction
			stats.add(trip.id, method)

	log.debug( 'Inferred directions for trips={:,} routes={:,}: {}', len(trips),
		len(route_trips), ' '.join('{}={}'.format(k, v) for k, v in stats.as_dict().items()) )
	return trips, stats

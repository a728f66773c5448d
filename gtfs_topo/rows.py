### Canonical row list: stable, date-independent row order for a route profile

import itertools as it, operator as op, functools as ft
from collections import defaultdict
import statistics

from . import utils as u, types as t


log = u.get_logger('topo.rows')


def segment_positions(keys, core_idx):
	'''Yield (key, segment, position) for non-core stations on one trip.
		Segment is -1 before first core station, n - after core[n] (up to the next one),
			position is normalized to [0, 1] within segment bounds on this trip.'''
	core_pos = list((n, core_idx[key]) for n, key in enumerate(keys) if key in core_idx)
	last = len(keys) - 1
	for n, key in enumerate(keys):
		if key in core_idx: continue
		prev = u.max((cp for cp in core_pos if cp[0] < n), default=None)
		succ = u.min((cp for cp in core_pos if cp[0] > n), default=None)
		if prev:
			segment, start = prev[1], prev[0]
			end = succ[0] if succ else last
		elif succ: segment, start, end = -1, 0, succ[0]
		else: # no core stations on this trip at all
			segment, start, end = len(core_idx) - 1, 0, last
		yield key, segment, (n - start) / (end - start) if end > start else 0.0

def build_canonical_rows(profile):
	'''Build CanonicalRowList from RouteProfile:
			pre-core branches, core[0], branches after it, core[1], ..., post-core branches.
		Branch stations within segment are ranked by median normalized
			position across trips, then station name, then key.'''
	core_idx = dict((key, n) for n, key in enumerate(profile.core))
	observed = defaultdict(ft.partial(defaultdict, list)) # {key: {segment: [pos, ...]}}
	for visits in profile.trip_visits.values():
		keys = list(map(op.itemgetter(0), visits))
		for key, segment, pos in segment_positions(keys, core_idx):
			observed[key][segment].append(pos)

	segments = defaultdict(list) # {segment: [(median, name, key), ...]}
	for key, seg_pos in observed.items():
		segment, pos_list = max( seg_pos.items(),
			key=lambda seg_pos: (len(seg_pos[1]), -seg_pos[0]) )
		station = profile.stations[key]
		segments[segment].append((statistics.median(pos_list), station.name or '', key))

	rows, ss = list(), t.internal.StationClass
	for segment in range(-1, len(profile.core)):
		if segment >= 0:
			key = profile.core[segment]
			rows.append(t.internal.Row(key, profile.stations[key], ss.core, segment))
		for median, name, key in sorted(segments.get(segment, list())):
			rows.append(t.internal.Row( key,
				profile.stations[key], profile.classes.get(key, ss.passenger), segment ))

	row_list = t.internal.CanonicalRowList(profile.route_key, profile.direction, rows)
	log.debug('[{}/{}] Canonical rows ({}): {}', profile.route_key,
		profile.direction, len(row_list), ' '.join(row_list.keys))
	return row_list

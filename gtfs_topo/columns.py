### Column (trip) ordering for timetable display, via bounded adjacent-swap voting

import itertools as it, operator as op, functools as ft

from . import utils as u


log = u.get_logger('topo.columns')


@u.attr_struct(vals_to_attrs=True)
class ColumnConf:
	max_passes = 8
	margin_minutes = 2 # time differences up to that are considered jitter
	vote_threshold = 4 # rows voting for a swap needed to swap adjacent trips


def row_time(row_mapping, row_key):
	st = row_mapping.get(row_key)
	return st.time if st is not None else None

def reference_time(row_mapping, rows):
	'Time of the trip at the first of the rows (canonical order) that it serves.'
	for row_key in rows:
		time = row_time(row_mapping, row_key)
		if time is not None: return time
	return u.inf

def reference_order(trip_ids, row_mappings, rows):
	'Initial order for order_columns() - stable sort by reference_time().'
	return sorted(trip_ids, key=lambda trip_id:
		reference_time(row_mappings.get(trip_id, dict()), rows))

def swap_votes(mapping_l, mapping_r, rows, margin):
	'Number of rows where left trip is later than the right one by more than margin.'
	votes = 0
	for row_key in rows:
		time_l, time_r = row_time(mapping_l, row_key), row_time(mapping_r, row_key)
		if time_l is None or time_r is None: continue
		if time_l - time_r > margin: votes += 1
	return votes

def order_columns(trip_ids, row_mappings, visible_rows, conf=None, core_rows=None):
	'''Order trips (columns) for display, starting from trip_ids order.
		Service trips (serving any visible core row) are ordered by up to
			conf.max_passes bubble-style passes over adjacent pairs, swapping pairs where
			enough visible rows vote for it, and are followed by remaining (depot) trips,
			ordered by their first core-row time only.
		row_mappings: {trip_id: {row_key: StopTime}}.
		visible_rows: visible passenger row keys, in canonical order.
		core_rows: core row keys, all visible rows are considered to be core if None.'''
	conf = conf or ColumnConf()
	visible_rows = list(visible_rows)
	if core_rows is None: core_rows = visible_rows
	core_rows = list(core_rows)
	core_visible = set(core_rows).intersection(visible_rows)
	mapping = lambda trip_id: row_mappings.get(trip_id, dict())

	service, depot = list(), list()
	for trip_id in trip_ids:
		serves_core = any(row_key in core_visible for row_key in mapping(trip_id))
		(service if serves_core else depot).append(trip_id)

	passes = swaps_total = 0
	for passes in range(1, conf.max_passes + 1):
		swaps = 0
		for n in range(len(service) - 1):
			trip_l, trip_r = service[n], service[n+1]
			votes = swap_votes(mapping(trip_l), mapping(trip_r), visible_rows, conf.margin_minutes)
			if votes >= conf.vote_threshold:
				service[n], service[n+1] = trip_r, trip_l
				swaps += 1
		swaps_total += swaps
		if not swaps: break

	def depot_key(trip_id):
		time = reference_time(mapping(trip_id), core_rows)
		if time == u.inf:
			time = u.min(( st.time for st in mapping(trip_id).values()
				if st.time is not None ), default=u.inf)
		return time
	depot.sort(key=depot_key)

	log.debug( 'Ordered columns: service={} depot={} passes={} swaps={}',
		len(service), len(depot), passes, swaps_total )
	return service + depot

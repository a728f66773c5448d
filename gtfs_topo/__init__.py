import itertools as it, operator as op, functools as ft
import time

from . import utils as u, types as t
from . import geo, patterns, direction, topology, rows, columns, cache, engine, gtfs, vis

from .geo import distance_meters, bearing_degrees, simplify_polyline
from .patterns import stop_sequence, is_circular, sequence_score
from .direction import infer_directions
from .topology import build_route_profile
from .rows import build_canonical_rows
from .columns import order_columns


def calc_timer(func, *args, log=u.get_logger('topo.timer'), timer_name=None, **kws):
	if not timer_name:
		func_base = func if not isinstance(func, ft.partial) else func.func
		timer_name = '.'.join([func_base.__module__.strip('__'), func_base.__qualname__])
	log.debug('[{}] Starting...', timer_name)
	td = time.monotonic()
	data = func(*args, **kws)
	td = time.monotonic() - td
	log.debug('[{}] Finished in: {:.1f}s', timer_name, td)
	return data


def init_gtfs_engine(gtfs_dir, conf=None, conf_engine=None, timer_func=None):
	'Load GTFS directory and return (feed, engine) tuple, with trip directions inferred.'
	feed_func, engine_func = gtfs.parse_feed,\
		ft.partial(engine.TimetableEngine, conf=conf_engine, timer_func=timer_func)
	if timer_func:
		feed_func, engine_func = (
			ft.partial(timer_func, func) for func in [feed_func, engine_func] )
	feed = feed_func(gtfs_dir, conf)
	return feed, engine_func(feed)

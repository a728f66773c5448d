import time

from . import utils as u


class CacheCondition(Exception): pass
class CacheMissing(CacheCondition): pass

class SelectionCache:
	'''In-memory cache for per-selection results, stored
			under hashable compound keys (e.g. ProfileKey/ColumnKey tuples) for each kind.
		Entries are only dropped wholesale per kind, on explicit selection-change
			events (see selection_changed), never updated partially or expired otherwise.'''

	kinds = 'profile', 'rows', 'columns'

	# Which kinds of entries are governed by which selection fields
	invalidation_map = dict(
		route_key=('profile', 'rows', 'columns'),
		direction=('profile', 'rows', 'columns'),
		date=('columns',),
		show_all_trips=('columns',) )

	def __init__(self):
		self.entries = dict((kind, dict()) for kind in self.kinds)
		self.log = u.get_logger('topo.cache')

	def get(self, kind, key):
		try: return self.entries[kind][key]
		except KeyError: raise CacheMissing(kind, key) from None

	def run(self, kind, key, func, *args, **kws):
		'Return cached result for kind/key, or run func(*args, **kws) and store it there.'
		try: return self.get(kind, key)
		except CacheMissing: pass
		self.log.debug('[{}] Starting: {}', kind, key)
		func_td = time.monotonic()
		data = self.entries[kind][key] = func(*args, **kws)
		func_td = time.monotonic() - func_td
		self.log.debug('[{}] Finished in: {:.1f}s', kind, func_td)
		return data

	def invalidate(self, *kinds):
		for kind in kinds or self.kinds:
			if self.entries[kind]: self.log.debug('[{}] Invalidated cache', kind)
			self.entries[kind].clear()

	def selection_changed(self, *fields):
		'Handle selection-change event for specified Selection fields.'
		kinds = set()
		for k in fields: kinds.update(self.invalidation_map[k])
		if kinds: self.invalidate(*(kind for kind in self.kinds if kind in kinds))
		return kinds

	def __contains__(self, kind_key):
		kind, key = kind_key
		return key in self.entries[kind]
	def __len__(self): return sum(map(len, self.entries.values()))

import itertools as it, operator as op, functools as ft
from pathlib import Path
import unittest

from . import _common as c


class DirectionTests(unittest.TestCase):

	@classmethod
	def setUpClass(cls):
		cls.data = c.load_test_data(Path(__file__).parent, Path(__file__).stem, 'feeds')

	def infer(self, name, **infer_kws):
		feed = c.feed_from_data(self.data[name])
		trips, stats = c.topo.infer_directions(
			feed.trips.values(), feed.stop_times, feed.stops, **infer_kws )
		return feed, stats

	def labels(self, feed):
		return dict((trip.id, trip.direction_id) for trip in feed.trips.values())

	def methods(self, stats):
		return dict((trip_id, m.value) for trip_id, m in stats.methods.items())


	def test_linear(self):
		feed, stats = self.infer('linear')
		self.assertEqual(self.labels(feed), {
			'f1': 0, 'f2': 0, 'f3': 0, 'r1': 1, 'r2': 1, 'sub': 0, 'branch': 0,
			'tie-west': 1, 'tie-nocoords': 0, 'empty': 0 })
		self.assertEqual(self.methods(stats), {
			'f1': 'exact', 'f2': 'exact', 'f3': 'exact', 'r1': 'exact', 'r2': 'exact',
			'sub': 'subsequence', 'branch': 'subsequence',
			'tie-west': 'bearing', 'tie-nocoords': 'fallback', 'empty': 'fallback' })
		self.assertEqual( stats.as_dict(), dict( exact=5,
			subsequence=2, circular=0, bearing=1, fallback=2, preset=0 ) )
		self.assertEqual(stats.exact, 5)
		self.assertEqual(len(stats.diagnostics), 0)

	def test_every_trip_labeled(self):
		for name in 'linear', 'preset', 'preset-tie', 'multi', 'circular', 'dups':
			feed, stats = self.infer(name)
			for trip in feed.trips.values(): self.assertIn(trip.direction_id, [0, 1], trip)
			self.assertEqual(sum(stats.as_dict().values()), len(feed.trips))

	def test_idempotent(self):
		feed, stats = self.infer('linear')
		labels = self.labels(feed)
		trips, stats = c.topo.infer_directions(feed.trips.values(), feed.stop_times, feed.stops)
		self.assertEqual(self.labels(feed), labels)
		self.assertEqual(stats.preset, len(feed.trips))

	def test_force(self):
		feed, stats = self.infer('linear')
		feed.trips['f1'].direction_id = 1
		feed.trips['r1'].direction_id = 0
		trips, stats = c.topo.infer_directions(
			feed.trips.values(), feed.stop_times, feed.stops, force=True )
		self.assertEqual(feed.trips['f1'].direction_id, 0)
		self.assertEqual(feed.trips['r1'].direction_id, 1)
		self.assertEqual(stats.preset, 0)

	def test_preset_orientation(self):
		feed, stats = self.infer('preset')
		self.assertEqual(self.labels(feed), dict(f1=1, f2=1, r1=0))
		self.assertEqual(self.methods(stats), dict(f1='preset', f2='exact', r1='exact'))

	def test_preset_orientation_fallback(self):
		feed, stats = self.infer('preset-tie')
		self.assertEqual(self.labels(feed), dict(f1=1, f2=1, r1=0, nc=0))
		self.assertEqual(self.methods(stats)['nc'], 'fallback')

	def test_trip_order_independence(self):
		feed, stats = self.infer('linear')
		data = self.data.linear
		trips_rev = c.dmap(list(reversed(list(data.trips.items()))))
		feed_rev = c.feed_from_data(c.dmap(dict(stops=data.stops, trips=trips_rev)))
		self.assertEqual(list(feed_rev.trips)[0], 'empty')
		c.topo.infer_directions(feed_rev.trips.values(), feed_rev.stop_times, feed_rev.stops)
		for trip_id, m in stats.methods.items():
			if m is not c.topo.t.public.DirectionMethod.exact: continue
			self.assertEqual(feed.trips[trip_id].direction_id, feed_rev.trips[trip_id].direction_id)

	def test_routes_independent(self):
		results = list()
		for workers in None, 3:
			feed, stats = self.infer('multi', workers=workers)
			results.append(self.labels(feed))
		self.assertEqual(results[0], results[1])
		self.assertEqual(results[0], dict(a1=0, a2=0, a3=1, b1=0, b2=0, b3=1, c1=0))

	def test_circular(self):
		feed, stats = self.infer('circular')
		self.assertEqual(self.labels(feed), dict(cw=0, cw2=0, ccw=1, lost=0))
		self.assertEqual(self.methods(stats), dict(
			cw='circular', cw2='circular', ccw='circular', lost='fallback' ))

	def test_duplicate_sequence(self):
		feed, stats = self.infer('dups')
		self.assertEqual(self.labels(feed), dict(d1=0, d2=0))
		diags = stats.diagnostics.for_route('r1')
		self.assertEqual(len(diags), 1)
		self.assertIs(diags[0].kind, c.topo.t.public.DiagnosticKind.duplicate_sequence)

import itertools as it, operator as op, functools as ft
import unittest, io, datetime

from . import _common as c

u = c.topo.u


class TimeTests(unittest.TestCase):

	def test_parse(self):
		self.assertEqual(u.time_parse('08:15'), 495)
		self.assertEqual(u.time_parse(' 08:15:30 '), 495.5)
		self.assertEqual(u.time_parse('26:00:00'), 1560)
		self.assertIsNone(u.time_parse(''))
		self.assertIsNone(u.time_parse(None))

	def test_format(self):
		self.assertEqual(u.time_format(495.5), '08:16')
		self.assertEqual(u.time_format(1560), '26:00')
		self.assertEqual(u.time_format(None), '-')

	def test_date(self):
		self.assertEqual(u.date_str('2024-01-06'), '20240106')
		self.assertEqual(u.date_str(datetime.date(2024, 1, 6)), '20240106')
		self.assertIsNone(u.date_str(None))


class ConfTests(unittest.TestCase):

	def test_update(self):
		conf = c.topo.engine.EngineConf()
		u.conf_update(conf, dict(workers=4, columns=dict(vote_threshold=3)))
		self.assertEqual(conf.workers, 4)
		self.assertEqual(conf.columns.vote_threshold, 3)
		self.assertEqual(conf.columns.max_passes, 8)
		self.assertEqual(conf.topology.core_threshold, 0.10)

	def test_update_unknown(self):
		conf = c.topo.engine.EngineConf()
		with self.assertRaisesRegex(ValueError, r'columns\.votes'):
			u.conf_update(conf, dict(columns=dict(votes=3)))
		with self.assertRaises(ValueError): u.conf_update(conf, dict(colour='red'))

	def test_confs_independent(self):
		conf1, conf2 = c.topo.engine.EngineConf(), c.topo.engine.EngineConf()
		conf1.direction.score_digits = 3
		self.assertEqual(conf2.direction.score_digits, 6)


class CalendarTests(unittest.TestCase):

	def test_active(self):
		cal = c.topo.t.public.Calendar()
		self.assertTrue(cal.active('any', '20240101'))
		cal.add_entry('wk', '20240101', '20240131', [1, 1, 1, 1, 1, 0, 0])
		cal.add_exception('wk', '2024-01-03', '2')
		cal.add_exception('hol', '20240106', c.topo.t.public.CalendarException.added)
		self.assertTrue(cal.active('wk', '20240102'))
		self.assertFalse(cal.active('wk', '20240103'))
		self.assertFalse(cal.active('wk', '20240106'))
		self.assertFalse(cal.active('wk', '20240201'))
		self.assertTrue(cal.active('hol', '20240106'))
		self.assertFalse(cal.active('hol', '20240107'))
		self.assertFalse(cal.active('unknown', '20240102'))
		self.assertTrue(cal.active(None, '20240102'))
		self.assertEqual(len(cal), 2)


class DotTests(unittest.TestCase):

	def test_profile_dot(self):
		feed = c.feed_from_data(c.dmap(
			trips=dict(t1='A B C', t2='A B C D/p', t3='A X C') ))
		for trip in feed.trips.values(): trip.direction_id = 0
		conf = c.topo.topology.TopologyConf(core_threshold=0.5)
		profile = c.topo.build_route_profile(
			'r1', 0, feed.trips.values(), feed.stop_times, feed.stops, conf )
		dst = io.StringIO()
		c.topo.vis.dot_for_route_profile(profile, dst, edge_min=0.5)
		dot = dst.getvalue()
		self.assertTrue(dot.startswith('digraph {'))
		self.assertTrue(dot.rstrip().endswith('}'))
		self.assertIn('rankdir=LR', dot)
		self.assertIn('"station-A" -> "station-B" [label="67%", style=bold]', dot)
		self.assertNotIn('"station-C" -> "station-D"', dot)
		self.assertIn('style=dashed', dot)

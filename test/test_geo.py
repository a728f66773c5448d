import itertools as it, operator as op, functools as ft
import unittest, math

from . import _common as c

geo = c.topo.geo


class DistanceTests(unittest.TestCase):

	def test_zero(self):
		self.assertEqual(geo.distance_meters(51.5, -0.12, 51.5, -0.12), 0)

	def test_symmetric(self):
		d1 = geo.distance_meters(51.5074, -0.1278, 48.8566, 2.3522)
		d2 = geo.distance_meters(48.8566, 2.3522, 51.5074, -0.1278)
		self.assertAlmostEqual(d1, d2, places=6)
		self.assertAlmostEqual(d1 / 1000, 343.5, delta=3) # london-paris

	def test_equator_degree(self):
		d = geo.distance_meters(0, 0, 1, 0)
		self.assertAlmostEqual(d, 2 * math.pi * geo.earth_radius_m / 360, places=3)
		self.assertAlmostEqual(d, geo.distance_meters(0, 0, 0, 1), places=3)

	def test_antipodes(self):
		d = geo.distance_meters(0, 0, 0, 180)
		self.assertAlmostEqual(d, math.pi * geo.earth_radius_m, places=3)


class BearingTests(unittest.TestCase):

	def test_cardinal(self):
		for (lat, lon), bearing in [
				((1, 0), 0), ((0, 1), 90), ((-1, 0), 180), ((0, -1), 270) ]:
			with self.subTest(lat=lat, lon=lon):
				self.assertAlmostEqual(geo.bearing_degrees(0, 0, lat, lon), bearing, places=6)

	def test_range(self):
		pts = list(it.product([-45.5, -0.1, 0, 10, 89], [-179.9, -30, 0, 0.5, 120]))
		for (lat1, lon1), (lat2, lon2) in it.permutations(pts, 2):
			b = geo.bearing_degrees(lat1, lon1, lat2, lon2)
			if lat1 == lat2 and lon1 == lon2: continue
			self.assertTrue(0 <= b < 360, (lat1, lon1, lat2, lon2, b))

	def test_coincident(self):
		self.assertTrue(math.isnan(geo.bearing_degrees(35.1, 139.2, 35.1, 139.2)))

	def test_delta(self):
		self.assertAlmostEqual(geo.bearing_delta(350, 10), 20)
		self.assertAlmostEqual(geo.bearing_delta(10, 350), 20)
		self.assertAlmostEqual(geo.bearing_delta(0, 180), 180)
		self.assertAlmostEqual(geo.bearing_delta(90, 90), 0)
		self.assertTrue(math.isnan(geo.bearing_delta(c.topo.u.nan, 90)))

	def test_stop_bearing(self):
		Stop = c.topo.t.public.Stop
		a, b, nc = Stop('a', lat=0, lon=0), Stop('b', lat=0, lon=0.01), Stop('nc')
		self.assertAlmostEqual(geo.stop_bearing(a, b), 90, places=6)
		self.assertAlmostEqual(geo.stop_bearing(b, a), 270, places=6)
		self.assertTrue(math.isnan(geo.stop_bearing(a, nc)))
		self.assertTrue(math.isnan(geo.stop_bearing(None, b)))


class SimplifyTests(unittest.TestCase):

	def test_collinear(self):
		pts = [(0, 0), (0, 1e-5), (0, 2e-5), (0, 1)]
		self.assertEqual(geo.simplify_polyline(pts, 1e-4), [(0, 0), (0, 1)])

	def test_zigzag_kept(self):
		pts = [(0, 0), (0.5, 1), (1, 0)]
		self.assertEqual(geo.simplify_polyline(pts, 0.1), pts)

	def test_partial(self):
		pts = [(0, 0), (0, 0.5), (0, 1), (1, 1), (1, 1.00001), (1, 2)]
		self.assertEqual(geo.simplify_polyline(pts, 0.01), [(0, 0), (0, 1), (1, 1), (1, 2)])

	def test_no_tolerance(self):
		pts = [(0, 0), (0, 1e-9), (0, 2e-9), (0, 1)]
		for tolerance in 0, -1:
			self.assertEqual(geo.simplify_polyline(pts, tolerance), pts)

	def test_short(self):
		self.assertEqual(geo.simplify_polyline([]), [])
		self.assertEqual(geo.simplify_polyline([(1, 2)]), [(1, 2)])
		self.assertEqual(geo.simplify_polyline(iter([(1, 2), (3, 4)])), [(1, 2), (3, 4)])

	def test_endpoints(self):
		pts = list((math.sin(n / 3), n / 10) for n in range(50))
		for tolerance in 0.001, 0.1, 10:
			res = geo.simplify_polyline(pts, tolerance)
			self.assertEqual(res[0], pts[0])
			self.assertEqual(res[-1], pts[-1])
			self.assertLessEqual(len(res), len(pts))
			self.assertEqual(res, sorted(res, key=pts.index))

### Geometry kernel: distances/bearings on a sphere and polyline simplification

import math

from . import utils as u


earth_radius_m = 6371008.8 # mean radius, WGS84 sphere approximation
simplify_tolerance_default = 0.0001 # degrees, ~11m


def distance_meters(lat1, lon1, lat2, lon2, math=math):
	'Great-circle distance (using Haversine Formula) between two points, in meters.'
	lat1, lon1, lat2, lon2 = (math.radians(float(v)) for v in [lat1, lon1, lat2, lon2])
	h = ( math.sin((lat2 - lat1)/2)**2
		+ math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1)/2)**2 )
	return earth_radius_m * 2 * math.asin(math.sqrt(min(1.0, h)))

def bearing_degrees(lat1, lon1, lat2, lon2, math=math):
	'''Initial bearing from point-1 to point-2 in [0, 360) degrees.
		Returns NaN for coincident points, where direction is undefined.'''
	if lat1 == lat2 and lon1 == lon2: return u.nan
	lat1, lon1, lat2, lon2 = (math.radians(float(v)) for v in [lat1, lon1, lat2, lon2])
	dlon = lon2 - lon1
	y = math.sin(dlon) * math.cos(lat2)
	x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
	return math.degrees(math.atan2(y, x)) % 360.0

def bearing_delta(a, b):
	'Circular distance between two bearings, in [0, 180]. NaN if either is undefined.'
	if u.is_nan(a) or u.is_nan(b): return u.nan
	d = abs(a - b) % 360.0
	return 360.0 - d if d > 180.0 else d

def stop_bearing(stop_a, stop_b):
	'Bearing between two Stop records, NaN if either is missing or has no coordinates.'
	if not (stop_a and stop_b): return u.nan
	coords = [stop_a.lat, stop_a.lon, stop_b.lat, stop_b.lon]
	if any(v is None for v in coords): return u.nan
	return bearing_degrees(*coords)


def _point_line_distance(pt, a, b):
	(x, y), (x1, y1), (x2, y2) = pt, a, b
	dx, dy = x2 - x1, y2 - y1
	if dx == dy == 0: return math.hypot(x - x1, y - y1)
	return abs(dy*x - dx*y + x2*y1 - y2*x1) / math.hypot(dx, dy)

def simplify_polyline(points, tolerance=simplify_tolerance_default):
	'''Douglas-Peucker simplification of a sequence of (lat, lon) or (x, y) points.
		Tolerance is in coordinate units (degrees for lat/lon).
		First/last points are always kept, zero or negative tolerance returns all points.'''
	points = list(points)
	if tolerance is None or tolerance <= 0 or len(points) < 3: return points
	keep, stack = {0, len(points) - 1}, [(0, len(points) - 1)]
	while stack:
		n1, n2 = stack.pop()
		if n2 - n1 < 2: continue
		d_max, n_max = -1, None
		for n in range(n1 + 1, n2):
			d = _point_line_distance(points[n], points[n1], points[n2])
			if d > d_max: d_max, n_max = d, n
		if d_max > tolerance:
			keep.add(n_max)
			stack.extend([(n1, n_max), (n_max, n2)])
	return list(points[n] for n in sorted(keep))

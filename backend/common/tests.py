from django.test import RequestFactory, SimpleTestCase
from rest_framework.exceptions import NotAuthenticated

from .exception_handler import api_exception_handler
from .exceptions import ConflictError, ResourceNotFound, ValidationFailed
from .utils import bounding_box, fixed_box, haversine_km, int_param, within_radius


class HaversineTests(SimpleTestCase):
	def test_same_point_is_zero(self):
		self.assertEqual(haversine_km(37.0, -122.0, 37.0, -122.0), 0.0)

	def test_one_degree_of_latitude(self):
		self.assertAlmostEqual(haversine_km(0, 0, 1, 0), 111.195, places=2)

	def test_symmetric(self):
		self.assertAlmostEqual(
			haversine_km(37.0, -122.0, 37.005, -122.003),
			haversine_km(37.005, -122.003, 37.0, -122.0)
		)


class WithinRadiusTests(SimpleTestCase):
	def _coords(self, item):
		return item['lat'], item['lng']

	def test_boundary_is_inclusive(self):
		edge = {'lat': 37.009, 'lng': -122.0}
		cutoff = haversine_km(37.0, -122.0, edge['lat'], edge['lng'])

		kept = within_radius(37.0, -122.0, [edge], cutoff, self._coords)

		self.assertEqual(len(kept), 1)
		self.assertEqual(kept[0][0], edge)

	def test_just_outside_is_dropped(self):
		# 0.009 degrees of latitude is ~1.0007 km
		item = {'lat': 37.009, 'lng': -122.0}
		self.assertEqual(within_radius(37.0, -122.0, [item], 1.0, self._coords), [])

	def test_missing_coordinates_are_skipped(self):
		items = [{'lat': None, 'lng': -122.0}, {'lat': 37.0, 'lng': -122.0}]

		kept = within_radius(37.0, -122.0, items, 1.0, self._coords)

		self.assertEqual([item for item, _ in kept], [items[1]])

	def test_preserves_input_order(self):
		items = [{'lat': 37.008, 'lng': -122.0}, {'lat': 37.001, 'lng': -122.0}]

		kept = within_radius(37.0, -122.0, items, 1.0, self._coords)

		self.assertEqual([item for item, _ in kept], items)


class BoxTests(SimpleTestCase):
	def test_fixed_box(self):
		self.assertEqual(fixed_box(10.0, 20.0, 0.5), (9.5, 10.5, 19.5, 20.5))

	def test_bounding_box_contains_radius(self):
		min_lat, max_lat, min_lng, max_lng = bounding_box(37.0, -122.0, 5)

		self.assertLess(min_lat, 37.0)
		self.assertGreater(max_lat, 37.0)
		# Points due north and due east at the radius must fall inside
		self.assertGreaterEqual(max_lat, 37.0 + 5 / 111.2)
		self.assertGreater(max_lng - (-122.0), max_lat - 37.0)
		self.assertLess(min_lng, -122.0)

	def test_point_just_inside_radius_due_north_is_in_box(self):
		edge_lat = 37.0 + 4.999 / 111.195
		self.assertLessEqual(haversine_km(37.0, -122.0, edge_lat, -122.0), 5)

		min_lat, max_lat, min_lng, max_lng = bounding_box(37.0, -122.0, 5)

		self.assertLessEqual(edge_lat, max_lat)
		self.assertGreaterEqual(37.0 - (edge_lat - 37.0), min_lat)

	def test_bounding_box_at_pole(self):
		min_lat, max_lat, min_lng, max_lng = bounding_box(90.0, 0.0, 5)

		self.assertEqual(max_lat, 90.0)
		self.assertEqual((min_lng, max_lng), (-180.0, 180.0))


class IntParamTests(SimpleTestCase):
	def test_default_and_parse(self):
		self.assertEqual(int_param({}, 'take', 50), 50)
		self.assertEqual(int_param({'take': '7'}, 'take', 50), 7)

	def test_rejects_garbage_and_negatives(self):
		with self.assertRaises(ValidationFailed):
			int_param({'take': 'many'}, 'take', 50)
		with self.assertRaises(ValidationFailed):
			int_param({'skip': '-1'}, 'skip', 0)


class ExceptionHandlerTests(SimpleTestCase):
	def setUp(self):
		self.context = {'view': None, 'request': RequestFactory().get('/')}

	def test_service_errors_map_to_status(self):
		for exc, expected in (
			(ValidationFailed('bad'), 400),
			(ResourceNotFound('gone'), 404),
			(ConflictError('dup'), 409),
		):
			response = api_exception_handler(exc, self.context)
			self.assertEqual(response.status_code, expected)
			self.assertEqual(response.data, {'error': exc.message})

	def test_drf_detail_becomes_error(self):
		response = api_exception_handler(NotAuthenticated(), self.context)

		self.assertEqual(response.status_code, 401)
		self.assertIn('error', response.data)
		self.assertNotIn('detail', response.data)

	def test_unexpected_errors_are_hidden(self):
		with self.assertLogs('common.exception_handler', level='ERROR'):
			response = api_exception_handler(RuntimeError('secret detail'), self.context)

		self.assertEqual(response.status_code, 500)
		self.assertEqual(response.data, {'error': 'Internal server error'})

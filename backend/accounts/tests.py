from django.test import TestCase
from rest_framework.test import APIClient

from friends.models import Friendship

from .models import User


class RegistrationTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	def test_register_returns_tokens(self):
		response = self.client.post('/api/register/', {
			'email': 'jane@example.com',
			'name': 'Jane',
			'password': 'secret1',
		}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertTrue(response.data['success'])
		self.assertEqual(response.data['user']['email'], 'jane@example.com')
		self.assertIn('access', response.data['tokens'])
		self.assertIn('refresh', response.data['tokens'])
		self.assertTrue(User.objects.get(email='jane@example.com').check_password('secret1'))

	def test_register_duplicate_email_conflicts(self):
		User.objects.create_user(email='jane@example.com', name='Jane', password='secret1')

		response = self.client.post('/api/register/', {
			'email': 'jane@example.com',
			'name': 'Other Jane',
			'password': 'secret2',
		}, format='json')

		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data['error'], 'Email already registered')

	def test_register_rejects_short_password(self):
		response = self.client.post('/api/register/', {
			'email': 'short@example.com',
			'name': 'Short',
			'password': '12345',
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'Invalid input')
		self.assertIn('password', response.data['details'])
		self.assertFalse(User.objects.filter(email='short@example.com').exists())

	def test_login_with_email(self):
		User.objects.create_user(email='jane@example.com', name='Jane', password='secret1')

		response = self.client.post('/api/auth/login/', {
			'email': 'jane@example.com',
			'password': 'secret1',
		}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['user']['name'], 'Jane')
		self.assertIn('access', response.data['tokens'])

	def test_login_ignores_email_case(self):
		self.client.post('/api/register/', {
			'email': 'Jane@Example.com',
			'name': 'Jane',
			'password': 'secret1',
		}, format='json')

		for typed in ('jane@example.com', 'JANE@EXAMPLE.COM', 'Jane@Example.com'):
			response = self.client.post('/api/auth/login/', {
				'email': typed,
				'password': 'secret1',
			}, format='json')
			self.assertEqual(response.status_code, 200, typed)

		self.assertEqual(User.objects.get().email, 'jane@example.com')

	def test_register_duplicate_email_ignores_case(self):
		User.objects.create_user(email='jane@example.com', name='Jane', password='secret1')

		response = self.client.post('/api/register/', {
			'email': 'JANE@example.com',
			'name': 'Jane again',
			'password': 'secret1',
		}, format='json')

		self.assertEqual(response.status_code, 409)

	def test_login_wrong_password(self):
		User.objects.create_user(email='jane@example.com', name='Jane', password='secret1')

		response = self.client.post('/api/auth/login/', {
			'email': 'jane@example.com',
			'password': 'wrong-one',
		}, format='json')

		self.assertEqual(response.status_code, 400)

	def test_protected_endpoint_requires_auth(self):
		response = self.client.get('/api/friends/')
		self.assertEqual(response.status_code, 401)
		self.assertIn('error', response.data)


class ProfileTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.user = User.objects.create_user(email='jane@example.com', name='Jane', password='secret1')
		self.client.force_authenticate(user=self.user)

	def test_update_profile_partially(self):
		response = self.client.put('/api/profile/', {'bio': 'Climber', 'radius_km': 3}, format='json')

		self.assertEqual(response.status_code, 200)
		self.user.refresh_from_db()
		self.assertEqual(self.user.bio, 'Climber')
		self.assertEqual(self.user.radius_km, 3.0)
		self.assertEqual(self.user.name, 'Jane')

	def test_radius_out_of_range(self):
		response = self.client.put('/api/profile/', {'radius_km': 80}, format='json')
		self.assertEqual(response.status_code, 400)

	def test_update_location(self):
		response = self.client.post('/api/profile/location/', {
			'latitude': 37.0,
			'longitude': -122.0,
		}, format='json')

		self.assertEqual(response.status_code, 200)
		self.user.refresh_from_db()
		self.assertEqual(self.user.current_latitude, 37.0)
		self.assertEqual(self.user.current_longitude, -122.0)

	def test_update_location_rejects_bad_latitude(self):
		response = self.client.post('/api/profile/location/', {
			'latitude': 91,
			'longitude': 0,
		}, format='json')
		self.assertEqual(response.status_code, 400)


class DirectoryTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.me = User.objects.create_user(
			email='me@example.com', name='Me', password='secret1',
			current_latitude=37.0, current_longitude=-122.0
		)
		self.close = User.objects.create_user(
			email='close@example.com', name='Close', password='secret1',
			current_latitude=37.01, current_longitude=-122.0
		)
		self.further = User.objects.create_user(
			email='further@example.com', name='Further', password='secret1',
			current_latitude=37.03, current_longitude=-122.0
		)
		self.far_away = User.objects.create_user(
			email='far@example.com', name='Far', password='secret1',
			current_latitude=37.2, current_longitude=-122.0
		)
		self.no_location = User.objects.create_user(
			email='ghost@example.com', name='Ghost', password='secret1'
		)
		self.client.force_authenticate(user=self.me)

	def test_nearby_users_sorted_by_distance(self):
		Friendship.objects.create(user=self.me, friend=self.further, status=Friendship.STATUS_PENDING)

		response = self.client.get('/api/users/nearby/', {'lat': 37.0, 'lng': -122.0, 'radius': 5})

		self.assertEqual(response.status_code, 200)
		ids = [entry['id'] for entry in response.data]
		self.assertEqual(ids, [self.close.id, self.further.id])
		self.assertLess(response.data[0]['distance'], response.data[1]['distance'])
		self.assertAlmostEqual(response.data[0]['distance'], 1.112, places=2)
		self.assertIsNone(response.data[0]['friendship_status'])
		self.assertEqual(response.data[1]['friendship_status'], 'PENDING')

	def test_nearby_includes_user_just_inside_radius(self):
		edge = User.objects.create_user(
			email='edge@example.com', name='Edge', password='secret1',
			current_latitude=37.0 + 4.998 / 111.195, current_longitude=-122.0
		)

		response = self.client.get('/api/users/nearby/', {'lat': 37.0, 'lng': -122.0, 'radius': 5})

		self.assertEqual(response.status_code, 200)
		by_id = {entry['id']: entry for entry in response.data}
		self.assertIn(edge.id, by_id)
		self.assertLessEqual(by_id[edge.id]['distance'], 5)

	def test_nearby_users_default_radius(self):
		response = self.client.get('/api/users/nearby/', {'lat': 37.0, 'lng': -122.0})

		self.assertEqual(response.status_code, 200)
		self.assertNotIn(self.far_away.id, [entry['id'] for entry in response.data])

	def test_nearby_users_radius_limits(self):
		response = self.client.get('/api/users/nearby/', {'lat': 37.0, 'lng': -122.0, 'radius': 100})
		self.assertEqual(response.status_code, 400)

	def test_nearby_users_requires_coordinates(self):
		response = self.client.get('/api/users/nearby/', {'lat': 37.0})
		self.assertEqual(response.status_code, 400)

	def test_search_by_name_or_email(self):
		Friendship.objects.create(user=self.close, friend=self.me, status=Friendship.STATUS_ACCEPTED)

		response = self.client.get('/api/users/search/', {'q': 'clo'})

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 1)
		self.assertEqual(response.data[0]['id'], self.close.id)
		self.assertTrue(response.data[0]['is_friend'])

	def test_search_ignores_short_queries(self):
		response = self.client.get('/api/users/search/', {'q': 'c'})

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, [])

	def test_user_list_excludes_caller(self):
		Friendship.objects.create(user=self.me, friend=self.close, status=Friendship.STATUS_PENDING)

		response = self.client.get('/api/users/')

		self.assertEqual(response.status_code, 200)
		by_id = {entry['id']: entry for entry in response.data}
		self.assertNotIn(self.me.id, by_id)
		self.assertEqual(len(by_id), 4)
		self.assertFalse(by_id[self.close.id]['is_friend'])
		self.assertEqual(by_id[self.close.id]['friendship_status'], 'PENDING')

	def test_user_detail(self):
		response = self.client.get('/api/users/%d/' % self.close.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['name'], 'Close')
		self.assertIn('Cache-Control', response)

	def test_user_detail_missing(self):
		response = self.client.get('/api/users/999999/')
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['error'], 'Not found')

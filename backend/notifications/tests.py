import json
import threading
import time
from datetime import timedelta
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from pywebpush import WebPushException
from rest_framework.test import APIClient

from accounts.models import User
from posts.models import Post
from services.push import PushSender, get_push_sender, shutdown_push_sender

from .models import PushSubscription
from .views import PushSendView


class NearbyPollTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		author = User.objects.create_user(email='a@example.com', name='Alice', password='secret1')
		self.recent = Post.objects.create(author=author, content='Frisbee now', latitude=37.0, longitude=-122.0)
		self.stale = Post.objects.create(author=author, content='Yesterday', latitude=37.0, longitude=-122.0)
		Post.objects.filter(id=self.stale.id).update(created_at=timezone.now() - timedelta(hours=2))
		Post.objects.create(author=author, content='Far away', latitude=38.0, longitude=-122.0)

	def test_default_window_is_last_hour(self):
		response = self.client.get('/api/notifications/', {'lat': 37.002, 'lng': -122.0})

		self.assertEqual(response.status_code, 200)
		self.assertEqual([p['id'] for p in response.data['posts']], [self.recent.id])
		self.assertEqual(
			set(response.data['posts'][0].keys()),
			{'id', 'content', 'latitude', 'longitude', 'created_at'}
		)

	def test_last_checked_moves_window(self):
		last_checked = (timezone.now() - timedelta(hours=3)).isoformat()
		response = self.client.get('/api/notifications/', {
			'lat': 37.0, 'lng': -122.0, 'last_checked': last_checked
		})
		self.assertEqual([p['id'] for p in response.data['posts']], [self.recent.id, self.stale.id])

		last_checked = (timezone.now() + timedelta(minutes=1)).isoformat()
		response = self.client.get('/api/notifications/', {
			'lat': 37.0, 'lng': -122.0, 'last_checked': last_checked
		})
		self.assertEqual(response.data['posts'], [])

	def test_invalid_coordinates(self):
		response = self.client.get('/api/notifications/', {'lat': 'north', 'lng': -122.0})
		self.assertEqual(response.status_code, 400)


class PushSubscribeTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')
		self.payload = {
			'endpoint': 'https://push.example.com/device/1',
			'keys': {'p256dh': 'key-1', 'auth': 'auth-1'},
		}

	def test_subscribe_upserts_by_endpoint(self):
		self.client.force_authenticate(user=self.alice)
		response = self.client.post('/api/notifications/subscribe/', self.payload, format='json')
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, {'success': True})

		# Same device, now signed in as Bob with rotated keys
		self.client.force_authenticate(user=self.bob)
		self.payload['keys'] = {'p256dh': 'key-2', 'auth': 'auth-2'}
		self.client.post('/api/notifications/subscribe/', self.payload, format='json')

		subscription = PushSubscription.objects.get()
		self.assertEqual(subscription.user, self.bob)
		self.assertEqual(subscription.p256dh, 'key-2')

	def test_subscribe_requires_keys(self):
		self.client.force_authenticate(user=self.alice)
		response = self.client.post('/api/notifications/subscribe/', {
			'endpoint': 'https://push.example.com/device/1'
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(PushSubscription.objects.exists())


class PushSenderTests(TestCase):
	def setUp(self):
		self.user = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		self.live = PushSubscription.objects.create(
			user=self.user, endpoint='https://push.example.com/live', p256dh='k1', auth='a1'
		)
		self.gone = PushSubscription.objects.create(
			user=self.user, endpoint='https://push.example.com/gone', p256dh='k2', auth='a2'
		)
		self.broken = PushSubscription.objects.create(
			user=self.user, endpoint='https://push.example.com/broken', p256dh='k3', auth='a3'
		)
		self.sender = PushSender(vapid_private_key='test-key', vapid_claims_email='mailto:ops@example.com', max_workers=2)

	def tearDown(self):
		self.sender.shutdown()

	@staticmethod
	def _fake_webpush(subscription_info, data, vapid_private_key, vapid_claims):
		endpoint = subscription_info['endpoint']
		if endpoint.endswith('/gone'):
			raise WebPushException('Push failed: 410 Gone', response=MagicMock(status_code=410))
		if endpoint.endswith('/broken'):
			raise WebPushException('Push failed: 500', response=MagicMock(status_code=500))
		return MagicMock(status_code=201)

	@patch('services.push.sender.webpush')
	def test_fan_out_removes_gone_subscriptions(self, mock_webpush):
		mock_webpush.side_effect = self._fake_webpush

		result = self.sender.send_to_user(self.user.id, 'Hello', 'New post nearby', '/posts')

		self.assertEqual(result.attempted, 3)
		self.assertEqual(result.delivered, 1)
		self.assertEqual(result.failed, 1)
		self.assertEqual(result.removed, ['https://push.example.com/gone'])
		self.assertEqual(
			set(PushSubscription.objects.values_list('endpoint', flat=True)),
			{'https://push.example.com/live', 'https://push.example.com/broken'}
		)

		payload = json.loads(mock_webpush.call_args.kwargs['data'])
		self.assertEqual(payload, {'title': 'Hello', 'body': 'New post nearby', 'url': '/posts'})

	@patch('services.push.sender.webpush')
	def test_unconfigured_sender_skips_delivery(self, mock_webpush):
		sender = PushSender(vapid_private_key='', vapid_claims_email='mailto:ops@example.com', max_workers=1)
		try:
			result = sender.send_to_user(self.user.id, 'Hello', 'Body')
		finally:
			sender.shutdown()

		mock_webpush.assert_not_called()
		self.assertEqual(result.delivered, 0)
		self.assertEqual(PushSubscription.objects.count(), 3)

	@patch('services.push.sender.webpush')
	def test_send_endpoint(self, mock_webpush):
		mock_webpush.side_effect = self._fake_webpush
		client = APIClient()
		client.force_authenticate(user=self.user)

		with patch.object(PushSendView, 'push_sender', self.sender):
			response = client.post('/api/notifications/send/', {
				'user_id': self.user.id, 'title': 'Hello', 'body': 'Hi there'
			}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, {'success': True, 'count': 3, 'delivered': 1, 'removed': 1})

	def test_send_endpoint_without_subscriptions(self):
		other = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')
		client = APIClient()
		client.force_authenticate(user=self.user)

		with patch.object(PushSendView, 'push_sender', self.sender):
			response = client.post('/api/notifications/send/', {
				'user_id': other.id, 'title': 'Hello', 'body': 'Hi there'
			}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, {'message': 'No subscriptions found'})


class PushSenderSingletonTests(SimpleTestCase):
	def tearDown(self):
		shutdown_push_sender()

	@patch('services.push.sender.PushSender')
	def test_concurrent_first_use_builds_one_sender(self, mock_sender_class):
		def slow_build(**kwargs):
			time.sleep(0.05)
			return MagicMock()
		mock_sender_class.side_effect = slow_build
		shutdown_push_sender()

		barrier = threading.Barrier(6)
		senders = []

		def first_use():
			barrier.wait()
			senders.append(get_push_sender())

		threads = [threading.Thread(target=first_use) for _ in range(6)]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()

		self.assertEqual(mock_sender_class.call_count, 1)
		self.assertEqual(len({id(sender) for sender in senders}), 1)

from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from common.exceptions import DependencyFailure
from services.messaging import aggregate_conversations, list_conversations

from .models import Message
from .tasks import deliver_follow_up_message


class SendMessageTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')
		self.client.force_authenticate(user=self.alice)

	def test_send_text(self):
		response = self.client.post('/api/messages/', {
			'receiver_id': self.bob.id, 'content': 'Hi Bob'
		}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['type'], 'text')
		self.assertEqual(response.data['sender']['name'], 'Alice')
		self.assertEqual(Message.objects.get().receiver, self.bob)

	def test_send_location(self):
		response = self.client.post('/api/messages/', {
			'receiver_id': self.bob.id,
			'content': 'Meet here',
			'type': 'location',
			'latitude': 37.0,
			'longitude': -122.0,
		}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['latitude'], 37.0)

	def test_location_needs_coordinates(self):
		response = self.client.post('/api/messages/', {
			'receiver_id': self.bob.id, 'content': 'Meet here', 'type': 'location'
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(Message.objects.exists())

	def test_image_needs_data_url(self):
		response = self.client.post('/api/messages/', {
			'receiver_id': self.bob.id,
			'content': 'Look',
			'type': 'image',
			'image_url': 'https://example.com/cat.png',
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'Invalid image data')

	def test_rejects_unknown_type_and_empty_content(self):
		response = self.client.post('/api/messages/', {
			'receiver_id': self.bob.id, 'content': 'x', 'type': 'video'
		}, format='json')
		self.assertEqual(response.status_code, 400)

		response = self.client.post('/api/messages/', {
			'receiver_id': self.bob.id, 'content': ''
		}, format='json')
		self.assertEqual(response.status_code, 400)

	def test_unknown_receiver(self):
		response = self.client.post('/api/messages/', {
			'receiver_id': 999999, 'content': 'Hello?'
		}, format='json')

		self.assertEqual(response.status_code, 404)


class ConversationHistoryTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')
		self.carol = User.objects.create_user(email='carol@example.com', name='Carol', password='secret1')

		now = timezone.now()
		self.messages = []
		for minutes_ago, sender, receiver in ((30, self.alice, self.bob), (20, self.bob, self.alice), (10, self.alice, self.bob)):
			message = Message.objects.create(sender=sender, receiver=receiver, content='m%d' % minutes_ago)
			Message.objects.filter(id=message.id).update(created_at=now - timedelta(minutes=minutes_ago))
			self.messages.append(message)
		Message.objects.create(sender=self.carol, receiver=self.alice, content='not in this thread')

		self.client.force_authenticate(user=self.alice)

	def test_history_newest_first(self):
		response = self.client.get('/api/messages/%d/' % self.bob.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual([m['content'] for m in response.data], ['m10', 'm20', 'm30'])

	def test_take_and_skip(self):
		response = self.client.get('/api/messages/%d/' % self.bob.id, {'take': 1, 'skip': 1})

		self.assertEqual([m['content'] for m in response.data], ['m20'])

	def test_take_is_capped(self):
		response = self.client.get('/api/messages/%d/' % self.bob.id, {'take': 500})

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 3)

	def test_since_returns_only_newer(self):
		since = (timezone.now() - timedelta(minutes=25)).isoformat()

		response = self.client.get('/api/messages/%d/' % self.bob.id, {'since': since})

		self.assertEqual([m['content'] for m in response.data], ['m10', 'm20'])

	def test_bad_paging_values(self):
		response = self.client.get('/api/messages/%d/' % self.bob.id, {'take': 'lots'})
		self.assertEqual(response.status_code, 400)

		response = self.client.get('/api/messages/%d/' % self.bob.id, {'since': 'yesterday'})
		self.assertEqual(response.status_code, 400)


class ConversationListTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')
		self.carol = User.objects.create_user(email='carol@example.com', name='Carol', password='secret1')
		self.client.force_authenticate(user=self.alice)

	def _message(self, sender, receiver, minutes_ago, **fields):
		fields.setdefault('content', 'hello')
		message = Message.objects.create(sender=sender, receiver=receiver, **fields)
		Message.objects.filter(id=message.id).update(
			created_at=timezone.now() - timedelta(minutes=minutes_ago)
		)
		return message

	def test_one_row_per_counterpart_latest_first(self):
		self._message(self.alice, self.bob, 50, content='first to bob')
		self._message(self.carol, self.alice, 40, content='carol says hi')
		self._message(self.bob, self.alice, 30, type='image', image_url='data:image/png;base64,AAAA')
		self._message(self.alice, self.carol, 5, type='location', latitude=37.0, longitude=-122.0)

		response = self.client.get('/api/messages/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual([row['user']['id'] for row in response.data], [self.carol.id, self.bob.id])
		self.assertEqual(response.data[0]['last_message'], '\U0001F4CD Location')
		self.assertEqual(response.data[0]['type'], 'location')
		self.assertEqual(response.data[1]['last_message'], '\U0001F4F7 Photo')

	def test_text_image_location_thread_collapses_to_latest(self):
		self._message(self.alice, self.bob, 3, content='On my way')
		self._message(self.bob, self.alice, 2, content='pic', type='image', image_url='data:image/png;base64,AAAA')
		location = self._message(self.alice, self.bob, 1, content='here', type='location', latitude=37.0, longitude=-122.0)
		location.refresh_from_db()

		conversations = list_conversations(self.alice)

		self.assertEqual(len(conversations), 1)
		self.assertEqual(conversations[0].user, self.bob)
		self.assertEqual(conversations[0].last_message, '\U0001F4CD Location')
		self.assertEqual(conversations[0].type, 'location')
		self.assertEqual(conversations[0].timestamp, location.created_at)

		response = self.client.get('/api/messages/')
		self.assertEqual(len(response.data), 1)
		self.assertEqual(response.data[0]['user']['id'], self.bob.id)

	def test_no_messages(self):
		response = self.client.get('/api/messages/')
		self.assertEqual(response.data, [])

	def test_aggregate_respects_limit(self):
		messages = [
			self._message(self.alice, self.bob, 2),
			self._message(self.carol, self.alice, 1),
		]
		ordered = sorted(
			Message.objects.filter(id__in=[m.id for m in messages]).select_related('sender', 'receiver'),
			key=lambda m: m.created_at,
			reverse=True,
		)

		conversations = aggregate_conversations(self.alice.id, ordered, limit=1)

		self.assertEqual(len(conversations), 1)
		self.assertEqual(conversations[0].user, self.carol)


class FollowUpTaskTests(TestCase):
	def test_task_stores_message(self):
		alice = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		bob = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')

		message_id = deliver_follow_up_message(alice.id, bob.id, 'See you there')

		message = Message.objects.get(id=message_id)
		self.assertEqual(message.content, 'See you there')
		self.assertEqual((message.sender, message.receiver), (alice, bob))

	@patch('services.messaging.create_text_message', side_effect=RuntimeError('db down'))
	def test_task_gives_up_after_retries(self, mock_create):
		result = deliver_follow_up_message.apply(args=(1, 2, 'See you there'), retries=3)

		with self.assertRaises(DependencyFailure):
			result.get()
		mock_create.assert_called_once_with(1, 2, 'See you there')

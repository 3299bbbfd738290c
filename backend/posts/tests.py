from datetime import timedelta
from io import StringIO
from unittest.mock import MagicMock, patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from chat.models import Message
from common.exceptions import ValidationFailed
from services.social import respond_to_join_request

from .models import JoinRequest, Post


class PostFeedTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = User.objects.create_user(email='a@example.com', name='Alice', password='secret1')
		self.post = Post.objects.create(
			author=self.author,
			title='Pickup football',
			content='Need two more players',
			latitude=37.0,
			longitude=-122.0
		)

	def test_viewer_within_one_km_sees_post(self):
		response = self.client.get('/api/posts/', {'lat': 37.005, 'lng': -122.003})

		self.assertEqual(response.status_code, 200)
		self.assertEqual([item['id'] for item in response.data], [self.post.id])
		self.assertEqual(response.data[0]['author']['name'], 'Alice')
		self.assertEqual(response.data[0]['join_requests'], [])

	def test_viewer_outside_box_sees_nothing(self):
		response = self.client.get('/api/posts/', {'lat': 37.05, 'lng': -122.05})

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, [])

	def test_inside_box_but_beyond_one_km_is_excluded(self):
		# ~1.06 km north, still inside the +/-0.02 degree box
		response = self.client.get('/api/posts/', {'lat': 37.0095, 'lng': -122.0})

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, [])

	def test_inactive_posts_are_hidden(self):
		Post.objects.filter(id=self.post.id).update(active=False)

		response = self.client.get('/api/posts/', {'lat': 37.0, 'lng': -122.0})

		self.assertEqual(response.data, [])

	def test_feed_newest_first_with_join_requests(self):
		newer = Post.objects.create(
			author=self.author, content='Board games tonight', latitude=37.001, longitude=-122.001
		)
		Post.objects.filter(id=self.post.id).update(created_at=timezone.now() - timedelta(minutes=30))
		joiner = User.objects.create_user(email='b@example.com', name='Bob', password='secret1')
		JoinRequest.objects.create(post=self.post, sender=joiner)

		response = self.client.get('/api/posts/', {'lat': 37.0, 'lng': -122.0})

		self.assertEqual([item['id'] for item in response.data], [newer.id, self.post.id])
		self.assertEqual(
			response.data[1]['join_requests'],
			[{'sender_id': joiner.id, 'status': 'PENDING'}]
		)

	def test_feed_requires_coordinates(self):
		response = self.client.get('/api/posts/')
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'Invalid input')

	def test_create_post_requires_auth(self):
		response = self.client.post('/api/posts/', {
			'content': 'Coffee?', 'lat': 37.0, 'lng': -122.0
		}, format='json')
		self.assertEqual(response.status_code, 401)

	def test_create_post_defaults(self):
		self.client.force_authenticate(user=self.author)
		content = 'Looking for a tennis partner this afternoon near the park courts'

		response = self.client.post('/api/posts/', {
			'content': content, 'lat': 37.0, 'lng': -122.0
		}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['title'], content[:50] + '...')
		self.assertEqual(response.data['price'], 'Free')
		self.assertEqual(response.data['category'], 'General')
		self.assertTrue(response.data['active'])

	def test_create_post_rejects_non_image_data(self):
		self.client.force_authenticate(user=self.author)

		response = self.client.post('/api/posts/', {
			'content': 'Coffee?', 'lat': 37.0, 'lng': -122.0,
			'image_url': 'https://example.com/cat.png'
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'Invalid image data')


class JoinRequestFlowTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = User.objects.create_user(email='a@example.com', name='Alice', password='secret1')
		self.joiner = User.objects.create_user(email='b@example.com', name='Bob', password='secret1')
		self.post = Post.objects.create(
			author=self.author,
			title='Pickup football',
			content='Need two more players',
			latitude=37.0,
			longitude=-122.0
		)

	def _request_to_join(self):
		self.client.force_authenticate(user=self.joiner)
		return self.client.post('/api/join-requests/', {'post_id': self.post.id}, format='json')

	def test_request_notifies_author(self):
		response = self._request_to_join()

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['status'], 'PENDING')

		message = Message.objects.get(sender=self.joiner, receiver=self.author)
		self.assertIn('Bob wants to join your event: "Pickup football"', message.content)

	def test_repeat_request_returns_existing(self):
		first = self._request_to_join()
		second = self._request_to_join()

		self.assertEqual(second.status_code, 200)
		self.assertEqual(first.data['id'], second.data['id'])
		self.assertEqual(JoinRequest.objects.filter(post=self.post, sender=self.joiner).count(), 1)
		self.assertEqual(Message.objects.filter(sender=self.joiner, receiver=self.author).count(), 1)

	def test_cannot_join_own_post(self):
		self.client.force_authenticate(user=self.author)
		response = self.client.post('/api/join-requests/', {'post_id': self.post.id}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(JoinRequest.objects.exists())

	def test_join_missing_post(self):
		self.client.force_authenticate(user=self.joiner)
		response = self.client.post('/api/join-requests/', {'post_id': 999999}, format='json')

		self.assertEqual(response.status_code, 404)

	def test_accept_sends_one_directions_message(self):
		join_request_id = self._request_to_join().data['id']

		self.client.force_authenticate(user=self.author)
		response = self.client.put('/api/join-requests/', {
			'request_id': join_request_id, 'status': 'ACCEPTED'
		}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], 'ACCEPTED')

		replies = Message.objects.filter(sender=self.author, receiver=self.joiner)
		self.assertEqual(replies.count(), 1)
		self.assertIn(
			'https://www.google.com/maps/dir/?api=1&destination=37.0,-122.0',
			replies.get().content
		)

	def test_reject_sends_no_message(self):
		join_request_id = self._request_to_join().data['id']

		self.client.force_authenticate(user=self.author)
		response = self.client.put('/api/join-requests/', {
			'request_id': join_request_id, 'status': 'REJECTED'
		}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(JoinRequest.objects.get(id=join_request_id).status, 'REJECTED')
		self.assertFalse(Message.objects.filter(sender=self.author, receiver=self.joiner).exists())

	def test_answered_request_cannot_change(self):
		join_request_id = self._request_to_join().data['id']
		self.client.force_authenticate(user=self.author)
		self.client.put('/api/join-requests/', {
			'request_id': join_request_id, 'status': 'REJECTED'
		}, format='json')

		response = self.client.put('/api/join-requests/', {
			'request_id': join_request_id, 'status': 'ACCEPTED'
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(JoinRequest.objects.get(id=join_request_id).status, 'REJECTED')

	def test_racing_second_accept_sends_no_second_message(self):
		join_request = JoinRequest.objects.create(post=self.post, sender=self.joiner)
		# Read before the first response commits, so it still says PENDING
		stale = JoinRequest.objects.select_related('post', 'sender').get(id=join_request.id)

		respond_to_join_request(self.author, join_request.id, JoinRequest.STATUS_ACCEPTED)

		stale_lookup = MagicMock()
		stale_lookup.get.return_value = stale
		with patch.object(JoinRequest.objects, 'select_related', return_value=stale_lookup):
			with self.assertRaises(ValidationFailed):
				respond_to_join_request(self.author, join_request.id, JoinRequest.STATUS_ACCEPTED)

		join_request.refresh_from_db()
		self.assertEqual(join_request.status, 'ACCEPTED')
		self.assertEqual(Message.objects.filter(sender=self.author, receiver=self.joiner).count(), 1)

	def test_only_post_author_can_respond(self):
		join_request_id = self._request_to_join().data['id']

		response = self.client.put('/api/join-requests/', {
			'request_id': join_request_id, 'status': 'ACCEPTED'
		}, format='json')

		self.assertEqual(response.status_code, 404)
		self.assertEqual(JoinRequest.objects.get(id=join_request_id).status, 'PENDING')

	def test_invalid_status(self):
		join_request_id = self._request_to_join().data['id']
		self.client.force_authenticate(user=self.author)

		response = self.client.put('/api/join-requests/', {
			'request_id': join_request_id, 'status': 'MAYBE'
		}, format='json')

		self.assertEqual(response.status_code, 400)

	@patch('chat.tasks.deliver_follow_up_message')
	@patch('services.social.join_requests.create_text_message', side_effect=RuntimeError('db down'))
	def test_follow_up_failure_keeps_state_change(self, mock_create, mock_task):
		join_request = JoinRequest.objects.create(post=self.post, sender=self.joiner)

		self.client.force_authenticate(user=self.author)
		response = self.client.put('/api/join-requests/', {
			'request_id': join_request.id, 'status': 'ACCEPTED'
		}, format='json')

		self.assertEqual(response.status_code, 200)
		join_request.refresh_from_db()
		self.assertEqual(join_request.status, 'ACCEPTED')
		mock_task.delay.assert_called_once()
		self.assertEqual(mock_task.delay.call_args[0][:2], (self.author.id, self.joiner.id))

	def test_author_lists_requests(self):
		self._request_to_join()

		self.client.force_authenticate(user=self.author)
		response = self.client.get('/api/join-requests/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 1)
		self.assertEqual(response.data[0]['sender']['name'], 'Bob')
		self.assertEqual(response.data[0]['post']['title'], 'Pickup football')


class ImageUploadTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.user = User.objects.create_user(email='a@example.com', name='Alice', password='secret1')
		self.client.force_authenticate(user=self.user)

	def test_upload_returns_data_url(self):
		image = SimpleUploadedFile('dot.png', b'\x89PNG\r\n\x1a\nfake', content_type='image/png')

		response = self.client.post('/api/upload/', {'file': image}, format='multipart')

		self.assertEqual(response.status_code, 200)
		self.assertTrue(response.data['image_url'].startswith('data:image/png;base64,'))

	def test_upload_rejects_other_types(self):
		document = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')

		response = self.client.post('/api/upload/', {'file': document}, format='multipart')

		self.assertEqual(response.status_code, 400)

	def test_upload_requires_file(self):
		response = self.client.post('/api/upload/', {}, format='multipart')
		self.assertEqual(response.status_code, 400)


class ExpirePostsCommandTests(TestCase):
	def setUp(self):
		author = User.objects.create_user(email='a@example.com', name='Alice', password='secret1')
		self.old = Post.objects.create(author=author, content='Old', latitude=37.0, longitude=-122.0)
		self.fresh = Post.objects.create(author=author, content='Fresh', latitude=37.0, longitude=-122.0)
		Post.objects.filter(id=self.old.id).update(created_at=timezone.now() - timedelta(hours=30))

	def test_deactivates_old_posts(self):
		out = StringIO()
		call_command('expire_posts', hours=24, stdout=out)

		self.old.refresh_from_db()
		self.fresh.refresh_from_db()
		self.assertFalse(self.old.active)
		self.assertTrue(self.fresh.active)
		self.assertIn('Deactivated 1 posts', out.getvalue())

	def test_dry_run_changes_nothing(self):
		out = StringIO()
		call_command('expire_posts', hours=24, dry_run=True, stdout=out)

		self.old.refresh_from_db()
		self.assertTrue(self.old.active)
		self.assertIn('DRY RUN', out.getvalue())

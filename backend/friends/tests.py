from unittest.mock import patch

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from posts.models import JoinRequest, Post

from .models import Friendship


class FriendRequestTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')
		self.client.force_authenticate(user=self.alice)

	def test_add_by_email_is_accepted_at_once(self):
		response = self.client.post('/api/friends/', {'friend_email': 'BOB@example.com'}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['status'], 'ACCEPTED')
		self.assertEqual(response.data['friend']['id'], self.bob.id)

	def test_add_by_id_is_pending(self):
		response = self.client.post('/api/friends/', {'friend_id': self.bob.id}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['status'], 'PENDING')
		friendship = Friendship.objects.get()
		self.assertEqual((friendship.user, friendship.friend), (self.alice, self.bob))

	def test_duplicate_in_either_direction_conflicts(self):
		self.client.post('/api/friends/', {'friend_id': self.bob.id}, format='json')

		again = self.client.post('/api/friends/', {'friend_email': 'bob@example.com'}, format='json')
		self.assertEqual(again.status_code, 409)

		self.client.force_authenticate(user=self.bob)
		reverse = self.client.post('/api/friends/', {'friend_id': self.alice.id}, format='json')
		self.assertEqual(reverse.status_code, 409)
		self.assertEqual(Friendship.objects.count(), 1)

	def test_database_rejects_reverse_row(self):
		Friendship.objects.create(user=self.alice, friend=self.bob)

		with self.assertRaises(IntegrityError):
			with transaction.atomic():
				Friendship.objects.create(user=self.bob, friend=self.alice)

	@patch('services.social.friendships.find_friendship_between', return_value=None)
	def test_racing_reverse_request_conflicts(self, mock_find):
		# Both requests passed the existence check before either row was written
		Friendship.objects.create(user=self.alice, friend=self.bob)
		self.client.force_authenticate(user=self.bob)

		response = self.client.post('/api/friends/', {'friend_id': self.alice.id}, format='json')

		self.assertEqual(response.status_code, 409)
		self.assertEqual(Friendship.objects.count(), 1)

	def test_cannot_befriend_self(self):
		response = self.client.post('/api/friends/', {'friend_id': self.alice.id}, format='json')
		self.assertEqual(response.status_code, 400)

	def test_unknown_target(self):
		response = self.client.post('/api/friends/', {'friend_email': 'nobody@example.com'}, format='json')
		self.assertEqual(response.status_code, 404)

		response = self.client.post('/api/friends/', {'friend_id': 999999}, format='json')
		self.assertEqual(response.status_code, 404)

	def test_target_required(self):
		response = self.client.post('/api/friends/', {}, format='json')
		self.assertEqual(response.status_code, 400)

	def test_only_target_can_accept(self):
		friendship = Friendship.objects.create(user=self.alice, friend=self.bob)

		response = self.client.put('/api/friends/%d/' % friendship.id)
		self.assertEqual(response.status_code, 404)

		self.client.force_authenticate(user=self.bob)
		response = self.client.put('/api/friends/%d/' % friendship.id)
		self.assertEqual(response.status_code, 200)
		friendship.refresh_from_db()
		self.assertEqual(friendship.status, 'ACCEPTED')

	def test_accepted_request_cannot_be_accepted_again(self):
		friendship = Friendship.objects.create(
			user=self.alice, friend=self.bob, status=Friendship.STATUS_ACCEPTED
		)
		self.client.force_authenticate(user=self.bob)

		response = self.client.put('/api/friends/%d/' % friendship.id)
		self.assertEqual(response.status_code, 404)

	def test_reject_deletes_pending_request(self):
		friendship = Friendship.objects.create(user=self.alice, friend=self.bob)
		self.client.force_authenticate(user=self.bob)

		response = self.client.delete('/api/friends/%d/' % friendship.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, {'success': True})
		self.assertFalse(Friendship.objects.exists())


class FriendsOverviewTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.alice = User.objects.create_user(email='alice@example.com', name='Alice', password='secret1')
		self.bob = User.objects.create_user(email='bob@example.com', name='Bob', password='secret1')
		self.carol = User.objects.create_user(email='carol@example.com', name='Carol', password='secret1')
		self.dave = User.objects.create_user(email='dave@example.com', name='Dave', password='secret1')

		# Bob added Alice; the accepted row is read from both sides
		Friendship.objects.create(user=self.bob, friend=self.alice, status=Friendship.STATUS_ACCEPTED)
		Friendship.objects.create(user=self.carol, friend=self.alice, status=Friendship.STATUS_PENDING)

		self.bob_post = Post.objects.create(author=self.bob, content='Run club', latitude=10.0, longitude=10.0)
		Post.objects.create(author=self.bob, content='Old run', latitude=10.0, longitude=10.0, active=False)
		Post.objects.create(author=self.dave, content='Stranger post', latitude=10.0, longitude=10.0)

		JoinRequest.objects.create(post=self.bob_post, sender=self.alice)
		JoinRequest.objects.create(post=self.bob_post, sender=self.dave)

		self.client.force_authenticate(user=self.alice)

	def test_overview(self):
		response = self.client.get('/api/friends/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual([f['id'] for f in response.data['friends']], [self.bob.id])

		self.assertEqual([p['id'] for p in response.data['posts']], [self.bob_post.id])
		self.assertEqual(
			response.data['posts'][0]['join_requests'],
			[{'sender_id': self.alice.id, 'status': 'PENDING'}]
		)

		pending = response.data['pending_requests']
		self.assertEqual(len(pending), 1)
		self.assertEqual(pending[0]['user']['id'], self.carol.id)

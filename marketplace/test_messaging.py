from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from . import realtime
from .exceptions import MessageDeliveryError
from .models import Message, Profile
from .services.inbox import MessageThread, ThreadRegistry, threads
from .services.messaging import MessagingService


class MessagingTestCase(TestCase):
    def setUp(self):
        self.alice = Profile.objects.create_user(
            username="alice@example.com", email="alice@example.com", password="secret-pass"
        )
        self.bob = Profile.objects.create_user(
            username="bob@example.com", email="bob@example.com", password="secret-pass", role="agent"
        )
        self.carol = Profile.objects.create_user(
            username="carol@example.com", email="carol@example.com", password="secret-pass"
        )


class MessagingServiceTest(MessagingTestCase):
    def test_send_validates_receiver_and_content(self):
        service = MessagingService(self.alice)

        ok, form, _ = service.send({"receiver": self.alice.pk, "content": "Hi me"})
        self.assertFalse(ok)
        self.assertIn("receiver", form.errors)

        ok, form, _ = service.send({"receiver": self.bob.pk, "content": "   "})
        self.assertFalse(ok)
        self.assertIn("__all__", form.errors)

        ok, _, message = service.send({"receiver": self.bob.pk, "content": " Is the flat free? "})
        self.assertTrue(ok)
        self.assertEqual(message.content, "Is the flat free?")

    def test_chat_list_groups_by_counterpart(self):
        now = timezone.now()
        Message.objects.create(sender=self.bob, receiver=self.alice, content="one", created_at=now - timedelta(minutes=5))
        Message.objects.create(sender=self.bob, receiver=self.alice, content="two", created_at=now - timedelta(minutes=4))
        Message.objects.create(sender=self.alice, receiver=self.carol, content="three", created_at=now - timedelta(minutes=1))

        chats = MessagingService(self.alice).chat_list()

        self.assertEqual([chat.counterpart for chat in chats], [self.carol, self.bob])
        self.assertEqual(chats[1].last_message.content, "two")
        self.assertEqual(chats[1].unread_count, 2)
        self.assertTrue(chats[1].unread)
        self.assertFalse(chats[0].unread)

    def test_conversation_is_oldest_first_and_inbox_newest_first(self):
        now = timezone.now()
        first = Message.objects.create(sender=self.bob, receiver=self.alice, content="a", created_at=now - timedelta(seconds=30))
        second = Message.objects.create(sender=self.alice, receiver=self.bob, content="b", created_at=now)

        service = MessagingService(self.alice)

        self.assertEqual(service.conversation(self.bob), [first, second])
        self.assertEqual(service.inbox(), [second, first])

    def test_only_the_receiver_marks_read(self):
        message = Message.objects.create(sender=self.bob, receiver=self.alice, content="ping")

        self.assertFalse(MessagingService(self.bob).mark_read(message.pk))
        self.assertTrue(MessagingService(self.alice).mark_read(message.pk))
        self.assertFalse(MessagingService(self.alice).mark_read(message.pk))

    def test_mark_conversation_read(self):
        Message.objects.create(sender=self.bob, receiver=self.alice, content="1")
        Message.objects.create(sender=self.bob, receiver=self.alice, content="2")
        Message.objects.create(sender=self.carol, receiver=self.alice, content="3")

        self.assertEqual(MessagingService(self.alice).mark_conversation_read(self.bob), 2)
        self.assertTrue(Message.objects.filter(sender=self.carol, read=False).exists())

    def test_only_the_sender_deletes(self):
        message = Message.objects.create(sender=self.bob, receiver=self.alice, content="oops")

        with self.assertRaises(PermissionError):
            MessagingService(self.alice).delete(message)

        MessagingService(self.bob).delete(message)
        self.assertFalse(Message.objects.exists())


class MessageThreadTest(MessagingTestCase):
    def thread(self, **kwargs):
        thread = MessageThread(self.alice, **kwargs)
        thread.start()
        self.addCleanup(thread.stop)
        return thread

    def test_send_confirms_optimistic_entry_once(self):
        thread = self.thread()

        with self.captureOnCommitCallbacks(execute=True):
            sent = thread.send({"receiver": self.bob.pk, "content": "Hello Bob"})

        self.assertEqual(sent.status, "sent")
        self.assertTrue(sent.temp_id.startswith("temp_"))
        self.assertEqual(len(thread.messages), 1)
        self.assertEqual(thread.messages[0].id, Message.objects.get().pk)
        self.assertFalse(thread.messages[0].is_optimistic)

    def test_incoming_messages_arrive_through_the_change_feed(self):
        thread = self.thread()

        with self.captureOnCommitCallbacks(execute=True):
            Message.objects.create(sender=self.bob, receiver=self.alice, content="Viewing at 5?")
            Message.objects.create(sender=self.bob, receiver=self.carol, content="Not for Alice")

        self.assertEqual([m.content for m in thread.messages], ["Viewing at 5?"])
        self.assertEqual(thread.messages[0].status, "delivered")

    def test_updates_and_deletes_are_applied(self):
        thread = self.thread()
        with self.captureOnCommitCallbacks(execute=True):
            message = Message.objects.create(sender=self.bob, receiver=self.alice, content="draft")

        with self.captureOnCommitCallbacks(execute=True):
            message.content = "final"
            message.save()
        self.assertEqual(thread.messages[0].content, "final")

        with self.captureOnCommitCallbacks(execute=True):
            message.delete()
        self.assertEqual(thread.messages, [])

    def test_failed_send_is_kept_and_confirmed_by_realtime_insert(self):
        service = MessagingService(self.alice)
        thread = self.thread(service=service)

        with mock.patch.object(service, "send", side_effect=DatabaseError("connection lost")):
            with self.assertRaises(MessageDeliveryError):
                thread.send({"receiver": self.bob.pk, "content": "Still there?"})

        failed = thread.messages[0]
        self.assertEqual(failed.status, "failed")
        self.assertEqual(thread.error, "connection lost")

        with self.captureOnCommitCallbacks(execute=True):
            Message.objects.create(sender=self.alice, receiver=self.bob, content="Still there?")

        self.assertEqual(len(thread.messages), 1)
        self.assertEqual(thread.messages[0].status, "sent")
        self.assertEqual(thread.messages[0].temp_id, failed.temp_id)

    def test_retry_delivers_failed_message(self):
        service = MessagingService(self.alice)
        thread = self.thread(service=service)
        with mock.patch.object(service, "send", side_effect=DatabaseError("timeout")):
            with self.assertRaises(MessageDeliveryError):
                thread.send({"receiver": self.bob.pk, "content": "Retry me"})
        temp_id = thread.messages[0].temp_id

        retried = thread.retry(temp_id)

        self.assertEqual(retried.status, "sent")
        self.assertEqual(Message.objects.get().content, "Retry me")
        self.assertIsNone(thread.retry(temp_id))

    def test_fetch_keeps_pending_entries_without_duplicates(self):
        service = MessagingService(self.alice)
        thread = MessageThread(self.alice, service=service, change_feed=realtime.ChangeFeed())
        with mock.patch.object(service, "send", side_effect=DatabaseError("offline")):
            with self.assertRaises(MessageDeliveryError):
                thread.send({"receiver": self.bob.pk, "content": "Pending text"})
        Message.objects.create(sender=self.alice, receiver=self.bob, content="Pending text")
        older = Message.objects.create(
            sender=self.bob, receiver=self.alice, content="Earlier", created_at=timezone.now() - timedelta(hours=1)
        )

        messages = thread.fetch()

        self.assertEqual([m.content for m in messages], ["Pending text", "Earlier"])
        self.assertTrue(messages[0].is_optimistic)
        self.assertEqual(messages[1].id, older.pk)
        self.assertIsNone(thread.error)

    def test_mark_conversation_read_updates_local_entries(self):
        thread = self.thread()
        with self.captureOnCommitCallbacks(execute=True):
            Message.objects.create(sender=self.bob, receiver=self.alice, content="Unread")

        self.assertEqual(thread.mark_conversation_read(self.bob), 1)
        self.assertEqual(thread.messages[0].status, "read")


class ThreadRegistryTest(MessagingTestCase):
    def test_one_live_thread_per_user_until_closed(self):
        feed = realtime.ChangeFeed()
        registry = ThreadRegistry(factory=lambda user: MessageThread(user, change_feed=feed))
        Message.objects.create(sender=self.bob, receiver=self.alice, content="Welcome")

        thread = registry.get(self.alice)

        self.assertIs(registry.get(self.alice), thread)
        self.assertEqual([m.content for m in thread.messages], ["Welcome"])
        self.assertTrue(feed.has_subscribers("messages"))

        registry.close(self.alice)
        self.assertFalse(feed.has_subscribers("messages"))
        self.assertIsNot(registry.get(self.alice), thread)
        registry.close(self.alice)


class MessageThreadEndpointsTest(MessagingTestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(self.alice)
        self.addCleanup(threads.close, self.alice)

    def test_send_through_thread(self):
        Message.objects.create(sender=self.bob, receiver=self.alice, content="Viewing at 5?")

        sent = self.client.post("/api/messages/thread/", {"receiver": self.bob.pk, "content": "Yes"}, format="json")

        self.assertEqual(sent.status_code, 201)
        self.assertEqual(sent.json()["status"], "sent")
        self.assertEqual(sent.json()["id"], Message.objects.get(content="Yes").pk)
        listed = self.client.get("/api/messages/thread/").json()
        self.assertEqual(sorted(m["content"] for m in listed), ["Viewing at 5?", "Yes"])

    def test_invalid_message_is_rejected_before_the_thread(self):
        response = self.client.post("/api/messages/thread/", {"receiver": self.alice.pk, "content": "Hi"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("receiver", response.json()["errors"])
        self.assertEqual(threads.get(self.alice).messages, [])

    def test_failed_send_can_be_retried(self):
        with mock.patch.object(MessagingService, "send", side_effect=DatabaseError("offline")):
            failed = self.client.post(
                "/api/messages/thread/", {"receiver": self.bob.pk, "content": "Retry me"}, format="json"
            )
        self.assertEqual(failed.status_code, 502)
        [pending] = self.client.get("/api/messages/thread/").json()
        self.assertEqual(pending["status"], "failed")

        retried = self.client.post(f"/api/messages/thread/{pending['temp_id']}/retry/")

        self.assertEqual(retried.status_code, 200)
        self.assertEqual(retried.json()["status"], "sent")
        self.assertEqual(Message.objects.get().content, "Retry me")
        again = self.client.post(f"/api/messages/thread/{pending['temp_id']}/retry/")
        self.assertEqual(again.status_code, 409)

import threading
from unittest import mock

from django.test import TestCase

from .exceptions import MessageDeliveryError
from .models import Message, OutboxMessage, Profile
from .services.outbox import OutboxService, deliver_to_server


class Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class OutboxTest(TestCase):
    def setUp(self):
        self.sender = Profile.objects.create_user(
            username="sender@example.com", email="sender@example.com", password="secret-pass"
        )
        self.receiver = Profile.objects.create_user(
            username="receiver@example.com", email="receiver@example.com", password="secret-pass", role="agent"
        )
        self.clock = Clock()
        self.online = True
        self.deliver = mock.Mock(side_effect=deliver_to_server)

    def service(self):
        return OutboxService(sender=self.deliver, is_online=lambda: self.online, clock=self.clock)

    def data(self, content="Is it still available?"):
        return {"receiver": self.receiver.pk, "content": content}

    def test_online_enqueue_delivers_immediately(self):
        entry = self.service().enqueue(self.sender, self.data())

        entry.refresh_from_db()
        self.assertEqual(entry.status, "sent")
        self.assertFalse(entry.is_local)
        self.assertEqual(entry.server_message.content, "Is it still available?")
        self.assertEqual(entry.server_message.created_at, entry.created_at)

    def test_offline_enqueue_stays_queued_until_sync(self):
        service = self.service()
        self.online = False
        entry = service.enqueue(self.sender, self.data())

        self.assertEqual(service.pending(self.sender), [entry])
        self.assertFalse(service.sync().ran)

        self.online = True
        self.clock.now += 5
        report = service.sync()

        self.assertTrue(report.ran)
        self.assertEqual(report.sent, 1)
        self.assertEqual(service.pending(), [])
        self.assertEqual(Message.objects.count(), 1)

    def test_failed_immediate_delivery_stays_queued(self):
        self.deliver.side_effect = MessageDeliveryError("server unreachable")

        entry = self.service().enqueue(self.sender, self.data())

        entry.refresh_from_db()
        self.assertEqual(entry.status, "sending")
        self.assertEqual(entry.sync_attempts, 0)

    def test_sync_reconciles_instead_of_resending(self):
        service = self.service()
        self.online = False
        entry = service.enqueue(self.sender, self.data())
        Message.objects.create(sender=self.sender, receiver=self.receiver, content=entry.content)
        self.online = True

        report = service.sync()

        self.assertEqual(report.reconciled, 1)
        self.assertEqual(report.sent, 0)
        self.deliver.assert_not_called()
        self.assertEqual(Message.objects.count(), 1)
        entry.refresh_from_db()
        self.assertEqual(entry.status, "sent")

    def test_same_text_to_another_receiver_is_still_delivered(self):
        other = Profile.objects.create_user(
            username="other@example.com", email="other@example.com", password="secret-pass", role="agent"
        )
        Message.objects.create(sender=self.sender, receiver=other, content="ok")
        service = self.service()
        self.online = False
        entry = service.enqueue(self.sender, self.data("ok"))
        self.online = True

        report = service.sync()

        self.assertEqual(report.reconciled, 0)
        self.assertEqual(report.sent, 1)
        entry.refresh_from_db()
        self.assertEqual(entry.server_message.receiver, self.receiver)
        self.assertEqual(Message.objects.filter(receiver=self.receiver, content="ok").count(), 1)

    def test_sync_failure_marks_entry_failed_and_counts_attempt(self):
        service = self.service()
        self.online = False
        entry = service.enqueue(self.sender, self.data())
        self.online = True
        self.deliver.side_effect = MessageDeliveryError()

        report = service.sync()

        self.assertEqual(report.failed, 1)
        entry.refresh_from_db()
        self.assertEqual(entry.status, "failed")
        self.assertEqual(entry.sync_attempts, 1)
        self.assertEqual(service.pending(), [])

    def test_retry_only_applies_to_failed_entries(self):
        service = self.service()
        self.online = False
        entry = service.enqueue(self.sender, self.data())
        self.assertFalse(service.retry(entry))

        OutboxMessage.objects.filter(pk=entry.pk).update(status="failed")
        entry.refresh_from_db()
        self.assertTrue(service.retry(entry))
        entry.refresh_from_db()
        self.assertEqual(entry.status, "sent")

    def test_syncs_closer_than_minimum_interval_are_skipped(self):
        service = self.service()

        self.assertTrue(service.sync().ran)
        self.clock.now += 1
        self.assertFalse(service.sync().ran)
        self.clock.now += 1
        self.assertTrue(service.sync().ran)

    def test_sync_never_overlaps(self):
        service = self.service()
        started = threading.Event()
        release = threading.Event()
        results = []

        def slow_online():
            started.set()
            release.wait(5)
            return False

        service.is_online = slow_online
        worker = threading.Thread(target=lambda: results.append(service.sync()))
        worker.start()
        started.wait(5)
        self.clock.now += 10

        overlapping = service.sync()
        release.set()
        worker.join(5)

        self.assertFalse(overlapping.ran)
        self.assertEqual(len(results), 1)

    def test_delivery_rejects_messages_to_self(self):
        entry = OutboxMessage.objects.create(sender=self.sender, receiver=self.sender, content="Note to self")

        with self.assertRaises(MessageDeliveryError):
            deliver_to_server(entry)

from decimal import Decimal
from unittest import mock

from django.core.cache import cache
from django.test import TestCase

from .exceptions import GatewayError, WithdrawalRejected
from .gateway import GatewayTransaction, MobileMoneyClient, PaymentStatus
from .models import Notification, Profile, Transaction, Wallet, WithdrawalRequest
from .services.withdrawal import UNKNOWN, WithdrawalMonitor, WithdrawalService, resume_pending


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


class WithdrawalServiceTest(TestCase):
    def setUp(self):
        cache.clear()
        self.agent = Profile.objects.create_user(
            username="agent@example.com",
            email="agent@example.com",
            password="secret-pass",
            role="agent",
        )
        Wallet.objects.create(user=self.agent, balance=Decimal("10000"))
        self.clock = FakeClock()
        self.client = mock.Mock(spec=MobileMoneyClient)
        self.client.initiate_withdrawal.return_value = GatewayTransaction(trans_id="WD-1")

    def service(self):
        return WithdrawalService(
            self.agent,
            client=self.client,
            clock=self.clock,
            sleep=self.clock.sleep,
            background=False,
        )

    def balance(self):
        return Wallet.objects.get(user=self.agent).balance

    def test_immediate_success_debits_wallet(self):
        self.client.withdrawal_status.return_value = PaymentStatus("SUCCESSFUL")

        outcome = self.service().process(Decimal("4000"), "677000000", "MTN")

        self.assertEqual(outcome.status, "SUCCESSFUL")
        self.assertFalse(outcome.monitoring)
        self.assertEqual(outcome.withdrawal.status, "completed")
        self.assertEqual(self.balance(), Decimal("6000"))
        txn = Transaction.objects.get(reference="WD-1")
        self.assertEqual(txn.amount, Decimal("-4000"))
        self.assertEqual(txn.status, "completed")
        self.assertTrue(Notification.objects.filter(user=self.agent, title="Withdrawal Successful").exists())
        self.assertEqual(self.clock.now, 2)

    def test_pending_then_successful_via_monitor(self):
        self.client.withdrawal_status.side_effect = [
            PaymentStatus("PENDING"),
            PaymentStatus("PENDING"),
            PaymentStatus("SUCCESSFUL"),
        ]

        outcome = self.service().process(Decimal("2500"), "677000000", "ORANGE")

        self.assertTrue(outcome.monitoring)
        self.assertEqual(outcome.status, "SUCCESSFUL")
        self.assertEqual(outcome.monitor.polls, 2)
        self.assertEqual(outcome.monitor.result.elapsed, 20)
        self.assertEqual(outcome.withdrawal.status, "completed")
        self.assertEqual(self.balance(), Decimal("7500"))

    def test_monitor_failure_marks_request_and_transaction_failed(self):
        self.client.withdrawal_status.side_effect = [
            PaymentStatus("PENDING"),
            PaymentStatus("FAILED", message="Subscriber not found"),
        ]

        outcome = self.service().process(Decimal("1000"), "677000000", "MTN")

        self.assertEqual(outcome.status, "FAILED")
        self.assertEqual(outcome.withdrawal.status, "failed")
        self.assertEqual(outcome.withdrawal.failure_reason, "Subscriber not found")
        self.assertEqual(Transaction.objects.get(reference="WD-1").status, "failed")
        self.assertEqual(self.balance(), Decimal("10000"))

    def test_monitor_gives_up_after_sixty_seconds(self):
        self.client.withdrawal_status.return_value = PaymentStatus("PENDING")

        outcome = self.service().process(Decimal("1000"), "677000000", "MTN")

        self.assertEqual(outcome.status, UNKNOWN)
        self.assertEqual(outcome.monitor.result.elapsed, 60)
        self.assertEqual(outcome.monitor.polls, 6)
        self.assertEqual(outcome.withdrawal.status, "processing")
        self.assertEqual(Transaction.objects.get(reference="WD-1").status, "pending")
        self.assertEqual(self.balance(), Decimal("10000"))
        self.assertTrue(Notification.objects.filter(user=self.agent, title="Withdrawal Status Unknown").exists())

    def test_network_errors_while_polling_are_tolerated(self):
        self.client.withdrawal_status.side_effect = [
            GatewayError("connection reset"),
            GatewayError("connection reset"),
            PaymentStatus("SUCCESSFUL"),
        ]

        outcome = self.service().process(Decimal("1000"), "677000000", "MTN")

        self.assertEqual(outcome.status, "SUCCESSFUL")
        self.assertEqual(outcome.monitor.result.elapsed, 20)

    def test_rejects_amount_above_available_balance(self):
        with self.assertRaises(WithdrawalRejected) as ctx:
            self.service().process(Decimal("20000"), "677000000", "MTN")

        self.assertIn("Withdrawal exceeds available amount. Available: 10000", ctx.exception.message)
        self.client.initiate_withdrawal.assert_not_called()
        self.assertFalse(WithdrawalRequest.objects.exists())

    def test_in_flight_requests_reduce_available_balance(self):
        WithdrawalRequest.objects.create(user=self.agent, amount=Decimal("8000"), phone="677000000", status="processing")

        with self.assertRaises(WithdrawalRejected) as ctx:
            self.service().process(Decimal("5000"), "677000000", "MTN")

        self.assertEqual(ctx.exception.available, Decimal("2000"))

    def test_gateway_failure_on_initiation_fails_the_request(self):
        self.client.initiate_withdrawal.side_effect = GatewayError("Service down")

        with self.assertRaises(GatewayError):
            self.service().process(Decimal("1000"), "677000000", "MTN")

        withdrawal = WithdrawalRequest.objects.get(user=self.agent)
        self.assertEqual(withdrawal.status, "failed")
        self.assertEqual(withdrawal.failure_reason, "Service down")
        self.assertFalse(Transaction.objects.exists())

    def test_submit_validates_the_form(self):
        ok, form, outcome = self.service().submit({"amount": "0", "phone": "abc", "method": "MTN"})

        self.assertFalse(ok)
        self.assertIsNone(outcome)
        self.assertIn("amount", form.errors)
        self.assertIn("phone", form.errors)


class WithdrawalMonitorTest(TestCase):
    def setUp(self):
        cache.clear()
        self.agent = Profile.objects.create_user(
            username="monitor@example.com",
            email="monitor@example.com",
            password="secret-pass",
            role="agent",
        )
        Wallet.objects.create(user=self.agent, balance=Decimal("5000"))
        self.withdrawal = WithdrawalRequest.objects.create(
            user=self.agent,
            amount=Decimal("1000"),
            phone="677000000",
            gateway_reference="WD-9",
        )
        Transaction.objects.create(user=self.agent, amount=Decimal("-1000"), type="withdrawal", reference="WD-9")
        self.clock = FakeClock()
        self.client = mock.Mock(spec=MobileMoneyClient)
        self.client.withdrawal_status.return_value = PaymentStatus("PENDING")

    def test_progress_is_published_every_tick(self):
        seen = []

        def on_progress(monitor):
            seen.append((monitor.time_remaining, round(monitor.progress)))
            if len(seen) == 3:
                monitor.stop()

        monitor = WithdrawalMonitor(
            self.withdrawal,
            client=self.client,
            clock=self.clock,
            sleep=self.clock.sleep,
            on_progress=on_progress,
        )

        self.assertIsNone(monitor.run())
        self.assertEqual(seen, [("0:59", 2), ("0:58", 3), ("0:57", 5)])
        self.assertEqual(monitor.polls, 0)
        self.assertTrue(monitor.is_stopped)

    def test_success_is_applied_once(self):
        self.client.withdrawal_status.return_value = PaymentStatus("SUCCESSFUL")

        for _ in range(2):
            WithdrawalMonitor(self.withdrawal, client=self.client, clock=self.clock, sleep=self.clock.sleep).run()

        self.assertEqual(Wallet.objects.get(user=self.agent).balance, Decimal("4000"))

    def test_resume_pending_monitors_in_flight_requests(self):
        self.client.withdrawal_status.return_value = PaymentStatus("SUCCESSFUL")

        results = resume_pending(client=self.client, clock=self.clock, sleep=self.clock.sleep)

        self.assertEqual([result.outcome for result in results], ["SUCCESSFUL"])
        self.withdrawal.refresh_from_db()
        self.assertEqual(self.withdrawal.status, "completed")

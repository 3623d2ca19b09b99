from decimal import Decimal
from unittest import mock

import requests
from django.test import SimpleTestCase

from .exceptions import GatewayError, GatewayTimeout, PollingTimeout
from .gateway import MobileMoneyClient, PaymentStatus, poll_status


def response(status_code=200, body=None):
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status_code
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class MobileMoneyClientTest(SimpleTestCase):
    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.session.headers = {}
        self.client = MobileMoneyClient("https://pay.example.com/api/", "key-123", timeout=5, session=self.session)

    def test_payment_request_uses_provider_field_names(self):
        self.session.post.return_value = response(body={"transId": "T-1", "raw": {"state": "queued"}})

        txn = self.client.initiate_payment(
            Decimal("5000.00"), "677000000", service="MTN", external_id="RES-4", user_id="9"
        )

        self.assertEqual(txn.trans_id, "T-1")
        self.assertEqual(txn.raw, {"state": "queued"})
        self.assertEqual(self.session.headers["Authorization"], "Bearer key-123")
        url = self.session.post.call_args.args[0]
        kwargs = self.session.post.call_args.kwargs
        self.assertEqual(url, "https://pay.example.com/api/collect")
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(
            kwargs["json"],
            {
                "amount": 5000,
                "phone": "677000000",
                "service": "MTN",
                "country": "CM",
                "currency": "XAF",
                "externalId": "RES-4",
                "userId": "9",
            },
        )

    def test_withdrawal_status_flags_the_request(self):
        self.session.post.return_value = response(body={"status": "successful", "amount": "2500"})

        status = self.client.withdrawal_status("W-1")

        self.assertTrue(status.is_successful)
        self.assertEqual(status.amount, Decimal("2500"))
        self.assertEqual(self.session.post.call_args.kwargs["json"], {"transId": "W-1", "isWithdrawal": True})

    def test_timeout_raises_gateway_timeout(self):
        self.session.post.side_effect = requests.Timeout()

        with self.assertRaises(GatewayTimeout):
            self.client.payment_status("T-1")

    def test_error_response_surfaces_provider_message(self):
        self.session.post.return_value = response(400, {"error": "Invalid phone number"})

        with self.assertRaises(GatewayError) as ctx:
            self.client.initiate_withdrawal(1000, "000", service="MTN")

        self.assertEqual(ctx.exception.message, "Invalid phone number")

    def test_unknown_status_is_an_error(self):
        self.session.post.return_value = response(body={"status": "MAYBE"})

        with self.assertRaises(GatewayError):
            self.client.payment_status("T-1")

    def test_missing_transaction_id_is_an_error(self):
        self.session.post.return_value = response(body={})

        with self.assertRaises(GatewayError):
            self.client.initiate_payment(100, "677000000", service="ORANGE")

    def test_unsupported_service_is_refused_locally(self):
        with self.assertRaises(ValueError):
            self.client.initiate_payment(100, "677000000", service="VISA")
        self.session.post.assert_not_called()

    def test_refund_requires_success_flag(self):
        self.session.post.return_value = response(body={"success": False, "error": "Already refunded"})

        with self.assertRaises(GatewayError) as ctx:
            self.client.process_refund(12)

        self.assertEqual(ctx.exception.message, "Already refunded")


class PollStatusTest(SimpleTestCase):
    def setUp(self):
        self.now = 0.0
        self.sleeps = []

    def clock(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def test_returns_first_terminal_status(self):
        check = mock.Mock(side_effect=[PaymentStatus("CREATED"), PaymentStatus("PENDING"), PaymentStatus("EXPIRED")])

        status = poll_status(check, clock=self.clock, sleep=self.sleep)

        self.assertEqual(status.status, "EXPIRED")
        self.assertEqual(self.sleeps, [3.0, 3.0])

    def test_failed_checks_back_off(self):
        check = mock.Mock(side_effect=[GatewayError(), PaymentStatus("SUCCESSFUL")])

        poll_status(check, interval=10, clock=self.clock, sleep=self.sleep)

        self.assertEqual(self.sleeps, [20])

    def test_gives_up_after_timeout(self):
        check = mock.Mock(return_value=PaymentStatus("PENDING"))

        with self.assertRaises(PollingTimeout):
            poll_status(check, interval=10, timeout=30, clock=self.clock, sleep=self.sleep)

        self.assertEqual(check.call_count, 4)

    def test_gives_up_after_max_attempts(self):
        check = mock.Mock(return_value=PaymentStatus("PENDING"))

        with self.assertRaises(PollingTimeout):
            poll_status(check, max_attempts=2, clock=self.clock, sleep=self.sleep)

        self.assertEqual(check.call_count, 2)

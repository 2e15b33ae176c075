import hashlib
from unittest import mock
from urllib.parse import urlparse, parse_qs

import razorpay
from django.test import TestCase, override_settings

from payments import tokens
from payments.gateways import PayUGateway, RazorpayGateway, get_gateway
from utils.exceptions import PaymentVerificationFailed
from tests.utils import make_user, make_lot, make_category, payu_callback
from tests.test_tokens import make_intent


@override_settings(BACKEND_URL='https://api.parkngo.test')
class PayUGatewayTests(TestCase):
    def setUp(self):
        self.gateway = PayUGateway(key='merchant', salt='pepper', url='https://test.payu.in/_payment')
        self.user = make_user('asha', first_name='Asha')
        self.lot = make_lot(make_user('admin', staff=True), price='75.5')
        self.intent = make_intent(user_id=self.user.pk, parking_lot_id=self.lot.pk)

    def test_request_hash_layout(self):
        expected = hashlib.sha512(
            'merchant|tx1|75.50|Spot|Asha|asha@example.com|||||||||||pepper'.encode()
        ).hexdigest()
        self.assertEqual(self.gateway.request_hash('tx1', '75.50', 'Spot', 'Asha', 'asha@example.com'), expected)

    def test_response_hash_layout(self):
        expected = hashlib.sha512(
            'pepper|success|||||||||||asha@example.com|Asha|Spot|75.50|tx1|merchant'.encode()
        ).hexdigest()
        self.assertEqual(
            self.gateway.response_hash('success', 'tx1', '75.50', 'Spot', 'Asha', 'asha@example.com'),
            expected,
        )

    def test_checkout_payload(self):
        payload = self.gateway.checkout(self.intent, self.user, self.lot, 'tok.en.value')

        self.assertEqual(payload['key'], 'merchant')
        self.assertEqual(payload['txnid'], self.intent.transaction_id)
        self.assertEqual(payload['amount'], '75.50')
        self.assertEqual(payload['firstname'], 'Asha')
        self.assertEqual(payload['payu_url'], 'https://test.payu.in/_payment')
        self.assertEqual(payload['hash'], self.gateway.request_hash(
            payload['txnid'], payload['amount'], payload['productinfo'], payload['firstname'], payload['email'],
        ))

        surl = urlparse(payload['surl'])
        self.assertEqual(surl.path, '/webhooks/payu/success/')
        self.assertEqual(parse_qs(surl.query)['token'], ['tok.en.value'])
        self.assertEqual(payload['furl'], 'https://api.parkngo.test/webhooks/payu/failure/')

    def _callback(self, **overrides):
        with override_settings(PAYU_KEY='merchant', PAYU_SALT='pepper'):
            checkout = self.gateway.checkout(self.intent, self.user, self.lot, 'token')
            return payu_callback(checkout, **overrides)

    def test_valid_callback_returns_gateway_payment_id(self):
        fields = self._callback(mihpayid='pay_777')
        self.assertEqual(self.gateway.verify_callback(fields, self.intent), 'pay_777')

    def test_tampered_amount(self):
        fields = self._callback()
        fields['amount'] = '1.00'
        with self.assertRaises(PaymentVerificationFailed):
            self.gateway.verify_callback(fields, self.intent)

    def test_failed_status_with_valid_hash(self):
        fields = self._callback(status='failure')
        with self.assertRaises(PaymentVerificationFailed):
            self.gateway.verify_callback(fields, self.intent)

    def test_callback_for_another_transaction(self):
        fields = self._callback(txnid='someone-elses-txn')
        with self.assertRaises(PaymentVerificationFailed):
            self.gateway.verify_callback(fields, self.intent)

    def test_missing_fields(self):
        fields = self._callback()
        del fields['hash']
        with self.assertRaises(PaymentVerificationFailed):
            self.gateway.verify_callback(fields, self.intent)


class RazorpayGatewayTests(TestCase):
    def setUp(self):
        self.client = mock.Mock()
        self.client.order.create.return_value = {'id': 'order_abc', 'amount': 5000}
        self.gateway = RazorpayGateway(client=self.client)
        self.user = make_user('ravi')
        self.lot = make_lot(make_user('admin', staff=True), price='50.00')
        make_category()

    def test_prepare_creates_order_and_records_reference(self):
        intent = self.gateway.prepare(make_intent(parking_lot_id=self.lot.pk), self.lot)

        self.assertEqual(intent.gateway_reference, 'order_abc')
        order = self.client.order.create.call_args.kwargs['data']
        self.assertEqual(order['amount'], 5000)
        self.assertEqual(order['receipt'], intent.transaction_id)

    def test_reference_survives_the_token(self):
        intent = self.gateway.prepare(make_intent(), self.lot)
        self.assertEqual(tokens.verify(tokens.issue(intent)).gateway_reference, 'order_abc')

    def test_verify_callback(self):
        intent = make_intent(gateway_reference='order_abc')
        fields = {
            'razorpay_order_id': 'order_abc',
            'razorpay_payment_id': 'pay_xyz',
            'razorpay_signature': 'sig',
        }
        self.assertEqual(self.gateway.verify_callback(fields, intent), 'pay_xyz')
        self.client.utility.verify_payment_signature.assert_called_once()

    def test_bad_signature(self):
        self.client.utility.verify_payment_signature.side_effect = razorpay.errors.SignatureVerificationError('bad')
        intent = make_intent(gateway_reference='order_abc')
        fields = {
            'razorpay_order_id': 'order_abc',
            'razorpay_payment_id': 'pay_xyz',
            'razorpay_signature': 'forged',
        }
        with self.assertRaises(PaymentVerificationFailed):
            self.gateway.verify_callback(fields, intent)

    def test_payment_for_another_order(self):
        intent = make_intent(gateway_reference='order_abc')
        fields = {
            'razorpay_order_id': 'order_other',
            'razorpay_payment_id': 'pay_xyz',
            'razorpay_signature': 'sig',
        }
        with self.assertRaises(PaymentVerificationFailed):
            self.gateway.verify_callback(fields, intent)


class GatewayRegistryTests(TestCase):
    def test_lookup(self):
        self.assertIsInstance(get_gateway('payu'), PayUGateway)
        self.assertIsInstance(get_gateway('razorpay'), RazorpayGateway)

    @override_settings(PAYMENT_GATEWAY='payu')
    def test_default_comes_from_settings(self):
        self.assertIsInstance(get_gateway(), PayUGateway)

    def test_unknown_gateway(self):
        with self.assertRaises(ValueError):
            get_gateway('paypal')

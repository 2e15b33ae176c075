# ==================== PAYMENTS/GATEWAYS.PY ====================
"""Payment gateway integrations.

A gateway builds the checkout payload handed to the payer and verifies the
callback it sends back. The callback hash proves payment; the payment intent
token proves what was paid for. Both are checked before a booking is created.
"""
import hashlib
import hmac
import logging
from dataclasses import replace
from decimal import Decimal
from urllib.parse import urlencode

from django.conf import settings

from utils.exceptions import PaymentVerificationFailed

logger = logging.getLogger(__name__)


def callback_url(path, token=None):
    url = f"{settings.BACKEND_URL.rstrip('/')}{path}"
    if token:
        url = f"{url}?{urlencode({'token': token})}"
    return url


class PaymentGateway:
    name = None
    required_callback_fields = ()

    def prepare(self, intent, lot):
        """Gateway-side setup before the token is signed; returns the intent to sign"""
        return intent

    def checkout(self, intent, user, lot, token):
        raise NotImplementedError

    def verify_callback(self, fields, intent):
        """Return the gateway payment id, or raise PaymentVerificationFailed"""
        raise NotImplementedError

    def _require_fields(self, fields):
        missing = [name for name in self.required_callback_fields if not fields.get(name)]
        if missing:
            logger.warning(f"{self.name} callback missing fields: {missing}")
            raise PaymentVerificationFailed(f"Gateway response is missing: {', '.join(missing)}")


class PayUGateway(PaymentGateway):
    """PayU hosted checkout with SHA-512 request/response hashes"""
    name = 'payu'
    required_callback_fields = ('status', 'txnid', 'amount', 'productinfo', 'firstname', 'email', 'hash')

    def __init__(self, key=None, salt=None, url=None):
        self.key = key if key is not None else settings.PAYU_KEY
        self.salt = salt if salt is not None else settings.PAYU_SALT
        self.url = url or settings.PAYU_URL

    @staticmethod
    def _sha512(value):
        return hashlib.sha512(value.encode('utf-8')).hexdigest()

    def request_hash(self, txnid, amount, productinfo, firstname, email):
        # key|txnid|amount|productinfo|firstname|email|udf1..udf5||||||salt
        return self._sha512(
            f"{self.key}|{txnid}|{amount}|{productinfo}|{firstname}|{email}|||||||||||{self.salt}"
        )

    def response_hash(self, status, txnid, amount, productinfo, firstname, email):
        # Reverse order: salt|status||||||udf5..udf1|email|firstname|productinfo|amount|txnid|key
        return self._sha512(
            f"{self.salt}|{status}|||||||||||{email}|{firstname}|{productinfo}|{amount}|{txnid}|{self.key}"
        )

    def checkout(self, intent, user, lot, token):
        amount = str(Decimal(lot.price).quantize(Decimal('0.01')))
        productinfo = f"Booking for {intent.company_name} at {lot.location}"
        firstname = user.first_name or user.username
        email = user.email or ''

        payload = {
            'key': self.key,
            'txnid': intent.transaction_id,
            'amount': amount,
            'productinfo': productinfo,
            'firstname': firstname,
            'email': email,
            'phone': str(user.phone_number or ''),
            'surl': callback_url('/webhooks/payu/success/', token),
            'furl': callback_url('/webhooks/payu/failure/'),
        }
        payload['hash'] = self.request_hash(intent.transaction_id, amount, productinfo, firstname, email)
        payload['payu_url'] = self.url
        return payload

    def verify_callback(self, fields, intent):
        self._require_fields(fields)

        expected = self.response_hash(
            fields['status'], fields['txnid'], fields['amount'],
            fields['productinfo'], fields['firstname'], fields['email'],
        )
        if not hmac.compare_digest(expected, str(fields['hash']).lower()):
            logger.error(f"PayU hash verification failed for txn {fields.get('txnid')}")
            raise PaymentVerificationFailed("Payment hash verification failed.")

        if fields['status'] != 'success':
            logger.warning(f"PayU reported status '{fields['status']}' for txn {fields['txnid']}")
            raise PaymentVerificationFailed(f"Payment status is {fields['status']}.")

        if fields['txnid'] != intent.transaction_id:
            logger.error(f"PayU txn {fields['txnid']} does not match token txn {intent.transaction_id}")
            raise PaymentVerificationFailed("Payment does not belong to this booking.")

        return str(fields.get('mihpayid') or fields['txnid'])


class RazorpayGateway(PaymentGateway):
    """Razorpay orders with HMAC-SHA256 payment signatures"""
    name = 'razorpay'
    required_callback_fields = ('razorpay_order_id', 'razorpay_payment_id', 'razorpay_signature')

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            import razorpay
            self._client = razorpay.Client(
                auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)
            )
        return self._client

    def prepare(self, intent, lot):
        """Create the Razorpay order; its id travels in the token as the gateway reference"""
        order = self.client.order.create(data={
            'amount': int(Decimal(lot.price) * 100),  # Amount in paise
            'currency': 'INR',
            'receipt': intent.transaction_id,
            'notes': {
                'parking_lot': str(lot.pk),
                'registration_number': intent.registration_number,
            },
        })
        logger.info(f"Razorpay order created: {order['id']} for txn {intent.transaction_id}")
        return replace(intent, gateway_reference=order['id'])

    def checkout(self, intent, user, lot, token):
        return {
            'key_id': settings.RAZORPAY_KEY_ID,
            'order_id': intent.gateway_reference,
            'txnid': intent.transaction_id,
            'amount': int(Decimal(lot.price) * 100),
            'currency': 'INR',
            'name': user.get_full_name() or user.username,
            'email': user.email or '',
            'contact': str(user.phone_number or ''),
            'description': f"Booking for {intent.company_name} at {lot.location}",
            'callback_url': callback_url('/webhooks/razorpay/callback/', token),
        }

    def verify_callback(self, fields, intent):
        import razorpay

        self._require_fields(fields)
        try:
            self.client.utility.verify_payment_signature({
                'razorpay_order_id': fields['razorpay_order_id'],
                'razorpay_payment_id': fields['razorpay_payment_id'],
                'razorpay_signature': fields['razorpay_signature'],
            })
        except razorpay.errors.SignatureVerificationError:
            logger.error(f"Signature verification failed for payment: {fields['razorpay_payment_id']}")
            raise PaymentVerificationFailed("Payment signature verification failed.")

        if fields['razorpay_order_id'] != intent.gateway_reference:
            logger.error(
                f"Razorpay order {fields['razorpay_order_id']} does not match token order {intent.gateway_reference}"
            )
            raise PaymentVerificationFailed("Payment does not belong to this booking.")

        return str(fields['razorpay_payment_id'])


GATEWAYS = {
    PayUGateway.name: PayUGateway,
    RazorpayGateway.name: RazorpayGateway,
}


def get_gateway(name=None):
    name = name or settings.PAYMENT_GATEWAY
    try:
        return GATEWAYS[name]()
    except KeyError:
        raise ValueError(f"Unknown payment gateway: {name}")

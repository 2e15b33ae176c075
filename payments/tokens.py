# ==================== PAYMENTS/TOKENS.PY ====================
"""Signed, time-limited booking intent carried across the gateway redirect.

Nothing is stored while a payment is pending: the token is the only record of
what the payer asked for, so everything is checked here before it is trusted.
"""
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone

import jwt
from jwt.utils import base64url_decode
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from utils.exceptions import (
    PaymentIntentExpired,
    PaymentIntentMalformed,
    PaymentIntentSignatureMismatch,
)

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'
TOKEN_TYPE = 'payment_intent'
REQUIRED_CLAIMS = [
    'user_id', 'parking_lot_id', 'category_id', 'registration_number',
    'company_name', 'in_time', 'txnid', 'exp', 'typ',
]


@dataclass(frozen=True)
class PaymentIntent:
    user_id: int
    parking_lot_id: int
    category_id: int
    registration_number: str
    company_name: str
    in_time: datetime
    transaction_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    gateway_reference: str = ''
    expires_at: datetime = None

    def claims(self):
        return {
            'user_id': self.user_id,
            'parking_lot_id': self.parking_lot_id,
            'category_id': self.category_id,
            'registration_number': self.registration_number,
            'company_name': self.company_name,
            'in_time': self.in_time.isoformat(),
            'txnid': self.transaction_id,
            'gateway_ref': self.gateway_reference,
            'typ': TOKEN_TYPE,
        }


def issue(intent, secret=None, ttl=None):
    """Sign the intent with an expiry; returns the opaque token string"""
    now = timezone.now()
    ttl = settings.PAYMENT_INTENT_TTL if ttl is None else ttl
    payload = intent.claims()
    payload['iat'] = int(now.timestamp())
    payload['exp'] = int((now + ttl).timestamp())
    return jwt.encode(payload, secret or settings.PAYMENT_INTENT_SECRET, algorithm=ALGORITHM)


def _decode_segment(segment):
    try:
        decoded = json.loads(base64url_decode(segment))
    except (ValueError, TypeError):
        raise PaymentIntentMalformed()
    if not isinstance(decoded, dict):
        raise PaymentIntentMalformed()
    return decoded


def verify(token, secret=None):
    """Return the PaymentIntent carried by ``token``.

    Raises PaymentIntentMalformed, PaymentIntentSignatureMismatch or
    PaymentIntentExpired, checked in that order. Only the header and payload
    segments can make a token malformed; anything wrong with the signature
    segment is a mismatch.
    """
    if not token or not isinstance(token, str):
        raise PaymentIntentMalformed()
    segments = token.split('.', 2)
    if len(segments) != 3 or not all(segments):
        raise PaymentIntentMalformed()

    header = _decode_segment(segments[0])
    _decode_segment(segments[1])
    if header.get('alg') != ALGORITHM:
        raise PaymentIntentMalformed()

    try:
        payload = jwt.decode(
            token,
            secret or settings.PAYMENT_INTENT_SECRET,
            algorithms=[ALGORITHM],
            leeway=settings.PAYMENT_INTENT_LEEWAY,
            options={'require': ['exp']},
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Expired payment intent token presented")
        raise PaymentIntentExpired()
    except (jwt.InvalidSignatureError, jwt.DecodeError):
        # Header and payload parsed above, so the signature segment is at fault.
        logger.warning("Payment intent token signature mismatch")
        raise PaymentIntentSignatureMismatch()
    except jwt.PyJWTError:
        raise PaymentIntentMalformed()

    missing = [claim for claim in REQUIRED_CLAIMS if payload.get(claim) in (None, '')]
    if missing or payload['typ'] != TOKEN_TYPE:
        logger.warning(f"Payment intent token missing claims: {missing}")
        raise PaymentIntentMalformed("Incomplete token data.")

    in_time = parse_datetime(str(payload['in_time']))
    if in_time is None:
        raise PaymentIntentMalformed("Invalid in_time in token.")

    try:
        return PaymentIntent(
            user_id=int(payload['user_id']),
            parking_lot_id=int(payload['parking_lot_id']),
            category_id=int(payload['category_id']),
            registration_number=str(payload['registration_number']),
            company_name=str(payload['company_name']),
            in_time=in_time,
            transaction_id=str(payload['txnid']),
            gateway_reference=str(payload.get('gateway_ref') or ''),
            expires_at=datetime.fromtimestamp(payload['exp'], tz=dt_timezone.utc),
        )
    except (TypeError, ValueError):
        raise PaymentIntentMalformed("Invalid token data.")

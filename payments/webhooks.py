# ==================== PAYMENTS/WEBHOOKS.PY ====================
import logging
from urllib.parse import urlencode

from django.conf import settings
from django.http import HttpResponseRedirect
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from utils.exceptions import (
    AlreadyBooked, BookingFailedSlotTaken, PaymentIntentExpired,
    PaymentIntentMalformed, PaymentIntentSignatureMismatch, PaymentVerificationFailed,
)
from .gateways import PayUGateway, RazorpayGateway
from .services import PaymentService

logger = logging.getLogger(__name__)


def booking_status_redirect(**params):
    """Send the payer back to the frontend booking status page"""
    url = f"{settings.FRONTEND_URL.rstrip('/')}/booking-status?{urlencode(params)}"
    return HttpResponseRedirect(url)


def _confirm_and_redirect(request, gateway):
    fields = request.POST.dict()
    token = request.GET.get('token', '')
    txnid = fields.get('txnid') or fields.get('razorpay_order_id', '')

    try:
        booking, created = PaymentService.confirm_payment(fields, token, gateway=gateway)
    except (PaymentIntentExpired, PaymentIntentMalformed, PaymentIntentSignatureMismatch):
        logger.warning(f"{gateway.name} callback with invalid token for txn {txnid}")
        return booking_status_redirect(status='failed', reason='invalid_token')
    except PaymentVerificationFailed as e:
        logger.error(f"{gateway.name} callback rejected for txn {txnid}: {e.detail}")
        return booking_status_redirect(status='failed', reason='hash_mismatch')
    except BookingFailedSlotTaken as e:
        return booking_status_redirect(status='failed', reason='slot_taken', payment_id=e.payment_id or '')
    except AlreadyBooked:
        logger.warning(f"{gateway.name} callback for txn {txnid} clashes with another user's booking")
        return booking_status_redirect(status='failed', reason='already_booked')
    except Exception as e:
        logger.error(f"{gateway.name} callback processing error for txn {txnid}: {str(e)}", exc_info=True)
        return booking_status_redirect(status='failed', reason='server_error')

    if created:
        logger.info(f"Booking {booking.id} created from {gateway.name} callback")
    return booking_status_redirect(status='success', txnid=txnid, booking=booking.id)


@csrf_exempt
@require_POST
def payu_success(request):
    """PayU surl: form POST of the payment result, token in the query string"""
    return _confirm_and_redirect(request, PayUGateway())


@csrf_exempt
@require_POST
def payu_failure(request):
    """PayU furl: the payment did not go through, nothing to book"""
    txnid = request.POST.get('txnid', '')
    logger.warning(
        f"PayU payment failed for txn {txnid}: {request.POST.get('status', '')} {request.POST.get('error_Message', '')}"
    )
    return booking_status_redirect(status='failed', reason='payment_declined', txnid=txnid)


@csrf_exempt
@require_POST
def razorpay_callback(request):
    """Razorpay checkout callback_url: order id, payment id and signature"""
    if 'error[code]' in request.POST:
        logger.warning(
            f"Razorpay payment failed: {request.POST.get('error[code]')} {request.POST.get('error[description]', '')}"
        )
        return booking_status_redirect(status='failed', reason='payment_declined')
    return _confirm_and_redirect(request, RazorpayGateway())

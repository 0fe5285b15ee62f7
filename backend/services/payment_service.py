"""Thin wrapper around Stripe PaymentIntents."""

import logging

import stripe

from backend.core import config
from backend.services.errors import InvalidInputError, PaymentError

logger = logging.getLogger(__name__)

PLACEHOLDER_KEY_PREFIX = 'sk_test_your'

STATUS_MESSAGES = {
    'succeeded': 'Payment processed successfully',
    'processing': 'Payment is processing',
    'requires_payment_method': 'Payment failed, please try another payment method',
    'requires_confirmation': 'Payment requires confirmation',
    'requires_action': 'Payment requires additional action',
}


def configure_stripe() -> bool:
    api_key = config.STRIPE_SECRET_KEY
    if api_key and not api_key.startswith(PLACEHOLDER_KEY_PREFIX):
        stripe.api_key = api_key
        logger.info('Stripe API key configured')
        return True

    logger.warning('Stripe API key not configured or is placeholder. Payment functionality may not work.')
    return False


def payment_status_message(status: str) -> str:
    return STATUS_MESSAGES.get(status, f'Payment status: {status}')


def create_payment_intent(amount: int, currency: str | None = None) -> dict:
    if amount is None or amount <= 0:
        raise InvalidInputError('Amount must be a positive number.')

    try:
        intent = stripe.PaymentIntent.create(
            amount=int(amount) * 100,
            currency=currency or config.STRIPE_CURRENCY,
        )
    except stripe.StripeError as exc:
        logger.error('Stripe error: %s', exc)
        raise PaymentError(f'Failed to create payment intent: {exc}') from exc

    return {
        'client_secret': intent.client_secret,
        'payment_intent_id': intent.id,
    }


def confirm_payment(payment_intent_id: str) -> dict:
    if not payment_intent_id or not payment_intent_id.strip():
        raise InvalidInputError('Payment intent id is required.')

    try:
        intent = stripe.PaymentIntent.retrieve(payment_intent_id.strip())
    except stripe.StripeError as exc:
        logger.error('Stripe error: %s', exc)
        raise PaymentError(f'Payment confirmation failed: {exc}') from exc

    return {
        'transaction_id': intent.id,
        'status': intent.status,
        'message': payment_status_message(intent.status),
        'amount': intent.amount / 100.0,
    }

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.auth.dependencies import get_current_user
from backend.core import config
from backend.models.user import User
from backend.services import payment_service

router = APIRouter(tags=['payments'])


class PaymentIntentRequest(BaseModel):
    amount: int = Field(gt=0)


class PaymentIntentResponse(BaseModel):
    client_secret: str | None = None
    payment_intent_id: str


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str


class PaymentResponse(BaseModel):
    transaction_id: str
    status: str
    message: str
    amount: float


@router.get('/config')
def stripe_config():
    return {'publishable_key': config.STRIPE_PUBLISHABLE_KEY}


@router.post('/create-payment-intent', response_model=PaymentIntentResponse)
def create_payment_intent(data: PaymentIntentRequest, current_user: User = Depends(get_current_user)):
    del current_user
    return payment_service.create_payment_intent(data.amount)


@router.post('/confirm-payment', response_model=PaymentResponse)
def confirm_payment(data: ConfirmPaymentRequest, current_user: User = Depends(get_current_user)):
    del current_user
    return payment_service.confirm_payment(data.payment_intent_id)

"""
Module 'checkout' (feature-first): point d'entrée public.
Réunit pricing, modèles typés, adaptateur Midtrans et orchestrateur.
"""

from .errors import (
    CheckoutError,
    InvalidInput,
    PersistenceFailure,
    DuplicateOrderId,
    GatewayRejected,
    GatewayUnreachable,
)
from .models import CheckoutRequest, CheckoutOutcome, CheckoutStage, CheckoutStep, PricedLine
from .pricing import compute_total
from .midtrans_client import GatewayConfig, PaymentSessionInitiator, get_payment_initiator
from .service import process_checkout, generate_external_order_id

__all__ = [
    # errors
    "CheckoutError",
    "InvalidInput",
    "PersistenceFailure",
    "DuplicateOrderId",
    "GatewayRejected",
    "GatewayUnreachable",
    # models
    "CheckoutRequest",
    "CheckoutOutcome",
    "CheckoutStage",
    "CheckoutStep",
    "PricedLine",
    # pricing
    "compute_total",
    # midtrans
    "GatewayConfig",
    "PaymentSessionInitiator",
    "get_payment_initiator",
    # service
    "process_checkout",
    "generate_external_order_id",
]

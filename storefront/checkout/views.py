# module storefront.checkout.views

"""Endpoint du checkout.
- POST /api/v1/checkout: panier + profil client => {orderId, snapToken} ou enveloppe d'échec.
Sécurité:
- optional_rate_limit: limite la fréquence d'ouverture de sessions de paiement.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from storefront.utils.rate_limit import optional_rate_limit
from storefront.checkout import service as checkout_service
from storefront.checkout.models import CheckoutRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])


@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout(request: Request):
    """Crée client + commande puis ouvre une session Midtrans Snap.
    - Entrée JSON: {"customer": {...}, "items": [{"product": {id, name, price}, "quantity": n}]}
    - Body illisible ou mal typé: 400 InvalidInput, aucune écriture.
    - Le service s'exécute dans le threadpool (appels Supabase/Midtrans bloquants).
    - Statut HTTP dérivé de la classification d'erreur (400/409/500/502/504).
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        outcome = checkout_service.invalid_request()
        return JSONResponse(outcome.response_body(), status_code=outcome.http_status)

    try:
        payload = CheckoutRequest.model_validate(body)
    except ValidationError as e:
        logger.info("checkout.invalid_payload errors=%s", e.error_count())
        outcome = checkout_service.invalid_request()
        return JSONResponse(outcome.response_body(), status_code=outcome.http_status)

    outcome = await run_in_threadpool(checkout_service.process_checkout, payload)
    return JSONResponse(outcome.response_body(), status_code=outcome.http_status)

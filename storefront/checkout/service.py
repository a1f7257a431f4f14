"""
Cas d'usage 'checkout': orchestre catalogue, pricing, clients, commandes et Midtrans.

Machine d'états strictement séquentielle par tentative:
  validating -> customer_upserted -> order_persisted -> lines_persisted -> session_opened -> completed
Tout échec est capturé ici et converti en CheckoutOutcome (jamais d'exception non classée).
Aucune relance. Après lines_persisted, un échec passerelle laisse la commande 'pending'
(commande orpheline, reprise par le balayage storefront.orders.service).
"""
import logging
import time
from typing import Dict, List, Optional
from uuid import uuid4

from storefront.customers import repository as customers_repository
from storefront.orders import repository as orders_repository
from storefront.products import repository as products_repository

from . import midtrans_client
from . import pricing
from .errors import CheckoutError, GatewayUnreachable, InvalidInput, PersistenceFailure
from .models import (
    CheckoutOutcome,
    CheckoutRequest,
    CheckoutStage,
    CheckoutStep,
    CustomerContact,
    CustomerProfile,
    PricedLine,
    ShippingSnapshot,
)

logger = logging.getLogger(__name__)

REQUIRED_CUSTOMER_FIELDS = ("name", "email", "phone", "address", "city")

# module storefront.checkout.service
def generate_external_order_id() -> str:
    """Identifiant de corrélation avec Midtrans, unique par tentative."""
    return f"ORDER-{int(time.time() * 1000)}-{uuid4().hex[:12]}"

def _price_from_product(product: Dict) -> int:
    # Montants entiers (IDR): un prix catalogue fractionnaire n'est jamais arrondi
    try:
        value = float(product.get("price"))
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid catalogue price for product {product.get('id')}")
    if not value.is_integer():
        raise InvalidInput(f"Non-integer catalogue price for product {product.get('id')}")
    return int(value)

def validate_customer(customer: CustomerProfile) -> None:
    missing = [f for f in REQUIRED_CUSTOMER_FIELDS if not getattr(customer, f)]
    if missing:
        raise InvalidInput(f"Missing customer fields: {', '.join(missing)}")

def price_cart(request: CheckoutRequest) -> List[PricedLine]:
    """
    Résout chaque ligne du panier contre le catalogue (prix serveur).
    - Panier vide, quantité <= 0, produit inconnu: InvalidInput
    - Catalogue injoignable: PersistenceFailure
    Aucune écriture n'est effectuée.
    """
    if not request.items:
        raise InvalidInput("Cart is empty")
    for item in request.items:
        if not item.product.id:
            raise InvalidInput("Product id is required")
        if item.quantity <= 0:
            raise InvalidInput(f"Invalid quantity for product {item.product.id}")

    catalogue = products_repository.get_products_map(item.product.id for item in request.items)
    lines: List[PricedLine] = []
    for item in request.items:
        product = catalogue.get(item.product.id)
        if not product:
            raise InvalidInput(f"Unknown product {item.product.id}")
        lines.append(
            PricedLine(
                product_id=item.product.id,
                name=str(product.get("name") or item.product.name or "Item"),
                unit_price=_price_from_product(product),
                quantity=item.quantity,
            )
        )
    return lines

def _rollback_order_header(order_id: str, external_order_id: str) -> None:
    if orders_repository.delete_order(order_id):
        logger.warning("checkout.rollback order header deleted order_id=%s external_order_id=%s", order_id, external_order_id)
    else:
        logger.error(
            "checkout.orphan order without lines order_id=%s external_order_id=%s",
            order_id,
            external_order_id,
        )

def _classify_unexpected(step: CheckoutStep, exc: Exception) -> CheckoutError:
    # Seule l'ouverture de session parle à la passerelle, le reste au store
    if step == CheckoutStep.OPEN_SESSION:
        return GatewayUnreachable("Unexpected payment gateway failure", detail=str(exc))
    return PersistenceFailure("Unexpected checkout failure", detail=str(exc))

def _failed(stage: CheckoutStage, step: CheckoutStep, error: CheckoutError, order_id: Optional[str], external_order_id: Optional[str]) -> CheckoutOutcome:
    logger.warning(
        "checkout.failed stage=%s step=%s error=%s external_order_id=%s detail=%s",
        stage.value,
        step.value,
        error.code,
        external_order_id,
        error.detail,
    )
    return CheckoutOutcome(
        success=False,
        stage=stage,
        failed_step=step,
        http_status=error.http_status,
        order_id=order_id,
        external_order_id=external_order_id,
        error=error.code,
        message=error.client_message,
    )

def invalid_request(message: str = "Invalid request data") -> CheckoutOutcome:
    """Enveloppe d'échec pour un body illisible (avant toute étape)."""
    return _failed(CheckoutStage.VALIDATING, CheckoutStep.VALIDATE, InvalidInput(message), None, None)

def process_checkout(
    request: CheckoutRequest,
    *,
    initiator: Optional[midtrans_client.PaymentSessionInitiator] = None,
    external_order_id: Optional[str] = None,
) -> CheckoutOutcome:
    """
    Exécute une tentative de checkout de bout en bout.
    - initiator: initiateur Midtrans injecté (par défaut construit depuis l'environnement)
    - external_order_id: forcé par l'appelant (tests), sinon généré
    Retour: CheckoutOutcome (succès => order_id + session_token;
    échec => stage = dernier état atteint, failed_step = étape en cours).
    """
    stage = CheckoutStage.VALIDATING
    step = CheckoutStep.VALIDATE
    order_id: Optional[str] = None
    try:
        validate_customer(request.customer)
        lines = price_cart(request)
        total_amount = pricing.compute_total(lines)
        if initiator is None:
            try:
                initiator = midtrans_client.get_payment_initiator()
            except ValueError as e:
                logger.error("checkout.gateway misconfigured: %s", e)
                raise GatewayUnreachable("Payment gateway not configured", detail=str(e)) from e
        external_order_id = external_order_id or generate_external_order_id()
        customer = request.customer

        step = CheckoutStep.UPSERT_CUSTOMER
        customer_id = customers_repository.upsert_customer(customer.email, customer.name, customer.phone)
        stage = CheckoutStage.CUSTOMER_UPSERTED

        step = CheckoutStep.CREATE_ORDER
        order_id = orders_repository.create_order(
            customer_id=customer_id,
            total_amount=total_amount,
            shipping=ShippingSnapshot.from_profile(customer),
            external_order_id=external_order_id,
        )
        stage = CheckoutStage.ORDER_PERSISTED
        logger.info("checkout.order_persisted order_id=%s external_order_id=%s total=%s", order_id, external_order_id, total_amount)

        step = CheckoutStep.ADD_LINES
        try:
            orders_repository.add_lines(order_id, lines)
        except Exception:
            _rollback_order_header(order_id, external_order_id)
            order_id = None
            raise
        stage = CheckoutStage.LINES_PERSISTED

        step = CheckoutStep.OPEN_SESSION
        token = initiator.open_session(
            external_order_id,
            total_amount,
            CustomerContact(first_name=customer.name, email=customer.email, phone=customer.phone),
            lines,
        )
        stage = CheckoutStage.SESSION_OPENED
    except CheckoutError as e:
        return _failed(stage, step, e, order_id, external_order_id)
    except Exception as e:
        logger.exception("Erreur process_checkout stage=%s step=%s", stage.value, step.value)
        return _failed(stage, step, _classify_unexpected(step, e), order_id, external_order_id)

    logger.info("checkout.completed order_id=%s external_order_id=%s", order_id, external_order_id)
    return CheckoutOutcome(
        success=True,
        stage=CheckoutStage.COMPLETED,
        order_id=order_id,
        session_token=token,
        external_order_id=external_order_id,
    )

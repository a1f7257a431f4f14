"""
Accès aux données des commandes (tables 'orders' et 'order_items').
Écritures via le client service-role.
"""
from typing import Any, Dict, Iterable, List
import logging

from postgrest.exceptions import APIError

import storefront.infra.supabase_client as supabase_client
from storefront.checkout.errors import DuplicateOrderId, InvalidInput, PersistenceFailure
from storefront.checkout.models import PricedLine, ShippingSnapshot

logger = logging.getLogger(__name__)

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_EXPIRED = "expired"
PAYMENT_METHOD = "midtrans"

# Code Postgres d'une violation de contrainte UNIQUE
UNIQUE_VIOLATION = "23505"

# module storefront.orders.repository
def create_order(
    *,
    customer_id: str,
    total_amount: int,
    shipping: ShippingSnapshot,
    external_order_id: str,
    payment_method: str = PAYMENT_METHOD,
) -> str:
    """
    Insère l'en-tête de commande (status 'pending') et retourne son id interne.
    - shipping: copie figée de l'adresse au moment de la commande
    - Soulève DuplicateOrderId si external_order_id existe déjà (UNIQUE midtrans_order_id).
    - Soulève PersistenceFailure pour tout autre rejet.
    """
    payload: Dict[str, Any] = {
        "user_id": customer_id,
        "total_amount": total_amount,
        "status": ORDER_STATUS_PENDING,
        "payment_method": payment_method,
        "midtrans_order_id": external_order_id,
        "shipping_address": shipping.model_dump(),
    }
    try:
        res = supabase_client.get_service_supabase().table("orders").insert(payload).execute()
    except APIError as e:
        if getattr(e, "code", None) == UNIQUE_VIOLATION:
            logger.warning("orders.repository.create_order duplicate external_order_id=%s", external_order_id)
            raise DuplicateOrderId(f"Duplicate order id {external_order_id}", detail=e.message) from e
        logger.exception("orders.repository.create_order failed external_order_id=%s", external_order_id)
        raise PersistenceFailure("Failed to create order", detail=e.message) from e
    except Exception as e:
        logger.exception("orders.repository.create_order failed external_order_id=%s", external_order_id)
        raise PersistenceFailure("Failed to create order", detail=str(e)) from e

    rows = res.data or []
    row = rows[0] if isinstance(rows, list) and rows else None
    if not row or not row.get("id"):
        logger.error("orders.repository.create_order returned no row external_order_id=%s", external_order_id)
        raise PersistenceFailure("Failed to create order")
    return str(row["id"])

def add_lines(order_id: str, lines: Iterable[PricedLine]) -> None:
    """
    Insère toutes les lignes de la commande en un seul appel (batch).
    Une commande sans ligne est invalide: un batch vide est refusé.
    """
    rows: List[Dict[str, Any]] = [
        {
            "order_id": order_id,
            "product_id": line.product_id,
            "quantity": line.quantity,
            "price": line.unit_price,
        }
        for line in lines
    ]
    if not rows:
        raise InvalidInput("Order must contain at least one line")
    try:
        supabase_client.get_service_supabase().table("order_items").insert(rows).execute()
    except Exception as e:
        logger.exception("orders.repository.add_lines failed order_id=%s", order_id)
        raise PersistenceFailure("Failed to create order items", detail=str(e)) from e

def delete_order(order_id: str) -> bool:
    """
    Supprime un en-tête de commande (compensation quand l'insertion des lignes échoue).
    Retourne False si la suppression échoue (commande orpheline).
    """
    try:
        (
            supabase_client.get_service_supabase()
            .table("orders")
            .delete()
            .eq("id", order_id)
            .execute()
        )
        return True
    except Exception:
        logger.exception("orders.repository.delete_order failed order_id=%s", order_id)
        return False

def expire_pending_before(cutoff_iso: str) -> List[dict]:
    """
    Passe en 'expired' les commandes 'pending' créées avant cutoff_iso (ISO 8601).
    Retourne les lignes modifiées.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .update({"status": ORDER_STATUS_EXPIRED})
            .eq("status", ORDER_STATUS_PENDING)
            .lt("created_at", cutoff_iso)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.expire_pending_before failed cutoff=%s", cutoff_iso)
        raise PersistenceFailure("Failed to expire pending orders", detail=str(e)) from e
    return res.data or []

"""
Registre des clients (table 'users').
Upsert idempotent par email: la contrainte UNIQUE(email) côté base résout les conflits
(merge-on-write), pas de lecture-puis-écriture côté application.
"""
from typing import Any, Dict
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.checkout.errors import InvalidInput, PersistenceFailure

logger = logging.getLogger(__name__)

# module storefront.customers.repository
def upsert_customer(email: str, name: str, phone: str) -> str:
    """
    Crée ou met à jour le client identifié par son email et retourne son id.
    - email obligatoire (la validation de format reste à l'appelant)
    - en cas de conflit sur email: name/phone écrasés par les nouvelles valeurs
    - Soulève PersistenceFailure si l'écriture est rejetée.
    """
    if not (email or "").strip():
        raise InvalidInput("Customer email is required")
    payload: Dict[str, Any] = {"email": email, "name": name, "phone": phone}
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .upsert(payload, on_conflict="email")
            .execute()
        )
    except Exception as e:
        logger.exception("customers.repository.upsert_customer failed")
        raise PersistenceFailure("Failed to create user", detail=str(e)) from e

    rows = res.data or []
    row = rows[0] if isinstance(rows, list) and rows else None
    if not row or not row.get("id"):
        logger.error("customers.repository.upsert_customer returned no row")
        raise PersistenceFailure("Failed to create user")
    return str(row["id"])

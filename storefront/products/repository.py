"""
Accès aux données du catalogue (table 'products').
Lecture via le client anon, création via le client service-role.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.checkout.errors import PersistenceFailure

logger = logging.getLogger(__name__)

# module storefront.products.repository
def list_products(category: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
    """
    Liste les produits, les plus récents d'abord.
    - category: filtre exact, ignoré si vide ou 'all'
    - limit: nombre max de lignes
    - Soulève PersistenceFailure si Supabase rejette la requête.
    """
    try:
        query = supabase_client.get_supabase().table("products").select("*")
        if category and category != "all":
            query = query.eq("category", category)
        if limit:
            query = query.limit(int(limit))
        res = query.order("created_at", desc=True).execute()
        return res.data or []
    except Exception as e:
        logger.exception("products.repository.list_products failed category=%s", category)
        raise PersistenceFailure("Failed to list products", detail=str(e)) from e

def get_products_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """
    Retourne {id: produit} pour les IDs demandés (id, name, price).
    Les IDs inconnus sont simplement absents du dict.
    """
    wanted = sorted({str(i) for i in ids if i})
    if not wanted:
        return {}
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select("id, name, price")
            .in_("id", wanted)
            .execute()
        )
    except Exception as e:
        logger.exception("products.repository.get_products_map failed ids=%s", wanted)
        raise PersistenceFailure("Failed to load products", detail=str(e)) from e
    return {str(p.get("id")): p for p in (res.data or [])}

def create_product(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insère un produit et retourne la ligne créée (id, created_at inclus).
    Soulève PersistenceFailure si Supabase rejette l'écriture.
    """
    try:
        res = supabase_client.get_service_supabase().table("products").insert(row).execute()
    except Exception as e:
        logger.exception("products.repository.create_product failed name=%s", row.get("name"))
        raise PersistenceFailure("Failed to create product", detail=str(e)) from e
    if not res.data:
        raise PersistenceFailure("Failed to create product", detail="empty insert result")
    logger.info("products.created id=%s", res.data[0].get("id"))
    return res.data[0]

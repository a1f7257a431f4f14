"""Réconciliation des commandes orphelines.
Une commande reste 'pending' sans session de paiement si l'ouverture de session échoue
après persistance. Le balayage expire les 'pending' plus vieilles que le TTL configuré.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from storefront.config import PENDING_ORDER_TTL_MINUTES
from storefront.orders import repository

logger = logging.getLogger(__name__)

def expire_stale_pending_orders(max_age_minutes: Optional[int] = None, now: Optional[datetime] = None) -> int:
    """Expire les commandes 'pending' créées avant now - max_age_minutes.
    Retourne le nombre de commandes passées en 'expired'.
    """
    ttl = PENDING_ORDER_TTL_MINUTES if max_age_minutes is None else max_age_minutes
    if ttl <= 0:
        raise ValueError("max_age_minutes doit être > 0")
    reference = now or datetime.now(timezone.utc)
    cutoff = (reference - timedelta(minutes=ttl)).isoformat()
    expired = repository.expire_pending_before(cutoff)
    logger.info("orders.sweep expired=%s cutoff=%s", len(expired), cutoff)
    return len(expired)

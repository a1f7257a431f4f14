"""
Calcul du total panier (pur: pas de DB, pas de passerelle).
"""
from typing import Iterable

from .errors import InvalidInput
from .models import PricedLine

# module storefront.checkout.pricing
def compute_total(lines: Iterable[PricedLine]) -> int:
    """
    Somme des unit_price * quantity.
    - Soulève InvalidInput si le panier est vide, si une quantité <= 0 ou si un prix < 0.
    """
    total = 0
    count = 0
    for line in lines:
        if line.quantity <= 0:
            raise InvalidInput(f"Invalid quantity for product {line.product_id}")
        if line.unit_price < 0:
            raise InvalidInput(f"Invalid price for product {line.product_id}")
        total += line.unit_price * line.quantity
        count += 1
    if not count:
        raise InvalidInput("Cart is empty")
    return total

"""
Balayage des commandes orphelines: passe en 'expired' les commandes 'pending'
plus vieilles que PENDING_ORDER_TTL_MINUTES (ou --minutes).

Usage:
    python expire_pending_orders.py [--minutes 1440]
"""
import argparse
import logging

from storefront.orders.service import expire_stale_pending_orders

def main():
    parser = argparse.ArgumentParser(description="Expire les commandes pending sans paiement.")
    parser.add_argument("--minutes", type=int, default=None, help="Âge minimal en minutes (défaut: config)")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    count = expire_stale_pending_orders(args.minutes)
    print(f"Commandes expirées: {count}")

if __name__ == "__main__":
    main()

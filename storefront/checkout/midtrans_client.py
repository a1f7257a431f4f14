"""
Adaptateur Midtrans Snap: ouvre une session de paiement pour une commande.
La configuration (clé serveur, URL, timeout) est injectée via GatewayConfig.
Aucune relance automatique: la passerelle n'expose pas de clé d'idempotence.
"""
import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable

import requests
from pydantic import ValidationError

from .errors import GatewayRejected, GatewayUnreachable
from .models import (
    CustomerContact,
    ItemDetail,
    PricedLine,
    SnapTransactionRequest,
    SnapTransactionResponse,
    TransactionDetails,
)

logger = logging.getLogger(__name__)

SANDBOX_API_URL = "https://app.sandbox.midtrans.com/snap/v1/transactions"


@dataclass(frozen=True)
class GatewayConfig:
    server_key: str
    api_url: str = SANDBOX_API_URL
    timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        # Lecture au moment de l'appel pour rester patchable en tests
        from storefront import config
        return cls(
            server_key=config.MIDTRANS_SERVER_KEY,
            api_url=config.MIDTRANS_API_URL or SANDBOX_API_URL,
            timeout_seconds=config.MIDTRANS_TIMEOUT_SECONDS,
        )


class PaymentSessionInitiator:
    def __init__(self, config: GatewayConfig):
        if not config.server_key:
            raise ValueError("MIDTRANS_SERVER_KEY manquant")
        if config.timeout_seconds <= 0:
            raise ValueError("timeout_seconds doit être > 0")
        self.config = config

    def _auth_header(self) -> str:
        # Basic auth Midtrans: "<server_key>:" encodé en base64 (mot de passe vide)
        credential = base64.b64encode(f"{self.config.server_key}:".encode("utf-8")).decode("ascii")
        return f"Basic {credential}"

    @staticmethod
    def build_request(
        external_order_id: str,
        total_amount: int,
        customer: CustomerContact,
        lines: Iterable[PricedLine],
    ) -> SnapTransactionRequest:
        """
        Construit la transaction Snap.
        item_details est indicatif pour la passerelle (fraude/affichage), non revalidé ici.
        """
        return SnapTransactionRequest(
            transaction_details=TransactionDetails(order_id=external_order_id, gross_amount=total_amount),
            customer_details=customer,
            item_details=[
                ItemDetail(id=line.product_id, price=line.unit_price, quantity=line.quantity, name=line.name)
                for line in lines
            ],
        )

    def open_session(
        self,
        external_order_id: str,
        total_amount: int,
        customer: CustomerContact,
        lines: Iterable[PricedLine],
    ) -> str:
        """
        Un seul POST vers Snap, retourne le token de session.
        - Timeout / erreur réseau: GatewayUnreachable
        - Réponse non 2xx (ou sans token): GatewayRejected avec le payload d'erreur
        """
        payload = self.build_request(external_order_id, total_amount, customer, lines)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": self._auth_header(),
        }
        try:
            resp = requests.post(
                self.config.api_url,
                json=payload.model_dump(),
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.Timeout as e:
            logger.error("midtrans.open_session timeout order_id=%s", external_order_id)
            raise GatewayUnreachable("Payment gateway timeout", detail=str(e)) from e
        except requests.RequestException as e:
            logger.error("midtrans.open_session network error order_id=%s: %s", external_order_id, e)
            raise GatewayUnreachable("Payment gateway unreachable", detail=str(e)) from e

        body = _json_or_raw(resp)
        if not resp.ok:
            logger.error("Midtrans error status=%s order_id=%s body=%s", resp.status_code, external_order_id, body)
            raise GatewayRejected("Failed to create payment", detail=body, status_code=resp.status_code)
        try:
            parsed = SnapTransactionResponse.model_validate(body)
        except ValidationError as e:
            logger.error("Midtrans response without token order_id=%s body=%s", external_order_id, body)
            raise GatewayRejected("Invalid payment gateway response", detail=body, status_code=resp.status_code) from e
        return parsed.token


def _json_or_raw(resp: requests.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {"raw": (resp.text or "")[:500]}
    return data if isinstance(data, dict) else {"raw": data}


def get_payment_initiator() -> PaymentSessionInitiator:
    """Fabrique un initiateur à partir de la configuration d'environnement."""
    return PaymentSessionInitiator(GatewayConfig.from_env())

"""
Taxonomie des erreurs du checkout.
Chaque erreur porte un `code` stable (exposé au client) et un statut HTTP;
le détail technique (`detail`) reste côté logs.
"""
from typing import Any, Optional


class CheckoutError(Exception):
    code = "CheckoutError"
    http_status = 500
    public_message = "Checkout failed"

    def __init__(self, message: str = "", detail: Optional[Any] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.detail = detail

    @property
    def client_message(self) -> str:
        """Message renvoyé au client: générique sauf pour les erreurs corrigibles côté client."""
        return self.public_message


class InvalidInput(CheckoutError):
    code = "InvalidInput"
    http_status = 400
    public_message = "Invalid request data"

    @property
    def client_message(self) -> str:
        return self.message


class PersistenceFailure(CheckoutError):
    code = "PersistenceFailure"
    http_status = 500
    public_message = "Failed to save order"


class DuplicateOrderId(CheckoutError):
    code = "DuplicateOrderId"
    http_status = 409
    public_message = "Order identifier already used, please restart checkout"


class GatewayRejected(CheckoutError):
    code = "GatewayRejected"
    http_status = 502
    public_message = "Failed to create payment"

    def __init__(self, message: str = "", detail: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(message, detail)
        self.status_code = status_code


class GatewayUnreachable(CheckoutError):
    code = "GatewayUnreachable"
    http_status = 504
    public_message = "Payment gateway unavailable"

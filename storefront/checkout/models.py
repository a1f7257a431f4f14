"""
Modèles typés aux frontières du checkout (pydantic v2).
- Entrée HTTP: CheckoutRequest (customer + items)
- Interne: PricedLine (prix serveur), ShippingSnapshot
- Passerelle Midtrans Snap: SnapTransactionRequest / SnapTransactionResponse
- Sortie: CheckoutOutcome (enveloppe succès/échec)
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ProductRef(BaseModel):
    # Le prix envoyé par le client est indicatif: le prix catalogue fait foi
    id: str
    name: str = ""
    price: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return str(v).strip() if v is not None else ""


class CartLine(BaseModel):
    product: ProductRef
    quantity: int


class CustomerProfile(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""

    @field_validator("name", "email", "phone", "address", "city", "postal_code", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> str:
        return str(v).strip() if v is not None else ""


class CheckoutRequest(BaseModel):
    customer: CustomerProfile
    items: List[CartLine] = Field(default_factory=list)


class PricedLine(BaseModel):
    product_id: str
    name: str
    unit_price: int
    quantity: int

    @property
    def extension(self) -> int:
        return self.unit_price * self.quantity


class ShippingSnapshot(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    postal_code: str = ""

    @classmethod
    def from_profile(cls, profile: CustomerProfile) -> "ShippingSnapshot":
        return cls(
            name=profile.name,
            phone=profile.phone,
            address=profile.address,
            city=profile.city,
            postal_code=profile.postal_code,
        )


class CustomerContact(BaseModel):
    first_name: str
    email: str
    phone: str = ""


class TransactionDetails(BaseModel):
    order_id: str
    gross_amount: int


class ItemDetail(BaseModel):
    id: str
    price: int
    quantity: int
    name: str


class SnapTransactionRequest(BaseModel):
    transaction_details: TransactionDetails
    customer_details: CustomerContact
    item_details: List[ItemDetail]


class SnapTransactionResponse(BaseModel):
    token: str = Field(min_length=1)
    redirect_url: Optional[str] = None


class CheckoutStage(str, Enum):
    VALIDATING = "validating"
    CUSTOMER_UPSERTED = "customer_upserted"
    ORDER_PERSISTED = "order_persisted"
    LINES_PERSISTED = "lines_persisted"
    SESSION_OPENED = "session_opened"
    COMPLETED = "completed"


class CheckoutStep(str, Enum):
    # Étape en cours d'exécution au moment d'un échec
    VALIDATE = "validate"
    UPSERT_CUSTOMER = "upsert_customer"
    CREATE_ORDER = "create_order"
    ADD_LINES = "add_lines"
    OPEN_SESSION = "open_session"


class CheckoutOutcome(BaseModel):
    """
    Résultat d'une tentative de checkout.
    - success: True => order_id + session_token renseignés
    - échec: error (classification stable), message générique, stage = dernier état atteint, failed_step = étape qui a échoué
    """
    success: bool
    stage: CheckoutStage
    failed_step: Optional[CheckoutStep] = None
    http_status: int = 200
    order_id: Optional[str] = None
    session_token: Optional[str] = None
    external_order_id: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None

    def response_body(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "orderId": self.order_id, "snapToken": self.session_token}
        return {
            "success": False,
            "error": self.error,
            "message": self.message,
            "stage": self.stage.value,
            "failedStep": self.failed_step.value if self.failed_step else None,
        }

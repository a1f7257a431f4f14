from typing import Any, Optional

from pydantic import BaseModel, field_validator


class ProductCreate(BaseModel):
    """Body de création produit; la présence des champs requis est vérifiée par la vue."""
    name: str = ""
    description: str = ""
    price: Optional[float] = None
    image_url: str = ""
    category: str = ""
    stock: Optional[int] = None

    @field_validator("name", "description", "image_url", "category", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> str:
        return str(v).strip() if v is not None else ""

    def missing_fields(self) -> list:
        missing = [f for f in ("name", "description", "image_url", "category") if not getattr(self, f)]
        if not self.price or self.price < 0:
            missing.append("price")
        return missing

    def to_row(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "image_url": self.image_url,
            "category": self.category,
            "stock": self.stock or 0,
        }

"""API response models for catalog and exchange-rate endpoints."""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.product import Product, ProductOption


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ProductPayload(BaseModel):
    """Product as returned by /products and /products/{id}."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Catalog product id")
    name: str = ""
    code: Optional[str] = None
    unit: Optional[str] = None
    vat_rate: Optional[Decimal] = Field(None, description="VAT percentage")
    price: Optional[Decimal] = Field(None, description="List price, optional")

    @field_validator("code", "unit", "vat_rate", "price", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_option(self) -> ProductOption:
        return ProductOption(
            id=self.id,
            name=self.name,
            code=self.code or "",
            unit=self.unit,
            vat_rate=self.vat_rate,
            price=self.price,
        )

    def to_product(self) -> Product:
        return Product(
            id=self.id,
            code=self.code or "",
            name=self.name,
            unit=self.unit,
            vat_rate=self.vat_rate,
        )


class ExchangeRatePayload(BaseModel):
    """Body of /exchange-rates/current/{currency}."""

    model_config = ConfigDict(extra="ignore")

    currency: Optional[str] = None
    rate: Optional[Decimal] = None

    @field_validator("rate", mode="before")
    @classmethod
    def _blank_rate(cls, value: Any) -> Any:
        return _blank_to_none(value)

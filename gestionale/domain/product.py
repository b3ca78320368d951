"""
Product Domain Model

Catalog entry as seen by the order core (read-only here).
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Product(BaseModel):
    """
    Product domain model - represents a product in the catalog

    Fields:
        id: Internal product ID (primary key)
        nome: Product name
        descrizione: Product description (optional)
        prezzo: Catalog unit price
        disponibile: Whether the product can be ordered right now
        categoria: Product category (optional)

        # Bounds for configured (client-priced) lines
        prezzo_minimo: Lowest accepted unit price, None = unbounded
        prezzo_massimo: Highest accepted unit price, None = unbounded
    """

    id: int = Field(..., description="Internal product ID")
    nome: str = Field(..., description="Product name")
    descrizione: Optional[str] = Field(None, description="Product description")
    prezzo: Decimal = Field(..., description="Catalog unit price", ge=0)
    disponibile: bool = Field(True, description="Whether product is orderable")
    categoria: Optional[str] = Field(None, description="Product category")

    prezzo_minimo: Optional[Decimal] = Field(None, description="Minimum configured unit price", ge=0)
    prezzo_massimo: Optional[Decimal] = Field(None, description="Maximum configured unit price", ge=0)

    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    @property
    def has_price_bounds(self) -> bool:
        """Check if configured lines of this product are bounded"""
        return self.prezzo_minimo is not None or self.prezzo_massimo is not None

    def accepts_unit_price(self, unit_price: Decimal) -> bool:
        """Check a client-computed unit price against the stored bounds"""
        if self.prezzo_minimo is not None and unit_price < self.prezzo_minimo:
            return False
        if self.prezzo_massimo is not None and unit_price > self.prezzo_massimo:
            return False
        return True

"""
Order Domain Models

Represents order-related entities: orders, their line items, the customer
snapshot joined on reads, and the request schemas used to create orders and
change their status.
"""
import json
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Any, List, Optional
from datetime import datetime, date
from decimal import Decimal


class OrderStatus(str, Enum):
    """Order lifecycle status, stored with the Italian values of the schema"""

    PENDING = "pendente"
    PROCESSING = "in_lavorazione"
    SHIPPED = "spedito"
    DELIVERED = "consegnato"
    CANCELLED = "annullato"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class OrderItem(BaseModel):
    """
    Order line item - one product, a quantity and the resolved unit price

    Fields:
        id: Line item ID
        ordine_id: Parent order ID
        prodotto_id: Product catalog ID
        nome: Product name (from JOIN with the catalog)
        quantita: Number of units ordered
        prezzo_unitario: Price per unit at order time
        note_configurazione: Options chosen for a configured product (JSON text)
    """

    id: int = Field(..., description="Order item ID")
    ordine_id: int = Field(..., description="Parent order ID")
    prodotto_id: int = Field(..., description="Product catalog ID")
    nome: Optional[str] = Field(None, description="Product name (from JOIN)")
    quantita: int = Field(..., description="Quantity ordered", ge=1)
    prezzo_unitario: Decimal = Field(..., description="Price per unit", ge=0)
    note_configurazione: Optional[str] = Field(None, description="Configuration payload")

    model_config = ConfigDict(from_attributes=True)

    @property
    def totale_riga(self) -> Decimal:
        """Line total (unit price x quantity)"""
        return self.prezzo_unitario * self.quantita

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data['prezzo_unitario'] = float(self.prezzo_unitario)
        data['totale_riga'] = float(self.totale_riga)
        return data


class OrderCustomer(BaseModel):
    """
    Customer contact fields joined onto an order (lightweight)

    The order also keeps its own contact snapshot; this is the current
    customer record.
    """

    id: int = Field(..., description="Customer ID")
    email: Optional[str] = Field(None, description="Customer email")
    nome: Optional[str] = Field(None, description="Customer first name")
    cognome: Optional[str] = Field(None, description="Customer surname")
    cellulare: Optional[str] = Field(None, description="Customer phone")

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    """
    Order domain model - a customer order with its line items

    Fields:
        id: Internal order ID
        cliente_id: Reference to customer

        # Contact snapshot (kept even if the customer changes later)
        email, nome, cognome, cellulare

        # Delivery
        data_consegna: Requested delivery date
        luogo_consegna: Delivery location

        totale: Computed order total
        stato: Order status (OrderStatus)
        note_richieste: Free-text customer requests
        created_at / updated_at: Timestamps

        # Related data (from JOINs)
        cliente: Current customer record
        prodotti: Line items
    """

    id: int = Field(..., description="Internal order ID")
    cliente_id: Optional[int] = Field(None, description="Customer ID")

    email: str = Field(..., description="Contact email at order time")
    nome: str = Field(..., description="Contact first name at order time")
    cognome: str = Field(..., description="Contact surname at order time")
    cellulare: str = Field(..., description="Contact phone at order time")

    data_consegna: date = Field(..., description="Delivery date")
    luogo_consegna: str = Field(..., description="Delivery location")

    totale: Decimal = Field(..., description="Total order amount", ge=0)
    stato: OrderStatus = Field(OrderStatus.PENDING, description="Order status")
    note_richieste: Optional[str] = Field(None, description="Customer requests")

    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    cliente: Optional[OrderCustomer] = Field(None, description="Customer (from JOIN)")
    prodotti: List[OrderItem] = Field(default_factory=list, description="Order items")

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        """Number of line items"""
        return len(self.prodotti)

    @property
    def total_quantity(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantita for item in self.prodotti)

    @property
    def contact_email(self) -> str:
        """Where customer mail goes: the customer record, else the snapshot"""
        if self.cliente and self.cliente.email:
            return self.cliente.email
        return self.email

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Decimals become floats and dates ISO strings for JSON responses.
        """
        data = self.model_dump()

        data['item_count'] = self.item_count
        data['total_quantity'] = self.total_quantity

        data['stato'] = self.stato.value
        data['totale'] = float(self.totale)
        data['data_consegna'] = self.data_consegna.isoformat()
        if self.created_at:
            data['created_at'] = self.created_at.isoformat()
        if self.updated_at:
            data['updated_at'] = self.updated_at.isoformat()

        data['prodotti'] = [item.to_dict() for item in self.prodotti]

        return data


# ============================================================================
# Request schemas
# ============================================================================

class CartItem(BaseModel):
    """
    One entry of a submitted cart

    quantita is accepted as sent (number, numeric string or missing) and
    coerced by the pricing engine.
    """
    prodotto_id: int
    quantita: Any = None
    note_configurazione: Optional[str] = None
    prezzo_totale: Optional[Decimal] = None

    @field_validator('note_configurazione', mode='before')
    @classmethod
    def normalize_configuration(cls, value):
        # Frontends send either the JSON text or the options object itself
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        if isinstance(value, (bool, int, float)):
            return json.dumps(value) if value else None
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_configured(self) -> bool:
        return bool(self.note_configurazione)


REQUIRED_ORDER_FIELDS = ('email', 'nome', 'cognome', 'cellulare', 'data_consegna', 'luogo_consegna')


class OrderCreate(BaseModel):
    """
    Schema for creating a new order

    Required fields are declared optional so that missing ones reach the
    order service, which reports them all at once as a ValidationError.
    """
    email: Optional[str] = None
    nome: Optional[str] = None
    cognome: Optional[str] = None
    cellulare: Optional[str] = None
    data_consegna: Optional[date] = None
    luogo_consegna: Optional[str] = None
    prodotti: Optional[List[CartItem]] = None
    cliente_id: Optional[int] = None
    note_richieste: Optional[str] = None

    @field_validator('data_consegna', mode='before')
    @classmethod
    def blank_date_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or blank"""
        missing = []
        for name in REQUIRED_ORDER_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


class OrderStatusUpdate(BaseModel):
    """Schema for changing an order status (validated by the order service)"""
    stato: Optional[str] = None

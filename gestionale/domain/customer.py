"""
Customer Domain Model

Customers are created lazily during order placement and matched by email.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class Customer(BaseModel):
    """
    Customer domain model

    Fields:
        id: Internal customer ID
        email: Unique contact email (the identity used for matching)
        nome / cognome: First name / surname
        cellulare: Mobile phone
        indirizzo: Address (the first delivery location for lazy customers)
        note: Free-text notes
    """

    id: int = Field(..., description="Customer ID")
    email: str = Field(..., description="Customer email (unique)")
    nome: str = Field(..., description="First name")
    cognome: str = Field(..., description="Surname")
    cellulare: Optional[str] = Field(None, description="Mobile phone")
    indirizzo: Optional[str] = Field(None, description="Address")
    note: Optional[str] = Field(None, description="Notes")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class CustomerCreate(BaseModel):
    """Schema for creating a new customer"""
    email: str
    nome: str
    cognome: str
    cellulare: Optional[str] = None
    indirizzo: Optional[str] = None
    note: Optional[str] = None

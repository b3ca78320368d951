"""
Product catalog table
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, DECIMAL, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gestionale.core.database import Base


class Product(Base):
    """
    Catalog products
    """
    __tablename__ = "prodotti"
    __table_args__ = (
        CheckConstraint("prezzo >= 0", name="ck_prodotti_prezzo_non_negativo"),
        CheckConstraint(
            "prezzo_minimo IS NULL OR prezzo_massimo IS NULL OR prezzo_minimo <= prezzo_massimo",
            name="ck_prodotti_limiti_prezzo",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    nome = Column(String(255), nullable=False)
    descrizione = Column(Text)
    categoria = Column(String(100), index=True)

    prezzo = Column(DECIMAL(10, 2), nullable=False)
    disponibile = Column(Boolean, nullable=False, default=True, server_default="true")

    # Bounds for configured products priced by the client
    prezzo_minimo = Column(DECIMAL(10, 2))
    prezzo_massimo = Column(DECIMAL(10, 2))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    order_items = relationship("OrderItem", back_populates="product")

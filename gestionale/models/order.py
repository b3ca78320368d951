"""
Order tables: ordini and ordini_prodotti
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, DECIMAL, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gestionale.core.database import Base
from gestionale.domain.order import OrderStatus

ORDER_STATUS_VALUES = OrderStatus.values()


class Order(Base):
    """
    Orders, with the contact snapshot taken when the order was placed
    """
    __tablename__ = "ordini"
    __table_args__ = (
        CheckConstraint(
            "stato IN (" + ", ".join(f"'{value}'" for value in ORDER_STATUS_VALUES) + ")",
            name="ck_ordini_stato",
        ),
        CheckConstraint("totale >= 0", name="ck_ordini_totale_non_negativo"),
    )

    id = Column(Integer, primary_key=True, index=True)

    cliente_id = Column(Integer, ForeignKey("clienti.id"), index=True)

    # Contact snapshot
    email = Column(String(255), nullable=False)
    nome = Column(String(100), nullable=False)
    cognome = Column(String(100), nullable=False)
    cellulare = Column(String(50), nullable=False)

    # Delivery
    data_consegna = Column(Date, nullable=False, index=True)
    luogo_consegna = Column(Text, nullable=False)

    totale = Column(DECIMAL(10, 2), nullable=False)
    stato = Column(String(20), nullable=False, default=OrderStatus.PENDING.value,
                   server_default=OrderStatus.PENDING.value, index=True)
    note_richieste = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """
    Line items of each order
    """
    __tablename__ = "ordini_prodotti"
    __table_args__ = (
        CheckConstraint("quantita > 0", name="ck_ordini_prodotti_quantita_positiva"),
        CheckConstraint("prezzo_unitario >= 0", name="ck_ordini_prodotti_prezzo_non_negativo"),
    )

    id = Column(Integer, primary_key=True, index=True)
    ordine_id = Column(Integer, ForeignKey("ordini.id", ondelete="CASCADE"), index=True, nullable=False)
    prodotto_id = Column(Integer, ForeignKey("prodotti.id"), index=True, nullable=False)

    quantita = Column(Integer, nullable=False)
    prezzo_unitario = Column(DECIMAL(10, 2), nullable=False)
    note_configurazione = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")

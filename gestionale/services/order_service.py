"""
Order Service
Order creation transaction and status changes

Steps of create_order:
1. Validate required fields and cart
2. Open one connection (one transaction)
3. Resolve customer (explicit ID, match by email, or create)
4. Price and validate items (catalog rows share-locked)
5. Insert order
6. Insert line items
7. Commit, or roll back everything on any failure
8. Re-read the committed order with customer and items

Notifications are not sent from here: the API layer queues them after the
response so their outcome never changes the order's.
"""
import logging
from typing import Callable, List, Optional

import psycopg2

from gestionale.core.database import get_db_connection_dict
from gestionale.core.exceptions import (
    CustomerNotFound,
    OrderError,
    OrderNotFound,
    StorageError,
    ValidationError,
)
from gestionale.domain.customer import CustomerCreate
from gestionale.domain.order import Order, OrderCreate, OrderStatus
from gestionale.repositories.customer_repository import CustomerRepository
from gestionale.repositories.order_repository import OrderRepository
from gestionale.repositories.product_repository import ProductRepository
from gestionale.services.pricing_service import price_cart

logger = logging.getLogger(__name__)


class OrderService:
    """
    Service for placing orders and changing their status

    Handles:
    - Input validation
    - Customer resolution (idempotent by email)
    - Cart pricing against live catalog data
    - Atomic storage of order + line items
    """

    def __init__(
        self,
        connection_factory: Optional[Callable] = None,
        customers: Optional[CustomerRepository] = None,
        products: Optional[ProductRepository] = None,
        orders: Optional[OrderRepository] = None,
    ):
        self.connection_factory = connection_factory or get_db_connection_dict
        self.customers = customers or CustomerRepository(self.connection_factory)
        self.products = products or ProductRepository(self.connection_factory)
        self.orders = orders or OrderRepository(self.connection_factory)

    @staticmethod
    def validate(payload: OrderCreate) -> None:
        """
        Reject incomplete requests before touching the database

        Raises:
            ValidationError: required fields missing or empty cart
        """
        missing = payload.missing_fields()
        if missing:
            raise ValidationError(f"Tutti i campi sono obbligatori (mancanti: {', '.join(missing)})")

        if not payload.prodotti:
            raise ValidationError("Devi selezionare almeno un prodotto")

    def resolve_customer(self, payload: OrderCreate, conn) -> int:
        """
        Find the customer for an order, creating it if needed

        Args:
            payload: Validated order request
            conn: Connection holding the order transaction

        Returns:
            customer_id

        Raises:
            CustomerNotFound: explicit cliente_id does not exist
        """
        if payload.cliente_id is not None:
            customer = self.customers.find_by_id(payload.cliente_id, conn=conn)
            if customer is None:
                raise CustomerNotFound(payload.cliente_id)
            return customer.id

        existing = self.customers.find_by_email(payload.email, conn=conn)
        if existing:
            logger.debug(f"Reusing customer {existing.id} for {payload.email}")
            return existing.id

        customer = self.customers.create(CustomerCreate(
            email=payload.email,
            nome=payload.nome,
            cognome=payload.cognome,
            cellulare=payload.cellulare,
            indirizzo=payload.luogo_consegna,
        ), conn=conn)
        logger.info(f"Created customer {customer.id} for {payload.email}")
        return customer.id

    def create_order(self, payload: OrderCreate) -> Order:
        """
        Place an order atomically

        Args:
            payload: Order request

        Returns:
            The committed order with customer and priced line items

        Raises:
            ValidationError, CustomerNotFound, ProductNotFound,
            ProductUnavailable, ConfiguredPriceOutOfBounds: nothing written
            StorageError: database failure, transaction rolled back
        """
        self.validate(payload)

        try:
            conn = self.connection_factory()
        except psycopg2.Error as e:
            logger.error(f"Could not open order transaction: {e}")
            raise StorageError(f"Database non disponibile: {e}") from e

        try:
            customer_id = self.resolve_customer(payload, conn)

            cart = price_cart(
                payload.prodotti,
                lambda product_id: self.products.find_by_id(product_id, conn=conn, for_share=True),
            )

            order_id = self.orders.insert_order(payload, customer_id, cart.totale, conn=conn)
            self.orders.insert_items(order_id, cart.lines, conn=conn)

            conn.commit()

        except OrderError as e:
            conn.rollback()
            logger.warning(f"Order for {payload.email} rejected: {e.message}")
            raise

        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Order for {payload.email} rolled back: {e}")
            raise StorageError(f"Errore nella creazione dell'ordine: {e}") from e

        except Exception:
            conn.rollback()
            logger.exception(f"Unexpected error creating order for {payload.email}")
            raise

        finally:
            conn.close()

        logger.info(
            f"Order {order_id} committed: customer {customer_id}, "
            f"{len(cart.lines)} items, total {cart.totale}"
        )

        return self.get_order(order_id)

    def get_order(self, order_id: int) -> Order:
        """
        Raises:
            OrderNotFound: unknown order ID
            StorageError: database failure
        """
        try:
            order = self.orders.find_by_id(order_id)
        except psycopg2.Error as e:
            raise StorageError(f"Errore nel recupero dell'ordine {order_id}: {e}") from e

        if order is None:
            raise OrderNotFound(order_id)
        return order

    def list_orders(self) -> List[Order]:
        return self.orders.find_all()

    def list_customer_orders(self, customer_id: int) -> List[Order]:
        return self.orders.find_by_customer(customer_id)

    def update_status(self, order_id: int, status: Optional[str]) -> Order:
        """
        Set an order's status

        Any status may follow any other; only membership in OrderStatus is
        enforced.

        Raises:
            ValidationError: status not an OrderStatus value (nothing written)
            OrderNotFound: unknown order ID
        """
        if status not in OrderStatus.values():
            raise ValidationError(f"Stato non valido (ammessi: {', '.join(OrderStatus.values())})")

        order = self.orders.update_status(order_id, OrderStatus(status))
        if order is None:
            raise OrderNotFound(order_id)

        logger.info(f"Order {order_id} status set to {status}")
        return order

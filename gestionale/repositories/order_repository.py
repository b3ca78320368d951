"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and returns Order domain models
with their customer and line items attached.
"""
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence
from gestionale.domain.order import Order, OrderCreate, OrderCustomer, OrderItem, OrderStatus
from gestionale.core.database import get_db_connection_dict, borrow_connection

ORDER_SELECT = """
    SELECT
        o.id, o.cliente_id,
        o.email, o.nome, o.cognome, o.cellulare,
        o.data_consegna, o.luogo_consegna,
        o.totale, o.stato, o.note_richieste,
        o.created_at, o.updated_at,
        c.id AS cliente_id_db,
        c.email AS cliente_email,
        c.nome AS cliente_nome,
        c.cognome AS cliente_cognome,
        c.cellulare AS cliente_cellulare
    FROM ordini o
    LEFT JOIN clienti c ON o.cliente_id = c.id
"""

CUSTOMER_ALIASES = {
    'cliente_id_db': 'id',
    'cliente_email': 'email',
    'cliente_nome': 'nome',
    'cliente_cognome': 'cognome',
    'cliente_cellulare': 'cellulare',
}


class OrderRepository:
    """
    Repository for Order data access

    All SQL for orders is centralized here. Write methods require the
    caller's connection: the order service owns the transaction.
    """

    def __init__(self, connection_factory: Optional[Callable] = None):
        self.connection_factory = connection_factory or get_db_connection_dict

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _map_row_to_order(row: dict, items: List[OrderItem]) -> Order:
        """Build an Order from a joined row, nesting the customer columns"""
        order_dict = {key: value for key, value in dict(row).items() if key not in CUSTOMER_ALIASES}

        customer = None
        if row.get('cliente_id_db') is not None:
            customer = OrderCustomer(**{field: row.get(alias) for alias, field in CUSTOMER_ALIASES.items()})

        order_dict['cliente'] = customer
        order_dict['prodotti'] = items
        return Order(**order_dict)

    def _fetch_orders(self, cursor, where_clause: str, params: Sequence, order_by: str) -> List[Order]:
        """
        Run the joined order query and attach line items

        Items for all matched orders are fetched in ONE query (no N+1).
        """
        cursor.execute(f"""
            {ORDER_SELECT}
            WHERE {where_clause}
            ORDER BY {order_by}
        """, tuple(params))

        order_rows = cursor.fetchall()
        if not order_rows:
            return []

        order_ids = [row['id'] for row in order_rows]

        cursor.execute("""
            SELECT
                op.id, op.ordine_id, op.prodotto_id,
                p.nome,
                op.quantita, op.prezzo_unitario, op.note_configurazione
            FROM ordini_prodotti op
            LEFT JOIN prodotti p ON op.prodotto_id = p.id
            WHERE op.ordine_id = ANY(%s)
            ORDER BY op.ordine_id, op.id
        """, (order_ids,))

        items_by_order: Dict[int, List[OrderItem]] = {}
        for item in cursor.fetchall():
            items_by_order.setdefault(item['ordine_id'], []).append(OrderItem(**dict(item)))

        return [
            self._map_row_to_order(row, items_by_order.get(row['id'], []))
            for row in order_rows
        ]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, order_id: int, conn=None) -> Optional[Order]:
        """
        Find order by ID with customer and items

        Args:
            order_id: Internal order ID
            conn: Open connection (optional)

        Returns:
            Order with all related data or None if not found
        """
        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                orders = self._fetch_orders(cursor, "o.id = %s", [order_id], "o.id")
                return orders[0] if orders else None
            finally:
                cursor.close()

    def find_all(self, conn=None) -> List[Order]:
        """All orders, newest first"""
        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                return self._fetch_orders(cursor, "1=1", [], "o.created_at DESC, o.id DESC")
            finally:
                cursor.close()

    def find_by_customer(self, customer_id: int, conn=None) -> List[Order]:
        """
        All orders of one customer, newest first

        Args:
            customer_id: Customer ID

        Returns:
            List of orders (empty if the customer has none or does not exist)
        """
        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                return self._fetch_orders(
                    cursor, "o.cliente_id = %s", [customer_id], "o.created_at DESC, o.id DESC"
                )
            finally:
                cursor.close()

    def find_by_delivery_range(self, start: date, end: date, conn=None) -> List[Order]:
        """
        Orders whose delivery date falls in [start, end], both inclusive

        Args:
            start: First delivery date included
            end: Last delivery date included

        Returns:
            Orders ascending by delivery date
        """
        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                return self._fetch_orders(
                    cursor,
                    "o.data_consegna BETWEEN %s AND %s",
                    [start, end],
                    "o.data_consegna ASC, o.id ASC",
                )
            finally:
                cursor.close()

    # ------------------------------------------------------------------
    # Writes (caller's transaction)
    # ------------------------------------------------------------------

    def insert_order(self, order: OrderCreate, customer_id: int, total: Decimal, conn) -> int:
        """
        Insert the order row with status pendente

        Args:
            order: Validated order request (contact snapshot + delivery)
            customer_id: Resolved customer
            total: Computed order total
            conn: Connection holding the order transaction

        Returns:
            New order ID
        """
        cursor = conn.cursor()
        try:
            cursor.execute("""
                INSERT INTO ordini (
                    cliente_id, email, nome, cognome, cellulare,
                    data_consegna, luogo_consegna, totale, stato, note_richieste
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s, %s, %s, %s
                )
                RETURNING id
            """, (
                customer_id,
                order.email,
                order.nome,
                order.cognome,
                order.cellulare,
                order.data_consegna,
                order.luogo_consegna,
                total,
                OrderStatus.PENDING.value,
                order.note_richieste or None,
            ))

            return cursor.fetchone()['id']

        finally:
            cursor.close()

    def insert_items(self, order_id: int, lines, conn) -> int:
        """
        Insert one ordini_prodotti row per priced line

        Args:
            order_id: Parent order
            lines: PricedLine sequence from the pricing engine
            conn: Connection holding the order transaction

        Returns:
            Number of rows inserted
        """
        cursor = conn.cursor()
        try:
            for line in lines:
                cursor.execute("""
                    INSERT INTO ordini_prodotti (
                        ordine_id, prodotto_id, quantita, prezzo_unitario, note_configurazione
                    ) VALUES (
                        %s, %s, %s, %s, %s
                    )
                """, (
                    order_id,
                    line.prodotto_id,
                    line.quantita,
                    line.prezzo_unitario,
                    line.note_configurazione,
                ))

            return len(lines)

        finally:
            cursor.close()

    def update_status(self, order_id: int, status: OrderStatus, conn=None) -> Optional[Order]:
        """
        Write a new status unconditionally

        Args:
            order_id: Order to update
            status: New status
            conn: Open connection (optional, committed here when not given)

        Returns:
            Updated order or None if the ID does not exist
        """
        owns_transaction = conn is None

        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                cursor.execute("""
                    UPDATE ordini
                    SET stato = %s, updated_at = CURRENT_TIMESTAMP
                    WHERE id = %s
                    RETURNING id
                """, (status.value, order_id))

                updated = cursor.fetchone()
                if owns_transaction:
                    conn.commit()

            finally:
                cursor.close()

            if not updated:
                return None

            return self.find_by_id(order_id, conn=conn)

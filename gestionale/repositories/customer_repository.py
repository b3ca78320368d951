"""
Customer Repository - Data Access Layer for Customers

The customer directory used by order placement: lookups by id and email,
and lazy creation.
"""
from typing import Callable, Optional
from gestionale.domain.customer import Customer, CustomerCreate
from gestionale.core.database import get_db_connection_dict, borrow_connection

CUSTOMER_COLUMNS = """
    id, email, nome, cognome, cellulare, indirizzo, note,
    created_at, updated_at
"""


class CustomerRepository:
    """
    Repository for Customer data access

    Every method accepts an optional open connection. When given, the query
    runs inside the caller's transaction and nothing is committed here.
    """

    def __init__(self, connection_factory: Optional[Callable] = None):
        self.connection_factory = connection_factory or get_db_connection_dict

    def find_by_id(self, customer_id: int, conn=None) -> Optional[Customer]:
        """
        Find customer by ID

        Args:
            customer_id: Internal customer ID
            conn: Open connection (optional)

        Returns:
            Customer or None if not found
        """
        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    SELECT {CUSTOMER_COLUMNS}
                    FROM clienti
                    WHERE id = %s
                """, (customer_id,))

                row = cursor.fetchone()
                return Customer(**row) if row else None

            finally:
                cursor.close()

    def find_by_email(self, email: str, conn=None) -> Optional[Customer]:
        """
        Find customer by email

        Args:
            email: Customer email (unique)
            conn: Open connection (optional)

        Returns:
            Customer or None if not found
        """
        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    SELECT {CUSTOMER_COLUMNS}
                    FROM clienti
                    WHERE email = %s
                """, (email,))

                row = cursor.fetchone()
                return Customer(**row) if row else None

            finally:
                cursor.close()

    def create(self, customer: CustomerCreate, conn=None) -> Customer:
        """
        Create a customer, or return the one that already owns the email

        The insert ignores a unique-email conflict, so a concurrent request
        that created the same customer first is reused rather than failing
        the caller's transaction.

        Args:
            customer: New customer data
            conn: Open connection (optional, committed here when not given)

        Returns:
            Created (or concurrently created) customer
        """
        owns_transaction = conn is None

        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    INSERT INTO clienti (email, nome, cognome, cellulare, indirizzo, note)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (email) DO NOTHING
                    RETURNING {CUSTOMER_COLUMNS}
                """, (
                    customer.email,
                    customer.nome,
                    customer.cognome,
                    customer.cellulare,
                    customer.indirizzo,
                    customer.note,
                ))

                row = cursor.fetchone()
                if owns_transaction:
                    conn.commit()

            finally:
                cursor.close()

            if row:
                return Customer(**row)

            return self.find_by_email(customer.email, conn=conn)

"""
Product Repository - Data Access Layer for Products

Catalog reads used to price and validate carts.
"""
from typing import Callable, Optional
from gestionale.domain.product import Product
from gestionale.core.database import get_db_connection_dict, borrow_connection


class ProductRepository:
    """
    Repository for Product data access

    Read-only from the order core's point of view.
    """

    def __init__(self, connection_factory: Optional[Callable] = None):
        self.connection_factory = connection_factory or get_db_connection_dict

    def find_by_id(self, product_id: int, conn=None, for_share: bool = False) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Internal product ID
            conn: Open connection (optional)
            for_share: Take a share lock on the row until the caller's
                transaction ends, so its availability cannot change before
                commit. Only meaningful together with conn.

        Returns:
            Product or None if not found
        """
        lock_clause = "FOR SHARE" if for_share else ""

        with borrow_connection(self.connection_factory, conn) as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"""
                    SELECT
                        id, nome, descrizione, prezzo, disponibile, categoria,
                        prezzo_minimo, prezzo_massimo,
                        created_at, updated_at
                    FROM prodotti
                    WHERE id = %s
                    {lock_clause}
                """, (product_id,))

                row = cursor.fetchone()
                if not row:
                    return None

                return Product(**row)

            finally:
                cursor.close()

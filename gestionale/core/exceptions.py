"""
Domain errors for order management

Every error carries the HTTP status it maps to, so the API layer needs a
single handler (see gestionale.main) instead of per-endpoint translation.
"""


class OrderError(Exception):
    """Base class for errors raised by the order core"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderError):
    """Malformed or missing input (missing fields, empty cart, bad status)"""

    status_code = 400


class ProductNotFound(OrderError):
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__(f"Prodotto con ID {product_id} non trovato")
        self.product_id = product_id


class ProductUnavailable(OrderError):
    status_code = 409

    def __init__(self, product_id: int):
        super().__init__(f"Prodotto con ID {product_id} non disponibile")
        self.product_id = product_id


class ConfiguredPriceOutOfBounds(OrderError):
    """Client-computed price of a configured line outside the product bounds"""

    status_code = 422

    def __init__(self, product_id: int, unit_price, minimum=None, maximum=None):
        super().__init__(
            f"Prezzo {unit_price} fuori dai limiti per il prodotto {product_id} "
            f"(min={minimum}, max={maximum})"
        )
        self.product_id = product_id
        self.unit_price = unit_price


class CustomerNotFound(OrderError):
    status_code = 404

    def __init__(self, customer_id: int):
        super().__init__(f"Cliente con ID {customer_id} non trovato")
        self.customer_id = customer_id


class OrderNotFound(OrderError):
    status_code = 404

    def __init__(self, order_id: int):
        super().__init__("Ordine non trovato")
        self.order_id = order_id


class StorageError(OrderError):
    """Transaction or commit failure; the unit of work was rolled back"""

    status_code = 500

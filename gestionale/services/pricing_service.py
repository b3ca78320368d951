"""
Pricing Service
Prices a submitted cart against live catalog data

The engine is a pure function of the cart and a product lookup callable: it
never writes, and the caller decides on which connection (and under which
lock) the catalog is read.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Callable, List, Optional, Sequence

from gestionale.core.exceptions import (
    ConfiguredPriceOutOfBounds,
    ProductNotFound,
    ProductUnavailable,
    ValidationError,
)
from gestionale.domain.order import CartItem
from gestionale.domain.product import Product

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_currency(amount: Decimal) -> Decimal:
    """Round to cents, half up (standard currency rounding)"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def coerce_quantity(value: Any) -> int:
    """
    Coerce a submitted quantity to a positive integer

    Missing, non-numeric, zero or negative quantities become 1. Numeric
    strings and floats are truncated ("2.7" -> 2).
    """
    if value is None or isinstance(value, bool):
        return 1

    try:
        if isinstance(value, str):
            quantity = int(Decimal(value.strip()))
        else:
            quantity = int(value)
    except (ValueError, TypeError, ArithmeticError, InvalidOperation):
        return 1

    return quantity if quantity >= 1 else 1


@dataclass
class PricedLine:
    """A cart entry with its resolved price"""
    prodotto_id: int
    quantita: int
    prezzo_unitario: Decimal
    totale_riga: Decimal
    note_configurazione: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.note_configurazione is not None


@dataclass
class PricedCart:
    """Priced lines plus the order total"""
    lines: List[PricedLine] = field(default_factory=list)
    totale: Decimal = Decimal("0.00")

    @property
    def total_quantity(self) -> int:
        return sum(line.quantita for line in self.lines)


def price_line(item: CartItem, product: Optional[Product]) -> PricedLine:
    """
    Price one cart entry

    Configured entries (with note_configurazione) carry a client-computed
    line total: the unit price is that total divided by the quantity,
    rounded to cents, and checked against the product's stored bounds.
    Plain entries use the catalog price.

    The stored unit price is authoritative: the line total is always
    unit price x quantity, so persisted line items add up to the order
    total exactly.

    Raises:
        ProductNotFound: product does not exist
        ProductUnavailable: product exists but is not orderable
        ValidationError: configured entry without a usable prezzo_totale
        ConfiguredPriceOutOfBounds: configured unit price outside bounds
    """
    if product is None:
        raise ProductNotFound(item.prodotto_id)
    if not product.disponibile:
        raise ProductUnavailable(item.prodotto_id)

    quantity = coerce_quantity(item.quantita)

    if item.is_configured:
        if item.prezzo_totale is None or item.prezzo_totale < 0:
            raise ValidationError(
                f"prezzo_totale mancante o non valido per il prodotto configurato {item.prodotto_id}"
            )

        unit_price = to_currency(item.prezzo_totale / quantity)

        if product.has_price_bounds and not product.accepts_unit_price(unit_price):
            raise ConfiguredPriceOutOfBounds(
                product.id, unit_price, product.prezzo_minimo, product.prezzo_massimo
            )

        if unit_price * quantity != item.prezzo_totale:
            logger.debug(
                f"Configured line {item.prodotto_id}: submitted {item.prezzo_totale}, "
                f"stored {unit_price} x {quantity}"
            )
    else:
        unit_price = to_currency(product.prezzo)

    return PricedLine(
        prodotto_id=item.prodotto_id,
        quantita=quantity,
        prezzo_unitario=unit_price,
        totale_riga=unit_price * quantity,
        note_configurazione=item.note_configurazione,
    )


def price_cart(items: Sequence[CartItem], get_product: Callable[[int], Optional[Product]]) -> PricedCart:
    """
    Price a whole cart

    Args:
        items: Cart entries in submission order
        get_product: Catalog lookup, product ID -> Product or None

    Returns:
        PricedCart whose total is the sum of the line totals (unit price x
        quantity of every line)
    """
    lines = [price_line(item, get_product(item.prodotto_id)) for item in items]
    total = to_currency(sum((line.totale_riga for line in lines), Decimal("0")))

    logger.debug(f"Priced cart: {len(lines)} lines, total {total}")

    return PricedCart(lines=lines, totale=total)

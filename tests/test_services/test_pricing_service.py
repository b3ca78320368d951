"""
Unit tests for the pricing engine

No database: the catalog is a plain dict lookup.
"""
import pytest
from decimal import Decimal

from gestionale.core.exceptions import (
    ConfiguredPriceOutOfBounds,
    ProductNotFound,
    ProductUnavailable,
    ValidationError,
)
from gestionale.domain.order import CartItem
from gestionale.domain.product import Product
from gestionale.services.pricing_service import coerce_quantity, price_cart, to_currency


CATALOG = {
    1: Product(id=1, nome='Torta classica', prezzo=Decimal('10.00')),
    2: Product(id=2, nome='Box regalo personalizzata', prezzo=Decimal('20.00')),
    3: Product(id=3, nome='Panettone artigianale', prezzo=Decimal('25.00'), disponibile=False),
    4: Product(id=4, nome='Biscotti al burro', prezzo=Decimal('3.35')),
    5: Product(id=5, nome='Bomboniera', prezzo=Decimal('8.00'),
               prezzo_minimo=Decimal('5.00'), prezzo_massimo=Decimal('15.00')),
}


def cart(*entries):
    return [CartItem(**entry) for entry in entries]


class TestCoerceQuantity:
    """Quantities always come out as positive integers"""

    @pytest.mark.parametrize("raw, expected", [
        (3, 3),
        ("4", 4),
        (" 2 ", 2),
        ("2.7", 2),
        (2.9, 2),
        (None, 1),
        ("", 1),
        ("abc", 1),
        (0, 1),
        (-3, 1),
        ("-2", 1),
        (True, 1),
    ])
    def test_coerce_quantity(self, raw, expected):
        assert coerce_quantity(raw) == expected


class TestPriceCart:
    """Test price_cart against the in-memory catalog"""

    def test_catalog_price_times_quantity(self):
        """Product 1 at 10.00, quantity 2 -> total 20.00"""
        priced = price_cart(cart({"prodotto_id": 1, "quantita": 2}), CATALOG.get)

        assert priced.totale == Decimal('20.00')
        assert len(priced.lines) == 1
        assert priced.lines[0].prezzo_unitario == Decimal('10.00')
        assert priced.lines[0].quantita == 2
        assert not priced.lines[0].is_configured

    def test_configured_item_uses_submitted_total(self):
        """Gift-wrapped item priced by the client at 35.50"""
        priced = price_cart(cart({
            "prodotto_id": 2,
            "quantita": 1,
            "note_configurazione": "gift-wrap",
            "prezzo_totale": "35.50",
        }), CATALOG.get)

        assert priced.lines[0].prezzo_unitario == Decimal('35.50')
        assert priced.totale == Decimal('35.50')
        assert priced.lines[0].note_configurazione == "gift-wrap"

    def test_configured_unit_price_is_total_over_quantity(self):
        priced = price_cart(cart({
            "prodotto_id": 2,
            "quantita": 4,
            "note_configurazione": '{"colore": "rosso"}',
            "prezzo_totale": 50,
        }), CATALOG.get)

        assert priced.lines[0].prezzo_unitario == Decimal('12.50')
        assert priced.totale == Decimal('50.00')

    def test_configured_line_total_follows_rounded_unit_price(self):
        """10.00 over 3 units: unit 3.33, line total 9.99"""
        priced = price_cart(cart({
            "prodotto_id": 2,
            "quantita": 3,
            "note_configurazione": "nastro",
            "prezzo_totale": "10.00",
        }), CATALOG.get)

        assert priced.lines[0].prezzo_unitario == Decimal('3.33')
        assert priced.lines[0].totale_riga == Decimal('9.99')
        assert priced.totale == Decimal('9.99')

    def test_total_matches_sum_of_lines(self):
        """Total equals sum(unit price x quantity) of the stored lines"""
        priced = price_cart(cart(
            {"prodotto_id": 1, "quantita": 3},
            {"prodotto_id": 4, "quantita": "7"},
            {"prodotto_id": 2, "quantita": 3, "note_configurazione": "x", "prezzo_totale": "19.99"},
        ), CATALOG.get)

        line_sum = sum(line.prezzo_unitario * line.quantita for line in priced.lines)
        assert priced.totale == line_sum
        assert priced.totale == Decimal('73.43')  # 30.00 + 23.45 + 6.66 x 3

    @pytest.mark.parametrize("quantity, submitted_total", [
        (7, "1.00"),
        (300, "1.00"),
        (300, "100.00"),
        (1000, "2499.99"),
        (999, "0.05"),
    ])
    def test_total_matches_lines_for_large_quantities(self, quantity, submitted_total):
        """Rounding the unit price never leaves the total out of step with the lines"""
        priced = price_cart(cart({
            "prodotto_id": 2,
            "quantita": quantity,
            "note_configurazione": "nastro",
            "prezzo_totale": submitted_total,
        }), CATALOG.get)

        line = priced.lines[0]
        assert line.prezzo_unitario == line.prezzo_unitario.quantize(Decimal('0.01'))
        assert line.totale_riga == line.prezzo_unitario * quantity
        assert priced.totale == line.prezzo_unitario * quantity

    def test_scalar_configuration_marks_item_configured(self):
        """A truthy non-string configuration still makes the item configured"""
        priced = price_cart(cart({
            "prodotto_id": 2, "quantita": 2, "note_configurazione": True, "prezzo_totale": "30.00",
        }), CATALOG.get)

        assert priced.lines[0].note_configurazione == "true"
        assert priced.lines[0].prezzo_unitario == Decimal('15.00')

    @pytest.mark.parametrize("note", [False, 0])
    def test_falsy_scalar_configuration_is_a_plain_item(self, note):
        priced = price_cart(cart({
            "prodotto_id": 1, "quantita": 2, "note_configurazione": note,
        }), CATALOG.get)

        assert priced.lines[0].note_configurazione is None
        assert priced.totale == Decimal('20.00')

    def test_unbounded_product_accepts_any_configured_price(self):
        assert not CATALOG[2].has_price_bounds

        priced = price_cart(cart({
            "prodotto_id": 2, "quantita": 1, "note_configurazione": "deluxe", "prezzo_totale": "999.99",
        }), CATALOG.get)

        assert priced.totale == Decimal('999.99')

    def test_missing_quantity_defaults_to_one(self):
        priced = price_cart(cart({"prodotto_id": 4}), CATALOG.get)

        assert priced.lines[0].quantita == 1
        assert priced.totale == Decimal('3.35')

    def test_empty_configuration_is_a_plain_item(self):
        """Blank note_configurazione does not make the item configured"""
        priced = price_cart(cart({
            "prodotto_id": 1, "quantita": 1, "note_configurazione": "  ", "prezzo_totale": 1
        }), CATALOG.get)

        assert priced.totale == Decimal('10.00')
        assert priced.lines[0].note_configurazione is None

    def test_unknown_product_raises(self):
        with pytest.raises(ProductNotFound) as exc_info:
            price_cart(cart({"prodotto_id": 1}, {"prodotto_id": 999}), CATALOG.get)

        assert exc_info.value.product_id == 999
        assert exc_info.value.status_code == 404

    def test_unavailable_product_raises(self):
        with pytest.raises(ProductUnavailable) as exc_info:
            price_cart(cart({"prodotto_id": 3, "quantita": 1}), CATALOG.get)

        assert exc_info.value.product_id == 3
        assert exc_info.value.status_code == 409

    def test_configured_item_without_total_is_rejected(self):
        with pytest.raises(ValidationError):
            price_cart(cart({"prodotto_id": 2, "note_configurazione": "gift-wrap"}), CATALOG.get)

    def test_configured_item_with_negative_total_is_rejected(self):
        with pytest.raises(ValidationError):
            price_cart(cart({
                "prodotto_id": 2, "note_configurazione": "gift-wrap", "prezzo_totale": "-1"
            }), CATALOG.get)

    def test_configured_price_within_bounds(self):
        priced = price_cart(cart({
            "prodotto_id": 5, "quantita": 2, "note_configurazione": "confetti", "prezzo_totale": "30.00"
        }), CATALOG.get)

        assert priced.lines[0].prezzo_unitario == Decimal('15.00')

    @pytest.mark.parametrize("submitted_total", ["4.99", "30.02"])
    def test_configured_price_outside_bounds(self, submitted_total):
        """Bomboniera accepts 5.00 - 15.00 per unit"""
        quantity = 1 if submitted_total == "4.99" else 2

        with pytest.raises(ConfiguredPriceOutOfBounds) as exc_info:
            price_cart(cart({
                "prodotto_id": 5,
                "quantita": quantity,
                "note_configurazione": "confetti",
                "prezzo_totale": submitted_total,
            }), CATALOG.get)

        assert exc_info.value.status_code == 422

    def test_lookup_called_once_per_entry(self):
        seen = []

        def lookup(product_id):
            seen.append(product_id)
            return CATALOG.get(product_id)

        price_cart(cart({"prodotto_id": 4}, {"prodotto_id": 1}, {"prodotto_id": 4}), lookup)

        assert seen == [4, 1, 4]


def test_to_currency_rounds_half_up():
    assert to_currency(Decimal('2.345')) == Decimal('2.35')
    assert to_currency(Decimal('2.344')) == Decimal('2.34')
    assert to_currency(Decimal('10')) == Decimal('10.00')

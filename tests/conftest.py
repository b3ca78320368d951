"""
Pytest fixtures and configuration for the Gestionale Ordini tests

Provides an in-memory stand-in for the database: repositories that stage
writes on a fake connection and apply them only on commit, so tests can
assert exactly which rows a transaction left behind.
"""
import itertools
from datetime import date, datetime
from decimal import Decimal

import psycopg2
import pytest

from gestionale.domain.customer import Customer
from gestionale.domain.order import Order, OrderCustomer, OrderItem, OrderStatus
from gestionale.domain.product import Product
from gestionale.services.order_service import OrderService

TODAY = date(2025, 12, 15)


# ============================================================================
# In-memory database
# ============================================================================

class FakeDatabase:
    """Committed rows per table plus id sequences"""

    def __init__(self):
        self.tables = {'clienti': {}, 'prodotti': {}, 'ordini': {}, 'ordini_prodotti': {}}
        self._sequences = {name: itertools.count(1) for name in self.tables}
        self.connections = []

    def next_id(self, table: str) -> int:
        # Sequences are not transactional, as in PostgreSQL
        return next(self._sequences[table])

    def connect(self):
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    def count(self, table: str) -> int:
        return len(self.tables[table])

    def add_product(self, **fields) -> dict:
        row = {
            'descrizione': None,
            'categoria': None,
            'disponibile': True,
            'prezzo_minimo': None,
            'prezzo_massimo': None,
            'created_at': datetime(2025, 1, 1),
            'updated_at': None,
            **fields,
        }
        row.setdefault('id', self.next_id('prodotti'))
        self.tables['prodotti'][row['id']] = row
        return row

    def add_customer(self, **fields) -> dict:
        row = {'cellulare': None, 'indirizzo': None, 'note': None,
               'created_at': datetime(2025, 1, 1), 'updated_at': None, **fields}
        row.setdefault('id', self.next_id('clienti'))
        self.tables['clienti'][row['id']] = row
        return row

    def add_order(self, items=(), **fields) -> dict:
        row = {
            'cliente_id': None,
            'email': 'mario.rossi@example.com',
            'nome': 'Mario',
            'cognome': 'Rossi',
            'cellulare': '3331234567',
            'luogo_consegna': 'Via Roma 1, Milano',
            'totale': Decimal('0.00'),
            'stato': OrderStatus.PENDING.value,
            'note_richieste': None,
            'created_at': datetime(2025, 12, 1, 10, 0),
            'updated_at': None,
            **fields,
        }
        row.setdefault('id', self.next_id('ordini'))
        self.tables['ordini'][row['id']] = row
        for item in items:
            item_id = self.next_id('ordini_prodotti')
            self.tables['ordini_prodotti'][item_id] = {
                'id': item_id, 'ordine_id': row['id'], 'note_configurazione': None, **item
            }
        return row


class FakeConnection:
    """Stages writes until commit; rollback discards them"""

    def __init__(self, db: FakeDatabase):
        self.db = db
        self.pending = {name: {} for name in db.tables}
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.locked_products = []

    def rows(self, table: str) -> dict:
        return {**self.db.tables[table], **self.pending[table]}

    def commit(self):
        for table, rows in self.pending.items():
            self.db.tables[table].update(rows)
        self.pending = {name: {} for name in self.db.tables}
        self.commits += 1

    def rollback(self):
        self.pending = {name: {} for name in self.db.tables}
        self.rollbacks += 1

    def close(self):
        self.closed = True


# ============================================================================
# Repositories over the fake database
# ============================================================================

class FakeCustomerRepository:

    def __init__(self, db: FakeDatabase):
        self.db = db

    def _rows(self, conn):
        return conn.rows('clienti') if conn else self.db.tables['clienti']

    def find_by_id(self, customer_id, conn=None):
        row = self._rows(conn).get(customer_id)
        return Customer(**row) if row else None

    def find_by_email(self, email, conn=None):
        for row in self._rows(conn).values():
            if row['email'] == email:
                return Customer(**row)
        return None

    def create(self, customer, conn=None):
        existing = self.find_by_email(customer.email, conn=conn)
        if existing:
            return existing
        row = {'id': self.db.next_id('clienti'), 'created_at': datetime.now(), 'updated_at': None,
               **customer.model_dump()}
        conn.pending['clienti'][row['id']] = row
        return Customer(**row)


class FakeProductRepository:

    def __init__(self, db: FakeDatabase):
        self.db = db

    def find_by_id(self, product_id, conn=None, for_share=False):
        if conn is not None and for_share:
            conn.locked_products.append(product_id)
        row = self.db.tables['prodotti'].get(product_id)
        return Product(**row) if row else None


class FakeOrderRepository:

    def __init__(self, db: FakeDatabase, fail_on_items: bool = False):
        self.db = db
        self.fail_on_items = fail_on_items

    def _build(self, row) -> Order:
        customer_row = self.db.tables['clienti'].get(row['cliente_id'])
        customer = None
        if customer_row:
            customer = OrderCustomer(**{key: customer_row.get(key)
                                        for key in ('id', 'email', 'nome', 'cognome', 'cellulare')})

        items = []
        for item in sorted(self.db.tables['ordini_prodotti'].values(), key=lambda i: i['id']):
            if item['ordine_id'] == row['id']:
                product = self.db.tables['prodotti'].get(item['prodotto_id'], {})
                items.append(OrderItem(**item, nome=product.get('nome')))

        return Order(**row, cliente=customer, prodotti=items)

    def insert_order(self, order, customer_id, total, conn):
        row = {
            'id': self.db.next_id('ordini'),
            'cliente_id': customer_id,
            'email': order.email,
            'nome': order.nome,
            'cognome': order.cognome,
            'cellulare': order.cellulare,
            'data_consegna': order.data_consegna,
            'luogo_consegna': order.luogo_consegna,
            'totale': total,
            'stato': OrderStatus.PENDING.value,
            'note_richieste': order.note_richieste or None,
            'created_at': datetime.now(),
            'updated_at': None,
        }
        conn.pending['ordini'][row['id']] = row
        return row['id']

    def insert_items(self, order_id, lines, conn):
        for line in lines:
            if self.fail_on_items:
                raise psycopg2.OperationalError("server closed the connection unexpectedly")
            item_id = self.db.next_id('ordini_prodotti')
            conn.pending['ordini_prodotti'][item_id] = {
                'id': item_id,
                'ordine_id': order_id,
                'prodotto_id': line.prodotto_id,
                'quantita': line.quantita,
                'prezzo_unitario': line.prezzo_unitario,
                'note_configurazione': line.note_configurazione,
            }
        return len(lines)

    def find_by_id(self, order_id, conn=None):
        row = self.db.tables['ordini'].get(order_id)
        return self._build(row) if row else None

    def find_all(self, conn=None):
        rows = sorted(self.db.tables['ordini'].values(), key=lambda r: (r['created_at'], r['id']), reverse=True)
        return [self._build(row) for row in rows]

    def find_by_customer(self, customer_id, conn=None):
        return [order for order in self.find_all() if order.cliente_id == customer_id]

    def find_by_delivery_range(self, start, end, conn=None):
        rows = [row for row in self.db.tables['ordini'].values() if start <= row['data_consegna'] <= end]
        rows.sort(key=lambda r: (r['data_consegna'], r['id']))
        return [self._build(row) for row in rows]

    def update_status(self, order_id, status, conn=None):
        row = self.db.tables['ordini'].get(order_id)
        if row is None:
            return None
        row['stato'] = status.value
        row['updated_at'] = datetime.now()
        return self._build(row)


# ============================================================================
# Notifiers
# ============================================================================

class RecordingNotifier:
    """Collects what would have been sent"""

    def __init__(self):
        self.confirmations = []
        self.staff_alerts = []
        self.reports = []

    async def send_order_confirmation(self, order):
        self.confirmations.append(order)
        return True

    async def send_staff_alert(self, order):
        self.staff_alerts.append(order)
        return True

    async def send_daily_report(self, orders, today, window_days):
        self.reports.append((list(orders), today, window_days))
        return True


class FailingNotifier(RecordingNotifier):
    """Confirmation transport is down; staff alerts still work"""

    async def send_order_confirmation(self, order):
        raise ConnectionRefusedError("SMTP server unreachable")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def fake_db():
    """
    Fake database seeded with a small catalog

    1 Torta classica 10.00, 2 Box regalo personalizzata 20.00,
    3 Panettone (unavailable), 4 Biscotti 3.35, 5 Bomboniera (bounds 5-15)
    """
    db = FakeDatabase()
    db.add_product(id=1, nome='Torta classica', prezzo=Decimal('10.00'))
    db.add_product(id=2, nome='Box regalo personalizzata', prezzo=Decimal('20.00'))
    db.add_product(id=3, nome='Panettone artigianale', prezzo=Decimal('25.00'), disponibile=False)
    db.add_product(id=4, nome='Biscotti al burro', prezzo=Decimal('3.35'))
    db.add_product(id=5, nome='Bomboniera', prezzo=Decimal('8.00'),
                   prezzo_minimo=Decimal('5.00'), prezzo_massimo=Decimal('15.00'))
    return db


@pytest.fixture
def order_repository(fake_db):
    return FakeOrderRepository(fake_db)


@pytest.fixture
def order_service(fake_db, order_repository):
    """OrderService wired to the fake database"""
    return OrderService(
        connection_factory=fake_db.connect,
        customers=FakeCustomerRepository(fake_db),
        products=FakeProductRepository(fake_db),
        orders=order_repository,
    )


@pytest.fixture
def recording_notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def sample_order_data():
    """
    Provides a valid order request body (JSON shape)
    """
    return {
        "email": "giulia.bianchi@example.com",
        "nome": "Giulia",
        "cognome": "Bianchi",
        "cellulare": "3471234567",
        "data_consegna": "2025-12-20",
        "luogo_consegna": "Via Garibaldi 12, Torino",
        "prodotti": [
            {"prodotto_id": 1, "quantita": 2},
        ],
        "note_richieste": "Senza glutine se possibile",
    }

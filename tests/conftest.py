import pytest
from decimal import Decimal

import config
from pos_app import create_app
from pos_app.database import db_session, get_session, drop_schema
from pos_app.models import Product, Category, Bill
from pos_app.services.setup_service import initialize_database


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application instance for testing (SQLite file database)."""
    db_path = tmp_path_factory.mktemp('db') / 'pos_test.db'
    upload_dir = tmp_path_factory.mktemp('uploads')
    frontend_dir = tmp_path_factory.mktemp('public')
    (frontend_dir / 'index.html').write_text('<html><body>POS</body></html>')

    class TestingConfig(config.TestConfig):
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'
        UPLOAD_FOLDER = str(upload_dir)
        FRONTEND_FOLDER = str(frontend_dir)

    app = create_app(TestingConfig)
    return app


@pytest.fixture(scope='function')
def client(app, session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session on a freshly seeded schema."""
    session = get_session()
    yield session
    session.rollback()
    db_session.remove()

    # Reset schema and seed data for the next test
    drop_schema()
    initialize_database(app, db_session)
    db_session.remove()


@pytest.fixture(scope='function')
def category_id(session):
    """Id of the seeded 'Rockets' category."""
    return session.query(Category.id).filter_by(name='Rockets').scalar()


@pytest.fixture(scope='function')
def products(session, category_id):
    """
    Create the catalog used by the bill tests.

    Returns:
        dict of external product id -> starting stock
    """
    catalog = [
        ('P1', 'Rocket Bomb', Decimal('10.00'), 10),
        ('P2', 'Sky Shot 30', Decimal('50.00'), 5),
        ('P3', 'Flower Pot Big', Decimal('25.00'), 20),
        ('P4', 'Bijili 100', Decimal('15.00'), 8),
    ]
    for product_id, name, price, stock in catalog:
        session.add(Product(
            product_id=product_id,
            name=name,
            price=price,
            category_id=category_id,
            stock=stock
        ))
    session.commit()
    return {product_id: stock for product_id, _, _, stock in catalog}


@pytest.fixture
def stock_of(session):
    """Read a product's current stock straight from the database."""
    def _stock_of(product_id):
        return session.query(Product.stock).filter(Product.product_id == product_id).scalar()
    return _stock_of


@pytest.fixture
def bill_count(session):
    def _bill_count():
        return session.query(Bill).count()
    return _bill_count


def make_payload(items, /, **overrides):
    """Build a checkout payload the way the till sends it."""
    subtotal = sum(Decimal(str(i['price'])) * i['quantity'] for i in items)
    payload = {
        'customer_name': 'Ravi',
        'customer_phone': '9876543210',
        'items': items,
        'subtotal': str(subtotal),
        'discount': '0',
        'gst_amount': '0',
        'total': str(subtotal),
        'payment_mode': 'Cash'
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payload_factory():
    return make_payload
